"""
Routes a URL to the protocol adapter matching a profile's service type.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional, Tuple, Type

import aiohttp
from rich.markup import escape

from shareconnect.api import (
    JDownloaderAdapter,
    MeTubeAdapter,
    QBittorrentAdapter,
    ServiceAdapter,
    TransmissionAdapter,
    UTorrentAdapter,
    YtDlAdapter,
)
from shareconnect.exceptions import ConfigurationError
from shareconnect.models.config import AppSettings
from shareconnect.models.outcome import DispatchOutcome
from shareconnect.models.profile import Profile, ServiceKind, TorrentClient

log = logging.getLogger(__name__)

AdapterKey = Tuple[ServiceKind, Optional[TorrentClient]]

ADAPTERS: Dict[AdapterKey, Type[ServiceAdapter]] = {
    (ServiceKind.METUBE, None): MeTubeAdapter,
    (ServiceKind.YTDL, None): YtDlAdapter,
    (ServiceKind.TORRENT, TorrentClient.QBITTORRENT): QBittorrentAdapter,
    (ServiceKind.TORRENT, TorrentClient.TRANSMISSION): TransmissionAdapter,
    (ServiceKind.TORRENT, TorrentClient.UTORRENT): UTorrentAdapter,
    (ServiceKind.JDOWNLOADER, None): JDownloaderAdapter,
}


class DispatchRouter:
    """
    Sends URLs to the service behind a profile.

    Every dispatch is a single attempt and always ends in a `DispatchOutcome`.
    Without an injected session, each dispatch opens and closes its own
    `aiohttp.ClientSession`, so concurrent dispatches share no state.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
        adapters: Optional[Dict[AdapterKey, Type[ServiceAdapter]]] = None,
    ):
        self.settings = settings or AppSettings()
        self._session = session
        self._adapters = adapters if adapters is not None else ADAPTERS

    def resolve(self, profile: Profile) -> Type[ServiceAdapter]:
        """Raises `ConfigurationError` when no adapter handles the profile."""
        adapter_cls = self._adapters.get((profile.service_kind, profile.torrent_client))
        if adapter_cls is None:
            if profile.torrent_client is not None:
                raise ConfigurationError(
                    f"Unsupported torrent client: {profile.torrent_client.value}"
                )
            raise ConfigurationError(
                f"Unsupported service type: {profile.service_kind.value}"
            )
        return adapter_cls

    async def dispatch(self, profile: Profile, url: str) -> DispatchOutcome:
        """Sends `url` to the service configured by `profile`."""
        log.info(f"Dispatching to [bold]{escape(profile.name)}[/] ({profile.service_label})")

        try:
            adapter_cls = self.resolve(profile)
        except ConfigurationError as e:
            log.error(escape(str(e)))
            return DispatchOutcome.from_error(e)

        if self._session is not None:
            return await adapter_cls(self._session).send(profile, url)
        async with self._new_session() as session:
            return await adapter_cls(session).send(profile, url)

    def submit(
        self,
        profile: Profile,
        url: str,
        on_complete: Optional[Callable[[DispatchOutcome], None]] = None,
    ) -> "asyncio.Task[DispatchOutcome]":
        """
        Schedules a dispatch on the running loop and returns the task.
        `on_complete` receives the outcome once the task finishes.
        """
        task = asyncio.ensure_future(self.dispatch(profile, url))
        if on_complete is not None:

            def _done(t: "asyncio.Task[DispatchOutcome]") -> None:
                if t.cancelled():
                    log.debug(f"Dispatch of '{url}' was cancelled.")
                    return
                on_complete(t.result())

            task.add_done_callback(_done)
        return task

    def _new_session(self) -> aiohttp.ClientSession:
        # unsafe=True keeps cookies set by IP-addressed hosts (uTorrent's GUID cookie).
        kwargs = {"cookie_jar": aiohttp.CookieJar(unsafe=True)}
        if self.settings.api_timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.settings.api_timeout)
        return aiohttp.ClientSession(**kwargs)
