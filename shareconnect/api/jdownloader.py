"""
Adapter for jDownloader, with a fallback to the legacy FlashGot endpoint.
"""

import logging

from rich.markup import escape

from shareconnect.exceptions import ApiError, TransportError
from shareconnect.models.profile import Profile

from .base import ServiceAdapter

log = logging.getLogger(__name__)


class JDownloaderAdapter(ServiceAdapter):
    """
    Tries the JSON `/flash/add` endpoint first. Any failure there, transport
    or HTTP, triggers exactly one call to the legacy `/flashget` endpoint,
    whose result becomes the outcome.
    """

    service_name = "jDownloader"
    PRIMARY_PATH = "/flash/add"
    LEGACY_PATH = "/flashget"

    async def deliver(self, profile: Profile, url: str) -> int:
        try:
            return await self._deliver_primary(profile, url)
        except (TransportError, ApiError) as e:
            log.warning(
                f"jDownloader {self.PRIMARY_PATH} failed ({escape(str(e))}), "
                f"falling back to {self.LEGACY_PATH}."
            )
        return await self._deliver_legacy(profile, url)

    async def _deliver_primary(self, profile: Profile, url: str) -> int:
        payload = {"urls": [url], "packageName": "", "destinationFolder": ""}
        response = await self.request(
            "POST", profile.endpoint(self.PRIMARY_PATH), profile, json=payload
        )
        return self.check(response)

    async def _deliver_legacy(self, profile: Profile, url: str) -> int:
        response = await self.request(
            "GET", profile.endpoint(self.LEGACY_PATH), profile, params={"url": url}
        )
        return self.check(response)
