"""
Shared plumbing for the per-service protocol adapters.
"""

import abc
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import aiohttp
from rich.markup import escape

from shareconnect.exceptions import (
    ApiError,
    ConfigurationError,
    ShareConnectError,
    TransportError,
)
from shareconnect.models.outcome import DispatchOutcome
from shareconnect.models.profile import Profile

log = logging.getLogger(__name__)


@dataclass
class ServiceResponse:
    """The parts of an HTTP response the adapters care about, read eagerly."""

    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def basic_auth_headers(profile: Profile) -> Dict[str, str]:
    """
    Returns an Authorization header when the profile has both credentials,
    otherwise an empty dict.
    """
    if not profile.has_credentials:
        return {}
    try:
        auth = aiohttp.BasicAuth(profile.username, profile.password, encoding="utf-8")
    except ValueError as e:
        raise ConfigurationError(f"Invalid credentials for '{profile.name}': {e}") from e
    return {"Authorization": auth.encode()}


class ServiceAdapter(abc.ABC):
    """
    Base class for one backend protocol.

    Subclasses implement `deliver`, which performs the network exchange and
    raises `TransportError`/`ApiError` on failure. `send` wraps it so that no
    exception crosses the adapter boundary.
    """

    service_name = "service"

    def __init__(self, session: aiohttp.ClientSession):
        self._session = session

    async def send(self, profile: Profile, url: str) -> DispatchOutcome:
        """Delivers `url` to the service behind `profile`."""
        log.debug(f"Sending '{escape(url)}' to {self.service_name} at {profile.root_url}")
        try:
            status = await self.deliver(profile, url)
        except ShareConnectError as e:
            log.error(f"Failed to send URL to {self.service_name}: {escape(str(e))}")
            return DispatchOutcome.from_error(e)
        log.info(f"{self.service_name} accepted the URL (HTTP {status}).")
        return DispatchOutcome.ok(status)

    @abc.abstractmethod
    async def deliver(self, profile: Profile, url: str) -> int:
        """Performs the exchange and returns the final HTTP status."""

    async def request(
        self,
        method: str,
        endpoint: str,
        profile: Profile,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> ServiceResponse:
        """
        Issues one HTTP request with the profile's auth header. Connection
        and I/O failures are raised as `TransportError`; the status is left
        for the caller to judge.
        """
        request_headers = basic_auth_headers(profile)
        if headers:
            request_headers.update(headers)

        try:
            async with self._session.request(
                method, endpoint, headers=request_headers, **kwargs
            ) as r:
                body = await r.text(errors="replace")
                log.debug(f"{method} {endpoint} -> {r.status}")
                return ServiceResponse(r.status, body, _plain_headers(r.headers))
        except aiohttp.ClientError as e:
            raise TransportError(str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request to {endpoint} timed out.") from e

    @staticmethod
    def check(response: ServiceResponse) -> int:
        """Raises `ApiError` for any non-2xx response, returns the status otherwise."""
        if not response.ok:
            raise ApiError(response.status, response.body or "Unknown error")
        return response.status


def _plain_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k.lower(): v for k, v in headers.items()}
