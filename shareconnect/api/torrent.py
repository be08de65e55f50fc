"""
Adapters for the Web APIs of qBittorrent, Transmission and uTorrent.
"""

import logging
import re

import aiohttp

from shareconnect.models.profile import Profile

from .base import ServiceAdapter

log = logging.getLogger(__name__)


class QBittorrentAdapter(ServiceAdapter):
    """qBittorrent Web API v2: multipart form with a single `urls` field."""

    service_name = "qBittorrent"
    ADD_PATH = "/api/v2/torrents/add"

    async def deliver(self, profile: Profile, url: str) -> int:
        with aiohttp.MultipartWriter("form-data") as form:
            part = form.append(url)
            part.set_content_disposition("form-data", name="urls")

        response = await self.request(
            "POST", profile.endpoint(self.ADD_PATH), profile, data=form
        )
        return self.check(response)


class TransmissionAdapter(ServiceAdapter):
    """
    Transmission RPC `torrent-add`. The `filename` argument takes magnet
    links and .torrent URLs alike.

    Transmission rejects the first call of a session with 409 and hands out a
    session id in `X-Transmission-Session-Id`; the request is repeated once
    with that header.
    """

    service_name = "Transmission"
    RPC_PATH = "/transmission/rpc"
    SESSION_HEADER = "X-Transmission-Session-Id"

    async def deliver(self, profile: Profile, url: str) -> int:
        endpoint = profile.endpoint(self.RPC_PATH)
        payload = {"method": "torrent-add", "arguments": {"filename": url}}

        response = await self.request("POST", endpoint, profile, json=payload)

        session_id = response.headers.get(self.SESSION_HEADER.lower())
        if response.status == 409 and session_id:
            log.debug("Transmission requested a session id, repeating the call.")
            response = await self.request(
                "POST",
                endpoint,
                profile,
                headers={self.SESSION_HEADER: session_id},
                json=payload,
            )

        status = self.check(response)
        log.debug(f"Transmission RPC response: {response.body[:200]}")
        return status


class UTorrentAdapter(ServiceAdapter):
    """
    uTorrent Web UI: fetch the CSRF token from `/gui/token.html`, then call
    `/gui/?action=add-url`. Both calls share the session cookie jar, which
    carries uTorrent's GUID cookie.
    """

    service_name = "uTorrent"
    TOKEN_PATH = "/gui/token.html"
    GUI_PATH = "/gui/"

    _TOKEN_REGEX = re.compile(
        r"<div[^>]*\bid=['\"]token['\"][^>]*>(?P<token>[^<]*)</div>", re.IGNORECASE
    )

    async def deliver(self, profile: Profile, url: str) -> int:
        token_response = await self.request(
            "GET", profile.endpoint(self.TOKEN_PATH), profile
        )
        self.check(token_response)
        token = self.extract_token(token_response.body)

        params = {"action": "add-url", "s": url, "token": token}
        response = await self.request(
            "GET", profile.endpoint(self.GUI_PATH), profile, params=params
        )
        return self.check(response)

    @classmethod
    def extract_token(cls, html: str) -> str:
        """Scrapes the token from token.html. A missing token is an empty string."""
        match = cls._TOKEN_REGEX.search(html or "")
        if not match:
            log.warning("No token found in uTorrent token.html, continuing without.")
            return ""
        return match.group("token").strip()
