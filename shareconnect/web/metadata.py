"""
Fetches preview metadata (title, description, thumbnail, site) for a shared URL.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp
from bs4 import BeautifulSoup
from rich.markup import escape

from shareconnect.core.classifier import is_magnet
from shareconnect.core.magnet import parse_magnet
from shareconnect.utils.formatting import site_name_from_url, title_from_url

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
TORRENT_SITE_NAME = "BitTorrent"


@dataclass
class UrlMetadata:
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    site_name: Optional[str] = None


class MetadataFetcher:
    """
    Builds a `UrlMetadata` for any shared URL.

    Magnet links and `.torrent` files are described locally without any
    network access. Web pages are fetched and their Open Graph, Twitter Card
    and plain HTML tags are read in that order of preference. `fetch` never
    raises; on any failure the title and site name are derived from the URL.
    """

    def __init__(
        self, timeout: float = 10.0, session: Optional[aiohttp.ClientSession] = None
    ):
        self.timeout = aiohttp.ClientTimeout(sock_connect=timeout, sock_read=timeout)
        self._session = session

    async def fetch(self, url: str) -> UrlMetadata:
        if is_magnet(url):
            return self._magnet_metadata(url)
        if url.strip().lower().endswith(".torrent"):
            return self._torrent_file_metadata(url)

        try:
            html = await self._get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log.warning(f"Error fetching metadata for {escape(url)}: {escape(str(e))}")
            return UrlMetadata(
                title=title_from_url(url), site_name=site_name_from_url(url)
            )

        metadata = self.parse_html(html)
        if not metadata.title:
            metadata.title = title_from_url(url)
        if not metadata.site_name:
            metadata.site_name = site_name_from_url(url)
        return metadata

    async def _get(self, url: str) -> str:
        headers = {"User-Agent": USER_AGENT}
        if self._session is not None:
            return await self._read(self._session, url, headers)
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            return await self._read(session, url, headers)

    async def _read(
        self, session: aiohttp.ClientSession, url: str, headers: dict
    ) -> str:
        async with session.get(
            url, headers=headers, allow_redirects=True, timeout=self.timeout
        ) as response:
            response.raise_for_status()
            return await response.text(errors="replace")

    @staticmethod
    def parse_html(html: str) -> UrlMetadata:
        """Reads og:*, then twitter:*, then <meta name=description>/<title>."""
        soup = BeautifulSoup(html, "html.parser")

        def meta(attr: str, name: str) -> Optional[str]:
            tag = soup.find("meta", attrs={attr: name})
            if tag is None:
                return None
            content = (tag.get("content") or "").strip()
            return content or None

        page_title = soup.title.string.strip() if soup.title and soup.title.string else None

        return UrlMetadata(
            title=meta("property", "og:title")
            or meta("name", "twitter:title")
            or page_title,
            description=meta("property", "og:description")
            or meta("name", "twitter:description")
            or meta("name", "description"),
            thumbnail_url=meta("property", "og:image") or meta("name", "twitter:image"),
            site_name=meta("property", "og:site_name"),
        )

    @staticmethod
    def _magnet_metadata(url: str) -> UrlMetadata:
        descriptor = parse_magnet(url)
        return UrlMetadata(
            title=descriptor.title,
            description=descriptor.description,
            site_name=descriptor.category.label,
        )

    @staticmethod
    def _torrent_file_metadata(url: str) -> UrlMetadata:
        filename = title_from_url(url.strip())
        if "." in filename:
            filename = filename.rsplit(".", 1)[0]
        return UrlMetadata(
            title=filename, description="Torrent file", site_name=TORRENT_SITE_NAME
        )
