"""
Classifies shared URLs into the broad categories the services understand.
"""

import logging
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

log = logging.getLogger(__name__)


class UrlType(str, Enum):
    """Kind of content a shared URL points at."""

    STREAMING = "streaming"
    TORRENT = "torrent"
    DIRECT_DOWNLOAD = "direct_download"
    UNKNOWN = "unknown"


STREAMING_HOSTS = frozenset(
    {
        "youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be",
        "vimeo.com", "www.vimeo.com",
        "twitch.tv", "www.twitch.tv",
        "reddit.com", "www.reddit.com",
        "twitter.com", "www.twitter.com", "x.com", "www.x.com",
        "instagram.com", "www.instagram.com",
        "facebook.com", "www.facebook.com",
        "soundcloud.com", "www.soundcloud.com",
        "dailymotion.com", "www.dailymotion.com",
        "bandcamp.com", "www.bandcamp.com",
    }
)  # fmt: skip

_WEB_SCHEMES = ("http", "https")

_URL_TYPE_DESCRIPTIONS = {
    UrlType.STREAMING: "streaming video",
    UrlType.TORRENT: "torrent",
    UrlType.DIRECT_DOWNLOAD: "direct download",
    UrlType.UNKNOWN: "unknown link",
}


def classify(url: Optional[str]) -> UrlType:
    """
    Maps a raw, unvalidated URL string onto a `UrlType`.

    Magnet links and `.torrent` files win over everything else; http(s) links
    to a known streaming host are streaming, any other http(s) link is a
    direct download. Never raises.
    """
    if not url or not url.strip():
        return UrlType.UNKNOWN
    url = url.strip()
    lowered = url.lower()

    if lowered.startswith("magnet:"):
        return UrlType.TORRENT
    if lowered.endswith(".torrent"):
        return UrlType.TORRENT

    try:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        host = parts.hostname
    except ValueError:
        log.debug(f"Structured parsing failed for '{url}', using substring match.")
        return _classify_unparsable(lowered)

    if scheme not in _WEB_SCHEMES:
        return UrlType.UNKNOWN
    if host in STREAMING_HOSTS:
        return UrlType.STREAMING
    return UrlType.DIRECT_DOWNLOAD


def _classify_unparsable(lowered: str) -> UrlType:
    """Substring host matching for URLs that `urlsplit` rejects."""
    if not lowered.startswith(("http://", "https://")):
        return UrlType.UNKNOWN
    if any(host in lowered for host in STREAMING_HOSTS):
        return UrlType.STREAMING
    return UrlType.DIRECT_DOWNLOAD


def is_magnet(url: Optional[str]) -> bool:
    return bool(url) and url.strip().lower().startswith("magnet:")


def url_type_description(url_type: UrlType) -> str:
    """User-friendly description of a URL type."""
    return _URL_TYPE_DESCRIPTIONS[url_type]
