"""
Decides which configured profiles may receive a given URL.
"""

import logging
from typing import Iterable, List, Optional

from shareconnect.models.profile import Profile, ServiceKind

from .classifier import UrlType, classify

log = logging.getLogger(__name__)

COMPATIBILITY_TABLE = {
    ServiceKind.METUBE: frozenset({UrlType.STREAMING}),
    ServiceKind.YTDL: frozenset({UrlType.STREAMING, UrlType.DIRECT_DOWNLOAD}),
    ServiceKind.TORRENT: frozenset({UrlType.TORRENT}),
    ServiceKind.JDOWNLOADER: frozenset({UrlType.STREAMING, UrlType.DIRECT_DOWNLOAD}),
}

_SUPPORT_DESCRIPTIONS = {
    ServiceKind.METUBE: "Streaming videos (YouTube, Vimeo, etc.)",
    ServiceKind.YTDL: "Streaming videos and direct downloads",
    ServiceKind.TORRENT: "Torrent files and magnet links",
    ServiceKind.JDOWNLOADER: "Direct downloads and streaming videos",
}


def is_compatible(service_kind: ServiceKind, url_type: UrlType) -> bool:
    """
    Checks the static compatibility table. Unknown URLs are accepted by every
    service so that callers can fall back to the full profile list.
    """
    if url_type is UrlType.UNKNOWN:
        return True
    return url_type in COMPATIBILITY_TABLE.get(service_kind, frozenset())


def filter_compatible(profiles: Iterable[Profile], url: Optional[str]) -> List[Profile]:
    """Returns the profiles that accept `url`, preserving list order."""
    url_type = classify(url)
    return [p for p in profiles if is_compatible(p.service_kind, url_type)]


def select_profile(profiles: Iterable[Profile], url: Optional[str]) -> Optional[Profile]:
    """
    Picks the profile a URL should go to: the default profile when it is
    compatible, else the first compatible profile, else None.
    """
    compatible = filter_compatible(profiles, url)
    if not compatible:
        log.debug(f"No compatible profile for '{url}'.")
        return None
    for profile in compatible:
        if profile.is_default:
            return profile
    return compatible[0]


def profile_support_description(service_kind: ServiceKind) -> str:
    """User-friendly description of what a service accepts."""
    return _SUPPORT_DESCRIPTIONS.get(service_kind, "Unknown content types")
