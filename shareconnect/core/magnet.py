"""
Decodes magnet URIs into display metadata and guesses the content category.
"""

import logging
import re
from typing import Optional
from urllib.parse import unquote_plus

from shareconnect.exceptions import ParseError
from shareconnect.models.magnet import (
    DEFAULT_MAGNET_TITLE,
    ContentCategory,
    MagnetDescriptor,
)
from shareconnect.utils.formatting import format_bytes

log = logging.getLogger(__name__)

MAGNET_LABEL = "BitTorrent magnet link"
DESCRIPTION_SEPARATOR = " • "
_BTIH_PREFIX = "urn:btih:"
_TRACKER_PREFIXES = ("http", "udp")

_EPISODE_PATTERN = re.compile(r"s\d+e\d+")
_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")

# (category, extensions matched as whole tokens, keywords matched as substrings,
# short keywords matched as whole tokens). Evaluated in order.
_CATEGORY_RULES = (
    (ContentCategory.TV_SHOW, (), ("season", "episode"), ()),
    (
        ContentCategory.MOVIE,
        ("mkv", "mp4", "avi", "mov", "wmv", "flv", "webm", "m4v", "mpg", "mpeg", "ts"),
        ("movie", "film"),
        (),
    ),
    (
        ContentCategory.MUSIC,
        ("mp3", "flac", "wav", "aac", "ogg", "m4a", "wma", "alac", "ape", "opus"),
        ("album", "music"),
        (),
    ),
    (
        ContentCategory.SOFTWARE_GAME,
        ("exe", "msi", "dmg", "pkg", "deb", "rpm", "apk", "iso"),
        ("game", "setup", "installer"),
        ("pc",),
    ),
    (
        ContentCategory.BOOK_DOCUMENT,
        ("pdf", "epub", "mobi", "azw3", "djvu", "doc", "docx", "cbr", "cbz"),
        ("book",),
        (),
    ),
)


def parse_magnet(uri: str) -> MagnetDescriptor:
    """
    Parses a magnet URI into a `MagnetDescriptor`.

    Never raises: a URI without an `xt` parameter yields a default descriptor
    titled 'Magnet Link' in the generic category.
    """
    try:
        return _parse(uri)
    except ParseError as e:
        log.debug(f"Magnet parse failed, using default descriptor: {e}")
        return MagnetDescriptor(
            display_name=DEFAULT_MAGNET_TITLE,
            category=ContentCategory.GENERIC,
            description=MAGNET_LABEL,
        )


def _parse(uri: str) -> MagnetDescriptor:
    params = parse_params(uri)

    exact_topics = params.get("xt")
    if not exact_topics:
        raise ParseError(f"No 'xt' parameter in magnet URI: {uri!r}")

    info_hash = _extract_info_hash(exact_topics)
    display_name = _first(params.get("dn"))
    exact_length = _parse_length(_first(params.get("xl")))
    trackers = [
        value
        for values in params.values()
        for value in values
        if value.lower().startswith(_TRACKER_PREFIXES)
    ]

    descriptor = MagnetDescriptor(
        info_hash=info_hash,
        display_name=display_name,
        exact_length=exact_length,
        trackers=trackers,
        category=infer_category(display_name),
        params=params,
    )
    descriptor.description = build_description(descriptor)
    return descriptor


def parse_params(uri: str) -> dict[str, list[str]]:
    """
    Splits the query part of a magnet URI into a multi-map of decoded values.

    Repeated keys (several `tr` trackers, for instance) keep every value in
    order of appearance.
    """
    if not uri or not uri.lower().startswith("magnet:"):
        raise ParseError(f"Not a magnet URI: {uri!r}")

    query = uri[len("magnet:") :]
    if query.startswith("?"):
        query = query[1:]

    params: dict[str, list[str]] = {}
    for pair in query.split("&"):
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        if not key:
            continue
        params.setdefault(key.lower(), []).append(unquote_plus(value))
    return params


def _extract_info_hash(exact_topics: list[str]) -> Optional[str]:
    topic = exact_topics[0]
    if topic.lower().startswith(_BTIH_PREFIX):
        topic = topic[len(_BTIH_PREFIX) :]
    return topic or None


def _parse_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        log.debug(f"Ignoring non-numeric magnet length: {value!r}")
        return None


def _first(values: Optional[list[str]]) -> Optional[str]:
    if not values:
        return None
    return values[0] or None


def build_description(descriptor: MagnetDescriptor) -> str:
    """Joins the label, size, short hash and tracker count with bullets."""
    parts = [MAGNET_LABEL]
    if descriptor.exact_length is not None:
        parts.append(f"Size: {format_bytes(descriptor.exact_length)}")
    if descriptor.info_hash:
        parts.append(f"Hash: {descriptor.info_hash[:8]}...")
    if descriptor.trackers:
        parts.append(f"{len(descriptor.trackers)} tracker(s)")
    return DESCRIPTION_SEPARATOR.join(parts)


def infer_category(display_name: Optional[str]) -> ContentCategory:
    """Guesses the content category from keywords and file extensions in a name."""
    if not display_name:
        return ContentCategory.GENERIC

    name = display_name.lower()
    tokens = set(_TOKEN_SPLIT.split(name))

    if _EPISODE_PATTERN.search(name):
        return ContentCategory.TV_SHOW

    for category, extensions, keywords, short_keywords in _CATEGORY_RULES:
        if any(ext in tokens for ext in extensions):
            return category
        if any(keyword in name for keyword in keywords):
            return category
        if any(keyword in tokens for keyword in short_keywords):
            return category
    return ContentCategory.GENERIC
