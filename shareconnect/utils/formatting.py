"""
Helper functions for formatting data into human-readable strings.
"""

from urllib.parse import urlsplit

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    size = float(bytes_size)
    i = 0
    while size >= 1024 and i < len(_SIZE_UNITS) - 1:
        size /= 1024
        i += 1
    return f"{size:.1f} {_SIZE_UNITS[i]}"


def mask_secret(value: str | None) -> str:
    """Hides a credential for display."""
    return "[hidden]" if value else ""


def site_name_from_url(url: str) -> str | None:
    """Returns the URL host without a leading 'www.', or None if unparsable."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def title_from_url(url: str) -> str:
    """Uses the last path segment as a title, falling back to the host."""
    try:
        parts = urlsplit(url)
        segment = parts.path.rstrip("/").rsplit("/", 1)[-1]
        return segment or parts.hostname or url
    except ValueError:
        return url.rsplit("/", 1)[-1]
