"""
Web-facing helpers: URL preview metadata and Web UI automation.

`playwright_host` is not imported here so that the core works without the
optional browser dependency.
"""

from .metadata import MetadataFetcher, UrlMetadata
from .session import ScriptHost, SessionPhase, WebSessionAutomator

__all__ = [
    "MetadataFetcher",
    "ScriptHost",
    "SessionPhase",
    "UrlMetadata",
    "WebSessionAutomator",
]
