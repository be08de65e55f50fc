"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the
core data structures used throughout the application, such as service
profiles, dispatch outcomes, magnet descriptors and settings.
"""

from .config import AppSettings
from .magnet import ContentCategory, MagnetDescriptor
from .outcome import DispatchOutcome, ErrorKind
from .profile import Profile, ServiceKind, TorrentClient

__all__ = [
    "AppSettings",
    "ContentCategory",
    "DispatchOutcome",
    "ErrorKind",
    "MagnetDescriptor",
    "Profile",
    "ServiceKind",
    "TorrentClient",
]
