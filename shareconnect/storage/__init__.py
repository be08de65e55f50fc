"""
Storage Layer.

This package handles all data persistence: the application settings file and
the service profiles file.
"""

from .config_manager import ConfigManager
from .profile_store import ProfileStore

__all__ = ["ConfigManager", "ProfileStore"]
