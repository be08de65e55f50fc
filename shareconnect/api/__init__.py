"""
Service API Layer.

This package handles all communication with the backend download services.
One adapter class per wire protocol; the `DispatchRouter` in
`shareconnect.core` picks the right one for a profile.
"""

from .base import ServiceAdapter, ServiceResponse, basic_auth_headers
from .jdownloader import JDownloaderAdapter
from .metube import MeTubeAdapter, YtDlAdapter
from .torrent import QBittorrentAdapter, TransmissionAdapter, UTorrentAdapter

__all__ = [
    "JDownloaderAdapter",
    "MeTubeAdapter",
    "QBittorrentAdapter",
    "ServiceAdapter",
    "ServiceResponse",
    "TransmissionAdapter",
    "UTorrentAdapter",
    "YtDlAdapter",
    "basic_auth_headers",
]
