"""
shareconnect: hand shared URLs to self-hosted download and torrent services.
"""

__version__ = "1.0.0"
