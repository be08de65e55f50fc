"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class ShareConnectError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(ShareConnectError):
    """
    Raised for issues related to configuration loading or validation, and for
    profiles whose service/client combination has no adapter.
    """


class TransportError(ShareConnectError):
    """Raised when a request fails at the connection or I/O level."""


class ApiError(ShareConnectError):
    """Raised when a service answers with a non-2xx status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"API Error: {status} - {body}")


class ParseError(ShareConnectError):
    """Raised internally when a magnet URI cannot be decoded."""


class ProfileNotFoundError(ShareConnectError):
    """Raised when a profile lookup by id or name finds nothing."""


class NoCompatibleProfileError(ShareConnectError):
    """Raised when no configured profile can accept the shared URL."""
