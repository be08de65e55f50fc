"""
Result type returned by every dispatch attempt.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shareconnect.exceptions import ApiError, ConfigurationError, TransportError


class ErrorKind(str, Enum):
    """Category of a failed dispatch."""

    NONE = "none"
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    API = "api"


@dataclass(frozen=True)
class DispatchOutcome:
    """Terminal result of one dispatch, shared by the success and failure paths."""

    success: bool
    http_status: Optional[int] = None
    error_kind: ErrorKind = ErrorKind.NONE
    error_detail: Optional[str] = None

    @classmethod
    def ok(cls, http_status: Optional[int] = None) -> "DispatchOutcome":
        return cls(success=True, http_status=http_status)

    @classmethod
    def from_error(cls, error: Exception) -> "DispatchOutcome":
        """Maps an adapter-level exception onto a failed outcome."""
        if isinstance(error, ApiError):
            return cls(
                success=False,
                http_status=error.status,
                error_kind=ErrorKind.API,
                error_detail=str(error),
            )
        if isinstance(error, ConfigurationError):
            return cls(
                success=False,
                error_kind=ErrorKind.CONFIGURATION,
                error_detail=str(error),
            )
        if isinstance(error, TransportError):
            return cls(
                success=False, error_kind=ErrorKind.TRANSPORT, error_detail=str(error)
            )
        raise TypeError(f"Cannot build an outcome from {type(error).__name__}")
