"""
Pydantic model for application settings.
Provides validation for all settings read from the INI file.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AppSettings(BaseModel):
    """A validated settings model for the application."""

    # Network
    api_timeout: Optional[float] = None  # None keeps aiohttp's default
    metadata_timeout: float = 10.0

    # Interactive web sessions
    injection_retry_delay: float = 1.0
    max_injection_attempts: Optional[int] = 30
    browser_headless: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True

    @field_validator("api_timeout", "metadata_timeout")
    @classmethod
    def validate_timeouts(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Timeouts must be positive numbers of seconds.")
        return v

    @field_validator("injection_retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Injection retry delay cannot be negative.")
        return v

    @field_validator("max_injection_attempts")
    @classmethod
    def validate_attempts(cls, v: Optional[int]) -> Optional[int]:
        """A value of 0 or below means unbounded and is stored as None."""
        if v is not None and v <= 0:
            return None
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
