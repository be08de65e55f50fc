"""
Pydantic model for a configured download service profile.
"""

import uuid
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator


class ServiceKind(str, Enum):
    """The backend service a profile talks to."""

    METUBE = "metube"
    YTDL = "ytdl"
    TORRENT = "torrent"
    JDOWNLOADER = "jdownloader"


class TorrentClient(str, Enum):
    """The torrent client behind a `ServiceKind.TORRENT` profile."""

    QBITTORRENT = "qbittorrent"
    TRANSMISSION = "transmission"
    UTORRENT = "utorrent"


SERVICE_NAMES = {
    ServiceKind.METUBE: "MeTube",
    ServiceKind.YTDL: "YT-DLP",
    ServiceKind.TORRENT: "Torrent",
    ServiceKind.JDOWNLOADER: "jDownloader",
}

TORRENT_CLIENT_NAMES = {
    TorrentClient.QBITTORRENT: "qBittorrent",
    TorrentClient.TRANSMISSION: "Transmission",
    TorrentClient.UTORRENT: "uTorrent",
}


class Profile(BaseModel):
    """A validated service profile. Treated as a value snapshot by the dispatch core."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    base_url: str
    port: int = Field(ge=1, le=65535)
    service_kind: ServiceKind = ServiceKind.METUBE
    torrent_client: Optional[TorrentClient] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    is_default: bool = False

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Profile name cannot be empty.")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """
        Requires an http(s) scheme and a host, strips the trailing slash.
        The port lives in its own field, so a port in the URL is rejected.
        """
        v = v.strip()
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(
                f"Base URL must start with http:// or https://, but got: {v}"
            )
        parts = urlsplit(v)
        try:
            port = parts.port
        except ValueError:
            raise ValueError(f"Base URL has an invalid port: {v}") from None
        if not parts.hostname:
            raise ValueError(f"Base URL has no host: {v}")
        if port is not None or parts.netloc.endswith(":"):
            raise ValueError(
                f"Base URL must not include a port, set it separately: {v}"
            )
        return v.rstrip("/")

    @field_validator("username", "password", mode="before")
    @classmethod
    def empty_credential_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @model_validator(mode="after")
    def validate_torrent_client(self) -> "Profile":
        """A torrent client is required for torrent profiles and forbidden otherwise."""
        if self.service_kind is ServiceKind.TORRENT and self.torrent_client is None:
            raise ValueError("Torrent profiles must specify a torrent client.")
        if self.service_kind is not ServiceKind.TORRENT and self.torrent_client:
            raise ValueError(
                f"A torrent client cannot be set on a {self.service_kind.value} profile."
            )
        return self

    @model_validator(mode="after")
    def validate_credentials(self) -> "Profile":
        """Username and password are either both set or both absent."""
        if (self.username is None) != (self.password is None):
            raise ValueError(
                "Credentials are incomplete. Provide both username and password, "
                "or neither."
            )
        return self

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    @property
    def root_url(self) -> str:
        return f"{self.base_url}:{self.port}"

    def endpoint(self, path: str) -> str:
        """Builds `{base_url}:{port}{path}`."""
        return f"{self.root_url}{path}"

    @property
    def service_label(self) -> str:
        """Human-readable service name, e.g. 'Torrent (qBittorrent)'."""
        name = SERVICE_NAMES.get(self.service_kind, "Unknown")
        if self.service_kind is ServiceKind.TORRENT:
            client = TORRENT_CLIENT_NAMES.get(self.torrent_client, "Unknown")
            return f"{name} ({client})"
        return name
