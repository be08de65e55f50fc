import pytest
from pydantic import ValidationError

from shareconnect.exceptions import ApiError, ConfigurationError, TransportError
from shareconnect.models import AppSettings, DispatchOutcome, ErrorKind, ServiceKind
from shareconnect.models.profile import Profile, TorrentClient
from shareconnect.utils.formatting import (
    format_bytes,
    site_name_from_url,
    title_from_url,
)


class TestProfile:

    def test_endpoint_and_label(self):
        profile = Profile(
            name="Box",
            base_url="http://nas.local/",
            port=8080,
            service_kind=ServiceKind.TORRENT,
            torrent_client=TorrentClient.QBITTORRENT,
        )
        assert profile.endpoint("/api/v2/torrents/add") == (
            "http://nas.local:8080/api/v2/torrents/add"
        )
        assert profile.service_label == "Torrent (qBittorrent)"

    def test_torrent_profile_requires_client(self):
        with pytest.raises(ValidationError):
            Profile(name="T", base_url="http://h", port=1, service_kind=ServiceKind.TORRENT)

    def test_client_forbidden_on_other_services(self):
        with pytest.raises(ValidationError):
            Profile(
                name="M",
                base_url="http://h",
                port=1,
                torrent_client=TorrentClient.TRANSMISSION,
            )

    def test_rejects_bad_url_and_port(self):
        with pytest.raises(ValidationError):
            Profile(name="M", base_url="nas.local", port=80)
        with pytest.raises(ValidationError):
            Profile(name="M", base_url="http://nas.local", port=70000)

    def test_rejects_port_in_base_url_and_missing_host(self):
        with pytest.raises(ValidationError, match="must not include a port"):
            Profile(name="M", base_url="http://nas.local:9999", port=8081)
        with pytest.raises(ValidationError, match="no host"):
            Profile(name="M", base_url="http://", port=8081)

    def test_credentials_keep_surrounding_whitespace(self):
        profile = Profile(
            name="  M  ", base_url=" http://h ", port=1, username=" admin", password=" pa ss "
        )
        assert profile.name == "M"
        assert profile.base_url == "http://h"
        assert profile.username == " admin"
        assert profile.password == " pa ss "

    def test_credentials_must_be_paired(self):
        with pytest.raises(ValidationError):
            Profile(name="M", base_url="http://h", port=1, username="admin")

    def test_blank_credentials_become_none(self):
        profile = Profile(name="M", base_url="http://h", port=1, username=" ", password="")
        assert profile.username is None
        assert not profile.has_credentials

    def test_password_hidden_from_repr(self):
        profile = Profile(
            name="M", base_url="http://h", port=1, username="u", password="s3cret"
        )
        assert "s3cret" not in repr(profile)


class TestDispatchOutcome:

    def test_from_api_error(self):
        outcome = DispatchOutcome.from_error(ApiError(500, "boom"))
        assert not outcome.success
        assert outcome.http_status == 500
        assert outcome.error_kind == ErrorKind.API
        assert outcome.error_detail == "API Error: 500 - boom"

    def test_from_other_errors(self):
        assert (
            DispatchOutcome.from_error(ConfigurationError("x")).error_kind
            == ErrorKind.CONFIGURATION
        )
        assert (
            DispatchOutcome.from_error(TransportError("x")).error_kind
            == ErrorKind.TRANSPORT
        )

    def test_unexpected_error_type(self):
        with pytest.raises(TypeError):
            DispatchOutcome.from_error(RuntimeError("x"))


class TestAppSettings:

    def test_non_positive_attempts_mean_unbounded(self):
        assert AppSettings(max_injection_attempts=0).max_injection_attempts is None

    def test_rejects_negative_timeout(self):
        with pytest.raises(ValidationError):
            AppSettings(metadata_timeout=-1)


@pytest.mark.parametrize(
    "size, expected",
    [
        (512, "512.0 B"),
        (104857600, "100.0 MB"),
        (536870912, "512.0 MB"),
        (1048576000, "1000.0 MB"),
        (2048000000, "1.9 GB"),
        (2147483648, "2.0 GB"),
    ],
)
def test_format_bytes(size, expected):
    assert format_bytes(size) == expected


def test_url_helpers():
    assert site_name_from_url("https://www.example.com/page") == "example.com"
    assert site_name_from_url("not a url") is None
    assert title_from_url("https://example.com/files/report.pdf") == "report.pdf"
    assert title_from_url("https://example.com/") == "example.com"
