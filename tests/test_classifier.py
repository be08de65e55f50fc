import pytest

from shareconnect.core.classifier import (
    UrlType,
    classify,
    is_magnet,
    url_type_description,
)


class TestClassify:

    @pytest.mark.parametrize(
        "url",
        [
            "magnet:?xt=urn:btih:x",
            "MAGNET:?xt=urn:btih:abc",
            "https://example.com/files/ubuntu.iso.torrent",
            "http://example.com/a.TORRENT",
        ],
    )
    def test_torrent(self, url):
        assert classify(url) == UrlType.TORRENT

    @pytest.mark.parametrize(
        "url",
        [
            "https://youtube.com/watch?v=1",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://m.youtube.com/watch?v=1",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://vimeo.com/123456",
            "https://www.twitch.tv/somechannel",
            "https://soundcloud.com/artist/track",
            "https://x.com/user/status/1",
        ],
    )
    def test_streaming(self, url):
        assert classify(url) == UrlType.STREAMING

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/a.zip",
            "http://downloads.example.org/file.bin",
            "https://notyoutube.com/watch?v=1",
        ],
    )
    def test_direct_download(self, url):
        assert classify(url) == UrlType.DIRECT_DOWNLOAD

    @pytest.mark.parametrize(
        "url", ["not a url", "", "   ", None, "ftp://example.com/file", "mailto:a@b.c"]
    )
    def test_unknown(self, url):
        assert classify(url) == UrlType.UNKNOWN

    def test_unparsable_url_falls_back_to_substring_match(self):
        # An unterminated IPv6 literal makes urlsplit raise ValueError.
        assert classify("https://[youtube.com/watch") == UrlType.STREAMING
        assert classify("https://[::1/file.zip") == UrlType.DIRECT_DOWNLOAD

    def test_surrounding_whitespace_is_ignored(self):
        assert classify("  https://youtu.be/abc  ") == UrlType.STREAMING


def test_is_magnet():
    assert is_magnet("magnet:?xt=urn:btih:abc")
    assert not is_magnet("https://example.com")
    assert not is_magnet(None)


def test_every_type_has_a_description():
    for url_type in UrlType:
        assert url_type_description(url_type)
