import asyncio

from aiohttp import web
from aiohttp.test_utils import unused_port

from shareconnect.web.metadata import MetadataFetcher, UrlMetadata

OG_PAGE = """
<html><head>
  <title>Plain Title</title>
  <meta property="og:title" content="Open Graph Title">
  <meta property="og:description" content="Open Graph description">
  <meta property="og:image" content="https://example.com/thumb.jpg">
  <meta property="og:site_name" content="Example Site">
  <meta name="twitter:title" content="Twitter Title">
</head><body></body></html>
"""

TWITTER_PAGE = """
<html><head>
  <title>Plain Title</title>
  <meta name="twitter:title" content="Twitter Title">
  <meta name="twitter:image" content="https://example.com/card.png">
  <meta name="description" content="Meta description">
</head><body></body></html>
"""


def _fetch(url):
    return asyncio.run(MetadataFetcher(timeout=5).fetch(url))


class TestLocalMetadata:

    def test_magnet(self):
        metadata = _fetch(
            "magnet:?xt=urn:btih:abcd1234567890abcdef&dn=Cool.Movie.2023.mkv"
            "&xl=2147483648&tr=udp://tracker.example.com:80"
        )
        assert metadata.title == "Cool.Movie.2023.mkv"
        assert metadata.site_name == "Movie"
        assert metadata.description.startswith("BitTorrent magnet link • Size: 2.0 GB")

    def test_invalid_magnet(self):
        metadata = _fetch("magnet:invalid-format")
        assert metadata.title == "Magnet Link"
        assert metadata.description == "BitTorrent magnet link"
        assert metadata.site_name == "BitTorrent"

    def test_torrent_file(self):
        metadata = _fetch("https://example.com/files/ubuntu-22.04.torrent")
        assert metadata == UrlMetadata(
            title="ubuntu-22.04", description="Torrent file", site_name="BitTorrent"
        )


class TestParseHtml:

    def test_open_graph_wins(self):
        metadata = MetadataFetcher.parse_html(OG_PAGE)
        assert metadata.title == "Open Graph Title"
        assert metadata.description == "Open Graph description"
        assert metadata.thumbnail_url == "https://example.com/thumb.jpg"
        assert metadata.site_name == "Example Site"

    def test_twitter_then_plain_tags(self):
        metadata = MetadataFetcher.parse_html(TWITTER_PAGE)
        assert metadata.title == "Twitter Title"
        assert metadata.description == "Meta description"
        assert metadata.thumbnail_url == "https://example.com/card.png"
        assert metadata.site_name is None

    def test_title_tag_fallback(self):
        metadata = MetadataFetcher.parse_html("<html><head><title> Hi </title></head></html>")
        assert metadata.title == "Hi"


class TestRemoteMetadata:

    def test_fetches_page_with_user_agent(self, serve):
        agents = []

        async def page(request):
            agents.append(request.headers.get("User-Agent"))
            return web.Response(text=TWITTER_PAGE, content_type="text/html")

        web_app = web.Application()
        web_app.router.add_get("/video", page)

        async def scenario(server):
            return await MetadataFetcher(timeout=5).fetch(str(server.make_url("/video")))

        metadata = serve(web_app, scenario)

        assert metadata.title == "Twitter Title"
        assert metadata.site_name == "127.0.0.1"
        assert "Mozilla/5.0" in agents[0]

    def test_follows_redirects(self, serve):
        async def old(request):
            raise web.HTTPFound("/new")

        async def new(request):
            return web.Response(text=OG_PAGE, content_type="text/html")

        web_app = web.Application()
        web_app.router.add_get("/old", old)
        web_app.router.add_get("/new", new)

        async def scenario(server):
            return await MetadataFetcher(timeout=5).fetch(str(server.make_url("/old")))

        assert serve(web_app, scenario).title == "Open Graph Title"

    def test_http_error_falls_back_to_url(self, serve):
        async def missing(request):
            return web.Response(status=404)

        web_app = web.Application()
        web_app.router.add_get("/files/report.pdf", missing)

        async def scenario(server):
            return await MetadataFetcher(timeout=5).fetch(
                str(server.make_url("/files/report.pdf"))
            )

        metadata = serve(web_app, scenario)

        assert metadata.title == "report.pdf"
        assert metadata.site_name == "127.0.0.1"
        assert metadata.description is None

    def test_unreachable_host_never_raises(self):
        metadata = _fetch(f"http://127.0.0.1:{unused_port()}/watch")
        assert metadata.title == "watch"
        assert metadata.site_name == "127.0.0.1"

    def test_garbage_url_never_raises(self):
        metadata = _fetch("not a url")
        assert metadata.title == "not a url"
