"""
Tests for video extractors and the extractor registry.
"""

import pytest
from aiohttp import test_utils, web

from conftest import FakeTransport

from mediahub.core.exceptions import ConfigurationError, ExtractionError, UpstreamError
from mediahub.core.models import EpisodeServer, StreamingServers
from mediahub.core.transport import HttpTransport
from mediahub.extractors import (
    DirectFileExtractor,
    ExtractorRegistry,
    Html5PageExtractor,
    VideoExtractor,
    default_extractor_registry,
)
from mediahub.extractors.direct import quality_from_text


EMBED_URL = "https://player.example.com/embed/42"

VIDEO_PAGE = """
<html><body>
  <video controls poster="/thumb.jpg">
    <source src="/media/ep42-1080.mp4" type="video/mp4" label="1080p">
    <source src="https://cdn.example.com/ep42/master.m3u8" type="application/x-mpegURL">
    <source src="/media/ep42-1080.mp4" type="video/mp4">
    <source src="blob:https://player.example.com/abc">
    <track kind="subtitles" src="/subs/en.vtt" srclang="en" label="English">
    <track kind="chapters" src="/chapters.vtt">
  </video>
</body></html>
"""

PLAYER_SETUP_PAGE = """
<html><body>
  <div id="player"></div>
  <script>
    jwplayer("player").setup({
      sources: [{file: "https://cdn.example.com/ep42/720/index.m3u8"}, {"file": "/dl/ep42.mp4?token=abc"}],
    });
  </script>
</body></html>
"""


class BrokenExtractor(VideoExtractor):
    server_name = "broken"
    hosts = ("broken.example.com",)

    async def _extract(self, url):
        return {"sources": [{"url": ""}]}


class TestQualityFromText:
    """Tests for quality label detection."""

    @pytest.mark.parametrize("text,expected", [
        ("https://cdn/ep-1080p.mp4", "1080p"),
        ("Full HD", "1080p"),
        ("4K UHD", "2160p"),
        ("HD", "720p"),
        ("480", "480p"),
        ("https://cdn/ep.mp4", None),
    ])
    def test_labels(self, text, expected):
        assert quality_from_text(text) == expected


class TestDirectFileExtractor:
    """Tests for pass-through media URLs."""

    async def test_mp4(self):
        source = await DirectFileExtractor().extract("https://cdn.example.com/show/ep1-720p.mp4")

        assert len(source.sources) == 1
        assert source.sources[0].quality == "720p"
        assert source.sources[0].is_m3u8 is False

    async def test_playlist_with_subtitle_hints(self):
        url = "https://cdn.example.com/ep1/master.m3u8?sub_en=https%3A%2F%2Fsubs.example.com%2Fen.vtt"
        source = await DirectFileExtractor().extract(url)

        assert source.sources[0].quality == "auto"
        assert source.sources[0].is_m3u8 is True
        assert source.subtitles[0].lang == "en"
        assert source.subtitles[0].url == "https://subs.example.com/en.vtt"

    @pytest.mark.parametrize("url", ["not a url", "ftp://cdn.example.com/ep.mp4", "https://cdn.example.com/watch/1", None])
    async def test_unrecognized_url(self, url):
        with pytest.raises(ExtractionError):
            await DirectFileExtractor().extract(url)

    async def test_repeated_calls_are_independent(self):
        extractor = DirectFileExtractor()
        first = await extractor.extract("https://cdn.example.com/a.mp4")
        second = await extractor.extract("https://cdn.example.com/b.mp4")

        assert first.sources[0].url.endswith("a.mp4")
        assert second.sources[0].url.endswith("b.mp4")


class TestHtml5PageExtractor:
    """Tests for embed pages carrying a video element or player setup."""

    async def test_video_element(self):
        transport = FakeTransport({EMBED_URL: VIDEO_PAGE})
        source = await Html5PageExtractor(transport).extract(EMBED_URL)

        assert [v.url for v in source.sources] == [
            "https://player.example.com/media/ep42-1080.mp4",
            "https://cdn.example.com/ep42/master.m3u8",
        ]
        assert source.sources[0].quality == "1080p"
        assert source.sources[1].is_m3u8 is True
        assert source.sources[1].quality == "auto"
        assert [(s.lang, s.url) for s in source.subtitles] == [("English", "https://player.example.com/subs/en.vtt")]
        assert source.headers == {"Referer": EMBED_URL}
        assert transport.calls[0][2] == {"Referer": EMBED_URL}

    async def test_player_setup_fallback(self):
        transport = FakeTransport({EMBED_URL: PLAYER_SETUP_PAGE})
        source = await Html5PageExtractor(transport).extract(EMBED_URL)

        assert [v.url for v in source.sources] == [
            "https://cdn.example.com/ep42/720/index.m3u8",
            "https://player.example.com/dl/ep42.mp4?token=abc",
        ]
        assert source.sources[0].quality == "720p"
        assert source.subtitles == ()

    async def test_page_without_video(self):
        transport = FakeTransport({EMBED_URL: "<html><body>Video removed</body></html>"})

        with pytest.raises(ExtractionError, match="No playable video"):
            await Html5PageExtractor(transport).extract(EMBED_URL)

    async def test_host_failure_becomes_extraction_error(self):
        upstream = UpstreamError(f"HTTP 403 error for {EMBED_URL}", url=EMBED_URL, status_code=403)
        transport = FakeTransport({EMBED_URL: upstream})

        with pytest.raises(ExtractionError) as exc_info:
            await Html5PageExtractor(transport).extract(EMBED_URL)

        assert exc_info.value.server == "html5"
        assert exc_info.value.__cause__ is upstream


class TestVideoExtractorBase:
    """Tests for the shared extract() plumbing."""

    def test_host_matching(self):
        extractor = BrokenExtractor()
        assert extractor.supports("https://broken.example.com/e/1")
        assert extractor.supports("https://cdn.broken.example.com/e/1")
        assert not extractor.supports("https://notbroken.example.com/e/1")

    async def test_unusable_result(self):
        with pytest.raises(ExtractionError, match="unusable result"):
            await BrokenExtractor().extract("https://broken.example.com/e/1")


class TestExtractorRegistry:
    """Tests for server-name lookup."""

    def test_lookup_by_name_and_alias(self):
        direct = DirectFileExtractor()
        registry = ExtractorRegistry()
        registry.register(direct, "mp4", StreamingServers.ASIANLOAD)

        assert registry.for_server(EpisodeServer(name="MP4", url="https://x/1")) is direct
        assert StreamingServers.ASIANLOAD in registry
        assert len(registry) == 1

    def test_fallback_to_supports(self):
        registry = default_extractor_registry()

        direct = registry.for_server(EpisodeServer(name="Server 1", url="https://cdn.example.com/a.m3u8"))
        page = registry.for_server(EpisodeServer(name="Server 2", url="https://host.example.com/embed/a"))

        assert isinstance(direct, DirectFileExtractor)
        assert isinstance(page, Html5PageExtractor)

    def test_no_match(self):
        with pytest.raises(ExtractionError):
            ExtractorRegistry().for_server(EpisodeServer(name="vidcloud", url="https://vidcloud.example.com/e/1"))

    def test_duplicate_name(self):
        registry = ExtractorRegistry([DirectFileExtractor()])
        with pytest.raises(ConfigurationError):
            registry.register(DirectFileExtractor())

    def test_nameless_extractor(self):
        class Nameless(BrokenExtractor):
            server_name = ""

        with pytest.raises(ConfigurationError):
            ExtractorRegistry([Nameless()])


@pytest.fixture
async def embed_server():
    async def embed(request):
        return web.Response(text=VIDEO_PAGE, content_type="text/html")

    app = web.Application()
    app.router.add_get("/embed/42", embed)
    server = test_utils.TestServer(app)
    await server.start_server()
    yield server
    await server.close()


class TestExtractorResources:
    """Tests for releasing the sessions extractors open."""

    async def test_close_releases_own_transport(self, embed_server):
        extractor = Html5PageExtractor()
        source = await extractor.extract(str(embed_server.make_url("/embed/42")))
        transport = extractor.transport

        assert source.sources
        assert transport.is_open

        await extractor.close()
        assert not transport.is_open

    async def test_injected_transport_is_left_open(self, embed_server):
        async with HttpTransport() as transport:
            extractor = Html5PageExtractor(transport)
            await extractor.extract(str(embed_server.make_url("/embed/42")))

            await extractor.close()
            assert transport.is_open
            assert extractor.transport is transport

    async def test_close_before_use(self):
        extractor = DirectFileExtractor()
        await extractor.close()

    async def test_registry_closes_each_extractor(self, embed_server):
        page = Html5PageExtractor()
        registry = ExtractorRegistry([DirectFileExtractor(), page])
        registry.register(page, "embed")
        await page.extract(str(embed_server.make_url("/embed/42")))
        transport = page.transport

        await registry.close()
        assert not transport.is_open
