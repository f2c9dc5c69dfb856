"""
Tests for the cloudscraper-backed bypass client.

A stand-in scraper object is injected so no request is ever sent.
"""

import sys

import pytest

from mediahub.core.bypass import CloudscraperBypass
from mediahub.core.capabilities import CLOUDFLARE_BYPASS, BypassClient
from mediahub.core.exceptions import ConfigurationError, UpstreamError


class StubResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


class StubScraper:
    """Records requests and answers with a fixed response or exception."""

    def __init__(self, response=None, error=None):
        self.response = response or StubResponse(text='{"ok": true}')
        self.error = error
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


class TestCloudscraperBypass:
    """Tests for CloudscraperBypass."""

    def test_missing_dependency_is_a_configuration_error(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "cloudscraper", None)

        with pytest.raises(ConfigurationError) as exc_info:
            CloudscraperBypass()

        assert exc_info.value.capability == CLOUDFLARE_BYPASS
        assert "pip install" in str(exc_info.value)

    def test_satisfies_bypass_protocol(self):
        assert isinstance(CloudscraperBypass(scraper=StubScraper()), BypassClient)

    async def test_fetch_returns_body(self):
        scraper = StubScraper()
        bypass = CloudscraperBypass(timeout=12, scraper=scraper)

        body = await bypass.fetch("POST", "https://kaas.am/api/fsearch", headers={"X": "1"}, json={"query": "q"})

        assert body == '{"ok": true}'
        method, url, kwargs = scraper.requests[0]
        assert (method, url) == ("POST", "https://kaas.am/api/fsearch")
        assert kwargs["json"] == {"query": "q"}
        assert kwargs["headers"] == {"X": "1"}
        assert kwargs["timeout"] == 12

    async def test_per_call_timeout(self):
        scraper = StubScraper()
        bypass = CloudscraperBypass(timeout=30, scraper=scraper)

        await bypass.fetch("GET", "https://kaas.am/api/show/x", timeout=7)

        assert scraper.requests[0][2]["timeout"] == 7

    async def test_error_status(self):
        bypass = CloudscraperBypass(scraper=StubScraper(StubResponse(503, "challenge failed")))

        with pytest.raises(UpstreamError) as exc_info:
            await bypass.fetch("GET", "https://kaas.am/api/show/x")

        assert exc_info.value.status_code == 503
        assert exc_info.value.details == "challenge failed"

    async def test_scraper_exception_is_wrapped(self):
        boom = RuntimeError("captcha loop")
        bypass = CloudscraperBypass(scraper=StubScraper(error=boom))

        with pytest.raises(UpstreamError) as exc_info:
            await bypass.fetch("GET", "https://kaas.am/api/show/x")

        assert exc_info.value.__cause__ is boom
        assert exc_info.value.url == "https://kaas.am/api/show/x"
