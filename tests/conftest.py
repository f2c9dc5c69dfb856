"""
Test configuration and fixtures for mediahub tests.

This module provides:
- Sample upstream payloads shaped like the real sources
- Fake transport and bypass collaborators that never touch the network
- Pytest fixtures for common test scenarios
"""

import json as jsonlib
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import pytest

from mediahub.core.capabilities import CLOUDFLARE_BYPASS, Capabilities
from mediahub.core.exceptions import UpstreamError
from mediahub.core.transport import TransportResponse


# ==================== Test Data ====================

class TestData:
    """Upstream payloads used across the suite."""

    __test__ = False

    KICKASS_BASE = "https://kaas.am"

    KICKASS_SEARCH = {
        "maxPage": 2,
        "result": [
            {
                "slug": "overlord-iv-5d2f",
                "title": "Overlord IV",
                "watch_uri": "/overlord-iv-5d2f/ep-1-12cd96",
                "poster": {"hq": "overlord-iv-hq", "sm": "overlord-iv-sm"},
                "year": 2022,
                "type": "tv",
            },
            {
                "slug": "overlord-ple-ple-pleiades-a1b2",
                "title": "Overlord: Ple Ple Pleiades",
                "watch_uri": "/overlord-ple-ple-pleiades-a1b2/ep-1-abc",
                "poster": {"hq": "pleiades-hq"},
                "year": 2015,
            },
        ],
    }

    KICKASS_SHOW = {
        "title": "Overlord IV",
        "title_en": "Overlord IV",
        "title_original": None,
        "synopsis": "The fourth season of Overlord.",
        "poster": {"hq": "overlord-iv-hq"},
        "banner": {"hq": "overlord-iv-banner"},
        "start_date": "2022-07-05T00:00:00Z",
        "end_date": "2022-09-27",
        "type": "tv",
        "status": "finished_airing",
        "genres": ["Action", "Fantasy", "Action"],
        "season": "summer",
        "episode_count": 13,
    }

    SHOW_ID = "overlord-iv-5d2f"


# ==================== Fakes ====================

Reply = Union[str, Dict[str, Any], List[Any], Exception, Tuple[int, str]]


class FakeTransport:
    """
    In-memory Transport: replies are registered per URL.

    A reply is a body (str, or dict/list sent as JSON), an exception to
    raise, or a ``(status, body)`` tuple. Non-2xx statuses raise
    UpstreamError the same way HttpTransport does.
    """

    def __init__(self, replies: Optional[Mapping[str, Reply]] = None):
        self.replies: Dict[str, Reply] = dict(replies or {})
        self.calls: List[Tuple[str, str, Dict[str, str], Any]] = []

    async def request(self, method, url, headers=None, body=None, params=None) -> TransportResponse:
        self.calls.append((method, url, dict(headers or {}), body))
        if url not in self.replies:
            raise UpstreamError(f"HTTP 404 error for {url}", url=url, status_code=404)

        reply = self.replies[url]
        if isinstance(reply, Exception):
            raise reply
        status, text = reply if isinstance(reply, tuple) else (200, reply)
        if not isinstance(text, str):
            text = jsonlib.dumps(text)
        if not 200 <= status < 300:
            raise UpstreamError(f"HTTP {status} error for {url}", url=url, status_code=status)
        return TransportResponse(status=status, url=url, text=text)

    async def close(self) -> None:
        pass


class FakeBypass:
    """BypassClient fake: serves JSON text per URL and records every call."""

    def __init__(self, replies: Optional[Mapping[str, Union[str, Dict[str, Any], Exception, Callable]]] = None):
        self.replies = dict(replies or {})
        self.calls: List[Tuple[str, str, Dict[str, str], Any]] = []
        self.timeouts: List[Optional[float]] = []

    async def fetch(self, method, url, headers=None, json=None, timeout=None) -> str:
        self.calls.append((method, url, dict(headers or {}), json))
        self.timeouts.append(timeout)
        if url not in self.replies:
            raise UpstreamError(f"HTTP 404 error for {url}", url=url, status_code=404)
        reply = self.replies[url]
        if callable(reply):
            reply = reply(method, url, json)
        if isinstance(reply, Exception):
            raise reply
        return reply if isinstance(reply, str) else jsonlib.dumps(reply)


# ==================== Fixtures ====================

@pytest.fixture
def test_data() -> type:
    return TestData


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def kickass_bypass() -> FakeBypass:
    """Bypass client answering the KickAssAnime search and show endpoints."""
    base = TestData.KICKASS_BASE
    return FakeBypass({
        f"{base}/api/fsearch": TestData.KICKASS_SEARCH,
        f"{base}/api/show/{TestData.SHOW_ID}": TestData.KICKASS_SHOW,
    })


@pytest.fixture
def kickass_capabilities(kickass_bypass) -> Capabilities:
    return Capabilities({CLOUDFLARE_BYPASS: kickass_bypass})


@pytest.fixture
def config_dir(tmp_path):
    """Empty configuration directory."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    noisy = {name: logging.getLogger(name).level for name in ("aiohttp", "urllib3", "asyncio")}
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy.items():
        logging.getLogger(name).setLevel(noisy_level)
