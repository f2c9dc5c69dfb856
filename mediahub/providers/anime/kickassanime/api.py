"""
KickAssAnime API Client

Thin wrapper over the site's JSON API. Every request goes through the
injected cloudflare bypass client, since the API sits behind a challenge.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from mediahub.core.capabilities import BypassClient
from mediahub.core.exceptions import UpstreamError


logger = logging.getLogger(__name__)


class KickAssAnimeAPI:
    """Client for the KickAssAnime JSON endpoints."""

    def __init__(self, bypass: BypassClient, base_url: str, user_agent: str, timeout: Optional[float] = None):
        """
        Initialize the API client.

        Args:
            bypass: Cloudflare bypass capability used for every request
            base_url: Site root, e.g. https://kaas.am
            user_agent: User-Agent header value
            timeout: Per-request timeout handed to the bypass client
        """
        self.bypass = bypass
        self.base_url = base_url
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent,
            "Cache-Control": "private",
            "Accept": "application/xml,application/xhtml+xml,text/html;q=0.9, text/plain;q=0.8,image/png,*/*;q=0.5",
        }

    async def _request_json(self, method: str, path: str, payload: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{self.base_url}/api{path}"
        headers = dict(self.headers)
        if payload is not None:
            headers["Content-Type"] = "application/json"

        text = await self.bypass.fetch(method, url, headers=headers, json=payload, timeout=self.timeout)
        try:
            return json.loads(text)
        except ValueError as e:
            raise UpstreamError(f"Malformed JSON from {url}: {e}", url=url, cause=e, details=text[:500])

    async def search(self, query: str, page: int = 1) -> Dict[str, Any]:
        """POST /api/fsearch; returns ``{"result": [...], "maxPage": n}``."""
        data = await self._request_json("POST", "/fsearch", {"query": query, "page": page})
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected search payload type {type(data).__name__}", url=f"{self.base_url}/api/fsearch")
        if not isinstance(data.get("result"), list):
            raise UpstreamError(
                "Unexpected search payload: missing 'result' list",
                url=f"{self.base_url}/api/fsearch",
                details=data,
            )
        return data

    async def show(self, slug: str) -> Dict[str, Any]:
        """GET /api/show/<slug>; the full show record."""
        data = await self._request_json("GET", f"/show/{slug}")
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected show payload type {type(data).__name__}", url=f"{self.base_url}/api/show/{slug}")
        return data
