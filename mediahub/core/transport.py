"""
HTTP Transport - Shared aiohttp client used by every provider and extractor.

The session is created lazily and exactly once, guarded by an asyncio lock,
and is read-only afterwards. Every response body is read inside
``async with`` so the connection goes back to the pool on all exit paths,
including task cancellation. Any non-success outcome becomes UpstreamError.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin, urlparse

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from mediahub.core.exceptions import UpstreamError


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36"
)


class TransportResponse(BaseModel):
    """Fully read HTTP response."""

    model_config = ConfigDict(frozen=True)

    status: int
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Raises:
            UpstreamError: If the body is not valid JSON
        """
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise UpstreamError(
                f"Malformed JSON from {self.url}: {e}",
                url=self.url,
                status_code=self.status,
                cause=e,
                details=self.text[:500]
            )


class HttpTransport:
    """
    Thin request layer over a lazily created ``aiohttp.ClientSession``.

    Timeouts are the transport's concern: the configured ``ClientTimeout``
    applies to every request, and expiry surfaces as UpstreamError.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: Optional[Mapping[str, str]] = None,
        connector_limit: int = 10,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Root used to resolve relative request URLs
            timeout: Total per-request timeout in seconds
            user_agent: Default User-Agent header
            headers: Extra default headers sent with every request
            connector_limit: Maximum pooled connections
        """
        self.base_url = base_url
        self.timeout = timeout
        self.connector_limit = connector_limit
        self.default_headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }
        if headers:
            self.default_headers.update(headers)

        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Create the shared session on first use; later calls only read it."""
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._session_lock:
            # Another task may have created it while we waited for the lock
            if self._session is None or self._session.closed:
                connector = aiohttp.TCPConnector(
                    limit=self.connector_limit,
                    ttl_dns_cache=300,
                )
                self._session = aiohttp.ClientSession(
                    connector=connector,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    headers=self.default_headers,
                )
                logger.debug(f"Created HTTP session for {self.base_url or 'transport'}")
        return self._session

    def resolve_url(self, url: str) -> str:
        """Make a URL absolute against ``base_url``."""
        if not urlparse(url).netloc and self.base_url:
            return urljoin(self.base_url, url)
        return url

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> TransportResponse:
        """
        Perform one HTTP request and read the whole body.

        Args:
            method: HTTP method
            url: Absolute URL, or a path relative to ``base_url``
            headers: Per-request headers, merged over the defaults
            body: Dict/list bodies are sent as JSON, str/bytes as-is
            params: Query string parameters

        Returns:
            The fully read response (2xx only)

        Raises:
            UpstreamError: On connection failure, timeout or non-2xx status
        """
        url = self.resolve_url(url)
        kwargs: Dict[str, Any] = {}
        if headers:
            kwargs['headers'] = dict(headers)
        if params:
            kwargs['params'] = dict(params)
        if isinstance(body, (dict, list)):
            kwargs['json'] = body
        elif body is not None:
            kwargs['data'] = body

        session = await self._get_session()
        logger.debug(f"{method} {url}")

        try:
            async with session.request(method, url, **kwargs) as response:
                text = await response.text()
                result = TransportResponse(
                    status=response.status,
                    url=str(response.url),
                    headers={k: v for k, v in response.headers.items()},
                    text=text,
                )
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Request to {url} timed out after {self.timeout}s", url=url, cause=e)
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Request to {url} failed: {e}", url=url, cause=e)

        if not result.ok:
            raise UpstreamError(
                f"HTTP {result.status} error for {url}",
                url=url,
                status_code=result.status,
                details=result.text[:500],
            )
        return result

    async def get_text(self, url: str, **kwargs) -> str:
        """GET a URL and return its body."""
        response = await self.request('GET', url, **kwargs)
        return response.text

    async def get_json(self, url: str, **kwargs) -> Any:
        """GET a URL and decode its JSON body."""
        response = await self.request('GET', url, **kwargs)
        return response.json()

    async def post_json(self, url: str, body: Any, **kwargs) -> Any:
        """POST a JSON body and decode the JSON reply."""
        response = await self.request('POST', url, body=body, **kwargs)
        return response.json()

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP session closed")
        self._session = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = ["HttpTransport", "TransportResponse", "DEFAULT_USER_AGENT"]
