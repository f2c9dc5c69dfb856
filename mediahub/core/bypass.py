"""
Cloudflare Bypass - cloudscraper-backed implementation of BypassClient.

cloudscraper is an optional dependency (``pip install mediahub[bypass]``).
Its absence is reported when the bypass object is built, so a provider
that needs it never gets as far as issuing a request.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from mediahub.core.capabilities import CLOUDFLARE_BYPASS
from mediahub.core.exceptions import ConfigurationError, UpstreamError


logger = logging.getLogger(__name__)


class CloudscraperBypass:
    """
    Runs cloudscraper requests in a worker thread.

    cloudscraper is synchronous (requests based), so each call is pushed
    through ``asyncio.to_thread`` to keep the event loop responsive.
    """

    def __init__(
        self,
        timeout: float = 30,
        browser: Optional[Dict[str, Any]] = None,
        scraper: Any = None,
    ):
        """
        Initialize the bypass client.

        Args:
            timeout: Per-request timeout in seconds
            browser: Browser profile passed to ``cloudscraper.create_scraper``
            scraper: Pre-built scraper object (mainly for tests)

        Raises:
            ConfigurationError: If cloudscraper is not installed
        """
        self.timeout = timeout
        if scraper is not None:
            self._scraper = scraper
            return

        try:
            import cloudscraper
        except ImportError as e:
            raise ConfigurationError(
                "The 'cloudflare_bypass' capability needs cloudscraper, which is not installed. "
                "Install it with: pip install 'mediahub[bypass]' (or pip install cloudscraper)",
                capability=CLOUDFLARE_BYPASS,
                details=str(e),
            )

        self._scraper = cloudscraper.create_scraper(
            browser=browser or {'browser': 'chrome', 'platform': 'linux', 'mobile': False}
        )

    def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]],
        json: Any,
        timeout: Optional[float],
    ) -> str:
        response = self._scraper.request(
            method,
            url,
            headers=dict(headers or {}),
            json=json,
            timeout=timeout or self.timeout,
            allow_redirects=True,
        )
        if response.status_code >= 400:
            raise UpstreamError(
                f"HTTP {response.status_code} error for {url}",
                url=url,
                status_code=response.status_code,
                details=response.text[:500],
            )
        return response.text

    async def fetch(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Fetch a protected URL and return the body text.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Extra request headers
            json: JSON body, if any
            timeout: Overrides the client timeout for this call

        Raises:
            UpstreamError: On challenge failure, timeout or non-2xx status
        """
        logger.debug(f"{method} {url} (cloudflare bypass)")
        try:
            return await asyncio.to_thread(self._send, method, url, headers, json, timeout)
        except UpstreamError:
            raise
        except Exception as e:
            # cloudscraper raises requests and its own challenge exceptions
            raise UpstreamError(f"Bypass request to {url} failed: {e}", url=url, cause=e)


__all__ = ["CloudscraperBypass"]
