"""
Video Extractor Interface - Turns a streaming server URL into playable sources.

Extractors are independent of providers: any provider whose episodes are
hosted on the same platform reuses the same extractor. An extractor holds
no per-call state, so concurrent and repeated ``extract`` calls are safe.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple
from urllib.parse import urlparse

from mediahub.core.capabilities import Transport
from mediahub.core.exceptions import ExtractionError
from mediahub.core.models import Source
from mediahub.core.transport import HttpTransport


logger = logging.getLogger(__name__)


class VideoExtractor(ABC):
    """
    Abstract base class for host-specific video extractors.

    Subclasses set ``server_name`` and, optionally, ``hosts`` (domain
    suffixes the extractor understands), then implement ``_extract``.
    """

    server_name: str = ""
    hosts: Tuple[str, ...] = ()

    def __init__(self, transport: Optional[Transport] = None):
        """
        Initialize the extractor.

        Args:
            transport: HTTP collaborator used to talk to the host
        """
        self._transport = transport
        self._owns_transport = transport is None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def transport(self) -> Transport:
        # Created on first access; HttpTransport defers its session until a request
        if self._transport is None:
            self._transport = HttpTransport()
        return self._transport

    async def close(self) -> None:
        """Release the transport if this extractor created it."""
        if self._owns_transport and self._transport is not None:
            await self._transport.close()
            self._transport = None

    def supports(self, url: str) -> bool:
        """
        Check whether this extractor understands a server URL.

        Args:
            url: Server URL emitted by a provider
        """
        parsed = urlparse(url) if isinstance(url, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            return False
        if not self.hosts:
            return True
        host = parsed.netloc.lower().split(":")[0]
        return any(host == h or host.endswith("." + h) for h in self.hosts)

    async def extract(self, url: str) -> Source:
        """
        Resolve a server URL into sources and subtitles.

        Args:
            url: Server URL, exactly as returned by ``fetch_episode_servers``

        Returns:
            Source with ordered videos and subtitles. An empty result means
            the host genuinely has nothing for this URL.

        Raises:
            ExtractionError: If the URL is not recognized or the host's
                response cannot be fetched or parsed
        """
        if not self.supports(url):
            raise ExtractionError(
                f"{self.server_name or self.__class__.__name__} does not recognize server URL: {url!r}",
                server=self.server_name,
                url=url if isinstance(url, str) else None,
            )

        self.logger.debug(f"Extracting sources from {url}")
        try:
            result = await self._extract(url)
        except ExtractionError:
            raise
        except Exception as e:
            # UpstreamError included: to the caller this server is unusable
            raise ExtractionError(
                f"{self.server_name} extraction failed for {url}: {e}",
                server=self.server_name,
                url=url,
            ) from e

        if isinstance(result, Source):
            return result
        try:
            return Source.model_validate(result)
        except Exception as e:
            raise ExtractionError(
                f"{self.server_name} returned an unusable result for {url}: {e}",
                server=self.server_name,
                url=url,
            ) from e

    @abstractmethod
    async def _extract(self, url: str) -> Any:
        """Host-specific extraction; return a Source or a dict shaped like one."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(server='{self.server_name}')"


__all__ = ["VideoExtractor"]
