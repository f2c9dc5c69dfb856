"""
Extractor Registry - Maps streaming server names to VideoExtractor instances.

Lookup goes by server name first, then falls back to the first extractor
whose ``supports`` accepts the server URL.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Union

from mediahub.core.exceptions import ConfigurationError, ExtractionError
from mediahub.core.models import EpisodeServer, StreamingServers
from mediahub.extractors.base import VideoExtractor
from mediahub.extractors.direct import DirectFileExtractor
from mediahub.extractors.html5 import Html5PageExtractor


logger = logging.getLogger(__name__)

ServerKey = Union[str, StreamingServers]


def _key(name: ServerKey) -> str:
    value = name.value if isinstance(name, StreamingServers) else str(name)
    return value.strip().lower()


class ExtractorRegistry:
    """Read-mostly collection of extractors keyed by server name."""

    def __init__(self, extractors: Optional[Iterable[VideoExtractor]] = None):
        self._extractors: Dict[str, VideoExtractor] = {}
        for extractor in extractors or ():
            self.register(extractor)

    def register(self, extractor: VideoExtractor, *aliases: ServerKey) -> None:
        """
        Register an extractor under its server name and optional aliases.

        Raises:
            ConfigurationError: If the extractor has no name or a key is taken
        """
        if not extractor.server_name:
            raise ConfigurationError(f"{extractor.__class__.__name__} does not declare a server_name")

        for key in [_key(extractor.server_name), *(_key(a) for a in aliases)]:
            existing = self._extractors.get(key)
            if existing is not None and existing is not extractor:
                raise ConfigurationError(f"An extractor is already registered for server '{key}'")
            self._extractors[key] = extractor
        logger.debug(f"Registered extractor {extractor!r}")

    def get(self, name: ServerKey) -> Optional[VideoExtractor]:
        return self._extractors.get(_key(name))

    def for_server(self, server: EpisodeServer) -> VideoExtractor:
        """
        Pick the extractor for a server emitted by a provider.

        Raises:
            ExtractionError: If no registered extractor can handle the server
        """
        extractor = self.get(server.name)
        if extractor is not None:
            return extractor

        for candidate in self._unique():
            if candidate.supports(server.url):
                return candidate

        raise ExtractionError(
            f"No extractor registered for server '{server.name}'",
            server=server.name,
            url=server.url,
        )

    def _unique(self) -> List[VideoExtractor]:
        seen: List[VideoExtractor] = []
        for extractor in self._extractors.values():
            if extractor not in seen:
                seen.append(extractor)
        return seen

    async def close(self) -> None:
        """Close every registered extractor once."""
        tasks = [extractor.close() for extractor in self._unique()]
        for result in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(result, Exception):
                logger.warning(f"Error while closing extractor: {result}")

    def names(self) -> List[str]:
        return sorted(self._extractors)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, (str, StreamingServers)) and _key(name) in self._extractors

    def __len__(self) -> int:
        return len(self._unique())


def default_extractor_registry() -> ExtractorRegistry:
    """Registry with the built-in, host-agnostic extractors."""
    # Order matters for the supports() fallback: the catch-all page extractor goes last
    return ExtractorRegistry([DirectFileExtractor(), Html5PageExtractor()])


__all__ = ["ExtractorRegistry", "default_extractor_registry"]
