"""
Source Resolver - Glue between a provider's episode and a VideoExtractor.

Which path a provider takes is its declared ``source_resolution`` flag;
nothing here guesses from control flow.
"""

import logging
from typing import Any, List, Optional

from mediahub.core.capabilities import SourceResolution
from mediahub.core.exceptions import ExtractionError, UnsupportedOperationError
from mediahub.core.models import EpisodeServer, Source
from mediahub.extractors.registry import ExtractorRegistry


logger = logging.getLogger(__name__)


def _select_servers(servers: List[EpisodeServer], server: Optional[str]) -> List[EpisodeServer]:
    if not server:
        return list(servers)
    wanted = server.strip().lower()
    return [s for s in servers if s.name.strip().lower() == wanted]


async def resolve_episode_sources(
    parser: Any,
    episode_id: str,
    extractors: ExtractorRegistry,
    server: Optional[str] = None,
    **kwargs: Any,
) -> Source:
    """
    Produce playable sources for an episode regardless of provider style.

    Args:
        parser: Anime or movie parser exposing ``source_resolution``
        episode_id: Episode id taken from the provider's info record
        extractors: Registry used for server-mediated providers
        server: Preferred server name; when omitted servers are tried in order
        **kwargs: Extra arguments for the provider (e.g. ``media_id``)

    Raises:
        UnsupportedOperationError: If the provider cannot produce sources
        ExtractionError: If no offered server could be extracted
        UpstreamError: If the provider's own calls fail
    """
    mode = parser.source_resolution
    if mode is SourceResolution.INLINE:
        return await parser.fetch_episode_sources(episode_id, server=server, **kwargs)
    if mode is not SourceResolution.SERVERS:
        raise UnsupportedOperationError(
            f"{parser.name} cannot resolve episode sources",
            provider=parser.name,
            operation="resolve_sources",
        )

    servers = await parser.fetch_episode_servers(episode_id, **kwargs)
    candidates = _select_servers(servers, server)
    if not candidates:
        offered = ", ".join(s.name for s in servers) or "none"
        raise ExtractionError(
            f"{parser.name} offers no usable server for episode {episode_id} "
            f"(requested: {server or 'any'}, offered: {offered})",
            server=server,
        )

    failures = []
    for candidate in candidates:
        try:
            extractor = extractors.for_server(candidate)
            source = await extractor.extract(candidate.url)
            logger.debug(f"{parser.name}: server {candidate.name} gave {len(source.sources)} sources")
            return source
        except ExtractionError as e:
            logger.warning(f"{parser.name}: server {candidate.name} unusable: {e}")
            failures.append(f"{candidate.name}: {e}")

    raise ExtractionError(
        f"All {len(candidates)} servers failed for episode {episode_id}",
        server=server,
        details=failures,
    )


__all__ = ["resolve_episode_sources"]
