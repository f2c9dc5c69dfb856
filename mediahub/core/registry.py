"""
Provider Registry - Two-level lookup of providers by family and name.

Providers are addressed as ``registry.get(MediaFamily.ANIME, "KickAssAnime")``
rather than by parsing a dotted class path. The registry also fans a search
out across every provider of a family, bounded by a semaphore, and reports
per-provider failures next to the successful envelopes.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from mediahub.core.exceptions import ConfigurationError, ProviderNotFoundError
from mediahub.core.models import MediaFamily, ProviderStats, SearchResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateSearch:
    """Outcome of a family-wide search: envelopes and failures by provider name."""

    query: str
    page: int
    results: Dict[str, SearchResult] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)

    @property
    def total_results(self) -> int:
        return sum(len(envelope.results) for envelope in self.results.values())


def _family(value: Any) -> MediaFamily:
    if isinstance(value, MediaFamily):
        return value
    try:
        return MediaFamily(str(value).upper())
    except ValueError:
        raise ProviderNotFoundError(f"Unknown media family: {value}", family=str(value))


class ProviderRegistry:
    """
    Family enum -> {provider name -> provider instance}.

    Names are matched case-insensitively but listed as registered.
    """

    def __init__(self, max_concurrent: int = 3):
        if max_concurrent < 1:
            raise ConfigurationError("max_concurrent must be at least 1", config_path="network.max_concurrent_providers")
        self.max_concurrent = max_concurrent
        self._providers: Dict[MediaFamily, Dict[str, Any]] = {}

    def register(self, provider: Any) -> None:
        """
        Add a provider under its declared family and name.

        Raises:
            ConfigurationError: If the provider lacks a family/name or the
                name is already taken within the family
        """
        family = getattr(provider, "family", None)
        name = getattr(provider, "name", "")
        if not isinstance(family, MediaFamily) or not name:
            raise ConfigurationError(f"Cannot register {provider!r}: it must declare a family and a name")

        bucket = self._providers.setdefault(family, {})
        key = name.lower()
        if key in bucket:
            raise ConfigurationError(f"A {family.value} provider named '{name}' is already registered")
        bucket[key] = provider
        logger.debug(f"Registered provider {family.value}.{name}")

    def unregister(self, family: Any, name: str) -> Any:
        """Remove and return a provider."""
        family = _family(family)
        provider = self.get(family, name)
        del self._providers[family][name.lower()]
        if not self._providers[family]:
            del self._providers[family]
        logger.debug(f"Unregistered provider {family.value}.{name}")
        return provider

    def get(self, family: Any, name: str) -> Any:
        """
        Look up a provider.

        Raises:
            ProviderNotFoundError: If the family or name is unknown
        """
        family = _family(family)
        provider = self._providers.get(family, {}).get((name or "").lower())
        if provider is None:
            available = ", ".join(p.name for p in self.providers(family)) or "none"
            raise ProviderNotFoundError(
                f"No {family.value} provider named '{name}' (available: {available})",
                family=family.value,
                name=name,
            )
        return provider

    def providers(self, family: Any) -> List[Any]:
        """Providers of a family in registration order."""
        return list(self._providers.get(_family(family), {}).values())

    def families(self) -> List[MediaFamily]:
        """Families that have at least one provider."""
        return [family for family in MediaFamily if family in self._providers]

    def stats(self) -> List[ProviderStats]:
        """Identity listing of every registered provider."""
        return [provider.stats for _, provider in self]

    async def search_all(self, family: Any, query: str, page: int = 1) -> AggregateSearch:
        """
        Search every provider of a family concurrently.

        A failing provider does not fail the whole search; its exception is
        logged and reported in ``errors``.
        """
        family = _family(family)
        providers = self.providers(family)
        if not providers:
            logger.warning(f"No {family.value} providers available for search")
            return AggregateSearch(query=query, page=page)

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def search_provider(provider: Any) -> Tuple[str, Optional[SearchResult], Optional[Exception]]:
            async with semaphore:
                try:
                    logger.debug(f"Searching provider {provider.name} for: {query}")
                    return provider.name, await provider.search(query, page), None
                except Exception as e:
                    logger.error(f"Search failed for provider {provider.name}: {e}")
                    return provider.name, None, e

        outcome = AggregateSearch(query=query, page=page)
        for name, envelope, error in await asyncio.gather(*(search_provider(p) for p in providers)):
            if error is not None:
                outcome.errors[name] = error
            else:
                outcome.results[name] = envelope

        logger.info(
            f"Search complete: {outcome.total_results} results from {len(outcome.results)} "
            f"{family.value} providers ({len(outcome.errors)} failed)"
        )
        return outcome

    async def close_all(self) -> None:
        """Close every provider that holds resources."""
        tasks = [provider.close() for _, provider in self if hasattr(provider, "close")]
        for result in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(result, Exception):
                logger.warning(f"Error while closing provider: {result}")

    def __iter__(self) -> Iterator[Tuple[MediaFamily, Any]]:
        for family in self.families():
            for provider in self._providers[family].values():
                yield family, provider

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        family, name = item
        try:
            return (name or "").lower() in self._providers.get(_family(family), {})
        except ProviderNotFoundError:
            return False

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._providers.values())


__all__ = ["ProviderRegistry", "AggregateSearch"]
