"""
Capabilities - Small protocols providers implement selectively.

Callers that only need one operation can check against these protocols
(``isinstance(provider, Searchable)``) instead of a family base class.
``Capabilities`` is the injection point for external collaborators a
provider needs at construction (HTTP transport, anti-bot bypass).
"""

from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from mediahub.core.exceptions import ConfigurationError
from mediahub.core.models import SearchResult


TResult = TypeVar("TResult", covariant=True)
TInfo = TypeVar("TInfo", covariant=True)
TChild = TypeVar("TChild", covariant=True)
TSource = TypeVar("TSource", covariant=True)

# Well-known capability names
CLOUDFLARE_BYPASS = "cloudflare_bypass"
HTTP_TRANSPORT = "http_transport"


class SourceResolution(str, Enum):
    """How a provider turns an episode id into playable sources."""

    INLINE = "inline"            # fetch_episode_sources returns sources directly
    SERVERS = "servers"          # enumerate servers, then run a VideoExtractor
    UNSUPPORTED = "unsupported"  # provider cannot produce sources


@runtime_checkable
class Identifiable(Protocol):
    """Identity metadata used for discovery and registration."""

    @property
    def name(self) -> str: ...

    @property
    def base_url(self) -> str: ...

    @property
    def logo(self) -> str: ...

    @property
    def class_path(self) -> str: ...


@runtime_checkable
class Searchable(Protocol[TResult]):
    async def search(self, query: str, page: int = 1) -> SearchResult[TResult]: ...


@runtime_checkable
class InfoFetchable(Protocol[TInfo]):
    async def fetch_info(self, media_id: str) -> TInfo: ...


@runtime_checkable
class ChildEnumerable(Protocol[TChild]):
    async def fetch_children(self, media_id: str) -> Sequence[TChild]: ...


@runtime_checkable
class SourceResolvable(Protocol[TSource]):
    async def fetch_content(self, child_id: str) -> TSource: ...


@runtime_checkable
class Transport(Protocol):
    """The HTTP collaborator: one request in, one fully read response out."""

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any: ...


@runtime_checkable
class BypassClient(Protocol):
    """Fetches pages protected by anti-automation challenges."""

    async def fetch(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
    ) -> str: ...


class Capabilities(Mapping[str, Any]):
    """
    Read-only set of named collaborators supplied by the hosting application.

    Example:
        caps = Capabilities(cloudflare_bypass=CloudscraperBypass())
        provider = KickAssAnime(capabilities=caps)
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        merged: Dict[str, Any] = dict(entries or {})
        merged.update(kwargs)
        self._entries = {k: v for k, v in merged.items() if v is not None}

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def require(self, capability: str, owner: str) -> Any:
        """
        Return a capability or fail loudly naming what is missing.

        Raises:
            ConfigurationError: If the capability was not supplied
        """
        if capability not in self._entries:
            raise ConfigurationError(
                f"{owner} requires the '{capability}' capability, which was not provided. "
                f"Supply it when constructing the provider, e.g. "
                f"Capabilities({capability}=...).",
                capability=capability,
            )
        return self._entries[capability]

    def with_entries(self, **kwargs: Any) -> "Capabilities":
        """Copy with extra/overridden entries."""
        return Capabilities(self._entries, **kwargs)

    def __repr__(self) -> str:
        return f"Capabilities({', '.join(sorted(self._entries))})"


__all__ = [
    "CLOUDFLARE_BYPASS",
    "HTTP_TRANSPORT",
    "SourceResolution",
    "Identifiable",
    "Searchable",
    "InfoFetchable",
    "ChildEnumerable",
    "SourceResolvable",
    "Transport",
    "BypassClient",
    "Capabilities",
]
