"""
Base Provider Interface - Identity and search contract for every source.

``BaseProvider`` carries the read-only identity a provider is registered
under; ``BaseParser`` adds the uniform ``search(query, page)`` operation.
Public operations validate their arguments, delegate to an underscored
hook implemented by the concrete provider, and turn any unexpected
failure into an UpstreamError naming the operation.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, FrozenSet, Iterator, Optional, Tuple

from mediahub.core.capabilities import HTTP_TRANSPORT, Capabilities, SourceResolution, Transport
from mediahub.core.exceptions import (
    ConfigurationError,
    MediaHubError,
    UpstreamError,
    ValidationError,
)
from mediahub.core.models import MediaFamily, MediaResult, ProviderStats, SearchResult
from mediahub.core.transport import DEFAULT_USER_AGENT, HttpTransport


logger = logging.getLogger(__name__)

_IDENTITY_FIELDS = frozenset({"name", "base_url", "logo", "class_path", "family"})


@contextmanager
def upstream_operation(operation: str, provider: str = "", url: Optional[str] = None) -> Iterator[None]:
    """
    Wrap a provider call so failures surface as ``UpstreamError``.

    Transport failures and anything unexpected become
    ``UpstreamError("failed to <operation>: <cause>")`` with the original
    exception attached; an UpstreamError keeps its url and status code.
    Other mediahub errors and NotImplementedError pass through untouched.
    """
    prefix = f"[{provider}] " if provider else ""
    try:
        yield
    except UpstreamError as e:
        raise UpstreamError(
            f"{prefix}failed to {operation}: {e}",
            url=e.url or url,
            status_code=e.status_code,
            cause=e,
            details=e.details,
        )
    except (MediaHubError, NotImplementedError):
        raise
    except Exception as e:
        raise UpstreamError(f"{prefix}failed to {operation}: {e}", url=url, cause=e)


class BaseProvider(ABC):
    """
    Identity contract every provider exposes.

    Subclasses set ``name``, ``base_url``, ``logo`` and ``family`` as class
    attributes. ``class_path`` defaults to ``"<FAMILY>.<name>"``. All
    identity fields are frozen once the instance is built.
    """

    name: str = ""
    base_url: str = ""
    logo: str = ""
    class_path: str = ""
    family: Optional[MediaFamily] = None
    languages: Tuple[str, ...] = ("en",)
    is_nsfw: bool = False
    is_working: bool = True

    # Names of Capabilities entries this provider cannot work without
    required_capabilities: FrozenSet[str] = frozenset()

    def __init__(
        self,
        transport: Optional[Transport] = None,
        capabilities: Optional[Capabilities] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the provider.

        Args:
            transport: HTTP collaborator; defaults to an HttpTransport
            capabilities: Named external collaborators supplied by the host
            config: Provider-specific configuration dictionary

        Raises:
            ConfigurationError: If identity is incomplete or a required
                capability is missing
        """
        self.config = dict(config or {})
        self.capabilities = capabilities or Capabilities()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        if not self.name:
            raise ConfigurationError(f"{self.__class__.__name__} does not declare a provider name")
        if self.family is None:
            raise ConfigurationError(f"{self.name} does not declare a media family")

        base_url = self.config.get("base_url") or self.base_url
        if not base_url:
            raise ConfigurationError(f"{self.name} does not declare a base URL")
        self.base_url = base_url.rstrip("/")
        if not self.class_path:
            self.class_path = f"{self.family.value}.{self.name}"

        for capability in sorted(self.required_capabilities):
            self.capabilities.require(capability, owner=self.name)

        self._owns_transport = False
        if transport is None:
            transport = self.capabilities.get(HTTP_TRANSPORT)
        if transport is None:
            transport = HttpTransport(
                base_url=self.base_url,
                timeout=self.config.get("timeout", 30),
                user_agent=self.config.get("user_agent", DEFAULT_USER_AGENT),
            )
            self._owns_transport = True
        self.transport = transport

        self._frozen = True

    def __setattr__(self, key: str, value: Any) -> None:
        if key in _IDENTITY_FIELDS and self.__dict__.get("_frozen", False):
            raise AttributeError(f"{key} is read-only on {self.__class__.__name__}")
        super().__setattr__(key, value)

    @property
    def stats(self) -> ProviderStats:
        """Identity summary used by registries and listings."""
        return ProviderStats(
            name=self.name,
            base_url=self.base_url,
            logo=self.logo,
            class_path=self.class_path,
            family=self.family,
            languages=self.languages,
            is_nsfw=self.is_nsfw,
            is_working=self.is_working,
        )

    def _operation(self, operation: str, url: Optional[str] = None):
        """Shorthand for ``upstream_operation`` tagged with this provider."""
        return upstream_operation(operation, provider=self.name, url=url)

    @staticmethod
    def _require_id(value: Any, field_name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field_name} must be a non-empty string", field_name=field_name, invalid_value=value)
        return value.strip()

    async def close(self) -> None:
        """Release the transport if this provider created it."""
        if self._owns_transport and hasattr(self.transport, "close"):
            await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __str__(self) -> str:
        return f"{self.name} ({self.class_path})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', base_url='{self.base_url}')"


class BaseParser(BaseProvider):
    """Adds the paginated search contract shared by every family."""

    async def search(self, query: str, page: int = 1) -> SearchResult:
        """
        Search the source.

        Args:
            query: Non-empty search text
            page: 1-based page number

        Returns:
            Envelope of summary records in upstream order

        Raises:
            ValidationError: On an empty query or page < 1 (before any I/O)
            UpstreamError: If the source cannot be reached or parsed
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Search query cannot be empty", field_name="query", invalid_value=query)
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValidationError("Page must be an integer >= 1", field_name="page", invalid_value=page)

        clean_query = query.strip()
        self.logger.debug(f"Searching {self.name} for '{clean_query}' (page {page})")
        with self._operation(f"search for '{clean_query}'"):
            result = await self._search(clean_query, page)
            if not isinstance(result, SearchResult):
                result = SearchResult.model_validate(result)
        self.logger.debug(f"{self.name} returned {len(result.results)} results for '{clean_query}'")
        return result

    @abstractmethod
    async def _search(self, query: str, page: int) -> SearchResult[MediaResult]:
        """Provider hook for ``search``; query is already stripped and validated."""


__all__ = [
    "BaseProvider",
    "BaseParser",
    "SourceResolution",
    "upstream_operation",
]
