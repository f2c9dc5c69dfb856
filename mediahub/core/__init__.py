"""
Core Layer - Entity model, normalization, transport and configuration.

This package holds everything providers and extractors share: the
normalized data model, the error taxonomy, capability protocols, the HTTP
transport, the provider registry and the configuration layer.
"""

from mediahub.core.capabilities import (
    CLOUDFLARE_BYPASS,
    HTTP_TRANSPORT,
    BypassClient,
    Capabilities,
    ChildEnumerable,
    Identifiable,
    InfoFetchable,
    Searchable,
    SourceResolution,
    SourceResolvable,
    Transport,
)
from mediahub.core.config_manager import ConfigManager
from mediahub.core.config_schemas import AppSettings, LoggingSettings, NetworkSettings, ProviderConfig
from mediahub.core.exceptions import (
    ConfigurationError,
    ExtractionError,
    MediaHubError,
    ProviderNotFoundError,
    UnsupportedOperationError,
    UpstreamError,
    ValidationError,
)
from mediahub.core.registry import AggregateSearch, ProviderRegistry
from mediahub.core.transport import HttpTransport, TransportResponse

__all__ = [
    # Capabilities
    "CLOUDFLARE_BYPASS",
    "HTTP_TRANSPORT",
    "BypassClient",
    "Capabilities",
    "ChildEnumerable",
    "Identifiable",
    "InfoFetchable",
    "Searchable",
    "SourceResolution",
    "SourceResolvable",
    "Transport",
    # Configuration Management
    "ConfigManager",
    "AppSettings",
    "LoggingSettings",
    "NetworkSettings",
    "ProviderConfig",
    # Registry
    "ProviderRegistry",
    "AggregateSearch",
    # Transport
    "HttpTransport",
    "TransportResponse",
    # Exceptions
    "MediaHubError",
    "ConfigurationError",
    "UpstreamError",
    "ExtractionError",
    "ProviderNotFoundError",
    "UnsupportedOperationError",
    "ValidationError",
]
