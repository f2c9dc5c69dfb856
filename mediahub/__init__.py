"""
mediahub - Normalized search and metadata across anime, manga, movie,
light novel, comic and book sources.

Every provider answers the same contract (search, info, children, content)
with the same entity model and the same error taxonomy, whichever site is
behind it.
"""

__version__ = "0.1.0"

# Package metadata
__title__ = "mediahub"
__description__ = "Provider abstraction and normalization layer for media scrapers"
__license__ = "MIT"

# Version info tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split(".")))

# Export main components for easy importing
from mediahub.core import Capabilities, ProviderRegistry
from mediahub.core.exceptions import (
    ConfigurationError,
    ExtractionError,
    MediaHubError,
    UnsupportedOperationError,
    UpstreamError,
)
from mediahub.core.models import MediaFamily, MediaStatus, SearchResult
from mediahub.providers import KickAssAnime, build_default_registry

__all__ = [
    "__version__",
    "Capabilities",
    "ProviderRegistry",
    "MediaFamily",
    "MediaStatus",
    "SearchResult",
    "KickAssAnime",
    "build_default_registry",
    "MediaHubError",
    "ConfigurationError",
    "UpstreamError",
    "ExtractionError",
    "UnsupportedOperationError",
]
