"""
Provider Layer - Family contracts and concrete source implementations.

Concrete providers subclass one of the family parsers and implement its
underscored hooks; the public operations, validation and error wrapping
come from the base classes.
"""

from mediahub.providers.base import BaseParser, BaseProvider, upstream_operation
from mediahub.providers.parsers import (
    AnimeParser,
    BookParser,
    ComicParser,
    LightNovelParser,
    MangaParser,
    MovieParser,
)
from mediahub.providers.anime import KickAssAnime
from mediahub.providers.catalog import BUILTIN_PROVIDERS, build_default_registry

__all__ = [
    # Base Provider Architecture
    "BaseProvider",
    "BaseParser",
    "upstream_operation",
    # Family Contracts
    "AnimeParser",
    "MovieParser",
    "MangaParser",
    "LightNovelParser",
    "ComicParser",
    "BookParser",
    # Built-in Providers
    "KickAssAnime",
    "BUILTIN_PROVIDERS",
    "build_default_registry",
]
