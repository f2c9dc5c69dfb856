"""
Extractor Layer - Turning server references into playable sources.

Extractors are independent of providers so one host implementation serves
every provider that embeds video from that host.
"""

from mediahub.extractors.base import VideoExtractor
from mediahub.extractors.direct import DirectFileExtractor
from mediahub.extractors.html5 import Html5PageExtractor
from mediahub.extractors.registry import ExtractorRegistry, default_extractor_registry
from mediahub.extractors.resolver import resolve_episode_sources

__all__ = [
    "VideoExtractor",
    "DirectFileExtractor",
    "Html5PageExtractor",
    "ExtractorRegistry",
    "default_extractor_registry",
    "resolve_episode_sources",
]
