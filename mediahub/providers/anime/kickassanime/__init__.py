"""
KickAssAnime Provider Package

Anime provider for kaas.am. Requires the cloudflare bypass capability.
"""

from .provider import KickAssAnime
from .config import KickAssAnimeConfig, get_default_config

__all__ = ["KickAssAnime", "KickAssAnimeConfig", "get_default_config"]
