"""Anime providers."""

from mediahub.providers.anime.kickassanime import KickAssAnime

__all__ = ["KickAssAnime"]
