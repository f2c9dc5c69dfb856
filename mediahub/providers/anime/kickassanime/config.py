"""
KickAssAnime Provider Configuration

Configuration validation and defaults for the KickAssAnime provider.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://kaas.am"


class KickAssAnimeConfig(BaseModel):
    """Configuration model for the KickAssAnime provider."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Site root; the JSON API lives under /api")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    api_user_agent: str = Field(
        default="Ubuntu Chromium/34.0.1847.116 Chrome/34.0.1847.116 Safari/537.36",
        description="User agent sent through the bypass client"
    )
    poster_format: str = Field(default="webp", description="Image extension used for poster/banner URLs")

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(('http://', 'https://')):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip('/')

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 5:
            raise ValueError("Timeout must be at least 5 seconds")
        return v


def get_default_config() -> Dict[str, Any]:
    """Get default configuration for the KickAssAnime provider."""
    return KickAssAnimeConfig().model_dump()


def merge_with_defaults(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge provided config with defaults.

    Keys the model does not know about are kept so the generic provider
    options (timeout overrides, etc.) still reach BaseProvider.
    """
    merged = get_default_config()
    if config:
        merged.update({k: v for k, v in config.items() if v is not None})
    return merged
