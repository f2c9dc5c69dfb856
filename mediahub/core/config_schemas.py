"""
Configuration Schemas - Pydantic models for configuration validation.

This module defines the data structures and validation rules for the
network, logging and per-provider settings stored in ``settings.json``.
"""

import logging
import re
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from mediahub.core.transport import DEFAULT_USER_AGENT


logger = logging.getLogger(__name__)

_SIZE_PATTERN = re.compile(r'^(\d+)([KMGT]?)B$')
_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3, "T": 1024 ** 4}


class NetworkSettings(BaseModel):
    """HTTP transport settings shared by every provider."""

    timeout: int = Field(
        default=30,
        ge=5,
        le=300,
        description="Network timeout in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="Default User-Agent header"
    )
    max_concurrent_providers: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum number of providers queried concurrently by search_all"
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level"
    )
    file: Optional[str] = Field(
        default=None,
        description="Log file path; no file logging when unset"
    )
    max_size: str = Field(
        default="10MB",
        description="Maximum log file size before rotation"
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of rotated log files to keep"
    )

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator('max_size')
    @classmethod
    def validate_max_size(cls, v: str) -> str:
        """Validate log file size format."""
        if not _SIZE_PATTERN.match(v.upper()):
            raise ValueError("Invalid size format. Use format like '10MB', '1GB'")
        return v.upper()

    @property
    def max_bytes(self) -> int:
        """``max_size`` converted to bytes."""
        number, unit = _SIZE_PATTERN.match(self.max_size).groups()
        return int(number) * _SIZE_UNITS[unit]


class ProviderConfig(BaseModel):
    """Configuration for an individual provider."""

    enabled: bool = Field(
        default=True,
        description="Whether the provider is registered at startup"
    )
    priority: int = Field(
        default=1,
        ge=1,
        le=100,
        description="Registration order within a family (lower first)"
    )
    base_url: Optional[str] = Field(
        default=None,
        description="Override for the provider's default base URL (mirrors)"
    )
    config: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific configuration"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(('http://', 'https://')):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @field_validator('config')
    @classmethod
    def validate_config(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Validate provider-specific configuration."""
        if 'timeout' in v and (not isinstance(v['timeout'], int) or v['timeout'] < 1):
            raise ValueError("timeout must be a positive integer")
        return v

    def provider_options(self) -> Dict[str, Any]:
        """Options handed to the provider constructor."""
        options = dict(self.config)
        if self.base_url:
            options['base_url'] = self.base_url
        return options


def _default_providers() -> Dict[str, ProviderConfig]:
    return {"KickAssAnime": ProviderConfig(enabled=True, priority=1)}


class AppSettings(BaseModel):
    """Main application settings container."""

    network: NetworkSettings = Field(default_factory=NetworkSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    providers: Dict[str, ProviderConfig] = Field(
        default_factory=_default_providers,
        description="Per-provider settings keyed by provider name"
    )

    @model_validator(mode='after')
    def validate_provider_priorities(self) -> 'AppSettings':
        """Warn about duplicate priorities; they only affect ordering."""
        seen: Dict[int, str] = {}
        for name, provider in self.providers.items():
            if provider.priority in seen:
                logger.warning(
                    f"Duplicate priority {provider.priority} for providers "
                    f"{name} and {seen[provider.priority]}"
                )
            seen[provider.priority] = name
        return self

    def enabled_providers(self) -> Dict[str, ProviderConfig]:
        """Enabled providers sorted by priority (lower numbers first)."""
        enabled = {name: cfg for name, cfg in self.providers.items() if cfg.enabled}
        return dict(sorted(enabled.items(), key=lambda item: item[1].priority))


__all__ = [
    "NetworkSettings",
    "LoggingSettings",
    "ProviderConfig",
    "AppSettings",
]
