"""
Provider Catalog - Built-in providers and default registry assembly.

``build_default_registry`` instantiates every built-in provider enabled in
configuration, in priority order, handing each the host-supplied
capabilities. A provider whose required capability is missing is skipped
with a warning unless ``strict`` is set.
"""

import logging
from typing import Dict, List, Optional, Type

from mediahub.core.capabilities import Capabilities
from mediahub.core.config_manager import ConfigManager
from mediahub.core.config_schemas import AppSettings
from mediahub.core.exceptions import ConfigurationError
from mediahub.core.registry import ProviderRegistry
from mediahub.providers.anime import KickAssAnime
from mediahub.providers.base import BaseProvider


logger = logging.getLogger(__name__)

BUILTIN_PROVIDERS: Dict[str, Type[BaseProvider]] = {
    KickAssAnime.name: KickAssAnime,
}


def build_default_registry(
    config_manager: Optional[ConfigManager] = None,
    capabilities: Optional[Capabilities] = None,
    strict: bool = False,
    skipped: Optional[List[str]] = None,
) -> ProviderRegistry:
    """
    Build a registry of the enabled built-in providers.

    Args:
        config_manager: Source of settings; built-in defaults when omitted
        capabilities: Collaborators offered to every provider
        strict: Re-raise a provider's ConfigurationError instead of skipping it
        skipped: Optional list collecting "<name>: <reason>" for skipped providers

    Raises:
        ConfigurationError: In strict mode, when a provider cannot be built
    """
    settings = config_manager.settings if config_manager else AppSettings()
    registry = ProviderRegistry(max_concurrent=settings.network.max_concurrent_providers)

    configured = settings.enabled_providers()
    for name, provider_config in configured.items():
        provider_class = BUILTIN_PROVIDERS.get(name)
        if provider_class is None:
            logger.warning(f"Configured provider {name} is not a built-in provider, ignoring")
            continue

        options = {
            "timeout": settings.network.timeout,
            "user_agent": settings.network.user_agent,
            **provider_config.provider_options(),
        }
        try:
            provider = provider_class(capabilities=capabilities, config=options)
        except ConfigurationError as e:
            if strict:
                raise
            logger.warning(f"Skipping provider {name}: {e}")
            if skipped is not None:
                skipped.append(f"{name}: {e.message}")
            continue

        registry.register(provider)

    logger.debug(f"Default registry built with {len(registry)} providers")
    return registry


__all__ = ["BUILTIN_PROVIDERS", "build_default_registry"]
