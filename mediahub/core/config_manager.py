"""
Configuration Manager - JSON-based settings and provider configuration.

Loads ``settings.json`` from the configuration directory, writes defaults
when it is missing, and backs up a corrupt file before falling back to
defaults. Writes are atomic (temp file + replace) and all access is
serialized with a lock.
"""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from mediahub.core.config_schemas import AppSettings, ProviderConfig
from mediahub.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".mediahub"


class ConfigManager:
    """
    Manages application configuration with JSON persistence and validation.

    Provides thread-safe access to configuration data with automatic
    validation and default value management.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing settings.json.
                       Defaults to ~/.mediahub if not specified.
        """
        self.config_dir = Path(config_dir or DEFAULT_CONFIG_DIR)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._settings_file = self.config_dir / "settings.json"
        self._lock = Lock()
        self._settings: Optional[AppSettings] = None

        try:
            self._settings = self._load_settings()
            logger.debug("Configuration loaded successfully")
        except OSError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}", config_path=str(self._settings_file))

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _load_settings(self) -> AppSettings:
        """Load and validate application settings."""
        if not self._settings_file.exists():
            logger.info("Settings file not found, creating default configuration")
            settings = AppSettings()
            self._save_settings(settings)
            return settings

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return AppSettings.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid settings file, using defaults: {e}")
            backup_path = self._settings_file.with_suffix('.json.backup')
            self._settings_file.replace(backup_path)
            logger.info(f"Corrupted settings backed up to {backup_path}")

            settings = AppSettings()
            self._save_settings(settings)
            return settings

    def _save_settings(self, settings: AppSettings) -> None:
        """Save settings to file with atomic write."""
        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings.model_dump(mode='json'), f, indent=2, ensure_ascii=False)
            temp_file.replace(self._settings_file)
            logger.debug("Settings saved successfully")
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigurationError(f"Failed to save settings: {e}", config_path=str(self._settings_file))

    @property
    def settings(self) -> AppSettings:
        """Get current application settings (thread-safe)."""
        with self._lock:
            if self._settings is None:
                self._settings = self._load_settings()
            return self._settings

    def get_setting(self, key_path: str, default: Any = None) -> Any:
        """
        Get a specific setting using dot notation.

        Args:
            key_path: Dot-separated path (e.g. 'network.timeout')
            default: Value returned when the path does not exist
        """
        with self._lock:
            current: Any = self._settings.model_dump() if self._settings else {}
            try:
                for key in key_path.split('.'):
                    current = current[key]
                return current
            except (KeyError, TypeError):
                return default

    def update_setting(self, key_path: str, value: Any) -> None:
        """
        Update a specific setting using dot notation.

        Raises:
            ConfigurationError: If the key path or the value is invalid
        """
        with self._lock:
            if self._settings is None:
                raise ConfigurationError("Settings not loaded")

            settings_dict = self._settings.model_dump()
            keys = key_path.split('.')
            current = settings_dict
            for key in keys[:-1]:
                if not isinstance(current, dict) or key not in current:
                    raise ConfigurationError(f"Invalid setting path: {key_path}", config_path=key_path)
                current = current[key]

            final_key = keys[-1]
            if not isinstance(current, dict) or final_key not in current:
                raise ConfigurationError(f"Invalid setting key: {final_key}", config_path=key_path)
            current[final_key] = value

            try:
                updated = AppSettings.model_validate(settings_dict)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid setting value: {e}", config_path=key_path)
            self._settings = updated
            self._save_settings(updated)
            logger.info(f"Setting updated: {key_path} = {value}")

    def get_provider_config(self, name: str) -> ProviderConfig:
        """Settings for one provider; defaults when it has no entry."""
        with self._lock:
            providers = self._settings.providers if self._settings else {}
            return providers.get(name) or ProviderConfig()

    def update_provider_config(self, name: str, config: Dict[str, Any]) -> None:
        """
        Update configuration for a specific provider.

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        with self._lock:
            if self._settings is None:
                raise ConfigurationError("Settings not loaded")

            settings_dict = self._settings.model_dump()
            settings_dict['providers'].setdefault(name, {}).update(config)

            try:
                updated = AppSettings.model_validate(settings_dict)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid provider configuration: {e}", config_path=f"providers.{name}")
            self._settings = updated
            self._save_settings(updated)
            logger.info(f"Provider configuration updated: {name}")

    def enable_provider(self, name: str) -> None:
        """Enable a provider."""
        self.update_provider_config(name, {"enabled": True})

    def disable_provider(self, name: str) -> None:
        """Disable a provider."""
        self.update_provider_config(name, {"enabled": False})

    def reload_configuration(self) -> None:
        """Reload configuration from disk."""
        with self._lock:
            logger.info("Reloading configuration from file")
            self._settings = self._load_settings()

    def reset_to_defaults(self) -> None:
        """Reset all configuration to default values."""
        with self._lock:
            logger.warning("Resetting configuration to defaults")
            self._settings = AppSettings()
            self._save_settings(self._settings)


__all__ = ["ConfigManager", "DEFAULT_CONFIG_DIR"]
