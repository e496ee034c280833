"""Loading of the initial healing policy that seeds a recording session."""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from .models.recording_models import HealingConfig, HealingStrategy
from .config import settings
from .logging_config import get_recording_logger

logger = get_recording_logger("config")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


class HealingConfigLoader:
    """Loads and validates the process-start healing policy."""

    DEFAULT_CONFIG = {
        "healing": HealingConfig().to_dict()
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config loader with optional custom path."""
        self.config_path = Path(config_path or settings.HEALING_CONFIG_PATH)

    def load_config(self) -> HealingConfig:
        """Load and validate the healing policy.

        Returns:
            HealingConfig: Validated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            config_data = self._load_config_file()
            healing_config = HealingConfig.from_dict(config_data.get("healing", {}))
            self._validate_config(healing_config)

            logger.info(f"Loaded healing configuration from {self.config_path}")
            return healing_config

        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Failed to load healing configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}") from e

    def save_config(self, config: HealingConfig) -> None:
        """Save configuration to file.

        Args:
            config: Configuration to save

        Raises:
            ConfigurationError: If saving fails
        """
        try:
            self._validate_config(config)

            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.dump({"healing": config.to_dict()}, f, default_flow_style=False, indent=2)

            logger.info(f"Saved healing configuration to {self.config_path}")

        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Failed to save healing configuration: {e}")
            raise ConfigurationError(f"Configuration saving failed: {e}") from e

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file or return defaults."""
        if not self.config_path.exists():
            logger.info(f"Config file {self.config_path} not found, using defaults")
            return self._deep_merge({}, self.DEFAULT_CONFIG)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError("Config file must contain a mapping at the top level")

        return self._deep_merge(self._deep_merge({}, self.DEFAULT_CONFIG), config_data)

    def _validate_config(self, config: HealingConfig) -> None:
        """Validate configuration values.

        Only values arriving from a file are checked here; updates made
        through a running session are applied as given.
        """
        errors = []

        if not 0.0 <= config.confidence_threshold <= 1.0:
            errors.append("confidence_threshold must be between 0.0 and 1.0")
        if config.max_retry_attempts < 0:
            errors.append("max_retry_attempts must be non-negative")
        if config.fallback_timeout < 0:
            errors.append("fallback_timeout must be non-negative")
        strategies = config.enabled_strategies
        if not isinstance(strategies, tuple) or not all(isinstance(s, HealingStrategy) for s in strategies):
            errors.append("enabled_strategies must contain HealingStrategy values")

        if errors:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}")

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_initial_healing_config(config_path: Optional[str] = None) -> HealingConfig:
    """Read the healing policy a new session provider starts with."""
    return HealingConfigLoader(config_path).load_config()
