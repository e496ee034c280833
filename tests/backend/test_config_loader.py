"""Tests for healing configuration loading."""

import pytest
import yaml

from src.backend.core.config_loader import (
    ConfigurationError,
    HealingConfigLoader,
    load_initial_healing_config
)
from src.backend.core.models.recording_models import HealingConfig, HealingStrategy


class TestHealingConfigLoader:
    """Test HealingConfigLoader."""

    def test_missing_file_returns_defaults(self, tmp_path):
        loader = HealingConfigLoader(str(tmp_path / "absent.yaml"))

        assert loader.load_config() == HealingConfig()

    def test_partial_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / "healing.yaml"
        path.write_text(yaml.dump({"healing": {"confidence_threshold": 0.6}}))

        config = HealingConfigLoader(str(path)).load_config()

        assert config.confidence_threshold == 0.6
        assert config.max_retry_attempts == 3
        assert config.enabled_strategies == HealingConfig().enabled_strategies

    def test_strategies_parsed(self, tmp_path):
        path = tmp_path / "healing.yaml"
        path.write_text(yaml.dump({"healing": {"enabled_strategies": ["visual_matching"]}}))

        config = load_initial_healing_config(str(path))

        assert config.enabled_strategies == (HealingStrategy.VISUAL_MATCHING,)

    def test_out_of_range_value_rejected(self, tmp_path):
        path = tmp_path / "healing.yaml"
        path.write_text(yaml.dump({"healing": {"confidence_threshold": 1.5}}))

        with pytest.raises(ConfigurationError, match="confidence_threshold"):
            HealingConfigLoader(str(path)).load_config()

    def test_unknown_strategy_rejected(self, tmp_path):
        path = tmp_path / "healing.yaml"
        path.write_text(yaml.dump({"healing": {"enabled_strategies": ["guessing"]}}))

        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).load_config()

    def test_invalid_yaml_rejected(self, tmp_path):
        path = tmp_path / "healing.yaml"
        path.write_text("healing: [unclosed")

        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).load_config()

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "healing.yaml"
        loader = HealingConfigLoader(str(path))
        config = HealingConfig(max_retry_attempts=7, fallback_timeout=250)

        loader.save_config(config)

        assert path.exists()
        assert loader.load_config() == config

    def test_save_rejects_invalid_config(self, tmp_path):
        loader = HealingConfigLoader(str(tmp_path / "healing.yaml"))

        with pytest.raises(ConfigurationError):
            loader.save_config(HealingConfig(max_retry_attempts=-1))
