"""Unit tests for engine configuration."""

import logging

import pytest

from buddyquest.config import (
    BANK_REPLENISH_COOLDOWN_SECONDS,
    ROUND_SIZE,
    EngineConfig,
    configure_logging,
)


class TestEngineConfig:
    """Tests for EngineConfig defaults and validation."""

    def test_defaults_match_constants(self):
        config = EngineConfig()

        assert config.round_size == ROUND_SIZE == 5
        assert config.xp_correct == 10
        assert config.xp_wrong == 2
        assert config.feedback_pause == 1.2
        assert config.window_size == 10
        assert config.increase_threshold == 0.8
        assert config.decrease_threshold == 0.4
        assert config.bank_target == 35
        assert config.bank_minimum == 5
        assert config.replenish_batch_size == 10
        assert config.recently_shown_window == 15
        assert config.replenish_cooldown == BANK_REPLENISH_COOLDOWN_SECONDS
        assert config.mixed_rounds is True
        assert config.strict is False

    def test_rejects_empty_round(self):
        with pytest.raises(ValueError, match="round_size"):
            EngineConfig(round_size=0)

    def test_rejects_empty_window(self):
        with pytest.raises(ValueError, match="window_size"):
            EngineConfig(window_size=0)

    def test_rejects_inverted_thresholds(self):
        with pytest.raises(ValueError, match="Thresholds"):
            EngineConfig(increase_threshold=0.3, decrease_threshold=0.5)


class TestFromEnv:
    """Tests for reading configuration from the environment."""

    def test_unset_variables_keep_defaults(self):
        assert EngineConfig.from_env() == EngineConfig()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("BUDDYQUEST_ROUND_SIZE", "3")
        monkeypatch.setenv("BUDDYQUEST_REPLENISH_COOLDOWN_SECONDS", "0.5")
        monkeypatch.setenv("BUDDYQUEST_STRICT", "true")
        monkeypatch.setenv("BUDDYQUEST_MIXED_ROUNDS", "0")

        config = EngineConfig.from_env()

        assert config.round_size == 3
        assert config.replenish_cooldown == 0.5
        assert config.strict is True
        assert config.mixed_rounds is False

    def test_unparseable_value_raises(self, monkeypatch):
        monkeypatch.setenv("BUDDYQUEST_ROUND_SIZE", "five")

        with pytest.raises(ValueError, match="BUDDYQUEST_ROUND_SIZE"):
            EngineConfig.from_env()


class TestConfigureLogging:
    """Tests for the package logger setup."""

    def test_explicit_level(self):
        logger = configure_logging("debug")

        assert logger.name == "buddyquest"
        assert logger.level == logging.DEBUG

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("BUDDYQUEST_LOG_LEVEL", "WARNING")

        assert configure_logging().level == logging.WARNING

    def test_default_is_info(self):
        assert configure_logging().level == logging.INFO
