"""Tests for parser settings."""

import logging
from decimal import Decimal

import pytest
import structlog

from pension_import.config import (
    ParserSettings,
    configure_logging,
    load_settings,
)
from pension_import.exceptions import ConfigurationError


class TestParserSettings:
    """Test suite for ParserSettings."""

    def test_default_values(self, settings):
        assert settings.log_level == "INFO"
        assert settings.max_deposit_amount == Decimal("50000")
        assert settings.max_file_size_bytes == 5 * 1024 * 1024
        assert settings.min_text_chars == 100
        assert settings.max_workers == 1

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("PENSION_IMPORT_LOG_LEVEL", "debug")
        monkeypatch.setenv("PENSION_IMPORT_MAX_DEPOSIT_AMOUNT", "40000")
        monkeypatch.setenv("PENSION_IMPORT_MAX_WORKERS", "4")

        settings = ParserSettings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.max_deposit_amount == Decimal("40000")
        assert settings.max_workers == 4

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            ParserSettings(_env_file=None, log_level="verbose")

    def test_deposit_limit_cannot_exceed_sanity_bound(self):
        with pytest.raises(ValueError):
            ParserSettings(_env_file=None, max_deposit_amount=Decimal("60000"))

        with pytest.raises(ValueError):
            ParserSettings(_env_file=None, max_deposit_amount=Decimal("0"))

    def test_max_workers_bounds(self):
        with pytest.raises(ValueError):
            ParserSettings(_env_file=None, max_workers=0)


class TestLoadSettings:
    def test_overrides(self):
        settings = load_settings(_env_file=None, max_workers=2)
        assert settings.max_workers == 2

    def test_invalid_value_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(_env_file=None, max_workers=0)

        assert exc_info.value.config_key == "max_workers"
        assert exc_info.value.recoverable is False


class TestConfigureLogging:
    def test_uses_settings_log_level(self):
        configure_logging(ParserSettings(_env_file=None, log_level="warning"))
        try:
            assert structlog.is_configured()
            config = structlog.get_config()
            assert config["wrapper_class"] is structlog.make_filtering_bound_logger(logging.WARNING)
        finally:
            structlog.reset_defaults()

    def test_loads_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("PENSION_IMPORT_LOG_LEVEL", "error")
        configure_logging()
        try:
            config = structlog.get_config()
            assert config["wrapper_class"] is structlog.make_filtering_bound_logger(logging.ERROR)
        finally:
            structlog.reset_defaults()

    def test_invalid_environment_level(self, monkeypatch):
        monkeypatch.setenv("PENSION_IMPORT_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError) as exc_info:
            configure_logging()

        assert exc_info.value.config_key == "log_level"
