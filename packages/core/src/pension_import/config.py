"""Configuration for the pension statement parser.

Pydantic Settings-based configuration with environment variable support
and defaults matching the Meitav statement format.

Usage:
    from pension_import.config import load_settings

    # Load from environment variables and .env file
    settings = load_settings()

    # Override specific settings
    settings = load_settings(max_workers=4)

Environment Variables:
    PENSION_IMPORT_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    PENSION_IMPORT_MAX_DEPOSIT_AMOUNT: Upper bound for a single deposit
    PENSION_IMPORT_MAX_FILE_SIZE_BYTES: Largest PDF accepted for parsing
    PENSION_IMPORT_MIN_TEXT_CHARS: PyPDF2 output shorter than this triggers
        the pdfplumber fallback
    PENSION_IMPORT_MAX_WORKERS: Threads used for row extraction (1 = sequential)
"""

import logging
from decimal import Decimal
from typing import Optional

import pydantic
import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_MAX_DEPOSIT_AMOUNT = Decimal("50000")
DEFAULT_MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024


class ParserSettings(BaseSettings):
    """Settings for PDF text extraction and deposit row parsing."""

    model_config = SettingsConfigDict(
        env_prefix="PENSION_IMPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    max_deposit_amount: Decimal = Field(
        default=DEFAULT_MAX_DEPOSIT_AMOUNT,
        gt=0,
        le=DEFAULT_MAX_DEPOSIT_AMOUNT,
        description="Largest amount accepted as a single monthly deposit",
    )
    max_file_size_bytes: int = Field(
        default=DEFAULT_MAX_FILE_SIZE_BYTES,
        gt=0,
        description="Largest PDF accepted for text extraction",
    )
    min_text_chars: int = Field(
        default=100,
        ge=0,
        description="Minimum PyPDF2 text length before falling back to pdfplumber",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Worker threads for row extraction; 1 runs sequentially",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper


def load_settings(**overrides) -> ParserSettings:
    """Build settings from the environment, converting validation failures.

    Raises:
        ConfigurationError: If any setting fails validation.
    """
    try:
        return ParserSettings(**overrides)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid parser configuration: {first.get('msg', 'invalid value')}",
            config_key=key,
            actual=first.get("input"),
        ) from e


def configure_logging(settings: Optional[ParserSettings] = None) -> None:
    """Configure structlog to drop events below ``settings.log_level``.

    Settings are loaded from the environment when not given.

    Raises:
        ConfigurationError: If the environment holds an invalid setting
    """
    settings = settings or load_settings()
    # log_level is validated to one of the standard level names
    numeric_level = logging.getLevelName(settings.log_level)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
