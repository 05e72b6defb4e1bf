# ============================================================================
# mime_text/config_manager.py
# ============================================================================
"""
Configuration management for the MIME tree builder and body selector.
Values can be overridden through ``PARSER_*`` environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class SecurityConfiguration:
    """Limits applied while decoding untrusted input."""
    max_file_size_mb: int = 50
    # None disables the ceiling
    max_nested_depth: Optional[int] = 10


@dataclass(frozen=True)
class ProcessingConfiguration:
    """Decoding and text extraction settings."""
    html_parser: str = "html.parser"
    detect_charset: bool = True
    charset_detection_confidence: float = 0.7


@dataclass(frozen=True)
class LoggingConfiguration:
    """Logging configuration settings."""
    level: str = "INFO"
    log_part_failures: bool = True


@dataclass(frozen=True)
class ParserConfiguration:
    """Complete configuration combining all sub-configurations."""
    security: SecurityConfiguration = field(default_factory=SecurityConfiguration)
    processing: ProcessingConfiguration = field(default_factory=ProcessingConfiguration)
    logging: LoggingConfiguration = field(default_factory=LoggingConfiguration)

    def validate(self) -> None:
        """Validate configuration values and raise ValueError listing every problem."""
        errors = []

        if self.security.max_file_size_mb <= 0:
            errors.append("max_file_size_mb must be positive")
        if self.security.max_nested_depth is not None and self.security.max_nested_depth <= 0:
            errors.append("max_nested_depth must be positive or None")

        if not self.processing.html_parser:
            errors.append("html_parser must not be empty")
        if not 0.0 <= self.processing.charset_detection_confidence <= 1.0:
            errors.append("charset_detection_confidence must be between 0 and 1")

        if self.logging.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"unknown log level {self.logging.level!r}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")


def get_config_from_env() -> ParserConfiguration:
    """Load configuration from environment variables."""

    security_config = SecurityConfiguration(
        max_file_size_mb=_get_int_env("PARSER_MAX_FILE_SIZE_MB", 50),
        # 0 switches the depth ceiling off
        max_nested_depth=_get_int_env("PARSER_MAX_NESTED_DEPTH", 10) or None,
    )

    processing_config = ProcessingConfiguration(
        html_parser=os.getenv("PARSER_HTML_PARSER", "html.parser"),
        detect_charset=_get_bool_env("PARSER_DETECT_CHARSET", True),
        charset_detection_confidence=_get_float_env("PARSER_CHARSET_CONFIDENCE", 0.7),
    )

    logging_config = LoggingConfiguration(
        level=os.getenv("PARSER_LOG_LEVEL", "INFO").upper(),
        log_part_failures=_get_bool_env("PARSER_LOG_PART_FAILURES", True),
    )

    config = ParserConfiguration(
        security=security_config,
        processing=processing_config,
        logging=logging_config
    )

    config.validate()

    return config


def get_default_config() -> ParserConfiguration:
    """Get default configuration with factory defaults."""
    config = ParserConfiguration()
    config.validate()
    return config


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    else:
        return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float value from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default
