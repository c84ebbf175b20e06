"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    InvalidConfiguration,
    ConfigurationError,
    StatementParseError,
    ReportGenerationError,
)
from .logging_config import setup_logging, level_from_name, logging_from_config

__all__ = [
    "ReconciliationError",
    "InvalidConfiguration",
    "ConfigurationError",
    "StatementParseError",
    "ReportGenerationError",
    "setup_logging",
    "level_from_name",
    "logging_from_config",
]
