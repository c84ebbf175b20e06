"""Configuration loader and validation for reconciliation settings."""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import logging
import re

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Deposit descriptions treated as paychecks when no configured name matches
DEFAULT_PAYCHECK_PATTERNS = [
    r"payroll",
    r"direct\s*deposit",
    r"dir\s*dep",
    r"pay\s*con",
    r"salary",
    r"\bpaycheck\b",
    r"pershing\s*brokerage",
]

# Descriptions of account-to-account transfers, kept out of bill suggestions
DEFAULT_TRANSFER_PATTERNS = [
    r"\btransfer\s*(from|to)\b",
    r"online\s*transfer\s*ref\b",
    r"money\s*transfer\s*authorized",
    r"transfer\s*authorized\s*on\b",
    r"\bwire\s*transfer\b",
    r"\bach\s*(transfer|credit)\b",
    r"payment\s*to\s*(credit\s*card|visa|mastercard|amex|discover)",
]

# Person-to-person payments that look like transfers but are expenses
DEFAULT_TRANSFER_EXCLUDE_PATTERNS = [
    r"venmo\s*\*",
]


DEFAULT_COLUMN_ALIASES = {
    "date": ["date", "transaction date", "posting date", "trans date"],
    "description": ["description", "memo", "payee", "details", "name"],
    "amount": ["amount", "transaction amount"],
    "debit": ["debit", "debits", "withdrawal", "withdrawals"],
    "credit": ["credit", "credits", "deposit", "deposits"],
    "balance": ["balance", "running balance"],
    "category": ["category", "type"],
    "account": ["account", "account name"],
}


class StatementInputConfig(BaseModel):
    """Configuration for statement CSV parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    # Tried before the built-in formats, e.g. "%d/%m/%Y" for day-first banks
    date_format: Optional[str] = None
    column_aliases: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_COLUMN_ALIASES.items()}
    )


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    statements: StatementInputConfig = Field(default_factory=StatementInputConfig)


class MatchingSettings(BaseModel):
    """Thresholds used when pairing occurrences with statement entries."""

    amount_tolerance_percent: float = Field(default=10.0, ge=0)
    date_window_days: int = Field(default=3, ge=0)


class ScheduleSettings(BaseModel):
    """Settings for the frequency rule evaluator."""

    # Distance between the two days of a semimonthly pair
    semimonthly_offset_days: int = Field(default=15, ge=1, le=27)


def _check_regexes(patterns: list[str], label: str) -> list[str]:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"invalid {label} pattern {pattern!r}: {e}") from e
    return patterns


class PaycheckSettings(BaseModel):
    """How paycheck deposits are recognized on a statement."""

    names: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_PAYCHECK_PATTERNS))

    @field_validator("patterns")
    @classmethod
    def _check_patterns(cls, patterns: list[str]) -> list[str]:
        return _check_regexes(patterns, "paycheck")


class TransferSettings(BaseModel):
    """How internal account-to-account transfers are recognized."""

    patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_TRANSFER_PATTERNS))
    exclude_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRANSFER_EXCLUDE_PATTERNS)
    )

    @field_validator("patterns", "exclude_patterns")
    @classmethod
    def _check_patterns(cls, patterns: list[str]) -> list[str]:
        return _check_regexes(patterns, "transfer")


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "recurring_reconciliation_{date}_{time}.xlsx"
    include_timestamp: bool = True

    @field_validator("filename_template")
    @classmethod
    def _check_template(cls, template: str) -> str:
        try:
            template.format(date="", time="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"filename_template may only use {{date}} and {{time}}: {template!r}") from e
        return template

    def default_report_path(self, now: Optional[datetime] = None) -> Path:
        """
        Report path built from the filename template.

        ``{date}`` and ``{time}`` expand to the current date and time. Without
        ``include_timestamp`` they are dropped along with the separator before them.
        """
        template = self.filename_template
        if self.include_timestamp:
            now = now or datetime.now()
            return Path(template.format(date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")))
        return Path(re.sub(r"[_\-. ]?\{(date|time)\}", "", template))


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched"))
    unmatched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Unmatched"))
    amount_mismatches: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Amount Mismatches")
    )
    anchor_suggestions: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Anchor Suggestions")
    )
    errors: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Errors"))


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    # Rotating log file; receives DEBUG records whatever the console level
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for recurring-item reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    paychecks: PaycheckSettings = Field(default_factory=PaycheckSettings)
    transfers: TransferSettings = Field(default_factory=TransferSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "statements": {
                "encoding": "utf-8",
                "delimiter": ",",
                "date_format": None,
                "column_aliases": {k: list(v) for k, v in DEFAULT_COLUMN_ALIASES.items()},
            },
        },
        "matching": {
            "amount_tolerance_percent": 10.0,
            "date_window_days": 3,
        },
        "schedule": {
            "semimonthly_offset_days": 15,
        },
        "paychecks": {
            "names": [],
            "patterns": list(DEFAULT_PAYCHECK_PATTERNS),
        },
        "transfers": {
            "patterns": list(DEFAULT_TRANSFER_PATTERNS),
            "exclude_patterns": list(DEFAULT_TRANSFER_EXCLUDE_PATTERNS),
        },
        "output": {
            "excel": {
                "filename_template": "recurring_reconciliation_{date}_{time}.xlsx",
                "include_timestamp": True,
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched"},
                "unmatched": {"enabled": True, "name": "Unmatched"},
                "amount_mismatches": {"enabled": True, "name": "Amount Mismatches"},
                "anchor_suggestions": {"enabled": True, "name": "Anchor Suggestions"},
                "errors": {"enabled": True, "name": "Errors"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    yaml_content = """# Recurring schedule reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(get_default_config(), default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
