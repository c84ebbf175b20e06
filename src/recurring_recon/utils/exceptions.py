"""Custom exceptions for the recurring-schedule reconciliation package."""

from typing import Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class InvalidConfiguration(ReconciliationError):
    """A recurring item has an unusable frequency rule or anchor date."""

    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.item_id = item_id


class ConfigurationError(ReconciliationError):
    """Error in the application configuration file."""

    pass


class StatementParseError(ReconciliationError):
    """Error parsing a statement CSV file or record."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
