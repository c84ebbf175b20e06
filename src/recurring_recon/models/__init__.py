"""Data models for recurring items and reconciliation."""

from .records import (
    FrequencyKind,
    FrequencyRule,
    ItemKind,
    StatementEntry,
    RecurringItemConfig,
    Occurrence,
    MatchStatus,
    ReconciliationResult,
    ItemError,
    AnchorSuggestion,
    ReconciliationReport,
)

__all__ = [
    "FrequencyKind",
    "FrequencyRule",
    "ItemKind",
    "StatementEntry",
    "RecurringItemConfig",
    "Occurrence",
    "MatchStatus",
    "ReconciliationResult",
    "ItemError",
    "AnchorSuggestion",
    "ReconciliationReport",
]
