"""Recurring schedule projection and bank statement reconciliation."""

from .analysis import paycheck_deposits_for_month, suggest_anchor
from .config import ReconConfig, load_config
from .ledger import LedgerView
from .matching import ReconciliationEngine, StatementMatcher
from .models import (
    FrequencyKind,
    FrequencyRule,
    ItemKind,
    MatchStatus,
    Occurrence,
    ReconciliationReport,
    ReconciliationResult,
    RecurringItemConfig,
    StatementEntry,
)
from .schedule import project_occurrences
from .utils.exceptions import InvalidConfiguration

__version__ = "0.1.0"

__all__ = [
    "project_occurrences",
    "paycheck_deposits_for_month",
    "suggest_anchor",
    "LedgerView",
    "StatementMatcher",
    "ReconciliationEngine",
    "ReconConfig",
    "load_config",
    "FrequencyKind",
    "FrequencyRule",
    "ItemKind",
    "MatchStatus",
    "Occurrence",
    "ReconciliationReport",
    "ReconciliationResult",
    "RecurringItemConfig",
    "StatementEntry",
    "InvalidConfiguration",
]
