"""Statement matching and the reconciliation engine."""

from .engine import ReconciliationEngine
from .matcher import StatementMatcher, match, sign_agrees

__all__ = [
    "ReconciliationEngine",
    "StatementMatcher",
    "match",
    "sign_agrees",
]
