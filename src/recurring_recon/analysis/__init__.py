"""Ledger analysis: monthly paycheck totals, anchor drift and item suggestions."""

from .aggregator import (
    paycheck_deposits_for_month,
    projected_paycheck_total,
    is_paycheck_like,
    is_transfer_like,
    month_bounds,
)
from .drift import AnchorSuggestion, suggest_anchor, suggest_anchors
from .suggestions import (
    SuggestedItem,
    infer_frequency,
    suggest_paychecks,
    suggest_bills,
    suggest_transfers,
)

__all__ = [
    "paycheck_deposits_for_month",
    "projected_paycheck_total",
    "is_paycheck_like",
    "is_transfer_like",
    "month_bounds",
    "AnchorSuggestion",
    "suggest_anchor",
    "suggest_anchors",
    "SuggestedItem",
    "infer_frequency",
    "suggest_paychecks",
    "suggest_bills",
    "suggest_transfers",
]
