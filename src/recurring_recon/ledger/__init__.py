"""Statement ledger index and name matching."""

from .names import (
    strip_account_hint,
    significant_tokens,
    name_tokens,
    normalize_name,
    tokens_match,
    names_match,
)
from .view import LedgerView

__all__ = [
    "LedgerView",
    "strip_account_hint",
    "significant_tokens",
    "name_tokens",
    "normalize_name",
    "tokens_match",
    "names_match",
]
