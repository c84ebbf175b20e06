"""
Name normalization shared by statement matching and anchor drift resolution.

A configured item name such as ``"Quest Diagnostics (Checking)"`` and a
statement description such as ``"QUEST DIAGNOS DIR DEP 0123"`` count as the
same item when the significant tokens of one are all contained in the other.
"""

from typing import Iterable, Sequence
import re

# Parenthetical account hints, e.g. "(Checking)" or "(Way2Save)"
_ACCOUNT_HINT = re.compile(r"\([^)]*\)")
_TOKEN = re.compile(r"[^\W_]+")

NOISE_WORDS = frozenset({"the", "of", "and", "to", "from", "for", "a", "an", "on", "at"})

# Words that describe the payment channel rather than the payee
CHANNEL_WORDS = frozenset(
    {"ach", "debit", "credit", "dir", "dep", "direct", "deposit", "pos", "purchase",
     "payment", "online", "recurring", "ppd", "web", "id", "authorized"}
)


def strip_account_hint(name: str) -> str:
    """Remove parenthetical account hints and collapse whitespace."""
    return " ".join(_ACCOUNT_HINT.sub(" ", name or "").split())


def significant_tokens(text: str, case_sensitive: bool = False) -> tuple[str, ...]:
    """
    Split text into the tokens that identify a payee.

    Drops noise words, pure numbers (reference and card numbers) and
    single characters. Order is preserved and duplicates removed.
    """
    if not case_sensitive:
        text = (text or "").lower()

    tokens: list[str] = []
    for token in _TOKEN.findall(text or ""):
        if len(token) < 2 or token.isdigit() or token.lower() in NOISE_WORDS:
            continue
        if token not in tokens:
            tokens.append(token)
    return tuple(tokens)


def name_tokens(name: str, case_sensitive: bool = False) -> tuple[str, ...]:
    """Significant tokens of a configured item name, without its account hint."""
    return significant_tokens(strip_account_hint(name), case_sensitive)


def normalize_name(name: str) -> str:
    """Canonical form of a name, used as a grouping key."""
    return " ".join(name_tokens(name))


def _contained(needles: Sequence[str], haystack: Iterable[str]) -> bool:
    # Prefix containment lets "diagnos" stand for "diagnostics"
    haystack = tuple(haystack)
    return all(any(word.startswith(needle) for word in haystack) for needle in needles)


def tokens_match(tokens: Sequence[str], description: str, case_sensitive: bool = False) -> bool:
    """
    True when a description names the item the tokens were taken from.

    Either every item token appears in the description, or, for abbreviated
    descriptions, every description token appears in the item tokens. The
    reverse direction ignores payment channel words such as "DIR DEP" and
    needs at least two payee tokens unless the item itself has only one, so
    a bare "DEPOSIT" does not match "Direct Deposit".
    """
    if not tokens:
        return False

    description_tokens = significant_tokens(description, case_sensitive)
    if not description_tokens:
        return False

    if _contained(tokens, description_tokens):
        return True

    payee_tokens = [t for t in description_tokens if t.lower() not in CHANNEL_WORDS]
    if payee_tokens and len(payee_tokens) >= min(2, len(tokens)):
        return _contained(payee_tokens, tokens)
    return False


def names_match(item_name: str, description: str, case_sensitive: bool = False) -> bool:
    """Whether a statement description refers to the named recurring item."""
    return tokens_match(name_tokens(item_name, case_sensitive), description, case_sensitive)
