"""Shared fixtures for the recurring_recon test suite."""

from datetime import date
from decimal import Decimal
import itertools

import pytest

from recurring_recon.config import ReconConfig
from recurring_recon.ledger.view import LedgerView
from recurring_recon.models.records import (
    FrequencyRule,
    ItemKind,
    RecurringItemConfig,
    StatementEntry,
)


@pytest.fixture
def make_entry():
    """Factory for statement entries with sequential ids."""
    counter = itertools.count(1)

    def _make(day: date, description: str, amount, account=None, entry_id=None) -> StatementEntry:
        return StatementEntry(
            id=entry_id or f"e{next(counter):03d}",
            date=day,
            description=description,
            amount=Decimal(str(amount)),
            account=account,
        )

    return _make


@pytest.fixture
def make_item():
    """Factory for recurring item configurations."""

    def _make(
        item_id: str,
        name: str,
        amount,
        frequency,
        anchor: date,
        kind: ItemKind = ItemKind.BILL,
    ) -> RecurringItemConfig:
        return RecurringItemConfig(
            id=item_id,
            name=name,
            amount=Decimal(str(amount)),
            frequency=FrequencyRule.parse(frequency),
            anchor_date=anchor,
            kind=kind,
        )

    return _make


@pytest.fixture
def january_ledger(make_entry):
    """A month of checking activity with two paychecks and a few bills."""
    return LedgerView(
        [
            make_entry(date(2024, 1, 2), "ACME CORP PAYROLL PPD 000111", "1200.00"),
            make_entry(date(2024, 1, 5), "CITY POWER & LIGHT ONLINE PMT", "-84.20"),
            make_entry(date(2024, 1, 10), "NETFLIX.COM 866-579-7172", "-15.49"),
            make_entry(date(2024, 1, 12), "TRANSFER FROM SAVINGS", "300.00"),
            make_entry(date(2024, 1, 16), "ACME CORP PAYROLL PPD 000112", "1200.00"),
            make_entry(date(2024, 1, 16), "STATE FARM INSURANCE", "-132.00"),
            make_entry(date(2024, 1, 30), "ACME CORP PAYROLL PPD 000113", "1200.00"),
        ]
    )


@pytest.fixture
def default_config():
    return ReconConfig()
