"""Pytest configuration and fixtures."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from loan_engine.calculators.amortization import generate_schedule
from loan_engine.models.loan import AmortizationSchedule, ScheduleEntry
from loan_engine.store.ledger import LoanLedger


@pytest.fixture(autouse=True)
def restore_root_handlers():
    """setup_logging() swaps root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def start_date() -> date:
    """Loan start date."""
    return date(2024, 1, 15)


@pytest.fixture
def schedule(start_date: date) -> AmortizationSchedule:
    """100,000 at 12% over 12 months."""
    return generate_schedule(Decimal("100000"), Decimal("12"), 12, start_date)


@pytest.fixture
def entry() -> ScheduleEntry:
    """Single unpaid entry: 800 principal, 200 interest, 50 fees."""
    return ScheduleEntry(
        sequence_number=1,
        due_date=date(2024, 2, 15),
        principal_due=Decimal("800.00"),
        interest_due=Decimal("200.00"),
        fees_due=Decimal("50.00"),
        total_due=Decimal("1050.00"),
    )


def _counter(prefix: str):
    count = 0

    def factory() -> str:
        nonlocal count
        count += 1
        return f"{prefix}-TEST-{count:05d}"

    return factory


@pytest.fixture
def ledger() -> LoanLedger:
    """Fresh ledger with predictable identifiers."""
    return LoanLedger(
        loan_number_factory=_counter("LN"),
        receipt_number_factory=_counter("RCP"),
    )


@pytest.fixture
def sample_borrower_id() -> str:
    """Sample borrower ID."""
    return "borrower-test-001"
