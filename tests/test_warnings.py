"""Tests for early-warning detection."""

from datetime import date

from loan_engine.analytics.warnings import (
    borrower_stress_warnings,
    deteriorating_payment_warnings,
    generate_warnings,
    maturity_warnings,
)
from loan_engine.models.enums import WarningSeverity, WarningType
from loan_engine.models.ledger import LoanAccount
from loan_engine.store.ledger import LoanLedger

START = date(2024, 1, 1)


def open_loan(ledger: LoanLedger, borrower_id: str, term_months: int = 12) -> LoanAccount:
    """1,000 a month at 0%, first installment due 2024-02-01."""
    loan = ledger.register_loan(borrower_id, 1000 * term_months, 0, term_months, START)
    ledger.disburse(loan.loan_number, disbursement_date=START)
    return loan


class TestDeterioratingPayments:
    """Tests for late and missed payment patterns."""

    def test_three_missed_is_critical(self, ledger: LoanLedger) -> None:
        loan = open_loan(ledger, "b-1")

        warnings = deteriorating_payment_warnings(ledger, date(2024, 5, 15))

        assert len(warnings) == 1
        assert warnings[0].severity == WarningSeverity.CRITICAL
        assert warnings[0].warning_type == WarningType.DETERIORATING_PAYMENTS
        assert warnings[0].loan_number == loan.loan_number
        assert warnings[0].borrower_id == "b-1"

    def test_two_missed_is_high(self, ledger: LoanLedger) -> None:
        loan = open_loan(ledger, "b-1")
        ledger.record_payment(loan.loan_number, 1000, payment_date=date(2024, 2, 1))
        ledger.record_payment(loan.loan_number, 1000, payment_date=date(2024, 3, 1))

        warnings = deteriorating_payment_warnings(ledger, date(2024, 5, 15))

        assert [w.severity for w in warnings] == [WarningSeverity.HIGH]
        assert warnings[0].description == "2 of the last 3 installments late or missed."

    def test_late_but_paid_counts(self, ledger: LoanLedger) -> None:
        loan = open_loan(ledger, "b-1")
        ledger.record_payment(loan.loan_number, 1000, payment_date=date(2024, 2, 20))
        ledger.record_payment(loan.loan_number, 1000, payment_date=date(2024, 3, 20))
        ledger.record_payment(loan.loan_number, 1000, payment_date=date(2024, 4, 1))

        warnings = deteriorating_payment_warnings(ledger, date(2024, 4, 2))

        assert len(warnings) == 1
        assert warnings[0].severity == WarningSeverity.HIGH

    def test_on_time_payer_has_no_warning(self, ledger: LoanLedger) -> None:
        loan = open_loan(ledger, "b-1")
        for month in (2, 3, 4, 5):
            ledger.record_payment(loan.loan_number, 1000, payment_date=date(2024, month, 1))

        assert deteriorating_payment_warnings(ledger, date(2024, 5, 15)) == []


class TestMaturityWarnings:
    """Tests for high balances near maturity."""

    def test_high_balance_near_maturity(self, ledger: LoanLedger) -> None:
        loan = open_loan(ledger, "b-1", term_months=3)

        warnings = maturity_warnings(ledger, date(2024, 1, 20))

        assert len(warnings) == 1
        assert warnings[0].loan_number == loan.loan_number
        assert warnings[0].severity == WarningSeverity.HIGH
        assert "100% balance remaining" in warnings[0].description

    def test_mostly_repaid_is_ignored(self, ledger: LoanLedger) -> None:
        loan = open_loan(ledger, "b-1", term_months=3)
        ledger.record_payment(loan.loan_number, 2000, payment_date=date(2024, 1, 20))

        assert maturity_warnings(ledger, date(2024, 1, 20)) == []

    def test_distant_maturity_is_ignored(self, ledger: LoanLedger) -> None:
        open_loan(ledger, "b-1", term_months=12)

        assert maturity_warnings(ledger, date(2024, 1, 20)) == []


class TestBorrowerStress:
    """Tests for borrowers overdue on several loans."""

    def test_two_overdue_loans(self, ledger: LoanLedger) -> None:
        open_loan(ledger, "b-1")
        open_loan(ledger, "b-1")
        open_loan(ledger, "b-2")

        warnings = borrower_stress_warnings(ledger, date(2024, 2, 10))

        assert len(warnings) == 1
        assert warnings[0].borrower_id == "b-1"
        assert warnings[0].loan_number is None
        assert warnings[0].warning_type == WarningType.BORROWER_STRESS

    def test_one_overdue_loan_is_ignored(self, ledger: LoanLedger) -> None:
        open_loan(ledger, "b-1")
        current = open_loan(ledger, "b-1")
        ledger.record_payment(current.loan_number, 1000, payment_date=date(2024, 2, 1))

        assert borrower_stress_warnings(ledger, date(2024, 2, 10)) == []


class TestGenerateWarnings:
    """Tests for the combined warning feed."""

    def test_most_severe_first(self, ledger: LoanLedger) -> None:
        open_loan(ledger, "b-1", term_months=3)
        partly_paid = open_loan(ledger, "b-2", term_months=12)
        ledger.record_payment(partly_paid.loan_number, 2000, payment_date=date(2024, 3, 1))

        warnings = generate_warnings(ledger, as_of=date(2024, 5, 15))

        assert warnings[0].severity == WarningSeverity.CRITICAL
        severities = [w.severity for w in warnings]
        assert severities.index(WarningSeverity.CRITICAL) < severities.index(WarningSeverity.HIGH)

    def test_empty_ledger(self, ledger: LoanLedger) -> None:
        assert generate_warnings(ledger, as_of=date(2024, 5, 15)) == []
