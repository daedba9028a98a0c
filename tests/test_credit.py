"""Tests for borrower credit assessment."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from loan_engine.calculators.credit import (
    calculate_credit_report,
    check_loan_eligibility,
    derive_credit_factors,
    grade_for,
    interest_rate_adjustment,
    max_recommended_loan,
)
from loan_engine.models.enums import CreditRiskLevel
from loan_engine.models.risk import CreditFactors
from loan_engine.store.ledger import LoanLedger

AS_OF = date(2024, 6, 1)


def uniform(value: int) -> CreditFactors:
    return CreditFactors(value, value, value, value, value)


class TestCreditReport:
    """Tests for the weighted credit score."""

    def test_perfect_factors(self) -> None:
        report = calculate_credit_report(uniform(100), monthly_income=10000)

        assert report.score == 850
        assert report.grade == "A"
        assert report.risk_level == CreditRiskLevel.LOW
        assert report.max_recommended_loan == Decimal("540000.00")
        assert report.interest_rate_adjustment == Decimal("-2.0")
        assert report.recommendations == []

    def test_zero_factors(self) -> None:
        report = calculate_credit_report(uniform(0))

        assert report.score == 300
        assert report.grade == "F"
        assert report.risk_level == CreditRiskLevel.VERY_HIGH
        assert report.max_recommended_loan == Decimal("0.00")
        assert len(report.recommendations) == 7

    def test_midpoint(self) -> None:
        report = calculate_credit_report(uniform(50), monthly_income=1000)

        assert report.score == 575
        assert report.grade == "E"
        assert report.max_recommended_loan == Decimal("18000.00")

    def test_weighted_score_rounds_half_up(self) -> None:
        report = calculate_credit_report(CreditFactors(70, 60, 50, 70, 70))

        # weighted 65 -> 300 + 0.65 * 550 = 657.5
        assert report.score == 658
        assert report.grade == "C"
        assert report.recommendations == []

    @pytest.mark.parametrize(
        ("score", "grade"),
        [(850, "A"), (750, "A"), (749, "B"), (700, "B"), (650, "C"), (600, "D"), (550, "E"), (549, "F")],
    )
    def test_grades(self, score: int, grade: str) -> None:
        assert grade_for(score)[0] == grade

    def test_lending_bands(self) -> None:
        assert max_recommended_loan(720, 1000) == Decimal("45000.00")
        assert max_recommended_loan(400, 1000) == Decimal("9000.00")
        assert interest_rate_adjustment(620) == Decimal("1.0")
        assert interest_rate_adjustment(549) == Decimal("4.0")


class TestDeriveCreditFactors:
    """Tests for deriving factors from loan history."""

    def test_new_borrower(self) -> None:
        result = derive_credit_factors(
            [], 10000, AS_OF - timedelta(days=400), AS_OF, employment_status="EMPLOYED", kyc_verified=True
        )

        assert result == CreditFactors(100, 100, 70, 100, 100)

    @pytest.mark.parametrize(
        ("employment", "kyc", "stability"),
        [
            ("self-employed", False, 75),
            ("Business Owner", False, 80),
            ("RETIRED", True, 80),
            ("student", False, 40),
            (None, True, 50),
        ],
    )
    def test_income_stability(self, employment, kyc: bool, stability: int) -> None:
        result = derive_credit_factors([], 10000, AS_OF, AS_OF, employment, kyc)
        assert result.income_stability == stability

    @pytest.mark.parametrize(("days", "age_points"), [(0, 40), (180, 55), (365, 70), (730, 85), (1095, 100)])
    def test_account_age(self, days: int, age_points: int) -> None:
        result = derive_credit_factors([], 10000, AS_OF - timedelta(days=days), AS_OF)
        assert result.account_age == age_points

    def test_history_and_utilization(self, ledger: LoanLedger) -> None:
        loan = ledger.register_loan("b-1", 100000, 12, 12, date(2024, 1, 15))
        ledger.disburse(loan.loan_number, disbursement_date=date(2024, 1, 15))
        ledger.record_payment(loan.loan_number, loan.schedule[0].total_due, payment_date=date(2024, 3, 26))

        result = derive_credit_factors(ledger.get_borrower_loans("b-1"), 10000, date(2020, 1, 1), AS_OF)

        # 40 days late on the first installment
        assert result.payment_history == 95
        assert result.credit_utilization == 20
        assert result.recent_inquiries == 100

    def test_many_recent_loans(self, ledger: LoanLedger) -> None:
        for _ in range(3):
            ledger.register_loan("b-2", 1000, 12, 6, date(2024, 5, 1))

        result = derive_credit_factors(ledger.get_borrower_loans("b-2"), 10000, date(2020, 1, 1), AS_OF)

        assert result.recent_inquiries == 60
        # Approved but not disbursed loans do not count as debt
        assert result.credit_utilization == 100


class TestEligibility:
    """Tests for eligibility checks."""

    @pytest.fixture
    def report(self):
        return calculate_credit_report(uniform(100), monthly_income=10000)

    def test_eligible(self, report) -> None:
        result = check_loan_eligibility(report, 50000, 1000, 1000000)

        assert result.eligible is True
        assert result.reason is None

    def test_below_min_credit_score(self, report) -> None:
        result = check_loan_eligibility(report, 50000, 1000, 1000000, min_credit_score=900)

        assert result.eligible is False
        assert "below minimum required 900" in result.reason

    def test_below_product_minimum(self, report) -> None:
        result = check_loan_eligibility(report, 500, 1000, 1000000)
        assert "below minimum 1000.00" in result.reason

    def test_above_product_maximum(self, report) -> None:
        result = check_loan_eligibility(report, 50000, 1000, 20000)
        assert "exceeds maximum 20000.00" in result.reason

    def test_above_recommended(self, report) -> None:
        result = check_loan_eligibility(report, 600000, 1000, 1000000)

        assert result.eligible is False
        assert "recommended maximum 540000.00" in result.reason
