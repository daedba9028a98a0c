"""Loan terms and repayment schedule models."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class LoanTerms:
    """Contract terms a schedule is generated from."""

    principal: Decimal
    annual_rate_percent: Decimal  # e.g. Decimal("12") for 12% a year
    term_months: int
    start_date: date


@dataclass
class ScheduleEntry:
    """One periodic installment of a repayment schedule."""

    sequence_number: int  # 1..term_months
    due_date: date
    principal_due: Decimal
    interest_due: Decimal
    fees_due: Decimal
    total_due: Decimal
    principal_paid: Decimal = Decimal("0")
    interest_paid: Decimal = Decimal("0")
    fees_paid: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    is_paid: bool = False
    late_days: int = 0
    paid_date: date | None = None

    @property
    def remaining_principal(self) -> Decimal:
        return max(Decimal("0"), self.principal_due - self.principal_paid)

    @property
    def remaining_interest(self) -> Decimal:
        return max(Decimal("0"), self.interest_due - self.interest_paid)

    @property
    def remaining_fees(self) -> Decimal:
        return max(Decimal("0"), self.fees_due - self.fees_paid)

    @property
    def remaining_due(self) -> Decimal:
        return max(Decimal("0"), self.total_due - self.total_paid)


@dataclass
class AmortizationSchedule:
    """Generated schedule with summary totals."""

    terms: LoanTerms
    monthly_payment: Decimal
    total_interest: Decimal
    total_payment: Decimal
    schedule: list[ScheduleEntry] = field(default_factory=list)

    @property
    def maturity_date(self) -> date:
        return self.schedule[-1].due_date
