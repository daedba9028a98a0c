"""Ledger records kept by the in-memory loan store."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from loan_engine.models.enums import FeeType, LoanStatus, PaymentMethod
from loan_engine.models.loan import LoanTerms, ScheduleEntry
from loan_engine.models.payment import PaymentAllocationResult


@dataclass
class LoanAccount:
    """A registered loan and its current repayment schedule."""

    loan_number: str
    borrower_id: str
    terms: LoanTerms
    status: LoanStatus
    schedule: list[ScheduleEntry]
    monthly_payment: Decimal
    total_interest: Decimal
    credit_score: int | None = None
    monthly_income: Decimal | None = None
    disbursement_date: date | None = None
    schedule_version: int = 1
    superseded_schedules: list[list[ScheduleEntry]] = field(default_factory=list)
    credit_balance: Decimal = Decimal("0")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def maturity_date(self) -> date:
        return self.schedule[-1].due_date

    @property
    def outstanding_balance(self) -> Decimal:
        return sum((e.remaining_due for e in self.schedule), Decimal("0"))


@dataclass
class AppliedFee:
    """Fee charged on a loan."""

    loan_number: str
    fee_type: FeeType
    amount: Decimal
    fee_id: str | None = None
    fee_name: str = ""
    due_date: date | None = None
    sequence_number: int | None = None  # schedule entry the fee is collected on
    schedule_version: int = 1
    paid_amount: Decimal = Decimal("0")
    is_paid: bool = False


@dataclass
class PenaltyRecord:
    """Late penalty assessed against a schedule entry."""

    loan_number: str
    sequence_number: int
    amount: Decimal
    days_late: int
    applied_date: date
    reason: str | None = None
    schedule_version: int = 1


@dataclass
class PaymentRecord:
    """A captured payment and the allocations it produced."""

    receipt_number: str
    loan_number: str
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    allocations: list[PaymentAllocationResult] = field(default_factory=list)
    credit: Decimal = Decimal("0")
    notes: str | None = None

    @property
    def principal_amount(self) -> Decimal:
        return sum((a.principal_applied for a in self.allocations), Decimal("0"))

    @property
    def interest_amount(self) -> Decimal:
        return sum((a.interest_applied for a in self.allocations), Decimal("0"))

    @property
    def fees_amount(self) -> Decimal:
        return sum((a.fees_applied for a in self.allocations), Decimal("0"))
