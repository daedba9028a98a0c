"""In-memory loan ledger with referential integrity.

Plays the part of the persistence layer around the calculators: it owns
loan accounts and their schedules, serializes payment allocation per loan,
and keeps payments, fees, penalties and risk scores indexed by loan number.
Not thread-safe; use one ledger per writer.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Container, Iterable

from loan_engine.calculators.allocation import allocate_across_schedule, assess_late_penalty
from loan_engine.calculators.amortization import generate_schedule, generate_schedule_for, validate_loan_terms
from loan_engine.calculators.fees import (
    calculate_days_overdue,
    calculate_disbursement_fees,
    penalty_tier,
    tiered_penalty,
)
from loan_engine.calculators.risk import derive_risk_factors, score_risk
from loan_engine.config import LedgerConfig, PenaltyDefaults
from loan_engine.exceptions import (
    DuplicateIdentifierError,
    InvalidEntityStateError,
    LoanEngineError,
    LoanNotFoundError,
)
from loan_engine.identifiers import generate_loan_number, generate_receipt_number
from loan_engine.models.enums import LoanStatus, PaymentMethod
from loan_engine.models.fees import FeeSpec, PenaltyConfig, PercentagePenalty
from loan_engine.models.ledger import AppliedFee, LoanAccount, PaymentRecord, PenaltyRecord
from loan_engine.models.payment import PaymentAllocationResult
from loan_engine.models.risk import RiskScore
from loan_engine.money import ZERO, Numeric, to_money

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_DAYS = 90
AT_RISK_LIMIT = 50


@dataclass
class LoanLedger:
    """In-memory store for loan accounts and their repayment activity."""

    config: LedgerConfig = field(default_factory=LedgerConfig)
    penalty_defaults: PenaltyDefaults = field(default_factory=PenaltyDefaults)
    loan_number_factory: Callable[[], str] = generate_loan_number
    receipt_number_factory: Callable[[], str] = generate_receipt_number

    # Primary entities
    loans: dict[str, LoanAccount] = field(default_factory=dict)
    payments: dict[str, PaymentRecord] = field(default_factory=dict)
    fees: list[AppliedFee] = field(default_factory=list)
    penalties: list[PenaltyRecord] = field(default_factory=list)
    risk_scores: dict[str, RiskScore] = field(default_factory=dict)

    # Relationship indexes
    _borrower_loans: dict[str, list[str]] = field(default_factory=dict)
    _loan_payments: dict[str, list[str]] = field(default_factory=dict)
    _loan_fees: dict[str, list[int]] = field(default_factory=dict)
    _loan_penalties: dict[str, list[int]] = field(default_factory=dict)

    def _unique_identifier(self, factory: Callable[[], str], taken: Container[str]) -> str:
        for _ in range(self.config.max_identifier_retries):
            candidate = factory()
            if candidate not in taken:
                return candidate
            logger.warning("Identifier collision on %s, retrying", candidate)
        raise DuplicateIdentifierError(
            f"Could not generate a unique identifier after {self.config.max_identifier_retries} attempts"
        )

    def register_loan(
        self,
        borrower_id: str,
        principal: Numeric,
        annual_rate_percent: Numeric,
        term_months: int,
        start_date: date,
        credit_score: int | None = None,
        monthly_income: Numeric | None = None,
        loan_number: str | None = None,
    ) -> LoanAccount:
        """Approve a loan: validate terms, generate its schedule and store it.

        Raises
        ------
        InvalidLoanTermsError
            If the terms are invalid.
        DuplicateIdentifierError
            If ``loan_number`` is already registered, or no unique number
            could be generated.
        """
        if loan_number is None:
            loan_number = self._unique_identifier(self.loan_number_factory, self.loans)
        elif loan_number in self.loans:
            raise DuplicateIdentifierError(f"Loan {loan_number} already exists")

        result = generate_schedule(principal, annual_rate_percent, term_months, start_date)

        loan = LoanAccount(
            loan_number=loan_number,
            borrower_id=borrower_id,
            terms=result.terms,
            status=LoanStatus.APPROVED,
            schedule=result.schedule,
            monthly_payment=result.monthly_payment,
            total_interest=result.total_interest,
            credit_score=credit_score,
            monthly_income=to_money(monthly_income) if monthly_income is not None else None,
            created_at=datetime.now(),
        )

        self.loans[loan_number] = loan
        self._borrower_loans.setdefault(borrower_id, []).append(loan_number)
        self._loan_payments[loan_number] = []
        self._loan_fees[loan_number] = []
        self._loan_penalties[loan_number] = []

        logger.info(
            "Registered loan %s: %s over %d months, installment %s",
            loan_number,
            loan.terms.principal,
            loan.terms.term_months,
            loan.monthly_payment,
            extra={"extra": {"loan_number": loan_number, "borrower_id": borrower_id}},
        )
        return loan

    def get_loan(self, loan_number: str) -> LoanAccount:
        """Get a loan by number."""
        try:
            return self.loans[loan_number]
        except KeyError:
            raise LoanNotFoundError(f"Loan {loan_number} not found") from None

    def disburse(
        self,
        loan_number: str,
        fees: Iterable[FeeSpec] = (),
        disbursement_date: date | None = None,
    ) -> list[AppliedFee]:
        """Disburse an approved loan and charge its disbursement fees once.

        Fees are folded into the first installment's fee bucket, so payment
        allocation collects them ahead of interest and principal.
        """
        loan = self.get_loan(loan_number)
        if loan.status != LoanStatus.APPROVED:
            raise InvalidEntityStateError(f"Loan {loan_number} is {loan.status.value}, expected APPROVED")

        if disbursement_date is None:
            disbursement_date = date.today()

        existing = [f.fee_id for f in self.get_loan_fees(loan_number) if f.fee_id]
        first = loan.schedule[0]
        applied = []
        for fee, amount in calculate_disbursement_fees(loan.terms.principal, fees, existing):
            record = AppliedFee(
                loan_number=loan_number,
                fee_type=fee.fee_type,
                amount=amount,
                fee_id=fee.fee_id,
                fee_name=fee.name,
                due_date=disbursement_date,
                sequence_number=first.sequence_number,
                schedule_version=loan.schedule_version,
            )
            self._loan_fees[loan_number].append(len(self.fees))
            self.fees.append(record)
            applied.append(record)

        loan.status = LoanStatus.ACTIVE
        loan.disbursement_date = disbursement_date
        loan.updated_at = datetime.now()

        if applied:
            charged = sum((f.amount for f in applied), ZERO)
            first.fees_due = to_money(first.fees_due + charged)
            first.total_due = to_money(first.principal_due + first.interest_due + first.fees_due)
            logger.info("Disbursed %s with %d fees totalling %s", loan_number, len(applied), charged)
        return applied

    def record_payment(
        self,
        loan_number: str,
        amount: Numeric,
        payment_date: date | None = None,
        method: PaymentMethod = PaymentMethod.CASH,
        notes: str | None = None,
    ) -> PaymentRecord:
        """Capture a payment and allocate it across the schedule, oldest first.

        Any surplus after every entry is settled is kept on the loan as
        ``credit_balance`` and on the record as ``credit``.

        Raises
        ------
        InvalidPaymentError
            If ``amount`` is not positive.
        InvalidEntityStateError
            If the loan is not active.
        """
        loan = self.get_loan(loan_number)
        if loan.status != LoanStatus.ACTIVE:
            raise InvalidEntityStateError(f"Loan {loan_number} is {loan.status.value}, payments need ACTIVE")

        if payment_date is None:
            payment_date = date.today()

        receipt_number = self._unique_identifier(self.receipt_number_factory, self.payments)
        allocations, surplus = allocate_across_schedule(
            amount, loan.schedule, as_of=payment_date, epsilon=self.config.payment_epsilon
        )

        record = PaymentRecord(
            receipt_number=receipt_number,
            loan_number=loan_number,
            amount=to_money(amount),
            payment_date=payment_date,
            method=method,
            allocations=allocations,
            credit=surplus,
            notes=notes,
        )
        self.payments[receipt_number] = record
        self._loan_payments[loan_number].append(receipt_number)

        self._settle_fees(loan, allocations)
        loan.credit_balance += surplus
        if all(e.is_paid for e in loan.schedule):
            loan.status = LoanStatus.PAID_OFF
        loan.updated_at = datetime.now()

        logger.info(
            "Payment %s of %s on %s: principal %s, interest %s, fees %s, credit %s",
            receipt_number,
            record.amount,
            loan_number,
            record.principal_amount,
            record.interest_amount,
            record.fees_amount,
            surplus,
            extra={"extra": {"loan_number": loan_number, "receipt_number": receipt_number}},
        )
        return record

    def _settle_fees(self, loan: LoanAccount, allocations: list[PaymentAllocationResult]) -> None:
        """Credit fee-bucket payments to the disbursement fees carried on each entry."""
        for allocation in allocations:
            left = allocation.fees_applied
            for fee in self.get_loan_fees(loan.loan_number):
                if left <= 0:
                    break
                if (
                    fee.is_paid
                    or fee.schedule_version != loan.schedule_version
                    or fee.sequence_number != allocation.sequence_number
                ):
                    continue
                taken = min(left, fee.amount - fee.paid_amount)
                fee.paid_amount += taken
                left -= taken
                fee.is_paid = fee.paid_amount >= fee.amount

    def assess_penalties(
        self,
        loan_number: str,
        as_of: date | None = None,
        penalty: PenaltyConfig | None = None,
    ) -> list[PenaltyRecord]:
        """Charge late penalties on overdue entries.

        Each entry of the current schedule version is penalised at most
        once; later runs only refresh ``late_days``. Uses the configured default percentage penalty when
        ``penalty`` is None.
        """
        loan = self.get_loan(loan_number)
        if as_of is None:
            as_of = date.today()
        if penalty is None:
            penalty = PercentagePenalty(
                percentage=self.penalty_defaults.percentage,
                grace_period_days=self.penalty_defaults.grace_period_days,
            )

        penalised = {
            p.sequence_number
            for p in self.get_loan_penalties(loan_number)
            if p.schedule_version == loan.schedule_version
        }
        records = []
        for entry in loan.schedule:
            if entry.is_paid or entry.due_date >= as_of:
                continue
            if entry.sequence_number in penalised:
                entry.late_days = calculate_days_overdue(entry.due_date, as_of)
                continue
            charged = assess_late_penalty(entry, penalty, as_of)
            if charged <= 0:
                continue
            record = PenaltyRecord(
                loan_number=loan_number,
                sequence_number=entry.sequence_number,
                amount=charged,
                days_late=entry.late_days,
                applied_date=as_of,
                reason=f"{penalty.penalty_type.value} late penalty",
                schedule_version=loan.schedule_version,
            )
            self._loan_penalties[loan_number].append(len(self.penalties))
            self.penalties.append(record)
            records.append(record)

        if records:
            logger.info(
                "Assessed %d penalties on %s totalling %s",
                len(records),
                loan_number,
                sum((r.amount for r in records), ZERO),
            )
        return records

    def quote_tiered_penalties(self, loan_number: str, as_of: date | None = None) -> list[dict[str, Any]]:
        """Escalating penalty each overdue entry would attract, without charging it."""
        loan = self.get_loan(loan_number)
        if as_of is None:
            as_of = date.today()

        quotes = []
        for entry in loan.schedule:
            if entry.is_paid or entry.due_date >= as_of:
                continue
            days = calculate_days_overdue(entry.due_date, as_of)
            quotes.append(
                {
                    "sequence_number": entry.sequence_number,
                    "days_overdue": days,
                    "tier": penalty_tier(days),
                    "amount": tiered_penalty(
                        entry.remaining_due, days, self.penalty_defaults.tiered_base_percentage
                    ),
                }
            )
        return quotes

    def reschedule(
        self,
        loan_number: str,
        start_date: date,
        annual_rate_percent: Numeric | None = None,
        term_months: int | None = None,
    ) -> LoanAccount:
        """Replace the schedule with a fresh one over the outstanding principal.

        The current schedule is kept in ``superseded_schedules``; it is never
        edited. Arrears carry over as the first new installment's fees: every
        unpaid fee or penalty, plus unpaid interest on installments due on or
        before ``start_date``. Interest not yet due is dropped with the old
        schedule.
        """
        loan = self.get_loan(loan_number)
        if loan.status not in (LoanStatus.APPROVED, LoanStatus.ACTIVE):
            raise InvalidEntityStateError(f"Loan {loan_number} is {loan.status.value} and cannot be rescheduled")

        unpaid = [e for e in loan.schedule if not e.is_paid]
        outstanding = sum((e.remaining_principal for e in unpaid), ZERO)
        if outstanding <= 0:
            raise InvalidEntityStateError(f"Loan {loan_number} has no outstanding principal")

        paid_count = sum(1 for e in loan.schedule if e.is_paid)
        terms = validate_loan_terms(
            outstanding,
            loan.terms.annual_rate_percent if annual_rate_percent is None else annual_rate_percent,
            term_months if term_months is not None else loan.terms.term_months - paid_count,
            start_date,
        )
        result = generate_schedule_for(terms)
        arrears = sum((e.remaining_fees for e in unpaid), ZERO) + sum(
            (e.remaining_interest for e in unpaid if e.due_date <= start_date), ZERO
        )
        first = result.schedule[0]
        if arrears > 0:
            first.fees_due = to_money(arrears)
            first.total_due = to_money(first.principal_due + first.interest_due + first.fees_due)

        loan.superseded_schedules.append(loan.schedule)
        loan.schedule = result.schedule
        loan.terms = result.terms
        loan.monthly_payment = result.monthly_payment
        loan.total_interest = result.total_interest
        loan.schedule_version += 1
        loan.updated_at = datetime.now()

        # Fees still owed are now collected on the first new installment
        for fee in self.get_loan_fees(loan_number):
            if not fee.is_paid and fee.schedule_version == loan.schedule_version - 1:
                fee.schedule_version = loan.schedule_version
                fee.sequence_number = first.sequence_number

        logger.info(
            "Rescheduled %s (version %d): %s over %d months, arrears %s carried",
            loan_number,
            loan.schedule_version,
            terms.principal,
            terms.term_months,
            to_money(arrears),
            extra={"extra": {"loan_number": loan_number}},
        )
        return loan

    def refresh_status(self, loan_number: str, as_of: date | None = None) -> LoanStatus:
        """Move an active loan to PAID_OFF or DEFAULTED based on its schedule."""
        loan = self.get_loan(loan_number)
        if as_of is None:
            as_of = date.today()
        if loan.status != LoanStatus.ACTIVE:
            return loan.status

        if all(e.is_paid for e in loan.schedule):
            loan.status = LoanStatus.PAID_OFF
        else:
            worst = max(
                (calculate_days_overdue(e.due_date, as_of) for e in loan.schedule if not e.is_paid),
                default=0,
            )
            if worst > DEFAULT_THRESHOLD_DAYS:
                loan.status = LoanStatus.DEFAULTED
        return loan.status

    def score_loan(self, loan_number: str, as_of: date | None = None) -> RiskScore:
        """Score a loan's risk and keep the latest score."""
        loan = self.get_loan(loan_number)
        if as_of is None:
            as_of = date.today()
        factors = derive_risk_factors(
            loan.schedule,
            as_of=as_of,
            start_date=loan.disbursement_date or loan.terms.start_date,
            credit_score=loan.credit_score,
            monthly_income=loan.monthly_income,
            on_time_tolerance_days=self.config.on_time_tolerance_days,
            default_credit_score=self.config.default_credit_score,
        )
        risk = score_risk(factors, self.config.predicted_default_threshold)
        self.risk_scores[loan_number] = risk
        return risk

    def score_all_active_loans(self, as_of: date | None = None) -> dict[str, int]:
        """Batch-score every active loan; failures are logged and skipped."""
        active = [n for n, loan in self.loans.items() if loan.status == LoanStatus.ACTIVE]
        scored = 0
        for loan_number in active:
            try:
                self.score_loan(loan_number, as_of)
                scored += 1
            except (LoanEngineError, ArithmeticError):
                logger.exception("Failed to score loan %s", loan_number)

        logger.info("Scored %d of %d active loans", scored, len(active))
        return {"scored": scored, "total": len(active)}

    def get_at_risk_loans(self, threshold: int | None = None) -> list[tuple[LoanAccount, RiskScore]]:
        """Loans whose latest score is at or above ``threshold``, riskiest first."""
        if threshold is None:
            threshold = self.config.at_risk_threshold
        at_risk = [
            (self.loans[n], score) for n, score in self.risk_scores.items() if score.score >= threshold
        ]
        at_risk.sort(key=lambda pair: pair[1].score, reverse=True)
        return at_risk[:AT_RISK_LIMIT]

    # Query methods
    def get_borrower_loans(self, borrower_id: str) -> list[LoanAccount]:
        """Get all loans for a borrower."""
        return [self.loans[n] for n in self._borrower_loans.get(borrower_id, [])]

    def get_loan_payments(self, loan_number: str) -> list[PaymentRecord]:
        """Get all payments for a loan."""
        return [self.payments[r] for r in self._loan_payments.get(loan_number, [])]

    def get_loan_fees(self, loan_number: str) -> list[AppliedFee]:
        """Get all fees charged on a loan."""
        return [self.fees[i] for i in self._loan_fees.get(loan_number, [])]

    def get_loan_penalties(self, loan_number: str) -> list[PenaltyRecord]:
        """Get all penalties charged on a loan."""
        return [self.penalties[i] for i in self._loan_penalties.get(loan_number, [])]

    def borrower_ids(self) -> list[str]:
        return list(self._borrower_loans)

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "borrowers": len(self._borrower_loans),
            "loans": len(self.loans),
            "installments": sum(len(loan.schedule) for loan in self.loans.values()),
            "payments": len(self.payments),
            "fees": len(self.fees),
            "penalties": len(self.penalties),
            "risk_scores": len(self.risk_scores),
        }
