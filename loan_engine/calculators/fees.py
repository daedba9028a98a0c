"""Fee and late-penalty calculations.

All functions are permissive: a missing or zero amount/percentage produces a
zero fee rather than an error. Results are rounded to cents and never negative.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from loan_engine.models.enums import FeeType, PenaltyType
from loan_engine.models.fees import FeeSpec, FixedFee, PenaltyConfig, PercentageFee
from loan_engine.money import ZERO, Numeric, to_decimal, to_money

# Fee types charged against principal when the loan is disbursed
DISBURSEMENT_FEE_TYPES = frozenset({FeeType.PROCESSING, FeeType.ORIGINATION, FeeType.APPLICATION})


@dataclass(frozen=True)
class PenaltyTier:
    """Escalation band for overdue installments."""

    tier: int
    label: str
    multiplier: Decimal


PENALTY_TIERS = (
    (7, PenaltyTier(1, "1-7 days", Decimal("1.0"))),
    (30, PenaltyTier(2, "8-30 days", Decimal("1.5"))),
    (60, PenaltyTier(3, "31-60 days", Decimal("2.0"))),
)
FINAL_PENALTY_TIER = PenaltyTier(4, "60+ days", Decimal("3.0"))


def _non_negative(value: Decimal) -> Decimal:
    return to_money(max(ZERO, value))


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def calculate_days_overdue(due_date: date, as_of: date | None = None) -> int:
    """Whole days elapsed since ``due_date``, floored, never negative."""
    if as_of is None:
        as_of = date.today()
    if isinstance(due_date, datetime) or isinstance(as_of, datetime):
        start, end = _as_datetime(due_date), _as_datetime(as_of)
        if (start.tzinfo is None) != (end.tzinfo is None):
            start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
        return max(0, (end - start).days)
    return max(0, (as_of - due_date).days)


def is_overdue(due_date: date, as_of: date | None = None, grace_period_days: int = 0) -> bool:
    """True once the grace period has fully elapsed."""
    return calculate_days_overdue(due_date, as_of) > grace_period_days


def _fixed_or_percentage(base_amount: Numeric, fee: FeeSpec) -> Decimal:
    if isinstance(fee, FixedFee):
        return _non_negative(to_decimal(fee.amount))
    if isinstance(fee, PercentageFee):
        return _non_negative(to_decimal(base_amount) * to_decimal(fee.percentage) / 100)
    return ZERO


def calculate_processing_fee(principal: Numeric, fee: FeeSpec) -> Decimal:
    """Processing, origination or application fee against loan principal."""
    return _fixed_or_percentage(principal, fee)


def calculate_early_settlement_fee(remaining_balance: Numeric, fee: FeeSpec) -> Decimal:
    """Fee for settling early, against the outstanding balance."""
    return _fixed_or_percentage(remaining_balance, fee)


def apply_fee(base_amount: Numeric, fee: FeeSpec) -> Decimal:
    """Compute a fee, dispatching on its type.

    Parameters
    ----------
    base_amount : Numeric
        Loan principal for disbursement fees, outstanding or due balance
        for late-payment and early-settlement fees.
    fee : FeeSpec
        Fixed or percentage fee.

    Returns
    -------
    Decimal
        Fee amount, rounded to cents, at least zero.
    """
    if fee.fee_type in DISBURSEMENT_FEE_TYPES:
        return calculate_processing_fee(base_amount, fee)
    if fee.fee_type == FeeType.EARLY_SETTLEMENT:
        return calculate_early_settlement_fee(base_amount, fee)
    # LATE_PAYMENT and anything else use the generic rule
    return _fixed_or_percentage(base_amount, fee)


def calculate_late_penalty(
    due_amount: Numeric,
    due_date: date,
    as_of: date | None,
    penalty: PenaltyConfig,
) -> Decimal:
    """Late penalty on an overdue amount.

    FIXED and PERCENTAGE penalties are charged once as soon as there is at
    least one chargeable day; DAILY_RATE accrues for every chargeable day.

    Parameters
    ----------
    due_amount : Numeric
        Amount that fell due (or is still outstanding).
    due_date : date
        Date the amount fell due.
    as_of : date | None
        Evaluation date; today when None.
    penalty : PenaltyConfig
        Penalty configuration including the grace period.

    Returns
    -------
    Decimal
        Penalty amount, rounded to cents, at least zero.
    """
    days_late = calculate_days_overdue(due_date, as_of)
    grace = max(0, penalty.grace_period_days or 0)
    chargeable_days = max(0, days_late - grace)

    if chargeable_days == 0:
        return to_money(ZERO)

    amount = to_decimal(due_amount)
    if penalty.penalty_type == PenaltyType.FIXED:
        return _non_negative(to_decimal(penalty.amount))
    if penalty.penalty_type == PenaltyType.PERCENTAGE:
        return _non_negative(amount * to_decimal(penalty.percentage) / 100)
    if penalty.penalty_type == PenaltyType.DAILY_RATE:
        return _non_negative(amount * (to_decimal(penalty.daily_rate) / 100) * chargeable_days)
    return to_money(ZERO)


def penalty_tier(days_overdue: int) -> PenaltyTier:
    """Tier for a number of days overdue. Upper bounds are inclusive."""
    days = max(0, days_overdue)
    for upper_bound, tier in PENALTY_TIERS:
        if days <= upper_bound:
            return tier
    return FINAL_PENALTY_TIER


def tiered_penalty(
    due_amount: Numeric,
    days_overdue: int,
    base_percentage: Numeric = Decimal("5"),
) -> Decimal:
    """Penalty whose rate escalates with the days overdue."""
    tier = penalty_tier(days_overdue)
    effective_percentage = to_decimal(base_percentage) * tier.multiplier
    return _non_negative(to_decimal(due_amount) * effective_percentage / 100)


def calculate_total_due(
    principal_due: Numeric,
    interest_due: Numeric,
    fees: Iterable[Numeric] = (),
    penalties: Iterable[Numeric] = (),
) -> Decimal:
    """Sum of an installment's components."""
    total = to_decimal(principal_due) + to_decimal(interest_due)
    total += sum((to_decimal(f) for f in fees), ZERO)
    total += sum((to_decimal(p) for p in penalties), ZERO)
    return to_money(total)


def calculate_disbursement_fees(
    principal: Numeric,
    fees: Iterable[FeeSpec],
    already_applied: Iterable[str] = (),
) -> list[tuple[FeeSpec, Decimal]]:
    """Fees to charge when a loan is disbursed.

    Only processing, origination and application fees are considered. Fees
    whose ``fee_id`` is in ``already_applied`` are skipped, as are fees that
    compute to zero.
    """
    skip = set(already_applied)
    result = []
    for fee in fees:
        if fee.fee_type not in DISBURSEMENT_FEE_TYPES:
            continue
        if fee.fee_id is not None and fee.fee_id in skip:
            continue
        amount = apply_fee(principal, fee)
        if amount > 0:
            result.append((fee, amount))
            if fee.fee_id is not None:
                skip.add(fee.fee_id)
    return result


def format_currency(amount: Numeric, currency: str = "USD") -> str:
    """Format an amount for display, e.g. ``USD 1,234.50``."""
    return f"{currency} {to_money(amount):,.2f}"
