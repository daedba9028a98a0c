"""Payment allocation against schedule entries.

Payments are applied fees first, then interest, then principal, each capped
at what is still owed in that bucket. An entry is never over-credited: the
surplus comes back as ``unapplied`` on the result.

Callers must serialize allocations on the same entry; nothing here locks.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from loan_engine.calculators.fees import calculate_days_overdue, calculate_late_penalty
from loan_engine.exceptions import InvalidPaymentError
from loan_engine.models.fees import PenaltyConfig
from loan_engine.models.loan import ScheduleEntry
from loan_engine.models.payment import PaymentAllocationResult
from loan_engine.money import ZERO, Numeric, to_decimal, to_money

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = Decimal("0.01")


def _validated_amount(amount: Numeric) -> Decimal:
    try:
        value = to_money(amount)
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise InvalidPaymentError(f"Payment amount is not a number: {amount!r}") from exc
    if value <= 0:
        raise InvalidPaymentError(f"Payment amount must be greater than 0, got {amount}")
    return value


def allocate_payment(
    amount: Numeric,
    entry: ScheduleEntry,
    as_of: date | None = None,
    epsilon: Decimal = DEFAULT_EPSILON,
) -> PaymentAllocationResult:
    """Apply a payment to one schedule entry.

    Parameters
    ----------
    amount : Numeric
        Payment amount, greater than zero.
    entry : ScheduleEntry
        Entry to credit. Mutated in place.
    as_of : date | None
        Payment date; today when None. Used for ``late_days`` and ``paid_date``.
    epsilon : Decimal
        Shortfall below which the entry counts as fully paid.

    Returns
    -------
    PaymentAllocationResult
        Amounts booked per bucket, the entry's remaining due, and any
        surplus that was not applied.

    Raises
    ------
    InvalidPaymentError
        If ``amount`` is not positive.
    """
    available = _validated_amount(amount)
    if as_of is None:
        as_of = date.today()

    fees_applied = min(available, entry.remaining_fees)
    available -= fees_applied

    interest_applied = min(available, entry.remaining_interest)
    available -= interest_applied

    principal_applied = min(available, entry.remaining_principal)
    available -= principal_applied

    entry.fees_paid += fees_applied
    entry.interest_paid += interest_applied
    entry.principal_paid += principal_applied
    entry.total_paid += fees_applied + interest_applied + principal_applied

    if entry.due_date < as_of:
        entry.late_days = calculate_days_overdue(entry.due_date, as_of)

    if not entry.is_paid and entry.total_due - entry.total_paid < epsilon:
        entry.is_paid = True
        entry.paid_date = as_of

    return PaymentAllocationResult(
        principal_applied=principal_applied,
        interest_applied=interest_applied,
        fees_applied=fees_applied,
        remaining_after=entry.remaining_due,
        unapplied=available,
        sequence_number=entry.sequence_number,
    )


def allocate_across_schedule(
    amount: Numeric,
    entries: Iterable[ScheduleEntry],
    as_of: date | None = None,
    epsilon: Decimal = DEFAULT_EPSILON,
) -> tuple[list[PaymentAllocationResult], Decimal]:
    """Spread a payment over unpaid entries, oldest first.

    Returns
    -------
    tuple[list[PaymentAllocationResult], Decimal]
        One result per entry touched, and the surplus left after every
        entry is settled (to be kept as credit).
    """
    remaining = _validated_amount(amount)
    results = []

    for entry in sorted(entries, key=lambda e: e.sequence_number):
        if remaining <= 0:
            break
        if entry.is_paid:
            continue
        result = allocate_payment(remaining, entry, as_of=as_of, epsilon=epsilon)
        results.append(result)
        remaining = result.unapplied

    if remaining > 0:
        logger.debug("Payment surplus of %s left after settling all entries", remaining)
    return results, remaining


def assess_late_penalty(
    entry: ScheduleEntry,
    penalty: PenaltyConfig,
    as_of: date | None = None,
) -> Decimal:
    """Charge a late penalty onto an entry's fee bucket.

    The penalty is computed on the entry's remaining due and added to both
    ``fees_due`` and ``total_due``. Paid entries are left untouched.

    Returns
    -------
    Decimal
        Amount charged (zero when nothing was due or the grace period holds).
    """
    if entry.is_paid:
        return to_money(ZERO)
    if as_of is None:
        as_of = date.today()

    charge = calculate_late_penalty(entry.remaining_due, entry.due_date, as_of, penalty)
    entry.late_days = calculate_days_overdue(entry.due_date, as_of)
    if charge > 0:
        entry.fees_due = to_money(entry.fees_due + charge)
        entry.total_due = to_money(entry.principal_due + entry.interest_due + entry.fees_due)
    return to_decimal(charge)
