"""Payment allocation models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PaymentAllocationResult:
    """Record of how one payment was split across a schedule entry.

    ``unapplied`` is the part of the payment that exceeded the entry's
    remaining due. It was not booked anywhere; the caller must carry it to
    the next entry or record it as credit.
    """

    principal_applied: Decimal
    interest_applied: Decimal
    fees_applied: Decimal
    remaining_after: Decimal
    unapplied: Decimal = Decimal("0")
    sequence_number: int | None = None

    @property
    def total_applied(self) -> Decimal:
        return self.principal_applied + self.interest_applied + self.fees_applied
