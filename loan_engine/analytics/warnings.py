"""Early-warning detection over a loan ledger."""

from datetime import date
from decimal import Decimal

from loan_engine.calculators.amortization import add_months
from loan_engine.models.enums import LoanStatus, WarningSeverity, WarningType
from loan_engine.models.warnings import EarlyWarning
from loan_engine.store.ledger import LoanLedger

RECENT_INSTALLMENTS = 3
LATE_DAYS_TOLERANCE = 5
MATURITY_WINDOW_MONTHS = 3
MATURITY_BALANCE_RATIO = Decimal("0.5")

SEVERITY_ORDER = {
    WarningSeverity.CRITICAL: 0,
    WarningSeverity.HIGH: 1,
    WarningSeverity.MEDIUM: 2,
    WarningSeverity.LOW: 3,
}


def deteriorating_payment_warnings(ledger: LoanLedger, as_of: date) -> list[EarlyWarning]:
    """Active loans with two or more of their last three due installments late or missed."""
    warnings = []
    for loan in ledger.loans.values():
        if loan.status != LoanStatus.ACTIVE:
            continue
        due = [e for e in loan.schedule if e.due_date <= as_of]
        recent = sorted(due, key=lambda e: e.due_date, reverse=True)[:RECENT_INSTALLMENTS]
        troubled = [e for e in recent if e.late_days > LATE_DAYS_TOLERANCE or not e.is_paid]
        if len(troubled) < 2:
            continue
        warnings.append(
            EarlyWarning(
                warning_id=f"late-{loan.loan_number}",
                severity=WarningSeverity.CRITICAL if len(troubled) >= 3 else WarningSeverity.HIGH,
                warning_type=WarningType.DETERIORATING_PAYMENTS,
                title="Deteriorating Payment Pattern",
                description=f"{len(troubled)} of the last {len(recent)} installments late or missed.",
                loan_number=loan.loan_number,
                borrower_id=loan.borrower_id,
            )
        )
    return warnings


def maturity_warnings(ledger: LoanLedger, as_of: date) -> list[EarlyWarning]:
    """Active loans maturing soon with more than half the principal still owed."""
    horizon = add_months(as_of, MATURITY_WINDOW_MONTHS)
    warnings = []
    for loan in ledger.loans.values():
        if loan.status != LoanStatus.ACTIVE or not (as_of <= loan.maturity_date <= horizon):
            continue
        remaining = loan.outstanding_balance
        ratio = remaining / loan.terms.principal
        if ratio <= MATURITY_BALANCE_RATIO:
            continue
        warnings.append(
            EarlyWarning(
                warning_id=f"maturity-{loan.loan_number}",
                severity=WarningSeverity.HIGH,
                warning_type=WarningType.APPROACHING_MATURITY,
                title="High Balance Near Maturity",
                description=(
                    f"Loan matures by {loan.maturity_date.isoformat()} with "
                    f"{int((ratio * 100).to_integral_value())}% balance remaining."
                ),
                loan_number=loan.loan_number,
                borrower_id=loan.borrower_id,
            )
        )
    return warnings


def borrower_stress_warnings(ledger: LoanLedger, as_of: date) -> list[EarlyWarning]:
    """Borrowers with overdue installments on two or more active loans."""
    warnings = []
    for borrower_id in ledger.borrower_ids():
        active = [l for l in ledger.get_borrower_loans(borrower_id) if l.status == LoanStatus.ACTIVE]
        if len(active) < 2:
            continue
        stressed = [
            l for l in active if any(not e.is_paid and e.due_date < as_of for e in l.schedule)
        ]
        if len(stressed) < 2:
            continue
        warnings.append(
            EarlyWarning(
                warning_id=f"multi-stress-{borrower_id}",
                severity=WarningSeverity.HIGH,
                warning_type=WarningType.BORROWER_STRESS,
                title="Multiple Loans Under Stress",
                description=f"{len(stressed)} of {len(active)} active loans have overdue payments.",
                borrower_id=borrower_id,
            )
        )
    return warnings


def generate_warnings(ledger: LoanLedger, as_of: date | None = None) -> list[EarlyWarning]:
    """All early warnings for a ledger, most severe first."""
    if as_of is None:
        as_of = date.today()
    warnings = (
        deteriorating_payment_warnings(ledger, as_of)
        + maturity_warnings(ledger, as_of)
        + borrower_stress_warnings(ledger, as_of)
    )
    warnings.sort(key=lambda w: SEVERITY_ORDER[w.severity])
    return warnings
