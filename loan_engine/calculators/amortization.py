"""Equal-installment (annuity) amortization schedules."""

import calendar
from datetime import date, datetime
from decimal import Decimal, localcontext

from loan_engine.exceptions import InvalidLoanTermsError
from loan_engine.models.loan import AmortizationSchedule, LoanTerms, ScheduleEntry
from loan_engine.money import ZERO, Numeric, to_decimal, to_money

# Significant digits carried through the balance loop
INTERNAL_PRECISION = 28


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length.

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def validate_loan_terms(
    principal: Numeric,
    annual_rate_percent: Numeric,
    term_months: int,
    start_date: date | None = None,
) -> LoanTerms:
    """Validate raw inputs and build ``LoanTerms``.

    Raises
    ------
    InvalidLoanTermsError
        Naming the first invalid field.
    """
    try:
        principal_dec = to_decimal(principal)
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise InvalidLoanTermsError("principal", f"Principal is not a number: {principal!r}") from exc
    try:
        rate_dec = to_decimal(annual_rate_percent)
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise InvalidLoanTermsError(
            "annual_rate_percent", f"Annual rate is not a number: {annual_rate_percent!r}"
        ) from exc

    if not principal_dec.is_finite() or to_money(principal_dec) <= 0:
        raise InvalidLoanTermsError("principal", f"Principal must be greater than 0, got {principal}")
    if not rate_dec.is_finite() or rate_dec < 0:
        raise InvalidLoanTermsError(
            "annual_rate_percent", f"Annual rate must not be negative, got {annual_rate_percent}"
        )
    if isinstance(term_months, bool) or not isinstance(term_months, int):
        raise InvalidLoanTermsError("term_months", f"Term must be a whole number of months, got {term_months!r}")
    if term_months < 1:
        raise InvalidLoanTermsError("term_months", f"Term must be at least 1 month, got {term_months}")
    if start_date is None:
        raise InvalidLoanTermsError("start_date", "Start date is required")
    if isinstance(start_date, datetime):
        start_date = start_date.date()

    return LoanTerms(
        principal=to_money(principal_dec),
        annual_rate_percent=rate_dec,
        term_months=term_months,
        start_date=start_date,
    )


def monthly_payment_for(principal: Decimal, monthly_rate: Decimal, term_months: int) -> Decimal:
    """Unrounded annuity payment.

    Falls back to straight-line when the rate is too small to move
    ``(1 + r) ** n`` off 1 at the working precision.
    """
    if monthly_rate == 0:
        return principal / term_months
    growth = (1 + monthly_rate) ** term_months
    if growth == 1:
        return principal / term_months
    return principal * monthly_rate * growth / (growth - 1)


def generate_schedule(
    principal: Numeric,
    annual_rate_percent: Numeric,
    term_months: int,
    start_date: date,
) -> AmortizationSchedule:
    """Generate a full repayment schedule.

    Parameters
    ----------
    principal : Numeric
        Amount disbursed, greater than zero.
    annual_rate_percent : Numeric
        Nominal annual rate in percent (12 means 12% a year).
    term_months : int
        Number of monthly installments.
    start_date : date
        Loan start; installment ``i`` falls due ``i`` calendar months later.

    Returns
    -------
    AmortizationSchedule
        Monthly payment, totals and the ordered schedule entries.

    Raises
    ------
    InvalidLoanTermsError
        If any input is out of range.
    """
    terms = validate_loan_terms(principal, annual_rate_percent, term_months, start_date)
    return generate_schedule_for(terms)


def generate_schedule_for(terms: LoanTerms) -> AmortizationSchedule:
    """Generate a schedule from already validated terms."""
    with localcontext() as ctx:
        ctx.prec = INTERNAL_PRECISION

        monthly_rate = terms.annual_rate_percent / 100 / 12
        payment = monthly_payment_for(terms.principal, monthly_rate, terms.term_months)

        entries: list[ScheduleEntry] = []
        balance = terms.principal
        principal_booked = ZERO

        for i in range(1, terms.term_months + 1):
            interest = balance * monthly_rate
            if i == terms.term_months:
                # Final installment clears whatever is left, rounding residue included
                principal_part = balance
                principal_due = terms.principal - principal_booked
            else:
                principal_part = payment - interest
                principal_due = to_money(principal_part)
            balance -= principal_part

            interest_due = to_money(interest)
            fees_due = ZERO
            principal_booked += principal_due

            entries.append(
                ScheduleEntry(
                    sequence_number=i,
                    due_date=add_months(terms.start_date, i),
                    principal_due=principal_due,
                    interest_due=interest_due,
                    fees_due=to_money(fees_due),
                    total_due=to_money(principal_due + interest_due + fees_due),
                )
            )

    total_interest = sum((e.interest_due for e in entries), ZERO)

    return AmortizationSchedule(
        terms=terms,
        monthly_payment=to_money(payment),
        total_interest=total_interest,
        total_payment=terms.principal + total_interest,
        schedule=entries,
    )
