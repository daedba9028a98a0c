"""Borrower credit assessment."""

from datetime import date
from decimal import Decimal
from typing import Iterable

from loan_engine.models.enums import CreditRiskLevel, LoanStatus
from loan_engine.models.ledger import LoanAccount
from loan_engine.models.risk import CreditFactors, CreditReport, EligibilityResult
from loan_engine.money import Numeric, round_half_up, to_decimal, to_money

FACTOR_WEIGHTS = {
    "payment_history": Decimal("0.35"),
    "credit_utilization": Decimal("0.20"),
    "account_age": Decimal("0.15"),
    "recent_inquiries": Decimal("0.10"),
    "income_stability": Decimal("0.20"),
}

MIN_SCORE = 300
MAX_SCORE = 850

# (minimum score, grade, risk level), best first
GRADE_BANDS = (
    (750, "A", CreditRiskLevel.LOW),
    (700, "B", CreditRiskLevel.LOW),
    (650, "C", CreditRiskLevel.MEDIUM),
    (600, "D", CreditRiskLevel.MEDIUM),
    (550, "E", CreditRiskLevel.HIGH),
)

# (minimum score, loan multiplier, rate adjustment in points)
LENDING_BANDS = (
    (750, Decimal("1.5"), Decimal("-2.0")),
    (700, Decimal("1.25"), Decimal("-1.0")),
    (650, Decimal("1.0"), Decimal("0")),
    (600, Decimal("0.75"), Decimal("1.0")),
    (550, Decimal("0.5"), Decimal("2.0")),
)
FLOOR_LENDING_BAND = (Decimal("0.25"), Decimal("4.0"))

INCOME_STABILITY_BY_EMPLOYMENT = {
    "EMPLOYED": 90,
    "BUSINESS_OWNER": 80,
    "SELF_EMPLOYED": 75,
    "RETIRED": 70,
}


def grade_for(score: int) -> tuple[str, CreditRiskLevel]:
    for minimum, grade, level in GRADE_BANDS:
        if score >= minimum:
            return grade, level
    return "F", CreditRiskLevel.VERY_HIGH


def max_recommended_loan(score: int, monthly_income: Numeric) -> Decimal:
    """Three years of income scaled by the score band."""
    multiplier = FLOOR_LENDING_BAND[0]
    for minimum, band_multiplier, _ in LENDING_BANDS:
        if score >= minimum:
            multiplier = band_multiplier
            break
    return to_money(round_half_up(to_decimal(monthly_income) * 12 * 3 * multiplier))


def interest_rate_adjustment(score: int) -> Decimal:
    """Percentage points added to (or taken off) the product rate."""
    for minimum, _, adjustment in LENDING_BANDS:
        if score >= minimum:
            return adjustment
    return FLOOR_LENDING_BAND[1]


def recommendations_for(factors: CreditFactors, score: int) -> list[str]:
    recommendations = []
    if factors.payment_history < 70:
        recommendations.append("Improve payment history by paying on time")
    if factors.credit_utilization < 60:
        recommendations.append("Reduce existing debt to improve utilization ratio")
    if factors.account_age < 50:
        recommendations.append("Build longer relationship with timely payments")
    if factors.recent_inquiries < 70:
        recommendations.append("Avoid multiple loan applications in short period")
    if factors.income_stability < 70:
        recommendations.append("Provide proof of stable income")
    if score < 600:
        recommendations.append("Consider a smaller loan amount to start")
        recommendations.append("Provide additional collateral or guarantor")
    return recommendations


def calculate_credit_report(factors: CreditFactors, monthly_income: Numeric = 0) -> CreditReport:
    """Weighted credit score on the 300-850 scale, with lending guidance."""
    weighted = sum(
        (to_decimal(getattr(factors, name)) * weight for name, weight in FACTOR_WEIGHTS.items()),
        Decimal("0"),
    )
    weighted_score = round_half_up(weighted)
    score = round_half_up(MIN_SCORE + to_decimal(weighted_score) / 100 * (MAX_SCORE - MIN_SCORE))
    score = min(MAX_SCORE, max(MIN_SCORE, score))

    grade, level = grade_for(score)
    return CreditReport(
        score=score,
        grade=grade,
        risk_level=level,
        factors=factors,
        max_recommended_loan=max_recommended_loan(score, monthly_income),
        interest_rate_adjustment=interest_rate_adjustment(score),
        recommendations=recommendations_for(factors, score),
    )


def derive_credit_factors(
    loans: Iterable[LoanAccount],
    monthly_income: Numeric,
    customer_since: date,
    as_of: date,
    employment_status: str | None = None,
    kyc_verified: bool = False,
) -> CreditFactors:
    """Credit factors from a borrower's loan history.

    Late installments cost 2, 5, 10 or 15 history points depending on how
    late they were; debt is measured against annual income; inquiries are
    loans opened in the last six months.
    """
    loans = list(loans)

    payment_history = 100
    for loan in loans:
        for entry in loan.schedule:
            if entry.late_days > 90:
                payment_history -= 15
            elif entry.late_days > 60:
                payment_history -= 10
            elif entry.late_days > 30:
                payment_history -= 5
            elif entry.late_days > 0:
                payment_history -= 2
    payment_history = max(0, payment_history)

    income = to_decimal(monthly_income)
    active_debt = sum(
        (loan.terms.principal for loan in loans if loan.status == LoanStatus.ACTIVE),
        Decimal("0"),
    )
    debt_to_income = active_debt / ((income if income > 0 else Decimal("1")) * 12)
    if debt_to_income > Decimal("0.5"):
        credit_utilization = 20
    elif debt_to_income > Decimal("0.4"):
        credit_utilization = 40
    elif debt_to_income > Decimal("0.3"):
        credit_utilization = 60
    elif debt_to_income > Decimal("0.2"):
        credit_utilization = 80
    else:
        credit_utilization = 100

    age_months = max(0, (as_of - customer_since).days) // 30
    if age_months >= 36:
        account_age = 100
    elif age_months >= 24:
        account_age = 85
    elif age_months >= 12:
        account_age = 70
    elif age_months >= 6:
        account_age = 55
    else:
        account_age = 40

    six_months_ago = as_of.toordinal() - 182
    recent = sum(1 for loan in loans if loan.terms.start_date.toordinal() > six_months_ago)
    if recent >= 5:
        recent_inquiries = 30
    elif recent >= 3:
        recent_inquiries = 60
    elif recent >= 2:
        recent_inquiries = 80
    else:
        recent_inquiries = 100

    key = (employment_status or "").upper().replace("-", "_").replace(" ", "_")
    income_stability = INCOME_STABILITY_BY_EMPLOYMENT.get(key, 40)
    if kyc_verified:
        income_stability = min(100, income_stability + 10)

    return CreditFactors(
        payment_history=payment_history,
        credit_utilization=credit_utilization,
        account_age=account_age,
        recent_inquiries=recent_inquiries,
        income_stability=income_stability,
    )


def check_loan_eligibility(
    report: CreditReport,
    requested_amount: Numeric,
    min_amount: Numeric,
    max_amount: Numeric,
    min_credit_score: int | None = None,
) -> EligibilityResult:
    """Check a request against product limits and the credit assessment."""
    amount = to_decimal(requested_amount)

    if min_credit_score and report.score < min_credit_score:
        reason = f"Credit score {report.score} is below minimum required {min_credit_score}"
        return EligibilityResult(False, report, reason)
    if amount < to_decimal(min_amount):
        return EligibilityResult(False, report, f"Requested amount is below minimum {to_money(min_amount)}")
    if amount > to_decimal(max_amount):
        return EligibilityResult(False, report, f"Requested amount exceeds maximum {to_money(max_amount)}")
    if amount > report.max_recommended_loan:
        reason = (
            f"Requested amount exceeds recommended maximum {report.max_recommended_loan} "
            "based on credit assessment"
        )
        return EligibilityResult(False, report, reason)
    return EligibilityResult(True, report)
