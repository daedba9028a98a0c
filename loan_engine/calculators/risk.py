"""Deterministic loan risk scoring.

The score is a sum of independently capped components, clamped to 0..100:

=====================  ==========================================  ===
factor                 rule                                        max
=====================  ==========================================  ===
days past due          >90: 40, >60: 30, >30: 20, >0: 10           40
payment consistency    round((1 - consistency) * 25)               25
credit score           <500: 15, <600: 10, <700: 5                 15
debt-to-income         >0.5: 10, >0.4: 7, >0.3: 4                  10
loan age (months)      <3: 10, <6: 5                               10
=====================  ==========================================  ===
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from loan_engine.calculators.fees import calculate_days_overdue
from loan_engine.models.enums import RiskLevel
from loan_engine.models.loan import ScheduleEntry
from loan_engine.models.risk import RiskFactors, RiskScore
from loan_engine.money import round_half_up, to_decimal

PREDICTED_DEFAULT_THRESHOLD = 70
DEFAULT_CREDIT_SCORE = 600
UNKNOWN_INCOME_DTI = 0.5
ON_TIME_TOLERANCE_DAYS = 5


def _days_past_due_points(days: int) -> int:
    if days > 90:
        return 40
    if days > 60:
        return 30
    if days > 30:
        return 20
    if days > 0:
        return 10
    return 0


def _consistency_points(consistency: float) -> int:
    clamped = min(1.0, max(0.0, consistency))
    return round_half_up((1 - to_decimal(clamped)) * 25)


def _credit_score_points(credit_score: int) -> int:
    if credit_score < 500:
        return 15
    if credit_score < 600:
        return 10
    if credit_score < 700:
        return 5
    return 0


def _dti_points(dti_ratio: float) -> int:
    if dti_ratio > 0.5:
        return 10
    if dti_ratio > 0.4:
        return 7
    if dti_ratio > 0.3:
        return 4
    return 0


def _loan_age_points(loan_age: int) -> int:
    if loan_age < 3:
        return 10
    if loan_age < 6:
        return 5
    return 0


def risk_level_for(score: int) -> RiskLevel:
    """Map a 0..100 score to its level."""
    if score >= 75:
        return RiskLevel.CRITICAL
    if score >= 50:
        return RiskLevel.HIGH
    if score >= 25:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def score_risk(
    factors: RiskFactors,
    predicted_default_threshold: int = PREDICTED_DEFAULT_THRESHOLD,
) -> RiskScore:
    """Score a loan's risk from its factors. Never raises.

    Negative inputs are treated as zero; consistency is clamped to [0, 1].
    """
    days_past_due = max(0, factors.days_past_due)
    credit_score = max(0, factors.credit_score)
    dti_ratio = max(0.0, factors.dti_ratio)
    loan_age = max(0, factors.loan_age)

    score = (
        _days_past_due_points(days_past_due)
        + _consistency_points(factors.payment_consistency)
        + _credit_score_points(credit_score)
        + _dti_points(dti_ratio)
        + _loan_age_points(loan_age)
    )
    score = min(100, max(0, score))

    return RiskScore(
        score=score,
        level=risk_level_for(score),
        predicted_default=score >= predicted_default_threshold,
        factors=factors,
    )


def derive_risk_factors(
    schedule: Iterable[ScheduleEntry],
    as_of: date,
    start_date: date,
    credit_score: int | None = None,
    monthly_income: Decimal | None = None,
    on_time_tolerance_days: int = ON_TIME_TOLERANCE_DAYS,
    default_credit_score: int = DEFAULT_CREDIT_SCORE,
) -> RiskFactors:
    """Build risk factors from a loan's schedule.

    - days past due: the worst overdue unpaid entry
    - consistency: share of entries due by ``as_of`` that were paid within
      the tolerance; 1.0 while nothing has fallen due
    - DTI: first installment over monthly income, 0.5 when income is unknown
    - loan age: whole 30-day months since ``start_date``
    """
    entries = list(schedule)

    overdue = [e for e in entries if not e.is_paid and e.due_date < as_of]
    days_past_due = max((calculate_days_overdue(e.due_date, as_of) for e in overdue), default=0)

    due = [e for e in entries if e.due_date <= as_of]
    on_time = [e for e in due if e.is_paid and e.late_days <= on_time_tolerance_days]
    consistency = len(on_time) / len(due) if due else 1.0

    income = to_decimal(monthly_income)
    if income > 0 and entries:
        dti_ratio = float(entries[0].total_due / income)
    else:
        dti_ratio = UNKNOWN_INCOME_DTI

    loan_age = max(0, (as_of - start_date).days) // 30

    return RiskFactors(
        days_past_due=days_past_due,
        payment_consistency=consistency,
        credit_score=credit_score if credit_score else default_credit_score,
        dti_ratio=dti_ratio,
        loan_age=loan_age,
    )
