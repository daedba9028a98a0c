"""Risk and credit scoring models."""

from dataclasses import dataclass, field
from decimal import Decimal

from loan_engine.models.enums import CreditRiskLevel, RiskLevel


@dataclass(frozen=True)
class RiskFactors:
    """Inputs to the loan risk score."""

    days_past_due: int
    payment_consistency: float  # share of due installments paid on time, 0..1
    credit_score: int
    dti_ratio: float
    loan_age: int  # months


@dataclass(frozen=True)
class RiskScore:
    """Loan risk score. Derived, recomputed on demand."""

    score: int
    level: RiskLevel
    predicted_default: bool
    factors: RiskFactors | None = None


@dataclass(frozen=True)
class CreditFactors:
    """Borrower credit factors, each on a 0..100 scale."""

    payment_history: int
    credit_utilization: int
    account_age: int
    recent_inquiries: int
    income_stability: int


@dataclass(frozen=True)
class CreditReport:
    """Credit assessment for a borrower."""

    score: int  # 300..850
    grade: str
    risk_level: CreditRiskLevel
    factors: CreditFactors
    max_recommended_loan: Decimal
    interest_rate_adjustment: Decimal  # percentage points
    recommendations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility check against product limits."""

    eligible: bool
    report: CreditReport
    reason: str | None = None
