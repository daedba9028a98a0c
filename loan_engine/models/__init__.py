"""Domain models for the loan ledger engine."""

from loan_engine.models.borrower import Borrower
from loan_engine.models.enums import (
    CreditRiskLevel,
    FeeCalculationType,
    FeeType,
    LoanStatus,
    PaymentMethod,
    PenaltyType,
    RiskLevel,
    WarningSeverity,
    WarningType,
)
from loan_engine.models.fees import (
    DailyRatePenalty,
    FeeSpec,
    FixedFee,
    FixedPenalty,
    PenaltyConfig,
    PercentageFee,
    PercentagePenalty,
    fee_spec_from_dict,
    penalty_config_from_dict,
)
from loan_engine.models.ledger import AppliedFee, LoanAccount, PaymentRecord, PenaltyRecord
from loan_engine.models.loan import AmortizationSchedule, LoanTerms, ScheduleEntry
from loan_engine.models.payment import PaymentAllocationResult
from loan_engine.models.risk import (
    CreditFactors,
    CreditReport,
    EligibilityResult,
    RiskFactors,
    RiskScore,
)
from loan_engine.models.warnings import EarlyWarning

__all__ = [
    "AmortizationSchedule",
    "AppliedFee",
    "Borrower",
    "CreditFactors",
    "CreditReport",
    "CreditRiskLevel",
    "DailyRatePenalty",
    "EarlyWarning",
    "EligibilityResult",
    "FeeCalculationType",
    "FeeSpec",
    "FeeType",
    "FixedFee",
    "FixedPenalty",
    "LoanAccount",
    "LoanStatus",
    "LoanTerms",
    "PaymentAllocationResult",
    "PaymentMethod",
    "PaymentRecord",
    "PenaltyConfig",
    "PenaltyRecord",
    "PenaltyType",
    "PercentageFee",
    "PercentagePenalty",
    "RiskFactors",
    "RiskLevel",
    "RiskScore",
    "ScheduleEntry",
    "WarningSeverity",
    "WarningType",
    "fee_spec_from_dict",
    "penalty_config_from_dict",
]
