"""Amortization, fee, allocation and scoring calculators."""

from loan_engine.calculators.allocation import (
    allocate_across_schedule,
    allocate_payment,
    assess_late_penalty,
)
from loan_engine.calculators.amortization import (
    add_months,
    generate_schedule,
    generate_schedule_for,
    validate_loan_terms,
)
from loan_engine.calculators.credit import calculate_credit_report, check_loan_eligibility
from loan_engine.calculators.fees import (
    apply_fee,
    calculate_days_overdue,
    calculate_disbursement_fees,
    calculate_late_penalty,
    calculate_total_due,
    is_overdue,
    penalty_tier,
    tiered_penalty,
)
from loan_engine.calculators.risk import derive_risk_factors, score_risk

__all__ = [
    "add_months",
    "allocate_across_schedule",
    "allocate_payment",
    "apply_fee",
    "assess_late_penalty",
    "calculate_credit_report",
    "calculate_days_overdue",
    "calculate_disbursement_fees",
    "calculate_late_penalty",
    "calculate_total_due",
    "check_loan_eligibility",
    "derive_risk_factors",
    "generate_schedule",
    "generate_schedule_for",
    "is_overdue",
    "penalty_tier",
    "score_risk",
    "tiered_penalty",
    "validate_loan_terms",
]
