"""Early-warning model."""

from dataclasses import dataclass

from loan_engine.models.enums import WarningSeverity, WarningType


@dataclass
class EarlyWarning:
    """Sign of repayment stress on a loan or borrower."""

    warning_id: str
    severity: WarningSeverity
    warning_type: WarningType
    title: str
    description: str
    loan_number: str | None = None
    borrower_id: str | None = None
