"""Borrower model."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass
class Borrower:
    """Loan applicant or customer."""

    borrower_id: str
    name: str
    phone: str
    monthly_income: Decimal
    employment_status: str  # EMPLOYED, SELF_EMPLOYED, BUSINESS_OWNER, RETIRED, UNEMPLOYED
    credit_score: int  # 300..850
    customer_since: date
    kyc_verified: bool = False
