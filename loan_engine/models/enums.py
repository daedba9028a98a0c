"""Enumeration types for loan ledger entities."""

from enum import Enum


class FeeType(str, Enum):
    PROCESSING = "PROCESSING"
    ORIGINATION = "ORIGINATION"
    APPLICATION = "APPLICATION"
    LATE_PAYMENT = "LATE_PAYMENT"
    EARLY_SETTLEMENT = "EARLY_SETTLEMENT"
    OTHER = "OTHER"


class FeeCalculationType(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"


class PenaltyType(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"
    DAILY_RATE = "DAILY_RATE"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CreditRiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class LoanStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    PAID_OFF = "PAID_OFF"
    DEFAULTED = "DEFAULTED"
    WRITTEN_OFF = "WRITTEN_OFF"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    MOBILE_MONEY = "MOBILE_MONEY"
    BANK_TRANSFER = "BANK_TRANSFER"


class WarningSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class WarningType(str, Enum):
    DETERIORATING_PAYMENTS = "DETERIORATING_PAYMENTS"
    APPROACHING_MATURITY = "APPROACHING_MATURITY"
    BORROWER_STRESS = "BORROWER_STRESS"
