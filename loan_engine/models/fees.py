"""Fee and penalty configuration models.

Each calculation type is its own dataclass, so a fixed fee cannot carry a
percentage and a daily-rate penalty always has a rate. ``FeeSpec`` and
``PenaltyConfig`` are the unions accepted by the fee calculator.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Union

from loan_engine.exceptions import ConfigurationError
from loan_engine.models.enums import FeeCalculationType, FeeType, PenaltyType
from loan_engine.money import to_decimal


@dataclass(frozen=True)
class FixedFee:
    """Flat fee amount."""

    fee_type: FeeType
    amount: Decimal = Decimal("0")
    fee_id: str | None = None
    name: str = ""

    @property
    def calculation_type(self) -> FeeCalculationType:
        return FeeCalculationType.FIXED


@dataclass(frozen=True)
class PercentageFee:
    """Fee charged as a percentage of a base amount."""

    fee_type: FeeType
    percentage: Decimal = Decimal("0")
    fee_id: str | None = None
    name: str = ""

    @property
    def calculation_type(self) -> FeeCalculationType:
        return FeeCalculationType.PERCENTAGE


FeeSpec = Union[FixedFee, PercentageFee]


@dataclass(frozen=True)
class FixedPenalty:
    """Flat penalty charged once the grace period is exceeded."""

    amount: Decimal = Decimal("0")
    grace_period_days: int = 0

    @property
    def penalty_type(self) -> PenaltyType:
        return PenaltyType.FIXED


@dataclass(frozen=True)
class PercentagePenalty:
    """One-time percentage of the amount due, regardless of days late."""

    percentage: Decimal = Decimal("0")
    grace_period_days: int = 0

    @property
    def penalty_type(self) -> PenaltyType:
        return PenaltyType.PERCENTAGE


@dataclass(frozen=True)
class DailyRatePenalty:
    """Percentage of the amount due accrued per chargeable day."""

    daily_rate: Decimal = Decimal("0")
    grace_period_days: int = 0

    @property
    def penalty_type(self) -> PenaltyType:
        return PenaltyType.DAILY_RATE


PenaltyConfig = Union[FixedPenalty, PercentagePenalty, DailyRatePenalty]


def fee_spec_from_dict(data: dict[str, Any]) -> FeeSpec:
    """Build a fee spec from a loosely typed record.

    Accepts the shape stored by fee settings screens, e.g.
    ``{"type": "PROCESSING", "calculationType": "PERCENTAGE", "percentage": 2}``.
    Missing numeric fields become zero. Unknown fee types map to ``OTHER``.

    Raises
    ------
    ConfigurationError
        If the calculation type is missing or not recognised.
    """
    raw_type = data.get("type") or data.get("fee_type") or FeeType.OTHER.value
    try:
        fee_type = FeeType(raw_type)
    except ValueError:
        fee_type = FeeType.OTHER

    raw_calc = data.get("calculationType") or data.get("calculation_type")
    fee_id = data.get("id") or data.get("fee_id")
    name = data.get("name") or ""

    if raw_calc == FeeCalculationType.FIXED.value:
        return FixedFee(fee_type, to_decimal(data.get("amount")), fee_id, name)
    if raw_calc == FeeCalculationType.PERCENTAGE.value:
        return PercentageFee(fee_type, to_decimal(data.get("percentage")), fee_id, name)
    raise ConfigurationError(f"Unknown fee calculation type: {raw_calc!r}")


def penalty_config_from_dict(data: dict[str, Any]) -> PenaltyConfig:
    """Build a penalty config from a loosely typed record.

    Raises
    ------
    ConfigurationError
        If the penalty type is missing or not recognised.
    """
    raw_type = data.get("type") or data.get("penalty_type")
    grace = int(data.get("gracePeriodDays") or data.get("grace_period_days") or 0)

    if raw_type == PenaltyType.FIXED.value:
        return FixedPenalty(to_decimal(data.get("amount")), grace)
    if raw_type == PenaltyType.PERCENTAGE.value:
        return PercentagePenalty(to_decimal(data.get("percentage")), grace)
    if raw_type == PenaltyType.DAILY_RATE.value:
        rate = data.get("dailyRate", data.get("daily_rate"))
        return DailyRatePenalty(to_decimal(rate), grace)
    raise ConfigurationError(f"Unknown penalty type: {raw_type!r}")
