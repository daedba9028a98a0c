"""Decimal helpers shared by the calculators."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Numeric = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Numeric | None) -> Decimal:
    """Convert a number to Decimal without binary float artefacts.

    ``None`` maps to zero so optional config fields can be passed straight in.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_money(value: Numeric | None) -> Decimal:
    """Round to cents, half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Numeric) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
