"""Currency helpers for tax arithmetic.

All amounts are Decimal. Line values carry cent precision; the IRS whole-dollar
method (drop under 50 cents, round 50 cents and over away from zero) is applied
only where a provision says so, through the parameter set's rounding mode.

Example:
    >>> round_amount(Decimal("1.50"), RoundingMode.WHOLE_DOLLAR)
    Decimal('2.00')
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from enum import Enum

ZERO = Decimal("0")
CENT = Decimal("0.01")
DOLLAR = Decimal("1")


class RoundingMode(str, Enum):
    """How a parameter set rounds computed amounts."""

    WHOLE_DOLLAR = "whole_dollar"
    CENTS = "cents"


def to_amount(value: Decimal | int) -> Decimal:
    """Quantize a value to cents (currency precision).

    Args:
        value: Decimal or integer amount.

    Returns:
        Decimal with exactly two decimal places.
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def irs_round(value: Decimal) -> Decimal:
    """Round to whole dollars, half away from zero."""
    return value.quantize(DOLLAR, rounding=ROUND_HALF_UP)


def round_amount(value: Decimal, mode: RoundingMode) -> Decimal:
    """Round a computed amount per the parameter set's rounding mode.

    Args:
        value: Unrounded amount.
        mode: Rounding mode from TaxYearParameters.

    Returns:
        Rounded amount, always quantized to cents.
    """
    if mode is RoundingMode.WHOLE_DOLLAR:
        return to_amount(irs_round(value))
    return to_amount(value)


def ceil_steps(excess: Decimal, step: Decimal) -> Decimal:
    """Number of whole-or-partial steps contained in excess.

    Used by "for each $1,000 or fraction thereof" phase-outs.
    """
    if excess <= ZERO:
        return ZERO
    return (excess / step).to_integral_value(rounding=ROUND_CEILING)


def clamp(value: Decimal, low: Decimal = ZERO, high: Decimal | None = None) -> Decimal:
    """Clamp value into [low, high]."""
    if value < low:
        return low
    if high is not None and value > high:
        return high
    return value
