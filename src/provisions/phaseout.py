"""Phase-out formulas shared by credits and deductions."""

from __future__ import annotations

from decimal import Decimal

from src.tax.errors import InvalidInput
from src.tax.money import ZERO, RoundingMode, ceil_steps, clamp, round_amount
from src.tax.year_config import PhaseOut


def phase_out(
    base: Decimal,
    measure: Decimal,
    rule: PhaseOut,
    rounding: RoundingMode | None = None,
) -> Decimal:
    """Reduce base by a step phase-out, never below the rule's floor.

    result = base - ceil((measure - threshold) / step) * reduction_per_step

    Rounding, when requested, is applied once to the final result rather than
    per step.

    Args:
        base: Amount before phase-out (credit, exemption, rate, cap).
        measure: Income measure driving the phase-out (usually AGI or MAGI).
        rule: Threshold, step, reduction, and floor.
        rounding: Rounding mode for the phased amount; None leaves it exact
            (used when the phased quantity is a rate).

    Returns:
        Phased amount, at least rule.floor (or base, if base is lower).

    Raises:
        InvalidInput: If the rule has a non-positive step.

    Example:
        >>> phase_out(Decimal("4400"), Decimal("401500"), ctc_rule)
        Decimal('4300')  # two $1,000 steps (1,500 rounds up) x $50
    """
    if rule.step <= ZERO:
        raise InvalidInput("phase_out.step", rule.step, "step must be positive")

    steps = ceil_steps(measure - rule.threshold, rule.step)
    reduced = base - steps * rule.reduction_per_step
    result = max(reduced, min(rule.floor, base))
    if rounding is not None:
        return round_amount(result, rounding)
    return result


def proportional_phase_out(
    amount: Decimal,
    measure: Decimal,
    start: Decimal,
    width: Decimal,
) -> Decimal:
    """Reduce amount linearly to zero across [start, start + width].

    Used by range-based phase-outs (education credits, student loan
    interest) where the reduction is amount * (measure - start) / width.
    """
    if width <= ZERO:
        raise InvalidInput("phase_out.width", width, "range width must be positive")
    if measure <= start:
        return amount
    fraction = clamp((measure - start) / width, ZERO, Decimal("1"))
    return amount - amount * fraction
