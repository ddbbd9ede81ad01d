"""Regular income tax: rate schedules, the tax table, and capital gain rates.

This module provides pure functions for computing Form 1040 line 16:
- bracket_tax: exact marginal-bracket formula
- tax_table_income: the IRS Tax Table band midpoint for a taxable income
- regular_tax: table below the ceiling, exact formula above, rounded once
- preferential_rate_tax: Qualified Dividends and Capital Gain Tax Worksheet,
  parameterized on the ordinary-tax function so Form 6251 Part III can reuse it

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from src.tax.money import ZERO, round_amount
from src.tax.year_config import FilingStatus, TaxYearParameters

# Tax Table band layout (Form 1040 instructions)
_TABLE_SMALL_BANDS: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("5"), ZERO),
    (Decimal("15"), Decimal("10")),
    (Decimal("25"), Decimal("20")),
)
_TABLE_NARROW_LIMIT = Decimal("3000")
_TABLE_NARROW_WIDTH = Decimal("25")
_TABLE_WIDE_WIDTH = Decimal("50")


@dataclass(frozen=True)
class BracketSlice:
    """Portion of income taxed within one bracket."""

    threshold: Decimal
    rate: Decimal
    income_in_bracket: Decimal
    tax_in_bracket: Decimal


def bracket_breakdown(
    taxable_income: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> list[BracketSlice]:
    """Split income across the filing status's brackets.

    Args:
        taxable_income: Income to tax; negative values are clamped to zero.
        filing_status: Filing status selecting the rate schedule.
        params: Parameter set for the tax year.

    Returns:
        One BracketSlice per bracket that holds any income, lowest first.

    Raises:
        MissingParameter: If the parameter set has no schedule for the status.
    """
    brackets = params.for_status(params.brackets, filing_status, "brackets")
    remaining = max(taxable_income, ZERO)
    slices: list[BracketSlice] = []

    for index, bracket in enumerate(brackets):
        if remaining <= ZERO:
            break
        if index + 1 < len(brackets):
            width = brackets[index + 1].threshold - bracket.threshold
            income_here = min(remaining, width)
        else:
            income_here = remaining
        slices.append(
            BracketSlice(
                threshold=bracket.threshold,
                rate=bracket.rate,
                income_in_bracket=income_here,
                tax_in_bracket=income_here * bracket.rate,
            )
        )
        remaining -= income_here

    return slices


def bracket_tax(
    taxable_income: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Exact marginal-bracket tax, unrounded.

    Sum over brackets fully below income of (width x rate) plus the remaining
    income in the current bracket x its rate. Never negative.

    Example:
        >>> bracket_tax(Decimal("34275"), FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('3874.50')
    """
    return sum(
        (piece.tax_in_bracket for piece in bracket_breakdown(taxable_income, filing_status, params)),
        ZERO,
    )


def tax_table_income(taxable_income: Decimal) -> Decimal:
    """Income figure the IRS Tax Table taxes for a given taxable income.

    The table prices each band at its midpoint: $25 bands below $3,000 (with
    three special rows under $25) and $50 bands up to the table ceiling.
    """
    if taxable_income <= ZERO:
        return ZERO
    for upper, midpoint in _TABLE_SMALL_BANDS:
        if taxable_income < upper:
            return midpoint
    width = _TABLE_NARROW_WIDTH if taxable_income < _TABLE_NARROW_LIMIT else _TABLE_WIDE_WIDTH
    band_start = (taxable_income // width) * width
    return band_start + width / 2


def ordinary_income_tax(
    taxable_income: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Tax on ordinary income, unrounded.

    Below the tax table ceiling the table midpoint is taxed; at or above it
    the exact formula (Tax Computation Worksheet) applies.
    """
    if taxable_income <= ZERO:
        return ZERO
    if taxable_income < params.tax_table_ceiling:
        return bracket_tax(tax_table_income(taxable_income), filing_status, params)
    return bracket_tax(taxable_income, filing_status, params)


def regular_tax(
    taxable_income: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Tax on ordinary income, rounded per the parameter set's rounding mode."""
    return round_amount(
        ordinary_income_tax(taxable_income, filing_status, params), params.rounding_mode
    )


def preferential_rate_tax(
    taxable_income: Decimal,
    qualified_dividends: Decimal,
    net_capital_gain: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
    ordinary_tax: Callable[[Decimal], Decimal],
) -> Decimal:
    """Qualified Dividends and Capital Gain Tax Worksheet, unrounded.

    Args:
        taxable_income: Line 1 (taxable income, or the AMT base for Part III).
        qualified_dividends: Line 2.
        net_capital_gain: Line 3, the smaller of Schedule D lines 15 and 16
            (zero if either is a loss).
        filing_status: Filing status for the 0%/15% thresholds.
        params: Parameter set for the tax year.
        ordinary_tax: Tax function applied to the ordinary portion and to the
            whole income (regular schedule, or AMT 26/28% for Part III).

    Returns:
        The smaller of the split computation and ordinary tax on everything.
    """
    if taxable_income <= ZERO:
        return ZERO

    zero_ceiling, fifteen_ceiling = params.for_status(
        params.capital_gain_thresholds, filing_status, "capital_gain_thresholds"
    )
    _, fifteen_rate, twenty_rate = params.capital_gain_rates

    preferential = max(qualified_dividends, ZERO) + max(net_capital_gain, ZERO)
    ordinary = max(taxable_income - preferential, ZERO)  # line 5

    at_zero_cap = min(taxable_income, zero_ceiling)  # line 7
    ordinary_in_zero = min(ordinary, at_zero_cap)  # line 8
    taxed_at_zero = at_zero_cap - ordinary_in_zero  # line 9

    preferential_taxed = min(taxable_income, preferential)  # line 10
    above_zero = preferential_taxed - taxed_at_zero  # line 12
    at_fifteen_cap = min(taxable_income, fifteen_ceiling)  # line 14
    room_at_fifteen = max(at_fifteen_cap - (ordinary + taxed_at_zero), ZERO)  # line 16
    taxed_at_fifteen = min(above_zero, room_at_fifteen)  # line 17
    taxed_at_twenty = preferential_taxed - (taxed_at_zero + taxed_at_fifteen)  # line 20

    split_tax = (
        taxed_at_fifteen * fifteen_rate
        + taxed_at_twenty * twenty_rate
        + ordinary_tax(ordinary)
    )
    return min(split_tax, ordinary_tax(taxable_income))


def capital_gain_tax(
    taxable_income: Decimal,
    qualified_dividends: Decimal,
    net_capital_gain: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Form 1040 line 16: regular tax with preferential capital gain rates.

    Falls back to regular_tax when there is no qualified dividend or net
    capital gain. Rounding is applied once, at the end.

    Example:
        >>> capital_gain_tax(Decimal("34250"), ZERO, ZERO, FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('3875.00')
    """
    if max(qualified_dividends, ZERO) + max(net_capital_gain, ZERO) <= ZERO:
        return regular_tax(taxable_income, filing_status, params)

    def ordinary(amount: Decimal) -> Decimal:
        return ordinary_income_tax(amount, filing_status, params)

    tax = preferential_rate_tax(
        taxable_income,
        qualified_dividends,
        net_capital_gain,
        filing_status,
        params,
        ordinary,
    )
    return round_amount(tax, params.rounding_mode)
