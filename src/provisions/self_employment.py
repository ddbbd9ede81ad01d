"""Self-employment tax (Schedule SE) and Additional Medicare Tax (Form 8959).

The 92.35% net earnings multiplier is statutory (IRC 1402(a)(12)) and is not
part of the yearly parameter set.
"""

from __future__ import annotations

from decimal import Decimal

from src.tax.errors import InvalidInput
from src.tax.money import ZERO, round_amount, to_amount
from src.tax.year_config import FilingStatus, TaxYearParameters

NET_EARNINGS_FACTOR = Decimal("0.9235")
SE_DEDUCTION_RATE = Decimal("0.5")


def net_earnings_from_self_employment(net_profit: Decimal) -> Decimal:
    """Schedule SE line 4a: net profit x 92.35%, never negative.

    Example:
        >>> net_earnings_from_self_employment(Decimal("40000"))
        Decimal('36940.00')
    """
    return to_amount(max(net_profit * NET_EARNINGS_FACTOR, ZERO))


def self_employment_tax(
    net_earnings: Decimal,
    social_security_wages: Decimal,
    params: TaxYearParameters,
) -> Decimal:
    """Schedule SE line 12.

    The Social Security portion applies only to earnings under the wage base
    remaining after W-2 Social Security wages and tips; the Medicare portion
    is uncapped. Net earnings under $400 owe nothing.

    Args:
        net_earnings: Net earnings from self-employment (line 4a).
        social_security_wages: W-2 boxes 3 + 7 already subject to SS tax.
        params: Parameter set for the tax year.

    Returns:
        Self-employment tax, rounded per the parameter set.

    Raises:
        InvalidInput: If W-2 Social Security wages are negative.
    """
    if social_security_wages < ZERO:
        raise InvalidInput("social_security_wages", social_security_wages, "must not be negative")
    if net_earnings < params.se_minimum_net_earnings:
        return to_amount(ZERO)

    wage_base_room = max(params.ss_wage_base - social_security_wages, ZERO)
    social_security = min(net_earnings, wage_base_room) * params.se_ss_rate
    medicare = net_earnings * params.se_medicare_rate
    return round_amount(social_security + medicare, params.rounding_mode)


def self_employment_tax_deduction(se_tax: Decimal, params: TaxYearParameters) -> Decimal:
    """Deductible part of self-employment tax (Schedule 1 line 15)."""
    return round_amount(max(se_tax, ZERO) * SE_DEDUCTION_RATE, params.rounding_mode)


def additional_medicare_tax(
    medicare_wages: Decimal,
    se_net_earnings: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Form 8959 line 18: 0.9% on Medicare wages and SE income over threshold.

    Wages use up the threshold first; SE earnings are taxed above whatever
    threshold the wages leave.
    """
    threshold = params.for_status(
        params.additional_medicare_threshold, filing_status, "additional_medicare_threshold"
    )
    wages = max(medicare_wages, ZERO)
    wage_excess = max(wages - threshold, ZERO)
    se_threshold = max(threshold - wages, ZERO)
    se_excess = max(max(se_net_earnings, ZERO) - se_threshold, ZERO)
    return round_amount(
        (wage_excess + se_excess) * params.additional_medicare_rate, params.rounding_mode
    )
