"""Alternative minimum tax (Form 6251).

This module provides pure functions for:
- AMTI from taxable income and the deduction add-back
- Exemption with the 25-cents-per-dollar phase-out
- Tentative minimum tax at 26%/28%, with Part III capital gain rates
- AMT as the excess of tentative minimum tax over regular tax

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from decimal import Decimal

from src.provisions.brackets import preferential_rate_tax
from src.tax.money import ZERO, round_amount, to_amount
from src.tax.year_config import FilingStatus, TaxYearParameters


def regular_taxable_income(
    agi: Decimal, deduction: Decimal, qbi_deduction: Decimal
) -> Decimal:
    """Form 6251 line 1: AGI less the deduction and the QBI deduction.

    Unlike Form 1040 line 15 this is not floored at zero, so a deduction
    larger than AGI offsets the preference items added back below.

    Example:
        >>> regular_taxable_income(Decimal("10000"), Decimal("15750"), ZERO)
        Decimal('-5750.00')
    """
    return to_amount(agi - deduction - qbi_deduction)


def alternative_minimum_taxable_income(
    taxable_income: Decimal,
    deduction_addback: Decimal,
    other_adjustments: Decimal = ZERO,
) -> Decimal:
    """Form 6251 line 4.

    Args:
        taxable_income: Line 1, from regular_taxable_income; may be negative.
        deduction_addback: Standard deduction when taken (line 1 uses AGI
            less itemized), otherwise Schedule A taxes (line 2a).
        other_adjustments: Remaining preference items, as entered.
    """
    return to_amount(taxable_income + deduction_addback + other_adjustments)


def amt_exemption(
    amti: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Form 6251 line 5: exemption reduced by 25% of AMTI over the threshold.

    Example:
        >>> amt_exemption(Decimal("726350"), FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('63100.00')
    """
    rules = params.amt
    base = params.for_status(rules.exemption, filing_status, "amt.exemption")
    threshold = params.for_status(
        rules.exemption_threshold, filing_status, "amt.exemption_threshold"
    )
    reduction = max(amti - threshold, ZERO) * rules.exemption_phaseout_rate
    return to_amount(max(base - reduction, ZERO))


def amt_rate_tax(
    amount: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """26% up to the rate break, 28% above it; unrounded."""
    if amount <= ZERO:
        return ZERO
    rate_break = params.for_status(params.amt.rate_break, filing_status, "amt.rate_break")
    if amount <= rate_break:
        return amount * params.amt.low_rate
    return rate_break * params.amt.low_rate + (amount - rate_break) * params.amt.high_rate


def tentative_minimum_tax(
    amti: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
    qualified_dividends: Decimal = ZERO,
    net_capital_gain: Decimal = ZERO,
) -> Decimal:
    """Form 6251 line 9.

    With qualified dividends or net capital gain, the Part III worksheet
    taxes those at capital gain rates and the rest at AMT rates.

    Returns:
        Tentative minimum tax, rounded per the parameter set.
    """
    base = max(amti - amt_exemption(amti, filing_status, params), ZERO)
    if base <= ZERO:
        return to_amount(ZERO)

    if max(qualified_dividends, ZERO) + max(net_capital_gain, ZERO) > ZERO:

        def ordinary(amount: Decimal) -> Decimal:
            return amt_rate_tax(amount, filing_status, params)

        tax = preferential_rate_tax(
            base, qualified_dividends, net_capital_gain, filing_status, params, ordinary
        )
    else:
        tax = amt_rate_tax(base, filing_status, params)
    return round_amount(tax, params.rounding_mode)


def alternative_minimum_tax(tentative: Decimal, regular_tax: Decimal) -> Decimal:
    """Form 6251 line 11: excess of tentative minimum tax over regular tax."""
    return to_amount(max(tentative - regular_tax, ZERO))
