"""Qualified business income deduction (Form 8995 / 8995-A).

The deduction depends on taxable income before the deduction itself, so the
taxable-income measure is computed upstream (AGI less the line 12 deduction)
and passed in, which keeps the dependency graph acyclic.
"""

from __future__ import annotations

from decimal import Decimal

from src.tax.money import ZERO, round_amount, to_amount
from src.tax.year_config import FilingStatus, TaxYearParameters


def qualified_business_income(
    net_profit: Decimal, positive_net_profit: Decimal, se_tax_deduction: Decimal
) -> Decimal:
    """Business QBI: net profit less its share of the deductible SE tax.

    The SE tax deduction is allocated across the profitable businesses in
    proportion to their net profit. A loss passes through unchanged.

    Args:
        net_profit: This business's Schedule C net profit.
        positive_net_profit: Sum of net profit over the profitable businesses.
        se_tax_deduction: Schedule 1 deductible part of SE tax.
    """
    if net_profit <= ZERO or positive_net_profit <= ZERO:
        return to_amount(net_profit)
    share = net_profit / positive_net_profit
    return to_amount(net_profit - se_tax_deduction * share)


def net_qualified_business_income(
    qbi: Decimal, total_qbi: Decimal, positive_qbi: Decimal
) -> Decimal:
    """QBI of one business after netting the losses of the others.

    Losses reduce the profitable businesses in proportion to their QBI
    (Form 8995-A Schedule C). When total QBI is zero or negative nothing is
    left to deduct.

    Args:
        qbi: This business's QBI.
        total_qbi: Sum of QBI over every business, losses included.
        positive_qbi: Sum of QBI over the businesses with positive QBI.

    Example:
        >>> net_qualified_business_income(Decimal("30000"), Decimal("10000"), Decimal("40000"))
        Decimal('7500.00')
    """
    if qbi <= ZERO or total_qbi <= ZERO or positive_qbi <= ZERO:
        return to_amount(ZERO)
    return to_amount(qbi * min(total_qbi, positive_qbi) / positive_qbi)


def qbi_component(
    qbi: Decimal,
    w2_wages: Decimal,
    ubia: Decimal,
    is_sstb: bool,
    taxable_income: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Deductible QBI component for one business.

    Below the threshold: 20% of QBI. Above it, the W-2 wage/UBIA limit phases
    in over the phase-in range, and a specified service business's QBI,
    wages, and UBIA are scaled by the applicable percentage (zero once past
    the range).

    Args:
        qbi: Qualified business income for the business, after losses of
            other businesses are netted.
        w2_wages: W-2 wages the business paid.
        ubia: Unadjusted basis of qualified property.
        is_sstb: Specified service trade or business.
        taxable_income: Taxable income before the QBI deduction.
        filing_status: Filing status for the threshold.
        params: Parameter set for the tax year.

    Example:
        >>> qbi_component(Decimal("50000"), ZERO, ZERO, False, Decimal("80000"), FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('10000.00')
    """
    if qbi <= ZERO:
        return to_amount(ZERO)

    rules = params.qbi
    threshold = params.for_status(rules.threshold, filing_status, "qbi.threshold")
    width = params.for_status(rules.phase_in_range, filing_status, "qbi.phase_in_range")
    excess = taxable_income - threshold
    if excess <= ZERO:
        return to_amount(qbi * rules.rate)

    phase_in = min(excess / width, Decimal("1"))
    if is_sstb:
        applicable = Decimal("1") - phase_in
        qbi, w2_wages, ubia = qbi * applicable, w2_wages * applicable, ubia * applicable

    tentative = qbi * rules.rate
    wage_limit = max(
        w2_wages * rules.wage_limit_rate,
        w2_wages * rules.wage_ubia_wage_rate + ubia * rules.wage_ubia_property_rate,
    )
    if wage_limit >= tentative:
        return to_amount(tentative)
    if phase_in >= Decimal("1"):
        return to_amount(wage_limit)
    return to_amount(tentative - (tentative - wage_limit) * phase_in)


def qbi_deduction(
    components: Decimal,
    reit_dividends: Decimal,
    taxable_income: Decimal,
    capital_gain: Decimal,
    params: TaxYearParameters,
) -> Decimal:
    """Form 8995 line 15.

    The business components plus 20% of qualified REIT dividends, limited to
    20% of taxable income (before QBI) less net capital gain.

    Args:
        components: Sum of qbi_component over all businesses.
        reit_dividends: Section 199A dividends.
        taxable_income: Taxable income before the QBI deduction.
        capital_gain: Qualified dividends plus net capital gain.
        params: Parameter set for the tax year.
    """
    rules = params.qbi
    combined = max(components, ZERO) + max(reit_dividends, ZERO) * rules.rate
    limit = max(taxable_income - max(capital_gain, ZERO), ZERO) * rules.rate
    return round_amount(max(min(combined, limit), ZERO), params.rounding_mode)
