"""Net investment income tax (Form 8960)."""

from __future__ import annotations

from decimal import Decimal

from src.tax.money import ZERO, round_amount, to_amount
from src.tax.year_config import FilingStatus, TaxYearParameters


def net_investment_income(
    interest: Decimal,
    ordinary_dividends: Decimal,
    capital_gain: Decimal,
) -> Decimal:
    """Form 8960 line 12: interest, dividends, and net gain, never negative.

    capital_gain is the Form 1040 line 7 amount, so losses are already
    limited.
    """
    return to_amount(max(interest + ordinary_dividends + capital_gain, ZERO))


def net_investment_income_tax(
    investment_income: Decimal,
    magi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """3.8% of the smaller of net investment income and MAGI over threshold.

    Example:
        >>> net_investment_income_tax(Decimal("30000"), Decimal("220000"), FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('760.00')
    """
    threshold = params.for_status(params.niit_threshold, filing_status, "niit_threshold")
    taxable = min(max(investment_income, ZERO), max(magi - threshold, ZERO))
    return round_amount(taxable * params.niit_rate, params.rounding_mode)
