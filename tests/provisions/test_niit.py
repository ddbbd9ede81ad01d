"""Tests for the net investment income tax."""

from decimal import Decimal

from src.provisions.niit import net_investment_income, net_investment_income_tax
from src.tax.year_config import FilingStatus


class TestNetInvestmentIncomeTax:
    def test_limited_by_magi_excess(self, params_2025) -> None:
        tax = net_investment_income_tax(
            Decimal("30000"), Decimal("220000"), FilingStatus.SINGLE, params_2025
        )
        assert tax == Decimal("760.00")

    def test_limited_by_investment_income(self, params_2025) -> None:
        tax = net_investment_income_tax(
            Decimal("10000"), Decimal("400000"), FilingStatus.SINGLE, params_2025
        )
        assert tax == Decimal("380.00")

    def test_below_threshold(self, params_2025) -> None:
        tax = net_investment_income_tax(
            Decimal("30000"), Decimal("240000"), FilingStatus.MARRIED_FILING_JOINTLY, params_2025
        )
        assert tax == Decimal("0.00")

    def test_net_investment_income_never_negative(self) -> None:
        result = net_investment_income(Decimal("100"), Decimal("200"), Decimal("-3000"))
        assert result == Decimal("0.00")
