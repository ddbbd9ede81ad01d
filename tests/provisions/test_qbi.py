"""Tests for the qualified business income deduction."""

from __future__ import annotations

from decimal import Decimal

from src.provisions.qbi import (
    net_qualified_business_income,
    qbi_component,
    qbi_deduction,
    qualified_business_income,
)
from src.tax.year_config import FilingStatus

SINGLE = FilingStatus.SINGLE
ZERO = Decimal("0")


class TestQualifiedBusinessIncome:
    def test_single_business_bears_whole_deduction(self) -> None:
        result = qualified_business_income(Decimal("40000"), Decimal("40000"), Decimal("2826"))
        assert result == Decimal("37174.00")

    def test_deduction_allocated_by_profit(self) -> None:
        result = qualified_business_income(Decimal("30000"), Decimal("40000"), Decimal("2826"))
        assert result == Decimal("27880.50")

    def test_loss_passes_through(self) -> None:
        result = qualified_business_income(Decimal("-5000"), Decimal("35000"), Decimal("2826"))
        assert result == Decimal("-5000.00")

    def test_deduction_shared_only_by_profitable_businesses(self) -> None:
        """A loss business takes no share of the SE tax deduction."""
        result = qualified_business_income(Decimal("50000"), Decimal("50000"), Decimal("1413"))
        assert result == Decimal("48587.00")


class TestLossNetting:
    def test_loss_reduces_profitable_businesses_proportionally(self) -> None:
        result = net_qualified_business_income(
            Decimal("30000"), Decimal("10000"), Decimal("40000")
        )
        assert result == Decimal("7500.00")

    def test_no_other_businesses(self) -> None:
        result = net_qualified_business_income(
            Decimal("37174"), Decimal("37174"), Decimal("37174")
        )
        assert result == Decimal("37174.00")

    def test_loss_business_keeps_nothing(self) -> None:
        result = net_qualified_business_income(
            Decimal("-30000"), Decimal("18587"), Decimal("48587")
        )
        assert result == Decimal("0.00")

    def test_net_loss_leaves_nothing(self) -> None:
        result = net_qualified_business_income(
            Decimal("20000"), Decimal("-5000"), Decimal("20000")
        )
        assert result == Decimal("0.00")


class TestQbiComponent:
    def test_below_threshold(self, params_2025) -> None:
        result = qbi_component(
            Decimal("50000"), ZERO, ZERO, False, Decimal("80000"), SINGLE, params_2025
        )
        assert result == Decimal("10000.00")

    def test_loss_has_no_component(self, params_2025) -> None:
        result = qbi_component(
            Decimal("-100"), ZERO, ZERO, False, Decimal("80000"), SINGLE, params_2025
        )
        assert result == Decimal("0.00")

    def test_wage_limit_fully_phased_in(self, params_2025) -> None:
        result = qbi_component(
            Decimal("50000"), Decimal("10000"), ZERO, False, Decimal("300000"), SINGLE, params_2025
        )
        assert result == Decimal("5000.00")

    def test_wage_limit_not_binding(self, params_2025) -> None:
        result = qbi_component(
            Decimal("50000"), Decimal("20000"), ZERO, False, Decimal("300000"), SINGLE, params_2025
        )
        assert result == Decimal("10000.00")

    def test_wage_limit_half_phased_in(self, params_2025) -> None:
        result = qbi_component(
            Decimal("50000"), Decimal("10000"), ZERO, False, Decimal("222300"), SINGLE, params_2025
        )
        assert result == Decimal("7500.00")

    def test_sstb_scaled_within_range(self, params_2025) -> None:
        result = qbi_component(
            Decimal("50000"), Decimal("10000"), ZERO, True, Decimal("222300"), SINGLE, params_2025
        )
        assert result == Decimal("3750.00")

    def test_sstb_above_range(self, params_2025) -> None:
        result = qbi_component(
            Decimal("50000"), Decimal("10000"), ZERO, True, Decimal("300000"), SINGLE, params_2025
        )
        assert result == Decimal("0.00")


class TestQbiDeduction:
    def test_limited_by_taxable_income(self, params_2025) -> None:
        result = qbi_deduction(
            Decimal("7434.80"), ZERO, Decimal("21424"), ZERO, params_2025
        )
        assert result == Decimal("4285.00")

    def test_reit_dividends_added(self, params_2025) -> None:
        result = qbi_deduction(
            Decimal("1000"), Decimal("500"), Decimal("100000"), ZERO, params_2025
        )
        assert result == Decimal("1100.00")

    def test_capital_gain_reduces_limit(self, params_2025) -> None:
        result = qbi_deduction(
            Decimal("10000"), ZERO, Decimal("30000"), Decimal("20000"), params_2025
        )
        assert result == Decimal("2000.00")
