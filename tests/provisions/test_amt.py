"""Tests for the alternative minimum tax."""

from __future__ import annotations

from decimal import Decimal

from src.provisions.amt import (
    alternative_minimum_tax,
    alternative_minimum_taxable_income,
    amt_exemption,
    amt_rate_tax,
    regular_taxable_income,
    tentative_minimum_tax,
)
from src.tax.year_config import FilingStatus

SINGLE = FilingStatus.SINGLE


class TestExemption:
    def test_full_exemption_below_threshold(self, params_2025) -> None:
        assert amt_exemption(Decimal("300000"), SINGLE, params_2025) == Decimal("88100.00")

    def test_quarter_per_dollar_phase_out(self, params_2025) -> None:
        assert amt_exemption(Decimal("726350"), SINGLE, params_2025) == Decimal("63100.00")

    def test_cents_of_excess_reduce_exactly(self, params_2025) -> None:
        """A quarter of 1.20 over the threshold, not of a whole-dollar step."""
        assert amt_exemption(Decimal("626351.20"), SINGLE, params_2025) == Decimal("88099.70")

    def test_fully_phased_out(self, params_2025) -> None:
        assert amt_exemption(Decimal("2000000"), SINGLE, params_2025) == Decimal("0.00")


class TestTentativeMinimumTax:
    def test_rate_break(self, params_2025) -> None:
        assert amt_rate_tax(Decimal("100000"), SINGLE, params_2025) == Decimal("26000.00")
        assert amt_rate_tax(Decimal("300000"), SINGLE, params_2025) == Decimal("79218.00")

    def test_after_exemption(self, params_2025) -> None:
        """300,000 less the 88,100 exemption, at 26%."""
        assert tentative_minimum_tax(Decimal("300000"), SINGLE, params_2025) == Decimal(
            "55094.00"
        )

    def test_zero_when_exemption_covers_amti(self, params_2025) -> None:
        assert tentative_minimum_tax(Decimal("50000"), SINGLE, params_2025) == Decimal("0.00")

    def test_capital_gain_rates_apply(self, params_2025) -> None:
        """Part III: 50,000 of dividends at 15%, the rest at 26%."""
        tax = tentative_minimum_tax(
            Decimal("200000"),
            SINGLE,
            params_2025,
            qualified_dividends=Decimal("50000"),
        )
        assert tax == Decimal("23594.00")


class TestAlternativeMinimumTax:
    def test_amti(self) -> None:
        result = alternative_minimum_taxable_income(
            Decimal("100"), Decimal("50"), Decimal("5")
        )
        assert result == Decimal("155.00")

    def test_line_one_is_not_floored(self) -> None:
        assert regular_taxable_income(
            Decimal("10000"), Decimal("15750"), Decimal("0")
        ) == Decimal("-5750.00")

    def test_negative_line_one_offsets_adjustments(self) -> None:
        result = alternative_minimum_taxable_income(
            Decimal("-5750"), Decimal("15750"), Decimal("200000")
        )
        assert result == Decimal("210000.00")

    def test_excess_over_regular_tax(self) -> None:
        assert alternative_minimum_tax(Decimal("55094"), Decimal("50000")) == Decimal("5094.00")

    def test_never_negative(self) -> None:
        assert alternative_minimum_tax(Decimal("1000"), Decimal("5000")) == Decimal("0.00")
