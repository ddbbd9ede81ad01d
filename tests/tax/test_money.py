"""Tests for currency helpers."""

from decimal import Decimal

from src.tax.money import RoundingMode, ceil_steps, clamp, irs_round, round_amount, to_amount


class TestRounding:
    def test_to_amount_quantizes_to_cents(self) -> None:
        assert to_amount(Decimal("10.005")) == Decimal("10.01")
        assert to_amount(7) == Decimal("7.00")
        assert str(to_amount(Decimal("3875"))) == "3875.00"

    def test_irs_round_half_up(self) -> None:
        """Under 50 cents drops, 50 cents and over rounds up."""
        assert irs_round(Decimal("3874.50")) == Decimal("3875")
        assert irs_round(Decimal("3874.49")) == Decimal("3874")
        assert irs_round(Decimal("-2.50")) == Decimal("-3")

    def test_round_amount_modes(self) -> None:
        value = Decimal("1816.50")
        assert round_amount(value, RoundingMode.WHOLE_DOLLAR) == Decimal("1817.00")
        assert round_amount(value, RoundingMode.CENTS) == Decimal("1816.50")


class TestSteps:
    def test_ceil_steps_counts_fractions(self) -> None:
        """'$1,000 or fraction thereof' counts a partial step as whole."""
        assert ceil_steps(Decimal("1500"), Decimal("1000")) == Decimal("2")
        assert ceil_steps(Decimal("1000"), Decimal("1000")) == Decimal("1")
        assert ceil_steps(Decimal("0.01"), Decimal("1000")) == Decimal("1")

    def test_ceil_steps_non_positive_excess(self) -> None:
        assert ceil_steps(Decimal("0"), Decimal("1000")) == Decimal("0")
        assert ceil_steps(Decimal("-50"), Decimal("1000")) == Decimal("0")

    def test_clamp(self) -> None:
        assert clamp(Decimal("-1")) == Decimal("0")
        assert clamp(Decimal("5"), high=Decimal("3")) == Decimal("3")
        assert clamp(Decimal("2"), Decimal("1"), Decimal("3")) == Decimal("2")
