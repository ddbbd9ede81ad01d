"""Tests for tax-year parameter sets."""

from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest

from src.tax.errors import MissingParameter
from src.tax.money import RoundingMode
from src.tax.year_config import (
    DEFAULT_CREDIT_ORDER,
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    Bracket,
    CreditKind,
    FilingStatus,
    get_tax_year_parameters,
)


class TestRegistry:
    """Tests for get_tax_year_parameters."""

    def test_returns_registered_years(self) -> None:
        """Both supported years resolve to their parameter sets."""
        assert get_tax_year_parameters(2024) is TAX_YEAR_2024
        assert get_tax_year_parameters(2025) is TAX_YEAR_2025

    def test_unknown_year_is_missing_parameter(self) -> None:
        """An unsupported year is a data-completeness error, not a fallback."""
        with pytest.raises(MissingParameter) as exc_info:
            get_tax_year_parameters(2031)

        assert exc_info.value.tax_year == 2031
        assert exc_info.value.parameter == "tax_year_parameters"


class TestPublishedValues:
    """Spot checks against IRS-published amounts."""

    def test_2025_standard_deduction(self) -> None:
        params = TAX_YEAR_2025
        assert params.standard_deduction[FilingStatus.SINGLE] == Decimal("15750")
        assert params.standard_deduction[FilingStatus.MARRIED_FILING_JOINTLY] == Decimal("31500")
        assert params.standard_deduction[FilingStatus.HEAD_OF_HOUSEHOLD] == Decimal("23625")

    def test_2024_single_brackets(self) -> None:
        thresholds = [bracket.threshold for bracket in TAX_YEAR_2024.brackets[FilingStatus.SINGLE]]
        assert thresholds == [
            Decimal(value) for value in (0, 11600, 47150, 100525, 191950, 243725, 609350)
        ]

    def test_defaults(self) -> None:
        """Whole-dollar rounding and the default credit order apply to both years."""
        for params in (TAX_YEAR_2024, TAX_YEAR_2025):
            assert params.rounding_mode is RoundingMode.WHOLE_DOLLAR
            assert params.nonrefundable_credit_order == DEFAULT_CREDIT_ORDER
            assert params.nonrefundable_credit_order[0] is CreditKind.FOREIGN_TAX
            assert params.nonrefundable_credit_order[-1] is CreditKind.CHILD_AND_OTHER_DEPENDENT


class TestForStatus:
    """Tests for per-status lookups."""

    def test_present_entry(self) -> None:
        params = TAX_YEAR_2025
        assert params.for_status(
            params.niit_threshold, FilingStatus.MARRIED_FILING_JOINTLY, "niit_threshold"
        ) == Decimal("250000")

    def test_absent_entry_raises_missing_parameter(self) -> None:
        """Student loan tables have no MFS row."""
        params = TAX_YEAR_2025
        with pytest.raises(MissingParameter) as exc_info:
            params.for_status(
                params.student_loan.phaseout_start,
                FilingStatus.MARRIED_FILING_SEPARATELY,
                "student_loan.phaseout_start",
            )

        error = exc_info.value
        assert error.parameter == "student_loan.phaseout_start"
        assert error.key == "mfs"
        assert "2025" in str(error)

    def test_absent_table_raises_missing_parameter(self) -> None:
        with pytest.raises(MissingParameter):
            TAX_YEAR_2024.for_status(None, FilingStatus.SINGLE, "salt.phaseout")


class TestValidation:
    """Parameter sets are validated and immutable."""

    def test_rejects_missing_status(self) -> None:
        brackets = dict(TAX_YEAR_2025.brackets)
        del brackets[FilingStatus.HEAD_OF_HOUSEHOLD]

        with pytest.raises(ValueError, match="hoh"):
            dataclasses.replace(TAX_YEAR_2025, brackets=brackets)

    def test_rejects_non_increasing_thresholds(self) -> None:
        brackets = dict(TAX_YEAR_2025.brackets)
        brackets[FilingStatus.SINGLE] = (
            Bracket(Decimal("0"), Decimal("0.10")),
            Bracket(Decimal("5000"), Decimal("0.12")),
            Bracket(Decimal("5000"), Decimal("0.22")),
        )

        with pytest.raises(ValueError, match="strictly increasing"):
            dataclasses.replace(TAX_YEAR_2025, brackets=brackets)

    def test_rejects_table_not_starting_at_zero(self) -> None:
        brackets = dict(TAX_YEAR_2025.brackets)
        brackets[FilingStatus.SINGLE] = (Bracket(Decimal("100"), Decimal("0.10")),)

        with pytest.raises(ValueError, match="start at 0"):
            dataclasses.replace(TAX_YEAR_2025, brackets=brackets)

    def test_rejects_rate_out_of_range(self) -> None:
        brackets = dict(TAX_YEAR_2025.brackets)
        brackets[FilingStatus.SINGLE] = (Bracket(Decimal("0"), Decimal("1.5")),)

        with pytest.raises(ValueError, match="rate"):
            dataclasses.replace(TAX_YEAR_2025, brackets=brackets)

    def test_parameter_set_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            TAX_YEAR_2025.tax_year = 2026  # type: ignore[misc]

    def test_tables_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            TAX_YEAR_2025.standard_deduction[FilingStatus.SINGLE] = Decimal("1")  # type: ignore[index]


class TestFilingStatus:
    def test_is_joint(self) -> None:
        assert FilingStatus.MARRIED_FILING_JOINTLY.is_joint
        assert not FilingStatus.MARRIED_FILING_SEPARATELY.is_joint
        assert not FilingStatus.QUALIFYING_SURVIVING_SPOUSE.is_joint

    def test_married_additional_deduction(self) -> None:
        assert FilingStatus.QUALIFYING_SURVIVING_SPOUSE.uses_married_additional_deduction
        assert not FilingStatus.HEAD_OF_HOUSEHOLD.uses_married_additional_deduction
