"""Tests for credit provisions."""

from __future__ import annotations

from decimal import Decimal

import pytest

from src.provisions.credits import (
    EducationCredits,
    additional_child_tax_credit,
    american_opportunity_tentative,
    apply_credit_order,
    child_tax_credit,
    ctc_qualifying_children,
    dependent_care_credit,
    dependent_care_qualifying_persons,
    early_distribution_tax,
    education_credits,
    foreign_tax_credit,
    foreign_tax_limitation,
    odc_dependents,
    savers_credit,
)
from src.tax.errors import InvalidInput, MissingInput
from src.tax.profile import Dependent, DependentKind
from src.tax.year_config import DEFAULT_CREDIT_ORDER, CreditKind, FilingStatus
from tests.factories import make_profile

SINGLE = FilingStatus.SINGLE
MFJ = FilingStatus.MARRIED_FILING_JOINTLY
MFS = FilingStatus.MARRIED_FILING_SEPARATELY
ZERO = Decimal("0")


# =============================================================================
# Child tax credit
# =============================================================================


class TestChildTaxCredit:
    def test_three_children_before_limit(self, params_2025) -> None:
        assert child_tax_credit(3, 0, Decimal("50000"), MFJ, params_2025) == Decimal("6600.00")

    def test_phase_out_with_other_dependent(self, params_2025) -> None:
        """4,900 base; 10,500 over threshold is 11 steps of $50."""
        credit = child_tax_credit(2, 1, Decimal("410500"), MFJ, params_2025)
        assert credit == Decimal("4350.00")

    def test_no_dependents(self, params_2025) -> None:
        assert child_tax_credit(0, 0, Decimal("50000"), SINGLE, params_2025) == Decimal("0.00")

    def test_negative_count_rejected(self, params_2025) -> None:
        with pytest.raises(InvalidInput):
            child_tax_credit(-1, 0, Decimal("50000"), SINGLE, params_2025)

    def test_dependent_classification(self, params_2025) -> None:
        profile = make_profile(
            FilingStatus.HEAD_OF_HOUSEHOLD,
            dependents=(
                Dependent(kind=DependentKind.QUALIFYING_CHILD, age=5),
                Dependent(kind=DependentKind.QUALIFYING_CHILD, age=16),
                Dependent(kind=DependentKind.QUALIFYING_CHILD, age=17),
                Dependent(kind=DependentKind.OTHER_DEPENDENT, age=70),
            ),
        )
        assert ctc_qualifying_children(profile, params_2025) == 2
        assert odc_dependents(profile, params_2025) == 2


class TestAdditionalChildTaxCredit:
    def test_unused_credit_is_refundable(self, params_2025) -> None:
        """Smallest of 4,747 unused, 5,100 cap, and 7,125 earned-income amount."""
        actc = additional_child_tax_credit(
            Decimal("6600"), Decimal("1853"), 3, Decimal("50000"), params_2025
        )
        assert actc == Decimal("4747.00")

    def test_limited_by_earned_income(self, params_2025) -> None:
        actc = additional_child_tax_credit(
            Decimal("6600"), ZERO, 3, Decimal("10000"), params_2025
        )
        assert actc == Decimal("1125.00")

    def test_no_qualifying_children(self, params_2025) -> None:
        actc = additional_child_tax_credit(
            Decimal("500"), ZERO, 0, Decimal("50000"), params_2025
        )
        assert actc == Decimal("0.00")


# =============================================================================
# Dependent care, education, saver's
# =============================================================================


class TestDependentCareCredit:
    def test_one_person(self, params_2025) -> None:
        """3,000 cap at 22% (13 steps over 15,000)."""
        credit = dependent_care_credit(
            Decimal("5000"), 1, (Decimal("40000"),), Decimal("40000"), SINGLE, params_2025
        )
        assert credit == Decimal("660.00")

    def test_limited_by_lower_earner(self, params_2025) -> None:
        credit = dependent_care_credit(
            Decimal("8000"),
            2,
            (Decimal("50000"), Decimal("2000")),
            Decimal("52000"),
            MFJ,
            params_2025,
        )
        assert credit == Decimal("400.00")

    def test_separate_return_ineligible(self, params_2025) -> None:
        credit = dependent_care_credit(
            Decimal("5000"), 1, (Decimal("40000"),), Decimal("40000"), MFS, params_2025
        )
        assert credit == Decimal("0.00")

    def test_qualifying_persons(self, params_2025) -> None:
        profile = make_profile(
            FilingStatus.HEAD_OF_HOUSEHOLD,
            dependents=(
                Dependent(kind=DependentKind.QUALIFYING_CHILD, age=5),
                Dependent(kind=DependentKind.QUALIFYING_CHILD, age=12),
                Dependent(kind=DependentKind.QUALIFYING_CHILD, age=13),
                Dependent(kind=DependentKind.OTHER_DEPENDENT, age=40, is_disabled=True),
            ),
        )
        assert dependent_care_qualifying_persons(profile, params_2025) == 3


class TestEducationCredits:
    @pytest.mark.parametrize(
        ("expenses", "expected"),
        [("1500", "1500.00"), ("3000", "2250.00"), ("4000", "2500.00"), ("9000", "2500.00")],
    )
    def test_aoc_tentative(self, params_2025, expenses: str, expected: str) -> None:
        assert american_opportunity_tentative(Decimal(expenses), params_2025) == Decimal(expected)

    def test_aoc_phase_out_and_refundable_split(self, params_2025) -> None:
        result = education_credits(Decimal("2500"), ZERO, Decimal("85000"), SINGLE, params_2025)
        assert result == EducationCredits(
            refundable=Decimal("500.00"), nonrefundable=Decimal("750.00")
        )

    def test_lifetime_learning_capped(self, params_2025) -> None:
        result = education_credits(ZERO, Decimal("12000"), Decimal("50000"), SINGLE, params_2025)
        assert result.refundable == Decimal("0.00")
        assert result.nonrefundable == Decimal("2000.00")

    def test_separate_return_ineligible(self, params_2025) -> None:
        result = education_credits(Decimal("2500"), ZERO, Decimal("10000"), MFS, params_2025)
        assert result.refundable + result.nonrefundable == Decimal("0.00")


class TestSaversCredit:
    @pytest.mark.parametrize(
        ("agi", "expected"),
        [("20000", "1000.00"), ("25000", "400.00"), ("30000", "200.00"), ("50000", "0.00")],
    )
    def test_rate_tiers(self, params_2025, agi: str, expected: str) -> None:
        credit = savers_credit([Decimal("3000")], Decimal(agi), SINGLE, params_2025)
        assert credit == Decimal(expected)

    def test_joint_contributions_capped_per_person(self, params_2025) -> None:
        credit = savers_credit(
            [Decimal("2500"), Decimal("1500")], Decimal("40000"), MFJ, params_2025
        )
        assert credit == Decimal("1750.00")

    def test_dependent_ineligible(self, params_2025) -> None:
        credit = savers_credit(
            [Decimal("2000")], Decimal("10000"), SINGLE, params_2025, is_dependent=True
        )
        assert credit == Decimal("0.00")


# =============================================================================
# Foreign tax, ordering, early distributions
# =============================================================================


class TestForeignTaxCredit:
    def test_de_minimis_without_form_1116(self, params_2025) -> None:
        assert foreign_tax_credit(Decimal("250"), SINGLE, params_2025) == Decimal("250.00")
        assert foreign_tax_credit(Decimal("550"), MFJ, params_2025) == Decimal("550.00")

    def test_limitation_required_above_de_minimis(self, params_2025) -> None:
        with pytest.raises(MissingInput) as exc_info:
            foreign_tax_credit(Decimal("500"), SINGLE, params_2025)
        assert exc_info.value.reference == "1116.limitation"
        assert exc_info.value.line is None

    def test_limitation_applies(self, params_2025) -> None:
        credit = foreign_tax_credit(
            Decimal("500"), SINGLE, params_2025, limitation=Decimal("400")
        )
        assert credit == Decimal("400.00")

    def test_limitation_fraction(self) -> None:
        limitation = foreign_tax_limitation(Decimal("5000"), Decimal("10000"), Decimal("50000"))
        assert limitation == Decimal("1000.00")
        assert foreign_tax_limitation(Decimal("5000"), Decimal("10000"), ZERO) == Decimal("0.00")


class TestCreditOrder:
    def test_each_credit_capped_at_remaining_liability(self) -> None:
        allowed = apply_credit_order(
            Decimal("1000"),
            {
                CreditKind.EDUCATION: Decimal("600"),
                CreditKind.CHILD_AND_OTHER_DEPENDENT: Decimal("2200"),
            },
            DEFAULT_CREDIT_ORDER,
        )
        assert allowed == {
            CreditKind.FOREIGN_TAX: Decimal("0.00"),
            CreditKind.DEPENDENT_CARE: Decimal("0.00"),
            CreditKind.EDUCATION: Decimal("600.00"),
            CreditKind.RETIREMENT_SAVINGS: Decimal("0.00"),
            CreditKind.CHILD_AND_OTHER_DEPENDENT: Decimal("400.00"),
        }

    def test_order_decides_who_is_limited(self) -> None:
        tentative = {
            CreditKind.EDUCATION: Decimal("600"),
            CreditKind.CHILD_AND_OTHER_DEPENDENT: Decimal("2200"),
        }
        reversed_order = tuple(reversed(DEFAULT_CREDIT_ORDER))
        allowed = apply_credit_order(Decimal("1000"), tentative, reversed_order)
        assert allowed[CreditKind.CHILD_AND_OTHER_DEPENDENT] == Decimal("1000.00")
        assert allowed[CreditKind.EDUCATION] == Decimal("0.00")

    def test_no_liability(self) -> None:
        allowed = apply_credit_order(
            Decimal("-5"), {CreditKind.FOREIGN_TAX: Decimal("100")}, DEFAULT_CREDIT_ORDER
        )
        assert sum(allowed.values()) == Decimal("0.00")


class TestEarlyDistributionTax:
    def test_code_one(self, params_2025) -> None:
        assert early_distribution_tax(Decimal("10000"), "1", params_2025) == Decimal("1000.00")

    def test_normal_distribution(self, params_2025) -> None:
        assert early_distribution_tax(Decimal("10000"), "7", params_2025) == Decimal("0.00")
