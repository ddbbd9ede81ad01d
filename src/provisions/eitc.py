"""Earned income credit (Schedule EIC / EIC worksheet A)."""

from __future__ import annotations

from decimal import Decimal

from src.tax.errors import InvalidInput, MissingParameter
from src.tax.money import ZERO, round_amount, to_amount
from src.tax.profile import DependentKind, FilingProfile
from src.tax.year_config import EitcSchedule, FilingStatus, TaxYearParameters

MAX_COUNTED_CHILDREN = 3


def eitc_qualifying_children(profile: FilingProfile, params: TaxYearParameters) -> int:
    """Qualifying children for the EIC: under 19, under 24 if a student, or disabled."""
    rules = params.eitc
    return sum(
        1
        for dependent in profile.dependents
        if dependent.kind is DependentKind.QUALIFYING_CHILD
        and (
            dependent.age <= rules.max_child_age
            or (dependent.is_student and dependent.age <= rules.max_student_age)
            or dependent.is_disabled
        )
    )


def _meets_age_test(profile: FilingProfile, params: TaxYearParameters) -> bool:
    rules = params.eitc
    return any(
        rules.min_age_without_children <= person.age <= rules.max_age_without_children
        for person in profile.filers
    )


def _credit_at(income: Decimal, schedule: EitcSchedule, threshold: Decimal) -> Decimal:
    phased_in = min(max(income, ZERO) * schedule.phase_in_rate, schedule.max_credit)
    reduction = max(income - threshold, ZERO) * schedule.phaseout_rate
    return max(phased_in - reduction, ZERO)


def earned_income_credit(
    earned_income: Decimal,
    agi: Decimal,
    investment_income: Decimal,
    qualifying_children: int,
    profile: FilingProfile,
    params: TaxYearParameters,
) -> Decimal:
    """Earned income credit for Form 1040 line 27.

    The credit phases in with earned income up to the plateau, then phases
    out above the threshold. When AGI differs from earned income and is over
    the threshold, the smaller credit of the two measures applies.

    Args:
        earned_income: Wages plus net SE earnings less half SE tax.
        agi: Adjusted gross income.
        investment_income: Interest, dividends, and net capital gain.
        qualifying_children: Children qualifying for the EIC (capped at 3).
        profile: Filing status, dependency, and age facts.
        params: Parameter set for the tax year.

    Returns:
        Credit amount, zero when the filer is ineligible.

    Raises:
        InvalidInput: If the child count is negative.
        MissingParameter: If no schedule exists for the child count.

    Example:
        >>> earned_income_credit(Decimal("9000"), Decimal("9000"), ZERO, 0, single_age_30, TAX_YEAR_2025)
        Decimal('649.00')
    """
    if qualifying_children < 0:
        raise InvalidInput("qualifying_children", qualifying_children, "must not be negative")

    rules = params.eitc
    if (
        profile.filing_status is FilingStatus.MARRIED_FILING_SEPARATELY
        or profile.can_be_claimed_as_dependent
        or investment_income > rules.investment_income_limit
        or earned_income <= ZERO
    ):
        return to_amount(ZERO)
    if qualifying_children == 0 and not _meets_age_test(profile, params):
        return to_amount(ZERO)

    index = min(qualifying_children, MAX_COUNTED_CHILDREN)
    if index >= len(rules.schedules):
        raise MissingParameter(params.tax_year, "eitc.schedules", index)
    schedule = rules.schedules[index]
    threshold = (
        schedule.phaseout_threshold_joint
        if profile.filing_status.is_joint
        else schedule.phaseout_threshold
    )

    credit = _credit_at(earned_income, schedule, threshold)
    if agi != earned_income and agi > threshold:
        credit = min(credit, _credit_at(agi, schedule, threshold))
    return round_amount(credit, params.rounding_mode)
