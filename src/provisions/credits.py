"""Tax credit provisions.

This module provides pure functions for:
- Child tax credit and credit for other dependents, with phase-out
- Additional (refundable) child tax credit
- Child and dependent care credit
- Education credits (American opportunity and lifetime learning)
- Retirement savings contributions credit
- Foreign tax credit
- Ordering of nonrefundable credits against liability
- Additional tax on early retirement distributions

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from src.provisions.phaseout import phase_out, proportional_phase_out
from src.tax.errors import InvalidInput, MissingInput
from src.tax.money import ZERO, round_amount, to_amount
from src.tax.profile import DependentKind, FilingProfile
from src.tax.year_config import CreditKind, FilingStatus, TaxYearParameters

EARLY_DISTRIBUTION_CODE = "1"


def _require_non_negative(field: str, value: Decimal | int) -> None:
    if value < 0:
        raise InvalidInput(field, value, "must not be negative")


# =============================================================================
# Child Tax Credit (Schedule 8812)
# =============================================================================


def ctc_qualifying_children(profile: FilingProfile, params: TaxYearParameters) -> int:
    """Qualifying children young enough for the child tax credit (under 17)."""
    return sum(
        1
        for dependent in profile.dependents
        if dependent.kind is DependentKind.QUALIFYING_CHILD
        and dependent.age <= params.ctc.max_child_age
    )


def odc_dependents(profile: FilingProfile, params: TaxYearParameters) -> int:
    """Dependents eligible only for the $500 credit for other dependents."""
    return len(profile.dependents) - ctc_qualifying_children(profile, params)


def child_tax_credit(
    qualifying_children: int,
    other_dependents: int,
    magi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Schedule 8812 line 12: combined CTC and ODC after the phase-out.

    Reduced $50 for each $1,000 (or fraction) of MAGI over the threshold.

    Raises:
        InvalidInput: If a dependent count is negative.

    Example:
        >>> child_tax_credit(3, 0, Decimal("50000"), FilingStatus.MARRIED_FILING_JOINTLY, TAX_YEAR_2025)
        Decimal('6600.00')
    """
    _require_non_negative("qualifying_children", qualifying_children)
    _require_non_negative("other_dependents", other_dependents)
    base = (
        params.ctc.per_child * qualifying_children
        + params.ctc.per_other_dependent * other_dependents
    )
    if base <= ZERO:
        return to_amount(ZERO)
    rule = params.for_status(params.ctc.phaseout, filing_status, "ctc.phaseout")
    return to_amount(phase_out(base, magi, rule, params.rounding_mode))


def additional_child_tax_credit(
    tentative_credit: Decimal,
    credit_allowed: Decimal,
    qualifying_children: int,
    earned_income: Decimal,
    params: TaxYearParameters,
) -> Decimal:
    """Schedule 8812 line 27: refundable portion of the unused credit.

    The smallest of the credit the liability could not absorb, the
    per-child refundable maximum, and 15% of earned income over $2,500.

    Args:
        tentative_credit: Combined CTC/ODC after phase-out (line 12).
        credit_allowed: Nonrefundable amount actually used against tax.
        qualifying_children: Children under 17.
        earned_income: Earned income for the refundable computation.
        params: Parameter set for the tax year.
    """
    _require_non_negative("qualifying_children", qualifying_children)
    if qualifying_children == 0:
        return to_amount(ZERO)
    unused = max(tentative_credit - credit_allowed, ZERO)
    per_child_cap = params.ctc.refundable_max_per_child * qualifying_children
    earned_portion = (
        max(earned_income - params.ctc.earned_income_threshold, ZERO)
        * params.ctc.refundable_rate
    )
    return round_amount(min(unused, per_child_cap, earned_portion), params.rounding_mode)


# =============================================================================
# Child and Dependent Care (Form 2441)
# =============================================================================


def dependent_care_qualifying_persons(
    profile: FilingProfile, params: TaxYearParameters
) -> int:
    """Dependents under 13, or any age if disabled."""
    return sum(
        1
        for dependent in profile.dependents
        if dependent.age <= params.dependent_care.max_child_age or dependent.is_disabled
    )


def dependent_care_credit(
    expenses: Decimal,
    qualifying_persons: int,
    earned_incomes: Sequence[Decimal],
    agi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Form 2441 line 9c.

    Expenses are capped at $3,000 (one person) or $6,000 (two or more) and at
    the earned income of each filer; the 35% rate drops 1 point per $2,000 of
    AGI over $15,000, never below 20%.

    Args:
        expenses: Qualified care expenses paid.
        qualifying_persons: Number of qualifying persons.
        earned_incomes: Earned income of each filer (two on a joint return).
        agi: Adjusted gross income.
        filing_status: Married filing separately is treated as ineligible.
        params: Parameter set for the tax year.

    Raises:
        InvalidInput: If expenses or the person count is negative.
    """
    _require_non_negative("dependent_care_expenses", expenses)
    _require_non_negative("qualifying_persons", qualifying_persons)
    if qualifying_persons == 0 or filing_status is FilingStatus.MARRIED_FILING_SEPARATELY:
        return to_amount(ZERO)

    rules = params.dependent_care
    cap = rules.max_expenses_one if qualifying_persons == 1 else rules.max_expenses_two_or_more
    allowed = min(expenses, cap, *(max(income, ZERO) for income in earned_incomes))
    rate = phase_out(rules.base_rate, agi, rules.rate_phaseout)
    return round_amount(allowed * rate, params.rounding_mode)


# =============================================================================
# Education Credits (Form 8863)
# =============================================================================


@dataclass(frozen=True)
class EducationCredits:
    """Education credits after the MAGI phase-out.

    Attributes:
        refundable: Refundable AOC portion (Form 8863 line 8).
        nonrefundable: Remaining AOC plus LLC (Form 8863 line 19).
    """

    refundable: Decimal
    nonrefundable: Decimal


def american_opportunity_tentative(expenses: Decimal, params: TaxYearParameters) -> Decimal:
    """Per-student AOC before phase-out: 100% of $2,000 plus 25% of the next $2,000."""
    _require_non_negative("education_expenses", expenses)
    rules = params.education
    first = min(expenses, rules.aoc_full_expenses)
    second = min(max(expenses - rules.aoc_full_expenses, ZERO), rules.aoc_partial_expenses)
    return to_amount(first + second * rules.aoc_partial_rate)


def education_credits(
    aoc_tentative: Decimal,
    llc_expenses: Decimal,
    magi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> EducationCredits:
    """Phase out the AOC and LLC and split the refundable AOC portion.

    Both credits are reduced proportionally across the MAGI range; 40% of
    the phased AOC is refundable. Married filing separately gets neither.

    Example:
        >>> education_credits(Decimal("2500"), ZERO, Decimal("85000"), FilingStatus.SINGLE, TAX_YEAR_2025)
        EducationCredits(refundable=Decimal('500.00'), nonrefundable=Decimal('750.00'))
    """
    _require_non_negative("aoc_tentative", aoc_tentative)
    _require_non_negative("llc_expenses", llc_expenses)
    if filing_status is FilingStatus.MARRIED_FILING_SEPARATELY:
        return EducationCredits(to_amount(ZERO), to_amount(ZERO))

    rules = params.education
    start = params.for_status(rules.phaseout_start, filing_status, "education.phaseout_start")
    width = params.for_status(rules.phaseout_range, filing_status, "education.phaseout_range")

    aoc = proportional_phase_out(aoc_tentative, magi, start, width)
    refundable = round_amount(aoc * rules.aoc_refundable_fraction, params.rounding_mode)
    aoc_nonrefundable = round_amount(aoc, params.rounding_mode) - refundable

    llc_tentative = min(llc_expenses, rules.llc_max_expenses) * rules.llc_rate
    llc = round_amount(
        proportional_phase_out(llc_tentative, magi, start, width), params.rounding_mode
    )
    return EducationCredits(
        refundable=refundable,
        nonrefundable=to_amount(max(aoc_nonrefundable, ZERO) + llc),
    )


# =============================================================================
# Retirement Savings (Form 8880)
# =============================================================================


def savers_credit_rate(
    agi: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Credit rate for the AGI tier: 50%, 20%, 10%, or 0% above the last tier."""
    tiers = params.for_status(params.savers.tiers, filing_status, "savers.tiers")
    for limit, rate in tiers:
        if agi <= limit:
            return rate
    return ZERO


def savers_credit(
    contributions: Sequence[Decimal],
    agi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
    is_dependent: bool = False,
) -> Decimal:
    """Form 8880 line 12 before the liability limit.

    Args:
        contributions: Eligible contributions per filer (taxpayer, spouse).
        agi: Adjusted gross income.
        filing_status: Filing status for the AGI tiers.
        params: Parameter set for the tax year.
        is_dependent: Filers claimed as a dependent cannot take the credit.
    """
    for amount in contributions:
        _require_non_negative("retirement_contributions", amount)
    if is_dependent:
        return to_amount(ZERO)
    rate = savers_credit_rate(agi, filing_status, params)
    eligible = sum(
        (min(amount, params.savers.max_contribution_per_person) for amount in contributions),
        ZERO,
    )
    return round_amount(eligible * rate, params.rounding_mode)


# =============================================================================
# Foreign Tax Credit
# =============================================================================


def foreign_tax_credit(
    foreign_tax_paid: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
    limitation: Decimal | None = None,
) -> Decimal:
    """Schedule 3 line 1.

    Filers under the de minimis amount ($300, $600 joint) take the tax paid
    without Form 1116. Above it the Form 1116 limitation applies.

    Args:
        foreign_tax_paid: Foreign tax reported on 1099-INT/1099-DIV.
        filing_status: Filing status for the de minimis threshold.
        params: Parameter set for the tax year.
        limitation: Form 1116 line 21, or None when no Form 1116 was filed.

    Raises:
        MissingInput: If the limitation is needed but Form 1116 is absent.
    """
    _require_non_negative("foreign_tax_paid", foreign_tax_paid)
    de_minimis = params.for_status(
        params.foreign_tax_credit_de_minimis, filing_status, "foreign_tax_credit_de_minimis"
    )
    if foreign_tax_paid <= de_minimis:
        return to_amount(foreign_tax_paid)
    if limitation is None:
        raise MissingInput(None, "1116.limitation")
    return to_amount(min(foreign_tax_paid, max(limitation, ZERO)))


def foreign_tax_limitation(
    regular_tax: Decimal, foreign_source_income: Decimal, taxable_income: Decimal
) -> Decimal:
    """Form 1116 limitation: tax x (foreign source income / taxable income)."""
    if taxable_income <= ZERO or foreign_source_income <= ZERO:
        return to_amount(ZERO)
    fraction = min(foreign_source_income / taxable_income, Decimal("1"))
    return to_amount(regular_tax * fraction)


# =============================================================================
# Ordering and other taxes
# =============================================================================


def apply_credit_order(
    liability: Decimal,
    tentative: Mapping[CreditKind, Decimal],
    order: Sequence[CreditKind],
) -> dict[CreditKind, Decimal]:
    """Apply nonrefundable credits against liability in order.

    Each credit is capped at the liability left after the credits before it.
    Credits absent from tentative are allowed as zero.

    Example:
        >>> apply_credit_order(Decimal("1000"), {CreditKind.EDUCATION: Decimal("600"),
        ...     CreditKind.CHILD_AND_OTHER_DEPENDENT: Decimal("2200")}, DEFAULT_CREDIT_ORDER)
        {..., <CreditKind.EDUCATION>: Decimal('600.00'), ..., <CreditKind.CHILD_AND_OTHER_DEPENDENT>: Decimal('400.00')}
    """
    remaining = max(liability, ZERO)
    allowed: dict[CreditKind, Decimal] = {}
    for kind in order:
        amount = min(max(tentative.get(kind, ZERO), ZERO), remaining)
        allowed[kind] = to_amount(amount)
        remaining -= amount
    return allowed


def early_distribution_tax(
    taxable_amount: Decimal, distribution_code: str, params: TaxYearParameters
) -> Decimal:
    """10% additional tax on an early distribution (1099-R code 1, no exception)."""
    if distribution_code != EARLY_DISTRIBUTION_CODE:
        return to_amount(ZERO)
    return round_amount(max(taxable_amount, ZERO) * params.early_distribution_rate, params.rounding_mode)
