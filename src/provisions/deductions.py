"""Deduction provisions: standard deduction, itemized pieces, and adjustments.

This module provides pure functions for:
- Standard deduction with age/blindness additions and the dependent limit
- Standard vs itemized selection (forced itemizing, filer elections)
- Schedule A components: medical, state and local taxes, charitable
- Student loan interest adjustment (Schedule 1)
- Capital loss limitation (Schedule D)

All monetary values use Decimal for precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from src.provisions.phaseout import phase_out, proportional_phase_out
from src.tax.errors import InvalidInput
from src.tax.money import ZERO, to_amount
from src.tax.profile import DeductionElection, FilingProfile
from src.tax.year_config import FilingStatus, TaxYearParameters

ELDERLY_AGE = 65


class DeductionMethod(str, Enum):
    """Which deduction Form 1040 line 12 uses."""

    STANDARD = "standard"
    ITEMIZED = "itemized"


@dataclass(frozen=True)
class DeductionChoice:
    """Result of standard vs itemized selection.

    Attributes:
        method: Deduction taken.
        amount: Amount for Form 1040 line 12.
        forced: True when the filer could not take the standard deduction.
    """

    method: DeductionMethod
    amount: Decimal
    forced: bool = False


def _require_non_negative(field: str, value: Decimal) -> None:
    if value < ZERO:
        raise InvalidInput(field, value, "must not be negative")


# =============================================================================
# Standard Deduction
# =============================================================================


def additional_deduction_count(profile: FilingProfile) -> int:
    """Number of age-65 and blindness boxes checked on Form 1040.

    Each box is independent: a 70 year old blind filer counts twice. The
    spouse's boxes count only on a joint return.
    """
    count = 0
    for person in profile.filers:
        if person.age >= ELDERLY_AGE:
            count += 1
        if person.is_blind:
            count += 1
    return count


def itemizing_required(profile: FilingProfile) -> bool:
    """Whether the filer is barred from the standard deduction.

    Applies to married filing separately when the spouse itemizes, and to
    dual-status aliens.
    """
    if profile.is_dual_status_alien:
        return True
    return (
        profile.filing_status is FilingStatus.MARRIED_FILING_SEPARATELY
        and profile.spouse_itemizes
    )


def standard_deduction(
    profile: FilingProfile,
    params: TaxYearParameters,
    earned_income: Decimal = ZERO,
) -> Decimal:
    """Standard deduction for Form 1040 line 12.

    Args:
        profile: Filing status, age/blindness flags, dependent status.
        params: Parameter set for the tax year.
        earned_income: Earned income, used only when the filer can be claimed
            as someone else's dependent.

    Returns:
        Standard deduction amount (zero if the filer must itemize).

    Example:
        >>> standard_deduction(single_filer, TAX_YEAR_2025)
        Decimal('15750.00')
    """
    if itemizing_required(profile):
        return to_amount(ZERO)

    status = profile.filing_status
    base = params.for_status(params.standard_deduction, status, "standard_deduction")

    if profile.can_be_claimed_as_dependent:
        dependent_limit = max(
            earned_income + params.dependent_earned_income_addition,
            params.dependent_minimum_deduction,
        )
        base = min(base, dependent_limit)

    if status.uses_married_additional_deduction:
        per_box = params.additional_deduction_married
    else:
        per_box = params.additional_deduction_unmarried

    return to_amount(base + per_box * additional_deduction_count(profile))


def select_deduction(
    standard: Decimal,
    itemized: Decimal,
    profile: FilingProfile,
) -> DeductionChoice:
    """Choose between the standard and itemized deduction.

    Itemized is forced when the filer is ineligible for the standard
    deduction, regardless of amount. Otherwise an explicit election wins, and
    with no election the larger amount is taken (ties go to standard).

    Example:
        >>> select_deduction(Decimal("15750"), Decimal("10000"), single_filer).method
        <DeductionMethod.STANDARD: 'standard'>
    """
    if itemizing_required(profile):
        return DeductionChoice(DeductionMethod.ITEMIZED, itemized, forced=True)

    election = profile.deduction_election
    if election is DeductionElection.STANDARD:
        return DeductionChoice(DeductionMethod.STANDARD, standard)
    if election is DeductionElection.ITEMIZED:
        return DeductionChoice(DeductionMethod.ITEMIZED, itemized)

    if itemized > standard:
        return DeductionChoice(DeductionMethod.ITEMIZED, itemized)
    return DeductionChoice(DeductionMethod.STANDARD, standard)


# =============================================================================
# Schedule A
# =============================================================================


def medical_deduction(
    expenses: Decimal, agi: Decimal, params: TaxYearParameters
) -> Decimal:
    """Medical and dental expenses in excess of the AGI floor (7.5%)."""
    _require_non_negative("medical_expenses", expenses)
    floor = max(agi, ZERO) * params.medical_floor_rate
    return to_amount(max(expenses - floor, ZERO))


def salt_cap(
    magi: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """State and local tax cap after any income-based phase-down."""
    cap = params.for_status(params.salt.cap, filing_status, "salt.cap")
    if params.salt.phaseout is None:
        return cap
    rule = params.for_status(params.salt.phaseout, filing_status, "salt.phaseout")
    return phase_out(cap, magi, rule)


def salt_deduction(
    taxes_paid: Decimal,
    magi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Deductible state and local taxes (Schedule A line 5e).

    Example:
        >>> salt_deduction(Decimal("50000"), Decimal("550000"), FilingStatus.SINGLE, TAX_YEAR_2025)
        Decimal('25000.00')  # 40,000 cap less 30% of the 50,000 excess
    """
    _require_non_negative("state_and_local_taxes", taxes_paid)
    return to_amount(min(taxes_paid, salt_cap(magi, filing_status, params)))


def charitable_deduction(
    cash: Decimal,
    noncash: Decimal,
    agi: Decimal,
    params: TaxYearParameters,
) -> Decimal:
    """Gifts to charity limited by AGI percentage.

    Cash gifts are limited to 60% of AGI; noncash gifts to 30% of AGI and to
    whatever room the cash gifts leave under the 60% ceiling. Carryovers of
    the disallowed excess are not tracked.
    """
    _require_non_negative("charitable_cash", cash)
    _require_non_negative("charitable_noncash", noncash)
    base = max(agi, ZERO)
    cash_ceiling = base * params.charitable_cash_limit_rate
    cash_allowed = min(cash, cash_ceiling)
    noncash_allowed = min(
        noncash,
        base * params.charitable_noncash_limit_rate,
        max(cash_ceiling - cash_allowed, ZERO),
    )
    return to_amount(cash_allowed + noncash_allowed)


# =============================================================================
# Adjustments and limits
# =============================================================================


def student_loan_interest_deduction(
    interest_paid: Decimal,
    magi: Decimal,
    filing_status: FilingStatus,
    params: TaxYearParameters,
) -> Decimal:
    """Student loan interest adjustment (Schedule 1 line 21).

    Capped at the maximum deduction, then reduced proportionally across the
    MAGI phase-out range. Married filing separately is ineligible.
    """
    _require_non_negative("student_loan_interest", interest_paid)
    if filing_status is FilingStatus.MARRIED_FILING_SEPARATELY:
        return to_amount(ZERO)

    rules = params.student_loan
    start = params.for_status(rules.phaseout_start, filing_status, "student_loan.phaseout_start")
    width = params.for_status(rules.phaseout_range, filing_status, "student_loan.phaseout_range")
    allowed = min(interest_paid, rules.max_deduction)
    return to_amount(proportional_phase_out(allowed, magi, start, width))


def capital_loss_allowed(
    net_gain: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Capital gain or (limited) loss for Form 1040 line 7.

    Gains pass through. Net losses are limited to $3,000 ($1,500 MFS).
    """
    if net_gain >= ZERO:
        return to_amount(net_gain)
    limit = params.for_status(params.capital_loss_limit, filing_status, "capital_loss_limit")
    return to_amount(max(net_gain, -limit))


def capital_loss_carryover(
    net_gain: Decimal, filing_status: FilingStatus, params: TaxYearParameters
) -> Decimal:
    """Net capital loss beyond the annual limit, carried to next year."""
    allowed = capital_loss_allowed(net_gain, filing_status, params)
    return to_amount(max(allowed - net_gain, ZERO))
