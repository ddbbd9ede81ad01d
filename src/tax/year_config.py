"""Tax year-specific parameter sets.

This module centralizes the IRS-published numeric provisions for each supported
tax year: bracket tables, standard deduction amounts, credit tables, phase-out
rules, AMT exemption, and the rounding mode. A parameter set is immutable and
is always passed explicitly into a computation; there is no "current year"
global.

Example:
    >>> from src.tax.year_config import get_tax_year_parameters
    >>> params = get_tax_year_parameters(2025)
    >>> params.for_status(params.standard_deduction, FilingStatus.SINGLE, "standard_deduction")
    Decimal('15750')
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TypeVar

from src.tax.errors import MissingParameter
from src.tax.money import ZERO, RoundingMode

T = TypeVar("T")


class FilingStatus(str, Enum):
    """IRS filing status for Form 1040. Exactly one applies to a return."""

    SINGLE = "single"
    MARRIED_FILING_JOINTLY = "mfj"
    MARRIED_FILING_SEPARATELY = "mfs"
    HEAD_OF_HOUSEHOLD = "hoh"
    QUALIFYING_SURVIVING_SPOUSE = "qss"

    @property
    def is_joint(self) -> bool:
        """Married filing jointly (the only status with two filers on one return)."""
        return self is FilingStatus.MARRIED_FILING_JOINTLY

    @property
    def uses_married_additional_deduction(self) -> bool:
        """Whether the married/QSS additional standard deduction amount applies."""
        return self in (
            FilingStatus.MARRIED_FILING_JOINTLY,
            FilingStatus.MARRIED_FILING_SEPARATELY,
            FilingStatus.QUALIFYING_SURVIVING_SPOUSE,
        )


class CreditKind(str, Enum):
    """Nonrefundable credits subject to year-defined ordering."""

    FOREIGN_TAX = "foreign_tax"
    DEPENDENT_CARE = "dependent_care"
    EDUCATION = "education"
    RETIREMENT_SAVINGS = "retirement_savings"
    CHILD_AND_OTHER_DEPENDENT = "child_and_other_dependent"


# =============================================================================
# Building blocks
# =============================================================================


@dataclass(frozen=True)
class Bracket:
    """One row of a rate schedule: income above threshold is taxed at rate."""

    threshold: Decimal
    rate: Decimal


@dataclass(frozen=True)
class PhaseOut:
    """Step phase-out rule.

    result = base - ceil((measure - threshold) / step) * reduction_per_step,
    never below floor.
    """

    threshold: Decimal
    step: Decimal
    reduction_per_step: Decimal
    floor: Decimal = ZERO


@dataclass(frozen=True)
class AmtParameters:
    """Alternative minimum tax (Form 6251) parameters."""

    exemption: Mapping[FilingStatus, Decimal]
    exemption_threshold: Mapping[FilingStatus, Decimal]
    rate_break: Mapping[FilingStatus, Decimal]
    low_rate: Decimal = Decimal("0.26")
    high_rate: Decimal = Decimal("0.28")
    # Exact share of AMTI over the threshold, cents included
    exemption_phaseout_rate: Decimal = Decimal("0.25")


@dataclass(frozen=True)
class ChildTaxCreditParameters:
    """Child tax credit, credit for other dependents, and ACTC (Schedule 8812)."""

    per_child: Decimal
    refundable_max_per_child: Decimal
    phaseout: Mapping[FilingStatus, PhaseOut]
    per_other_dependent: Decimal = Decimal("500")
    earned_income_threshold: Decimal = Decimal("2500")
    refundable_rate: Decimal = Decimal("0.15")
    max_child_age: int = 16


@dataclass(frozen=True)
class EitcSchedule:
    """EITC figures for one count of qualifying children."""

    earned_income_amount: Decimal
    max_credit: Decimal
    phase_in_rate: Decimal
    phaseout_rate: Decimal
    phaseout_threshold: Decimal
    phaseout_threshold_joint: Decimal


@dataclass(frozen=True)
class EitcParameters:
    """Earned income credit parameters; schedules indexed by child count (0..3)."""

    schedules: tuple[EitcSchedule, ...]
    investment_income_limit: Decimal
    min_age_without_children: int = 25
    max_age_without_children: int = 64
    max_child_age: int = 18
    max_student_age: int = 23


@dataclass(frozen=True)
class EducationParameters:
    """American opportunity and lifetime learning credits (Form 8863)."""

    phaseout_start: Mapping[FilingStatus, Decimal]
    phaseout_range: Mapping[FilingStatus, Decimal]
    aoc_full_expenses: Decimal = Decimal("2000")
    aoc_partial_expenses: Decimal = Decimal("2000")
    aoc_partial_rate: Decimal = Decimal("0.25")
    aoc_refundable_fraction: Decimal = Decimal("0.40")
    llc_max_expenses: Decimal = Decimal("10000")
    llc_rate: Decimal = Decimal("0.20")


@dataclass(frozen=True)
class SaversCreditParameters:
    """Retirement savings contributions credit (Form 8880)."""

    tiers: Mapping[FilingStatus, tuple[tuple[Decimal, Decimal], ...]]
    max_contribution_per_person: Decimal = Decimal("2000")


@dataclass(frozen=True)
class StudentLoanParameters:
    """Student loan interest deduction (Schedule 1); MFS filers are ineligible."""

    phaseout_start: Mapping[FilingStatus, Decimal]
    phaseout_range: Mapping[FilingStatus, Decimal]
    max_deduction: Decimal = Decimal("2500")


@dataclass(frozen=True)
class SaltParameters:
    """State and local tax deduction cap; phaseout is None when the cap is flat."""

    cap: Mapping[FilingStatus, Decimal]
    phaseout: Mapping[FilingStatus, PhaseOut] | None = None


@dataclass(frozen=True)
class QbiParameters:
    """Qualified business income deduction (Form 8995 / 8995-A)."""

    threshold: Mapping[FilingStatus, Decimal]
    phase_in_range: Mapping[FilingStatus, Decimal]
    rate: Decimal = Decimal("0.20")
    wage_limit_rate: Decimal = Decimal("0.50")
    wage_ubia_wage_rate: Decimal = Decimal("0.25")
    wage_ubia_property_rate: Decimal = Decimal("0.025")


@dataclass(frozen=True)
class DependentCareParameters:
    """Child and dependent care credit (Form 2441)."""

    rate_phaseout: PhaseOut = PhaseOut(
        threshold=Decimal("15000"),
        step=Decimal("2000"),
        reduction_per_step=Decimal("0.01"),
        floor=Decimal("0.20"),
    )
    base_rate: Decimal = Decimal("0.35")
    max_expenses_one: Decimal = Decimal("3000")
    max_expenses_two_or_more: Decimal = Decimal("6000")
    max_child_age: int = 12


DEFAULT_CREDIT_ORDER: tuple[CreditKind, ...] = (
    CreditKind.FOREIGN_TAX,
    CreditKind.DEPENDENT_CARE,
    CreditKind.EDUCATION,
    CreditKind.RETIREMENT_SAVINGS,
    CreditKind.CHILD_AND_OTHER_DEPENDENT,
)


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


# =============================================================================
# Parameter set
# =============================================================================


@dataclass(frozen=True)
class TaxYearParameters:
    """Immutable numeric provisions for one tax year.

    All monetary values are Decimal. Tables keyed by filing status are read
    through for_status(), which raises MissingParameter for absent entries.

    Attributes:
        tax_year: The tax year these values apply to.
        brackets: Ordinary income rate schedule per filing status.
        standard_deduction: Basic standard deduction per filing status.
        capital_gain_thresholds: (0% ceiling, 15% ceiling) per filing status.
        ss_wage_base: Social Security wage base limit.
        rounding_mode: How computed amounts are rounded.
        tax_table_ceiling: Taxable income below which the tax table applies.
        nonrefundable_credit_order: Order credits are applied against tax.
    """

    tax_year: int
    brackets: Mapping[FilingStatus, tuple[Bracket, ...]]
    standard_deduction: Mapping[FilingStatus, Decimal]
    additional_deduction_married: Decimal
    additional_deduction_unmarried: Decimal
    dependent_minimum_deduction: Decimal
    dependent_earned_income_addition: Decimal
    capital_gain_thresholds: Mapping[FilingStatus, tuple[Decimal, Decimal]]
    ss_wage_base: Decimal
    amt: AmtParameters
    ctc: ChildTaxCreditParameters
    eitc: EitcParameters
    education: EducationParameters
    savers: SaversCreditParameters
    student_loan: StudentLoanParameters
    salt: SaltParameters
    qbi: QbiParameters
    dependent_care: DependentCareParameters = field(default_factory=DependentCareParameters)

    # Thresholds that are not inflation-indexed
    additional_medicare_threshold: Mapping[FilingStatus, Decimal] = field(
        default_factory=lambda: _by_status(200000, 250000, 125000, 200000, 200000)
    )
    niit_threshold: Mapping[FilingStatus, Decimal] = field(
        default_factory=lambda: _by_status(200000, 250000, 125000, 200000, 250000)
    )
    foreign_tax_credit_de_minimis: Mapping[FilingStatus, Decimal] = field(
        default_factory=lambda: _by_status(300, 600, 300, 300, 300)
    )
    capital_loss_limit: Mapping[FilingStatus, Decimal] = field(
        default_factory=lambda: _by_status(3000, 3000, 1500, 3000, 3000)
    )

    rounding_mode: RoundingMode = RoundingMode.WHOLE_DOLLAR
    tax_table_ceiling: Decimal = Decimal("100000")
    capital_gain_rates: tuple[Decimal, Decimal, Decimal] = (
        Decimal("0"),
        Decimal("0.15"),
        Decimal("0.20"),
    )

    # Social Security / Medicare (combined employer + employee rates for SE)
    se_ss_rate: Decimal = Decimal("0.124")
    se_medicare_rate: Decimal = Decimal("0.029")
    se_minimum_net_earnings: Decimal = Decimal("400")
    additional_medicare_rate: Decimal = Decimal("0.009")
    niit_rate: Decimal = Decimal("0.038")

    # Schedule A
    medical_floor_rate: Decimal = Decimal("0.075")
    charitable_cash_limit_rate: Decimal = Decimal("0.60")
    charitable_noncash_limit_rate: Decimal = Decimal("0.30")

    early_distribution_rate: Decimal = Decimal("0.10")
    nonrefundable_credit_order: tuple[CreditKind, ...] = DEFAULT_CREDIT_ORDER

    def __post_init__(self) -> None:
        for name in (
            "brackets",
            "standard_deduction",
            "capital_gain_thresholds",
            "additional_medicare_threshold",
            "niit_threshold",
            "foreign_tax_credit_de_minimis",
            "capital_loss_limit",
        ):
            object.__setattr__(self, name, _frozen(getattr(self, name)))
        self._validate_brackets()

    def _validate_brackets(self) -> None:
        for status in FilingStatus:
            table = self.brackets.get(status)
            if not table:
                raise ValueError(
                    f"{self.tax_year} parameters: no bracket table for {status.value}"
                )
            if table[0].threshold != ZERO:
                raise ValueError(
                    f"{self.tax_year} {status.value} brackets must start at 0"
                )
            for lower, upper in zip(table, table[1:]):
                if upper.threshold <= lower.threshold:
                    raise ValueError(
                        f"{self.tax_year} {status.value} bracket thresholds must be "
                        f"strictly increasing ({lower.threshold} >= {upper.threshold})"
                    )
            for bracket in table:
                if not ZERO < bracket.rate <= Decimal("1"):
                    raise ValueError(
                        f"{self.tax_year} {status.value} bracket rate {bracket.rate} "
                        "must be in (0, 1]"
                    )

    def for_status(
        self, table: Mapping[FilingStatus, T] | None, status: FilingStatus, name: str
    ) -> T:
        """Look up a per-filing-status entry.

        Args:
            table: Parameter table keyed by FilingStatus.
            status: Filing status to look up.
            name: Table name used in the error message.

        Returns:
            The table entry for status.

        Raises:
            MissingParameter: If the table or the entry is absent.
        """
        if table is None or status not in table:
            raise MissingParameter(self.tax_year, name, status.value)
        return table[status]


def _by_status(
    single: int | str,
    mfj: int | str,
    mfs: int | str,
    hoh: int | str,
    qss: int | str,
) -> dict[FilingStatus, Decimal]:
    return {
        FilingStatus.SINGLE: Decimal(single),
        FilingStatus.MARRIED_FILING_JOINTLY: Decimal(mfj),
        FilingStatus.MARRIED_FILING_SEPARATELY: Decimal(mfs),
        FilingStatus.HEAD_OF_HOUSEHOLD: Decimal(hoh),
        FilingStatus.QUALIFYING_SURVIVING_SPOUSE: Decimal(qss),
    }


def _without_mfs(table: dict[FilingStatus, Decimal]) -> dict[FilingStatus, Decimal]:
    return {
        status: value
        for status, value in table.items()
        if status is not FilingStatus.MARRIED_FILING_SEPARATELY
    }


def _schedule(*thresholds: int) -> tuple[Bracket, ...]:
    """Build a bracket table from the six upper edges of the 10%..35% brackets."""
    rates = ("0.10", "0.12", "0.22", "0.24", "0.32", "0.35", "0.37")
    edges = (0, *thresholds)
    return tuple(
        Bracket(threshold=Decimal(edge), rate=Decimal(rate))
        for edge, rate in zip(edges, rates)
    )


def _phaseouts(
    thresholds: Mapping[FilingStatus, Decimal],
    step: str,
    reduction: str,
    floor: str = "0",
) -> dict[FilingStatus, PhaseOut]:
    return {
        status: PhaseOut(
            threshold=threshold,
            step=Decimal(step),
            reduction_per_step=Decimal(reduction),
            floor=Decimal(floor),
        )
        for status, threshold in thresholds.items()
    }


def _savers_tiers(
    fifty: int, twenty: int, ten: int
) -> tuple[tuple[Decimal, Decimal], ...]:
    return (
        (Decimal(fifty), Decimal("0.50")),
        (Decimal(twenty), Decimal("0.20")),
        (Decimal(ten), Decimal("0.10")),
    )


def _eitc(
    amounts: tuple[int, int, int, int],
    max_credits: tuple[int, int, int, int],
    thresholds: tuple[int, int],
    thresholds_joint: tuple[int, int],
) -> tuple[EitcSchedule, ...]:
    phase_in = ("0.0765", "0.34", "0.40", "0.45")
    phaseout = ("0.0765", "0.1598", "0.2106", "0.2106")
    schedules = []
    for children in range(4):
        with_children = 0 if children == 0 else 1
        schedules.append(
            EitcSchedule(
                earned_income_amount=Decimal(amounts[children]),
                max_credit=Decimal(max_credits[children]),
                phase_in_rate=Decimal(phase_in[children]),
                phaseout_rate=Decimal(phaseout[children]),
                phaseout_threshold=Decimal(thresholds[with_children]),
                phaseout_threshold_joint=Decimal(thresholds_joint[with_children]),
            )
        )
    return tuple(schedules)


_CTC_PHASEOUT_THRESHOLDS = _by_status(200000, 400000, 200000, 200000, 200000)
_EDUCATION_PHASEOUT_START = _by_status(80000, 160000, 80000, 80000, 80000)
_EDUCATION_PHASEOUT_RANGE = _by_status(10000, 20000, 10000, 10000, 10000)


# 2024 parameter set - IRS published values (Rev. Proc. 2023-34)
TAX_YEAR_2024 = TaxYearParameters(
    tax_year=2024,
    brackets={
        FilingStatus.SINGLE: _schedule(11600, 47150, 100525, 191950, 243725, 609350),
        FilingStatus.MARRIED_FILING_JOINTLY: _schedule(
            23200, 94300, 201050, 383900, 487450, 731200
        ),
        FilingStatus.MARRIED_FILING_SEPARATELY: _schedule(
            11600, 47150, 100525, 191950, 243725, 365600
        ),
        FilingStatus.HEAD_OF_HOUSEHOLD: _schedule(
            16550, 63100, 100500, 191950, 243700, 609350
        ),
        FilingStatus.QUALIFYING_SURVIVING_SPOUSE: _schedule(
            23200, 94300, 201050, 383900, 487450, 731200
        ),
    },
    standard_deduction=_by_status(14600, 29200, 14600, 21900, 29200),
    additional_deduction_married=Decimal("1550"),
    additional_deduction_unmarried=Decimal("1950"),
    dependent_minimum_deduction=Decimal("1300"),
    dependent_earned_income_addition=Decimal("450"),
    capital_gain_thresholds={
        FilingStatus.SINGLE: (Decimal("47025"), Decimal("518900")),
        FilingStatus.MARRIED_FILING_JOINTLY: (Decimal("94050"), Decimal("583750")),
        FilingStatus.MARRIED_FILING_SEPARATELY: (Decimal("47025"), Decimal("291850")),
        FilingStatus.HEAD_OF_HOUSEHOLD: (Decimal("63000"), Decimal("551350")),
        FilingStatus.QUALIFYING_SURVIVING_SPOUSE: (Decimal("94050"), Decimal("583750")),
    },
    ss_wage_base=Decimal("168600"),
    amt=AmtParameters(
        exemption=_by_status(85700, 133300, 66650, 85700, 133300),
        exemption_threshold=_by_status(609350, 1218700, 609350, 609350, 1218700),
        rate_break=_by_status(232600, 232600, 116300, 232600, 232600),
    ),
    ctc=ChildTaxCreditParameters(
        per_child=Decimal("2000"),
        refundable_max_per_child=Decimal("1700"),
        phaseout=_phaseouts(_CTC_PHASEOUT_THRESHOLDS, "1000", "50"),
    ),
    eitc=EitcParameters(
        schedules=_eitc(
            amounts=(8260, 12390, 17400, 17400),
            max_credits=(632, 4213, 6960, 7830),
            thresholds=(10330, 22720),
            thresholds_joint=(17250, 29640),
        ),
        investment_income_limit=Decimal("11600"),
    ),
    education=EducationParameters(
        phaseout_start=_EDUCATION_PHASEOUT_START,
        phaseout_range=_EDUCATION_PHASEOUT_RANGE,
    ),
    savers=SaversCreditParameters(
        tiers={
            FilingStatus.SINGLE: _savers_tiers(23000, 25000, 38250),
            FilingStatus.MARRIED_FILING_JOINTLY: _savers_tiers(46000, 50000, 76500),
            FilingStatus.MARRIED_FILING_SEPARATELY: _savers_tiers(23000, 25000, 38250),
            FilingStatus.HEAD_OF_HOUSEHOLD: _savers_tiers(34500, 37500, 57375),
            FilingStatus.QUALIFYING_SURVIVING_SPOUSE: _savers_tiers(23000, 25000, 38250),
        }
    ),
    student_loan=StudentLoanParameters(
        phaseout_start=_without_mfs(_by_status(80000, 165000, 0, 80000, 80000)),
        phaseout_range=_without_mfs(_by_status(15000, 30000, 0, 15000, 15000)),
    ),
    salt=SaltParameters(cap=_by_status(10000, 10000, 5000, 10000, 10000)),
    qbi=QbiParameters(
        threshold=_by_status(191950, 383900, 191950, 191950, 191950),
        phase_in_range=_by_status(50000, 100000, 50000, 50000, 50000),
    ),
)

# 2025 parameter set - IRS published values as amended for 2025 filing season
TAX_YEAR_2025 = TaxYearParameters(
    tax_year=2025,
    brackets={
        FilingStatus.SINGLE: _schedule(11925, 48475, 103350, 197300, 250525, 626350),
        FilingStatus.MARRIED_FILING_JOINTLY: _schedule(
            23850, 96950, 206700, 394600, 501050, 751600
        ),
        FilingStatus.MARRIED_FILING_SEPARATELY: _schedule(
            11925, 48475, 103350, 197300, 250525, 375800
        ),
        FilingStatus.HEAD_OF_HOUSEHOLD: _schedule(
            17000, 64850, 103350, 197300, 250500, 626350
        ),
        FilingStatus.QUALIFYING_SURVIVING_SPOUSE: _schedule(
            23850, 96950, 206700, 394600, 501050, 751600
        ),
    },
    standard_deduction=_by_status(15750, 31500, 15750, 23625, 31500),
    additional_deduction_married=Decimal("1600"),
    additional_deduction_unmarried=Decimal("2000"),
    dependent_minimum_deduction=Decimal("1350"),
    dependent_earned_income_addition=Decimal("450"),
    capital_gain_thresholds={
        FilingStatus.SINGLE: (Decimal("48350"), Decimal("533400")),
        FilingStatus.MARRIED_FILING_JOINTLY: (Decimal("96700"), Decimal("600050")),
        FilingStatus.MARRIED_FILING_SEPARATELY: (Decimal("48350"), Decimal("300000")),
        FilingStatus.HEAD_OF_HOUSEHOLD: (Decimal("64750"), Decimal("566700")),
        FilingStatus.QUALIFYING_SURVIVING_SPOUSE: (Decimal("96700"), Decimal("600050")),
    },
    ss_wage_base=Decimal("176100"),
    amt=AmtParameters(
        exemption=_by_status(88100, 137000, 68500, 88100, 137000),
        exemption_threshold=_by_status(626350, 1252700, 626350, 626350, 1252700),
        rate_break=_by_status(239100, 239100, 119550, 239100, 239100),
    ),
    ctc=ChildTaxCreditParameters(
        per_child=Decimal("2200"),
        refundable_max_per_child=Decimal("1700"),
        phaseout=_phaseouts(_CTC_PHASEOUT_THRESHOLDS, "1000", "50"),
    ),
    eitc=EitcParameters(
        schedules=_eitc(
            amounts=(8490, 12730, 17880, 17880),
            max_credits=(649, 4328, 7152, 8046),
            thresholds=(10620, 23350),
            thresholds_joint=(17730, 30470),
        ),
        investment_income_limit=Decimal("11950"),
    ),
    education=EducationParameters(
        phaseout_start=_EDUCATION_PHASEOUT_START,
        phaseout_range=_EDUCATION_PHASEOUT_RANGE,
    ),
    savers=SaversCreditParameters(
        tiers={
            FilingStatus.SINGLE: _savers_tiers(23750, 25500, 39500),
            FilingStatus.MARRIED_FILING_JOINTLY: _savers_tiers(47500, 51000, 79000),
            FilingStatus.MARRIED_FILING_SEPARATELY: _savers_tiers(23750, 25500, 39500),
            FilingStatus.HEAD_OF_HOUSEHOLD: _savers_tiers(35625, 38250, 59250),
            FilingStatus.QUALIFYING_SURVIVING_SPOUSE: _savers_tiers(23750, 25500, 39500),
        }
    ),
    student_loan=StudentLoanParameters(
        phaseout_start=_without_mfs(_by_status(85000, 170000, 0, 85000, 85000)),
        phaseout_range=_without_mfs(_by_status(15000, 30000, 0, 15000, 15000)),
    ),
    salt=SaltParameters(
        cap=_by_status(40000, 40000, 20000, 40000, 40000),
        phaseout={
            status: PhaseOut(
                threshold=threshold,
                step=Decimal("1"),
                reduction_per_step=Decimal("0.30"),
                floor=Decimal("5000")
                if status is FilingStatus.MARRIED_FILING_SEPARATELY
                else Decimal("10000"),
            )
            for status, threshold in _by_status(
                500000, 500000, 250000, 500000, 500000
            ).items()
        },
    ),
    qbi=QbiParameters(
        threshold=_by_status(197300, 394600, 197300, 197300, 197300),
        phase_in_range=_by_status(50000, 100000, 50000, 50000, 50000),
    ),
)

# Registry of available parameter sets
TAX_YEAR_PARAMETERS: Mapping[int, TaxYearParameters] = MappingProxyType(
    {
        2024: TAX_YEAR_2024,
        2025: TAX_YEAR_2025,
    }
)


def get_tax_year_parameters(year: int) -> TaxYearParameters:
    """Get the parameter set for a specific tax year.

    Args:
        year: The tax year (e.g., 2025).

    Returns:
        TaxYearParameters for the specified year.

    Raises:
        MissingParameter: If no parameter set exists for the requested year.

    Example:
        >>> get_tax_year_parameters(2025).ss_wage_base
        Decimal('176100')
    """
    if year not in TAX_YEAR_PARAMETERS:
        raise MissingParameter(year, "tax_year_parameters")
    return TAX_YEAR_PARAMETERS[year]
