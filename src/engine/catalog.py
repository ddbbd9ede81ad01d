"""Default form catalog.

Declares every form the engine models, its raw input lines, and the computed
lines with the provision evaluator and inputs each one uses. Absent-as-zero
defaults are declared per reference: no 1099-DIV means qualified dividends are
zero, while Form 6251 is always present and referenced as required.

Form layout follows the 2025 Form 1040 and its schedules; line names are
descriptive rather than line numbers so they survive renumbering.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import TYPE_CHECKING

from src.engine.forms import (
    Absent,
    FormCatalog,
    FormSpec,
    FormType,
    Formula,
    LineKind,
    LineRef,
    LineSpec,
    LineValue,
    always,
    local,
    ref,
    total,
    when_dependents,
    when_present,
)
from src.provisions import amt, brackets, credits, deductions, eitc, niit, qbi, self_employment
from src.tax.money import ZERO
from src.tax.profile import FilingProfile
from src.tax.year_config import CreditKind, TaxYearParameters

if TYPE_CHECKING:
    from src.engine.resolver import LineInputs

ROLLOVER_CODE = "G"
DISTRIBUTION_CODES = ("7", "1", "2", "G")
EDUCATION_CREDIT_CHOICES = ("aoc", "llc")
MEDICARE_WITHHOLDING_RATE = Decimal("0.0145")


def raw(
    name: str,
    kind: LineKind = LineKind.AMOUNT,
    *,
    required: bool = False,
    choices: tuple[str, ...] = (),
    default: LineValue | None = None,
    description: str = "",
) -> LineSpec:
    """Declare a raw input line."""
    return LineSpec(
        name=name,
        kind=kind,
        required=required,
        choices=choices,
        default=default,
        description=description,
    )


def computed(
    name: str,
    rule: str,
    formula: Formula,
    kind: LineKind = LineKind.AMOUNT,
    *,
    choices: tuple[str, ...] = (),
    description: str = "",
    **inputs: LineRef,
) -> LineSpec:
    """Declare a computed line and the references its formula reads."""
    return LineSpec(
        name=name,
        kind=kind,
        rule=rule,
        formula=formula,
        inputs=inputs,
        choices=choices,
        description=description,
    )


# =============================================================================
# Generic formulas
# =============================================================================


def add(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    """Sum of every declared input."""
    return sum((inputs[name] for name in inputs), ZERO)


def copy(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> LineValue:
    """Carry the single declared input forward unchanged."""
    (value,) = inputs.values()
    return value


def minuend_less_subtrahend(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return inputs["minuend"] - inputs["subtrahend"]


def excess_over(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    """minuend - subtrahend, never negative."""
    return max(inputs["minuend"] - inputs["subtrahend"], ZERO)


def positive_part(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    """The single declared input, or zero when it is negative."""
    (value,) = inputs.values()
    return max(value, ZERO)


# =============================================================================
# Information documents
# =============================================================================


def _taxable_refund(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return inputs["state_tax_refund"] if inputs["refund_taxable"] else ZERO


def _distribution_part(ira: bool):
    def formula(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
        if inputs["distribution_code"] == ROLLOVER_CODE or inputs["is_ira"] is not ira:
            return ZERO
        return inputs["taxable_amount"]

    return formula


def _early_distribution_tax(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return credits.early_distribution_tax(
        inputs["taxable_amount"], inputs["distribution_code"], params
    )


def _net_education_expenses(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return max(inputs["qualified_expenses"] - inputs["scholarships"], ZERO)


def _aoc_tentative(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    if inputs["credit"] != "aoc":
        return ZERO
    return credits.american_opportunity_tentative(inputs["net_expenses"], params)


def _llc_expenses(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return inputs["net_expenses"] if inputs["credit"] == "llc" else ZERO


def _net_profit(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return (
        inputs["gross_receipts"]
        - inputs["returns"]
        - inputs["cost_of_goods_sold"]
        - inputs["expenses"]
    )


def _business_qbi(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return qbi.qualified_business_income(
        inputs["net_profit"], inputs["positive_net_profit"], inputs["se_tax_deduction"]
    )


def _qbi_after_losses(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return qbi.net_qualified_business_income(
        inputs["qbi"], inputs["total_qbi"], inputs["positive_qbi"]
    )


def _qbi_component(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return qbi.qbi_component(
        inputs["qbi"],
        inputs["w2_wages_paid"],
        inputs["ubia"],
        inputs["is_sstb"],
        inputs["taxable_income"],
        profile.filing_status,
        params,
    )


W2 = FormSpec(
    form_type=FormType.W2,
    title="Form W-2, Wage and Tax Statement",
    repeatable=True,
    lines=(
        raw("wages", required=True, description="Box 1"),
        raw("federal_withholding", description="Box 2"),
        raw("social_security_wages", description="Box 3"),
        raw("social_security_tips", description="Box 7"),
        raw("medicare_wages", description="Box 5"),
        raw("medicare_tax_withheld", description="Box 6"),
    ),
)

F1099_INT = FormSpec(
    form_type=FormType.F1099_INT,
    title="Form 1099-INT, Interest Income",
    repeatable=True,
    lines=(
        raw("interest", required=True, description="Box 1"),
        raw("federal_withholding", description="Box 4"),
        raw("foreign_tax_paid", description="Box 6"),
        raw("tax_exempt_interest", description="Box 8"),
    ),
)

F1099_DIV = FormSpec(
    form_type=FormType.F1099_DIV,
    title="Form 1099-DIV, Dividends and Distributions",
    repeatable=True,
    lines=(
        raw("ordinary_dividends", required=True, description="Box 1a"),
        raw("qualified_dividends", description="Box 1b"),
        raw("capital_gain_distributions", description="Box 2a"),
        raw("federal_withholding", description="Box 4"),
        raw("section_199a_dividends", description="Box 5"),
        raw("foreign_tax_paid", description="Box 7"),
    ),
)

F1099_G = FormSpec(
    form_type=FormType.F1099_G,
    title="Form 1099-G, Certain Government Payments",
    repeatable=True,
    lines=(
        raw("unemployment", description="Box 1"),
        raw("state_tax_refund", description="Box 2"),
        raw("federal_withholding", description="Box 4"),
        raw("refund_taxable", LineKind.BOOLEAN, description="Deducted the tax last year"),
        computed(
            "taxable_refund",
            "1099g.taxable_refund",
            _taxable_refund,
            state_tax_refund=local("state_tax_refund"),
            refund_taxable=local("refund_taxable"),
        ),
    ),
)

F1099_R = FormSpec(
    form_type=FormType.F1099_R,
    title="Form 1099-R, Distributions From Pensions, Annuities, IRAs",
    repeatable=True,
    lines=(
        raw("gross_distribution", required=True, description="Box 1"),
        raw("taxable_amount", required=True, description="Box 2a"),
        raw("federal_withholding", description="Box 4"),
        raw(
            "distribution_code",
            LineKind.CHOICE,
            choices=DISTRIBUTION_CODES,
            default="7",
            description="Box 7",
        ),
        raw("is_ira", LineKind.BOOLEAN, description="Box 7 IRA/SEP/SIMPLE"),
        computed(
            "ira_taxable",
            "1099r.ira_taxable",
            _distribution_part(ira=True),
            taxable_amount=local("taxable_amount"),
            distribution_code=local("distribution_code"),
            is_ira=local("is_ira"),
        ),
        computed(
            "pension_taxable",
            "1099r.pension_taxable",
            _distribution_part(ira=False),
            taxable_amount=local("taxable_amount"),
            distribution_code=local("distribution_code"),
            is_ira=local("is_ira"),
        ),
        computed(
            "early_distribution_tax",
            "credits.early_distribution_tax",
            _early_distribution_tax,
            taxable_amount=local("taxable_amount"),
            distribution_code=local("distribution_code"),
        ),
    ),
)

F1098 = FormSpec(
    form_type=FormType.F1098,
    title="Form 1098, Mortgage Interest Statement",
    repeatable=True,
    lines=(
        raw("mortgage_interest", required=True, description="Box 1"),
        raw("points", description="Box 6"),
    ),
)

F1098_E = FormSpec(
    form_type=FormType.F1098_E,
    title="Form 1098-E, Student Loan Interest Statement",
    lines=(raw("student_loan_interest", required=True, description="Box 1"),),
)

F1098_T = FormSpec(
    form_type=FormType.F1098_T,
    title="Form 1098-T, Tuition Statement",
    repeatable=True,
    lines=(
        raw("qualified_expenses", required=True, description="Box 1"),
        raw("scholarships", description="Box 5"),
        raw(
            "credit",
            LineKind.CHOICE,
            choices=EDUCATION_CREDIT_CHOICES,
            description="Credit elected for this student",
        ),
        computed(
            "net_expenses",
            "8863.adjusted_expenses",
            _net_education_expenses,
            qualified_expenses=local("qualified_expenses"),
            scholarships=local("scholarships"),
        ),
        computed(
            "aoc_tentative",
            "credits.american_opportunity_tentative",
            _aoc_tentative,
            net_expenses=local("net_expenses"),
            credit=local("credit"),
        ),
        computed(
            "llc_expenses",
            "8863.llc_expenses",
            _llc_expenses,
            net_expenses=local("net_expenses"),
            credit=local("credit"),
        ),
    ),
)

SCHEDULE_C = FormSpec(
    form_type=FormType.SCHEDULE_C,
    title="Schedule C, Profit or Loss From Business",
    repeatable=True,
    lines=(
        raw("gross_receipts", required=True, description="Line 1"),
        raw("returns", description="Line 2"),
        raw("cost_of_goods_sold", description="Line 4"),
        raw("expenses", description="Line 28"),
        raw("is_sstb", LineKind.BOOLEAN, description="Specified service trade or business"),
        raw("w2_wages_paid", description="W-2 wages paid by the business"),
        raw("ubia", description="Unadjusted basis of qualified property"),
        computed(
            "net_profit",
            "schedule_c.net_profit",
            _net_profit,
            gross_receipts=local("gross_receipts"),
            returns=local("returns"),
            cost_of_goods_sold=local("cost_of_goods_sold"),
            expenses=local("expenses"),
        ),
        computed(
            "positive_net_profit",
            "positive_part",
            positive_part,
            net_profit=local("net_profit"),
        ),
        computed(
            "qbi",
            "qbi.qualified_business_income",
            _business_qbi,
            net_profit=local("net_profit"),
            positive_net_profit=total(FormType.SCHEDULE_C, "positive_net_profit"),
            se_tax_deduction=ref(FormType.SCHEDULE_1, "se_tax_deduction"),
        ),
        computed("positive_qbi", "positive_part", positive_part, qbi=local("qbi")),
        computed(
            "qbi_after_losses",
            "qbi.net_qualified_business_income",
            _qbi_after_losses,
            qbi=local("qbi"),
            total_qbi=total(FormType.SCHEDULE_C, "qbi"),
            positive_qbi=total(FormType.SCHEDULE_C, "positive_qbi"),
        ),
        computed(
            "qbi_component",
            "qbi.qbi_component",
            _qbi_component,
            qbi=local("qbi_after_losses"),
            w2_wages_paid=local("w2_wages_paid"),
            ubia=local("ubia"),
            is_sstb=local("is_sstb"),
            taxable_income=ref(FormType.F1040, "taxable_income_before_qbi"),
        ),
    ),
)

# =============================================================================
# Filer-entered credit forms
# =============================================================================


def _dependent_care_credit(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    earned = inputs["earned_income"]
    if profile.filing_status.is_joint:
        spouse = inputs["spouse_earned_income"]
        earned_incomes = (earned - spouse, spouse)
    else:
        earned_incomes = (earned,)
    return credits.dependent_care_credit(
        inputs["care_expenses"],
        credits.dependent_care_qualifying_persons(profile, params),
        earned_incomes,
        inputs["agi"],
        profile.filing_status,
        params,
    )


def _savers_credit(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    contributions = [inputs["taxpayer_contributions"]]
    if profile.filing_status.is_joint:
        contributions.append(inputs["spouse_contributions"])
    return credits.savers_credit(
        contributions,
        inputs["agi"],
        profile.filing_status,
        params,
        is_dependent=profile.can_be_claimed_as_dependent,
    )


F2441 = FormSpec(
    form_type=FormType.F2441,
    title="Form 2441, Child and Dependent Care Expenses",
    lines=(
        raw("care_expenses", required=True, description="Qualified expenses paid"),
        raw("spouse_earned_income", description="Spouse's share of earned income"),
        computed(
            "credit",
            "credits.dependent_care_credit",
            _dependent_care_credit,
            care_expenses=local("care_expenses"),
            spouse_earned_income=local("spouse_earned_income"),
            earned_income=ref(FormType.F1040, "earned_income"),
            agi=ref(FormType.F1040, "agi"),
        ),
    ),
)

F8880 = FormSpec(
    form_type=FormType.F8880,
    title="Form 8880, Credit for Qualified Retirement Savings Contributions",
    lines=(
        raw("taxpayer_contributions", required=True),
        raw("spouse_contributions"),
        computed(
            "credit",
            "credits.savers_credit",
            _savers_credit,
            taxpayer_contributions=local("taxpayer_contributions"),
            spouse_contributions=local("spouse_contributions"),
            agi=ref(FormType.F1040, "agi"),
        ),
    ),
)

F1040_ES = FormSpec(
    form_type=FormType.F1040_ES,
    title="Form 1040-ES, Estimated Tax Payments",
    lines=(raw("estimated_payments", required=True, description="Total paid for the year"),),
)

# =============================================================================
# Schedule D, SE, 8959, Schedule 1
# =============================================================================


def _net_short_term(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return inputs["short_term_gain"] - inputs["short_term_carryover"]


def _net_long_term(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return inputs["long_term_gain"] + inputs["distributions"] - inputs["long_term_carryover"]


def _capital_loss_allowed(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return deductions.capital_loss_allowed(inputs["net_gain"], profile.filing_status, params)


def _capital_loss_carryover(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return deductions.capital_loss_carryover(inputs["net_gain"], profile.filing_status, params)


def _net_capital_gain(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    """Smaller of net long-term gain and net gain; zero if either is a loss."""
    return max(min(inputs["net_long_term"], inputs["net_gain"]), ZERO)


SCHEDULE_D = FormSpec(
    form_type=FormType.SCHEDULE_D,
    title="Schedule D, Capital Gains and Losses",
    applies=when_present(FormType.F1099_DIV),
    lines=(
        raw("short_term_gain", description="Part I net short-term gain or (loss)"),
        raw("long_term_gain", description="Part II net long-term gain or (loss)"),
        raw("short_term_carryover", description="Prior-year short-term loss carryover"),
        raw("long_term_carryover", description="Prior-year long-term loss carryover"),
        computed(
            "capital_gain_distributions",
            "sum",
            add,
            distributions=total(FormType.F1099_DIV, "capital_gain_distributions"),
        ),
        computed(
            "net_short_term",
            "schedule_d.net_short_term",
            _net_short_term,
            short_term_gain=local("short_term_gain"),
            short_term_carryover=local("short_term_carryover"),
        ),
        computed(
            "net_long_term",
            "schedule_d.net_long_term",
            _net_long_term,
            long_term_gain=local("long_term_gain"),
            distributions=local("capital_gain_distributions"),
            long_term_carryover=local("long_term_carryover"),
        ),
        computed(
            "net_gain",
            "sum",
            add,
            net_short_term=local("net_short_term"),
            net_long_term=local("net_long_term"),
        ),
        computed(
            "allowed_gain_or_loss",
            "deductions.capital_loss_allowed",
            _capital_loss_allowed,
            net_gain=local("net_gain"),
        ),
        computed(
            "loss_carryforward",
            "deductions.capital_loss_carryover",
            _capital_loss_carryover,
            net_gain=local("net_gain"),
        ),
        computed(
            "net_capital_gain",
            "schedule_d.net_capital_gain",
            _net_capital_gain,
            net_long_term=local("net_long_term"),
            net_gain=local("net_gain"),
        ),
    ),
)


def _net_earnings(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return self_employment.net_earnings_from_self_employment(inputs["net_profit"])


def _se_tax(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return self_employment.self_employment_tax(
        inputs["net_earnings"], inputs["social_security_wages"], params
    )


def _se_deduction(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return self_employment.self_employment_tax_deduction(inputs["se_tax"], params)


SCHEDULE_SE = FormSpec(
    form_type=FormType.SCHEDULE_SE,
    title="Schedule SE, Self-Employment Tax",
    applies=when_present(FormType.SCHEDULE_C),
    lines=(
        computed(
            "net_profit",
            "sum",
            add,
            net_profit=total(FormType.SCHEDULE_C, "net_profit", Absent.REQUIRED),
        ),
        computed(
            "net_earnings",
            "self_employment.net_earnings_from_self_employment",
            _net_earnings,
            net_profit=local("net_profit"),
        ),
        computed(
            "social_security_wages",
            "sum",
            add,
            wages=total(FormType.W2, "social_security_wages"),
            tips=total(FormType.W2, "social_security_tips"),
        ),
        computed(
            "se_tax",
            "self_employment.self_employment_tax",
            _se_tax,
            net_earnings=local("net_earnings"),
            social_security_wages=local("social_security_wages"),
        ),
        computed(
            "deduction",
            "self_employment.self_employment_tax_deduction",
            _se_deduction,
            se_tax=local("se_tax"),
        ),
    ),
)


def _additional_medicare_tax(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return self_employment.additional_medicare_tax(
        inputs["medicare_wages"], inputs["se_earnings"], profile.filing_status, params
    )


def _additional_medicare_withholding(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    regular = inputs["medicare_wages"] * MEDICARE_WITHHOLDING_RATE
    return max(inputs["medicare_tax_withheld"] - regular, ZERO)


F8959 = FormSpec(
    form_type=FormType.F8959,
    title="Form 8959, Additional Medicare Tax",
    applies=when_present(FormType.W2, FormType.SCHEDULE_C),
    lines=(
        computed(
            "medicare_wages",
            "sum",
            add,
            medicare_wages=total(FormType.W2, "medicare_wages"),
        ),
        computed(
            "se_earnings",
            "copy",
            copy,
            net_earnings=ref(FormType.SCHEDULE_SE, "net_earnings", Absent.ZERO),
        ),
        computed(
            "tax",
            "self_employment.additional_medicare_tax",
            _additional_medicare_tax,
            medicare_wages=local("medicare_wages"),
            se_earnings=local("se_earnings"),
        ),
        computed(
            "medicare_tax_withheld",
            "sum",
            add,
            withheld=total(FormType.W2, "medicare_tax_withheld"),
        ),
        computed(
            "additional_withholding",
            "8959.additional_withholding",
            _additional_medicare_withholding,
            medicare_wages=local("medicare_wages"),
            medicare_tax_withheld=local("medicare_tax_withheld"),
        ),
    ),
)


def _student_loan_interest(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    # MAGI for this adjustment is AGI figured without it
    magi = inputs["total_income"] - inputs["other_adjustments"]
    return deductions.student_loan_interest_deduction(
        inputs["interest_paid"], magi, profile.filing_status, params
    )


# Lines 8a-8z. Net operating loss and the foreign earned income exclusion are
# entered as negative amounts, as on the form.
_OTHER_INCOME_LINES = (
    ("nol_deduction", "Line 8a, negative"),
    ("gambling_income", "Line 8b"),
    ("cancellation_of_debt", "Line 8c"),
    ("foreign_earned_income_exclusion", "Line 8d, negative"),
    ("income_form_8853", "Line 8e, Archer and Medicare Advantage MSAs"),
    ("income_form_8889", "Line 8f, HSAs"),
    ("alaska_permanent_fund", "Line 8g"),
    ("jury_duty_pay", "Line 8h"),
    ("prizes_and_awards", "Line 8i"),
    ("activity_not_for_profit", "Line 8j"),
    ("stock_options", "Line 8k"),
    ("rental_personal_property", "Line 8l"),
    ("olympic_medals", "Line 8m"),
    ("section_951a_inclusion", "Line 8n"),
    ("section_951a_a_inclusion", "Line 8o"),
    ("excess_business_loss", "Line 8p"),
    ("able_distributions", "Line 8q"),
    ("scholarship_grants", "Line 8r"),
    ("medicaid_waiver_payments", "Line 8s, negative"),
    ("nonqualified_deferred_compensation", "Line 8t"),
    ("wages_while_incarcerated", "Line 8u"),
    ("digital_assets", "Line 8v"),
    ("other_income", "Line 8z"),
)

# Lines 24a-24z
_OTHER_ADJUSTMENT_LINES = (
    ("jury_duty_pay_remitted", "Line 24a"),
    ("rental_personal_property_deductions", "Line 24b"),
    ("olympic_medals_nontaxable", "Line 24c"),
    ("reforestation_amortization", "Line 24d"),
    ("supplemental_unemployment_repaid", "Line 24e"),
    ("contributions_501c18d", "Line 24f"),
    ("chaplain_403b_contributions", "Line 24g"),
    ("attorney_fees_discrimination", "Line 24h"),
    ("attorney_fees_whistleblower", "Line 24i"),
    ("housing_deduction_2555", "Line 24j"),
    ("excess_deductions_67e", "Line 24k"),
    ("other_adjustments", "Line 24z"),
)

# Lines 11-23 other than 15 and 21, which are computed
_ADJUSTMENT_LINES = (
    ("educator_expenses", "Line 11"),
    ("reservist_business_expenses", "Line 12"),
    ("hsa_deduction", "Line 13"),
    ("moving_expenses", "Line 14, armed forces"),
    ("se_retirement_contributions", "Line 16"),
    ("se_health_insurance", "Line 17"),
    ("early_withdrawal_penalty", "Line 18"),
    ("alimony_paid", "Line 19a"),
    ("ira_deduction", "Line 20"),
    ("archer_msa_deduction", "Line 23"),
)


SCHEDULE_1 = FormSpec(
    form_type=FormType.SCHEDULE_1,
    title="Schedule 1, Additional Income and Adjustments to Income",
    applies=always,
    lines=(
        # Part I, additional income
        computed(
            "taxable_refunds",
            "sum",
            add,
            refunds=total(FormType.F1099_G, "taxable_refund"),
        ),
        raw("alimony_received", description="Line 2a, pre-2019 divorce or separation"),
        computed(
            "business_income",
            "sum",
            add,
            net_profit=total(FormType.SCHEDULE_C, "net_profit"),
        ),
        raw("other_gains", description="Line 4, Form 4797"),
        raw("rental_real_estate", description="Line 5, Schedule E"),
        raw("farm_income", description="Line 6, Schedule F"),
        computed(
            "unemployment",
            "sum",
            add,
            unemployment=total(FormType.F1099_G, "unemployment"),
        ),
        *(raw(name, description=description) for name, description in _OTHER_INCOME_LINES),
        computed(
            "total_other_income",
            "sum",
            add,
            **{name: local(name) for name, _ in _OTHER_INCOME_LINES},
        ),
        computed(
            "additional_income",
            "sum",
            add,
            taxable_refunds=local("taxable_refunds"),
            alimony_received=local("alimony_received"),
            business_income=local("business_income"),
            other_gains=local("other_gains"),
            rental_real_estate=local("rental_real_estate"),
            farm_income=local("farm_income"),
            unemployment=local("unemployment"),
            total_other_income=local("total_other_income"),
        ),
        # Part II, adjustments to income
        *(raw(name, description=description) for name, description in _ADJUSTMENT_LINES),
        computed(
            "se_tax_deduction",
            "copy",
            copy,
            deduction=ref(FormType.SCHEDULE_SE, "deduction", Absent.ZERO),
        ),
        *(raw(name, description=description) for name, description in _OTHER_ADJUSTMENT_LINES),
        computed(
            "total_other_adjustments",
            "sum",
            add,
            **{name: local(name) for name, _ in _OTHER_ADJUSTMENT_LINES},
        ),
        computed(
            "adjustments_before_student_loan",
            "sum",
            add,
            se_tax_deduction=local("se_tax_deduction"),
            total_other_adjustments=local("total_other_adjustments"),
            **{name: local(name) for name, _ in _ADJUSTMENT_LINES},
        ),
        computed(
            "student_loan_interest",
            "deductions.student_loan_interest_deduction",
            _student_loan_interest,
            interest_paid=ref(FormType.F1098_E, "student_loan_interest", Absent.ZERO),
            total_income=ref(FormType.F1040, "total_income"),
            other_adjustments=local("adjustments_before_student_loan"),
        ),
        computed(
            "adjustments",
            "sum",
            add,
            adjustments_before_student_loan=local("adjustments_before_student_loan"),
            student_loan_interest=local("student_loan_interest"),
        ),
    ),
)

# =============================================================================
# Schedule A, 8995, 8960, 6251, 1116
# =============================================================================


def _medical(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return deductions.medical_deduction(inputs["medical_expenses"], inputs["agi"], params)


def _salt(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    taxes = inputs["state_local_taxes"] + inputs["real_estate_taxes"]
    return deductions.salt_deduction(taxes, inputs["agi"], profile.filing_status, params)


def _charitable(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return deductions.charitable_deduction(
        inputs["charitable_cash"], inputs["charitable_noncash"], inputs["agi"], params
    )


SCHEDULE_A = FormSpec(
    form_type=FormType.SCHEDULE_A,
    title="Schedule A, Itemized Deductions",
    applies=when_present(FormType.F1098),
    lines=(
        raw("medical_expenses", description="Line 1"),
        raw("state_local_taxes", description="Line 5a"),
        raw("real_estate_taxes", description="Line 5b"),
        raw("charitable_cash", description="Line 11"),
        raw("charitable_noncash", description="Line 12"),
        raw("other_itemized", description="Line 16"),
        computed(
            "medical_deduction",
            "deductions.medical_deduction",
            _medical,
            medical_expenses=local("medical_expenses"),
            agi=ref(FormType.F1040, "agi"),
        ),
        computed(
            "taxes_deduction",
            "deductions.salt_deduction",
            _salt,
            state_local_taxes=local("state_local_taxes"),
            real_estate_taxes=local("real_estate_taxes"),
            agi=ref(FormType.F1040, "agi"),
        ),
        computed(
            "mortgage_interest",
            "sum",
            add,
            interest=total(FormType.F1098, "mortgage_interest"),
            points=total(FormType.F1098, "points"),
        ),
        computed(
            "charitable_deduction",
            "deductions.charitable_deduction",
            _charitable,
            charitable_cash=local("charitable_cash"),
            charitable_noncash=local("charitable_noncash"),
            agi=ref(FormType.F1040, "agi"),
        ),
        computed(
            "total_itemized",
            "sum",
            add,
            medical=local("medical_deduction"),
            taxes=local("taxes_deduction"),
            mortgage_interest=local("mortgage_interest"),
            charitable=local("charitable_deduction"),
            other=local("other_itemized"),
        ),
    ),
)


def _qbi_deduction(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return qbi.qbi_deduction(
        inputs["components"],
        inputs["reit_dividends"],
        inputs["taxable_income"],
        inputs["qualified_dividends"] + inputs["net_capital_gain"],
        params,
    )


F8995 = FormSpec(
    form_type=FormType.F8995,
    title="Form 8995, Qualified Business Income Deduction",
    applies=when_present(FormType.SCHEDULE_C, FormType.F1099_DIV),
    lines=(
        computed(
            "components",
            "sum",
            add,
            components=total(FormType.SCHEDULE_C, "qbi_component"),
        ),
        computed(
            "reit_dividends",
            "sum",
            add,
            dividends=total(FormType.F1099_DIV, "section_199a_dividends"),
        ),
        computed(
            "deduction",
            "qbi.qbi_deduction",
            _qbi_deduction,
            components=local("components"),
            reit_dividends=local("reit_dividends"),
            taxable_income=ref(FormType.F1040, "taxable_income_before_qbi"),
            qualified_dividends=ref(FormType.F1040, "qualified_dividends"),
            net_capital_gain=ref(FormType.SCHEDULE_D, "net_capital_gain", Absent.ZERO),
        ),
    ),
)


def _net_investment_income(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return niit.net_investment_income(
        inputs["interest"], inputs["dividends"], inputs["capital_gain"]
    )


def _niit(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return niit.net_investment_income_tax(
        inputs["investment_income"], inputs["magi"], profile.filing_status, params
    )


F8960 = FormSpec(
    form_type=FormType.F8960,
    title="Form 8960, Net Investment Income Tax",
    applies=when_present(FormType.F1099_INT, FormType.F1099_DIV, FormType.SCHEDULE_D),
    lines=(
        computed(
            "investment_income",
            "niit.net_investment_income",
            _net_investment_income,
            interest=ref(FormType.F1040, "taxable_interest"),
            dividends=ref(FormType.F1040, "ordinary_dividends"),
            capital_gain=ref(FormType.F1040, "capital_gain"),
        ),
        computed("magi", "copy", copy, agi=ref(FormType.F1040, "agi")),
        computed(
            "tax",
            "niit.net_investment_income_tax",
            _niit,
            investment_income=local("investment_income"),
            magi=local("magi"),
        ),
    ),
)


def _amt_addback(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    if inputs["deduction_method"] == deductions.DeductionMethod.STANDARD.value:
        return inputs["deduction"]
    return inputs["taxes_deduction"]


def _regular_taxable_income(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return amt.regular_taxable_income(
        inputs["agi"], inputs["deduction"], inputs["qbi_deduction"]
    )


def _amti(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return amt.alternative_minimum_taxable_income(
        inputs["taxable_income"], inputs["deduction_addback"], inputs["other_adjustments"]
    )


def _amt_exemption(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return amt.amt_exemption(inputs["amti"], profile.filing_status, params)


def _tentative_minimum_tax(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return amt.tentative_minimum_tax(
        inputs["amti"],
        profile.filing_status,
        params,
        qualified_dividends=inputs["qualified_dividends"],
        net_capital_gain=inputs["net_capital_gain"],
    )


def _amt(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return amt.alternative_minimum_tax(inputs["tentative_minimum_tax"], inputs["regular_tax"])


F6251 = FormSpec(
    form_type=FormType.F6251,
    title="Form 6251, Alternative Minimum Tax",
    applies=always,
    lines=(
        raw("other_adjustments", description="Lines 2b through 3, combined"),
        computed(
            "deduction_addback",
            "amt.deduction_addback",
            _amt_addback,
            deduction_method=ref(FormType.F1040, "deduction_method"),
            deduction=ref(FormType.F1040, "deduction"),
            taxes_deduction=ref(FormType.SCHEDULE_A, "taxes_deduction", Absent.ZERO),
        ),
        computed(
            "taxable_income",
            "amt.regular_taxable_income",
            _regular_taxable_income,
            agi=ref(FormType.F1040, "agi"),
            deduction=ref(FormType.F1040, "deduction"),
            qbi_deduction=ref(FormType.F1040, "qbi_deduction"),
        ),
        computed(
            "amti",
            "amt.alternative_minimum_taxable_income",
            _amti,
            taxable_income=local("taxable_income"),
            deduction_addback=local("deduction_addback"),
            other_adjustments=local("other_adjustments"),
        ),
        computed("exemption", "amt.amt_exemption", _amt_exemption, amti=local("amti")),
        computed(
            "tentative_minimum_tax",
            "amt.tentative_minimum_tax",
            _tentative_minimum_tax,
            amti=local("amti"),
            qualified_dividends=ref(FormType.F1040, "qualified_dividends"),
            net_capital_gain=ref(FormType.SCHEDULE_D, "net_capital_gain", Absent.ZERO),
        ),
        computed("regular_tax", "copy", copy, tax=ref(FormType.F1040, "tax")),
        computed(
            "amt",
            "amt.alternative_minimum_tax",
            _amt,
            tentative_minimum_tax=local("tentative_minimum_tax"),
            regular_tax=local("regular_tax"),
        ),
    ),
)


def _foreign_tax_limitation(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return credits.foreign_tax_limitation(
        inputs["regular_tax"], inputs["foreign_source_income"], inputs["taxable_income"]
    )


F1116 = FormSpec(
    form_type=FormType.F1116,
    title="Form 1116, Foreign Tax Credit",
    lines=(
        raw("foreign_source_income", required=True, description="Line 15"),
        computed(
            "limitation",
            "credits.foreign_tax_limitation",
            _foreign_tax_limitation,
            foreign_source_income=local("foreign_source_income"),
            regular_tax=ref(FormType.F1040, "tax"),
            taxable_income=ref(FormType.F1040, "taxable_income"),
        ),
    ),
)

# =============================================================================
# Credits: 8863, 8812, Schedule 3
# =============================================================================


def _education_part(refundable: bool):
    def formula(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
        result = credits.education_credits(
            inputs["aoc_tentative"],
            inputs["llc_expenses"],
            inputs["magi"],
            profile.filing_status,
            params,
        )
        return result.refundable if refundable else result.nonrefundable

    return formula


F8863 = FormSpec(
    form_type=FormType.F8863,
    title="Form 8863, Education Credits",
    applies=when_present(FormType.F1098_T),
    lines=(
        computed(
            "aoc_tentative",
            "sum",
            add,
            tentative=total(FormType.F1098_T, "aoc_tentative"),
        ),
        computed(
            "llc_expenses",
            "sum",
            add,
            expenses=total(FormType.F1098_T, "llc_expenses"),
        ),
        computed("magi", "copy", copy, agi=ref(FormType.F1040, "agi")),
        computed(
            "refundable",
            "credits.education_credits.refundable",
            _education_part(refundable=True),
            aoc_tentative=local("aoc_tentative"),
            llc_expenses=local("llc_expenses"),
            magi=local("magi"),
        ),
        computed(
            "nonrefundable",
            "credits.education_credits.nonrefundable",
            _education_part(refundable=False),
            aoc_tentative=local("aoc_tentative"),
            llc_expenses=local("llc_expenses"),
            magi=local("magi"),
        ),
    ),
)

# Tentative amount of each ordered credit, declared once for every allowed line
ORDERED_CREDIT_INPUTS: dict[str, LineRef] = {
    "liability": ref(FormType.F1040, "tax_before_credits"),
    CreditKind.FOREIGN_TAX.value: ref(FormType.SCHEDULE_3, "foreign_tax_credit"),
    CreditKind.DEPENDENT_CARE.value: ref(FormType.F2441, "credit", Absent.ZERO),
    CreditKind.EDUCATION.value: ref(FormType.F8863, "nonrefundable", Absent.ZERO),
    CreditKind.RETIREMENT_SAVINGS.value: ref(FormType.F8880, "credit", Absent.ZERO),
    CreditKind.CHILD_AND_OTHER_DEPENDENT.value: ref(
        FormType.SCHEDULE_8812, "tentative_credit", Absent.ZERO
    ),
}


def _credit_allowed(kind: CreditKind):
    """Formula for the portion of one credit left after those ordered before it."""

    def formula(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
        tentative = {credit: inputs[credit.value] for credit in CreditKind}
        allowed = credits.apply_credit_order(
            inputs["liability"], tentative, params.nonrefundable_credit_order
        )
        return allowed.get(kind, ZERO)

    return formula


def _allowed_line(name: str, kind: CreditKind) -> LineSpec:
    return computed(
        name,
        f"credits.apply_credit_order.{kind.value}",
        _credit_allowed(kind),
        **ORDERED_CREDIT_INPUTS,
    )


def _child_tax_credit(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return credits.child_tax_credit(
        credits.ctc_qualifying_children(profile, params),
        credits.odc_dependents(profile, params),
        inputs["magi"],
        profile.filing_status,
        params,
    )


def _additional_child_tax_credit(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return credits.additional_child_tax_credit(
        inputs["tentative_credit"],
        inputs["credit_allowed"],
        credits.ctc_qualifying_children(profile, params),
        inputs["earned_income"],
        params,
    )


SCHEDULE_8812 = FormSpec(
    form_type=FormType.SCHEDULE_8812,
    title="Schedule 8812, Credits for Qualifying Children and Other Dependents",
    applies=when_dependents,
    lines=(
        computed("magi", "copy", copy, agi=ref(FormType.F1040, "agi")),
        computed(
            "tentative_credit",
            "credits.child_tax_credit",
            _child_tax_credit,
            magi=local("magi"),
        ),
        _allowed_line("credit_allowed", CreditKind.CHILD_AND_OTHER_DEPENDENT),
        computed("earned_income", "copy", copy, earned=ref(FormType.F1040, "earned_income")),
        computed(
            "additional_child_tax_credit",
            "credits.additional_child_tax_credit",
            _additional_child_tax_credit,
            tentative_credit=local("tentative_credit"),
            credit_allowed=local("credit_allowed"),
            earned_income=local("earned_income"),
        ),
    ),
)


def _foreign_tax_credit(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return credits.foreign_tax_credit(
        inputs["foreign_tax_paid"],
        profile.filing_status,
        params,
        limitation=inputs["limitation"],
    )


SCHEDULE_3 = FormSpec(
    form_type=FormType.SCHEDULE_3,
    title="Schedule 3, Additional Credits and Payments",
    applies=always,
    lines=(
        computed(
            "foreign_tax_paid",
            "sum",
            add,
            interest=total(FormType.F1099_INT, "foreign_tax_paid"),
            dividends=total(FormType.F1099_DIV, "foreign_tax_paid"),
        ),
        computed(
            "foreign_tax_credit",
            "credits.foreign_tax_credit",
            _foreign_tax_credit,
            foreign_tax_paid=local("foreign_tax_paid"),
            limitation=ref(FormType.F1116, "limitation", Absent.OPTIONAL),
        ),
        _allowed_line("foreign_tax_credit_allowed", CreditKind.FOREIGN_TAX),
        _allowed_line("dependent_care_credit_allowed", CreditKind.DEPENDENT_CARE),
        _allowed_line("education_credit_allowed", CreditKind.EDUCATION),
        _allowed_line("retirement_savings_credit_allowed", CreditKind.RETIREMENT_SAVINGS),
        computed(
            "nonrefundable_credits",
            "sum",
            add,
            foreign_tax=local("foreign_tax_credit_allowed"),
            dependent_care=local("dependent_care_credit_allowed"),
            education=local("education_credit_allowed"),
            retirement_savings=local("retirement_savings_credit_allowed"),
        ),
    ),
)

# =============================================================================
# Schedule 2 and Form 1040
# =============================================================================

SCHEDULE_2 = FormSpec(
    form_type=FormType.SCHEDULE_2,
    title="Schedule 2, Additional Taxes",
    applies=always,
    lines=(
        computed(
            "alternative_minimum_tax",
            "copy",
            copy,
            amt=ref(FormType.F6251, "amt"),
        ),
        computed(
            "additional_taxes",
            "sum",
            add,
            amt=local("alternative_minimum_tax"),
        ),
        computed(
            "self_employment_tax",
            "copy",
            copy,
            se_tax=ref(FormType.SCHEDULE_SE, "se_tax", Absent.ZERO),
        ),
        computed(
            "additional_medicare_tax",
            "copy",
            copy,
            tax=ref(FormType.F8959, "tax", Absent.ZERO),
        ),
        computed(
            "net_investment_income_tax",
            "copy",
            copy,
            tax=ref(FormType.F8960, "tax", Absent.ZERO),
        ),
        computed(
            "early_distribution_tax",
            "sum",
            add,
            tax=total(FormType.F1099_R, "early_distribution_tax"),
        ),
        computed(
            "other_taxes",
            "sum",
            add,
            self_employment_tax=local("self_employment_tax"),
            additional_medicare_tax=local("additional_medicare_tax"),
            net_investment_income_tax=local("net_investment_income_tax"),
            early_distribution_tax=local("early_distribution_tax"),
        ),
    ),
)


def _earned_income(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return max(inputs["wages"] + inputs["business_income"] - inputs["se_tax_deduction"], ZERO)


def _standard_deduction(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    return deductions.standard_deduction(profile, params, inputs["earned_income"])


def _deduction_choice(inputs: LineInputs, profile: FilingProfile) -> deductions.DeductionChoice:
    return deductions.select_deduction(
        inputs["standard_deduction"], inputs["itemized_deductions"], profile
    )


def _deduction_method(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> str:
    return _deduction_choice(inputs, profile).method.value


def _deduction(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return _deduction_choice(inputs, profile).amount


def _tax(inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile) -> Decimal:
    return brackets.capital_gain_tax(
        inputs["taxable_income"],
        inputs["qualified_dividends"],
        inputs["net_capital_gain"],
        profile.filing_status,
        params,
    )


def _earned_income_credit(
    inputs: LineInputs, params: TaxYearParameters, profile: FilingProfile
) -> Decimal:
    investment_income = (
        inputs["taxable_interest"]
        + inputs["tax_exempt_interest"]
        + inputs["ordinary_dividends"]
        + max(inputs["capital_gain"], ZERO)
    )
    return eitc.earned_income_credit(
        inputs["earned_income"],
        inputs["agi"],
        investment_income,
        eitc.eitc_qualifying_children(profile, params),
        profile,
        params,
    )


_DEDUCTION_INPUTS = {
    "standard_deduction": local("standard_deduction"),
    "itemized_deductions": local("itemized_deductions"),
}

F1040 = FormSpec(
    form_type=FormType.F1040,
    title="Form 1040, U.S. Individual Income Tax Return",
    applies=always,
    lines=(
        # Income
        computed("wages", "sum", add, wages=total(FormType.W2, "wages")),
        computed(
            "tax_exempt_interest",
            "sum",
            add,
            interest=total(FormType.F1099_INT, "tax_exempt_interest"),
        ),
        computed("taxable_interest", "sum", add, interest=total(FormType.F1099_INT, "interest")),
        computed(
            "qualified_dividends",
            "sum",
            add,
            dividends=total(FormType.F1099_DIV, "qualified_dividends"),
        ),
        computed(
            "ordinary_dividends",
            "sum",
            add,
            dividends=total(FormType.F1099_DIV, "ordinary_dividends"),
        ),
        computed("ira_distributions", "sum", add, taxable=total(FormType.F1099_R, "ira_taxable")),
        computed("pensions", "sum", add, taxable=total(FormType.F1099_R, "pension_taxable")),
        computed(
            "capital_gain",
            "copy",
            copy,
            gain=ref(FormType.SCHEDULE_D, "allowed_gain_or_loss", Absent.ZERO),
        ),
        computed(
            "additional_income",
            "copy",
            copy,
            income=ref(FormType.SCHEDULE_1, "additional_income"),
        ),
        computed(
            "total_income",
            "sum",
            add,
            wages=local("wages"),
            taxable_interest=local("taxable_interest"),
            ordinary_dividends=local("ordinary_dividends"),
            ira_distributions=local("ira_distributions"),
            pensions=local("pensions"),
            capital_gain=local("capital_gain"),
            additional_income=local("additional_income"),
        ),
        computed(
            "adjustments",
            "copy",
            copy,
            adjustments=ref(FormType.SCHEDULE_1, "adjustments"),
        ),
        computed(
            "agi",
            "1040.adjusted_gross_income",
            minuend_less_subtrahend,
            minuend=local("total_income"),
            subtrahend=local("adjustments"),
        ),
        computed(
            "earned_income",
            "1040.earned_income",
            _earned_income,
            wages=local("wages"),
            business_income=ref(FormType.SCHEDULE_1, "business_income"),
            se_tax_deduction=ref(FormType.SCHEDULE_1, "se_tax_deduction"),
        ),
        # Deductions
        computed(
            "standard_deduction",
            "deductions.standard_deduction",
            _standard_deduction,
            earned_income=local("earned_income"),
        ),
        computed(
            "itemized_deductions",
            "copy",
            copy,
            itemized=ref(FormType.SCHEDULE_A, "total_itemized", Absent.ZERO),
        ),
        computed(
            "deduction_method",
            "deductions.select_deduction.method",
            _deduction_method,
            LineKind.CHOICE,
            choices=tuple(method.value for method in deductions.DeductionMethod),
            **_DEDUCTION_INPUTS,
        ),
        computed(
            "deduction",
            "deductions.select_deduction",
            _deduction,
            **_DEDUCTION_INPUTS,
        ),
        computed(
            "taxable_income_before_qbi",
            "1040.taxable_income_before_qbi",
            excess_over,
            minuend=local("agi"),
            subtrahend=local("deduction"),
        ),
        computed(
            "qbi_deduction",
            "copy",
            copy,
            deduction=ref(FormType.F8995, "deduction", Absent.ZERO),
        ),
        computed(
            "taxable_income",
            "1040.taxable_income",
            excess_over,
            minuend=local("taxable_income_before_qbi"),
            subtrahend=local("qbi_deduction"),
        ),
        # Tax and credits
        computed(
            "tax",
            "brackets.capital_gain_tax",
            _tax,
            taxable_income=local("taxable_income"),
            qualified_dividends=local("qualified_dividends"),
            net_capital_gain=ref(FormType.SCHEDULE_D, "net_capital_gain", Absent.ZERO),
        ),
        computed(
            "additional_taxes",
            "copy",
            copy,
            taxes=ref(FormType.SCHEDULE_2, "additional_taxes"),
        ),
        computed(
            "tax_before_credits",
            "sum",
            add,
            tax=local("tax"),
            additional_taxes=local("additional_taxes"),
        ),
        computed(
            "child_tax_credit",
            "copy",
            copy,
            credit=ref(FormType.SCHEDULE_8812, "credit_allowed", Absent.ZERO),
        ),
        computed(
            "other_credits",
            "copy",
            copy,
            credits=ref(FormType.SCHEDULE_3, "nonrefundable_credits"),
        ),
        computed(
            "total_credits",
            "sum",
            add,
            child_tax_credit=local("child_tax_credit"),
            other_credits=local("other_credits"),
        ),
        computed(
            "tax_after_credits",
            "1040.tax_after_credits",
            excess_over,
            minuend=local("tax_before_credits"),
            subtrahend=local("total_credits"),
        ),
        computed(
            "other_taxes",
            "copy",
            copy,
            taxes=ref(FormType.SCHEDULE_2, "other_taxes"),
        ),
        computed(
            "total_tax",
            "sum",
            add,
            tax_after_credits=local("tax_after_credits"),
            other_taxes=local("other_taxes"),
        ),
        # Payments
        computed(
            "withholding",
            "sum",
            add,
            w2=total(FormType.W2, "federal_withholding"),
            interest=total(FormType.F1099_INT, "federal_withholding"),
            dividends=total(FormType.F1099_DIV, "federal_withholding"),
            government=total(FormType.F1099_G, "federal_withholding"),
            retirement=total(FormType.F1099_R, "federal_withholding"),
            additional_medicare=ref(FormType.F8959, "additional_withholding", Absent.ZERO),
        ),
        computed(
            "estimated_payments",
            "copy",
            copy,
            payments=ref(FormType.F1040_ES, "estimated_payments", Absent.ZERO),
        ),
        computed(
            "earned_income_credit",
            "eitc.earned_income_credit",
            _earned_income_credit,
            earned_income=local("earned_income"),
            agi=local("agi"),
            taxable_interest=local("taxable_interest"),
            tax_exempt_interest=local("tax_exempt_interest"),
            ordinary_dividends=local("ordinary_dividends"),
            capital_gain=local("capital_gain"),
        ),
        computed(
            "additional_child_tax_credit",
            "copy",
            copy,
            credit=ref(FormType.SCHEDULE_8812, "additional_child_tax_credit", Absent.ZERO),
        ),
        computed(
            "american_opportunity_credit",
            "copy",
            copy,
            credit=ref(FormType.F8863, "refundable", Absent.ZERO),
        ),
        computed(
            "refundable_credits",
            "sum",
            add,
            earned_income_credit=local("earned_income_credit"),
            additional_child_tax_credit=local("additional_child_tax_credit"),
            american_opportunity_credit=local("american_opportunity_credit"),
        ),
        computed(
            "total_payments",
            "sum",
            add,
            withholding=local("withholding"),
            estimated_payments=local("estimated_payments"),
            refundable_credits=local("refundable_credits"),
        ),
        computed(
            "overpayment",
            "1040.overpayment",
            excess_over,
            minuend=local("total_payments"),
            subtrahend=local("total_tax"),
        ),
        computed(
            "amount_owed",
            "1040.amount_owed",
            excess_over,
            minuend=local("total_tax"),
            subtrahend=local("total_payments"),
        ),
    ),
)

DEFAULT_FORMS: tuple[FormSpec, ...] = (
    W2,
    F1099_INT,
    F1099_DIV,
    F1099_G,
    F1099_R,
    F1098,
    F1098_E,
    F1098_T,
    SCHEDULE_C,
    F2441,
    F8880,
    F1040_ES,
    SCHEDULE_D,
    SCHEDULE_SE,
    F8959,
    SCHEDULE_1,
    SCHEDULE_A,
    F8995,
    F8960,
    F6251,
    F1116,
    F8863,
    SCHEDULE_8812,
    SCHEDULE_2,
    SCHEDULE_3,
    F1040,
)


@lru_cache(maxsize=1)
def default_catalog() -> FormCatalog:
    """The validated catalog of every modeled form, built once."""
    return FormCatalog(DEFAULT_FORMS)
