"""Provision evaluators.

Pure functions from filer facts and a TaxYearParameters to amounts, one module
per area of the law. The form catalog wires each computed line to the
evaluator that governs it.

Components:
- brackets: regular tax, tax table, capital gain rates
- phaseout: step and proportional phase-outs
- deductions: standard deduction, Schedule A, adjustments
- self_employment: Schedule SE and Additional Medicare Tax
- niit: net investment income tax
- amt: alternative minimum tax
- credits: CTC/ACTC, dependent care, education, saver's, foreign tax, ordering
- eitc: earned income credit
- qbi: qualified business income deduction
"""

from src.provisions.amt import (
    alternative_minimum_tax,
    amt_exemption,
    tentative_minimum_tax,
)
from src.provisions.brackets import (
    bracket_tax,
    capital_gain_tax,
    preferential_rate_tax,
    regular_tax,
    tax_table_income,
)
from src.provisions.credits import (
    additional_child_tax_credit,
    apply_credit_order,
    child_tax_credit,
    dependent_care_credit,
    early_distribution_tax,
    education_credits,
    foreign_tax_credit,
    savers_credit,
)
from src.provisions.deductions import (
    DeductionChoice,
    DeductionMethod,
    select_deduction,
    standard_deduction,
)
from src.provisions.eitc import earned_income_credit
from src.provisions.niit import net_investment_income_tax
from src.provisions.phaseout import phase_out, proportional_phase_out
from src.provisions.qbi import qbi_component, qbi_deduction
from src.provisions.self_employment import (
    additional_medicare_tax,
    self_employment_tax,
    self_employment_tax_deduction,
)

__all__ = [
    # Regular tax
    "bracket_tax",
    "tax_table_income",
    "regular_tax",
    "preferential_rate_tax",
    "capital_gain_tax",
    # Phase-outs
    "phase_out",
    "proportional_phase_out",
    # Deductions
    "DeductionChoice",
    "DeductionMethod",
    "standard_deduction",
    "select_deduction",
    # Other taxes
    "self_employment_tax",
    "self_employment_tax_deduction",
    "additional_medicare_tax",
    "net_investment_income_tax",
    "amt_exemption",
    "tentative_minimum_tax",
    "alternative_minimum_tax",
    # Credits
    "child_tax_credit",
    "additional_child_tax_credit",
    "dependent_care_credit",
    "education_credits",
    "savers_credit",
    "foreign_tax_credit",
    "apply_credit_order",
    "early_distribution_tax",
    "earned_income_credit",
    # QBI
    "qbi_component",
    "qbi_deduction",
]
