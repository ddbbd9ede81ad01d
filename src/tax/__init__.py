"""Tax-year parameter sets, filer profile, currency helpers, and the engine error taxonomy."""

from src.tax.errors import (
    CircularDependency,
    IncompleteReturn,
    InvalidInput,
    MissingInput,
    MissingParameter,
    ProvisionError,
    ReturnComputationError,
    SchemaViolation,
    TaxEngineError,
    TaxYearMismatch,
)
from src.tax.money import RoundingMode, round_amount, to_amount
from src.tax.profile import (
    DeductionElection,
    Dependent,
    DependentKind,
    FilingProfile,
    Person,
)
from src.tax.year_config import (
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_PARAMETERS,
    CreditKind,
    FilingStatus,
    TaxYearParameters,
    get_tax_year_parameters,
)

__all__ = [
    # Parameters
    "TaxYearParameters",
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEAR_PARAMETERS",
    "get_tax_year_parameters",
    "FilingStatus",
    "CreditKind",
    # Profile
    "FilingProfile",
    "Person",
    "Dependent",
    "DependentKind",
    "DeductionElection",
    # Money
    "RoundingMode",
    "round_amount",
    "to_amount",
    # Errors
    "TaxEngineError",
    "SchemaViolation",
    "MissingInput",
    "CircularDependency",
    "ProvisionError",
    "InvalidInput",
    "MissingParameter",
    "TaxYearMismatch",
    "IncompleteReturn",
    "ReturnComputationError",
]
