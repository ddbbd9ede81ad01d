"""Pydantic models for the filer facts a return is computed from.

This module defines the FilingProfile and its parts:
- Person: taxpayer or spouse age and blindness
- Dependent: ordered dependents with their classification
- DeductionElection: the filer's explicit standard/itemized election

Elections that would otherwise need to be inferred (itemizing despite a larger
standard deduction, for example) are explicit fields here.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.tax.year_config import FilingStatus


class DependentKind(str, Enum):
    """How a dependent is claimed."""

    QUALIFYING_CHILD = "qualifying_child"
    OTHER_DEPENDENT = "other_dependent"


class DeductionElection(str, Enum):
    """Filer election between the standard and itemized deduction."""

    AUTO = "auto"
    STANDARD = "standard"
    ITEMIZED = "itemized"


class Person(BaseModel):
    """Taxpayer or spouse facts used by the standard deduction and EITC."""

    model_config = ConfigDict(frozen=True)

    age: int = Field(ge=0, description="Age at the end of the tax year")
    is_blind: bool = Field(default=False, description="Legally blind at year end")


class Dependent(BaseModel):
    """A dependent claimed on the return."""

    model_config = ConfigDict(frozen=True)

    kind: DependentKind = Field(description="Qualifying child or other dependent")
    age: int = Field(ge=0, description="Age at the end of the tax year")
    is_student: bool = Field(default=False, description="Full-time student")
    is_disabled: bool = Field(
        default=False, description="Permanently and totally disabled"
    )


class FilingProfile(BaseModel):
    """Everything about the filer that is not a form line.

    Attributes:
        tax_year: Year being filed; must match the parameter set.
        filing_status: Exactly one filing status.
        taxpayer: Primary filer.
        spouse: Spouse on a joint return (required for MFJ).
        dependents: Ordered dependents.
        can_be_claimed_as_dependent: Filer is someone else's dependent.
        is_dual_status_alien: Dual-status aliens get no standard deduction.
        spouse_itemizes: MFS spouse itemizes, which forces itemizing.
        deduction_election: Standard/itemized election.
    """

    model_config = ConfigDict(frozen=True)

    tax_year: int = Field(description="Tax year being filed")
    filing_status: FilingStatus = Field(description="Filing status")
    taxpayer: Person = Field(description="Primary taxpayer")
    spouse: Person | None = Field(default=None, description="Spouse (joint returns)")
    dependents: tuple[Dependent, ...] = Field(default=(), description="Dependents, in order")
    can_be_claimed_as_dependent: bool = False
    is_dual_status_alien: bool = False
    spouse_itemizes: bool = False
    deduction_election: DeductionElection = DeductionElection.AUTO

    @model_validator(mode="after")
    def check_spouse(self) -> FilingProfile:
        """A joint return needs a spouse; only MFS looks at spouse_itemizes."""
        if self.filing_status.is_joint and self.spouse is None:
            raise ValueError("spouse is required for married filing jointly")
        if (
            self.spouse_itemizes
            and self.filing_status is not FilingStatus.MARRIED_FILING_SEPARATELY
        ):
            raise ValueError("spouse_itemizes only applies to married filing separately")
        return self

    @property
    def filers(self) -> tuple[Person, ...]:
        """People on the return: taxpayer, plus spouse when filing jointly."""
        if self.filing_status.is_joint and self.spouse is not None:
            return (self.taxpayer, self.spouse)
        return (self.taxpayer,)
