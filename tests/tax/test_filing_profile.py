"""Tests for the FilingProfile model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.tax.profile import DeductionElection, Dependent, DependentKind, FilingProfile, Person
from src.tax.year_config import FilingStatus


class TestFilingProfile:
    def test_joint_return_requires_spouse(self) -> None:
        with pytest.raises(ValidationError, match="spouse is required"):
            FilingProfile(
                tax_year=2025,
                filing_status=FilingStatus.MARRIED_FILING_JOINTLY,
                taxpayer=Person(age=40),
            )

    def test_spouse_itemizes_only_for_mfs(self) -> None:
        with pytest.raises(ValidationError, match="married filing separately"):
            FilingProfile(
                tax_year=2025,
                filing_status=FilingStatus.SINGLE,
                taxpayer=Person(age=40),
                spouse_itemizes=True,
            )

    def test_mfs_spouse_itemizes_accepted(self) -> None:
        profile = FilingProfile(
            tax_year=2025,
            filing_status=FilingStatus.MARRIED_FILING_SEPARATELY,
            taxpayer=Person(age=40),
            spouse_itemizes=True,
        )
        assert profile.spouse_itemizes

    def test_filers_include_spouse_only_when_joint(self) -> None:
        joint = FilingProfile(
            tax_year=2025,
            filing_status=FilingStatus.MARRIED_FILING_JOINTLY,
            taxpayer=Person(age=40),
            spouse=Person(age=66, is_blind=True),
        )
        separate = FilingProfile(
            tax_year=2025,
            filing_status=FilingStatus.MARRIED_FILING_SEPARATELY,
            taxpayer=Person(age=40),
            spouse=Person(age=66),
        )

        assert len(joint.filers) == 2
        assert separate.filers == (Person(age=40),)

    def test_defaults(self) -> None:
        profile = FilingProfile(
            tax_year=2025, filing_status=FilingStatus.SINGLE, taxpayer=Person(age=30)
        )
        assert profile.dependents == ()
        assert profile.deduction_election is DeductionElection.AUTO
        assert not profile.can_be_claimed_as_dependent

    def test_profile_is_frozen(self) -> None:
        profile = FilingProfile(
            tax_year=2025, filing_status=FilingStatus.SINGLE, taxpayer=Person(age=30)
        )
        with pytest.raises(ValidationError):
            profile.tax_year = 2024  # type: ignore[misc]

    def test_rejects_negative_age(self) -> None:
        with pytest.raises(ValidationError):
            Dependent(kind=DependentKind.OTHER_DEPENDENT, age=-1)

    def test_dependents_keep_order(self) -> None:
        dependents = (
            Dependent(kind=DependentKind.OTHER_DEPENDENT, age=70),
            Dependent(kind=DependentKind.QUALIFYING_CHILD, age=3),
        )
        profile = FilingProfile(
            tax_year=2025,
            filing_status=FilingStatus.HEAD_OF_HOUSEHOLD,
            taxpayer=Person(age=45),
            dependents=dependents,
        )
        assert [dependent.age for dependent in profile.dependents] == [70, 3]
