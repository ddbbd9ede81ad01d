"""Pytest configuration and shared fixtures for tests."""

from __future__ import annotations

import pytest
import structlog

from src.tax.profile import FilingProfile
from src.tax.year_config import TAX_YEAR_2024, TAX_YEAR_2025, FilingStatus, TaxYearParameters
from tests.factories import make_profile


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Keep structlog configuration from leaking between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def params_2025() -> TaxYearParameters:
    """2025 parameter set."""
    return TAX_YEAR_2025


@pytest.fixture
def params_2024() -> TaxYearParameters:
    """2024 parameter set."""
    return TAX_YEAR_2024


@pytest.fixture
def single_profile() -> FilingProfile:
    """Single filer, age 35, no dependents."""
    return make_profile()


@pytest.fixture
def mfj_three_children_profile() -> FilingProfile:
    """Married couple filing jointly with three young qualifying children."""
    return make_profile(
        FilingStatus.MARRIED_FILING_JOINTLY,
        age=40,
        spouse_age=38,
        children=(5, 8, 10),
    )
