"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- DividendCalculator instance
- Rate resolver with a mocked rate repository
"""

from unittest.mock import AsyncMock

import pytest

from app.services.rentability.resolver import RateResolver
from dividends import DividendCalculator


@pytest.fixture
def calculator():
    """
    Create DividendCalculator with default D+60 gate and 30-day months.

    Returns:
        DividendCalculator: Calculator instance for testing
    """
    return DividendCalculator()


@pytest.fixture
def rate_resolver(mock_session):
    """
    Create RateResolver whose repository returns no rows.

    Tests set return values on resolver.rate_repo as needed.

    Returns:
        RateResolver: Resolver with mocked repository
    """
    resolver = RateResolver(mock_session)
    resolver.rate_repo = AsyncMock()
    resolver.rate_repo.get_condition_candidates = AsyncMock(return_value=[])
    resolver.rate_repo.get_plain = AsyncMock(return_value=None)
    resolver.rate_repo.get_fixed = AsyncMock(return_value=None)
    return resolver
