"""
Tests for periodic investment checks.

Tests cover:
- Renewal window (-5..+35 days around expiry)
- Accrual gate look-back
- Fixed payout day (5th business day)
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from app.services.investment.checks import InvestmentCheckService


@pytest.fixture
def checks(mock_session):
    service = InvestmentCheckService(mock_session)
    service.investment_repo.get_active_with_payment_date = AsyncMock(return_value=[])
    return service


@pytest.fixture
def expiring(make_investment):
    """Paid 2023-01-01 for 12 months: expires 2024-01-01."""
    return make_investment(id=1, payment_date=datetime(2023, 1, 1, tzinfo=UTC))


class TestRenewalWindow:
    """Test renewal window membership."""

    @pytest.mark.asyncio
    async def test_inside_window(self, checks, expiring):
        checks.investment_repo.get_active_with_payment_date.return_value = [expiring]

        entries = await checks.check_renewal_window(datetime(2023, 12, 10, tzinfo=UTC))

        assert len(entries) == 1
        assert entries[0].investment is expiring
        assert entries[0].expiry_date == date(2024, 1, 1)
        assert entries[0].days_until_expiry == 22

    @pytest.mark.asyncio
    async def test_gone_long_after_expiry(self, checks, expiring):
        checks.investment_repo.get_active_with_payment_date.return_value = [expiring]

        entries = await checks.check_renewal_window(datetime(2024, 2, 20, tzinfo=UTC))

        assert entries == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "now,included",
        [
            (date(2023, 11, 26), False),  # 36 days before
            (date(2023, 11, 27), True),  # 35 days before
            (date(2024, 1, 6), True),  # 5 days after
            (date(2024, 1, 7), False),  # 6 days after
        ],
    )
    async def test_window_edges(self, checks, expiring, now, included):
        checks.investment_repo.get_active_with_payment_date.return_value = [expiring]

        entries = await checks.check_renewal_window(now)

        assert bool(entries) is included

    @pytest.mark.asyncio
    async def test_sorted_by_days_until_expiry(self, checks, expiring, make_investment):
        sooner = make_investment(id=2, payment_date=datetime(2022, 12, 25, tzinfo=UTC))
        checks.investment_repo.get_active_with_payment_date.return_value = [expiring, sooner]

        entries = await checks.check_renewal_window(date(2023, 12, 10))

        assert [e.investment.id for e in entries] == [2, 1]

    @pytest.mark.asyncio
    async def test_owner_filter_passed_to_query(self, checks):
        await checks.check_renewal_window(date(2023, 12, 10), owner_id=4)

        checks.investment_repo.get_active_with_payment_date.assert_awaited_once_with(4)

    @pytest.mark.asyncio
    async def test_entry_serialization(self, checks, expiring):
        checks.investment_repo.get_active_with_payment_date.return_value = [expiring]

        entries = await checks.check_renewal_window(date(2023, 12, 10))
        data = entries[0].to_dict()

        assert data["expiry_date"] == "2024-01-01"
        assert data["days_until_expiry"] == 22
        assert data["investment"]["id"] == 1


class TestAccrualGate:
    """Test investments that just crossed D+60."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "now,days_since",
        [
            (date(2024, 2, 29), None),
            (date(2024, 3, 1), 0),
            (date(2024, 3, 8), 7),
            (date(2024, 3, 9), None),
        ],
    )
    async def test_lookback_window(self, checks, make_investment, now, days_since):
        checks.investment_repo.get_active_with_payment_date.return_value = [make_investment()]

        entries = await checks.check_accrual_gate_crossed(now)

        if days_since is None:
            assert entries == []
        else:
            assert len(entries) == 1
            assert entries[0].accrual_start_date == date(2024, 3, 1)
            assert entries[0].days_since_gate == days_since


class TestPayoutDay:
    """Test fixed payout day."""

    @pytest.mark.asyncio
    async def test_not_payout_day(self, checks):
        result = await checks.check_fixed_payout_day(date(2024, 6, 6))

        assert result.is_payout_day is False
        assert result.investments == []
        checks.investment_repo.get_active_with_payment_date.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_payout_day_lists_accruing_investments(self, checks, make_investment):
        accruing = make_investment(id=1, payment_date=datetime(2024, 1, 1, tzinfo=UTC))
        too_new = make_investment(id=2, payment_date=datetime(2024, 5, 1, tzinfo=UTC))
        checks.investment_repo.get_active_with_payment_date.return_value = [accruing, too_new]

        result = await checks.check_fixed_payout_day(datetime(2024, 6, 7, 9, 0, tzinfo=UTC))

        assert result.is_payout_day is True
        assert result.investments == [accruing]
        assert result.to_dict()["investments"][0]["id"] == 1
