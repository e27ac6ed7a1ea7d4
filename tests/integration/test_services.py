"""Integration tests for InvestmentService (database mocked at the session)."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.models import Investment, NotificationOutbox
from app.services.investment.renewal import HISTORY_WARNING
from app.services.investment.service import InvestmentService


@pytest.fixture
def service(mock_session, org):
    return InvestmentService(mock_session)


@pytest.fixture
def pending(make_investment):
    return make_investment(
        id=20,
        status="pending",
        monthly_rate=None,
        payment_date=None,
        receipt_ref=None,
        original_investment_date=None,
        current_cycle_start_date=None,
    )


@pytest.fixture
def active(make_investment):
    return make_investment(id=21)


def _queued(mock_session, event=None):
    """Outbox rows added to the session."""
    rows = [
        call.args[0]
        for call in mock_session.add.call_args_list
        if isinstance(call.args[0], NotificationOutbox)
    ]
    if event is not None:
        rows = [row for row in rows if row.event == event]
    return rows


class TestIdentityAndAccess:
    """Identity is checked first, then access."""

    @pytest.mark.asyncio
    async def test_missing_actor(self, service):
        result = await service.resolve_access(None, 4)
        assert result.error_code == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_identity_before_input_validation(self, service):
        result = await service.approve_investment(None, "abc", None, None)
        assert result.error_code == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_unknown_actor_on_mutation(self, service, active):
        result = await service.withdraw_investment(999, active.id)
        assert result.error_code == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_distributor_two_hop_access(self, service):
        result = await service.resolve_access(1, 4)
        assert result.success
        assert result.data["allowed"] is True

    @pytest.mark.asyncio
    async def test_unrelated_access_is_false_not_error(self, service):
        result = await service.resolve_access(5, 4)
        assert result.success
        assert result.data["allowed"] is False


class TestResolveRate:
    """Rate lookups through the facade."""

    @pytest.mark.asyncio
    async def test_default_rate(self, service):
        result = await service.resolve_rate(4, "investor", "12", "Mensal")

        assert result.success
        assert result.data["monthly_rate"] == "0.02"
        assert result.data["source"] == "default"
        assert result.data["liquidity_class"] == "monthly"

    @pytest.mark.asyncio
    async def test_missing_tier(self, service):
        result = await service.resolve_rate(4, None, 12, "monthly")
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_invalid_period(self, service):
        result = await service.resolve_rate(4, "investor", 18, "monthly")
        assert result.error_code == "VALIDATION_ERROR"


class TestSubmitAndApprove:
    """pending -> active through the facade."""

    @pytest.mark.asyncio
    async def test_advisor_submits_for_investor(self, service, mock_session):
        result = await service.submit_investment(3, 4, "10000", 12, "monthly")

        assert result.success
        assert result.data["status"] == "pending"
        assert result.data["amount"] == "10000"
        queued = _queued(mock_session, "investment_submitted")
        assert sorted(row.actor_id for row in queued) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_investor_submits_for_self(self, service):
        result = await service.submit_investment(4, 4, 500, 6, "semestral")
        assert result.success

    @pytest.mark.asyncio
    async def test_unrelated_advisor_cannot_submit(self, service):
        result = await service.submit_investment(7, 4, "10000", 12, "monthly")
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_owner_must_be_investor(self, service):
        result = await service.submit_investment(2, 3, "10000", 12, "monthly")
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_owner(self, service):
        result = await service.submit_investment(9, 999, "10000", 12, "monthly")
        assert result.error_code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invalid_amount(self, service):
        result = await service.submit_investment(4, 4, "-5", 12, "monthly")
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_advisor_approves(self, service, pending, mock_session):
        result = await service.approve_investment(
            3, pending.id, "receipts/20.pdf", "2024-01-01"
        )

        assert result.success
        assert result.data["status"] == "active"
        assert result.data["monthly_rate"] == "0.02"
        assert result.data["payment_date"] == "2024-01-01T00:00:00+00:00"
        assert [row.actor_id for row in _queued(mock_session, "investment_approved")] == [4]

    @pytest.mark.asyncio
    async def test_investor_cannot_approve(self, service, pending):
        result = await service.approve_investment(4, pending.id, "r.pdf", "2024-01-01")

        assert result.error_code == "FORBIDDEN"
        assert pending.status == "pending"

    @pytest.mark.asyncio
    async def test_approve_active_conflicts(self, service, active):
        result = await service.approve_investment(3, active.id, "r.pdf", "2024-01-01")
        assert result.error_code == "CONFLICT"

    @pytest.mark.asyncio
    async def test_approve_missing_investment(self, service):
        result = await service.approve_investment(3, 404, "r.pdf", "2024-01-01")
        assert result.error_code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_approve_requires_receipt(self, service, pending):
        result = await service.approve_investment(3, pending.id, "", "2024-01-01")
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_notification_failure_is_not_fatal(self, service, pending, mock_session):
        mock_session.begin_nested.side_effect = RuntimeError("outbox unavailable")

        result = await service.approve_investment(3, pending.id, "r.pdf", "2024-01-01")

        assert result.success
        assert pending.status == "active"

    @pytest.mark.asyncio
    async def test_braces_in_rejected_input(self, service):
        result = await service.submit_investment(4, 4, "10000", 12, "{x}")

        assert result.error_code == "VALIDATION_ERROR"
        assert "{x}" in result.error

    @pytest.mark.asyncio
    async def test_braces_in_notification_failure(self, service, pending, mock_session):
        mock_session.begin_nested.side_effect = RuntimeError("outbox {unavailable}")

        result = await service.approve_investment(3, pending.id, "r.pdf", "2024-01-01")

        assert result.success
        assert pending.status == "active"


class TestWithdrawalRequests:
    """Partial and total withdrawal requests through the facade."""

    @pytest.mark.asyncio
    async def test_investor_requests_total(self, service, active, mock_session):
        result = await service.request_withdrawal(4, active.id, "total")

        assert result.success
        assert result.data["status"] == "pending"
        assert result.data["withdrawal_type"] == "total"
        assert result.data["amount"] == "10000"
        assert result.data["requested_by"] == 4
        assert active.status == "active"
        queued = _queued(mock_session, "withdrawal_requested")
        assert sorted(row.actor_id for row in queued) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_advisor_requests_partial(self, service, active):
        result = await service.request_withdrawal(3, active.id, "partial", "2500")

        assert result.success
        assert result.data["amount"] == "2500"
        assert result.data["owner_id"] == 4

    @pytest.mark.asyncio
    async def test_partial_over_investment_amount(self, service, active):
        result = await service.request_withdrawal(4, active.id, "partial", "12000")
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_type(self, service, active):
        result = await service.request_withdrawal(4, active.id, "some")
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unrelated_actor(self, service, active):
        result = await service.request_withdrawal(8, active.id, "total")
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_pending_investment_conflicts(self, service, pending):
        result = await service.request_withdrawal(4, pending.id, "total")
        assert result.error_code == "CONFLICT"

    @pytest.mark.asyncio
    async def test_advisor_rejects(self, service, active, make_withdrawal, mock_session):
        request = make_withdrawal(investment_id=active.id)

        result = await service.process_withdrawal(3, request.id, "reject", "  No bank details ")

        assert result.success
        assert result.data["withdrawn"] is False
        assert result.data["request"]["status"] == "rejected"
        assert result.data["request"]["rejection_reason"] == "No bank details"
        assert active.status == "active"
        queued = _queued(mock_session, "withdrawal_rejected")
        assert [row.actor_id for row in queued] == [4]

    @pytest.mark.asyncio
    async def test_partial_approval(self, service, active, make_withdrawal, mock_session):
        request = make_withdrawal(
            investment_id=active.id, withdrawal_type="partial", amount=Decimal("2000")
        )

        result = await service.process_withdrawal(2, request.id, "approve")

        assert result.success
        assert result.data["withdrawn"] is False
        assert result.data["request"]["status"] == "approved"
        assert result.data["investment"]["status"] == "active"
        assert [row.actor_id for row in _queued(mock_session, "withdrawal_approved")] == [4]

    @pytest.mark.asyncio
    async def test_total_approval_withdraws(self, service, active, make_withdrawal):
        request = make_withdrawal(investment_id=active.id)

        result = await service.process_withdrawal(2, request.id, "approve", expected_version=1)

        assert result.success
        assert result.data["withdrawn"] is True
        assert result.data["investment"]["status"] == "withdrawn"

    @pytest.mark.asyncio
    async def test_investor_cannot_process(self, service, active, make_withdrawal):
        request = make_withdrawal(investment_id=active.id)

        result = await service.process_withdrawal(4, request.id, "approve")

        assert result.error_code == "FORBIDDEN"
        assert request.status == "pending"

    @pytest.mark.asyncio
    async def test_unknown_request(self, service):
        result = await service.process_withdrawal(2, 404, "approve")
        assert result.error_code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unknown_action(self, service, active, make_withdrawal):
        request = make_withdrawal(investment_id=active.id)

        result = await service.process_withdrawal(2, request.id, "{maybe}")

        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_decided_request_conflicts(self, service, active, make_withdrawal):
        request = make_withdrawal(investment_id=active.id, status="rejected")

        result = await service.process_withdrawal(2, request.id, "approve")

        assert result.error_code == "CONFLICT"

    @pytest.mark.asyncio
    async def test_list_requests(self, service, active):
        result = await service.withdrawal_requests(4, active.id)

        assert result.success
        assert result.data == []


class TestWithdraw:
    """active -> withdrawn through the facade."""

    @pytest.fixture
    def total_request(self, service, active, make_withdrawal):
        request = make_withdrawal(investment_id=active.id)
        service.withdrawal_repo.get_pending = AsyncMock(return_value=[request])
        return request

    @pytest.mark.asyncio
    async def test_office_withdraws(self, service, active, total_request, mock_session):
        result = await service.withdraw_investment(2, active.id, expected_version=1)

        assert result.success
        assert result.data["status"] == "withdrawn"
        assert total_request.status == "approved"
        assert total_request.processed_by == 2
        queued = _queued(mock_session, "investment_withdrawn")
        assert sorted(row.actor_id for row in queued) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_without_total_request(self, service, active):
        result = await service.withdraw_investment(2, active.id)

        assert result.error_code == "CONFLICT"
        assert "no pending total withdrawal request" in result.error
        assert active.status == "active"

    @pytest.mark.asyncio
    async def test_second_withdraw_conflicts(self, service, active, total_request):
        await service.withdraw_investment(2, active.id)
        result = await service.withdraw_investment(2, active.id)
        assert result.error_code == "CONFLICT"

    @pytest.mark.asyncio
    async def test_stale_version(self, service, active, total_request):
        result = await service.withdraw_investment(2, active.id, expected_version=3)

        assert result.error_code == "CONFLICT"
        assert active.status == "active"
        assert total_request.status == "pending"

    @pytest.mark.asyncio
    async def test_investor_cannot_withdraw(self, service, active, total_request):
        result = await service.withdraw_investment(4, active.id)
        assert result.error_code == "FORBIDDEN"


class TestRenew:
    """Renewal through the facade."""

    NOW = datetime(2023, 12, 20, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_new_rules_without_terms(self, service, active):
        result = await service.renew_investment(4, active.id, "renewWithNewRules", {})

        assert result.error_code == "VALIDATION_ERROR"
        assert active.renewal_count == 0
        assert active.payment_date == datetime(2024, 1, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_suggest_increase(self, service, active, store):
        result = await service.renew_investment(
            4, active.id, "suggestIncrease", {"additionalAmount": 5000}, now=self.NOW
        )

        assert result.success
        assert result.warning is None
        child = result.data["new_investment"]
        assert child["status"] == "pending"
        assert child["amount"] == "5000"
        assert child["parent_investment_id"] == active.id
        assert store[(Investment, child["id"])].status == "pending"
        assert result.data["investment"]["renewal_count"] == 1
        assert result.data["investment"]["current_cycle_start_date"] == self.NOW.isoformat()
        assert result.data["renewal_record"]["additional_investment_id"] == child["id"]

    @pytest.mark.asyncio
    async def test_history_failure_returns_warning(self, service, active):
        service.renewals.renewal_repo.create = AsyncMock(side_effect=RuntimeError("boom"))

        result = await service.renew_investment(4, active.id, "renew", now=self.NOW)

        assert result.success
        assert result.warning == HISTORY_WARNING
        assert result.data["renewal_record"] is None
        assert active.renewal_count == 1

    @pytest.mark.asyncio
    async def test_braces_in_history_failure(self, service, active):
        service.renewals.renewal_repo.create = AsyncMock(
            side_effect=RuntimeError("write failed {detail}")
        )

        result = await service.renew_investment(4, active.id, "renew", now=self.NOW)

        assert result.success
        assert result.warning == HISTORY_WARNING
        assert active.renewal_count == 1

    @pytest.mark.asyncio
    async def test_missing_action(self, service, active):
        result = await service.renew_investment(4, active.id, None)
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_braces_in_unknown_action(self, service, active):
        result = await service.renew_investment(4, active.id, "{boom}")

        assert result.error_code == "VALIDATION_ERROR"
        assert active.renewal_count == 0

    @pytest.mark.asyncio
    async def test_unrelated_actor(self, service, active):
        result = await service.renew_investment(8, active.id, "renew")

        assert result.error_code == "FORBIDDEN"
        assert active.renewal_count == 0


class TestDividends:
    """Accrual reads through the facade."""

    @pytest.mark.asyncio
    async def test_one_month_after_gate(self, service, active):
        result = await service.accrued_dividends(4, active.id, "2024-04-01")

        assert result.success
        assert result.data["accrued_dividends"] == "200.00000000"
        assert result.data["accrual_start_date"] == "2024-03-01"
        assert result.data["elapsed_periods"] == 1

    @pytest.mark.asyncio
    async def test_zero_before_gate(self, service, active):
        result = await service.accrued_dividends(4, active.id, "2024-02-15")

        assert result.data["accrued_dividends"] == "0.00000000"
        assert result.data["gate_crossed"] is False

    @pytest.mark.asyncio
    async def test_pending_accrues_nothing(self, service, pending):
        result = await service.accrued_dividends(4, pending.id, "2024-04-01")

        assert result.data["accrued_dividends"] == "0"
        assert result.data["accrual_start_date"] is None

    @pytest.mark.asyncio
    async def test_period_dividends(self, service, active):
        result = await service.period_dividends(3, active.id, "2024-06-15")

        assert result.success
        assert result.data["total_paid"] == "600.00000000"

    @pytest.mark.asyncio
    async def test_unrelated_actor_denied(self, service, active):
        result = await service.accrued_dividends(6, active.id)
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_renewal_history_empty(self, service, active):
        result = await service.renewal_history(4, active.id)
        assert result.success
        assert result.data == []


class TestChecks:
    """Periodic checks through the facade."""

    @pytest.mark.asyncio
    async def test_admin_renewal_window(self, service, make_investment, mock_session):
        expiring = make_investment(id=30, payment_date=datetime(2023, 1, 1, tzinfo=UTC))
        mock_session.execute.return_value.scalars.return_value.all.return_value = [expiring]

        result = await service.check_renewal_window(9, "2023-12-10")

        assert result.success
        assert [entry["investment"]["id"] for entry in result.data] == [30]

    @pytest.fixture
    def expiring(self, make_investment, mock_session):
        entries = [
            make_investment(id=30, owner_id=4, payment_date=datetime(2023, 1, 1, tzinfo=UTC)),
            make_investment(id=31, owner_id=8, payment_date=datetime(2023, 1, 1, tzinfo=UTC)),
            make_investment(id=32, owner_id=11, payment_date=datetime(2023, 1, 1, tzinfo=UTC)),
        ]
        mock_session.execute.return_value.scalars.return_value.all.return_value = entries
        return entries

    @pytest.mark.asyncio
    async def test_office_sees_its_owners(self, service, expiring):
        result = await service.check_renewal_window(2, "2023-12-10")

        assert result.success
        assert [entry["investment"]["id"] for entry in result.data] == [30, 32]

    @pytest.mark.asyncio
    async def test_advisor_sees_its_investors(self, service, expiring):
        result = await service.check_renewal_window(3, "2023-12-10")
        assert [entry["investment"]["id"] for entry in result.data] == [30]

    @pytest.mark.asyncio
    async def test_investor_sees_own(self, service, expiring):
        result = await service.check_renewal_window(8, "2023-12-10")
        assert [entry["investment"]["id"] for entry in result.data] == [31]

    @pytest.mark.asyncio
    async def test_owner_filter_requires_access(self, service, expiring):
        result = await service.check_renewal_window(3, "2023-12-10", owner_id=8)
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_owner_filter(self, service, make_investment, mock_session):
        mine = make_investment(id=30, owner_id=4, payment_date=datetime(2023, 1, 1, tzinfo=UTC))
        mock_session.execute.return_value.scalars.return_value.all.return_value = [mine]

        result = await service.check_renewal_window(3, "2023-12-10", owner_id=4)

        assert result.success
        assert [entry["investment"]["id"] for entry in result.data] == [30]

    @pytest.mark.asyncio
    async def test_accrual_gate_admin_only(self, service):
        result = await service.check_accrual_gate_crossed(3, "2024-03-01")
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_payout_day_off_day(self, service):
        result = await service.check_fixed_payout_day(9, "2024-06-06")

        assert result.success
        assert result.data == {"is_payout_day": False, "investments": []}

    @pytest.mark.asyncio
    async def test_bad_now(self, service):
        result = await service.check_fixed_payout_day(9, "yesterday")
        assert result.error_code == "VALIDATION_ERROR"


class TestInternalErrors:
    """Unexpected failures become a generic internal error."""

    @pytest.mark.asyncio
    async def test_database_failure(self, service, mock_session):
        mock_session.get.side_effect = RuntimeError("connection refused")

        result = await service.withdraw_investment(2, 21)

        assert result.success is False
        assert result.error_code == "INTERNAL_ERROR"
        assert "connection refused" not in result.error
