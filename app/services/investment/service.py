"""
Investment service.

Public operations of the financial rules core. Every method returns a
ServiceResult envelope. Checks run in a fixed order: identity, input
validation, existence, access, state.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    ActorTier,
    NotificationEvent,
    WithdrawalAction,
    WithdrawalRequestStatus,
    WithdrawalType,
)
from app.models.investment import Investment
from app.models.profile import Profile
from app.models.withdrawal_request import WithdrawalRequest
from app.repositories.investment_renewal_repository import InvestmentRenewalRepository
from app.repositories.investment_repository import InvestmentRepository
from app.repositories.profile_repository import ProfileRepository
from app.services.base_service import (
    BaseService,
    ServiceResult,
    log_operation,
    service_envelope,
)
from app.services.hierarchy.resolver import HierarchyResolver
from app.services.investment.accrual import accrual_breakdown, period_dividends
from app.services.investment.checks import InvestmentCheckService, RenewalWindowEntry
from app.services.investment.lifecycle.manager import (
    InvestmentLifecycleManager,
    check_version,
)
from app.services.investment.lifecycle.state_machine import (
    ensure_transition,
    expiry_date,
    is_matured,
)
from app.services.investment.renewal import RenewalParams, RenewalProcessor
from app.services.investment.withdrawal import WithdrawalProcessor
from app.services.notification.service import NotificationService
from app.services.rentability.resolver import RateResolver
from app.utils.datetime_utils import to_date, utc_now
from app.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.validators.investment import (
    require,
    validate_amount,
    validate_commitment_period,
    validate_condition_ids,
    validate_datetime,
    validate_liquidity,
    validate_reason,
    validate_receipt_ref,
)


# Tiers allowed to approve and withdraw investments within their hierarchy
STAFF_TIERS = frozenset({
    ActorTier.ADMIN,
    ActorTier.DISTRIBUTOR,
    ActorTier.OFFICE,
    ActorTier.ADVISOR,
})


def _money(value: Decimal) -> str:
    """Fixed-point string (no exponent notation for zero)."""
    return f"{value:f}"


class InvestmentService(BaseService):
    """
    Investment service.

    Composes the hierarchy resolver, rate resolver, lifecycle manager,
    renewal processor and periodic checks behind one envelope-returning
    interface.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize investment service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.profile_repo = ProfileRepository(session)
        self.investment_repo = InvestmentRepository(session)
        self.renewal_repo = InvestmentRenewalRepository(session)
        self.hierarchy = HierarchyResolver(session)
        self.rate_resolver = RateResolver(session)
        self.lifecycle = InvestmentLifecycleManager(session, self.rate_resolver)
        self.renewals = RenewalProcessor(session, self.rate_resolver)
        self.withdrawals = WithdrawalProcessor(session, self.lifecycle)
        self.withdrawal_repo = self.withdrawals.request_repo
        self.checks = InvestmentCheckService(session)
        self.notifications = NotificationService(session)

    # ------------------------------------------------------------------
    # Access and rates
    # ------------------------------------------------------------------

    @service_envelope
    async def resolve_access(self, actor_id: int | None, owner_id: Any) -> dict:
        """
        Check whether the actor may access records of owner_id.

        Unknown actors or owners are denied, not reported as errors.
        """
        self._require_identity(actor_id)
        owner_id = self._parse_id(owner_id, "owner_id")
        allowed = await self.hierarchy.resolve_access(actor_id, owner_id)
        return {"actor_id": actor_id, "owner_id": owner_id, "allowed": allowed}

    @service_envelope
    async def resolve_rate(
        self,
        actor_id: int | None,
        tier: Any,
        commitment_period: Any,
        liquidity_class: Any,
        condition_ids: Any = None,
    ) -> dict:
        """Resolve a monthly rate (fallback to the configured default)."""
        await self._authenticate(actor_id)
        if tier is None:
            raise ValidationError("tier is required")
        tier = ActorTier.parse(tier)
        period = require(validate_commitment_period(commitment_period))
        liquidity = require(validate_liquidity(liquidity_class))
        conditions = require(validate_condition_ids(condition_ids))

        resolution = await self.rate_resolver.resolve(tier, period, liquidity, conditions)
        return {
            "tier": tier.value,
            "commitment_period": period,
            "liquidity_class": liquidity.value,
            "monthly_rate": str(resolution.rate),
            "source": resolution.source,
            "rate_id": resolution.rate_id,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @service_envelope
    @log_operation
    async def submit_investment(
        self,
        actor_id: int | None,
        owner_id: Any,
        amount: Any,
        commitment_period: Any,
        liquidity_class: Any,
        condition_ids: Any = None,
    ) -> dict:
        """Create a pending investment for an investor."""
        actor = await self._authenticate(actor_id)
        owner_id = self._parse_id(owner_id, "owner_id")
        amount = require(validate_amount(amount))
        period = require(validate_commitment_period(commitment_period))
        liquidity = require(validate_liquidity(liquidity_class))
        conditions = require(validate_condition_ids(condition_ids))

        owner = await self.profile_repo.get_by_id(owner_id)
        if owner is None:
            raise NotFoundError(f"Investor {owner_id} not found")
        if owner.tier != ActorTier.INVESTOR.value:
            raise ValidationError(f"Profile {owner_id} is not an investor")
        await self._authorize(actor, owner_id)

        investment = await self.lifecycle.submit(owner_id, amount, period, liquidity, conditions)

        chain = await self.hierarchy.resolve_owner_chain(owner_id)
        await self.notifications.notify(
            chain.manager_ids(),
            NotificationEvent.INVESTMENT_SUBMITTED,
            {"investment_id": investment.id, "owner_id": owner_id, "amount": str(amount)},
        )
        return investment.to_dict()

    @service_envelope
    @log_operation
    async def approve_investment(
        self,
        actor_id: int | None,
        investment_id: Any,
        receipt_ref: Any,
        payment_date: Any,
        expected_version: int | None = None,
    ) -> dict:
        """Approve a pending investment (pending -> active)."""
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")
        receipt_ref = require(validate_receipt_ref(receipt_ref))
        payment_date = require(validate_datetime(payment_date, "payment_date"))

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id, staff_only=True)
        owner_tier = await self._owner_tier(investment.owner_id)

        investment = await self.lifecycle.approve(
            investment,
            owner_tier=owner_tier,
            approver_id=actor.id,
            receipt_ref=receipt_ref,
            payment_date=payment_date,
            expected_version=expected_version,
        )

        await self.notifications.notify(
            investment.owner_id,
            NotificationEvent.INVESTMENT_APPROVED,
            {"investment_id": investment.id, "monthly_rate": str(investment.monthly_rate)},
        )
        return investment.to_dict()

    @service_envelope
    @log_operation
    async def request_withdrawal(
        self,
        actor_id: int | None,
        investment_id: Any,
        withdrawal_type: Any,
        amount: Any = None,
    ) -> dict:
        """
        Request a partial or total withdrawal of an active investment.

        The request reserves its amount until staff approve or reject it.
        """
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")
        if withdrawal_type is None:
            raise ValidationError("withdrawal_type is required")
        withdrawal_type = WithdrawalType.parse(withdrawal_type)
        if amount is not None:
            amount = require(validate_amount(amount))

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id)

        request = await self.withdrawals.request(
            investment, withdrawal_type, amount, requested_by=actor.id
        )

        chain = await self.hierarchy.resolve_owner_chain(investment.owner_id)
        await self.notifications.notify(
            chain.manager_ids(),
            NotificationEvent.WITHDRAWAL_REQUESTED,
            {
                "withdrawal_request_id": request.id,
                "investment_id": investment.id,
                "withdrawal_type": withdrawal_type.value,
                "amount": str(request.amount),
            },
        )
        return request.to_dict()

    @service_envelope
    @log_operation
    async def process_withdrawal(
        self,
        actor_id: int | None,
        request_id: Any,
        action: Any,
        reason: Any = None,
        expected_version: int | None = None,
    ) -> dict:
        """
        Approve or reject a pending withdrawal request (staff only).

        Approving a total request, or a partial one that leaves nothing
        available, withdraws the investment.
        """
        actor = await self._authenticate(actor_id)
        request_id = self._parse_id(request_id, "request_id")
        if action is None:
            raise ValidationError("action is required")
        action = WithdrawalAction.parse(action)
        reason = require(validate_reason(reason))

        request = await self.withdrawal_repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError(f"Withdrawal request {request_id} not found")
        investment = await self._load_investment(request.investment_id)
        await self._authorize(actor, investment.owner_id, staff_only=True)

        outcome = await self.withdrawals.process(
            request,
            investment,
            action,
            processed_by=actor.id,
            reason=reason,
            expected_version=expected_version,
        )
        await self._notify_withdrawal_decision(outcome.request, outcome.withdrawn)
        return {
            "request": outcome.request.to_dict(),
            "investment": outcome.investment.to_dict(),
            "withdrawn": outcome.withdrawn,
        }

    @service_envelope
    @log_operation
    async def withdraw_investment(
        self,
        actor_id: int | None,
        investment_id: Any,
        expected_version: int | None = None,
    ) -> dict:
        """
        Withdraw an active investment in full (active -> withdrawn).

        Approves the investment's pending total withdrawal request; without
        one there is nothing to process.
        """
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id, staff_only=True)
        ensure_transition(investment, "withdraw")
        check_version(investment, expected_version)

        pending = await self.withdrawal_repo.get_pending(investment.id, WithdrawalType.TOTAL)
        if not pending:
            raise ConflictError(
                f"Investment {investment.id} has no pending total withdrawal request"
            )

        outcome = await self.withdrawals.process(
            pending[0], investment, WithdrawalAction.APPROVE, processed_by=actor.id
        )
        await self._notify_withdrawal_decision(outcome.request, outcome.withdrawn)
        return outcome.investment.to_dict()

    @service_envelope
    async def withdrawal_requests(
        self, actor_id: int | None, investment_id: Any
    ) -> list[dict]:
        """Withdrawal requests of an investment, newest first."""
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id)

        requests = await self.withdrawal_repo.get_by_investment(investment.id)
        return [request.to_dict() for request in requests]

    @service_envelope
    @log_operation
    async def renew_investment(
        self,
        actor_id: int | None,
        investment_id: Any,
        action: Any,
        params: dict[str, Any] | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> ServiceResult:
        """
        Renew an active investment.

        A lost history record still returns success, with a warning.
        """
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")
        if action is None:
            raise ValidationError("action is required")
        renewal_params = RenewalParams.parse(action, params)

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id)
        owner_tier = await self._owner_tier(investment.owner_id)

        outcome = await self.renewals.renew(
            investment,
            renewal_params,
            owner_tier=owner_tier,
            renewed_by=actor.id,
            now=now or utc_now(),
            expected_version=expected_version,
        )

        chain = await self.hierarchy.resolve_owner_chain(investment.owner_id)
        await self.notifications.notify(
            [investment.owner_id, *chain.manager_ids()],
            NotificationEvent.INVESTMENT_RENEWED,
            {
                "investment_id": investment.id,
                "action": renewal_params.action.value,
                "new_investment_id": (
                    outcome.new_investment.id if outcome.new_investment else None
                ),
            },
        )

        data = {
            "investment": outcome.investment.to_dict(),
            "renewal_record": (
                outcome.renewal_record.to_dict() if outcome.renewal_record else None
            ),
            "new_investment": (
                outcome.new_investment.to_dict() if outcome.new_investment else None
            ),
        }
        return ServiceResult.ok(data, warning=outcome.warning)

    # ------------------------------------------------------------------
    # Accrual and history
    # ------------------------------------------------------------------

    @service_envelope
    async def accrued_dividends(
        self,
        actor_id: int | None,
        investment_id: Any,
        as_of: Any = None,
    ) -> dict:
        """Dividends accrued by an investment up to as_of (default today)."""
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")
        as_of = self._parse_as_of(as_of)

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id)

        breakdown = accrual_breakdown(investment, as_of)
        expiry = expiry_date(investment)
        return {
            "investment_id": investment.id,
            "as_of": to_date(as_of).isoformat(),
            "accrued_dividends": _money(breakdown.accrued) if breakdown else "0",
            "accrual_start_date": (
                breakdown.accrual_start_date.isoformat() if breakdown else None
            ),
            "elapsed_periods": breakdown.elapsed_periods if breakdown else 0,
            "gate_crossed": breakdown.gate_crossed if breakdown else False,
            "expiry_date": expiry.isoformat() if expiry else None,
            "matured": is_matured(investment, as_of),
        }

    @service_envelope
    async def period_dividends(
        self,
        actor_id: int | None,
        investment_id: Any,
        as_of: Any = None,
    ) -> dict:
        """Dividends attributed to the current month and year."""
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")
        as_of = self._parse_as_of(as_of)

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id)

        report = period_dividends(investment, as_of)
        return {
            "investment_id": investment.id,
            "as_of": to_date(as_of).isoformat(),
            "monthly_commission": _money(report.monthly_commission),
            "total_paid": _money(report.total_paid),
            "current_month": _money(report.current_month),
            "current_year": _money(report.current_year),
        }

    @service_envelope
    async def renewal_history(self, actor_id: int | None, investment_id: Any) -> list[dict]:
        """Renewal records of an investment, newest first."""
        actor = await self._authenticate(actor_id)
        investment_id = self._parse_id(investment_id, "investment_id")

        investment = await self._load_investment(investment_id)
        await self._authorize(actor, investment.owner_id)

        records = await self.renewal_repo.get_by_investment(investment.id)
        return [record.to_dict() for record in records]

    # ------------------------------------------------------------------
    # Periodic checks
    # ------------------------------------------------------------------

    @service_envelope
    async def check_renewal_window(
        self, actor_id: int | None, now: Any = None, owner_id: Any = None
    ) -> list[dict]:
        """
        Investments within the renewal window.

        With owner_id, only that owner's investments (access checked).
        Otherwise admins see every investment and other actors see the
        investments of every owner they can access.
        """
        actor = await self._authenticate(actor_id)
        now = self._parse_as_of(now, "now")

        if owner_id is not None:
            owner_id = self._parse_id(owner_id, "owner_id")
            await self._authorize(actor, owner_id)
            entries = await self.checks.check_renewal_window(now, owner_id=owner_id)
        elif actor.is_admin:
            entries = await self.checks.check_renewal_window(now)
        else:
            entries = await self._visible_entries(
                actor, await self.checks.check_renewal_window(now)
            )
        return [entry.to_dict() for entry in entries]

    @service_envelope
    async def check_accrual_gate_crossed(
        self, actor_id: int | None, now: Any = None
    ) -> list[dict]:
        """Investments whose D+60 gate fell within the look-back window (admin only)."""
        actor = await self._authenticate(actor_id)
        now = self._parse_as_of(now, "now")
        self._require_admin(actor)

        entries = await self.checks.check_accrual_gate_crossed(now)
        return [entry.to_dict() for entry in entries]

    @service_envelope
    async def check_fixed_payout_day(
        self, actor_id: int | None, now: Any = None
    ) -> dict:
        """Payout day flag and eligible investments (admin only)."""
        actor = await self._authenticate(actor_id)
        now = self._parse_as_of(now, "now")
        self._require_admin(actor)

        result = await self.checks.check_fixed_payout_day(now)
        return result.to_dict()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_identity(actor_id: int | None) -> None:
        if actor_id is None or isinstance(actor_id, bool) or not isinstance(actor_id, int):
            raise AuthenticationError("Authentication required")

    async def _authenticate(self, actor_id: int | None) -> Profile:
        """Load the verified actor."""
        self._require_identity(actor_id)
        actor = await self.profile_repo.get_by_id(actor_id)
        if actor is None:
            raise AuthenticationError("Unknown actor")
        return actor

    async def _authorize(
        self, actor: Profile, owner_id: int, staff_only: bool = False
    ) -> None:
        """Check hierarchy access (and staff tier when required)."""
        if staff_only and ActorTier.parse(actor.tier) not in STAFF_TIERS:
            raise AuthorizationError("Only managers can perform this operation")
        if not await self.hierarchy.can_access(actor, owner_id):
            raise AuthorizationError("Access denied")

    @staticmethod
    def _require_admin(actor: Profile) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")

    async def _visible_entries(
        self, actor: Profile, entries: list[RenewalWindowEntry]
    ) -> list[RenewalWindowEntry]:
        """Keep entries whose owner the actor can access (one check per owner)."""
        allowed: dict[int, bool] = {}
        visible = []
        for entry in entries:
            owner_id = entry.investment.owner_id
            if owner_id not in allowed:
                allowed[owner_id] = await self.hierarchy.can_access(actor, owner_id)
            if allowed[owner_id]:
                visible.append(entry)
        return visible

    async def _notify_withdrawal_decision(
        self, request: WithdrawalRequest, withdrawn: bool
    ) -> None:
        """Tell the owner (and managers, on withdrawal) about a decision."""
        payload = {
            "withdrawal_request_id": request.id,
            "investment_id": request.investment_id,
            "amount": str(request.amount),
        }
        if withdrawn:
            chain = await self.hierarchy.resolve_owner_chain(request.owner_id)
            await self.notifications.notify(
                [request.owner_id, *chain.manager_ids()],
                NotificationEvent.INVESTMENT_WITHDRAWN,
                payload,
            )
        elif request.status == WithdrawalRequestStatus.APPROVED.value:
            await self.notifications.notify(
                request.owner_id, NotificationEvent.WITHDRAWAL_APPROVED, payload
            )
        else:
            await self.notifications.notify(
                request.owner_id,
                NotificationEvent.WITHDRAWAL_REJECTED,
                {**payload, "reason": request.rejection_reason},
            )

    async def _load_investment(self, investment_id: int) -> Investment:
        investment = await self.investment_repo.get_by_id(investment_id)
        if investment is None:
            raise NotFoundError(f"Investment {investment_id} not found")
        return investment

    async def _owner_tier(self, owner_id: int) -> ActorTier:
        owner = await self.profile_repo.get_by_id(owner_id)
        if owner is None:
            raise NotFoundError(f"Owner {owner_id} not found")
        return ActorTier.parse(owner.tier)

    @staticmethod
    def _parse_id(value: Any, field: str) -> int:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be an integer") from None
        if isinstance(value, bool) or parsed <= 0:
            raise ValidationError(f"{field} must be a positive integer")
        return parsed

    @staticmethod
    def _parse_as_of(value: Any, field: str = "as_of") -> datetime:
        if value is None:
            return utc_now()
        return require(validate_datetime(value, field))
