"""
Withdrawal request processor.

An investor (or a manager on their behalf) requests a partial or total
withdrawal. The requested amount is reserved against the investment's
available amount (its amount minus pending and approved requests) until
staff decide. Approving a total request, or a partial one that leaves
nothing available, moves the investment to withdrawn in the same commit;
other pending requests of that investment are rejected as superseded.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WithdrawalAction, WithdrawalRequestStatus, WithdrawalType
from app.models.investment import Investment
from app.models.withdrawal_request import WithdrawalRequest
from app.repositories.withdrawal_request_repository import WithdrawalRequestRepository
from app.services.investment.lifecycle.manager import InvestmentLifecycleManager
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import ConflictError, ValidationError


# Requests that hold part of the investment's amount
RESERVING_STATUSES = (WithdrawalRequestStatus.PENDING, WithdrawalRequestStatus.APPROVED)

SUPERSEDED_REASON = "Superseded: investment withdrawn"


@dataclass
class WithdrawalOutcome:
    """Result of a withdrawal decision."""

    request: WithdrawalRequest
    investment: Investment
    withdrawn: bool = False


class WithdrawalProcessor:
    """Creates and decides withdrawal requests."""

    def __init__(
        self,
        session: AsyncSession,
        lifecycle: InvestmentLifecycleManager | None = None,
    ) -> None:
        """Initialize withdrawal processor."""
        self.session = session
        self.request_repo = WithdrawalRequestRepository(session)
        self.lifecycle = lifecycle or InvestmentLifecycleManager(session)

    async def available_amount(self, investment: Investment) -> Decimal:
        """Investment amount not yet reserved by pending or approved requests."""
        reserved = await self.request_repo.sum_amount(investment.id, RESERVING_STATUSES)
        return max(Decimal(investment.amount) - reserved, Decimal("0"))

    async def request(
        self,
        investment: Investment,
        withdrawal_type: WithdrawalType,
        amount: Decimal | None,
        requested_by: int,
    ) -> WithdrawalRequest:
        """
        Create a pending withdrawal request.

        A total request always covers the whole available amount; an
        explicit amount must match it. A partial request needs an amount
        no larger than what is available.

        Raises:
            ConflictError: If the investment is not active or nothing is
                left to withdraw
            ValidationError: If the amount does not fit the available amount
        """
        if not investment.is_active:
            raise ConflictError(
                f"Investment {investment.id} is {investment.status}, "
                "only active investments can be withdrawn"
            )

        available = await self.available_amount(investment)
        if available <= 0:
            raise ConflictError(
                f"Investment {investment.id} has no amount left to withdraw"
            )

        if withdrawal_type is WithdrawalType.TOTAL:
            if amount is not None and amount != available:
                raise ValidationError(
                    f"A total withdrawal covers the available amount {available:f}"
                )
            amount = available
        elif amount is None:
            raise ValidationError("amount is required for a partial withdrawal")
        elif amount > available:
            raise ValidationError(
                f"Requested amount {amount:f} exceeds the available amount {available:f}"
            )

        investment_id = investment.id
        try:
            request = await self.request_repo.create(
                investment_id=investment_id,
                owner_id=investment.owner_id,
                requested_by=requested_by,
                withdrawal_type=withdrawal_type.value,
                amount=amount,
                status=WithdrawalRequestStatus.PENDING.value,
            )
            await self.session.commit()
            logger.info(
                f"Withdrawal requested: id={request.id}, investment={investment_id}, "
                f"type={withdrawal_type.value}, amount={amount}"
            )
            return request

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to request withdrawal for investment {investment_id}: {e}")
            raise

    async def process(
        self,
        request: WithdrawalRequest,
        investment: Investment,
        action: WithdrawalAction,
        processed_by: int,
        reason: str | None = None,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> WithdrawalOutcome:
        """
        Approve or reject a pending request.

        Args:
            request: Pending request
            investment: The request's investment
            action: approve or reject
            processed_by: Deciding staff profile ID
            reason: Optional rejection reason
            expected_version: Request version the client last saw
            now: Decision timestamp (defaults to current UTC time)

        Returns:
            Outcome with the request, the investment and whether the
            investment was withdrawn

        Raises:
            ConflictError: If the request was already decided, changed
                concurrently, or the investment is no longer active
        """
        if not request.is_pending:
            raise ConflictError(f"Withdrawal request {request.id} is already {request.status}")
        if expected_version is not None and request.version != expected_version:
            raise ConflictError(
                f"Withdrawal request {request.id} was modified "
                f"(version {request.version}, expected {expected_version})"
            )

        now = now or utc_now()
        request_id = request.id

        if action is WithdrawalAction.REJECT:
            try:
                self._decide(request, WithdrawalRequestStatus.REJECTED, processed_by, now, reason)
                await self.request_repo.save(request)
                await self.session.commit()
                logger.info(f"Withdrawal request rejected: id={request_id}")
                return WithdrawalOutcome(request=request, investment=investment)

            except Exception as e:
                await self.session.rollback()
                logger.error(f"Failed to reject withdrawal request {request_id}: {e}")
                raise

        if not investment.is_active:
            raise ConflictError(
                f"Investment {investment.id} is {investment.status}, "
                "the withdrawal can no longer be approved"
            )

        approved = await self.request_repo.sum_amount(
            investment.id, (WithdrawalRequestStatus.APPROVED,)
        )
        exhausts = (
            request.withdrawal_type == WithdrawalType.TOTAL.value
            or approved + Decimal(request.amount) >= Decimal(investment.amount)
        )

        try:
            self._decide(request, WithdrawalRequestStatus.APPROVED, processed_by, now)
            await self.request_repo.save(request)

            if not exhausts:
                await self.session.commit()
                logger.info(f"Withdrawal request approved: id={request_id} (partial)")
                return WithdrawalOutcome(request=request, investment=investment)

            for other in await self.request_repo.get_pending(investment.id):
                if other.id == request_id:
                    continue
                self._decide(
                    other, WithdrawalRequestStatus.REJECTED, processed_by, now,
                    SUPERSEDED_REASON,
                )
                await self.request_repo.save(other)

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to approve withdrawal request {request_id}: {e}")
            raise

        # Commits the request decisions together with the status change
        investment = await self.lifecycle.withdraw(investment, now=now)
        logger.info(
            f"Withdrawal request approved: id={request_id}, "
            f"investment {investment.id} withdrawn"
        )
        return WithdrawalOutcome(request=request, investment=investment, withdrawn=True)

    @staticmethod
    def _decide(
        request: WithdrawalRequest,
        status: WithdrawalRequestStatus,
        processed_by: int,
        now: datetime,
        reason: str | None = None,
    ) -> None:
        request.status = status.value
        request.processed_by = processed_by
        request.processed_at = now
        request.rejection_reason = reason
