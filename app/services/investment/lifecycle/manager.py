"""
Investment lifecycle manager.

Handles submission, approval and total withdrawal. Access checks happen
in the calling service; this module enforces state rules and persists.
"""

from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ActorTier, InvestmentStatus, LiquidityClass
from app.models.investment import Investment
from app.repositories.investment_repository import InvestmentRepository
from app.services.investment.lifecycle.state_machine import ensure_transition
from app.services.rentability.resolver import RateResolver
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import ConflictError


def check_version(investment: Investment, expected_version: int | None) -> None:
    """
    Compare the client's version with the stored one.

    Raises:
        ConflictError: If the investment changed since the client read it
    """
    if expected_version is not None and investment.version != expected_version:
        raise ConflictError(
            f"Investment {investment.id} was modified "
            f"(version {investment.version}, expected {expected_version})"
        )


class InvestmentLifecycleManager:
    """Applies lifecycle transitions to investments."""

    def __init__(
        self, session: AsyncSession, rate_resolver: RateResolver | None = None
    ) -> None:
        """Initialize lifecycle manager."""
        self.session = session
        self.investment_repo = InvestmentRepository(session)
        self.rate_resolver = rate_resolver or RateResolver(session)

    async def submit(
        self,
        owner_id: int,
        amount: Decimal,
        commitment_period: int,
        liquidity: LiquidityClass,
        condition_ids: list[int] | None = None,
    ) -> Investment:
        """
        Create a pending investment.

        Args:
            owner_id: Investor profile ID
            amount: Invested amount (validated, > 0)
            commitment_period: Months (validated)
            liquidity: Liquidity class
            condition_ids: Special condition ids

        Returns:
            Created investment
        """
        try:
            investment = await self.investment_repo.create(
                owner_id=owner_id,
                amount=amount,
                commitment_period=commitment_period,
                liquidity_class=liquidity.value,
                condition_ids=condition_ids or None,
                status=InvestmentStatus.PENDING.value,
                renewal_count=0,
            )
            await self.session.commit()
            logger.info(
                f"Investment submitted: id={investment.id}, owner={owner_id}, "
                f"amount={amount}"
            )
            return investment

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to submit investment for owner {owner_id}: {e}")
            raise

    async def approve(
        self,
        investment: Investment,
        owner_tier: ActorTier,
        approver_id: int,
        receipt_ref: str,
        payment_date: datetime,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> Investment:
        """
        Activate a pending investment.

        Freezes the monthly rate when not set yet and starts the accrual
        clock at payment_date (which may be backdated).

        Args:
            investment: Pending investment
            owner_tier: Tier of the owner, used for rate resolution
            approver_id: Approving actor ID
            receipt_ref: Uploaded payment receipt reference
            payment_date: Payment date
            expected_version: Version the client last saw
            now: Approval timestamp (defaults to current UTC time)

        Returns:
            Activated investment

        Raises:
            ConflictError: If not pending or modified concurrently
        """
        investment_id = investment.id
        target = ensure_transition(investment, "approve")
        check_version(investment, expected_version)

        monthly_rate = investment.monthly_rate
        if monthly_rate is None:
            monthly_rate = await self.rate_resolver.resolve_rate(
                owner_tier,
                investment.commitment_period,
                investment.liquidity_class,
                investment.condition_ids,
            )

        try:
            investment.status = target.value
            investment.monthly_rate = monthly_rate
            investment.receipt_ref = receipt_ref
            investment.payment_date = payment_date
            investment.current_cycle_start_date = payment_date
            if investment.original_investment_date is None:
                investment.original_investment_date = payment_date
            investment.approved_by = approver_id
            investment.approved_at = now or utc_now()

            await self.investment_repo.save(investment)
            await self.session.commit()
            logger.info(
                f"Investment approved: id={investment.id}, rate={monthly_rate}, "
                f"payment_date={payment_date.date()}"
            )
            return investment

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to approve investment {investment_id}: {e}")
            raise

    async def withdraw(
        self,
        investment: Investment,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> Investment:
        """
        Withdraw an active investment in full. Irreversible.

        Raises:
            ConflictError: If not active or modified concurrently
        """
        investment_id = investment.id
        target = ensure_transition(investment, "withdraw")
        check_version(investment, expected_version)

        try:
            investment.status = target.value
            investment.withdrawn_at = now or utc_now()

            await self.investment_repo.save(investment)
            await self.session.commit()
            logger.info(f"Investment withdrawn: id={investment.id}")
            return investment

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to withdraw investment {investment_id}: {e}")
            raise
