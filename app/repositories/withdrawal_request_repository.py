"""
Withdrawal request repository.

Data access layer for WithdrawalRequest model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WithdrawalRequestStatus, WithdrawalType
from app.models.withdrawal_request import WithdrawalRequest
from app.repositories.base import BaseRepository


class WithdrawalRequestRepository(BaseRepository[WithdrawalRequest]):
    """Withdrawal request repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal request repository."""
        super().__init__(WithdrawalRequest, session)

    async def get_by_investment(
        self, investment_id: int
    ) -> list[WithdrawalRequest]:
        """
        Get withdrawal requests of an investment, newest first.

        Args:
            investment_id: Investment ID

        Returns:
            List of requests
        """
        stmt = (
            select(WithdrawalRequest)
            .where(WithdrawalRequest.investment_id == investment_id)
            .order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_pending(
        self,
        investment_id: int,
        withdrawal_type: WithdrawalType | None = None,
    ) -> list[WithdrawalRequest]:
        """
        Get pending requests of an investment, oldest first.

        Args:
            investment_id: Investment ID
            withdrawal_type: Optional type filter

        Returns:
            List of pending requests
        """
        stmt = (
            select(WithdrawalRequest)
            .where(WithdrawalRequest.investment_id == investment_id)
            .where(WithdrawalRequest.status == WithdrawalRequestStatus.PENDING.value)
        )
        if withdrawal_type is not None:
            stmt = stmt.where(WithdrawalRequest.withdrawal_type == withdrawal_type.value)

        result = await self.session.execute(stmt.order_by(WithdrawalRequest.id))
        return list(result.scalars().all())

    async def sum_amount(
        self, investment_id: int, statuses: tuple[WithdrawalRequestStatus, ...]
    ) -> Decimal:
        """
        Total amount of an investment's requests in the given states.

        Args:
            investment_id: Investment ID
            statuses: Request states to include

        Returns:
            Sum of amounts (0 when there are none)
        """
        stmt = (
            select(func.coalesce(func.sum(WithdrawalRequest.amount), 0))
            .where(WithdrawalRequest.investment_id == investment_id)
            .where(WithdrawalRequest.status.in_([status.value for status in statuses]))
        )
        result = await self.session.execute(stmt)
        return Decimal(result.scalar() or 0)
