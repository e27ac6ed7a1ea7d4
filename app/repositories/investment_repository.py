"""
Investment repository.

Data access layer for Investment model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import InvestmentStatus
from app.models.investment import Investment
from app.repositories.base import BaseRepository


class InvestmentRepository(BaseRepository[Investment]):
    """Investment repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize investment repository."""
        super().__init__(Investment, session)

    async def get_active_with_payment_date(
        self, owner_id: int | None = None
    ) -> list[Investment]:
        """
        Get active investments that have an accrual clock.

        Args:
            owner_id: Optional owner filter

        Returns:
            List of active investments with payment_date set
        """
        stmt = (
            select(Investment)
            .where(Investment.status == InvestmentStatus.ACTIVE.value)
            .where(Investment.payment_date.is_not(None))
        )
        if owner_id is not None:
            stmt = stmt.where(Investment.owner_id == owner_id)

        result = await self.session.execute(stmt.order_by(Investment.id))
        return list(result.scalars().all())
