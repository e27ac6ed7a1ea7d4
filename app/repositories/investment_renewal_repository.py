"""
Investment renewal repository.

Append-only access to the renewal history.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.investment_renewal import InvestmentRenewal
from app.repositories.base import BaseRepository


class InvestmentRenewalRepository(BaseRepository[InvestmentRenewal]):
    """Renewal history repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize renewal repository."""
        super().__init__(InvestmentRenewal, session)

    async def get_by_investment(
        self, investment_id: int
    ) -> list[InvestmentRenewal]:
        """
        Get renewal history of an investment, newest first.

        Args:
            investment_id: Investment ID

        Returns:
            List of renewal records
        """
        stmt = (
            select(InvestmentRenewal)
            .where(InvestmentRenewal.investment_id == investment_id)
            .order_by(InvestmentRenewal.created_at.desc(), InvestmentRenewal.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_renewal_number(
        self, investment_id: int, renewal_number: int
    ) -> InvestmentRenewal | None:
        """
        Get the record written for a given renewal.

        Args:
            investment_id: Investment ID
            renewal_number: renewal_count value after the renewal

        Returns:
            Renewal record or None
        """
        return await self.get_by(
            investment_id=investment_id, renewal_number=renewal_number
        )
