"""
Rentability rate repository.

Read-only lookups against the rate table.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ActorTier, LiquidityClass
from app.models.rentability_rate import RentabilityRate
from app.repositories.base import BaseRepository


class RentabilityRateRepository(BaseRepository[RentabilityRate]):
    """Rate table repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize rate repository."""
        super().__init__(RentabilityRate, session)

    async def get_condition_candidates(
        self,
        tier: ActorTier,
        commitment_period: int,
        liquidity: LiquidityClass,
    ) -> list[RentabilityRate]:
        """
        Get active condition-scoped rows for a period/liquidity pair.

        Rows scoped to the given tier or to no tier are returned, in
        insertion order.

        Args:
            tier: Actor tier
            commitment_period: Commitment period in months
            liquidity: Liquidity class

        Returns:
            List of rate rows carrying condition ids
        """
        stmt = (
            select(RentabilityRate)
            .where(RentabilityRate.is_active.is_(True))
            .where(RentabilityRate.commitment_period == commitment_period)
            .where(RentabilityRate.liquidity_class == liquidity.value)
            .where(RentabilityRate.condition_ids.is_not(None))
            .where(
                (RentabilityRate.tier == tier.value) | RentabilityRate.tier.is_(None)
            )
            .order_by(RentabilityRate.id)
        )
        result = await self.session.execute(stmt)
        return [row for row in result.scalars().all() if row.condition_ids]

    async def get_plain(
        self,
        tier: ActorTier,
        commitment_period: int,
        liquidity: LiquidityClass,
    ) -> RentabilityRate | None:
        """
        Get the unconditional row for (tier, period, liquidity).

        Returns:
            Rate row or None
        """
        stmt = (
            select(RentabilityRate)
            .where(RentabilityRate.is_active.is_(True))
            .where(RentabilityRate.tier == tier.value)
            .where(RentabilityRate.commitment_period == commitment_period)
            .where(RentabilityRate.liquidity_class == liquidity.value)
            .order_by(RentabilityRate.id)
        )
        result = await self.session.execute(stmt)
        for row in result.scalars().all():
            if not row.condition_ids:
                return row
        return None

    async def get_fixed(self, tier: ActorTier) -> RentabilityRate | None:
        """
        Get the tier-wide fixed row (no period, no liquidity).

        Returns:
            Rate row or None
        """
        stmt = (
            select(RentabilityRate)
            .where(RentabilityRate.is_active.is_(True))
            .where(RentabilityRate.tier == tier.value)
            .where(RentabilityRate.commitment_period.is_(None))
            .where(RentabilityRate.liquidity_class.is_(None))
            .order_by(RentabilityRate.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
