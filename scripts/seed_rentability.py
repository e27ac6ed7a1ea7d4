#!/usr/bin/env python3
"""
Seed the investor rate matrix.

Creates one plain (no conditions) rentability row per offered
period/liquidity pair that does not have one yet.
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from sqlalchemy import select

from app.config.business_constants import DEFAULT_INVESTOR_RATES
from app.config.database import async_session_maker
from app.models.enums import ActorTier
from app.models.rentability_rate import RentabilityRate


async def seed_rentability() -> None:
    """Insert missing investor rates."""
    async with async_session_maker() as session:
        stmt = select(RentabilityRate).where(
            RentabilityRate.tier == ActorTier.INVESTOR.value,
            RentabilityRate.condition_ids.is_(None),
        )
        result = await session.execute(stmt)
        existing = {
            (rate.commitment_period, rate.liquidity_class)
            for rate in result.scalars().all()
        }

        created_count = 0
        for (period, liquidity), monthly_rate in DEFAULT_INVESTOR_RATES.items():
            if (period, liquidity.value) in existing:
                logger.info(f"Rate for {period}m/{liquidity.value} already present, skipping")
                continue

            session.add(
                RentabilityRate(
                    tier=ActorTier.INVESTOR.value,
                    commitment_period=period,
                    liquidity_class=liquidity.value,
                    condition_ids=None,
                    monthly_rate=monthly_rate,
                    description=f"Investor {period}m {liquidity.value}",
                    is_active=True,
                )
            )
            created_count += 1
            logger.info(f"Queued rate {monthly_rate} for {period}m/{liquidity.value}")

        await session.commit()
        logger.success(f"Created {created_count} rentability rates")


if __name__ == "__main__":
    asyncio.run(seed_rentability())
