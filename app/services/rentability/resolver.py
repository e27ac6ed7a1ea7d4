"""
Rate resolver.

Resolves the monthly rate for a tier, commitment period, liquidity class
and optional special conditions. Resolution order:

1. condition-scoped row with the largest overlap of the given conditions
2. plain (tier, period, liquidity) row
3. tier-wide fixed row
4. explicit default (always logged)

Nothing is cached; callers freeze the result into the investment.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import is_valid_commitment_period
from app.config.settings import settings
from app.models.enums import ActorTier, LiquidityClass
from app.repositories.rentability_rate_repository import RentabilityRateRepository
from app.utils.exceptions import ValidationError


class RateResolution(NamedTuple):
    """Resolved rate and where it came from."""

    rate: Decimal
    source: str  # condition, plain, fixed, default
    rate_id: int | None = None


class RateResolver:
    """Looks up monthly rates in the rentability table."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize resolver."""
        self.session = session
        self.rate_repo = RentabilityRateRepository(session)

    async def resolve_rate(
        self,
        tier: ActorTier | str,
        commitment_period: int,
        liquidity: LiquidityClass | str,
        condition_ids: Iterable[int] | None = None,
        default_rate: Decimal | None = None,
    ) -> Decimal:
        """
        Resolve a monthly rate.

        Args:
            tier: Tier of the investment owner
            commitment_period: Commitment period in months
            liquidity: Liquidity class (enum or alias)
            condition_ids: Optional special condition ids
            default_rate: Fallback rate (defaults to settings.default_monthly_rate)

        Returns:
            Monthly rate as a fraction

        Raises:
            ValidationError: If tier, period or liquidity is unknown
        """
        resolution = await self.resolve(
            tier, commitment_period, liquidity, condition_ids, default_rate
        )
        return resolution.rate

    async def resolve(
        self,
        tier: ActorTier | str,
        commitment_period: int,
        liquidity: LiquidityClass | str,
        condition_ids: Iterable[int] | None = None,
        default_rate: Decimal | None = None,
    ) -> RateResolution:
        """
        Resolve a monthly rate and report which row produced it.

        See resolve_rate for arguments.
        """
        tier = ActorTier.parse(tier)
        liquidity = LiquidityClass.parse(liquidity)
        if not is_valid_commitment_period(commitment_period):
            raise ValidationError(f"Invalid commitment period: {commitment_period}")

        wanted = {int(c) for c in condition_ids or ()}

        if wanted:
            candidates = await self.rate_repo.get_condition_candidates(
                tier, commitment_period, liquidity
            )
            best = None
            best_overlap = 0
            tied = False
            # Candidates come in insertion order; the first row keeps a tie
            for row in candidates:
                overlap = len(wanted & {int(c) for c in row.condition_ids or ()})
                if overlap > best_overlap:
                    best, best_overlap, tied = row, overlap, False
                elif overlap and overlap == best_overlap:
                    tied = True

            if best is not None:
                if tied:
                    logger.warning(
                        "Several condition rates match equally, using the oldest",
                        extra={
                            "rate_id": best.id,
                            "condition_ids": sorted(wanted),
                            "commitment_period": commitment_period,
                            "liquidity": liquidity.value,
                        },
                    )
                return RateResolution(Decimal(best.monthly_rate), "condition", best.id)

        plain = await self.rate_repo.get_plain(tier, commitment_period, liquidity)
        if plain is not None:
            return RateResolution(Decimal(plain.monthly_rate), "plain", plain.id)

        fixed = await self.rate_repo.get_fixed(tier)
        if fixed is not None:
            return RateResolution(Decimal(fixed.monthly_rate), "fixed", fixed.id)

        rate = default_rate if default_rate is not None else settings.default_monthly_rate
        logger.warning(
            "No rate entry for {}/{}m/{}, using default {}",
            tier.value,
            commitment_period,
            liquidity.value,
            rate,
            extra={
                "tier": tier.value,
                "commitment_period": commitment_period,
                "liquidity": liquidity.value,
                "condition_ids": sorted(wanted),
            },
        )
        return RateResolution(Decimal(rate), "default", None)
