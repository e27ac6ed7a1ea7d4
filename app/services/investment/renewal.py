"""
Investment renewal processor.

Three actions on an active investment:
- renew: new cycle with the same terms
- renew_with_new_rules: new cycle with a new period/liquidity and a
  re-resolved rate
- suggest_increase: new pending investment for an additional amount plus
  a plain renewal of the original

The investment update is committed first. The history record is written
afterwards in its own savepoint, keyed by (investment_id, renewal_number)
so a retry cannot duplicate it. A failed history write does not undo the
renewal; it is reported as a warning.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import ActorTier, InvestmentStatus, LiquidityClass, RenewalAction
from app.models.investment import Investment
from app.models.investment_renewal import InvestmentRenewal
from app.repositories.investment_renewal_repository import InvestmentRenewalRepository
from app.repositories.investment_repository import InvestmentRepository
from app.services.investment.lifecycle.manager import check_version
from app.services.investment.lifecycle.state_machine import ensure_transition, expiry_date
from app.services.rentability.resolver import RateResolver
from app.utils.datetime_utils import start_of_day, utc_now
from app.validators.investment import (
    require,
    validate_amount,
    validate_commitment_period,
    validate_liquidity,
)


HISTORY_WRITE_ATTEMPTS = 2

HISTORY_WARNING = (
    "Investment renewed, but the renewal history record could not be saved"
)


@dataclass(frozen=True)
class RenewalParams:
    """Validated parameters of a renewal action."""

    action: RenewalAction
    new_commitment_period: int | None = None
    new_liquidity: LiquidityClass | None = None
    additional_amount: Decimal | None = None

    @classmethod
    def parse(cls, action: str | RenewalAction, params: dict[str, Any] | None) -> "RenewalParams":
        """
        Validate action parameters.

        Raises:
            ValidationError: If the action is unknown or required
                parameters are missing or malformed
        """
        action = RenewalAction.parse(action)
        params = params or {}

        if action is RenewalAction.RENEW_WITH_NEW_RULES:
            period = params.get("new_commitment_period", params.get("newPeriod"))
            liquidity = params.get("new_liquidity_class", params.get("newLiquidity"))
            return cls(
                action=action,
                new_commitment_period=require(validate_commitment_period(period)),
                new_liquidity=require(validate_liquidity(liquidity)),
            )

        if action is RenewalAction.SUGGEST_INCREASE:
            amount = params.get("additional_amount", params.get("additionalAmount"))
            return cls(
                action=action,
                additional_amount=require(validate_amount(amount, "additional_amount")),
            )

        return cls(action=action)


@dataclass
class RenewalOutcome:
    """Result of a renewal."""

    investment: Investment
    renewal_record: InvestmentRenewal | None
    new_investment: Investment | None = None
    warning: str | None = None


class RenewalProcessor:
    """Applies renewal actions to active investments."""

    def __init__(
        self, session: AsyncSession, rate_resolver: RateResolver | None = None
    ) -> None:
        """Initialize renewal processor."""
        self.session = session
        self.investment_repo = InvestmentRepository(session)
        self.renewal_repo = InvestmentRenewalRepository(session)
        self.rate_resolver = rate_resolver or RateResolver(session)

    async def renew(
        self,
        investment: Investment,
        params: RenewalParams,
        owner_tier: ActorTier,
        renewed_by: int | None,
        now: datetime | None = None,
        expected_version: int | None = None,
    ) -> RenewalOutcome:
        """
        Apply a renewal action.

        Args:
            investment: Active investment
            params: Validated renewal parameters
            owner_tier: Tier of the owner, used for rate resolution
            renewed_by: Acting profile ID
            now: Renewal timestamp (defaults to current UTC time)
            expected_version: Version the client last saw

        Returns:
            RenewalOutcome

        Raises:
            ConflictError: If not active or modified concurrently
        """
        now = now or utc_now()
        investment_id = investment.id
        ensure_transition(investment, "renew")
        check_version(investment, expected_version)

        previous = {
            "previous_payment_date": investment.payment_date,
            "previous_commitment_period": investment.commitment_period,
            "previous_liquidity_class": investment.liquidity_class,
            "previous_monthly_rate": investment.monthly_rate,
            "previous_expiry_date": self._expiry_datetime(investment),
        }

        new_period = investment.commitment_period
        new_liquidity = investment.liquidity_class
        new_rate = investment.monthly_rate

        if params.action is RenewalAction.RENEW_WITH_NEW_RULES:
            new_period = params.new_commitment_period
            new_liquidity = params.new_liquidity.value
            new_rate = await self.rate_resolver.resolve_rate(
                owner_tier, new_period, params.new_liquidity, investment.condition_ids
            )

        new_investment = None
        try:
            if params.action is RenewalAction.SUGGEST_INCREASE:
                new_investment = await self.investment_repo.create(
                    owner_id=investment.owner_id,
                    amount=params.additional_amount,
                    commitment_period=investment.commitment_period,
                    liquidity_class=investment.liquidity_class,
                    monthly_rate=investment.monthly_rate,
                    condition_ids=investment.condition_ids,
                    status=InvestmentStatus.PENDING.value,
                    renewal_count=0,
                    parent_investment_id=investment.id,
                )

            if investment.original_investment_date is None:
                investment.original_investment_date = investment.payment_date or now
            investment.commitment_period = new_period
            investment.liquidity_class = new_liquidity
            investment.monthly_rate = new_rate
            investment.payment_date = now
            investment.current_cycle_start_date = now
            investment.last_renewal_date = now
            investment.renewal_count = (investment.renewal_count or 0) + 1

            await self.investment_repo.save(investment)
            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to renew investment {investment_id}: {e}")
            raise

        logger.info(
            f"Investment renewed: id={investment_id}, action={params.action.value}, "
            f"renewal_count={investment.renewal_count}"
        )

        record_data = {
            **previous,
            "investment_id": investment_id,
            "renewal_number": investment.renewal_count,
            "action": params.action.value,
            "new_payment_date": now,
            "new_commitment_period": new_period,
            "new_liquidity_class": new_liquidity,
            "new_monthly_rate": new_rate,
            "new_expiry_date": self._expiry_datetime(investment),
            "additional_amount": params.additional_amount,
            "additional_investment_id": new_investment.id if new_investment else None,
            "renewed_by": renewed_by,
        }
        record = await self._append_history(record_data)

        return RenewalOutcome(
            investment=investment,
            renewal_record=record,
            new_investment=new_investment,
            warning=None if record is not None else HISTORY_WARNING,
        )

    async def _append_history(self, data: dict[str, Any]) -> InvestmentRenewal | None:
        """
        Write the renewal record, retrying once.

        Returns:
            The stored record, or None if every attempt failed
        """
        investment_id = data["investment_id"]
        renewal_number = data["renewal_number"]

        for attempt in range(1, HISTORY_WRITE_ATTEMPTS + 1):
            try:
                existing = await self.renewal_repo.get_by_renewal_number(
                    investment_id, renewal_number
                )
                if existing is not None:
                    return existing

                async with self.session.begin_nested():
                    record = await self.renewal_repo.create(**data)
                await self.session.commit()
                return record

            except Exception as e:
                logger.warning(
                    "Renewal history write failed (attempt {}/{}): {}",
                    attempt,
                    HISTORY_WRITE_ATTEMPTS,
                    e,
                    extra={
                        "investment_id": investment_id,
                        "renewal_number": renewal_number,
                    },
                )

        logger.error(
            "Renewal history lost for investment {}, renewal {}",
            investment_id,
            renewal_number,
            extra={"investment_id": investment_id, "renewal_number": renewal_number},
        )
        return None

    @staticmethod
    def _expiry_datetime(investment: Investment) -> datetime | None:
        expiry = expiry_date(investment)
        return start_of_day(expiry) if expiry is not None else None
