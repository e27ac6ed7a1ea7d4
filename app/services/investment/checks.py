"""
Periodic investment checks.

Read-only queries invoked by an external trigger (cron, worker). Each
call recomputes from current data; nothing is remembered between calls.
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.investment import Investment
from app.repositories.investment_repository import InvestmentRepository
from app.services.investment.accrual import accrual_start_date, build_calculator
from app.services.investment.lifecycle.state_machine import expiry_date
from app.utils.datetime_utils import is_nth_business_day, to_date


@dataclass
class RenewalWindowEntry:
    """Investment inside the renewal window."""

    investment: Investment
    expiry_date: date
    days_until_expiry: int

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "investment": self.investment.to_dict(),
            "expiry_date": self.expiry_date.isoformat(),
            "days_until_expiry": self.days_until_expiry,
        }


@dataclass
class AccrualGateEntry:
    """Investment that recently started accruing."""

    investment: Investment
    accrual_start_date: date
    days_since_gate: int

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "investment": self.investment.to_dict(),
            "accrual_start_date": self.accrual_start_date.isoformat(),
            "days_since_gate": self.days_since_gate,
        }


@dataclass
class PayoutDayCheck:
    """Result of the fixed payout day check."""

    is_payout_day: bool
    investments: list[Investment] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {
            "is_payout_day": self.is_payout_day,
            "investments": [i.to_dict() for i in self.investments],
        }


class InvestmentCheckService:
    """Computes the periodic check lists."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize check service."""
        self.session = session
        self.investment_repo = InvestmentRepository(session)

    async def check_renewal_window(
        self, now: date | datetime, owner_id: int | None = None
    ) -> list[RenewalWindowEntry]:
        """
        List active investments near their expiry date.

        An investment qualifies while its derived expiry is between
        renewal_window_days_after days ago and renewal_window_days_before
        days ahead (default -5..+35).

        Args:
            now: Check time
            owner_id: Restrict to one owner

        Returns:
            Entries ordered by days until expiry
        """
        today = to_date(now)
        lower = -settings.renewal_window_days_after
        upper = settings.renewal_window_days_before

        entries = []
        for investment in await self.investment_repo.get_active_with_payment_date(owner_id):
            expiry = expiry_date(investment)
            days_until = (expiry - today).days
            if lower <= days_until <= upper:
                entries.append(RenewalWindowEntry(investment, expiry, days_until))

        entries.sort(key=lambda e: (e.days_until_expiry, e.investment.id))
        logger.info(
            "Renewal window check: {} investments",
            len(entries),
            extra={"date": today.isoformat(), "owner_id": owner_id},
        )
        return entries

    async def check_accrual_gate_crossed(
        self, now: date | datetime
    ) -> list[AccrualGateEntry]:
        """
        List active investments whose D+60 gate fell within the look-back window.

        Args:
            now: Check time

        Returns:
            Entries with the gate date, 0 <= days since gate <= look-back
        """
        today = to_date(now)
        lookback = settings.accrual_gate_lookback_days
        calculator = build_calculator()

        entries = []
        for investment in await self.investment_repo.get_active_with_payment_date():
            gate = accrual_start_date(investment, calculator)
            days_since = (today - gate).days
            if 0 <= days_since <= lookback:
                entries.append(AccrualGateEntry(investment, gate, days_since))

        logger.info(
            "Accrual gate check: {} investments",
            len(entries),
            extra={"date": today.isoformat()},
        )
        return entries

    async def check_fixed_payout_day(self, now: date | datetime) -> PayoutDayCheck:
        """
        Check for the fixed payout day (5th business day of the month).

        On the payout day, lists active investments already past their
        D+60 gate; on any other day the list is empty.

        Args:
            now: Check time

        Returns:
            PayoutDayCheck
        """
        today = to_date(now)
        if not is_nth_business_day(today, settings.payout_business_day):
            return PayoutDayCheck(is_payout_day=False)

        calculator = build_calculator()
        eligible = [
            investment
            for investment in await self.investment_repo.get_active_with_payment_date()
            if today >= accrual_start_date(investment, calculator)
        ]

        logger.info(
            "Payout day: {} investments eligible",
            len(eligible),
            extra={"date": today.isoformat()},
        )
        return PayoutDayCheck(is_payout_day=True, investments=eligible)
