"""
Periodic investment check tasks.

Triggered by an external scheduler (cron enqueuing the actors). Each task
runs one read-only check and queues notifications for the result.
"""

from datetime import datetime

import dramatiq
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_SHORT,
    DRAMATIQ_TIME_LIMIT_STANDARD,
    NOTIFICATION_BATCH_LIMIT,
)
from app.models.enums import NotificationEvent
from app.services.hierarchy.resolver import HierarchyResolver
from app.services.investment.checks import InvestmentCheckService
from app.services.notification.service import NotificationService
from app.utils.datetime_utils import utc_now
from jobs.async_runner import create_local_session, run_async
from jobs.broker import broker  # noqa: F401


def _parse_now(now: str | None) -> datetime:
    """Actors receive an optional ISO timestamp so runs can be replayed."""
    if not now:
        return utc_now()
    return datetime.fromisoformat(now)


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_STANDARD)
def check_renewal_window(now: str | None = None) -> None:
    """Notify owners and their managers about investments near expiry."""
    logger.info("Starting renewal window check...")
    run_async(_run_with_session(notify_renewal_window, _parse_now(now)))


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_SHORT)
def check_accrual_gate(now: str | None = None) -> None:
    """Notify owners whose investments just started accruing."""
    logger.info("Starting accrual gate check...")
    run_async(_run_with_session(notify_accrual_gate, _parse_now(now)))


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_SHORT)
def check_payout_day(now: str | None = None) -> None:
    """On the payout day, notify owners of investments eligible for payout."""
    logger.info("Starting payout day check...")
    run_async(_run_with_session(notify_payout_day, _parse_now(now)))


def _limit_batch(items: list, check_name: str) -> list:
    """First NOTIFICATION_BATCH_LIMIT items; the overflow is logged, not notified."""
    skipped = len(items) - NOTIFICATION_BATCH_LIMIT
    if skipped > 0:
        logger.warning(
            f"{check_name}: {skipped} of {len(items)} investments exceed the batch "
            f"limit of {NOTIFICATION_BATCH_LIMIT} and were not notified this run"
        )
    return items[:NOTIFICATION_BATCH_LIMIT]


async def _run_with_session(check, now: datetime) -> int:
    async with create_local_session() as session:
        count = await check(session, now)
    logger.info(f"{check.__name__} completed: {count} notifications queued")
    return count


async def notify_renewal_window(session: AsyncSession, now: datetime) -> int:
    """
    Queue renewal reminders.

    Returns:
        Number of investments notified about
    """
    checks = InvestmentCheckService(session)
    hierarchy = HierarchyResolver(session)
    notifications = NotificationService(session)

    entries = await checks.check_renewal_window(now)
    batch = _limit_batch(entries, "Renewal window")
    for entry in batch:
        investment = entry.investment
        chain = await hierarchy.resolve_owner_chain(investment.owner_id)
        await notifications.notify(
            [investment.owner_id, *chain.manager_ids()],
            NotificationEvent.RENEWAL_WINDOW_OPEN,
            {
                "investment_id": investment.id,
                "expiry_date": entry.expiry_date.isoformat(),
                "days_until_expiry": entry.days_until_expiry,
            },
        )
    return len(batch)


async def notify_accrual_gate(session: AsyncSession, now: datetime) -> int:
    """
    Queue accrual start notices.

    Returns:
        Number of investments notified about
    """
    checks = InvestmentCheckService(session)
    notifications = NotificationService(session)

    entries = await checks.check_accrual_gate_crossed(now)
    batch = _limit_batch(entries, "Accrual gate")
    for entry in batch:
        await notifications.notify(
            entry.investment.owner_id,
            NotificationEvent.ACCRUAL_STARTED,
            {
                "investment_id": entry.investment.id,
                "accrual_start_date": entry.accrual_start_date.isoformat(),
            },
        )
    return len(batch)


async def notify_payout_day(session: AsyncSession, now: datetime) -> int:
    """
    Queue payout notices on the fixed payout day.

    Returns:
        Number of investments notified about (0 on other days)
    """
    checks = InvestmentCheckService(session)
    notifications = NotificationService(session)

    result = await checks.check_fixed_payout_day(now)
    if not result.is_payout_day:
        logger.debug("Not a payout day, nothing to do")
        return 0

    eligible = _limit_batch(result.investments, "Payout day")
    for investment in eligible:
        await notifications.notify(
            investment.owner_id,
            NotificationEvent.PAYOUT_DAY,
            {"investment_id": investment.id, "date": now.date().isoformat()},
        )
    return len(eligible)
