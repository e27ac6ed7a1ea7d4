"""
Notification outbox writer.

Fire-and-forget: a failure is logged and never propagates, so it cannot
undo the lifecycle transition that triggered it.
"""

from collections.abc import Iterable
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import NotificationEvent, NotificationStatus
from app.repositories.notification_outbox_repository import NotificationOutboxRepository


class NotificationService:
    """Queues notifications for actors."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize notification service."""
        self.session = session
        self.outbox_repo = NotificationOutboxRepository(session)

    async def notify(
        self,
        actor_ids: int | Iterable[int],
        event: NotificationEvent,
        payload: dict[str, Any] | None = None,
    ) -> bool:
        """
        Queue one notification per actor.

        Args:
            actor_ids: Recipient profile ID(s); duplicates and empty values are skipped
            event: Event type
            payload: JSON-serializable details

        Returns:
            True if queued, False if the write failed
        """
        if isinstance(actor_ids, int):
            actor_ids = [actor_ids]
        recipients = list(dict.fromkeys(i for i in actor_ids if i))
        if not recipients:
            return True

        try:
            async with self.session.begin_nested():
                for actor_id in recipients:
                    await self.outbox_repo.create(
                        actor_id=actor_id,
                        event=event.value,
                        payload=payload or {},
                        status=NotificationStatus.PENDING.value,
                        attempts=0,
                    )
            await self.session.commit()
            logger.debug(
                "Queued {} for {} recipients",
                event.value,
                len(recipients),
                extra={"event": event.value, "recipients": recipients},
            )
            return True

        except Exception as e:
            # Don't fail the triggering operation if notification fails
            logger.error(
                "Failed to queue notification {}: {}",
                event.value,
                e,
                extra={"event": event.value, "recipients": recipients},
            )
            return False
