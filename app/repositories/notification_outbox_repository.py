"""
Notification outbox repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification_outbox import NotificationOutbox
from app.repositories.base import BaseRepository


class NotificationOutboxRepository(BaseRepository[NotificationOutbox]):
    """Outbox repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize outbox repository."""
        super().__init__(NotificationOutbox, session)
