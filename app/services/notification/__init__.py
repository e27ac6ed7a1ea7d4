"""
Notification service module.

Writes notifications to the outbox drained by the external mail sender.

Usage:
    from app.services.notification import NotificationService

    notification_service = NotificationService(session)
    await notification_service.notify(owner_id, NotificationEvent.INVESTMENT_APPROVED, {...})
"""

from app.services.notification.service import NotificationService


__all__ = [
    "NotificationService",
]
