from uuid import UUID

import structlog
from django.shortcuts import get_object_or_404

from accounts.models import EventFlowUser
from notifications.models import Notification

logger = structlog.get_logger(__name__)

LATEST_NOTIFICATIONS = 50


def latest_notifications(user: EventFlowUser) -> dict[str, object]:
    """The user's 50 most recent notifications and how many are unread overall."""
    qs = Notification.objects.filter(user=user)
    return {
        "notifications": list(qs.order_by("-created_at")[:LATEST_NOTIFICATIONS]),
        "unread_count": qs.unread().count(),
    }


def mark_read(user: EventFlowUser, notification_id: UUID) -> None:
    notification = get_object_or_404(Notification, pk=notification_id, user=user)
    if not notification.read:
        Notification.objects.filter(pk=notification.pk).update(read=True)


def mark_all_read(user: EventFlowUser) -> int:
    count = Notification.objects.filter(user=user).unread().update(read=True)
    logger.info("notifications_marked_read", user_id=str(user.id), count=count)
    return count
