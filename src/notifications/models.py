from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class NotificationQuerySet(models.QuerySet["Notification"]):
    def unread(self) -> "NotificationQuerySet":
        return self.filter(read=False)


class Notification(TimeStampedModel):
    """In-app notification shown in the user's notification panel."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    title = models.CharField(max_length=255)
    message = models.TextField()
    link = models.CharField(max_length=500, blank=True, default="")
    read = models.BooleanField(default=False, db_index=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "read"], name="notification_user_read_idx")]

    def __str__(self) -> str:
        return f"{self.title} -> {self.user_id}"
