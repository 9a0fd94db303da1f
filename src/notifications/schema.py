from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import model_validator

from notifications.models import Notification


class NotificationSchema(ModelSchema):
    class Meta:
        model = Notification
        fields = ["id", "title", "message", "link", "read", "created_at"]


class NotificationListSchema(Schema):
    notifications: list[NotificationSchema]
    unread_count: int


class NotificationUpdateSchema(Schema):
    id: UUID | None = None
    mark_all_read: bool = False

    @model_validator(mode="after")
    def require_target(self) -> "NotificationUpdateSchema":
        if not self.mark_all_read and self.id is None:
            raise ValueError("Provide a notification id or set mark_all_read.")
        return self
