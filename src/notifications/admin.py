from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "user", "read", "created_at"]
    list_filter = ["read"]
    search_fields = ["title", "message", "user__email"]
    raw_id_fields = ["user"]
