"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import EventFlowUser


@admin.register(EventFlowUser)
class EventFlowUserAdmin(UserAdmin):  # type: ignore[type-arg]
    list_display = ("email", "name", "is_active", "is_staff", "date_joined")
    search_fields = ("email", "name", "username")
    ordering = ("email",)
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Profile", {"fields": ("name", "avatar")}),
    )
