from django.contrib import admin

from events import models


class TicketInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.Ticket
    extra = 0
    readonly_fields = ["sold"]


@admin.register(models.Category)
class CategoryAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "status", "start_date", "capacity", "organizer"]
    list_filter = ["status", "category", "is_virtual"]
    search_fields = ["title", "slug", "organizer__email"]
    raw_id_fields = ["organizer"]
    inlines = [TicketInline]


@admin.register(models.Registration)
class RegistrationAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "event", "ticket", "quantity", "status", "checked_in", "created_at"]
    list_filter = ["status", "checked_in"]
    search_fields = ["user__email", "event__title", "stripe_payment_id"]
    raw_id_fields = ["user", "event", "ticket"]
    readonly_fields = ["qr_code", "stripe_payment_id", "checked_in_at"]


@admin.register(models.EventAnalytics)
class EventAnalyticsAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["event", "page_views", "total_revenue"]
    readonly_fields = ["page_views", "total_revenue"]
