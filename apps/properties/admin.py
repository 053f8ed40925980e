"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityHold, Property


class AvailabilityHoldInline(admin.TabularInline):
    model = AvailabilityHold
    extra = 0
    fields = ("start_date", "end_date", "status", "source", "reservation_id", "reason")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):  # type: ignore
        # Calendar changes go through the ledger API
        return False


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "host",
        "status",
        "nightly_rate",
        "cleaning_fee",
        "minimum_nights",
        "capacity",
        "currency",
    )
    list_filter = ("status", "currency")
    search_fields = ("title", "host__email", "host__username")
    inlines = [AvailabilityHoldInline]


@admin.register(AvailabilityHold)
class AvailabilityHoldAdmin(admin.ModelAdmin):
    list_display = ("property", "start_date", "end_date", "status", "source", "reservation_id")
    list_filter = ("status", "source")
    search_fields = ("property__title", "token", "reservation_id")
    readonly_fields = ("token", "property", "start_date", "end_date", "status", "source", "reservation_id", "created_by")
