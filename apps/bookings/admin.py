"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation, ReservationStatusChange


class ReservationStatusChangeInline(admin.TabularInline):
    model = ReservationStatusChange
    extra = 0
    can_delete = False
    readonly_fields = ("from_status", "to_status", "action", "actor", "note", "created_at")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "reservation_code",
        "property",
        "guest",
        "host",
        "status",
        "check_in",
        "check_out",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "check_in", "check_out", "cancelled_by")
    search_fields = ("reservation_code", "property__title", "guest__email", "host__email")
    readonly_fields = (
        "reservation_code",
        "status",
        "hold_token",
        "nightly_rate",
        "nights",
        "nightly_total",
        "cleaning_fee",
        "total_price",
        "currency",
        "confirmed_at",
        "cancelled_at",
        "cancelled_by",
        "created_at",
        "updated_at",
    )
    inlines = [ReservationStatusChangeInline]

    def has_delete_permission(self, request, obj=None):  # type: ignore
        # Reservations are never deleted; the ledger token would be orphaned
        return False
