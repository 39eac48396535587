"""Admin registration for reservations.

Reservations are read-only here: status changes must go through the
booking service so that the availability check and events are not skipped.
"""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "car",
        "renter",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "payment_method",
        "created_at",
    )
    list_filter = ("status", "insurance_tier", "payment_method", "start_date")
    search_fields = ("id", "car__name", "renter__username", "renter_email")
    readonly_fields = [field.name for field in Reservation._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
