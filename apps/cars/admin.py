"""Admin registration for cars."""

from __future__ import annotations

from django.contrib import admin

from .models import Car


@admin.register(Car)
class CarAdmin(admin.ModelAdmin):
    list_display = ("name", "brand", "city", "owner", "price_per_day", "availability", "created_at")
    list_filter = ("availability", "brand", "city")
    search_fields = ("name", "brand", "owner__username", "owner__email")
    readonly_fields = ("id", "currency", "created_at", "updated_at")
