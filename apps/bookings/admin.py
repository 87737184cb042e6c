"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, ResourceDay


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "resource_name",
        "owner_display_name",
        "date",
        "start_time",
        "end_time",
        "status",
        "organization",
        "created_at",
    )
    list_filter = ("status", "date", "organization")
    search_fields = ("resource_name", "owner_display_name", "owner__email", "purpose")
    readonly_fields = (
        "resource_name",
        "owner_display_name",
        "created_at",
        "updated_at",
    )


@admin.register(ResourceDay)
class ResourceDayAdmin(admin.ModelAdmin):
    list_display = ("resource_id", "date", "revision")
    list_filter = ("date",)
