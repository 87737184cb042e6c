"""Admin registration for resources."""

from __future__ import annotations

from django.contrib import admin

from .models import Resource


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "organization", "approval_required", "display_order", "created_at")
    list_filter = ("approval_required", "organization")
    search_fields = ("name", "location", "organization__name")
    filter_horizontal = ("managers",)
    readonly_fields = ("created_at", "updated_at")
