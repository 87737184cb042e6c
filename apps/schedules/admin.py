"""Admin registration for schedule templates."""

from __future__ import annotations

from django.contrib import admin

from .models import ScheduleTemplate


@admin.register(ScheduleTemplate)
class ScheduleTemplateAdmin(admin.ModelAdmin):
    list_display = ("organization", "updated_by", "updated_at")
    search_fields = ("organization__name",)
    readonly_fields = ("created_at", "updated_at")
