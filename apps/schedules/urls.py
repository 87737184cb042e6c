"""URL routing for the schedule template."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import ScheduleTemplateView

urlpatterns = [
    path("", ScheduleTemplateView.as_view(), name="schedule-template"),
]
