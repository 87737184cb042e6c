"""URL routing for analytics endpoints."""

from django.urls import path  # type: ignore

from .views import TodayStatsView


urlpatterns = [
    # Do not prefix with 'analytics/' here; the namespace is defined in config.urls
    path('today/', TodayStatsView.as_view(), name='analytics-today'),
]
