"""API views for analytics.

Exposes the dashboard widget with today's booking counters of the
caller's organization. Numbers come from the cache maintained by the
consistency sweeper and are computed on a cache miss.
"""

from __future__ import annotations

from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.sweeper import get_today_stats
from apps.users.permissions import IsOrganizationMember


class TodayStatsView(APIView):
    """Return today's non-rejected bookings, approvals and reserved resources."""

    permission_classes = [IsOrganizationMember]

    def get(self, request, format=None):  # type: ignore
        stats = get_today_stats(request.user.organization_id)
        return Response(stats.to_dict())
