"""API views for the schedule template."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsOrganizationAdminOrReadOnly

from .serializers import ScheduleTemplateWriteSerializer, period_payload
from .services import get_template, save_template


class ScheduleTemplateView(APIView):
    """Read (members) or replace (organization admins) the period list."""

    permission_classes = [IsOrganizationAdminOrReadOnly]

    def get(self, request):  # type: ignore
        periods = get_template(request.user.organization)
        # "Happening now" is derived from the wall clock on every read.
        now = timezone.localtime().time()
        return Response({"periods": [period_payload(period, now) for period in periods]})

    def put(self, request):  # type: ignore
        serializer = ScheduleTemplateWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        periods = save_template(
            request.user.organization,
            serializer.validated_data["periods"],
            actor=request.user,
        )
        now = timezone.localtime().time()
        return Response(
            {"periods": [period_payload(period, now) for period in periods]},
            status=status.HTTP_200_OK,
        )
