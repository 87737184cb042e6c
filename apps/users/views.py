"""User API views."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .serializers import UserSerializer


class MeView(APIView):
    """Returns the profile of the authenticated actor."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        return Response(UserSerializer(request.user).data)
