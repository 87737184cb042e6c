"""Resource catalog API views."""

from __future__ import annotations

from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsOrganizationAdminOrReadOnly

from .serializers import ReorderSerializer, ResourceSerializer
from .services import delete_resource, list_resources, reorder


class ResourceViewSet(viewsets.ModelViewSet):
    """Viewset for the resource catalog of the caller's organization."""

    serializer_class = ResourceSerializer
    permission_classes = [IsOrganizationAdminOrReadOnly]
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return list_resources(self.request.user.organization)

    def perform_destroy(self, instance):  # type: ignore
        delete_resource(instance)

    @action(detail=False, methods=["post"])
    def reorder(self, request):  # type: ignore
        """Swap the display order of two resources."""
        serializer = ReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        first, second = reorder(
            request.user.organization,
            serializer.validated_data["first"],
            serializer.validated_data["second"],
        )
        serializer = ResourceSerializer([first, second], many=True, context=self.get_serializer_context())
        return Response({"resources": serializer.data}, status=status.HTTP_200_OK)
