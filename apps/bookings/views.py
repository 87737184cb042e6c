"""API views for the booking domain."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsOrganizationAdmin, IsOrganizationMember

from . import services, sweeper
from .filters import BookingFilterSet
from .serializers import BookingCreateSerializer, BookingPurposeSerializer, BookingSerializer


class BookingViewSet(viewsets.ModelViewSet):
    """
    Booking grid and lifecycle actions.

    Every write goes through the booking services, which own conflict
    detection and authorization; the viewset only translates HTTP.
    """

    serializer_class = BookingSerializer
    permission_classes = [IsOrganizationMember]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    pagination_class = None
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):  # type: ignore
        return services.bookings_for(self.request.user.organization)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "partial_update":
            return BookingPurposeSerializer
        return BookingSerializer

    def _render(self, booking, status_code=status.HTTP_200_OK):
        serializer = BookingSerializer(booking, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = services.request_booking(
            request.user,
            resource_id=data["resource"],
            booking_date=data["date"],
            start_period=data["start_period"],
            end_period=data["end_period"],
            purpose=data["purpose"],
        )
        return self._render(booking, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.update_purpose(pk, serializer.validated_data["purpose"], request.user)
        return self._render(booking)

    def destroy(self, request, pk=None, *args, **kwargs):  # type: ignore
        services.cancel_booking(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        return self._render(services.approve_booking(pk, request.user))

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        return self._render(services.reject_booking(pk, request.user))

    @action(detail=True, methods=["post"])
    def duplicate(self, request, pk=None):  # type: ignore
        """Copy the booking to the same slot one week later."""
        booking = services.duplicate_to_next_week(pk, request.user)
        return self._render(booking, status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def pending(self, request):  # type: ignore
        """Approval queue of the resources the caller manages."""
        bookings = services.pending_approvals(request.user)
        serializer = BookingSerializer(bookings, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    @action(detail=False, methods=["post"], permission_classes=[IsOrganizationAdmin])
    def reconcile(self, request):  # type: ignore
        """Run a sweep of the caller's organization right away."""
        result = sweeper.reconcile(request.user.organization_id)
        return Response(result.to_dict(), status=status.HTTP_200_OK)
