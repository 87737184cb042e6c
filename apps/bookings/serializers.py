"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request: a resource, a date and an inclusive run of periods."""

    resource = serializers.IntegerField()
    date = serializers.DateField()
    # Range checks belong to the engine, which knows the template length.
    start_period = serializers.IntegerField()
    end_period = serializers.IntegerField()
    purpose = serializers.CharField(required=False, allow_blank=True, default="")


class BookingPurposeSerializer(serializers.Serializer):
    purpose = serializers.CharField(allow_blank=True)


class BookingSerializer(serializers.ModelSerializer):
    """Read representation used by the grid and the approval queue."""

    resource = serializers.IntegerField(source="resource_id", read_only=True)
    owner = serializers.IntegerField(source="owner_id", read_only=True)
    is_mine = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "resource",
            "resource_name",
            "owner",
            "owner_display_name",
            "date",
            "start_time",
            "end_time",
            "status",
            "purpose",
            "is_mine",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_is_mine(self, obj: Booking) -> bool:
        request = self.context.get("request")
        return bool(request and obj.is_owned_by(request.user))
