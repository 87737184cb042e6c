"""Serializers for the resource catalog."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Resource
from .services import create_resource, update_resource

User = get_user_model()


class ResourceSerializer(serializers.ModelSerializer):
    """Read and write representation of a resource."""

    managers = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=User.objects.none(),
        required=False,
    )

    class Meta:
        model = Resource
        fields = [
            "id",
            "name",
            "location",
            "approval_required",
            "managers",
            "display_order",
            "image_ref",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "location": {"required": False, "allow_blank": True},
            "image_ref": {"required": False, "allow_blank": True},
            "display_order": {"required": False},
        }

    def get_fields(self):  # type: ignore
        fields = super().get_fields()
        # Users of other organizations are reported as nonexistent.
        request = self.context.get("request")
        organization_id = getattr(getattr(request, "user", None), "organization_id", None)
        members = User.objects.filter(organization_id=organization_id) if organization_id else User.objects.none()
        fields["managers"].child_relation.queryset = members
        return fields

    def create(self, validated_data):  # type: ignore
        organization = self.context["request"].user.organization
        return create_resource(organization, **validated_data)

    def update(self, instance, validated_data):  # type: ignore
        managers = validated_data.pop("managers", None)
        return update_resource(instance, managers=managers, **validated_data)


class ReorderSerializer(serializers.Serializer):
    first = serializers.IntegerField()
    second = serializers.IntegerField()

    def validate(self, attrs):  # type: ignore
        if attrs["first"] == attrs["second"]:
            raise serializers.ValidationError("Pick two different resources.")
        return attrs
