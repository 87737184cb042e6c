"""Permission classes shared by the reservation APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class IsOrganizationMember(permissions.BasePermission):
    """
    Authenticated users that belong to an organization.

    Every reservation endpoint is scoped to ``request.user.organization``;
    accounts without a tenant have nothing to see.
    """

    message = "You must belong to an organization to use reservations."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "organization_id", None) is not None


class IsOrganizationAdminOrReadOnly(IsOrganizationMember):
    """Members can read, organization admins can write."""

    message = "Only organization admins can change this."

    def has_permission(self, request, view) -> bool:  # type: ignore
        if not super().has_permission(request, view):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_organization_admin()


class IsOrganizationAdmin(IsOrganizationMember):
    """Only organization admins, for both reads and writes."""

    message = "Only organization admins can do this."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return super().has_permission(request, view) and request.user.is_organization_admin()
