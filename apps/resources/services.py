"""Resource catalog services."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction  # type: ignore
from django.db.models import Max  # type: ignore

from shared.domain.exceptions import ManagerRequired, NotFound

from .models import Resource

logger = logging.getLogger(__name__)

ORDER_STEP = 100


def ensure_policy_is_valid(approval_required: bool, managers: Iterable[Any]) -> None:
    """Approval-required resources must name at least one manager."""

    if approval_required and not list(managers):
        raise ManagerRequired()


def list_resources(organization):
    """Resources ordered by display order, unset orders last, then by id."""

    return Resource.objects.filter(organization=organization).prefetch_related("managers")


def get_resource(organization, resource_id) -> Resource:
    try:
        return Resource.objects.get(pk=resource_id, organization=organization)
    except (Resource.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Resource {resource_id} not found.")


def _next_display_order(organization) -> int:
    current = Resource.objects.filter(organization=organization).aggregate(top=Max("display_order"))["top"]
    return (current or 0) + ORDER_STEP


@transaction.atomic
def create_resource(
    organization,
    *,
    name: str,
    location: str = "",
    approval_required: bool = False,
    managers: Iterable[Any] = (),
    image_ref: str = "",
    display_order: int | None = None,
) -> Resource:
    managers = list(managers)
    ensure_policy_is_valid(approval_required, managers)

    resource = Resource.objects.create(
        organization=organization,
        name=name,
        location=location,
        approval_required=approval_required,
        image_ref=image_ref,
        display_order=display_order if display_order is not None else _next_display_order(organization),
    )
    resource.managers.set(managers)
    logger.info(f"Resource {resource.pk} ({resource.name}) created in organization {organization.pk}")
    return resource


@transaction.atomic
def update_resource(resource: Resource, *, managers: Iterable[Any] | None = None, **changes: Any) -> Resource:
    """
    Apply ``changes`` and optionally replace the manager set.

    The approval rule is checked against the resulting state, so turning
    on approval without managers fails even if managers are not part of
    the request.
    """

    approval_required = changes.get("approval_required", resource.approval_required)
    resulting_managers = list(managers) if managers is not None else list(resource.managers.all())
    ensure_policy_is_valid(approval_required, resulting_managers)

    for field, value in changes.items():
        setattr(resource, field, value)
    resource.save()
    if managers is not None:
        resource.managers.set(resulting_managers)

    logger.info(f"Resource {resource.pk} updated: {sorted(changes)}")
    return resource


def delete_resource(resource: Resource) -> None:
    """
    Remove the resource record only.

    Bookings that reference it are left in place and reclaimed by the
    sweeper, which is queued once the deletion has committed.
    """

    from apps.bookings.tasks import reconcile_organization  # local import to avoid circular

    organization_id = resource.organization_id
    resource_id = resource.pk
    with transaction.atomic():
        resource.delete()
        transaction.on_commit(lambda: reconcile_organization.delay(organization_id))
    logger.info(f"Resource {resource_id} deleted from organization {organization_id}")


@transaction.atomic
def reorder(organization, first_id, second_id) -> tuple[Resource, Resource]:
    """Swap the display order of two resources (no reindexing of the rest)."""

    locked = {
        resource.pk: resource
        for resource in Resource.objects.select_for_update().filter(
            organization=organization,
            pk__in=[first_id, second_id],
        )
    }
    if first_id not in locked:
        raise NotFound(f"Resource {first_id} not found.")
    if second_id not in locked:
        raise NotFound(f"Resource {second_id} not found.")

    first, second = locked[first_id], locked[second_id]
    first.display_order, second.display_order = second.display_order, first.display_order
    first.save(update_fields=["display_order", "updated_at"])
    second.save(update_fields=["display_order", "updated_at"])

    logger.info(f"Resources {first.pk} and {second.pk} swapped display order")
    return first, second
