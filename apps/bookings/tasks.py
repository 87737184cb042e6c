"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.users.models import Organization

from .sweeper import reconcile

logger = logging.getLogger(__name__)


@shared_task(name="bookings.reconcile_organization")
def reconcile_organization(organization_id: int) -> dict:
    """
    On-demand sweep of one organization.

    Queued after a resource is deleted so its bookings disappear from
    the grid without waiting for the periodic pass.
    """
    return reconcile(organization_id).to_dict()


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.reconcile_all_organizations")
def reconcile_all_organizations() -> dict[str, int]:
    """
    Sweep every active organization and refresh today's counters.

    Returns:
        dict: {"organizations": swept, "removed": orphaned bookings deleted}
    """
    swept = 0
    removed = 0

    for organization_id in Organization.objects.filter(is_active=True).values_list("pk", flat=True):
        try:
            result = reconcile(organization_id)
            swept += 1
            removed += result.removed
        except Exception as e:
            logger.error(f"Error reconciling organization {organization_id}: {e}", exc_info=True)

    if removed > 0:
        logger.info(f"Removed {removed} orphaned bookings across {swept} organizations")

    return {"organizations": swept, "removed": removed}
