"""
Consistency sweeper.

Resource deletion does not cascade to bookings. This module reclaims
bookings whose resource is gone and keeps today's dashboard counters
fresh in the cache.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date

from django.conf import settings  # type: ignore
from django.core.cache import cache  # type: ignore
from django.db import DatabaseError, transaction  # type: ignore
from django.db.models import Exists, OuterRef  # type: ignore
from django.utils import timezone  # type: ignore

from apps.resources.models import Resource

from .models import Booking, ResourceDay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodayStats:
    date: str
    total: int
    approved: int
    reserved_resources: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReconcileResult:
    organization_id: int
    scanned: int = 0
    removed: int = 0
    failed: int = 0
    removed_locks: int = 0
    pruned_locks: int = 0
    stats: TodayStats | None = None
    failed_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["stats"] = self.stats.to_dict() if self.stats else None
        return payload


def stats_cache_key(organization_id: int, day: date) -> str:
    return f"bookings:today:{organization_id}:{day.isoformat()}"


def compute_today_stats(organization_id: int, day: date | None = None) -> TodayStats:
    """Count today's non-rejected bookings on resources that still exist."""

    day = day or timezone.localdate()
    live_ids = Resource.objects.filter(organization_id=organization_id).values("pk")
    bookings = Booking.objects.active().filter(
        organization_id=organization_id,
        date=day,
        resource_id__in=live_ids,
    )
    return TodayStats(
        date=day.isoformat(),
        total=bookings.count(),
        approved=bookings.filter(status=Booking.Status.APPROVED).count(),
        reserved_resources=bookings.order_by().values("resource_id").distinct().count(),
    )


def _cache_stats(organization_id: int, stats: TodayStats) -> None:
    ttl = getattr(settings, "BOOKING_STATS_CACHE_TTL", 300)
    cache.set(stats_cache_key(organization_id, date.fromisoformat(stats.date)), stats.to_dict(), ttl)


def invalidate_today_stats(organization_id: int, day: date) -> None:
    """Drop the cached counters for ``day`` once the current transaction commits."""

    key = stats_cache_key(organization_id, day)
    transaction.on_commit(lambda: cache.delete(key))


def get_today_stats(organization_id: int) -> TodayStats:
    """Serve today's counters from the cache, computing them on a miss."""

    day = timezone.localdate()
    cached = cache.get(stats_cache_key(organization_id, day))
    if cached is not None:
        return TodayStats(**cached)

    stats = compute_today_stats(organization_id, day)
    _cache_stats(organization_id, stats)
    return stats


def prune_stale_locks(organization_id: int) -> int:
    """Delete lock rows of past days that no active booking still relies on."""

    in_use = Booking.objects.active().filter(resource_id=OuterRef("resource_id"), date=OuterRef("date"))
    stale = ResourceDay.objects.filter(
        resource_id__in=Resource.objects.filter(organization_id=organization_id).values("pk"),
        date__lt=timezone.localdate(),
    ).exclude(Exists(in_use))
    pruned, _ = stale.delete()
    return pruned


def reconcile(organization_id: int) -> ReconcileResult:
    """
    Delete bookings whose resource no longer exists, then refresh stats.

    Bookings are read before the live resource set, so a resource created
    in between can never make a fresh booking look orphaned. Running the
    pass twice removes nothing the second time.
    """

    result = ReconcileResult(organization_id=organization_id)

    bookings = list(
        Booking.objects.filter(organization_id=organization_id).values_list("pk", "resource_id")
    )
    live_ids = set(Resource.objects.filter(organization_id=organization_id).values_list("pk", flat=True))
    result.scanned = len(bookings)

    orphan_resource_ids = set()
    for booking_id, resource_id in bookings:
        if resource_id in live_ids:
            continue
        orphan_resource_ids.add(resource_id)
        try:
            Booking.objects.filter(pk=booking_id).delete()
            result.removed += 1
        except DatabaseError as e:
            result.failed += 1
            result.failed_ids.append(booking_id)
            logger.error(f"Error removing orphaned booking {booking_id}: {e}", exc_info=True)

    if orphan_resource_ids:
        result.removed_locks, _ = ResourceDay.objects.filter(resource_id__in=orphan_resource_ids).delete()

    result.pruned_locks = prune_stale_locks(organization_id)

    result.stats = compute_today_stats(organization_id)
    _cache_stats(organization_id, result.stats)

    if result.removed or result.failed:
        logger.info(
            f"Reconciled organization {organization_id}: removed {result.removed} orphaned bookings, "
            f"{result.failed} failures"
        )
    return result
