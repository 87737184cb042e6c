"""Domain services for booking workflows."""

from __future__ import annotations

import logging
import time
from datetime import date, timedelta
from typing import Sequence

from django.conf import settings  # type: ignore
from django.db import IntegrityError, OperationalError, transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.utils import timezone  # type: ignore

from apps.resources.models import Resource
from apps.resources.services import get_resource
from apps.schedules.services import get_template
from shared.domain.exceptions import (
    Forbidden,
    InvalidRange,
    InvalidState,
    NoSchedule,
    NotFound,
    PolicyViolation,
    SlotConflict,
)
from shared.domain.value_objects import Period, TimeSlot, format_clock_time

from .models import Booking, ResourceDay
from .sweeper import invalidate_today_stats

logger = logging.getLogger(__name__)

ONE_WEEK = timedelta(days=7)
RETRY_BACKOFF_SECONDS = 0.05


def resolve_slot(periods: Sequence[Period], start_period: int, end_period: int) -> TimeSlot:
    """Turn a run of template periods into the time slot it spans."""

    if not periods:
        raise NoSchedule()
    if start_period > end_period:
        raise InvalidRange()
    if start_period < 0 or end_period >= len(periods):
        raise InvalidRange(
            f"Periods must be between 0 and {len(periods) - 1}.",
            start_period=start_period,
            end_period=end_period,
        )

    start = periods[start_period].start
    end = periods[end_period].end
    if start >= end:
        raise InvalidRange(f"Periods {start_period}-{end_period} do not form a valid time range.")
    return TimeSlot(start, end)


def _lock_resource_day(resource_id: int, day: date) -> None:
    """Take the row lock that serializes writers for (resource, day)."""

    ResourceDay.objects.get_or_create(resource_id=resource_id, date=day)
    ResourceDay.objects.filter(resource_id=resource_id, date=day).update(revision=F("revision") + 1)


def ensure_slot_is_free(resource_id: int, day: date, slot: TimeSlot) -> None:
    """Ensure no non-rejected booking of the resource overlaps ``slot`` on ``day``."""

    if Booking.objects.active().on_day(resource_id, day).overlapping(slot).exists():
        raise SlotConflict(
            f"{day.isoformat()} {slot} is already booked.",
            date=day.isoformat(),
            start_time=format_clock_time(slot.start),
            end_time=format_clock_time(slot.end),
        )


def _book_atomically(*, resource: Resource, day: date, slot: TimeSlot, owner, status: str, purpose: str) -> Booking:
    """
    Conflict check and insert as one transaction per (resource, day).

    Transaction aborts caused by contention on the same key are retried a
    bounded number of times; when they persist they are reported as
    SlotConflict, since someone else just wrote to this slot.
    """

    attempts = max(1, int(getattr(settings, "BOOKING_CONFLICT_RETRIES", 3)))
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                _lock_resource_day(resource.pk, day)
                ensure_slot_is_free(resource.pk, day, slot)
                booking = Booking.objects.create(
                    organization_id=resource.organization_id,
                    resource=resource,
                    resource_name=resource.name,
                    owner=owner,
                    owner_display_name=owner.display_name,
                    date=day,
                    start_time=slot.start,
                    end_time=slot.end,
                    status=status,
                    purpose=purpose,
                )
                invalidate_today_stats(resource.organization_id, day)
                return booking
        except (OperationalError, IntegrityError) as exc:
            logger.warning(
                f"Booking transaction for resource {resource.pk} on {day} aborted "
                f"(attempt {attempt}/{attempts}): {exc}"
            )
            if attempt < attempts:
                time.sleep(RETRY_BACKOFF_SECONDS * attempt)

    raise SlotConflict(f"{day.isoformat()} {slot} could not be booked, please try again.")


def request_booking(
    actor,
    *,
    resource_id,
    booking_date: date,
    start_period: int,
    end_period: int,
    purpose: str = "",
) -> Booking:
    """
    Book ``resource_id`` on ``booking_date`` for periods start..end (inclusive).

    Instant-confirm resources yield an approved booking, approval-required
    resources a pending one.
    """

    organization = actor.organization
    resource = get_resource(organization, resource_id)
    slot = resolve_slot(get_template(organization), start_period, end_period)
    status = Booking.Status.PENDING if resource.approval_required else Booking.Status.APPROVED

    booking = _book_atomically(
        resource=resource,
        day=booking_date,
        slot=slot,
        owner=actor,
        status=status,
        purpose=purpose,
    )
    logger.info(
        f"Booking {booking.pk} created: resource {resource.pk} on {booking_date} {slot}, "
        f"owner {actor.pk}, status {booking.status}"
    )
    return booking


def get_booking(actor, booking_id) -> Booking:
    try:
        return Booking.objects.get(pk=booking_id, organization=actor.organization)
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Booking {booking_id} not found.")


def is_resource_manager(actor, resource_id) -> bool:
    """Managers are looked up at action time, never cached on the booking."""

    return actor.managed_resources.filter(pk=resource_id).exists()


def _decide(booking_id, actor, new_status: str) -> Booking:
    booking = get_booking(actor, booking_id)
    if not is_resource_manager(actor, booking.resource_id):
        raise Forbidden("Only managers of this resource can approve or reject bookings.")

    # Compare-and-set: only the first caller that still sees PENDING wins.
    updated = Booking.objects.filter(pk=booking.pk, status=Booking.Status.PENDING).update(
        status=new_status,
        updated_at=timezone.now(),
    )
    if not updated:
        booking.refresh_from_db(fields=["status"])
        raise InvalidState(f"Booking {booking.pk} is already {booking.status}.", status=booking.status)

    booking.refresh_from_db()
    invalidate_today_stats(booking.organization_id, booking.date)
    logger.info(f"Booking {booking.pk} {new_status} by {actor.pk}")
    return booking


def approve_booking(booking_id, actor) -> Booking:
    return _decide(booking_id, actor, Booking.Status.APPROVED)


def reject_booking(booking_id, actor) -> Booking:
    return _decide(booking_id, actor, Booking.Status.REJECTED)


def cancel_booking(booking_id, actor) -> None:
    """Owner or resource manager deletes the booking, whatever its status."""

    booking = get_booking(actor, booking_id)
    if not booking.is_owned_by(actor) and not is_resource_manager(actor, booking.resource_id):
        raise Forbidden("Only the owner or a manager of this resource can cancel the booking.")

    booking_pk = booking.pk
    booking.delete()
    invalidate_today_stats(booking.organization_id, booking.date)
    logger.info(f"Booking {booking_pk} cancelled by {actor.pk}")


def update_purpose(booking_id, purpose: str, actor) -> Booking:
    booking = get_booking(actor, booking_id)
    if not booking.is_owned_by(actor):
        raise Forbidden("Only the owner can edit the booking.")

    booking.purpose = purpose
    booking.save(update_fields=["purpose", "updated_at"])
    return booking


def duplicate_to_next_week(booking_id, actor) -> Booking:
    """
    Copy an instant-confirm booking to the same slot seven days later.

    Approval-required resources are refused by policy (whatever the
    source booking's status), so duplication never bypasses the manager.
    """

    source = get_booking(actor, booking_id)
    if not source.is_owned_by(actor):
        raise Forbidden("Only the owner can duplicate the booking.")

    resource = Resource.objects.filter(pk=source.resource_id, organization=actor.organization).first()
    if resource is None:
        raise NotFound(f"Resource {source.resource_id} no longer exists.")
    if resource.approval_required:
        raise PolicyViolation("Bookings of approval-required resources cannot be duplicated.")

    target_date = source.date + ONE_WEEK
    booking = _book_atomically(
        resource=resource,
        day=target_date,
        slot=source.slot,
        owner=actor,
        status=Booking.Status.APPROVED,
        purpose=source.purpose,
    )
    logger.info(f"Booking {source.pk} duplicated to {booking.pk} on {target_date}")
    return booking


def bookings_for(organization):
    return Booking.objects.filter(organization=organization)


def pending_approvals(actor):
    """Pending bookings on resources the actor manages, oldest slot first."""

    return (
        Booking.objects.filter(
            organization=actor.organization,
            status=Booking.Status.PENDING,
            resource_id__in=actor.managed_resources.values("pk"),
        )
        .order_by("date", "start_time", "id")
    )
