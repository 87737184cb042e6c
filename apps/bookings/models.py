"""Booking domain models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeSlot


class BookingQuerySet(models.QuerySet):
    def active(self):
        """Bookings that hold their slot (everything but rejected)."""
        return self.exclude(status=Booking.Status.REJECTED)

    def on_day(self, resource_id, day):
        return self.filter(resource_id=resource_id, date=day)

    def overlapping(self, slot: TimeSlot):
        return self.filter(start_time__lt=slot.end, end_time__gt=slot.start)


class Booking(models.Model):
    """A reservation of one resource for a contiguous run of periods on one date."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending approval")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    organization = models.ForeignKey(
        "users.Organization",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    # Deleting a resource leaves its bookings behind; the sweeper reclaims them.
    resource = models.ForeignKey(
        "resources.Resource",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="bookings",
    )
    resource_name = models.CharField(max_length=255, blank=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    owner_display_name = models.CharField(max_length=150, blank=True)
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    purpose = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["date", "start_time", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="booking_valid_times",
            ),
        ]
        indexes = [
            models.Index(fields=["resource", "date"], name="booking_resource_date_idx"),
            models.Index(fields=["organization", "date"], name="booking_org_date_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} of {self.resource_id} on {self.date} {self.slot}"

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(self.start_time, self.end_time)

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    def is_owned_by(self, user) -> bool:
        return user is not None and self.owner_id == user.pk


class ResourceDay(models.Model):
    """
    Write serialization point for one resource on one date.

    Every conflict-check-and-persist transaction bumps ``revision`` first,
    so concurrent writers for the same (resource, date) queue on the row
    lock while other keys are never touched.
    """

    resource = models.ForeignKey(
        "resources.Resource",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )
    date = models.DateField()
    revision = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Resource day")
        verbose_name_plural = _("Resource days")
        constraints = [
            models.UniqueConstraint(fields=["resource", "date"], name="unique_resource_day"),
        ]

    def __str__(self) -> str:
        return f"{self.resource_id}@{self.date} r{self.revision}"
