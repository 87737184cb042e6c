"""Schedule template model."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Period


class ScheduleTemplate(models.Model):
    """Ordered periods of one organization, kept sorted by start time."""

    organization = models.OneToOneField(
        "users.Organization",
        on_delete=models.CASCADE,
        related_name="schedule_template",
    )
    periods = models.JSONField(
        default=list,
        blank=True,
        help_text=_('List of {"name", "start", "end"} entries sorted by start ("HH:MM").'),
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Schedule template")
        verbose_name_plural = _("Schedule templates")

    def __str__(self) -> str:
        return f"Schedule of {self.organization_id} ({len(self.periods)} periods)"

    def as_periods(self) -> list[Period]:
        return [Period.from_dict(entry) for entry in self.periods]
