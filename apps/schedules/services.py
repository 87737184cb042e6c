"""Schedule template store."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from django.db import transaction  # type: ignore

from shared.domain.exceptions import InvalidPeriod
from shared.domain.value_objects import Period

from .models import ScheduleTemplate

logger = logging.getLogger(__name__)


def get_template(organization) -> list[Period]:
    """
    Return the organization's periods sorted by start time.

    An empty list is a valid answer: the organization has not configured
    a schedule yet and booking is unavailable.
    """

    template = ScheduleTemplate.objects.filter(organization=organization).first()
    if template is None:
        return []
    return sorted(template.as_periods(), key=lambda period: period.start)


def _coerce_period(index: int, entry: Period | Mapping[str, Any]) -> Period:
    if isinstance(entry, Period):
        period = entry
    else:
        try:
            period = Period.from_dict(entry)
        except (AttributeError, TypeError, ValueError):
            raise InvalidPeriod(
                f"Period #{index + 1} has an invalid start or end time.",
                index=index,
                period=dict(entry),
            )
    if not period.is_valid:
        raise InvalidPeriod(
            f"Period #{index + 1} ({period.name or 'unnamed'}) needs a name and a start before its end.",
            index=index,
            period=period.to_dict(),
        )
    return period


def save_template(organization, periods: Iterable[Period | Mapping[str, Any]], actor=None) -> list[Period]:
    """
    Replace the organization's template with ``periods``.

    Every entry must have a non-empty name and start < end; the first
    offending entry is reported with its index. Overlapping periods and
    duplicate names are allowed. The list is persisted sorted by start.
    """

    validated = [_coerce_period(index, entry) for index, entry in enumerate(periods)]
    validated.sort(key=lambda period: period.start)

    with transaction.atomic():
        template, _ = ScheduleTemplate.objects.select_for_update().get_or_create(organization=organization)
        template.periods = [period.to_dict() for period in validated]
        template.updated_by = actor
        template.save(update_fields=["periods", "updated_by", "updated_at"])

    logger.info(f"Schedule template of organization {organization.pk} saved with {len(validated)} periods")
    return validated
