"""Serializers for the schedule template API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore


class PeriodSerializer(serializers.Serializer):
    """
    One template entry as sent by the admin console.

    Times are plain "HH:MM" strings here; the store validates them so
    that every bad entry is reported the same way.
    """

    name = serializers.CharField(allow_blank=True, max_length=100)
    start = serializers.CharField(max_length=5)
    end = serializers.CharField(max_length=5)


class ScheduleTemplateWriteSerializer(serializers.Serializer):
    periods = PeriodSerializer(many=True, allow_empty=True)


def period_payload(period, now=None) -> dict:
    data = period.to_dict()
    data["is_current"] = bool(now is not None and period.is_current(now))
    return data
