"""
Reservation Errors

Every failure the schedule, resource and booking services report to a
caller is a ReservationError subclass. The API layer renders them as
{"error": <code>, "detail": <message>} without further translation.
"""

from typing import Any, Dict, Optional


class ReservationError(Exception):
    """Base class for all reservation domain errors"""

    code = "reservation_error"
    default_message = "Reservation request failed."

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "detail": self.message}
        payload.update(self.context)
        return payload


class NoSchedule(ReservationError):
    code = "no_schedule"
    default_message = "Booking is unavailable: the schedule has no periods."


class InvalidRange(ReservationError):
    code = "invalid_range"
    default_message = "End period must not be before start period."


class SlotConflict(ReservationError):
    code = "slot_conflict"
    default_message = "The selected time is already booked."


class InvalidPeriod(ReservationError):
    code = "invalid_period"
    default_message = "Every period needs a name and a start before its end."


class ManagerRequired(ReservationError):
    code = "manager_required"
    default_message = "Resources that require approval need at least one manager."


class Forbidden(ReservationError):
    code = "forbidden"
    default_message = "You are not allowed to perform this action."


class InvalidState(ReservationError):
    code = "invalid_state"
    default_message = "The booking is no longer pending."


class PolicyViolation(ReservationError):
    code = "policy_violation"
    default_message = "Only instant-confirm resources allow this action."


class NotFound(ReservationError):
    code = "not_found"
    default_message = "Not found."
