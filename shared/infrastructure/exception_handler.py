"""
DRF exception handler

Renders reservation errors and DRF's own errors with a stable
{"error": <code>, "detail": ...} shape so clients can tell
a slot conflict from a permission problem without parsing messages.
"""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied  # type: ignore
from django.http import Http404  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import (
    Forbidden,
    InvalidPeriod,
    InvalidRange,
    InvalidState,
    ManagerRequired,
    NoSchedule,
    NotFound,
    PolicyViolation,
    ReservationError,
    SlotConflict,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    NoSchedule: status.HTTP_409_CONFLICT,
    InvalidRange: status.HTTP_400_BAD_REQUEST,
    SlotConflict: status.HTTP_409_CONFLICT,
    InvalidPeriod: status.HTTP_400_BAD_REQUEST,
    ManagerRequired: status.HTTP_400_BAD_REQUEST,
    Forbidden: status.HTTP_403_FORBIDDEN,
    InvalidState: status.HTTP_409_CONFLICT,
    PolicyViolation: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
}

DRF_CODES = {
    "permission_denied": Forbidden.code,
    "not_found": NotFound.code,
}


def status_for(exc: ReservationError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


def reservation_exception_handler(exc, context):
    """Entry point configured as REST_FRAMEWORK['EXCEPTION_HANDLER']."""

    if isinstance(exc, ReservationError):
        logger.info(f"Reservation request refused: {exc.code} ({exc.message})")
        return Response(exc.as_dict(), status=status_for(exc))

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, Http404):
        code = NotFound.code
    elif isinstance(exc, DjangoPermissionDenied):
        code = Forbidden.code
    elif isinstance(exc, APIException):
        code = DRF_CODES.get(exc.default_code, exc.default_code)
    else:
        code = "error"

    data = response.data
    if isinstance(data, dict) and set(data) == {"detail"}:
        response.data = {"error": code, "detail": data["detail"]}
    else:
        response.data = {"error": code, "detail": data}
    return response
