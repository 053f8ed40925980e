"""
DRF exception handler for the domain error taxonomy.

Domain errors are rendered as ``{"code": ..., "detail": ...}`` with an
HTTP status chosen by error class; everything else falls through to the
stock DRF handler (and unhandled exceptions to Django's 500 handling).
"""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain import errors

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    errors.InvalidRange: status.HTTP_400_BAD_REQUEST,
    errors.CapacityExceeded: status.HTTP_400_BAD_REQUEST,
    errors.InvalidAmount: status.HTTP_400_BAD_REQUEST,
    errors.InvalidRequest: status.HTTP_400_BAD_REQUEST,
    errors.Forbidden: status.HTTP_403_FORBIDDEN,
    errors.NotFound: status.HTTP_404_NOT_FOUND,
    errors.DateConflict: status.HTTP_409_CONFLICT,
    errors.StaleTransition: status.HTTP_409_CONFLICT,
    errors.ReviewAlreadySubmitted: status.HTTP_409_CONFLICT,
}


def status_for(exc: errors.DomainError) -> int:
    for error_class in type(exc).__mro__:
        if error_class in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_class]
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context):
    if isinstance(exc, errors.DomainError):
        view = context.get('view')
        logger.info(
            f"Domain error {exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response(exc.to_dict(), status=status_for(exc))
    return drf_exception_handler(exc, context)
