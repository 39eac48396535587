"""DRF exception handler for domain errors.

Domain errors are raised as typed exceptions all the way up to the view.
This handler turns them into JSON responses with a stable ``code`` so the
calling application can decide on user-facing messaging.
"""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

# Error code -> HTTP status. Codes not listed map to 400.
STATUS_BY_CODE = {
    "forbidden_transition": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
}


def domain_exception_handler(exc, context):  # type: ignore
    """Map DomainError subclasses to responses, defer the rest to DRF."""

    if isinstance(exc, DomainError):
        http_status = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
        view = context.get("view")
        logger.info(
            f"Domain error in {view.__class__.__name__ if view else 'unknown view'}: "
            f"{exc.code} ({exc.message})"
        )
        return Response({"detail": exc.message, "code": exc.code}, status=http_status)

    return drf_exception_handler(exc, context)
