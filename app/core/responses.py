"""
Helpers for turning application errors into DRF responses.

Usage:
    from core.responses import error_response

    try:
        result = IntentService.create_intent(...)
    except BaseApplicationError as e:
        return error_response(e)
"""

from __future__ import annotations

from django.conf import settings
from rest_framework.response import Response

from core.exceptions import BaseApplicationError, InternalError


def error_payload(exc: BaseApplicationError) -> dict:
    """
    Response body for an application error.

    InternalError messages are replaced with a generic one unless DEBUG
    is on, in which case the original message is exposed as "detail".
    """
    if isinstance(exc, InternalError):
        body = {"error": "Internal server error", "error_code": exc.error_code}
        if settings.DEBUG:
            body["detail"] = exc.message
        return body
    return exc.to_dict()


def error_response(exc: BaseApplicationError) -> Response:
    """Build a DRF Response from an application error."""
    return Response(error_payload(exc), status=exc.http_status)


def serializer_error_response(errors: dict, message: str = "Invalid data") -> Response:
    """Build a 400 Response from DRF serializer errors."""
    return Response(
        {
            "error": message,
            "error_code": "VALIDATION_ERROR",
            "details": errors,
        },
        status=400,
    )
