# invoicing/api/exception_handler.py

"""
API ERROR MAPPING (SINGLE PLACE)

EngineError.kind -> HTTP status. Response body is always:

    {"code": "<STABLE_CODE>", "detail": "<message>", "details": {...}}

Anything that is not an EngineError falls through to DRF's default handler.
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from common.exceptions import EngineError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STATE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.RESOURCE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONSISTENCY: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def engine_exception_handler(exc, context):
    if not isinstance(exc, EngineError):
        return exception_handler(exc, context)

    http_status = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)

    view = context.get("view")
    logger.info(
        "Engine error returned to client",
        extra={
            "code": exc.code,
            "kind": exc.kind.value,
            "status": http_status,
            "view": view.__class__.__name__ if view is not None else None,
        },
    )

    response = Response(exc.as_dict(), status=http_status)
    if http_status == status.HTTP_503_SERVICE_UNAVAILABLE:
        response["Retry-After"] = "1"
    return response
