"""
Unified exception handler.

Wired into DRF via REST_FRAMEWORK['EXCEPTION_HANDLER'].
The admin dashboard tells success from failure with a single rule:
  body has 'type'  → something went wrong
  no 'type' field  → success

Error envelope:
{
    "type":    "precondition" | "block" | "validation_error" | ...,
    "code":    "NIK_MISSING",
    "message": "NIK pasien belum diisi, tidak dapat transfer ke SIMRS",
    "detail":  { ... }  // optional
}
"""

import logging

from django.http import JsonResponse
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler as drf_default_handler

from .exceptions import BaseAppException

logger = logging.getLogger(__name__)


def unified_exception_handler(exc, context):
    """
    Render app errors as the dashboard envelope.

    Our own exceptions carry their type, code and status and are rendered
    as-is. Serializer rejections of the request body become a 400
    validation_error with the field errors as detail. Anything else is left
    to DRF's default handler.
    """

    if isinstance(exc, BaseAppException):
        if exc.http_status >= 500:
            logger.error("[API] %s %s: %s", exc.type, exc.code, exc.message)
        body = {
            'type': exc.type,
            'code': exc.code,
            'message': exc.message,
        }
        if exc.detail is not None:
            body['detail'] = exc.detail
        return JsonResponse(body, status=exc.http_status)

    if isinstance(exc, DRFValidationError):
        body = {
            'type': 'validation_error',
            'code': 'VALIDATION_ERROR',
            'message': 'Request validation failed',
            'detail': exc.detail,
        }
        return JsonResponse(body, status=400)

    return drf_default_handler(exc, context)
