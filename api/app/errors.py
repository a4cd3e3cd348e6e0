import logging
from typing import Any, Dict, Optional

from django.db import IntegrityError
from rest_framework.views import exception_handler

from app.common.keys import t

DEFAULT_VERSION = 'v1'

logger = logging.getLogger(__name__)


def error_response(error_code: str, message: str, *, status: int = 400, meta: Optional[Dict[str, Any]] = None):
    """Return a standardized error payload structure.

    Shape:
      {"error": {"code": str, "message": str, "meta": {...}, "version": "v1"}}
    """
    from rest_framework.response import Response  # local import to avoid global DRF binding during migrations

    payload = {
        'error': {
            'code': error_code,
            'message': message,
            'version': DEFAULT_VERSION,
        }
    }
    if meta:
        payload['error']['meta'] = meta  # type: ignore[assignment]
    return Response(payload, status=status)


def api_exception_handler(exc, context):
    """DRF exception handler translating storage constraint violations to 400.

    Unique indexes are the last line of defence against raced writes (two
    registrations with the same email, duplicate memberships); everything else
    is left to DRF's default handling.
    """
    if isinstance(exc, IntegrityError):
        view = context.get('view')
        logger.warning('constraint violation in %s: %s', type(view).__name__ if view else '-', exc)
        return error_response('constraint_violation', t('violations.constraint'), status=400)
    return exception_handler(exc, context)
