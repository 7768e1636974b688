"""
core.domain.exception_handler — DRF-compatible global exception handler.

Maps domain exceptions from ``core.domain.exceptions`` to proper
DRF ``Response`` objects so that views don't need per-endpoint
try/except boilerplate.

Registered in ``settings.py``::

    REST_FRAMEWORK = {
        ...
        'EXCEPTION_HANDLER': 'core.domain.exception_handler.domain_exception_handler',
    }
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    NotFound,
    PermissionDenied,
    StorageError,
)

logger = logging.getLogger(__name__)

# Domain exception → HTTP status code (most specific first)
_STATUS_MAP: dict[type, int] = {
    StorageError:      500,
    PermissionDenied:  403,
    NotFound:          404,
    Conflict:          409,
    DomainError:       400,  # catch-all base class last
}

GENERIC_SERVER_ERROR = "Internal server error."


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF exception handler that also handles ``core.domain.exceptions``.

    The default DRF handler is called first.  If it returns ``None``
    (meaning DRF doesn't recognise the exception), domain exceptions are
    mapped through ``_STATUS_MAP``.  Anything else is logged with its
    traceback and answered with a generic 500 so that one failing request
    never leaks internals.
    """
    response = drf_default_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view", "unknown")

    for exc_class, status_code in _STATUS_MAP.items():
        if isinstance(exc, exc_class):
            if status_code >= 500:
                logger.error(
                    "Storage failure in %s: %s",
                    view,
                    exc.__cause__ or exc,
                    exc_info=exc,
                )
            else:
                logger.warning(
                    "Domain exception [%s] in %s: %s",
                    exc_class.__name__,
                    view,
                    exc,
                )
            return Response({"detail": str(exc)}, status=status_code)

    logger.error("Unhandled exception in %s", view, exc_info=exc)
    return Response({"detail": GENERIC_SERVER_ERROR}, status=500)
