import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.errors import ServiceError
from core.messages import ErrorMessage

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> Response:
    return Response(
        {
            "detail": message,
            "code": code,
            "errors": [
                {
                    "code": code,
                    "message": detail or message,
                }
            ],
        },
        status=status_code,
    )


def exception_handler(exc, context):
    # ---------- Service errors ----------
    if isinstance(exc, ServiceError):
        if not exc.is_client_error:
            logger.error("Internal service error: %s (%s)", exc.message, exc.detail)
        detail = exc.detail if exc.is_client_error else None
        return _error_response(exc.status_code, exc.error_code, exc.message, detail)

    # ---------- Database errors ----------
    if isinstance(exc, DatabaseError):
        logger.exception("Unhandled database error: %s", exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "database_error",
            ErrorMessage.DATABASE_FAILURE,
        )

    return drf_exception_handler(exc, context)
