from __future__ import annotations

import functools
import logging
from enum import Enum

from django.db import DatabaseError

from core.messages import ErrorMessage

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal_error"


class ServiceError(Exception):
    """
    Categorized failure raised by the service layer.

    ``kind`` tells callers whether the request was at fault (bad request, not
    found, conflict, forbidden) or the system was (internal error). ``detail``
    keeps the underlying diagnostic message when a lower-level error was wrapped.
    """

    kind: ErrorKind
    status_code: int
    error_code: str
    message: str

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        if message:
            self.message = message
        self.detail = detail
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return self.kind is not ErrorKind.INTERNAL


class BadRequest(ServiceError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400
    error_code = "bad_request"
    message = ErrorMessage.BAD_REQUEST


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    error_code = "not_found"
    message = ErrorMessage.NOT_FOUND


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    error_code = "conflict"
    message = ErrorMessage.CONFLICT


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403
    error_code = "forbidden"
    message = ErrorMessage.ACCESS_DENIED


class InternalError(ServiceError):
    kind = ErrorKind.INTERNAL
    status_code = 500
    error_code = "internal_error"
    message = ErrorMessage.SERVER_ERROR


def translate_storage_errors(message: str):
    """
    Re-raise database failures from the wrapped call as ``InternalError``.

    Service errors pass through untouched so their category survives.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DatabaseError as exc:
                logger.exception("%s: %s", message, exc)
                raise InternalError(message, detail=str(exc)) from exc

        return wrapper

    return decorator
