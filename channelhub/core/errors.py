"""
Error taxonomy.

Two layers:
- Store errors (``DataError`` and subclasses) are raised by the persistence
  layer in ``channelhub.store``.
- API errors (``ApiError`` and subclasses) are what routes surface. Each kind
  has one fixed HTTP status and a stable error code.

``STORE_ERROR_MAP`` is the only place store errors become API errors.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------

class DataError(Exception):
    """Base class for persistence failures."""


class DataNotFound(DataError):
    pass


class DataAlreadyExists(DataError):
    pass


class DataInternalError(DataError):
    pass


# ---------------------------------------------------------------------------
# API errors
# ---------------------------------------------------------------------------

class ApiError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ApiError):
    """No session, or an invalid or expired one."""

    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class InvalidCredentials(Unauthorized):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid identifier or secret"


class Forbidden(ApiError):
    """Authenticated member whose role does not allow the action."""

    status_code = 403
    code = "FORBIDDEN"
    default_message = "Administrator access required"


class NotFound(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class InternalServerError(ApiError):
    pass


STORE_ERROR_MAP: dict[type[DataError], type[ApiError]] = {
    DataNotFound: NotFound,
    DataAlreadyExists: Conflict,
    DataInternalError: InternalServerError,
}


def to_api_error(exc: DataError, messages: Optional[dict] = None) -> ApiError:
    """Translate a store error through ``STORE_ERROR_MAP``.

    ``messages`` optionally maps a store error class to the message the
    resulting API error should carry, e.g. ``{DataNotFound: "Channel not found"}``.
    Internal errors always keep the generic message.
    """
    api_cls = InternalServerError
    for data_cls in type(exc).__mro__:
        if data_cls in STORE_ERROR_MAP:
            api_cls = STORE_ERROR_MAP[data_cls]
            break
    message = None
    if messages and api_cls is not InternalServerError:
        message = messages.get(type(exc))
    return api_cls(message)


@contextmanager
def map_store_errors(**messages: str) -> Iterator[None]:
    """Re-raise store errors from the enclosed block as API errors.

    Keyword arguments give per-kind messages: ``not_found``, ``already_exists``.
    """
    by_cls = {}
    if "not_found" in messages:
        by_cls[DataNotFound] = messages["not_found"]
    if "already_exists" in messages:
        by_cls[DataAlreadyExists] = messages["already_exists"]
    try:
        yield
    except DataError as exc:
        api_exc = to_api_error(exc, by_cls)
        if isinstance(api_exc, InternalServerError):
            log.error("store.internal_error", error=repr(exc))
        raise api_exc from exc


# ---------------------------------------------------------------------------
# HTTP rendering
# ---------------------------------------------------------------------------

def error_body(exc: ApiError) -> dict:
    return {
        "error": {
            "code": exc.code,
            "message": exc.message,
            "status": exc.status_code,
        }
    }


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
