# cancelflow/web/errors.py
from __future__ import annotations
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cancelflow.core.errors import CancellationError

log = logging.getLogger("cancelflow.errors")


def _rid(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


def _error(code: str, detail, rid: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        {"ok": False, "error": code, "detail": detail, "rid": rid},
        status_code=status_code,
    )


async def cancellation_error_handler(request: Request, exc: CancellationError):
    rid = _rid(request)
    if exc.status_code >= 500:
        log.error("%s path=%s detail=%s", exc.code, request.url.path, exc.detail, extra={"rid": rid})
    else:
        log.warning("%s path=%s detail=%s", exc.code, request.url.path, exc.detail, extra={"rid": rid})
    return _error(exc.code, exc.detail, rid, exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # malformed JSON or wrong field types are the caller's problem: 400, not 422
    rid = _rid(request)
    log.warning("validation_error path=%s detail=%s", request.url.path, exc.errors(), extra={"rid": rid})
    return _error("validation_error", "Invalid request body", rid, 400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _rid(request)
    log.error(
        "unhandled_exception path=%s error=%s",
        request.url.path,
        exc,
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"rid": rid},
    )
    # no internals leak to the client, only the request id
    resp = _error("internal_error", "Internal server error", rid, 500)
    # served outside LoggingMiddleware, so the header is set here
    resp.headers["x-request-id"] = rid
    return resp
