"""Global error handlers mapping domain errors to HTTP responses.

Every JSON error body carries ``detail`` (a stable reason string), ``kind``
and the ``request_id`` of the failing request.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hackmate.api.request_id import get_request_id
from hackmate.domain.common.errors import CoreError, ErrorKind
from hackmate.infra.rate_limit import RateLimitExceeded

logger = logging.getLogger(__name__)

INFRA_RETRY_AFTER_SECONDS = 1

STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.TOO_MANY_REQUESTS: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.INFRA_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}

_KIND_BY_STATUS = {
    status.HTTP_401_UNAUTHORIZED: ErrorKind.UNAUTHENTICATED,
    status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorKind.CONFLICT,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorKind.TOO_MANY_REQUESTS,
}


def core_error_response(request: Request, exc: CoreError) -> JSONResponse:
    rid = get_request_id(request)
    status_code = STATUS_BY_KIND[exc.kind]
    headers = {"X-Request-Id": rid}
    if exc.kind is ErrorKind.UNAUTHENTICATED:
        headers["WWW-Authenticate"] = "Bearer"
    elif isinstance(exc, RateLimitExceeded) and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    elif exc.kind is ErrorKind.INFRA_ERROR:
        headers["Retry-After"] = str(INFRA_RETRY_AFTER_SECONDS)
        logger.warning("infra_error", extra={"reason": exc.reason})
    payload = {"detail": exc.reason, "kind": exc.kind.value, "request_id": rid}
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CoreError)
    async def core_exc_handler(request: Request, exc: CoreError):  # type: ignore[override]
        return core_error_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        kind = _KIND_BY_STATUS.get(exc.status_code, ErrorKind.INVALID_REQUEST)
        payload = {"detail": exc.detail, "kind": kind.value, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {
            "detail": "validation_error",
            "kind": ErrorKind.INVALID_REQUEST.value,
            "errors": jsonable_errors(exc),
            "request_id": rid,
        }
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        errors.append({"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")})
    return errors
