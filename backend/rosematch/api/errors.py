"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rosematch.domain.discovery.exceptions import (
    ConfigurationError,
    DiscoveryError,
    InvalidState,
    ProfileNotFound,
    SessionNotFound,
)
from rosematch.obs import logging as obs_logging

_DISCOVERY_STATUS = {
    InvalidState: 409,
    ConfigurationError: 422,
    SessionNotFound: 404,
    ProfileNotFound: 404,
}


def get_request_id(request: Request) -> str:
    rid = getattr(request.state, "request_id", None)
    return rid or obs_logging.current_request_id()


def discovery_status(exc: DiscoveryError) -> int:
    for exc_type, code in _DISCOVERY_STATUS.items():
        if isinstance(exc, exc_type):
            return code
    return 400


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": exc.detail, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": "validation_error", "errors": jsonable_errors(exc), "request_id": rid}
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(DiscoveryError)
    async def discovery_exc_handler(request: Request, exc: DiscoveryError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": exc.reason, "request_id": rid}
        return JSONResponse(status_code=discovery_status(exc), content=payload)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        errors.append({"loc": list(error.get("loc", ())), "msg": str(error.get("msg", "")), "type": error.get("type")})
    return errors
