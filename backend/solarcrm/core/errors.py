"""Domain errors raised by services and rendered by the API layer.

Services never touch HTTP; they raise one of these and the handlers
registered by ``register_exception_handlers`` turn them into ``{"error": ..., **details}``.
"""
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from solarcrm.core.logging import logger


class DomainError(Exception):
    status_code = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, **self.details}


class InvalidInputError(DomainError):
    status_code = 400


class ForbiddenError(DomainError):
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Operation not valid for the current state of the row."""

    status_code = 409

    def __init__(self, message: str, current_status: str | None = None, **details: Any):
        if current_status is not None:
            details["currentStatus"] = current_status
        super().__init__(message, **details)


class UpstreamError(DomainError):
    """An external SaaS call failed; the underlying message is logged, not returned."""

    status_code = 502


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def _domain_error(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.message, **exc.details)
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        logger.info("validation_failed", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
