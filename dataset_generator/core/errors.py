"""API error envelope and exception handler registration."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dataset_generator.schemas.error import ErrorDetail
from dataset_generator.schemas.error import ErrorObject
from dataset_generator.schemas.error import ErrorResponse
from dataset_generator.synthetic.validator import SpecValidationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base application exception for explicit API error responses."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = list(details) if details else None
        self.headers = dict(headers) if headers else None


class NotFoundError(APIError):
    """Convenience exception for missing resources."""

    def __init__(self, *, message: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, code="not_found", message=message)


class UpstreamError(APIError):
    """The spec producer failed or returned an unusable document."""

    def __init__(self, *, message: str = "Spec producer request failed") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, code="upstream_error", message=message)


class SpecProducerUnavailableError(APIError):
    """No spec was supplied and no spec producer is configured."""

    def __init__(self, *, message: str = "Spec producer is not configured; supply a spec in the request") -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="spec_producer_unavailable",
            message=message,
        )


def _build_error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: Sequence[ErrorDetail] | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(error=ErrorObject(code=code, message=message, details=list(details) if details else None))
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(exclude_none=True),
        headers=dict(headers) if headers else None,
    )


def _http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "method_not_allowed"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "validation_error"
    if status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        return "rate_limited"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return "internal_error"
    return "bad_request"


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    prefixes = {"body", "query", "path", "header", "cookie"}
    filtered = [str(part) for part in location if part not in prefixes]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


def _validation_details(exc: RequestValidationError) -> list[ErrorDetail]:
    return [
        ErrorDetail(field=_format_location(issue.get("loc", ())), issue=str(issue.get("msg", "Invalid value")))
        for issue in exc.errors()
    ]


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to the shared error envelope."""

    return _build_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        message="Request validation failed",
        details=_validation_details(exc),
    )


async def spec_validation_exception_handler(_: Request, exc: SpecValidationError) -> JSONResponse:
    """A structurally unusable DataSpec is the caller's problem, not ours."""

    return _build_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="invalid_spec",
        message=str(exc) or "Spec is invalid",
        details=[ErrorDetail(field="spec", issue=str(exc))] if str(exc) else None,
    )


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize HTTP exceptions (unknown routes, wrong methods) to the envelope."""

    message = str(exc.detail) if isinstance(exc.detail, str) and exc.detail else "Request failed"
    return _build_error_response(
        status_code=exc.status_code,
        code=_http_error_code(exc.status_code),
        message=message,
        headers=getattr(exc, "headers", None),
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Return explicit domain errors in the shared envelope."""

    return _build_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        headers=exc.headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Avoid leaking internal exceptions while keeping response shape stable."""

    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _build_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach all error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(SpecValidationError, spec_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
