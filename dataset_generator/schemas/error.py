"""Error envelope returned by every failing API route."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import Field


class ErrorDetail(BaseModel):
    """One offending input: a request field path, or ``spec`` for DataSpec problems."""

    field: str = Field(examples=["row_count", "spec"])
    issue: str


class ErrorObject(BaseModel):
    code: str = Field(examples=["validation_error", "invalid_spec", "rate_limited"])
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """``{"error": {...}}`` wrapper."""

    error: ErrorObject


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` entries documenting the envelope for ``status_codes``."""
    descriptions = {
        400: "Request validation failed",
        404: "Resource not found",
        422: "The DataSpec is structurally unusable",
        429: "Rate limit exceeded",
        502: "The spec producer failed",
        503: "No spec supplied and no spec producer configured",
    }
    return {
        code: {"model": ErrorResponse, "description": descriptions.get(code, "Error")}
        for code in status_codes
    }
