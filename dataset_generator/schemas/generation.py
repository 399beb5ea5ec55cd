"""Pydantic schemas for generated tables, quality reports and API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from typing import Any
from typing import Literal
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StringConstraints
from pydantic import field_validator

from dataset_generator.db.models.generation_run import GenerationStatusEnum

SchemaType = Literal["OBT", "Star Schema"]
ExportFormat = Literal["csv", "sql"]
Year = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\d{4}$")]

MIN_YEAR = 1
# The simulated window must end before datetime.max.
MAX_YEAR = 9998


class TableData(BaseModel):
    """A named, typed table of generated rows."""

    name: str
    type: Literal["fact", "dim"]
    columns: list[str]
    rows: list[dict[str, Any]]


class GeneratedData(BaseModel):
    """All tables produced by one generation run."""

    tables: list[TableData]


class DateRange(BaseModel):
    earliest: str
    latest: str


class QualityStats(BaseModel):
    total_rows: int = 0
    business_type: str = ""
    unique_events: int = 0
    date_range: DateRange | None = None


class QualityReport(BaseModel):
    """Advisory findings for a generated event stream."""

    issues: list[str]
    warnings: list[str]
    stats: QualityStats
    is_valid: bool
    quality_score: int


class GenerateRequest(BaseModel):
    """Payload to generate a synthetic dataset."""

    business_type: str = Field(min_length=1)
    schema_type: SchemaType = "OBT"
    row_count: int = Field(ge=1, le=100_000)
    time_range: list[Year] = Field(default_factory=list, max_length=50)
    growth_pattern: str = Field(min_length=1)
    variation_level: str = Field(min_length=1)
    granularity: str = Field(min_length=1)
    context: str | None = None
    is_preview: bool = False
    seed: int | None = None
    spec: dict[str, Any] | None = None

    @field_validator("time_range")
    @classmethod
    def _years_in_range(cls, value: list[str]) -> list[str]:
        for year in value:
            if not MIN_YEAR <= int(year) <= MAX_YEAR:
                raise ValueError(f"year {year} must be between {MIN_YEAR:04d} and {MAX_YEAR}")
        return value


class GenerateResponse(BaseModel):
    """Generated tables plus the spec and diagnostics that produced them."""

    data: GeneratedData
    spec: dict[str, Any]
    quality: QualityReport
    cached: bool
    seed: int
    run_id: UUID | None = None


class ExportRequest(BaseModel):
    """Payload to render one generated table as CSV or SQL text."""

    table: TableData
    format: ExportFormat = "csv"


class CacheStats(BaseModel):
    file_count: int
    total_size_mb: float
    oldest_file: datetime | None = None
    newest_file: datetime | None = None


class CacheClearResponse(BaseModel):
    deleted: int


class GenerationRunRead(BaseModel):
    """Audit row for one generate call."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    business_type: str
    schema_type: str
    status: GenerationStatusEnum
    spec_source: str
    spec_hash: str | None = None
    seed: int
    is_preview: bool
    row_count_requested: int
    row_count_generated: int
    quality_score: int | None = None
    quality: dict[str, Any] | None = None
    tables: list[dict[str, Any]] | None = None
    error_message: str | None = None
    created_at: datetime


class GenerationRunListResponse(BaseModel):
    """List response envelope for generation runs."""

    items: list[GenerationRunRead]
