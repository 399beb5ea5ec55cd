"""Dataset generation, export and audit routes."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from dataset_generator.api.dependencies import get_persistence_session_factory
from dataset_generator.api.dependencies import get_spec_cache
from dataset_generator.api.dependencies import get_spec_client
from dataset_generator.core.config import GeneratorSettings
from dataset_generator.core.config import get_settings
from dataset_generator.core.rate_limit import enforce_rate_limit
from dataset_generator.db.base import get_db_session
from dataset_generator.llm.client import SpecGenerationClient
from dataset_generator.schemas.error import error_responses
from dataset_generator.schemas.generation import ExportRequest
from dataset_generator.schemas.generation import GenerateRequest
from dataset_generator.schemas.generation import GenerateResponse
from dataset_generator.schemas.generation import GenerationRunListResponse
from dataset_generator.schemas.generation import GenerationRunRead
from dataset_generator.services.export import to_csv
from dataset_generator.services.export import to_sql
from dataset_generator.services.generation import SessionFactory
from dataset_generator.services.generation import generate_dataset_service
from dataset_generator.services.generation import get_generation_run_service
from dataset_generator.services.generation import list_generation_runs_service
from dataset_generator.services.spec_cache import SpecCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["datasets"])


@router.post(
    "/datasets/generate",
    response_model=GenerateResponse,
    responses=error_responses(400, 422, 429, 502, 503),
    dependencies=[Depends(enforce_rate_limit)],
)
def generate_dataset_endpoint(
    payload: GenerateRequest,
    cache: SpecCache = Depends(get_spec_cache),
    spec_client: SpecGenerationClient | None = Depends(get_spec_client),
    session_factory: SessionFactory | None = Depends(get_persistence_session_factory),
    settings: GeneratorSettings = Depends(get_settings),
) -> GenerateResponse:
    """Generate a synthetic dataset for a business scenario."""
    logger.info(
        "Starting generation business_type=%s schema_type=%s row_count=%s preview=%s",
        payload.business_type,
        payload.schema_type,
        payload.row_count,
        payload.is_preview,
    )
    logger.debug("Generation settings=%s", settings.safe_for_logging())
    response = generate_dataset_service(
        payload,
        cache=cache,
        spec_client=spec_client,
        session_factory=session_factory,
        analytics_schema=settings.analytics_schema,
    )
    logger.info(
        "Completed generation seed=%s cached=%s quality_score=%s",
        response.seed,
        response.cached,
        response.quality.quality_score,
    )
    return response


@router.post("/datasets/export", response_class=PlainTextResponse, responses=error_responses(400))
def export_dataset_endpoint(payload: ExportRequest) -> PlainTextResponse:
    """Render one generated table as CSV or SQL text."""
    if payload.format == "sql":
        body = to_sql(payload.table.rows, payload.table.name)
    else:
        body = to_csv(payload.table.rows)
    return PlainTextResponse(body)


@router.get("/datasets/runs", response_model=GenerationRunListResponse)
def list_generation_runs_endpoint(
    business_type: str | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    session: Session = Depends(get_db_session),
) -> GenerationRunListResponse:
    """List recent generation runs."""
    runs = list_generation_runs_service(session, business_type=business_type, limit=limit)
    return GenerationRunListResponse(items=runs)


@router.get("/datasets/runs/{run_id}", response_model=GenerationRunRead, responses=error_responses(404))
def get_generation_run_endpoint(
    run_id: UUID,
    session: Session = Depends(get_db_session),
) -> GenerationRunRead:
    """Get one generation run."""
    return get_generation_run_service(session, run_id)
