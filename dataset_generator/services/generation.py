"""Service helpers for the dataset generation routes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import hashlib
import json
import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dataset_generator.core.errors import NotFoundError
from dataset_generator.core.errors import SpecProducerUnavailableError
from dataset_generator.core.errors import UpstreamError
from dataset_generator.db.analytics import load_generated_tables
from dataset_generator.db.models.generation_run import GenerationRun
from dataset_generator.db.models.generation_run import GenerationStatusEnum
from dataset_generator.db.models.generation_run import SpecSourceEnum
from dataset_generator.db.repository.generation_runs import create_generation_run
from dataset_generator.db.repository.generation_runs import get_generation_run
from dataset_generator.db.repository.generation_runs import list_generation_runs
from dataset_generator.llm.client import SpecClientError
from dataset_generator.llm.client import SpecGenerationClient
from dataset_generator.llm.prompts import SpecPromptParams
from dataset_generator.schemas.generation import GenerateRequest
from dataset_generator.schemas.generation import GenerateResponse
from dataset_generator.schemas.generation import GeneratedData
from dataset_generator.schemas.generation import QualityReport
from dataset_generator.services.spec_cache import SpecCache
from dataset_generator.synthetic.factory import DataFactory
from dataset_generator.synthetic.validator import SpecValidationError
from dataset_generator.synthetic.validator import validate_spec

logger = logging.getLogger(__name__)

PREVIEW_ROW_COUNT = 10

SessionFactory = Callable[[], Session]


@dataclass(frozen=True)
class ResolvedSpec:
    """A raw DataSpec document and where it came from."""

    document: dict[str, Any]
    source: SpecSourceEnum
    spec_hash: str

    @property
    def cached(self) -> bool:
        return self.source is SpecSourceEnum.CACHE


def spec_hash(document: dict[str, Any]) -> str:
    encoded = json.dumps(document, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def prompt_params(payload: GenerateRequest) -> SpecPromptParams:
    return SpecPromptParams(
        business_type=payload.business_type,
        schema_type=payload.schema_type,
        time_range=list(payload.time_range),
        growth_pattern=payload.growth_pattern,
        variation_level=payload.variation_level,
        granularity=payload.granularity,
        context=payload.context,
    )


def resolve_spec(
    payload: GenerateRequest,
    *,
    cache: SpecCache,
    spec_client: SpecGenerationClient | None,
) -> ResolvedSpec:
    """Use the request's spec, else a cached one, else ask the spec producer.

    Produced specs are validated before they are cached so a broken document
    is never served twice.
    """
    if payload.spec is not None:
        return ResolvedSpec(document=payload.spec, source=SpecSourceEnum.REQUEST, spec_hash=spec_hash(payload.spec))

    params = prompt_params(payload)
    key = params.cache_key()
    cached = cache.get(key)
    if cached is not None:
        logger.info("Using cached spec key=%s business_type=%s", key, payload.business_type)
        return ResolvedSpec(document=cached, source=SpecSourceEnum.CACHE, spec_hash=key)

    if spec_client is None:
        raise SpecProducerUnavailableError()

    try:
        document = spec_client.generate_spec(params)
    except SpecClientError as exc:
        logger.warning("Spec producer failed for business_type=%s: %s", payload.business_type, exc)
        raise UpstreamError(message=f"Spec producer request failed: {exc}") from exc

    validate_spec(document)
    cache.put(key, document)
    return ResolvedSpec(document=document, source=SpecSourceEnum.PRODUCER, spec_hash=key)


def _table_summaries(data: GeneratedData) -> list[dict[str, Any]]:
    return [
        {"name": table.name, "type": table.type, "columns": table.columns, "row_count": len(table.rows)}
        for table in data.tables
    ]


def persist_generation(
    session_factory: SessionFactory,
    *,
    payload: GenerateRequest,
    resolved: ResolvedSpec,
    seed: int,
    analytics_schema: str | None,
    data: GeneratedData | None = None,
    quality: QualityReport | None = None,
    error_message: str | None = None,
) -> UUID | None:
    """Load generated tables and write the audit row in one transaction.

    Failures are logged and reported as ``None``; the generated dataset is
    still returned to the caller.
    """
    row_count_generated = sum(len(table.rows) for table in data.tables) if data is not None else 0
    try:
        with session_factory() as session, session.begin():
            if data is not None:
                load_generated_tables(session.connection(), data, schema=analytics_schema)
            run = create_generation_run(
                session,
                business_type=payload.business_type,
                schema_type=payload.schema_type,
                status=GenerationStatusEnum.FAILED if error_message else GenerationStatusEnum.SUCCEEDED,
                spec_source=resolved.source,
                spec_hash=resolved.spec_hash,
                seed=seed,
                is_preview=payload.is_preview,
                row_count_requested=payload.row_count,
                row_count_generated=row_count_generated,
                quality_score=quality.quality_score if quality is not None else None,
                quality=quality.model_dump(mode="json") if quality is not None else None,
                tables=_table_summaries(data) if data is not None else None,
                error_message=error_message,
            )
            run_id = run.id
    except SQLAlchemyError:
        logger.exception("Persisting generation for business_type=%s failed", payload.business_type)
        return None

    logger.info("Persisted generation run_id=%s", run_id)
    return run_id


def generate_dataset_service(
    payload: GenerateRequest,
    *,
    cache: SpecCache,
    spec_client: SpecGenerationClient | None,
    session_factory: SessionFactory | None = None,
    analytics_schema: str | None = None,
) -> GenerateResponse:
    """Resolve a spec, generate the tables and score them.

    ``session_factory`` is only given when persistence is enabled; previews
    are never persisted.
    """
    resolved = resolve_spec(payload, cache=cache, spec_client=spec_client)
    row_count = PREVIEW_ROW_COUNT if payload.is_preview else payload.row_count
    persist = session_factory is not None and not payload.is_preview

    try:
        factory = DataFactory(resolved.document, business_type=payload.business_type, seed=payload.seed)
    except SpecValidationError as exc:
        if persist:
            persist_generation(
                session_factory,
                payload=payload,
                resolved=resolved,
                seed=payload.seed or 0,
                analytics_schema=analytics_schema,
                error_message=str(exc),
            )
        raise

    data = factory.generate(row_count, payload.time_range, payload.schema_type)
    quality = factory.quality_report()

    run_id = None
    if persist:
        run_id = persist_generation(
            session_factory,
            payload=payload,
            resolved=resolved,
            seed=factory.seed,
            analytics_schema=analytics_schema,
            data=data,
            quality=quality,
        )

    return GenerateResponse(
        data=data,
        spec=factory.spec.model_dump(mode="json", exclude_none=True),
        quality=quality,
        cached=resolved.cached,
        seed=factory.seed,
        run_id=run_id,
    )


def list_generation_runs_service(
    session: Session,
    *,
    business_type: str | None = None,
    limit: int = 50,
) -> list[GenerationRun]:
    """List recent generation audit rows."""
    return list_generation_runs(session, business_type=business_type, limit=limit)


def get_generation_run_service(session: Session, run_id: UUID) -> GenerationRun:
    """Fetch one generation audit row or raise 404."""
    run = get_generation_run(session, run_id)
    if run is None:
        raise NotFoundError(message="Generation run not found")
    return run
