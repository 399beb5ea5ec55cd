"""Repository primitives for generation audit rows."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select
from sqlalchemy import desc
from sqlalchemy import select
from sqlalchemy.orm import Session

from dataset_generator.db.models.generation_run import GenerationRun
from dataset_generator.db.models.generation_run import GenerationStatusEnum
from dataset_generator.db.models.generation_run import SpecSourceEnum


def create_generation_run(
    session: Session,
    *,
    business_type: str,
    schema_type: str,
    status: GenerationStatusEnum | str,
    spec_source: SpecSourceEnum | str,
    seed: int,
    row_count_requested: int,
    row_count_generated: int = 0,
    is_preview: bool = False,
    spec_hash: str | None = None,
    quality_score: int | None = None,
    quality: dict | None = None,
    tables: list | None = None,
    error_message: str | None = None,
) -> GenerationRun:
    """Create and return a generation audit row."""
    source_value = spec_source.value if isinstance(spec_source, SpecSourceEnum) else spec_source

    run = GenerationRun(
        business_type=business_type,
        schema_type=schema_type,
        status=GenerationStatusEnum(status),
        spec_source=source_value,
        spec_hash=spec_hash,
        seed=seed,
        is_preview=is_preview,
        row_count_requested=row_count_requested,
        row_count_generated=row_count_generated,
        quality_score=quality_score,
        quality=quality,
        tables=tables,
        error_message=error_message,
    )
    session.add(run)
    session.flush()
    session.refresh(run)
    return run


def get_generation_run(session: Session, run_id: UUID) -> GenerationRun | None:
    """Fetch a generation run by id."""
    return session.get(GenerationRun, run_id)


def list_generation_runs(
    session: Session,
    *,
    business_type: str | None = None,
    limit: int = 50,
) -> list[GenerationRun]:
    """List the most recent generation runs, newest first."""
    stmt: Select[tuple[GenerationRun]] = select(GenerationRun)
    if business_type is not None:
        stmt = stmt.where(GenerationRun.business_type == business_type)
    stmt = stmt.order_by(desc(GenerationRun.created_at), desc(GenerationRun.id)).limit(limit)
    return list(session.scalars(stmt))
