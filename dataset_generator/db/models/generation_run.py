"""SQLAlchemy model for dataset generation audit rows."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger
from sqlalchemy import Boolean
from sqlalchemy import CheckConstraint
from sqlalchemy import DateTime
from sqlalchemy import Integer
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import text
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column


class Base(DeclarativeBase):
    """Declarative base for dataset generator ORM models."""


class GenerationStatusEnum(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SpecSourceEnum(str, Enum):
    REQUEST = "request"
    CACHE = "cache"
    PRODUCER = "producer"


class GenerationRun(Base):
    """One call to the generate endpoint and what it produced."""

    __tablename__ = "generation_runs"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_generation_runs"),
        CheckConstraint("row_count_requested >= 1", name="ck_generation_runs_row_count_requested_positive"),
        CheckConstraint("row_count_generated >= 0", name="ck_generation_runs_row_count_generated_non_negative"),
        CheckConstraint(
            "spec_source IN ('request', 'cache', 'producer')",
            name="ck_generation_runs_spec_source",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    business_type: Mapped[str] = mapped_column(String(255), nullable=False)
    schema_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[GenerationStatusEnum] = mapped_column(
        postgresql.ENUM(
            GenerationStatusEnum,
            name="generation_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            create_type=False,
        ),
        nullable=False,
    )
    spec_source: Mapped[str] = mapped_column(String(16), nullable=False)
    spec_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    seed: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_preview: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    row_count_requested: Mapped[int] = mapped_column(Integer, nullable=False)
    row_count_generated: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    quality_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quality: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    tables: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
