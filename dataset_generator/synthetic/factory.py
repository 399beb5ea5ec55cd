"""End-to-end generation pipeline: spec -> entities -> events -> enforced tables."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
import logging
from typing import Any

from dataset_generator.schemas.data_spec import DataSpec
from dataset_generator.schemas.generation import GeneratedData
from dataset_generator.schemas.generation import QualityReport
from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.enforcers import enforce_healthcare_rules
from dataset_generator.synthetic.enforcers import enforce_numeric_fields
from dataset_generator.synthetic.enforcers import enforce_realistic_defaults
from dataset_generator.synthetic.enforcers import remove_pre_aggregated_values
from dataset_generator.synthetic.enforcers import sanitize_placeholder_values
from dataset_generator.synthetic.entities import DataRecord
from dataset_generator.synthetic.entities import generate_entities
from dataset_generator.synthetic.formatter import format_as_table
from dataset_generator.synthetic.formatter import generate_dimension_tables
from dataset_generator.synthetic.simulator import EventStream
from dataset_generator.synthetic.simulator import simulate_events
from dataset_generator.synthetic.validator import fill_spec_defaults
from dataset_generator.synthetic.validator import parse_spec
from dataset_generator.synthetic.validator import validate_data_quality
from dataset_generator.synthetic.verticals import enforce_vertical_rules

logger = logging.getLogger(__name__)

STAR_SCHEMA = "Star Schema"


class DataFactory:
    """Generate tables for one DataSpec.

    The spec is validated and default-filled once at construction; raises
    `SpecValidationError` when it is structurally unusable. Every call to
    `generate` draws from the factory's own `GenerationContext`.
    """

    def __init__(
        self,
        spec: DataSpec | Mapping[str, Any],
        *,
        business_type: str = "",
        seed: int | None = None,
        now: datetime | None = None,
    ) -> None:
        parsed = spec if isinstance(spec, DataSpec) else parse_spec(spec)
        self.spec = fill_spec_defaults(parsed)
        self.business_type = business_type
        self.ctx = GenerationContext(seed=seed, now=now)
        self.last_event_stream: EventStream = []

    @property
    def seed(self) -> int:
        return self.ctx.seed

    def enforce_record(self, record: DataRecord) -> DataRecord:
        ctx = self.ctx
        record = sanitize_placeholder_values(record, ctx=ctx)
        record = enforce_numeric_fields(record, ctx=ctx)
        record = enforce_realistic_defaults(record, ctx=ctx)
        record = enforce_vertical_rules(record, self.business_type, ctx=ctx)
        record = enforce_healthcare_rules(record, ctx=ctx)
        return remove_pre_aggregated_values(record)

    def generate(self, row_count: int, time_range: Sequence[str], schema_type: str | None = None) -> GeneratedData:
        entities = generate_entities(self.spec, row_count, self.ctx)
        stream = simulate_events(self.spec, entities, row_count, time_range, self.ctx)
        self.last_event_stream = [self.enforce_record(record) for record in stream]

        tables = [format_as_table(self.spec, self.last_event_stream)]
        if schema_type == STAR_SCHEMA:
            tables.extend(generate_dimension_tables(entities))

        logger.info(
            "Generated dataset: rows=%s tables=%s seed=%s",
            len(self.last_event_stream),
            len(tables),
            self.ctx.seed,
        )
        return GeneratedData(tables=tables)

    def quality_report(self) -> QualityReport:
        return validate_data_quality(self.last_event_stream, now=self.ctx.now)
