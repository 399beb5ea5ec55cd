"""Day-by-day discrete event simulation over the main entity pool."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from datetime import timedelta
import logging
import re
from typing import Any

from dataset_generator.schemas.data_spec import ChoiceSource
from dataset_generator.schemas.data_spec import ChurnEvent
from dataset_generator.schemas.data_spec import ColumnSpec
from dataset_generator.schemas.data_spec import ConditionalSource
from dataset_generator.schemas.data_spec import DataSpec
from dataset_generator.schemas.data_spec import EventNameSource
from dataset_generator.schemas.data_spec import EventSpec
from dataset_generator.schemas.data_spec import IdSource
from dataset_generator.schemas.data_spec import InitialEvent
from dataset_generator.schemas.data_spec import LiteralSource
from dataset_generator.schemas.data_spec import LookupSource
from dataset_generator.schemas.data_spec import RandomEvent
from dataset_generator.schemas.data_spec import RecurringEvent
from dataset_generator.schemas.data_spec import ReferenceSource
from dataset_generator.schemas.data_spec import TimestampSource
from dataset_generator.synthetic.context import UTC
from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.context import start_of_day
from dataset_generator.synthetic.context import to_iso_utc
from dataset_generator.synthetic.entities import DataRecord
from dataset_generator.synthetic.entities import EntityCollection
from dataset_generator.synthetic.faker_utils import fallback_for_column

logger = logging.getLogger(__name__)

EventStream = list[DataRecord]

DAY = timedelta(days=1)
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
MAX_SIMULATION_DAYS = 20 * DAYS_PER_YEAR

_PRICE_PATTERN = re.compile(r"price\((\d+),\s*(\d+)\)")
_INT_PATTERN = re.compile(r"int\((\d+),\s*(\d+)\)")
_NUMERIC_LITERAL = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$")

MONTHLY_CYCLES = frozenset({"monthly"})
ANNUAL_CYCLES = frozenset({"annual", "annually", "yearly"})


@dataclass
class Lifecycle:
    """Simulation-only state for one main-entity instance: Unborn -> Active -> Churned."""

    born_at: datetime
    active: bool = False
    churned: bool = False

    @property
    def birth_day(self) -> datetime:
        return start_of_day(self.born_at)


def simulation_window(time_range: Sequence[str], *, now: datetime) -> tuple[datetime, int]:
    """Return the UTC start instant and number of simulated days."""
    start_year = int(time_range[0]) if time_range else now.year
    years = int(time_range[-1]) - start_year + 1 if len(time_range) > 1 else 1
    days = max(years, 1) * DAYS_PER_YEAR
    if days > MAX_SIMULATION_DAYS:
        logger.debug("Clamping simulation window from %s to %s days", days, MAX_SIMULATION_DAYS)
        days = MAX_SIMULATION_DAYS
    return datetime(start_year, 1, 1, tzinfo=UTC), days


def _number_literal(text: str) -> int | float:
    number = float(text)
    return int(number) if number.is_integer() else number


def resolve_literal(value: Any, ctx: GenerationContext) -> Any:
    """Evaluate a literal: ``price(a,b)`` / ``int(a,b)`` ranges, numeric strings, constants."""
    if isinstance(value, str):
        match = _PRICE_PATTERN.search(value) or _INT_PATTERN.search(value)
        if match:
            return ctx.randint(int(match.group(1)), int(match.group(2)))
        if not value.strip():
            return 0
        if _NUMERIC_LITERAL.match(value):
            return _number_literal(value)
        return value
    if isinstance(value, (dict, list)):
        return ctx.randint(10, 1000)
    return value if value is not None else 0


class EventSimulator:
    """Walk simulated days and emit event records for the main entity pool."""

    def __init__(self, spec: DataSpec, ctx: GenerationContext) -> None:
        self.spec = spec
        self.ctx = ctx
        self.main_entity = spec.entities[0].name

    def simulate(self, entities: EntityCollection, row_count: int, time_range: Sequence[str]) -> EventStream:
        stream: EventStream = []
        main_instances = entities.get(self.main_entity, [])
        start, days = simulation_window(time_range, now=self.ctx.now)
        end = start + days * DAY

        lifecycles = [Lifecycle(born_at=self.ctx.between(start, end)) for _ in main_instances]
        initial_event = self.spec.simulation.initial_event
        events = self.spec.simulation.events

        for day in range(days):
            if len(stream) >= row_count:
                break
            current = start + day * DAY

            for instance, lifecycle in zip(main_instances, lifecycles):
                if len(stream) >= row_count:
                    break
                if lifecycle.churned or current < lifecycle.birth_day:
                    continue

                if current == lifecycle.birth_day:
                    record = self.create_event_record(initial_event, instance, current, entities)
                    if record is not None:
                        stream.append(record)
                        lifecycle.active = True

                if not lifecycle.active:
                    continue

                for event_name, event_spec in events.items():
                    if len(stream) >= row_count:
                        break
                    record = self._simulate_event(event_name, event_spec, instance, lifecycle, current, entities)
                    if record is not None:
                        stream.append(record)
                    if lifecycle.churned:
                        break

        return stream[:row_count]

    def _simulate_event(
        self,
        event_name: str,
        event_spec: EventSpec,
        instance: DataRecord,
        lifecycle: Lifecycle,
        current: datetime,
        entities: EntityCollection,
    ) -> DataRecord | None:
        if isinstance(event_spec, RecurringEvent):
            if event_spec.frequency is None or not event_spec.frequency.on:
                logger.debug("Recurring event %s has no frequency; skipping", event_name)
                return None
            cycle = instance.get(event_spec.frequency.on.split(".")[-1])
            cycle = cycle.lower() if isinstance(cycle, str) else cycle
            born = lifecycle.born_at
            if cycle in MONTHLY_CYCLES and current.day == born.day:
                return self.create_event_record(event_name, instance, current, entities)
            if cycle in ANNUAL_CYCLES and current.month == born.month and current.day == born.day:
                return self.create_event_record(event_name, instance, current, entities)
            return None

        if isinstance(event_spec, RandomEvent):
            monthly_avg = event_spec.avg_per_entity_per_month or event_spec.avg_per_entity
            if not monthly_avg:
                logger.debug("Random event %s has no average; skipping", event_name)
                return None
            if self.ctx.random() < monthly_avg / DAYS_PER_MONTH:
                return self.create_event_record(event_name, instance, current, entities)
            return None

        if isinstance(event_spec, ChurnEvent):
            if not event_spec.monthly_rate:
                logger.debug("Churn event %s has no monthly_rate; skipping", event_name)
                return None
            if self.ctx.random() < event_spec.monthly_rate / DAYS_PER_MONTH:
                record = self.create_event_record(event_name, instance, current, entities)
                lifecycle.active = False
                lifecycle.churned = True
                return record
            return None

        if isinstance(event_spec, InitialEvent):
            return None

        logger.debug("Unknown event type %r for event %s; skipping", event_spec.type, event_name)
        return None

    def create_event_record(
        self,
        event_name: str,
        instance: DataRecord,
        day: datetime,
        entities: EntityCollection,
    ) -> DataRecord | None:
        """Build one record for ``event_name`` fired by ``instance`` on ``day``."""
        event_spec = self.spec.simulation.events.get(event_name)
        if event_spec is None:
            return None

        record: DataRecord = {}
        for column in self.spec.event_stream_table.columns:
            if column.name == "denied_reason" and record.get("claim_status") != "Denied":
                record[column.name] = ""
                continue
            record[column.name] = self._resolve_column(column, event_name, event_spec, instance, day, entities)
        return record

    def _resolve_column(
        self,
        column: ColumnSpec,
        event_name: str,
        event_spec: EventSpec,
        instance: DataRecord,
        day: datetime,
        entities: EntityCollection,
    ) -> Any:
        source = column.source
        ctx = self.ctx

        if isinstance(source, IdSource):
            return f"{source.prefix or ''}{ctx.uuid()}"
        if isinstance(source, TimestampSource):
            moment = start_of_day(day) + timedelta(milliseconds=ctx.randint(0, 24 * 60 * 60 * 1000 - 1))
            if source.jitter_days:
                moment += timedelta(days=(ctx.random() - 0.5) * 2 * source.jitter_days)
            return to_iso_utc(moment)
        if isinstance(source, ChoiceSource):
            if source.values and source.weights and len(source.values) == len(source.weights):
                weights = [weight if isinstance(weight, (int, float)) else 0 for weight in source.weights]
                return ctx.weighted_choice(source.values, weights)
            logger.debug("Choice column %s missing values/weights; using fallback", column.name)
            return fallback_for_column(ctx, column.name)
        if isinstance(source, ReferenceSource):
            return self._reference(column.name, source.entity, source.attribute, instance, entities)
        if isinstance(source, EventNameSource):
            return event_name
        if isinstance(source, LookupSource):
            output = event_spec.outputs.get(column.name)
            if output is not None and output.type == "reference":
                return self._reference(column.name, output.entity, output.attribute, instance, entities)
            if output is not None and output.type == "literal" and output.value is not None:
                return output.value
            logger.debug("No usable output for lookup column %s on %s", column.name, event_name)
            return fallback_for_column(ctx, column.name)
        if isinstance(source, (LiteralSource, ConditionalSource)):
            return resolve_literal(source.value, ctx)
        return fallback_for_column(ctx, column.name)

    def _reference(
        self,
        column_name: str,
        entity_name: str | None,
        attribute: str | None,
        instance: DataRecord,
        entities: EntityCollection,
    ) -> Any:
        value = None
        pool = entities.get(entity_name or "") or []
        if pool and attribute:
            # The firing instance answers references to its own entity type.
            target = instance if entity_name == self.main_entity else self.ctx.choice(pool)
            value = target.get(attribute)
            if value is None and "." in attribute:
                value = target.get(attribute.split(".")[-1])

        if value is None or value == "":
            logger.debug("Missing reference for %s: %s.%s", column_name, entity_name, attribute)
            return fallback_for_column(self.ctx, column_name)
        return value


def simulate_events(
    spec: DataSpec,
    entities: EntityCollection,
    row_count: int,
    time_range: Sequence[str],
    ctx: GenerationContext,
) -> EventStream:
    """Run the simulation; the stream never exceeds ``row_count`` records."""
    return EventSimulator(spec, ctx).simulate(entities, row_count, time_range)
