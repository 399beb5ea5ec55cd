"""Structural checks for DataSpec documents and advisory scoring of event streams."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
import logging
from typing import Any

from pydantic import ValidationError

from dataset_generator.schemas.data_spec import DataSpec
from dataset_generator.schemas.generation import DateRange
from dataset_generator.schemas.generation import QualityReport
from dataset_generator.schemas.generation import QualityStats
from dataset_generator.synthetic.constants import B2B_PLANS
from dataset_generator.synthetic.constants import B2C_PLANS
from dataset_generator.synthetic.constants import PLACEHOLDER_PATTERN
from dataset_generator.synthetic.constants import REQUIRED_FIELDS_BY_BUSINESS_TYPE
from dataset_generator.synthetic.context import UTC
from dataset_generator.synthetic.context import parse_datetime_utc
from dataset_generator.synthetic.context import to_iso_utc
from dataset_generator.synthetic.entities import DataRecord

logger = logging.getLogger(__name__)

QUALITY_NUMERIC_FIELDS = ("plan_price", "payment_amount", "api_calls_count", "storage_used_mb")
QUALITY_NUMERIC_MAX = 10000
QUALITY_DATE_FIELDS = ("signup_date", "order_date", "appointment_date", "transaction_date")
DIVERSITY_FIELDS = ("subscription_plan", "country", "status", "event_type")
DIVERSITY_MIN_ROWS = 10

DEFAULT_RANDOM_AVERAGE = 5
DEFAULT_CHURN_RATE = 0.05
DEFAULT_RECURRING_FIELD = "billing_cycle"


class SpecValidationError(ValueError):
    """A DataSpec is structurally unusable; generation must not start."""


def validate_spec(raw: Any) -> None:
    """Raise `SpecValidationError` if ``raw`` lacks the blocks generation needs."""
    if not isinstance(raw, Mapping):
        raise SpecValidationError("Spec must be a JSON object")

    entities = raw.get("entities")
    if not isinstance(entities, list) or not entities:
        raise SpecValidationError("Spec must have at least one entity")

    table = raw.get("event_stream_table")
    if not isinstance(table, Mapping) or not table.get("columns"):
        raise SpecValidationError("Spec must have event_stream_table with columns")

    simulation = raw.get("simulation")
    if not isinstance(simulation, Mapping) or not simulation.get("initial_event") or not simulation.get("events"):
        raise SpecValidationError("Spec must have simulation with initial_event and events")

    for index, entity in enumerate(entities):
        if not isinstance(entity, Mapping) or not entity.get("name") or not isinstance(entity.get("attributes"), Mapping):
            raise SpecValidationError(f"Entity {index} must have name and attributes")
        for attr_name, attr_spec in entity["attributes"].items():
            if not isinstance(attr_spec, Mapping) or not attr_spec.get("type"):
                raise SpecValidationError(f"Attribute {attr_name} in entity {entity['name']} must have type")


def parse_spec(raw: Any) -> DataSpec:
    validate_spec(raw)
    try:
        return DataSpec.model_validate(raw)
    except ValidationError as exc:
        raise SpecValidationError(f"Spec has invalid structure: {exc.error_count()} error(s)") from exc


def fill_spec_defaults(spec: DataSpec) -> DataSpec:
    """Return a copy with incomplete event configuration filled in.

    Untyped events become ``random``; recurring events without a frequency
    follow ``billing_cycle``; random events default to 5 per month and churn
    events to a 5% monthly rate. An ``initial_event`` that is not declared in
    ``events`` is added as an ``initial`` event so instances can activate.
    """
    document = spec.model_dump(mode="json")
    simulation = document["simulation"]
    events: dict[str, dict[str, Any]] = simulation["events"]

    for name, event in events.items():
        if not event.get("type"):
            event["type"] = "random"
        event_type = event["type"]
        if event_type == "recurring" and not (event.get("frequency") or {}).get("on"):
            event["frequency"] = {"on": DEFAULT_RECURRING_FIELD}
        elif event_type == "random" and not event.get("avg_per_entity_per_month") and not event.get("avg_per_entity"):
            event["avg_per_entity_per_month"] = DEFAULT_RANDOM_AVERAGE
        elif event_type == "churn" and not event.get("monthly_rate"):
            event["monthly_rate"] = DEFAULT_CHURN_RATE
        else:
            continue
        logger.debug("Filled defaults for %s event %s", event_type, name)

    if simulation["initial_event"] not in events:
        events[simulation["initial_event"]] = {"type": "initial"}

    return DataSpec.model_validate(document)


def detect_business_type(record: Mapping[str, Any]) -> str:
    """Guess B2B vs B2C SaaS from the fields a record carries."""
    if record.get("company_id") or record.get("user_role") or record.get("contract_value"):
        return "B2B SaaS"
    if record.get("device_type") or record.get("user_age") or record.get("viral_coefficient"):
        return "B2C SaaS"
    plan = record.get("subscription_plan") or record.get("plan")
    if plan in B2B_PLANS:
        return "B2B SaaS"
    if plan in B2C_PLANS:
        return "B2C SaaS"
    return "B2B SaaS"


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def _is_invalid_number(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value < 0 or value > QUALITY_NUMERIC_MAX
    return False


def validate_data_quality(event_stream: Sequence[DataRecord], *, now: datetime | None = None) -> QualityReport:
    """Score a stream; findings are advisory and never block output."""
    issues: list[str] = []
    warnings: list[str] = []

    if not event_stream:
        issues.append("No data generated - empty event stream")
        return QualityReport(issues=issues, warnings=warnings, stats=QualityStats(), is_valid=False, quality_score=0)

    now = now or datetime.now(UTC)

    placeholder_rows = sum(
        1
        for row in event_stream
        if any(isinstance(value, str) and PLACEHOLDER_PATTERN.search(value) for value in row.values())
    )
    if placeholder_rows:
        issues.append(f'{placeholder_rows} rows contain placeholder values (e.g., "Option A")')

    for field in QUALITY_NUMERIC_FIELDS:
        invalid = sum(1 for row in event_stream if _is_invalid_number(row.get(field)))
        if invalid:
            issues.append(f"{invalid} rows have invalid {field} values")

    latest_allowed = _shift_years(now, 1)
    earliest_allowed = _shift_years(now, -5)
    invalid_dates = 0
    for row in event_stream:
        for field in QUALITY_DATE_FIELDS:
            parsed = parse_datetime_utc(row.get(field)) if row.get(field) else None
            if parsed is not None and (parsed > latest_allowed or parsed < earliest_allowed):
                invalid_dates += 1
                break
    if invalid_dates:
        issues.append(f"{invalid_dates} rows have unrealistic dates")

    business_type = detect_business_type(event_stream[0])
    required = REQUIRED_FIELDS_BY_BUSINESS_TYPE.get(business_type, ("event_type",))
    missing = [
        field for field in required if not any(row.get(field) not in (None, "") for row in event_stream)
    ]
    if missing:
        warnings.append(f"Missing recommended fields for {business_type}: {', '.join(missing)}")

    timestamps = [
        parsed
        for parsed in (parse_datetime_utc(row.get("event_timestamp") or row.get("timestamp")) for row in event_stream)
        if parsed is not None
    ]
    date_range = None
    if timestamps:
        date_range = DateRange(earliest=to_iso_utc(min(timestamps)), latest=to_iso_utc(max(timestamps)))

    if len(event_stream) > DIVERSITY_MIN_ROWS:
        for field in DIVERSITY_FIELDS:
            values = {row.get(field) for row in event_stream if row.get(field) is not None}
            # Fields the stream does not carry at all are not a diversity problem.
            if values and len(values) < 2:
                warnings.append(f"Low diversity in {field}: only {len(values)} unique values")

    plan_prices = [
        price
        for price in (row.get("plan_price") for row in event_stream)
        if isinstance(price, (int, float)) and not isinstance(price, bool) and price > 0
    ]
    if plan_prices:
        average = sum(plan_prices) / len(plan_prices)
        if average < 5 or average > 2000:
            warnings.append(f"Average plan price (${average:.2f}) seems unrealistic for {business_type}")

    stats = QualityStats(
        total_rows=len(event_stream),
        business_type=business_type,
        unique_events=len({row.get("event_type") for row in event_stream}),
        date_range=date_range,
    )
    return QualityReport(
        issues=issues,
        warnings=warnings,
        stats=stats,
        is_valid=not issues,
        quality_score=max(0, 100 - 20 * len(issues) - 5 * len(warnings)),
    )
