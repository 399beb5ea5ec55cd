"""Domain repair passes applied to each generated record.

Every pass takes a record and returns a repaired copy; the input mapping is
never modified. Passes never raise on malformed values and leave values that
already satisfy their rule untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from numbers import Real
import re
from typing import Any

from dataset_generator.synthetic.constants import COUNTRIES
from dataset_generator.synthetic.constants import DEFAULT_DATE_FIELDS
from dataset_generator.synthetic.constants import DEFAULT_VALUES
from dataset_generator.synthetic.constants import ENUM_FIELD_VALUES
from dataset_generator.synthetic.constants import NUMERIC_FIELD_RANGES
from dataset_generator.synthetic.constants import PLACEHOLDER_FALLBACKS
from dataset_generator.synthetic.constants import PLACEHOLDER_PATTERN
from dataset_generator.synthetic.constants import PLACEHOLDER_REPLACEMENT
from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.context import parse_datetime_utc
from dataset_generator.synthetic.context import to_iso_utc
from dataset_generator.synthetic.entities import DataRecord

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_RANDOM_TOKEN = re.compile(r"^[A-Za-z0-9]{4,}$")
_DIGIT = re.compile(r"\d")

PRE_AGGREGATED_FIELDS = ("acv", "mrr")


def is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_number(raw: str) -> int | float | None:
    """Parse the leading numeric prefix of a string (``"12.5 USD"`` -> 12.5)."""
    match = _LEADING_NUMBER.match(raw)
    if match is None:
        return None
    number = float(match.group(0))
    return int(number) if number.is_integer() else number


def as_number(value: Any, default: float = 0) -> float:
    if is_number(value):
        return value
    if isinstance(value, str):
        parsed = parse_number(value)
        if parsed is not None:
            return parsed
    return default


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def random_in_range(ctx: GenerationContext, low: float, high: float) -> int | float:
    if float(low).is_integer() and float(high).is_integer():
        return ctx.randint(int(low), int(high))
    return ctx.uniform(low, high, digits=1)


def trailing_year_iso(ctx: GenerationContext) -> str:
    return to_iso_utc(ctx.recent(days=365))


def sanitize_placeholder_values(record: Mapping[str, Any], *, ctx: GenerationContext) -> DataRecord:
    """Replace ``Option A``-style placeholders and stray random tokens."""
    result = dict(record)

    for field, fallbacks in PLACEHOLDER_FALLBACKS.items():
        value = result.get(field)
        if isinstance(value, str) and value and PLACEHOLDER_PATTERN.search(value):
            result[field] = ctx.choice(fallbacks)

    for key, value in result.items():
        if isinstance(value, str) and PLACEHOLDER_PATTERN.search(value):
            result[key] = PLACEHOLDER_REPLACEMENT

    for key, value in list(result.items()):
        if not isinstance(value, str) or not _RANDOM_TOKEN.match(value):
            continue
        allowed = ENUM_FIELD_VALUES.get(key)
        # A stray token mixes letters with digits; plain words such as "purchase" stay.
        if allowed and value not in allowed and _DIGIT.search(value):
            result[key] = ctx.choice(allowed)
        elif "timestamp" in key or "date" in key:
            result[key] = trailing_year_iso(ctx)

    return result


def enforce_numeric_fields(record: Mapping[str, Any], *, ctx: GenerationContext) -> DataRecord:
    """Coerce numeric strings and resample values outside realistic ranges."""
    result = dict(record)

    for field, (low, high) in NUMERIC_FIELD_RANGES.items():
        value = result.get(field)
        if value is None:
            continue
        if isinstance(value, str):
            parsed = parse_number(value)
            value = parsed if parsed is not None else random_in_range(ctx, low, high)
            result[field] = value
        if is_number(value) and (value < low or value > high):
            result[field] = random_in_range(ctx, low, high)

    return result


def enforce_realistic_defaults(record: Mapping[str, Any], *, ctx: GenerationContext) -> DataRecord:
    """Fill missing categorical, date, country and currency fields."""
    result = dict(record)

    for field, options in DEFAULT_VALUES.items():
        if is_blank(result.get(field)):
            result[field] = ctx.choice(options)

    for field in DEFAULT_DATE_FIELDS:
        if is_blank(result.get(field)):
            result[field] = trailing_year_iso(ctx)

    if is_blank(result.get("country")):
        result["country"] = ctx.choice(COUNTRIES)
    if is_blank(result.get("currency")):
        result["currency"] = "USD"

    return result


def enforce_healthcare_rules(record: Mapping[str, Any], *, ctx: GenerationContext) -> DataRecord:
    """Denied claims pay nothing, claims cover cost, discharge follows admission."""
    result = dict(record)

    if "insurance_payout" in result and result.get("claim_status") == "Denied":
        result["insurance_payout"] = 0

    claim, cost = result.get("claim_amount"), result.get("procedure_cost")
    if is_number(claim) and is_number(cost) and claim < cost:
        result["claim_amount"] = round(cost * (1.1 + ctx.random() * 0.5), 2)

    if "admission_date" in result and "discharge_date" in result:
        admitted = parse_datetime_utc(result["admission_date"])
        discharged = parse_datetime_utc(result["discharge_date"])
        if admitted is not None and (discharged is None or discharged <= admitted):
            result["discharge_date"] = to_iso_utc(admitted + timedelta(days=ctx.randint(1, 5)))

    return result


def remove_pre_aggregated_values(record: Mapping[str, Any]) -> DataRecord:
    """Drop pre-aggregated business metrics; only event-level values are exposed."""
    return {key: value for key, value in record.items() if key not in PRE_AGGREGATED_FIELDS}
