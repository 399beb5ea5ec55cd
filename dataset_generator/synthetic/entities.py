"""Entity pool generation from a DataSpec's entity definitions."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from numbers import Real
from typing import Any

from dataset_generator.schemas.data_spec import AttributeSpec
from dataset_generator.schemas.data_spec import ChoiceAttribute
from dataset_generator.schemas.data_spec import ConditionalAttribute
from dataset_generator.schemas.data_spec import DataSpec
from dataset_generator.schemas.data_spec import FakerAttribute
from dataset_generator.schemas.data_spec import IdAttribute
from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.faker_utils import call_faker_method
from dataset_generator.synthetic.faker_utils import fallback_value
from dataset_generator.synthetic.faker_utils import split_method_path

logger = logging.getLogger(__name__)

DataRecord = dict[str, Any]
EntityCollection = dict[str, list[DataRecord]]

ROWS_PER_ENTITY = 10
MIN_ENTITY_POOL = 10
MAX_ENTITY_POOL = 100


@dataclass(frozen=True)
class ChoiceDistribution:
    """Canonical weighted categorical distribution."""

    values: tuple[Any, ...]
    weights: tuple[float, ...]

    def draw(self, ctx: GenerationContext) -> Any:
        return ctx.weighted_choice(self.values, self.weights)


FALLBACK_CHOICE = ChoiceDistribution(
    values=("Option A", "Option B", "Option C"),
    weights=(0.40, 0.35, 0.25),
)


def entity_pool_size(row_count: int) -> int:
    """Instances generated per entity; decoupled from the final row count."""
    return min(MAX_ENTITY_POOL, max(MIN_ENTITY_POOL, math.ceil(row_count / ROWS_PER_ENTITY)))


def _coerce_weights(raw: list[Any] | None, size: int) -> tuple[float, ...]:
    uniform = tuple(1 / size for _ in range(size))
    if not raw or len(raw) != size:
        return uniform
    if not all(isinstance(weight, Real) and not isinstance(weight, bool) and weight >= 0 for weight in raw):
        return uniform
    if sum(raw) <= 0:
        return uniform
    return tuple(float(weight) for weight in raw)


def normalize_choice(
    *,
    values: Any = None,
    weights: list[Any] | None = None,
    options: Any = None,
    choices: Any = None,
    method: Any = None,
) -> ChoiceDistribution:
    """Map every tolerated choice shape onto one `ChoiceDistribution`.

    Candidate value lists are tried in the order ``method`` (list form),
    ``options``, ``choices``, ``values``. Weights default to uniform when
    absent or mismatched in length.
    """
    for candidate in (method, options, choices, values):
        if isinstance(candidate, list) and candidate:
            return ChoiceDistribution(values=tuple(candidate), weights=_coerce_weights(weights, len(candidate)))

    logger.debug("Choice attribute missing values; using fallback distribution")
    return FALLBACK_CHOICE


def _case_key_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _resolve_conditional(spec: ConditionalAttribute, instance: DataRecord, ctx: GenerationContext) -> Any:
    cases = spec.cases or {}
    if not spec.on or not spec.cases:
        logger.debug("Conditional attribute missing 'on' or 'cases'")
        default = cases.get("default")
        return default if default is not None else 0

    on = [spec.on] if isinstance(spec.on, str) else list(spec.on)
    key = " & ".join(sorted(f"{attr}={_case_key_value(instance.get(attr))}" for attr in on))

    value = cases.get(key)
    if value is None:
        value = cases.get(_case_key_value(instance.get(on[0])))
    if value is None:
        value = cases.get("default")

    if isinstance(value, str):
        if value.startswith("faker."):
            namespace, method = split_method_path(value)
            return fallback_value(method, namespace, now=ctx.now)
        return value
    if isinstance(value, (dict, list)):
        return ctx.randint(10, 1000)
    return value if value is not None else 0


def resolve_attribute(spec: AttributeSpec, instance: DataRecord, ctx: GenerationContext) -> Any:
    """Resolve one attribute; ``instance`` holds the attributes resolved so far."""
    if isinstance(spec, IdAttribute):
        return f"{spec.prefix or ''}{ctx.uuid()}"
    if isinstance(spec, FakerAttribute):
        if isinstance(spec.method, list):
            return normalize_choice(method=spec.method, weights=spec.weights).draw(ctx)
        if not spec.method:
            logger.debug("Faker attribute without method; using fallback")
            return fallback_value("", "")
        return call_faker_method(ctx, spec.method)
    if isinstance(spec, ChoiceAttribute):
        distribution = normalize_choice(
            values=spec.values,
            weights=spec.weights,
            options=spec.options,
            choices=spec.choices,
            method=spec.method,
        )
        return distribution.draw(ctx)
    if isinstance(spec, ConditionalAttribute):
        return _resolve_conditional(spec, instance, ctx)
    return None


def generate_entities(spec: DataSpec, row_count: int, ctx: GenerationContext) -> EntityCollection:
    """Build a bounded pool of instances for every entity in the spec."""
    pool_size = entity_pool_size(row_count)
    collection: EntityCollection = {}

    for entity in spec.entities:
        instances: list[DataRecord] = []
        for _ in range(pool_size):
            instance: DataRecord = {}
            for name, attribute in entity.attributes.items():
                instance[name] = resolve_attribute(attribute, instance, ctx)
            instances.append(instance)
        collection[entity.name] = instances

    return collection
