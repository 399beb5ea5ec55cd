"""Shape event streams and entity pools into named fact/dimension tables."""

from __future__ import annotations

from collections.abc import Iterable

from dataset_generator.schemas.data_spec import DataSpec
from dataset_generator.schemas.generation import TableData
from dataset_generator.synthetic.entities import DataRecord
from dataset_generator.synthetic.entities import EntityCollection

PRE_AGGREGATED_COLUMNS = frozenset({"acv", "mrr"})


def _collapse_suffix(name: str, suffix: str) -> str:
    doubled = f"{suffix}{suffix}"
    if name.endswith(doubled):
        return name[: -len(doubled)] + suffix
    return name


def fact_table_name(name: str) -> str:
    name = _collapse_suffix(name, "_fact")
    name = _collapse_suffix(name, "_dim")
    if not name.endswith("_fact") and not name.endswith("_dim"):
        name += "_fact"
    return name


def dimension_table_name(name: str) -> str:
    name = _collapse_suffix(name, "_dim")
    if not name.endswith("_dim"):
        name += "_dim"
    return name


def format_as_table(spec: DataSpec, event_stream: Iterable[DataRecord]) -> TableData:
    """Project the stream onto the declared columns, minus pre-aggregated metrics."""
    table_spec = spec.event_stream_table
    columns = [column.name for column in table_spec.columns if column.name not in PRE_AGGREGATED_COLUMNS]
    rows = [{column: event.get(column) for column in columns} for event in event_stream]
    name = fact_table_name(table_spec.name)
    return TableData(
        name=name,
        type="dim" if name.endswith("_dim") else "fact",
        columns=columns,
        rows=rows,
    )


def generate_dimension_tables(entities: EntityCollection) -> list[TableData]:
    """One ``_dim`` table per entity; leading-underscore keys are bookkeeping and dropped."""
    tables: list[TableData] = []
    for entity_name, instances in entities.items():
        first = instances[0] if instances else {}
        columns = [key for key in first if not key.startswith("_")]
        tables.append(
            TableData(
                name=dimension_table_name(entity_name),
                type="dim",
                columns=columns,
                rows=[{key: value for key, value in instance.items() if not key.startswith("_")} for instance in instances],
            )
        )
    return tables
