"""Load generated tables into an analytics schema with SQLAlchemy Core."""

from __future__ import annotations

from collections.abc import Iterable
import logging
import re
from typing import Any

from sqlalchemy import BigInteger
from sqlalchemy import Boolean
from sqlalchemy import Column
from sqlalchemy import Connection
from sqlalchemy import DateTime
from sqlalchemy import Float
from sqlalchemy import MetaData
from sqlalchemy import Table
from sqlalchemy import Text
from sqlalchemy.schema import CreateSchema
from sqlalchemy.types import TypeEngine

from dataset_generator.schemas.generation import GeneratedData
from dataset_generator.schemas.generation import TableData
from dataset_generator.synthetic.context import parse_datetime_utc

logger = logging.getLogger(__name__)

_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_UNSAFE_IDENTIFIER = re.compile(r"[^0-9a-zA-Z_]+")


def safe_identifier(name: str) -> str:
    """Lowercase snake_case identifier; never empty, never starting with a digit."""
    cleaned = _UNSAFE_IDENTIFIER.sub("_", name.strip()).strip("_").lower() or "column"
    return f"_{cleaned}" if cleaned[0].isdigit() else cleaned


def _first_value(rows: Iterable[dict[str, Any]], column: str) -> Any:
    for row in rows:
        value = row.get(column)
        if value is not None and value != "":
            return value
    return None


def infer_column_type(value: Any) -> TypeEngine[Any]:
    if isinstance(value, bool):
        return Boolean()
    if isinstance(value, int):
        return BigInteger()
    if isinstance(value, float):
        return Float()
    if isinstance(value, str) and _DATE_PREFIX.match(value) and parse_datetime_utc(value) is not None:
        return DateTime(timezone=True)
    return Text()


def _coerce(value: Any, column_type: TypeEngine[Any]) -> Any:
    if value is None or value == "":
        return None
    if isinstance(column_type, DateTime):
        return parse_datetime_utc(value)
    if isinstance(column_type, Boolean):
        return value if isinstance(value, bool) else None
    if isinstance(column_type, (BigInteger, Float)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return int(value) if isinstance(column_type, BigInteger) and float(value).is_integer() else value
    return value if isinstance(value, str) else str(value)


def build_table(metadata: MetaData, table: TableData) -> Table:
    columns = [
        Column(safe_identifier(name), infer_column_type(_first_value(table.rows, name)), nullable=True)
        for name in table.columns
    ]
    return Table(safe_identifier(table.name), metadata, *columns)


def load_generated_tables(connection: Connection, data: GeneratedData, *, schema: str | None = None) -> dict[str, int]:
    """Replace each generated table in ``schema`` and insert its rows.

    Returns a mapping of created table name to inserted row count. The caller
    owns the transaction.
    """
    if schema and connection.dialect.name != "sqlite":
        connection.execute(CreateSchema(schema, if_not_exists=True))

    metadata = MetaData(schema=schema)
    loaded: dict[str, int] = {}
    for table_data in data.tables:
        table = build_table(metadata, table_data)
        table.drop(connection, checkfirst=True)
        table.create(connection)

        types = {name: table.c[safe_identifier(name)].type for name in table_data.columns}
        rows = [
            {safe_identifier(name): _coerce(row.get(name), types[name]) for name in table_data.columns}
            for row in table_data.rows
        ]
        if rows:
            connection.execute(table.insert(), rows)
        loaded[table.name] = len(rows)
        logger.info("Loaded %s rows into %s", len(rows), table.fullname)

    return loaded
