"""CSV and SQL text renderings of generated tables."""

from __future__ import annotations

from collections.abc import Sequence
import csv
import io
from numbers import Real
import re
from typing import Any

SQL_BATCH_SIZE = 500
DEFAULT_SQL_TABLE_NAME = "dataset"
_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def to_csv(rows: Sequence[dict[str, Any]]) -> str:
    """Render rows as CSV; the header comes from the first row's keys."""
    if not rows:
        return ""

    columns = list(rows[0])
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({column: _csv_value(row.get(column)) for column in columns})
    return buffer.getvalue()


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def guess_sql_type(value: Any) -> str:
    if _is_number(value):
        return "INTEGER" if isinstance(value, int) or float(value).is_integer() else "REAL"
    if isinstance(value, str) and _DATE_PREFIX.match(value):
        return "DATE"
    return "TEXT"


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if _is_number(value):
        return repr(value) if isinstance(value, float) else str(value)
    if isinstance(value, bool):
        value = "true" if value else "false"
    return "'" + str(value).replace("'", "''") + "'"


def to_sql(rows: Sequence[dict[str, Any]], table_name: str = DEFAULT_SQL_TABLE_NAME) -> str:
    """Render a CREATE TABLE statement plus batched INSERTs of 500 rows each.

    Column types are guessed from the first row: INTEGER/REAL for numbers,
    DATE for ``YYYY-MM-DD``-prefixed strings, TEXT otherwise.
    """
    if not rows:
        return ""

    columns = list(rows[0])
    table = quote_identifier(table_name)
    column_list = ", ".join(quote_identifier(column) for column in columns)
    definitions = ",\n  ".join(f"{quote_identifier(column)} {guess_sql_type(rows[0][column])}" for column in columns)

    statements = [f"CREATE TABLE {table} (\n  {definitions}\n);"]
    for start in range(0, len(rows), SQL_BATCH_SIZE):
        batch = rows[start : start + SQL_BATCH_SIZE]
        values = ",\n  ".join(
            "(" + ", ".join(_sql_literal(row.get(column)) for column in columns) + ")" for row in batch
        )
        statements.append(f"INSERT INTO {table} ({column_list}) VALUES\n  {values};")
    return "\n\n".join(statements) + "\n"
