"""Loading generated tables into a database through SQLAlchemy Core."""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import BigInteger
from sqlalchemy import Boolean
from sqlalchemy import DateTime
from sqlalchemy import Float
from sqlalchemy import Text
from sqlalchemy import create_engine
from sqlalchemy import inspect
from sqlalchemy import text

from dataset_generator.db.analytics import infer_column_type
from dataset_generator.db.analytics import load_generated_tables
from dataset_generator.db.analytics import safe_identifier
from dataset_generator.schemas.generation import GeneratedData
from dataset_generator.schemas.generation import TableData
from dataset_generator.synthetic.factory import DataFactory


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


def _orders(rows: list[dict[str, Any]]) -> GeneratedData:
    return GeneratedData(
        tables=[
            TableData(
                name="Orders Fact",
                type="fact",
                columns=list(rows[0]) if rows else ["order_id"],
                rows=rows,
            )
        ]
    )


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, Boolean),
        (3, BigInteger),
        (19.99, Float),
        ("2024-03-01T10:00:00Z", DateTime),
        ("2024-03-01", DateTime),
        ("ord_123", Text),
        (None, Text),
    ],
)
def test_infer_column_type(value: Any, expected: type) -> None:
    assert isinstance(infer_column_type(value), expected)


def test_safe_identifier_normalizes_names() -> None:
    assert safe_identifier("Orders Fact") == "orders_fact"
    assert safe_identifier("2024 revenue") == "_2024_revenue"
    assert safe_identifier("???") == "column"


def test_load_generated_tables_creates_and_fills_tables(engine) -> None:
    data = _orders(
        [
            {"order_id": "ord_1", "quantity": 2, "total": 19.5, "paid": True, "ordered_at": "2024-03-01T10:00:00Z"},
            {"order_id": "ord_2", "quantity": 1, "total": 5.0, "paid": False, "ordered_at": "2024-03-02T11:30:00Z"},
            {"order_id": "ord_3", "quantity": None, "total": "", "paid": None, "ordered_at": None},
        ]
    )

    with engine.begin() as connection:
        loaded = load_generated_tables(connection, data)

    assert loaded == {"orders_fact": 3}

    columns = {column["name"]: column["type"] for column in inspect(engine).get_columns("orders_fact")}
    assert list(columns) == ["order_id", "quantity", "total", "paid", "ordered_at"]

    with engine.connect() as connection:
        rows = connection.execute(
            text("SELECT order_id, quantity, total, paid FROM orders_fact ORDER BY order_id")
        ).all()
    assert [tuple(row) for row in rows] == [("ord_1", 2, 19.5, 1), ("ord_2", 1, 5.0, 0), ("ord_3", None, None, None)]


def test_reloading_replaces_previous_rows(engine) -> None:
    with engine.begin() as connection:
        load_generated_tables(connection, _orders([{"order_id": "ord_1"}, {"order_id": "ord_2"}]))
    with engine.begin() as connection:
        loaded = load_generated_tables(connection, _orders([{"order_id": "ord_9"}]))

    assert loaded == {"orders_fact": 1}
    with engine.connect() as connection:
        assert connection.execute(text("SELECT order_id FROM orders_fact")).scalars().all() == ["ord_9"]


def test_generated_star_schema_loads_every_table(engine, saas_spec: dict[str, Any]) -> None:
    factory = DataFactory(saas_spec, business_type="B2B SaaS", seed=5)
    data = factory.generate(250, ["2024"], "Star Schema")

    with engine.begin() as connection:
        loaded = load_generated_tables(connection, data)

    assert loaded == {table.name: len(table.rows) for table in data.tables}
    assert set(inspect(engine).get_table_names()) == {"saas_events_fact", "users_dim", "companies_dim"}
