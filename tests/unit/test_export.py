"""Unit tests for CSV and SQL export rendering."""

from __future__ import annotations

import csv
import io

from dataset_generator.services.export import SQL_BATCH_SIZE
from dataset_generator.services.export import guess_sql_type
from dataset_generator.services.export import to_csv
from dataset_generator.services.export import to_sql


def test_csv_round_trip_preserves_columns_and_row_count() -> None:
    rows = [
        {"event_id": "evt_1", "note": 'says "hi", twice', "amount": 9.5, "refunded": None},
        {"event_id": "evt_2", "note": "line\nbreak", "amount": 12, "refunded": True},
    ]

    parsed = list(csv.DictReader(io.StringIO(to_csv(rows))))

    assert len(parsed) == 2
    assert list(parsed[0]) == ["event_id", "note", "amount", "refunded"]
    assert parsed[0]["note"] == 'says "hi", twice'
    assert parsed[0]["refunded"] == ""
    assert parsed[1]["note"] == "line\nbreak"
    assert parsed[1]["refunded"] == "true"


def test_empty_inputs_render_empty_text() -> None:
    assert to_csv([]) == ""
    assert to_sql([]) == ""


def test_guess_sql_type() -> None:
    assert guess_sql_type(3) == "INTEGER"
    assert guess_sql_type(3.0) == "INTEGER"
    assert guess_sql_type(3.25) == "REAL"
    assert guess_sql_type("2024-01-01T00:00:00Z") == "DATE"
    assert guess_sql_type("Pro") == "TEXT"
    assert guess_sql_type(True) == "TEXT"


def test_to_sql_creates_table_and_escapes_values() -> None:
    sql = to_sql([{"name": "O'Brien", "amount": 10, "missing": None}], "customers")

    assert sql.startswith('CREATE TABLE "customers" (\n  "name" TEXT,\n  "amount" INTEGER,\n  "missing" TEXT\n);')
    assert "('O''Brien', 10, NULL);" in sql
    assert sql.endswith("\n")


def test_to_sql_batches_inserts() -> None:
    rows = [{"id": index} for index in range(SQL_BATCH_SIZE + 1)]

    sql = to_sql(rows)

    assert sql.count('INSERT INTO "dataset"') == 2
