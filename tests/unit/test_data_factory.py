"""Unit tests for the end-to-end generation pipeline."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from typing import Any

import pytest

from dataset_generator.synthetic.factory import DataFactory
from dataset_generator.synthetic.validator import SpecValidationError

NOW = datetime(2024, 6, 15, tzinfo=timezone.utc)


def test_generate_returns_a_single_fact_table_for_obt(saas_spec: dict[str, Any]) -> None:
    factory = DataFactory(saas_spec, business_type="B2B SaaS", seed=3, now=NOW)

    data = factory.generate(120, ["2023"], "OBT")

    assert len(data.tables) == 1
    fact = data.tables[0]
    assert fact.name == "saas_events_fact"
    assert 0 < len(fact.rows) <= 120
    assert "mrr" not in fact.columns
    for row in fact.rows:
        assert set(row) == set(fact.columns)


def test_star_schema_adds_one_dimension_table_per_entity(saas_spec: dict[str, Any]) -> None:
    data = DataFactory(saas_spec, seed=3, now=NOW).generate(50, ["2023"], "Star Schema")

    assert [table.name for table in data.tables] == ["saas_events_fact", "users_dim", "companies_dim"]
    assert [table.type for table in data.tables] == ["fact", "dim", "dim"]
    assert len(data.tables[1].rows) == 10


def test_saas_rows_only_pay_on_billing_events(saas_spec: dict[str, Any]) -> None:
    data = DataFactory(saas_spec, business_type="B2B SaaS", seed=11, now=NOW).generate(300, ["2023"])

    for row in data.tables[0].rows:
        if row["event_type"] in {"signup", "login", "cancellation"}:
            assert row["payment_amount"] == 0
        else:
            assert row["payment_amount"] > 0


def test_same_seed_reproduces_the_dataset(saas_spec: dict[str, Any]) -> None:
    first = DataFactory(saas_spec, business_type="B2B SaaS", seed=5, now=NOW).generate(80, ["2023"])
    second = DataFactory(saas_spec, business_type="B2B SaaS", seed=5, now=NOW).generate(80, ["2023"])

    assert first == second


def test_quality_report_scores_the_last_stream(saas_spec: dict[str, Any]) -> None:
    factory = DataFactory(saas_spec, business_type="B2B SaaS", seed=5, now=NOW)
    factory.generate(80, ["2023"])

    report = factory.quality_report()

    assert report.stats.total_rows == len(factory.last_event_stream)
    assert 0 <= report.quality_score <= 100


def test_invalid_specs_are_rejected_up_front() -> None:
    with pytest.raises(SpecValidationError):
        DataFactory({"entities": []})


def test_factory_exposes_the_seed_it_used(saas_spec: dict[str, Any]) -> None:
    factory = DataFactory(saas_spec)

    assert isinstance(factory.seed, int)
