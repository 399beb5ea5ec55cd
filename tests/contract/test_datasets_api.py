"""Contract tests for dataset generation, export, cache and health endpoints."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from dataset_generator.core.rate_limit import get_rate_limiter

API_PREFIX = "/api/v1"


def _assert_error_envelope(payload: dict) -> None:
    assert "error" in payload
    error = payload["error"]
    assert isinstance(error, dict)
    assert isinstance(error.get("code"), str) and error["code"]
    assert isinstance(error.get("message"), str) and error["message"]

    if "details" in error:
        assert isinstance(error["details"], list)
        for item in error["details"]:
            assert isinstance(item, dict)
            assert isinstance(item.get("field"), str)
            assert isinstance(item.get("issue"), str)


def _assert_table_contract(payload: dict) -> None:
    for field in ("name", "type", "columns", "rows"):
        assert field in payload

    assert payload["type"] in {"fact", "dim"}
    assert isinstance(payload["columns"], list)
    for row in payload["rows"]:
        assert list(row) == payload["columns"]


def _generate_payload(spec: dict[str, Any] | None, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "business_type": "B2B SaaS",
        "schema_type": "OBT",
        "row_count": 300,
        "time_range": ["2024"],
        "growth_pattern": "Steady",
        "variation_level": "Medium",
        "granularity": "Daily",
        "seed": 42,
    }
    if spec is not None:
        payload["spec"] = spec
    payload.update(overrides)
    return payload


def test_generate_with_inline_spec_returns_tables_and_quality(
    client: TestClient,
    saas_spec: dict[str, Any],
) -> None:
    response = client.post(f"{API_PREFIX}/datasets/generate", json=_generate_payload(saas_spec))

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == str(get_rate_limiter().limit)
    assert "X-RateLimit-Remaining" in response.headers

    payload = response.json()
    assert payload["cached"] is False
    assert payload["seed"] == 42
    assert payload["run_id"] is None
    assert payload["spec"]["event_stream_table"]["name"] == "saas_events"

    tables = payload["data"]["tables"]
    assert [table["name"] for table in tables] == ["saas_events_fact"]
    _assert_table_contract(tables[0])
    assert 0 < len(tables[0]["rows"]) <= 300
    assert "mrr" not in tables[0]["columns"]

    quality = payload["quality"]
    for field in ("issues", "warnings", "stats", "is_valid", "quality_score"):
        assert field in quality
    assert 0 <= quality["quality_score"] <= 100
    assert quality["stats"]["total_rows"] == len(tables[0]["rows"])


def test_generate_preview_returns_at_most_ten_rows(client: TestClient, saas_spec: dict[str, Any]) -> None:
    response = client.post(
        f"{API_PREFIX}/datasets/generate",
        json=_generate_payload(saas_spec, row_count=5000, is_preview=True),
    )

    assert response.status_code == 200
    assert len(response.json()["data"]["tables"][0]["rows"]) <= 10


def test_generate_star_schema_returns_fact_and_dimensions(client: TestClient, saas_spec: dict[str, Any]) -> None:
    response = client.post(
        f"{API_PREFIX}/datasets/generate",
        json=_generate_payload(saas_spec, schema_type="Star Schema"),
    )

    assert response.status_code == 200
    tables = response.json()["data"]["tables"]
    assert {table["name"]: table["type"] for table in tables} == {
        "saas_events_fact": "fact",
        "users_dim": "dim",
        "companies_dim": "dim",
    }
    for table in tables:
        _assert_table_contract(table)


def test_generate_without_spec_or_producer_returns_503(client: TestClient) -> None:
    response = client.post(f"{API_PREFIX}/datasets/generate", json=_generate_payload(None))

    assert response.status_code == 503
    payload = response.json()
    _assert_error_envelope(payload)
    assert payload["error"]["code"] == "spec_producer_unavailable"


def test_generate_with_invalid_spec_returns_422(client: TestClient) -> None:
    response = client.post(
        f"{API_PREFIX}/datasets/generate",
        json=_generate_payload({"entities": [{"name": "users", "attributes": {}}]}),
    )

    assert response.status_code == 422
    payload = response.json()
    _assert_error_envelope(payload)
    assert payload["error"]["code"] == "invalid_spec"


def test_generate_rejects_out_of_range_row_count(client: TestClient, saas_spec: dict[str, Any]) -> None:
    response = client.post(f"{API_PREFIX}/datasets/generate", json=_generate_payload(saas_spec, row_count=0))

    assert response.status_code == 400
    payload = response.json()
    _assert_error_envelope(payload)
    assert payload["error"]["details"][0]["field"] == "row_count"


@pytest.mark.parametrize("time_range", [["abc"], ["9999"], ["0000"], ["2024", "24"]])
def test_generate_rejects_invalid_years(
    client: TestClient,
    saas_spec: dict[str, Any],
    time_range: list[str],
) -> None:
    response = client.post(
        f"{API_PREFIX}/datasets/generate",
        json=_generate_payload(saas_spec, time_range=time_range),
    )

    assert response.status_code == 400
    payload = response.json()
    _assert_error_envelope(payload)
    assert payload["error"]["code"] == "validation_error"
    assert payload["error"]["details"][0]["field"].startswith("time_range")


def test_generate_accepts_the_last_supported_year(client: TestClient, saas_spec: dict[str, Any]) -> None:
    response = client.post(
        f"{API_PREFIX}/datasets/generate",
        json=_generate_payload(saas_spec, time_range=["9998"], row_count=50),
    )

    assert response.status_code == 200
    assert response.json()["data"]["tables"][0]["rows"]


def test_generate_is_rate_limited_per_client(client: TestClient) -> None:
    limit = get_rate_limiter().limit
    statuses = [
        client.post(f"{API_PREFIX}/datasets/generate", json=_generate_payload(None)).status_code
        for _ in range(limit)
    ]
    assert set(statuses) == {503}

    response = client.post(f"{API_PREFIX}/datasets/generate", json=_generate_payload(None))

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) >= 1
    assert response.headers["X-RateLimit-Remaining"] == "0"
    _assert_error_envelope(response.json())
    assert response.json()["error"]["code"] == "rate_limited"


def test_export_renders_csv_and_sql(client: TestClient) -> None:
    table = {
        "name": "orders_fact",
        "type": "fact",
        "columns": ["order_id", "total_amount", "note"],
        "rows": [
            {"order_id": "ord_1", "total_amount": 19.5, "note": "it's fine"},
            {"order_id": "ord_2", "total_amount": 5, "note": None},
        ],
    }

    csv_response = client.post(f"{API_PREFIX}/datasets/export", json={"table": table, "format": "csv"})
    sql_response = client.post(f"{API_PREFIX}/datasets/export", json={"table": table, "format": "sql"})

    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/plain")
    assert csv_response.text.splitlines() == ["order_id,total_amount,note", "ord_1,19.5,it's fine", "ord_2,5,"]

    assert sql_response.status_code == 200
    assert sql_response.headers["content-type"].startswith("text/plain")
    assert '"total_amount" REAL' in sql_response.text
    assert "'it''s fine'" in sql_response.text
    assert "NULL" in sql_response.text


def test_export_rejects_unknown_format(client: TestClient) -> None:
    table = {"name": "t_fact", "type": "fact", "columns": [], "rows": []}

    response = client.post(f"{API_PREFIX}/datasets/export", json={"table": table, "format": "xlsx"})

    assert response.status_code == 400
    _assert_error_envelope(response.json())


def test_cache_stats_and_clear(client: TestClient) -> None:
    from dataset_generator.api.dependencies import get_spec_cache
    from dataset_generator.main import app

    cache = app.dependency_overrides[get_spec_cache]()
    cache.put("a" * 64, {"entities": []})
    cache.put("b" * 64, {"entities": []})

    stats = client.get(f"{API_PREFIX}/cache/stats")
    assert stats.status_code == 200
    assert stats.json()["file_count"] == 2
    assert stats.json()["oldest_file"] is not None

    cleared = client.post(f"{API_PREFIX}/cache/clear")
    assert cleared.status_code == 200
    assert cleared.json() == {"deleted": 2}

    assert client.get(f"{API_PREFIX}/cache/stats").json()["file_count"] == 0


def test_unknown_route_returns_envelope(client: TestClient) -> None:
    response = client.get(f"{API_PREFIX}/nope")

    assert response.status_code == 404
    _assert_error_envelope(response.json())


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
