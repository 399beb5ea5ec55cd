"""Unit tests for the spec producer HTTP client resilience behavior."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import json
from typing import Any

import pytest
import requests

from dataset_generator.llm.client import SpecClientRequestError
from dataset_generator.llm.client import SpecClientResponseError
from dataset_generator.llm.client import SpecGenerationClient
from dataset_generator.llm.prompts import SpecPromptParams

PARAMS = SpecPromptParams(business_type="B2B SaaS", schema_type="OBT", time_range=["2024"])


@dataclass
class _FakeResponse:
    status_code: int
    body: Any
    headers: dict[str, str] | None = None

    def json(self) -> Any:
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            response = requests.Response()
            response.status_code = self.status_code
            raise requests.HTTPError(response=response)


class _SessionStub:
    def __init__(self, request_fn: Callable[..., _FakeResponse]) -> None:
        self._request_fn = request_fn
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, *, headers: dict[str, str], json: dict[str, Any], timeout: float):
        self.calls.append(
            {
                "url": url,
                "headers": headers,
                "json": json,
                "timeout": timeout,
            }
        )
        return self._request_fn(url=url, headers=headers, json=json, timeout=timeout)


def _completion(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _client(session: _SessionStub, sleep_delays: list[float] | None = None, **overrides: Any) -> SpecGenerationClient:
    options: dict[str, Any] = {
        "base_url": "https://llm.example.com/v1/",
        "api_key": "top-secret-key",
        "model": "test-model",
        "timeout_seconds": 5.0,
        "max_retries": 3,
        "backoff_seconds": 1.0,
        "session": session,
        "sleep_fn": sleep_delays.append if sleep_delays is not None else (lambda _: None),
        "jitter_fn": lambda: 0.0,
    }
    options.update(overrides)
    return SpecGenerationClient(**options)


def test_generate_spec_retries_retryable_statuses_and_succeeds() -> None:
    spec = {"entities": [{"name": "users", "attributes": {}}]}
    responses = [
        _FakeResponse(429, {}, headers={"Retry-After": "2"}),
        _FakeResponse(503, {}),
        _FakeResponse(200, _completion(json.dumps(spec))),
    ]

    def request_fn(**_: Any) -> _FakeResponse:
        return responses.pop(0)

    session = _SessionStub(request_fn)
    sleep_delays: list[float] = []
    client = _client(session, sleep_delays)

    assert client.generate_spec(PARAMS) == spec
    assert len(session.calls) == 3
    assert sleep_delays == [2.0, 2.0]

    first = session.calls[0]
    assert first["url"] == "https://llm.example.com/v1/chat/completions"
    assert first["timeout"] == 5.0
    assert first["headers"]["Authorization"] == "Bearer top-secret-key"
    assert first["json"]["model"] == "test-model"
    assert first["json"]["response_format"] == {"type": "json_object"}
    assert [message["role"] for message in first["json"]["messages"]] == ["system", "user"]
    assert "B2B SaaS" in first["json"]["messages"][0]["content"]


def test_generate_spec_retries_connection_errors_until_budget_exhausted() -> None:
    attempts = {"count": 0}

    def request_fn(**_: Any) -> _FakeResponse:
        attempts["count"] += 1
        raise requests.ConnectionError("temporary network issue")

    session = _SessionStub(request_fn)
    sleep_delays: list[float] = []
    client = _client(session, sleep_delays, max_retries=2)

    with pytest.raises(SpecClientRequestError):
        client.generate_spec(PARAMS)

    assert attempts["count"] == 3
    assert sleep_delays == [1.0, 2.0]


def test_generate_spec_does_not_retry_non_retryable_http_errors() -> None:
    responses = [_FakeResponse(401, {"error": "bad key"})]

    def request_fn(**_: Any) -> _FakeResponse:
        return responses.pop(0)

    session = _SessionStub(request_fn)
    sleep_delays: list[float] = []
    client = _client(session, sleep_delays)

    with pytest.raises(SpecClientRequestError):
        client.generate_spec(PARAMS)

    assert len(session.calls) == 1
    assert sleep_delays == []


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"choices": []},
        _completion(""),
        _completion("this is not json"),
        _completion('["a list"]'),
        ValueError("not json at all"),
    ],
)
def test_generate_spec_rejects_malformed_payloads(body: Any) -> None:
    session = _SessionStub(lambda **_: _FakeResponse(200, body))
    client = _client(session)

    with pytest.raises(SpecClientResponseError):
        client.generate_spec(PARAMS)


def test_client_rejects_invalid_configuration() -> None:
    session = _SessionStub(lambda **_: _FakeResponse(200, {}))

    with pytest.raises(ValueError):
        _client(session, base_url="")
    with pytest.raises(ValueError):
        _client(session, model="")
    with pytest.raises(ValueError):
        _client(session, max_retries=-1)
