"""HTTP client for an OpenAI-compatible chat-completions DataSpec producer."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
import json
import logging
import random
import time
from typing import Any

import requests

from dataset_generator.llm.prompts import SpecPromptParams
from dataset_generator.llm.prompts import build_spec_prompt
from dataset_generator.llm.prompts import build_user_message

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class SpecClientError(RuntimeError):
    """Base error raised by spec producer client operations."""


class SpecClientRequestError(SpecClientError):
    """Raised when producer requests fail after retry budget is exhausted."""


class SpecClientResponseError(SpecClientError):
    """Raised when producer responses are malformed."""


class SpecGenerationClient:
    """Ask a chat-completions endpoint for a DataSpec with retry/backoff behavior."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        model: str,
        timeout_seconds: float = 60.0,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        session: requests.Session | None = None,
        sleep_fn: Callable[[float], None] = time.sleep,
        jitter_fn: Callable[[], float] = random.random,
    ) -> None:
        normalized = base_url.rstrip("/")
        if not normalized:
            raise ValueError("base_url is required")
        if not model:
            raise ValueError("model is required")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if backoff_seconds <= 0:
            raise ValueError("backoff_seconds must be positive")

        self._base_url = normalized
        self._api_key = api_key
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._session = session or requests.Session()
        self._sleep_fn = sleep_fn
        self._jitter_fn = jitter_fn

    def generate_spec(self, params: SpecPromptParams) -> dict[str, Any]:
        """Return the DataSpec document produced for ``params``."""
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": build_spec_prompt(params)},
                {"role": "user", "content": build_user_message(params)},
            ],
            "response_format": {"type": "json_object"},
        }
        logger.info("Requesting spec from producer: business_type=%s model=%s", params.business_type, self._model)
        payload = self._post(f"{self._base_url}/chat/completions", body)
        return self._extract_spec(payload)

    def _post(self, url: str, body: dict[str, Any]) -> Any:
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.post(
                    url,
                    headers=self._headers(),
                    json=body,
                    timeout=self._timeout_seconds,
                )
            except (requests.Timeout, requests.ConnectionError) as exc:
                if attempt >= self._max_retries:
                    raise SpecClientRequestError(
                        "Spec producer request failed after retry budget was exhausted",
                    ) from exc
                self._sleep_fn(self._retry_delay(attempt))
                continue
            except requests.RequestException as exc:
                raise SpecClientRequestError("Spec producer request failed") from exc

            if response.status_code in RETRYABLE_STATUS_CODES:
                if attempt >= self._max_retries:
                    raise SpecClientRequestError(
                        f"Spec producer request failed with retryable status {response.status_code}",
                    )
                logger.warning("Spec producer returned %s; retrying (attempt %s)", response.status_code, attempt + 1)
                self._sleep_fn(self._retry_delay(attempt, response.headers))
                continue

            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                raise SpecClientRequestError(
                    f"Spec producer request failed with status {response.status_code}",
                ) from exc

            try:
                return response.json()
            except ValueError as exc:
                raise SpecClientResponseError("Spec producer response is not JSON") from exc

        raise SpecClientRequestError("Spec producer request failed")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "dataset-generator/0.1",
        }

    def _retry_delay(
        self,
        attempt: int,
        headers: Mapping[str, Any] | None = None,
    ) -> float:
        base = self._backoff_seconds * (2**attempt)
        jitter = self._jitter_fn() * self._backoff_seconds
        delay = base + jitter

        if headers:
            retry_after = headers.get("Retry-After")
            if retry_after is not None:
                try:
                    delay = max(delay, float(retry_after))
                except (TypeError, ValueError):
                    pass
        return delay

    @staticmethod
    def _extract_spec(raw: Any) -> dict[str, Any]:
        if not isinstance(raw, dict):
            raise SpecClientResponseError("Producer payload must be a JSON object")

        choices = raw.get("choices")
        if not isinstance(choices, list) or not choices:
            raise SpecClientResponseError("Producer payload field `choices` must be a non-empty list")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise SpecClientResponseError("Producer returned no content")

        try:
            spec = json.loads(content)
        except ValueError as exc:
            raise SpecClientResponseError("Producer content is not valid JSON") from exc
        if not isinstance(spec, dict):
            raise SpecClientResponseError("Producer content must be a JSON object")
        return spec
