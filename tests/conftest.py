"""Shared pytest fixtures for dataset generator test suites."""

from collections.abc import Generator
import copy
from datetime import datetime
from datetime import timezone
from pathlib import Path
import sys
from typing import Any

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

SAAS_SPEC: dict[str, Any] = {
    "entities": [
        {
            "name": "users",
            "attributes": {
                "user_id": {"type": "id", "prefix": "usr_"},
                "full_name": {"type": "faker", "method": "person.fullName"},
                "email": {"type": "faker", "method": "internet.email"},
                "subscription_plan": {
                    "type": "choice",
                    "values": ["Basic", "Pro", "Enterprise"],
                    "weights": [0.5, 0.3, 0.2],
                },
                "billing_cycle": {"type": "choice", "values": ["monthly", "annual"], "weights": [0.7, 0.3]},
                "plan_price": {
                    "type": "conditional",
                    "on": "subscription_plan",
                    "cases": {"Basic": 29, "Pro": 99, "Enterprise": 499, "default": 0},
                },
            },
        },
        {
            "name": "companies",
            "attributes": {
                "company_id": {"type": "id", "prefix": "comp_"},
                "industry": {"type": "choice", "values": ["Software", "Retail", "Finance"]},
            },
        },
    ],
    "event_stream_table": {
        "name": "saas_events",
        "columns": [
            {"name": "event_id", "source": {"type": "id", "prefix": "evt_"}},
            {"name": "event_timestamp", "source": {"type": "timestamp"}},
            {"name": "event_type", "source": {"type": "event_name"}},
            {"name": "user_id", "source": {"type": "reference", "entity": "users", "attribute": "user_id"}},
            {
                "name": "subscription_plan",
                "source": {"type": "reference", "entity": "users", "attribute": "subscription_plan"},
            },
            {"name": "plan_price", "source": {"type": "reference", "entity": "users", "attribute": "plan_price"}},
            {"name": "industry", "source": {"type": "reference", "entity": "companies", "attribute": "industry"}},
            {"name": "payment_amount", "source": {"type": "lookup"}},
            {"name": "mrr", "source": {"type": "literal", "value": 100}},
        ],
    },
    "simulation": {
        "initial_event": "signup",
        "events": {
            "signup": {"type": "initial"},
            "subscription_created": {
                "type": "recurring",
                "frequency": {"on": "users.billing_cycle"},
                "outputs": {"payment_amount": {"type": "reference", "entity": "users", "attribute": "plan_price"}},
            },
            "login": {"type": "random", "avg_per_entity_per_month": 8},
            "cancellation": {"type": "churn", "monthly_rate": 0.05},
        },
    },
}


@pytest.fixture
def saas_spec() -> dict[str, Any]:
    """A small but complete B2B SaaS DataSpec; each test gets its own copy."""
    return copy.deepcopy(SAAS_SPEC)


@pytest.fixture
def ctx():
    from dataset_generator.synthetic.context import GenerationContext

    return GenerationContext(seed=1234, now=FIXED_NOW)


@pytest.fixture
def client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """API test client with a temporary spec cache and no spec producer or database."""
    from dataset_generator.api.dependencies import get_persistence_session_factory
    from dataset_generator.api.dependencies import get_spec_cache
    from dataset_generator.api.dependencies import get_spec_client
    from dataset_generator.core.rate_limit import get_rate_limiter
    from dataset_generator.main import app
    from dataset_generator.services.spec_cache import SpecCache

    cache = SpecCache(tmp_path / "specs")
    app.dependency_overrides[get_spec_cache] = lambda: cache
    app.dependency_overrides[get_spec_client] = lambda: None
    app.dependency_overrides[get_persistence_session_factory] = lambda: None
    get_rate_limiter().reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_rate_limiter().reset()

