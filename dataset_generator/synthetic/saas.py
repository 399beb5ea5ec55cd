"""SaaS-specific consistency rules for event records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dataset_generator.synthetic.constants import BILLING_CYCLES
from dataset_generator.synthetic.constants import BILLING_EVENTS
from dataset_generator.synthetic.constants import CONTRACT_VALUE_BY_PLAN
from dataset_generator.synthetic.constants import COUNTRIES
from dataset_generator.synthetic.constants import DEFAULT_SESSION_DURATION
from dataset_generator.synthetic.constants import DEVICE_TYPES
from dataset_generator.synthetic.constants import PLAN_PRICES
from dataset_generator.synthetic.constants import SAAS_LIFECYCLE_EVENTS
from dataset_generator.synthetic.constants import SAAS_PLANS
from dataset_generator.synthetic.constants import SESSION_DURATION_RANGES
from dataset_generator.synthetic.constants import SUBSCRIPTION_EVENTS
from dataset_generator.synthetic.constants import USER_ROLES
from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.context import to_iso_utc
from dataset_generator.synthetic.enforcers import as_number
from dataset_generator.synthetic.enforcers import is_number
from dataset_generator.synthetic.entities import DataRecord

SIGNUP_WINDOW_DAYS = 730


def enforce_saas_rules(record: Mapping[str, Any], *, ctx: GenerationContext) -> DataRecord:
    """Fill identity and subscription fields, diversify lifecycle fields, size sessions."""
    result = dict(record)
    event_type = result.get("event_type")

    if event_type:
        if not result.get("user_id"):
            result["user_id"] = f"usr_{ctx.uuid()}"
        if not result.get("company_id") and event_type != "signup":
            result["company_id"] = f"comp_{ctx.uuid()}"
        if not result.get("user_role"):
            result["user_role"] = ctx.choice(USER_ROLES)

        if event_type in SUBSCRIPTION_EVENTS:
            if not result.get("subscription_plan"):
                result["subscription_plan"] = ctx.choice(SAAS_PLANS)
            if not result.get("billing_cycle"):
                result["billing_cycle"] = ctx.choice(BILLING_CYCLES)
            if not result.get("plan_price"):
                result["plan_price"] = ctx.choice(PLAN_PRICES)

        if event_type in SAAS_LIFECYCLE_EVENTS:
            _diversify_lifecycle_fields(result, ctx)

    if "session_duration_minutes" in result and event_type:
        low, high = SESSION_DURATION_RANGES.get(event_type, DEFAULT_SESSION_DURATION)
        result["session_duration_minutes"] = ctx.randint(low, high)

    return result


def _diversify_lifecycle_fields(result: DataRecord, ctx: GenerationContext) -> None:
    if "signup_date" in result:
        result["signup_date"] = to_iso_utc(ctx.recent(days=SIGNUP_WINDOW_DAYS))
    if "country" in result:
        result["country"] = ctx.choice(COUNTRIES)
    if "contract_value" in result:
        plan = result.get("subscription_plan") or result.get("plan")
        # Unknown plans keep their contract value.
        if plan in CONTRACT_VALUE_BY_PLAN:
            result["contract_value"] = CONTRACT_VALUE_BY_PLAN[plan]
    if "device_type" in result:
        result["device_type"] = ctx.choice(DEVICE_TYPES)
    if "user_age" in result:
        result["user_age"] = ctx.randint(18, 65)


def fix_saas_pricing(record: Mapping[str, Any], *, ctx: GenerationContext) -> DataRecord:
    """Only billing events carry a payment; everything else pays exactly 0."""
    result = dict(record)

    if result.get("event_type") in BILLING_EVENTS:
        plan_price = as_number(result.get("plan_price"))
        result["payment_amount"] = plan_price if plan_price > 0 else ctx.randint(100, 999)
    else:
        result["payment_amount"] = 0

    if not is_number(result["payment_amount"]):
        result["payment_amount"] = as_number(result["payment_amount"])
    return result
