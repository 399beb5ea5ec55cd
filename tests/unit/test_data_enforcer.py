"""Unit tests for the record repair passes."""

from __future__ import annotations

from datetime import datetime

from dataset_generator.synthetic.constants import COUNTRIES
from dataset_generator.synthetic.constants import SAAS_PLANS
from dataset_generator.synthetic.constants import USER_ROLES
from dataset_generator.synthetic.enforcers import as_number
from dataset_generator.synthetic.enforcers import enforce_healthcare_rules
from dataset_generator.synthetic.enforcers import enforce_numeric_fields
from dataset_generator.synthetic.enforcers import enforce_realistic_defaults
from dataset_generator.synthetic.enforcers import parse_number
from dataset_generator.synthetic.enforcers import remove_pre_aggregated_values
from dataset_generator.synthetic.enforcers import sanitize_placeholder_values


def test_parse_number_reads_leading_numeric_prefix() -> None:
    assert parse_number("12.5 USD") == 12.5
    assert parse_number("99") == 99
    assert parse_number("about 3") is None
    assert as_number("n/a", default=7) == 7


def test_placeholders_are_replaced_per_field_then_globally(ctx) -> None:
    record = {"subscription_plan": "Option A", "notes": "option b", "event_type": "purchase"}

    result = sanitize_placeholder_values(record, ctx=ctx)

    assert result["subscription_plan"] in SAAS_PLANS
    assert result["notes"] == "Default Value"
    assert result["event_type"] == "purchase"
    assert record["subscription_plan"] == "Option A"


def test_stray_tokens_in_enum_and_date_fields_are_resampled(ctx) -> None:
    result = sanitize_placeholder_values({"user_role": "x7k2p9", "signup_date": "a8f3k2l9"}, ctx=ctx)

    assert result["user_role"] in USER_ROLES
    signup = datetime.fromisoformat(result["signup_date"].replace("Z", "+00:00"))
    assert (ctx.now - signup).days <= 365


def test_letter_only_enum_values_are_kept(ctx) -> None:
    record = {"user_role": "qwzx", "event_type": "purchase", "billing_cycle": "q2w9"}

    result = sanitize_placeholder_values(record, ctx=ctx)

    assert result["user_role"] == "qwzx"
    assert result["event_type"] == "purchase"
    assert result["billing_cycle"] != "q2w9"


def test_numeric_fields_are_coerced_and_clamped(ctx) -> None:
    result = enforce_numeric_fields(
        {"plan_price": "99 USD", "quantity": 500, "api_calls_count": "lots", "unrelated": "7"},
        ctx=ctx,
    )

    assert result["plan_price"] == 99
    assert 1 <= result["quantity"] <= 10
    assert 1 <= result["api_calls_count"] <= 1000
    assert result["unrelated"] == "7"


def test_numeric_fields_keep_values_in_range(ctx) -> None:
    record = {"plan_price": 299, "gpa": 3.4}

    assert enforce_numeric_fields(record, ctx=ctx) == record


def test_realistic_defaults_fill_blank_fields(ctx) -> None:
    result = enforce_realistic_defaults({"country": "", "subscription_plan": "Pro"}, ctx=ctx)

    assert result["country"] in COUNTRIES
    assert result["currency"] == "USD"
    assert result["subscription_plan"] == "Pro"
    assert result["signup_date"].endswith("Z")


def test_denied_claims_pay_nothing(ctx) -> None:
    result = enforce_healthcare_rules({"claim_status": "Denied", "insurance_payout": 500}, ctx=ctx)

    assert result["insurance_payout"] == 0


def test_claim_amount_covers_procedure_cost(ctx) -> None:
    result = enforce_healthcare_rules({"claim_amount": 100, "procedure_cost": 1000}, ctx=ctx)

    assert 1100 <= result["claim_amount"] <= 1600


def test_discharge_before_admission_is_moved_after_it(ctx) -> None:
    result = enforce_healthcare_rules(
        {"admission_date": "2024-03-10T08:00:00Z", "discharge_date": "2024-03-01T08:00:00Z"},
        ctx=ctx,
    )

    admitted = datetime.fromisoformat("2024-03-10T08:00:00+00:00")
    discharged = datetime.fromisoformat(result["discharge_date"].replace("Z", "+00:00"))
    assert 1 <= (discharged - admitted).days <= 5


def test_healthcare_rules_are_idempotent(ctx) -> None:
    record = {
        "claim_status": "Denied",
        "insurance_payout": 500,
        "claim_amount": 10,
        "procedure_cost": 250,
        "admission_date": "2024-03-10",
        "discharge_date": "garbage",
    }

    once = enforce_healthcare_rules(record, ctx=ctx)

    assert enforce_healthcare_rules(once, ctx=ctx) == once


def test_remove_pre_aggregated_values() -> None:
    assert remove_pre_aggregated_values({"acv": 1, "mrr": 2, "plan_price": 3}) == {"plan_price": 3}
