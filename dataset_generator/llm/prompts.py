"""Prompt construction for the DataSpec producer."""

from __future__ import annotations

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
import hashlib
import json
from typing import Any

DEFAULT_GUIDANCE_KEY = "Custom"

BUSINESS_TYPE_GUIDANCE: dict[str, str] = {
    "B2B SaaS": """
- Plans: Starter 99/month, Professional 299/month, Enterprise 999/month, Custom 5000/month.
- Events: demo_requested, trial_started, contract_signed, user_invited, login, feature_usage,
  api_call, admin_action, support_ticket, contract_renewal (recurring on billing_cycle), churn.
- Fields: user_id, user_role, company_id, company_name, company_size, subscription_plan,
  billing_cycle, plan_price, contract_value, seats_purchased, event_type, event_timestamp,
  session_duration_minutes, api_calls_count, payment_amount.
- user_role is one of admin, manager, user, viewer. Never include product_id or category.""",
    "B2C SaaS": """
- Plans: Free 0, Basic 9/month, Premium 29/month, Family 79/month.
- Events: signup, trial_started, subscription_created, login, feature_usage, content_created,
  social_share, referral_sent, upgrade, downgrade, cancellation (churn).
- Fields: user_id, user_age, country, signup_date, subscription_plan, billing_cycle, plan_price,
  subscription_status, device_type, event_type, event_timestamp, session_duration_minutes,
  payment_amount. Never include company_id.""",
    "Ecommerce": """
- Prices: Electronics 50-2000, Clothing 10-200, Home 20-500.
- Events: account_created, product_viewed, add_to_cart, purchase, return_requested.
- Fields: customer_id, product_id, product_name, category, order_id, unit_price, quantity,
  shipping_cost, tax_amount, total_amount, payment_method, order_status, event_type.
- total_amount = unit_price * quantity + shipping_cost + tax_amount.""",
    "Healthcare": """
- Costs: primary care 50-200, specialist 150-500, surgery 5000-50000.
- Events: patient_registered, appointment_scheduled, appointment_attended, procedure_performed,
  claim_submitted, follow_up.
- Fields: patient_id, provider_id, procedure_code, procedure_cost, claim_amount, claim_status,
  insurance_payout, denied_reason, admission_date, discharge_date, appointment_status.
- claim_amount >= procedure_cost; insurance_payout = 0 when claim_status is Denied;
  discharge_date > admission_date.""",
    "Fintech": """
- Amounts: small 1-100, medium 100-1000, large 1000-10000.
- Events: account_opened, deposit, withdrawal, transfer, payment, fraud_check, account_closed.
- Fields: account_id, transaction_id, amount, currency, transaction_type, transaction_amount,
  balance_before, balance_after, transaction_fee, fraud_score, event_type.""",
    "Education": """
- Course prices: free 0, basic 50-200, advanced 200-1000, degree 5000-50000.
- Events: student_enrolled, lesson_completed, assignment_submitted, exam_taken, course_dropped.
- Fields: student_id, course_id, instructor_id, course_price, assignment_score, exam_score,
  gpa, course_status, enrollment_status, event_type.""",
    "Retail": """
- Events: customer_joined, store_visit, purchase, return, loyalty_redeemed.
- Fields: customer_id, product_id, store_id, transaction_id, quantity, unit_price,
  total_amount, loyalty_points_earned, payment_method, event_type.""",
    "Manufacturing": """
- Events: work_order_created, production_started, quality_check, maintenance, production_completed.
- Fields: product_id, machine_id, work_order_id, raw_materials_cost, labor_cost,
  equipment_cost, total_cost, quality_score, defect_count, production_time_hours, event_type.
- total_cost = raw_materials_cost + labor_cost + equipment_cost. Never include customer_id.""",
    "Transportation": """
- Events: vehicle_registered, trip_started, trip_completed, refuel, maintenance.
- Fields: vehicle_id, driver_id, trip_id, distance_miles, fuel_consumed_gallons,
  trip_duration_hours, fuel_cost, maintenance_cost, total_cost, safety_score, event_type.""",
    "Hospitality": """
- Room rates: standard/deluxe 100-300, suite/presidential 500-2000.
- Events: booking_created, check_in, check_out, cancellation, review_submitted.
- Fields: guest_id, booking_id, hotel_id, room_id, room_type, room_rate, number_of_guests,
  number_of_nights, check_in_date, check_out_date, ancillary_charges, tax_amount,
  total_charge, booking_status, review_score, review_comment, event_type.""",
    "Real Estate": """
- Events: property_listed, offer_made, contract_signed, property_sold, lease_agreement.
- Fields: property_id, agent_id, client_id, property_type, listing_price, offer_amount,
  sale_price, monthly_rent, security_deposit, contract_date, closing_date,
  lease_start_date, lease_end_date, transaction_type, transaction_status, event_type.""",
    "Custom": """
- Pick the entities and events a real business of this kind records.
- Include ids, timestamps, categorical dimensions and numeric measures on every row.""",
}

OUTPUT_FORMAT = """{
  "entities": [
    {"name": "entity_name", "attributes": {
      "attribute_name": {"type": "id|faker|choice|conditional", "prefix": "usr_",
        "method": "namespace.method", "values": ["a", "b"], "weights": [0.6, 0.4],
        "on": ["other_attribute"], "cases": {"other_attribute=value": 1, "default": 0}}}}
  ],
  "event_stream_table": {"name": "table_name", "columns": [
    {"name": "column_name", "source": {"type": "id|timestamp|choice|reference|event_name|lookup|literal",
      "entity": "entity_name", "attribute": "attribute_name", "value": "price(10,100)"}}
  ]},
  "simulation": {"initial_event": "event_name", "events": {
    "event_name": {"type": "recurring|random|churn", "frequency": {"on": "entity.billing_cycle"},
      "avg_per_entity_per_month": 5, "monthly_rate": 0.05,
      "outputs": {"column_name": {"type": "reference|literal", "entity": "entity_name",
        "attribute": "attribute_name", "value": 0}}}
  }}
}"""


@dataclass(frozen=True)
class SpecPromptParams:
    """Generation parameters that determine the produced DataSpec."""

    business_type: str
    schema_type: str
    time_range: list[str] = field(default_factory=list)
    growth_pattern: str = ""
    variation_level: str = ""
    granularity: str = ""
    context: str | None = None

    def cache_payload(self) -> dict[str, Any]:
        return asdict(self)

    def cache_key(self) -> str:
        """Stable sha256 of the parameters; equal parameters share one cached spec."""
        encoded = json.dumps(self.cache_payload(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def _schema_section(schema_type: str) -> str:
    if schema_type == "Star Schema":
        return (
            "- Star schema: the event stream becomes the fact table (suffix _fact) and every entity "
            "becomes a dimension table (suffix _dim); reference entity ids from the events."
        )
    return (
        "- One big table: every event row carries the entity context needed for analysis "
        "without joins."
    )


def build_spec_prompt(params: SpecPromptParams) -> str:
    """System prompt asking for a DataSpec JSON document."""
    guidance = BUSINESS_TYPE_GUIDANCE.get(params.business_type, BUSINESS_TYPE_GUIDANCE[DEFAULT_GUIDANCE_KEY])
    metadata = [
        f'- "time_range": {json.dumps(params.time_range)}' if params.time_range else "",
        f'- "granularity": "{params.granularity}"' if params.granularity else "",
        f'- "growth_pattern": "{params.growth_pattern}"' if params.growth_pattern else "",
        f'- "variation_level": "{params.variation_level}"' if params.variation_level else "",
    ]
    context = f"\nBusiness context from the user: {params.context}\n" if params.context else ""

    return f"""You are a data architect designing a synthetic dataset specification for a '{params.business_type}' business.
{context}
Produce raw, event-level data that analysts can aggregate themselves. Do not include
pre-aggregated columns such as acv, mrr, totals or averages.

Business guidance:{guidance}

Schema:
{_schema_section(params.schema_type)}

Parameters:
{chr(10).join(line for line in metadata if line)}

Rules:
- Faker methods use namespace.method names such as person.fullName, internet.email,
  commerce.productName, commerce.price, commerce.department, number.int, location.country.
- Numbers are JSON numbers, not strings. Field names are snake_case.
- Choice attributes always carry values and weights of equal length.
- Literal price ranges use price(min,max); integer ranges use int(min,max).

Return only a JSON object with this structure:
{OUTPUT_FORMAT}"""


def build_user_message(params: SpecPromptParams) -> str:
    shape = "a single wide table (OBT)" if params.schema_type == "OBT" else "a star schema (fact and dimension tables)"
    return f"Design the DataSpec for a {params.business_type} dataset using {shape} for analytics."
