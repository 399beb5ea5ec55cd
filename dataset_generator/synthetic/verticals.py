"""Per-vertical pricing and consistency rules, dispatched on the business type name."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from datetime import timedelta
import logging
from typing import Any

from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.context import parse_datetime_utc
from dataset_generator.synthetic.context import to_iso_utc
from dataset_generator.synthetic.enforcers import as_number
from dataset_generator.synthetic.enforcers import is_number
from dataset_generator.synthetic.enforcers import parse_number
from dataset_generator.synthetic.entities import DataRecord
from dataset_generator.synthetic.saas import enforce_saas_rules
from dataset_generator.synthetic.saas import fix_saas_pricing

logger = logging.getLogger(__name__)

VerticalRule = Callable[[DataRecord, GenerationContext], None]

ECOMMERCE_PAYMENT_EVENTS = frozenset(
    {
        "purchase",
        "order_placed",
        "payment_processed",
        "checkout_completed",
        "order_confirmed",
        "payment_successful",
        "transaction_completed",
    }
)

POSITIVE_REVIEWS = (
    "Excellent service and beautiful room!",
    "Amazing stay, highly recommend!",
    "Perfect location and great amenities.",
    "Outstanding hospitality and clean facilities.",
    "Wonderful experience, will definitely return!",
)
NEUTRAL_REVIEWS = (
    "Average stay, nothing special.",
    "Decent hotel but could be better.",
    "Okay experience, room was fine.",
    "Standard hotel with basic amenities.",
    "Acceptable but not exceptional.",
)
NEGATIVE_REVIEWS = (
    "Poor service and dirty room.",
    "Terrible experience, would not recommend.",
    "Unfriendly staff and outdated facilities.",
    "Very disappointed with our stay.",
    "Never staying here again.",
)

BOOKING_STATUS_BY_EVENT = {
    "cancellation": "cancelled",
    "check_in": "checked_in",
    "check_out": "checked_out",
    "booking_created": "confirmed",
}

RENTAL_FIELDS = ("monthly_rent", "security_deposit", "lease_start_date", "lease_end_date")
SALE_FIELDS = ("sale_price", "offer_amount", "closing_date")


def _coerce(record: DataRecord, field: str, ctx: GenerationContext, low: float, high: float, *, digits: int | None = None) -> None:
    """Turn a string value into a number; unparsable strings are resampled in range."""
    value = record.get(field)
    if not isinstance(value, str):
        return
    parsed = parse_number(value)
    if parsed is not None:
        record[field] = parsed
    elif digits is None:
        record[field] = ctx.randint(int(low), int(high))
    else:
        record[field] = ctx.uniform(low, high, digits=digits)


def _ecommerce(record: DataRecord, ctx: GenerationContext) -> None:
    _coerce(record, "unit_price", ctx, 10, 500)
    _coerce(record, "quantity", ctx, 1, 10)

    unit_price, quantity = record.get("unit_price"), record.get("quantity")
    if is_number(unit_price) and is_number(quantity):
        subtotal = unit_price * quantity
        shipping = ctx.randint(0, 50)
        tax = round(subtotal * ctx.uniform(0.08, 0.12, digits=2), 2)
        record["shipping_cost"] = shipping
        record["tax_amount"] = tax
        record["total_amount"] = round(subtotal + shipping + tax, 2)

    if record.get("payment_amount") is None:
        return
    _coerce(record, "payment_amount", ctx, 0, 0)
    if record.get("event_type") in ECOMMERCE_PAYMENT_EVENTS:
        total = record.get("total_amount")
        record["payment_amount"] = total if is_number(total) and total else ctx.randint(10, 1000)


def _healthcare(record: DataRecord, ctx: GenerationContext) -> None:
    _coerce(record, "procedure_cost", ctx, 100, 10000)
    _coerce(record, "claim_amount", ctx, 100, 15000)
    _coerce(record, "insurance_payout", ctx, 0, 0)

    if record.get("insurance_payout") is None:
        return
    claim = record.get("claim_amount")
    if record.get("claim_status") == "Denied":
        record["insurance_payout"] = 0
    elif record.get("claim_status") == "Approved" and is_number(claim) and claim:
        record["insurance_payout"] = round(claim * ctx.uniform(0.7, 0.9, digits=2), 2)


def _finance(record: DataRecord, ctx: GenerationContext) -> None:
    _coerce(record, "transaction_amount", ctx, 1, 10000)
    _coerce(record, "balance_before", ctx, 0, 50000)
    _coerce(record, "transaction_fee", ctx, 0, 5, digits=2)
    _coerce(record, "fraud_score", ctx, 0, 100)

    before, amount = record.get("balance_before"), record.get("transaction_amount")
    if not (is_number(before) and is_number(amount)):
        return
    transaction_type = record.get("transaction_type")
    if transaction_type in ("deposit", "credit"):
        after = before + amount
    elif transaction_type in ("withdrawal", "debit"):
        after = before - amount
    else:
        after = before
    record["balance_after"] = max(after, 0)


def _education(record: DataRecord, ctx: GenerationContext) -> None:
    _coerce(record, "course_price", ctx, 50, 2000)
    _coerce(record, "assignment_score", ctx, 0, 100)
    _coerce(record, "exam_score", ctx, 0, 100)
    _coerce(record, "gpa", ctx, 0, 4, digits=2)


def _manufacturing(record: DataRecord, ctx: GenerationContext) -> None:
    _coerce(record, "raw_materials_cost", ctx, 10, 1000)
    _coerce(record, "labor_cost", ctx, 20, 1000)
    _coerce(record, "equipment_cost", ctx, 1000, 100000)
    _coerce(record, "quality_score", ctx, 0, 100)
    _coerce(record, "defect_count", ctx, 0, 10)

    materials, labor = record.get("raw_materials_cost"), record.get("labor_cost")
    if is_number(materials) and is_number(labor):
        record["total_cost"] = materials + labor + as_number(record.get("equipment_cost"))


def _logistics(record: DataRecord, ctx: GenerationContext) -> None:
    _coerce(record, "distance_miles", ctx, 1, 1000)
    _coerce(record, "fuel_consumed_gallons", ctx, 1, 100)
    _coerce(record, "trip_duration_hours", ctx, 0.5, 24, digits=1)
    _coerce(record, "maintenance_cost", ctx, 50, 5000)
    _coerce(record, "safety_score", ctx, 0, 100)

    gallons = record.get("fuel_consumed_gallons")
    if is_number(gallons):
        record["fuel_cost"] = round(gallons * ctx.uniform(3, 5, digits=2), 2)
        record["total_cost"] = round(record["fuel_cost"] + as_number(record.get("maintenance_cost")), 2)


def _later_iso(start: Any, ctx: GenerationContext, low: int, high: int) -> str | None:
    parsed = parse_datetime_utc(start)
    if parsed is None:
        return None
    return to_iso_utc(parsed + timedelta(days=ctx.randint(low, high)))


def _hospitality(record: DataRecord, ctx: GenerationContext) -> None:
    check_out = record.get("check_out_date")
    if isinstance(check_out, str) and check_out and ("plusDays" in check_out or "T" not in check_out):
        record["check_out_date"] = _later_iso(record.get("check_in_date"), ctx, 1, 7) or to_iso_utc(ctx.soon(days=365))

    event_type = record.get("event_type")
    if event_type in BOOKING_STATUS_BY_EVENT:
        record["booking_status"] = BOOKING_STATUS_BY_EVENT[event_type]
    status = record.get("booking_status")

    if status in ("cancelled", "no_show") or (status == "confirmed" and event_type == "booking_created"):
        # Nothing is charged or reviewed before the guest stays.
        record.update(
            total_charge=0,
            tax_amount=0,
            ancillary_charges=0,
            review_score=None,
            review_comment=None,
            check_out_date=None,
        )
    else:
        room_rate = as_number(record.get("room_rate"))
        if "tax_amount" in record and "room_rate" in record:
            record["tax_amount"] = round(room_rate * ctx.uniform(0.08, 0.15, digits=3), 2)

        check_in = parse_datetime_utc(record.get("check_in_date"))
        check_out_at = parse_datetime_utc(record.get("check_out_date"))
        if check_in is not None and check_out_at is not None and check_out_at <= check_in:
            record["check_out_date"] = to_iso_utc(check_in + timedelta(days=ctx.randint(1, 7)))

        ancillary = as_number(record.get("ancillary_charges"))
        tax = as_number(record.get("tax_amount"))
        if room_rate and ancillary and tax:
            record["total_charge"] = round(room_rate + ancillary + tax, 2)

        score = record.get("review_score")
        if score is not None and "review_comment" in record:
            score = as_number(score, default=1)
            if score >= 4:
                record["review_comment"] = ctx.choice(POSITIVE_REVIEWS)
            elif score <= 2:
                record["review_comment"] = ctx.choice(NEGATIVE_REVIEWS)
            else:
                record["review_comment"] = ctx.choice(NEUTRAL_REVIEWS)

    if "room_rate" in record and as_number(record.get("room_rate")) in (0, 150):
        # 150 is the flat rate LLM-produced specs tend to emit.
        room_type = record.get("room_type") or "standard"
        if room_type in ("standard", "deluxe"):
            record["room_rate"] = ctx.randint(100, 300)
        elif room_type in ("suite", "presidential"):
            record["room_rate"] = ctx.randint(500, 2000)
        else:
            record["room_rate"] = ctx.randint(100, 2000)


def _listing_transaction_type(record: DataRecord, ctx: GenerationContext) -> str:
    if record.get("monthly_rent") and not record.get("listing_price"):
        return "rental"
    if record.get("listing_price") and not record.get("monthly_rent"):
        return "sale"
    return "rental" if ctx.random() < 0.5 else "sale"


def _real_estate(record: DataRecord, ctx: GenerationContext) -> None:
    event_type = record.get("event_type")
    if event_type in ("property_sold", "contract_signed"):
        record["transaction_type"], record["transaction_status"] = "sale", "sold"
    elif event_type == "lease_agreement":
        record["transaction_type"], record["transaction_status"] = "rental", "rented"
    elif event_type == "property_listed":
        record["transaction_type"], record["transaction_status"] = _listing_transaction_type(record, ctx), "listed"
    elif event_type == "offer_made":
        record["transaction_type"], record["transaction_status"] = _listing_transaction_type(record, ctx), "under_contract"
    else:
        if record.get("transaction_type") not in ("sale", "rental"):
            record["transaction_type"] = "rental" if ctx.random() < 0.5 else "sale"
        closed = "rented" if record["transaction_type"] == "rental" else "sold"
        record["transaction_status"] = ctx.choice(("listed", "under_contract", closed))

    if record["transaction_type"] == "sale":
        for field in RENTAL_FIELDS:
            record.pop(field, None)
        _settle_sale_price(record, ctx)
        contract = parse_datetime_utc(record.get("contract_date"))
        closing = parse_datetime_utc(record.get("closing_date"))
        if contract is not None and closing is not None and closing <= contract:
            record["closing_date"] = to_iso_utc(contract + timedelta(days=ctx.randint(30, 90)))
    else:
        for field in SALE_FIELDS:
            record.pop(field, None)
        if not record.get("monthly_rent"):
            record["monthly_rent"] = ctx.randint(1000, 10000)
        if not record.get("security_deposit"):
            rent = as_number(record["monthly_rent"], default=1000)
            record["security_deposit"] = round(rent * ctx.uniform(1, 2, digits=1))
        start = parse_datetime_utc(record.get("lease_start_date"))
        end = parse_datetime_utc(record.get("lease_end_date"))
        if start is not None and end is not None and end <= start:
            record["lease_end_date"] = to_iso_utc(start + timedelta(days=30 * ctx.randint(6, 24)))


def _settle_sale_price(record: DataRecord, ctx: GenerationContext) -> None:
    offer = as_number(record.get("offer_amount"))
    if record.get("transaction_status") == "sold" and not record.get("sale_price"):
        if offer:
            record["sale_price"] = round(offer * ctx.uniform(0.95, 1.02, digits=3))
        elif record.get("listing_price"):
            record["sale_price"] = round(as_number(record["listing_price"]) * ctx.uniform(0.9, 1.1, digits=3))

    sale = as_number(record.get("sale_price"))
    if offer and sale and abs(offer - sale) / ((offer + sale) / 2) > 0.1:
        record["sale_price"] = round(offer * ctx.uniform(0.95, 1.02, digits=3))


def _saas(record: DataRecord, ctx: GenerationContext) -> None:
    record.update(fix_saas_pricing(enforce_saas_rules(record, ctx=ctx), ctx=ctx))


# Keywords are matched case-insensitively against the business type; first match wins.
VERTICAL_RULES: tuple[tuple[tuple[str, ...], VerticalRule], ...] = (
    (("saas",), _saas),
    (("ecommerce", "e-commerce", "retail"), _ecommerce),
    (("healthcare", "medical"), _healthcare),
    (("finance", "fintech", "banking", "insurance"), _finance),
    (("education", "learning"), _education),
    (("manufacturing", "industrial"), _manufacturing),
    (("logistics", "transportation"), _logistics),
    (("hospitality", "hotel"), _hospitality),
    (("real estate", "property"), _real_estate),
)


def find_vertical_rule(business_type: str) -> VerticalRule | None:
    lowered = business_type.lower()
    for keywords, rule in VERTICAL_RULES:
        if any(keyword in lowered for keyword in keywords):
            return rule
    return None


def enforce_vertical_rules(record: Mapping[str, Any], business_type: str, *, ctx: GenerationContext) -> DataRecord:
    """Apply the rules of the vertical named by ``business_type``; unknown types pass through."""
    result = dict(record)
    rule = find_vertical_rule(business_type or "")
    if rule is None:
        logger.debug("No vertical rules for business type %r", business_type)
        return result
    rule(result, ctx)
    return result
