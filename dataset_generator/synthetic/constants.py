"""Business value tables consulted by the enforcers and the quality validator."""

from __future__ import annotations

import re

PLACEHOLDER_PATTERN = re.compile(r"option\s*[a-z]", re.IGNORECASE)
PLACEHOLDER_REPLACEMENT = "Default Value"

SAAS_PLANS = ("Free", "Basic", "Pro", "Enterprise")
BILLING_CYCLES = ("monthly", "annual")
PLAN_PRICES = (0, 99, 299, 999)
USER_ROLES = ("admin", "manager", "user", "viewer")
DEVICE_TYPES = ("mobile", "desktop", "tablet")

COUNTRIES = (
    "United States",
    "Canada",
    "United Kingdom",
    "Germany",
    "Australia",
    "India",
    "Brazil",
    "France",
    "Japan",
    "South Africa",
)

# field -> (min, max)
NUMERIC_FIELD_RANGES: dict[str, tuple[float, float]] = {
    "api_calls_count": (1, 1000),
    "storage_used_mb": (10, 10000),
    "feature_usage_count": (1, 100),
    "admin_actions_count": (0, 50),
    "session_duration_minutes": (1, 120),
    "payment_amount": (0, 10000),
    "plan_price": (0, 5000),
    "contract_value": (0, 100000),
    "quantity": (1, 10),
    "unit_price": (1, 2000),
    "product_price": (1, 2000),
    "total_amount": (0, 10000),
    "shipping_cost": (0, 100),
    "tax_amount": (0, 1000),
    "discount_amount": (0, 1000),
    "procedure_cost": (50, 50000),
    "claim_amount": (50, 50000),
    "insurance_payout": (0, 50000),
    "patient_responsibility": (0, 50000),
    "transaction_amount": (1, 10000),
    "balance_before": (0, 100000),
    "balance_after": (0, 100000),
    "transaction_fee": (0, 100),
    "fraud_score": (0, 100),
    "course_price": (0, 50000),
    "assignment_score": (0, 100),
    "exam_score": (0, 100),
    "gpa": (0, 4),
    "loyalty_points": (0, 1000),
    "loyalty_points_earned": (0, 100),
    "raw_materials_cost": (10, 1000),
    "labor_cost": (20, 1000),
    "equipment_cost": (1000, 100000),
    "total_cost": (1000, 100000),
    "quality_score": (0, 100),
    "defect_count": (0, 10),
    "production_time_hours": (1, 100),
    "distance_miles": (1, 1000),
    "fuel_consumed_gallons": (1, 100),
    "trip_duration_hours": (0.5, 24),
    "fuel_cost": (5, 500),
    "maintenance_cost": (50, 5000),
    "safety_score": (0, 100),
    "driver_rating": (1, 5),
    "review_score": (1, 5),
    "room_rate": (100, 2000),
    "total_charge": (100, 5000),
    "ancillary_charges": (20, 200),
    "number_of_guests": (1, 8),
    "number_of_nights": (1, 30),
    "listing_price": (100000, 10000000),
    "sale_price": (100000, 10000000),
    "offer_amount": (100000, 10000000),
    "monthly_rent": (1000, 10000),
    "security_deposit": (1000, 20000),
    "square_footage": (500, 10000),
    "user_age": (18, 65),
    "viral_coefficient": (0, 5),
    "content_created_count": (0, 50),
    "social_shares_count": (0, 20),
    "seats_purchased": (1, 1000),
}

DEFAULT_VALUES: dict[str, tuple[str | int, ...]] = {
    # SaaS
    "subscription_plan": SAAS_PLANS,
    "billing_cycle": BILLING_CYCLES,
    "plan_price": PLAN_PRICES,
    "subscription_status": ("active", "cancelled", "expired", "trial"),
    "user_role": USER_ROLES,
    "device_type": DEVICE_TYPES,
    # Ecommerce
    "order_status": ("pending", "confirmed", "shipped", "delivered", "returned", "cancelled"),
    "payment_method": ("credit_card", "paypal", "bank_transfer", "cash"),
    "return_reason": ("defective", "wrong_size", "changed_mind", "duplicate"),
    # Healthcare
    "appointment_status": ("scheduled", "confirmed", "completed", "cancelled", "no_show"),
    "procedure_type": ("consultation", "surgery", "examination", "therapy"),
    "insurance_status": ("covered", "partial", "not_covered", "pending"),
    # Finance
    "transaction_type": ("deposit", "withdrawal", "transfer", "payment"),
    "account_type": ("checking", "savings", "credit", "investment"),
    "fraud_status": ("clean", "suspicious", "flagged", "confirmed"),
    # Education
    "course_status": ("enrolled", "completed", "dropped", "waitlisted"),
    "grade_level": ("freshman", "sophomore", "junior", "senior"),
    "enrollment_status": ("active", "graduated", "suspended", "withdrawn"),
    # Manufacturing
    "production_status": ("planned", "in_progress", "completed", "cancelled"),
    "quality_status": ("passed", "failed", "pending", "rework"),
    "equipment_status": ("operational", "maintenance", "broken", "retired"),
    # Logistics
    "shipment_status": ("pending", "in_transit", "delivered", "returned"),
    "vehicle_status": ("available", "in_use", "maintenance", "out_of_service"),
    "route_status": ("planned", "active", "completed", "cancelled"),
    # Hospitality
    "booking_status": ("confirmed", "checked_in", "checked_out", "cancelled", "no_show"),
    "room_type": ("standard", "deluxe", "suite", "presidential"),
    # Real estate
    "property_type": ("residential", "commercial", "industrial", "land"),
    "transaction_status": ("pending", "under_contract", "closed", "cancelled"),
}

DEFAULT_DATE_FIELDS = (
    "signup_date",
    "order_date",
    "appointment_date",
    "transaction_date",
    "created_at",
    "updated_at",
    "last_login",
    "trip_date",
    "billing_date",
)

# Per-field replacements for values that match PLACEHOLDER_PATTERN.
PLACEHOLDER_FALLBACKS: dict[str, tuple[str, ...]] = {
    "subscription_plan": SAAS_PLANS,
    "plan_name": SAAS_PLANS,
    "product_name": ("Product A", "Product B", "Product C"),
    "category": ("Electronics", "Clothing", "Home", "Books"),
    "status": ("active", "pending", "completed", "cancelled"),
    "event_type": ("login", "purchase", "view", "click"),
    "country": ("United States", "Canada", "United Kingdom", "Germany"),
    "payment_method": ("credit_card", "paypal", "bank_transfer", "cash"),
    "billing_cycle": BILLING_CYCLES,
    "user_role": ("admin", "user", "viewer"),
    "device_type": DEVICE_TYPES,
}

# Enum-valued fields whose stray random tokens are swapped for a valid member.
ENUM_FIELD_VALUES: dict[str, tuple[str, ...]] = {
    "user_role": USER_ROLES,
    "subscription_plan": SAAS_PLANS,
    "billing_cycle": BILLING_CYCLES,
    "event_type": (
        "login",
        "signup",
        "trial_started",
        "subscription_created",
        "feature_usage",
        "api_call",
        "upgrade",
        "downgrade",
        "cancellation",
        "content_created",
        "social_share",
        "support_ticket",
        "contract_signed",
        "user_invited",
        "admin_action",
        "contract_renewal",
        "churn",
    ),
    "device_type": DEVICE_TYPES,
    "order_status": DEFAULT_VALUES["order_status"],
    "payment_method": DEFAULT_VALUES["payment_method"],
    "appointment_status": DEFAULT_VALUES["appointment_status"],
    "transaction_type": DEFAULT_VALUES["transaction_type"],
    "account_type": DEFAULT_VALUES["account_type"],
    "course_status": DEFAULT_VALUES["course_status"],
    "production_status": DEFAULT_VALUES["production_status"],
    "shipment_status": ("pending", "in_transit", "delivered", "returned"),
}

SESSION_DURATION_RANGES: dict[str, tuple[int, int]] = {
    "login": (5, 30),
    "logout": (1, 5),
    "api_call": (1, 10),
    "feature_usage": (15, 120),
    "admin_action": (30, 180),
    "support_ticket": (20, 90),
    "user_invited": (5, 15),
    "demo_requested": (10, 30),
    "contract_signed": (60, 240),
    "trial_started": (15, 45),
    "subscription_created": (30, 90),
    "upgrade": (20, 60),
    "downgrade": (10, 30),
    "cancellation": (15, 45),
    "contract_renewal": (30, 90),
    "churn": (5, 15),
}
DEFAULT_SESSION_DURATION = (5, 30)

SUBSCRIPTION_EVENTS = frozenset(
    {
        "signup",
        "trial_started",
        "subscription_created",
        "upgrade",
        "downgrade",
        "contract_signed",
        "contract_renewal",
    }
)

SAAS_LIFECYCLE_EVENTS = frozenset(
    {
        "signup",
        "trial_started",
        "subscription_created",
        "login",
        "feature_usage",
        "api_call",
        "upgrade",
        "downgrade",
        "cancellation",
        "demo_requested",
        "contract_signed",
        "user_invited",
        "admin_action",
        "support_ticket",
        "contract_renewal",
        "content_created",
        "social_share",
        "referral_sent",
    }
)

BILLING_EVENTS = frozenset(
    {
        "subscription_created",
        "contract_renewal",
        "churn",
        "upgrade",
        "downgrade",
        "payment_processed",
        "billing_cycle",
    }
)

CONTRACT_VALUE_BY_PLAN: dict[str, int] = {
    "Starter": 1188,
    "Professional": 3588,
    "Enterprise": 11988,
    "Custom": 60000,
}

REQUIRED_FIELDS_BY_BUSINESS_TYPE: dict[str, tuple[str, ...]] = {
    "B2B SaaS": ("user_id", "company_id", "subscription_plan", "plan_price", "event_type"),
    "B2C SaaS": ("user_id", "subscription_plan", "plan_price", "event_type"),
    "Ecommerce": ("customer_id", "product_id", "order_id", "total_amount", "event_type"),
    "Healthcare": ("patient_id", "provider_id", "procedure_code", "event_type"),
    "Fintech": ("account_id", "transaction_id", "amount", "event_type"),
    "Education": ("student_id", "course_id", "event_type"),
    "Retail": ("customer_id", "product_id", "transaction_id", "total_amount", "event_type"),
    "Manufacturing": ("product_id", "machine_id", "work_order_id", "event_type"),
    "Transportation": ("vehicle_id", "driver_id", "trip_id", "event_type"),
    "Hospitality": ("guest_id", "booking_id", "hotel_id", "room_id", "event_type"),
    "Real Estate": ("property_id", "agent_id", "client_id", "event_type"),
}

B2B_PLANS = frozenset({"Starter", "Professional", "Enterprise", "Custom"})
B2C_PLANS = frozenset({"Free", "Basic", "Premium", "Family"})
