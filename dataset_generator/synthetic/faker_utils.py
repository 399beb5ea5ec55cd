"""Faker method resolution and column-aware fallback values."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from datetime import datetime
from datetime import timedelta
import logging
import re
from typing import Any

from dataset_generator.synthetic.context import UTC
from dataset_generator.synthetic.context import GenerationContext
from dataset_generator.synthetic.context import to_iso_utc

logger = logging.getLogger(__name__)

ScalarValue = str | int | float | bool | None

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

PRODUCT_ADJECTIVES = (
    "Ergonomic",
    "Handcrafted",
    "Intelligent",
    "Practical",
    "Refined",
    "Rustic",
    "Sleek",
    "Small",
    "Incredible",
    "Gorgeous",
)
PRODUCT_MATERIALS = ("Steel", "Wooden", "Concrete", "Plastic", "Cotton", "Granite", "Rubber", "Bronze", "Frozen", "Fresh")
PRODUCT_NOUNS = ("Chair", "Car", "Computer", "Keyboard", "Mouse", "Bike", "Ball", "Gloves", "Pants", "Shirt", "Table", "Shoes")
DEPARTMENTS = ("Books", "Electronics", "Clothing", "Home", "Garden", "Toys", "Sports", "Beauty", "Grocery", "Automotive")
GRADES = ("A", "B", "C", "D", "F", "A-", "B+", "B-", "C+", "C-")

_FALLBACK_BY_METHOD: dict[str, ScalarValue] = {
    "fullName": "John Doe",
    "firstName": "John",
    "lastName": "Doe",
    "phoneNumber": "+1-555-0123",
    "email": "user@example.com",
    "userName": "user123",
    "url": "https://example.com",
    "productName": "Generic Product",
    "department": "General",
    "price": 99.99,
    "city": "Anytown",
    "state": "CA",
    "country": "United States",
    "streetAddress": "123 Main St",
    "zipCode": "12345",
    "companyName": "Generic Corp",
    "catchPhrase": "Quality and Innovation",
    "int": 42,
    "float": 42.5,
    "uuid": "00000000-0000-0000-0000-000000000000",
    "alpha": "abcdef",
    "numeric": "123456",
}

_FALLBACK_BY_NAMESPACE: dict[str, ScalarValue] = {
    "person": "Unknown Person",
    "internet": "unknown@example.com",
    "commerce": "Generic Item",
    "address": "Unknown Location",
    "location": "Unknown Location",
    "company": "Unknown Company",
    "number": 0,
    "string": "unknown",
}


def _product_name(ctx: GenerationContext) -> str:
    return f"{ctx.choice(PRODUCT_ADJECTIVES)} {ctx.choice(PRODUCT_MATERIALS)} {ctx.choice(PRODUCT_NOUNS)}"


def _past(ctx: GenerationContext) -> str:
    return to_iso_utc(ctx.between(ctx.now - timedelta(days=365), ctx.now))


def _future(ctx: GenerationContext) -> str:
    return to_iso_utc(ctx.between(ctx.now, ctx.now + timedelta(days=365)))


def _birthdate(ctx: GenerationContext) -> str:
    return ctx.faker.date_of_birth(minimum_age=18, maximum_age=80).isoformat()


# Namespaced method names as they appear in spec documents, mapped onto Faker providers.
FAKER_METHODS: dict[str, Callable[[GenerationContext], Any]] = {
    "person.fullName": lambda ctx: ctx.faker.name(),
    "person.firstName": lambda ctx: ctx.faker.first_name(),
    "person.lastName": lambda ctx: ctx.faker.last_name(),
    "person.jobTitle": lambda ctx: ctx.faker.job(),
    "person.prefix": lambda ctx: ctx.faker.prefix(),
    "person.sex": lambda ctx: ctx.choice(("female", "male")),
    "person.gender": lambda ctx: ctx.choice(("female", "male", "non-binary")),
    "person.phoneNumber": lambda ctx: ctx.faker.phone_number(),
    "phone.number": lambda ctx: ctx.faker.phone_number(),
    "phone.phoneNumber": lambda ctx: ctx.faker.phone_number(),
    "internet.email": lambda ctx: ctx.faker.email(),
    "internet.userName": lambda ctx: ctx.faker.user_name(),
    "internet.username": lambda ctx: ctx.faker.user_name(),
    "internet.url": lambda ctx: ctx.faker.url(),
    "internet.domainName": lambda ctx: ctx.faker.domain_name(),
    "internet.ip": lambda ctx: ctx.faker.ipv4(),
    "internet.ipv4": lambda ctx: ctx.faker.ipv4(),
    "internet.userAgent": lambda ctx: ctx.faker.user_agent(),
    "commerce.productName": _product_name,
    "commerce.product": lambda ctx: ctx.choice(PRODUCT_NOUNS),
    "commerce.productAdjective": lambda ctx: ctx.choice(PRODUCT_ADJECTIVES),
    "commerce.productMaterial": lambda ctx: ctx.choice(PRODUCT_MATERIALS),
    "commerce.department": lambda ctx: ctx.choice(DEPARTMENTS),
    "commerce.price": lambda ctx: ctx.uniform(1, 1000, digits=2),
    "company.name": lambda ctx: ctx.faker.company(),
    "company.companyName": lambda ctx: ctx.faker.company(),
    "company.catchPhrase": lambda ctx: ctx.faker.catch_phrase(),
    "company.buzzPhrase": lambda ctx: ctx.faker.bs(),
    "location.country": lambda ctx: ctx.faker.country(),
    "location.countryCode": lambda ctx: ctx.faker.country_code(),
    "location.city": lambda ctx: ctx.faker.city(),
    "location.state": lambda ctx: ctx.faker.state(),
    "location.streetAddress": lambda ctx: ctx.faker.street_address(),
    "location.zipCode": lambda ctx: ctx.faker.postcode(),
    "location.latitude": lambda ctx: float(ctx.faker.latitude()),
    "location.longitude": lambda ctx: float(ctx.faker.longitude()),
    "address.country": lambda ctx: ctx.faker.country(),
    "address.city": lambda ctx: ctx.faker.city(),
    "address.state": lambda ctx: ctx.faker.state(),
    "address.streetAddress": lambda ctx: ctx.faker.street_address(),
    "address.zipCode": lambda ctx: ctx.faker.postcode(),
    "date.past": _past,
    "date.future": _future,
    "date.recent": lambda ctx: to_iso_utc(ctx.recent()),
    "date.soon": lambda ctx: to_iso_utc(ctx.soon()),
    "date.birthdate": _birthdate,
    "date.month": lambda ctx: ctx.faker.month_name(),
    "date.weekday": lambda ctx: ctx.faker.day_of_week(),
    "number.int": lambda ctx: ctx.randint(0, 99999),
    "number.float": lambda ctx: ctx.uniform(0, 1000, digits=2),
    "datatype.number": lambda ctx: ctx.randint(0, 99999),
    "datatype.boolean": lambda ctx: ctx.random() < 0.5,
    "string.uuid": lambda ctx: ctx.uuid(),
    "string.alphanumeric": lambda ctx: ctx.alphanumeric(8),
    "string.alpha": lambda ctx: ctx.faker.pystr(min_chars=8, max_chars=8).lower(),
    "string.numeric": lambda ctx: str(ctx.randint(10_000_000, 99_999_999)),
    "finance.amount": lambda ctx: ctx.uniform(0, 1000, digits=2),
    "finance.currencyCode": lambda ctx: ctx.faker.currency_code(),
    "finance.creditCardNumber": lambda ctx: ctx.faker.credit_card_number(),
    "finance.accountNumber": lambda ctx: str(ctx.randint(10_000_000, 99_999_999)),
    "finance.transactionType": lambda ctx: ctx.choice(("deposit", "withdrawal", "payment", "invoice")),
    "lorem.word": lambda ctx: ctx.faker.word(),
    "lorem.words": lambda ctx: " ".join(ctx.faker.words(3)),
    "lorem.sentence": lambda ctx: ctx.faker.sentence(),
    "lorem.paragraph": lambda ctx: ctx.faker.paragraph(),
}


def split_method_path(path: str) -> tuple[str, str]:
    """Split ``"faker.namespace.method"`` / ``"namespace.method"`` / ``"method"``."""
    parts = [part for part in path.strip().split(".") if part]
    if parts and parts[0] == "faker":
        parts = parts[1:]
    if not parts:
        return "", ""
    if len(parts) == 1:
        return "", parts[0]
    return parts[-2], parts[-1]


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def fallback_value(method: str, namespace: str, *, now: datetime | None = None) -> ScalarValue:
    """Return the fixed stand-in for a faker method that could not be called."""
    if method in _FALLBACK_BY_METHOD:
        return _FALLBACK_BY_METHOD[method]

    reference = now or datetime.now(tz=UTC)
    if method == "past":
        return to_iso_utc(reference)
    if method == "future":
        return to_iso_utc(reference + timedelta(days=1))
    if namespace == "date":
        return to_iso_utc(reference)
    return _FALLBACK_BY_NAMESPACE.get(namespace, "unknown")


def _scalar(value: Any) -> Any:
    """Keep record values scalar; dates become ISO strings, containers are rejected."""
    if isinstance(value, datetime):
        return to_iso_utc(value if value.tzinfo else value.replace(tzinfo=UTC))
    if isinstance(value, date):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return None


def call_faker_method(ctx: GenerationContext, path: str) -> Any:
    """Invoke a dotted faker method, degrading to `fallback_value` on any failure."""
    namespace, method = split_method_path(path)
    mapped = FAKER_METHODS.get(f"{namespace}.{method}")
    try:
        if mapped is not None:
            return mapped(ctx)

        name = _snake_case(method) if method else ""
        # seed* methods would reseed the run's Faker.
        provider = getattr(ctx.faker, name, None) if name and not name.startswith(("seed", "_")) else None
        if callable(provider):
            value = _scalar(provider())
            if value is not None:
                return value
    except (AttributeError, TypeError, ValueError) as exc:
        logger.debug("Faker method %s raised %s; using fallback", path, exc)
        return fallback_value(method, namespace, now=ctx.now)

    logger.debug("Unknown faker method %s; using fallback", path)
    return fallback_value(method, namespace, now=ctx.now)


def fallback_for_column(ctx: GenerationContext, column_name: str) -> ScalarValue:
    """Produce a plausible value from the column name alone."""
    name = column_name.lower()

    if any(token in name for token in ("cost", "amount", "payout", "price", "total", "payment", "balance")):
        return ctx.uniform(10, 1000, digits=2)
    if "quantity" in name:
        return ctx.randint(1, 5)
    if any(token in name for token in ("duration", "hours", "minutes")):
        return ctx.randint(15, 480)
    if "name" in name:
        return ctx.faker.name()
    if "email" in name:
        return ctx.faker.email()
    if "phone" in name:
        return ctx.faker.phone_number()
    if "country" in name:
        return ctx.faker.country()
    if "city" in name:
        return ctx.faker.city()
    # Room ids and check-out dates are matched ahead of the generic id/date rules.
    if "room_id" in name:
        return f"ROOM-{ctx.randint(100, 999)}"
    if "id" in name:
        return ctx.uuid()
    if "check_out" in name or "checkout" in name:
        return _future(ctx)
    if "date" in name:
        return to_iso_utc(ctx.recent())
    if "comment" in name or "review" in name:
        return ctx.faker.sentence()
    if "guests" in name or "guest_count" in name:
        return ctx.randint(1, 8)
    if "nights" in name or "night_count" in name:
        return ctx.randint(1, 30)
    if "room_rate" in name or "room_price" in name:
        return ctx.randint(100, 2000)
    if any(token in name for token in ("attendance_percentage", "assignment_score", "exam_score")):
        return round(ctx.uniform(50, 100), 1)
    if name == "grade":
        return ctx.choice(GRADES)
    return ctx.alphanumeric(8)
