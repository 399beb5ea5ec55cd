"""Per-run random source shared by every stage of the generation pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from datetime import timedelta
from datetime import timezone
import random
from typing import Any
import uuid

from faker import Faker

UTC = timezone.utc
DEFAULT_FAKER_LOCALE = "en_US"
SEED_UPPER_BOUND = 10**9


def parse_datetime_utc(raw: Any) -> datetime | None:
    """Parse an ISO-ish timestamp or date into an aware UTC datetime."""
    if isinstance(raw, datetime):
        return raw.replace(tzinfo=UTC) if raw.tzinfo is None else raw.astimezone(UTC)
    if not isinstance(raw, str) or not raw.strip():
        return None

    text = raw.strip()
    try:
        if len(text) == 10:
            return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=UTC)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def to_iso_utc(value: datetime) -> str:
    return value.astimezone(UTC).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def start_of_day(value: datetime) -> datetime:
    return value.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


class GenerationContext:
    """Seeded `random.Random` and `Faker` pair owned by a single generation run.

    Every draw made by the entity generator, the simulator and the enforcers
    goes through one context, so two runs built with the same seed and the
    same reference ``now`` produce identical output.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        now: datetime | None = None,
        locale: str = DEFAULT_FAKER_LOCALE,
    ) -> None:
        self.seed = seed if seed is not None else random.randrange(0, SEED_UPPER_BOUND)
        self.rng = random.Random(self.seed)
        self.faker = Faker(locale)
        self.faker.seed_instance(self.seed)
        reference = now or datetime.now(tz=UTC)
        self.now = reference.replace(tzinfo=UTC) if reference.tzinfo is None else reference.astimezone(UTC)

    def random(self) -> float:
        return self.rng.random()

    def randint(self, low: int, high: int) -> int:
        return self.rng.randint(low, high)

    def uniform(self, low: float, high: float, *, digits: int | None = None) -> float:
        value = self.rng.uniform(low, high)
        return round(value, digits) if digits is not None else value

    def choice(self, values: Sequence[Any]) -> Any:
        return self.rng.choice(values)

    def weighted_choice(self, values: Sequence[Any], weights: Sequence[float]) -> Any:
        """Draw one value; non-positive total weight degrades to a uniform draw."""
        if not values:
            raise ValueError("values must not be empty")
        if len(values) != len(weights) or sum(weights) <= 0:
            return self.rng.choice(values)
        return self.rng.choices(values, weights=weights, k=1)[0]

    def uuid(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))

    def alphanumeric(self, length: int = 8) -> str:
        alphabet = "abcdefghijklmnopqrstuvwxyz0123456789"
        return "".join(self.rng.choice(alphabet) for _ in range(length))

    def between(self, start: datetime, end: datetime) -> datetime:
        span = (end - start).total_seconds()
        if span <= 0:
            return start
        return start + timedelta(seconds=self.rng.uniform(0, span))

    def recent(self, *, days: float = 1) -> datetime:
        return self.between(self.now - timedelta(days=days), self.now)

    def soon(self, *, days: float = 1) -> datetime:
        return self.between(self.now, self.now + timedelta(days=days))
