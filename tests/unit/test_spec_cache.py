"""Unit tests for the file-backed spec cache."""

from __future__ import annotations

import os
from pathlib import Path

from dataset_generator.services.spec_cache import SpecCache

DAY = 24 * 60 * 60


class _Clock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _age(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


def test_put_then_get_round_trips_the_spec(tmp_path: Path) -> None:
    cache = SpecCache(tmp_path / "specs")

    cache.put("abc", {"entities": [{"name": "users"}]})

    assert cache.get("abc") == {"entities": [{"name": "users"}]}
    assert (tmp_path / "specs" / "abc.json").is_file()


def test_missing_and_corrupt_entries_read_as_misses(tmp_path: Path) -> None:
    cache = SpecCache(tmp_path)
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "list.json").write_text("[1, 2]", encoding="utf-8")

    assert cache.get("absent") is None
    assert cache.get("broken") is None
    assert cache.get("list") is None


def test_stats_on_an_empty_cache(tmp_path: Path) -> None:
    stats = SpecCache(tmp_path / "never-created").stats()

    assert stats.file_count == 0
    assert stats.total_size_mb == 0
    assert stats.oldest_file is None


def test_stats_reports_count_and_age_bounds(tmp_path: Path) -> None:
    cache = SpecCache(tmp_path)
    cache.put("old", {"a": 1})
    cache.put("new", {"b": 2})
    _age(tmp_path / "old.json", 1_700_000_000)
    _age(tmp_path / "new.json", 1_700_086_400)

    stats = cache.stats()

    assert stats.file_count == 2
    assert stats.oldest_file.timestamp() == 1_700_000_000
    assert stats.newest_file.timestamp() == 1_700_086_400


def test_clear_deletes_every_entry(tmp_path: Path) -> None:
    cache = SpecCache(tmp_path)
    for key in ("a", "b", "c"):
        cache.put(key, {"key": key})

    assert cache.clear() == 3
    assert cache.stats().file_count == 0


def test_cleanup_drops_entries_past_the_age_limit(tmp_path: Path) -> None:
    clock = _Clock(1_700_000_000 + 40 * DAY)
    cache = SpecCache(tmp_path, max_age_days=30, clock=clock)
    cache.put("stale", {})
    cache.put("fresh", {})
    _age(tmp_path / "stale.json", 1_700_000_000)
    _age(tmp_path / "fresh.json", clock.now - DAY)

    assert cache.cleanup() == 1
    assert cache.get("stale") is None
    assert cache.get("fresh") == {}


def test_cleanup_trims_the_oldest_thirty_percent_when_over_limits(tmp_path: Path) -> None:
    cache = SpecCache(tmp_path, max_files=5)
    for index in range(10):
        cache.put(f"spec-{index}", {"index": index})
        _age(tmp_path / f"spec-{index}.json", 1_700_000_000 + index)

    assert cache.cleanup() == 3
    remaining = sorted(path.stem for path in tmp_path.glob("*.json"))
    assert remaining == [f"spec-{index}" for index in range(3, 10)]


def test_put_runs_cleanup_at_most_once_a_day(tmp_path: Path) -> None:
    clock = _Clock(1_700_000_000)
    cache = SpecCache(tmp_path, max_age_days=30, clock=clock)
    cache.put("stale", {})
    _age(tmp_path / "stale.json", clock.now - 60 * DAY)

    cache.put("other", {})
    assert cache.get("stale") == {}

    clock.now += DAY + 1
    cache.put("another", {})
    assert cache.get("stale") is None
