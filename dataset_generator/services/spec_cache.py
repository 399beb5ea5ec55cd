"""File-backed cache of produced DataSpec documents keyed by parameter hash."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
import json
import logging
import math
from pathlib import Path
import time
from typing import Any

from dataset_generator.schemas.generation import CacheStats
from dataset_generator.synthetic.context import UTC

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 24 * 60 * 60
CLEANUP_FRACTION = 0.3
BYTES_PER_MB = 1024 * 1024


class SpecCache:
    """Store one ``<key>.json`` file per cached spec under ``directory``.

    Reads and writes never raise: a broken cache only costs a producer call.
    """

    def __init__(
        self,
        directory: Path,
        *,
        max_size_mb: float = 100,
        max_files: int = 1000,
        max_age_days: float = 30,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(directory)
        self._max_size_mb = max_size_mb
        self._max_files = max_files
        self._max_age_days = max_age_days
        self._clock = clock
        self._last_cleanup = clock()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def _files(self) -> list[Path]:
        if not self._directory.is_dir():
            return []
        return sorted(self._directory.glob("*.json"), key=lambda path: path.stat().st_mtime)

    def get(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            with path.open(encoding="utf-8") as handle:
                cached = json.load(handle)
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable cache entry %s", path.name, exc_info=True)
            return None
        return cached if isinstance(cached, dict) else None

    def put(self, key: str, spec: dict[str, Any]) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with self._path(key).open("w", encoding="utf-8") as handle:
                json.dump(spec, handle)
        except OSError:
            logger.warning("Failed to cache spec %s", key, exc_info=True)
            return

        if self._clock() - self._last_cleanup > CLEANUP_INTERVAL_SECONDS:
            self.cleanup()
            self._last_cleanup = self._clock()

    def cleanup(self) -> int:
        """Trim the oldest 30% when over limits, else drop files past the age limit."""
        files = self._files()
        total_mb = sum(path.stat().st_size for path in files) / BYTES_PER_MB

        if total_mb > self._max_size_mb or len(files) > self._max_files:
            doomed = files[: math.floor(len(files) * CLEANUP_FRACTION)]
        else:
            cutoff = self._clock() - self._max_age_days * 24 * 60 * 60
            doomed = [path for path in files if path.stat().st_mtime < cutoff]

        deleted = 0
        for path in doomed:
            try:
                path.unlink()
                deleted += 1
            except OSError:
                logger.warning("Failed to delete cache entry %s", path.name, exc_info=True)

        if deleted:
            logger.info("Cache cleanup: deleted %s files", deleted)
        return deleted

    def stats(self) -> CacheStats:
        files = self._files()
        if not files:
            return CacheStats(file_count=0, total_size_mb=0)

        stat_results = [path.stat() for path in files]
        total_mb = sum(result.st_size for result in stat_results) / BYTES_PER_MB
        mtimes = [result.st_mtime for result in stat_results]
        return CacheStats(
            file_count=len(files),
            total_size_mb=round(total_mb, 2),
            oldest_file=datetime.fromtimestamp(min(mtimes), tz=UTC),
            newest_file=datetime.fromtimestamp(max(mtimes), tz=UTC),
        )

    def clear(self) -> int:
        deleted = 0
        for path in self._files():
            path.unlink(missing_ok=True)
            deleted += 1
        logger.info("Cleared %s cached specs", deleted)
        return deleted
