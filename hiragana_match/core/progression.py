from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, replace
from typing import Dict, Optional

from hiragana_match.core.scoring import MAX_STARS
from hiragana_match.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

TOTAL_LEVELS = 10
CLEAR_STARS = 2
UNLOCK_ALL_ENV_VAR = "HIRAGANA_MATCH_UNLOCK_ALL"

KEY_TOTAL_STARS = "progression.total_stars"
KEY_LEVELS = "progression.levels"


@dataclass
class LevelProgress:
    best_stars: int = 0
    attempts: int = 0
    best_accuracy: float = 0.0
    best_time: Optional[float] = None


@dataclass(frozen=True)
class ProgressionStats:
    completed_count: int
    total_stars: int
    max_unlocked_level: int
    completion_fraction: float
    average_stars_per_completed_level: float


def clamp_stars(stars: int) -> int:
    return max(0, min(MAX_STARS, int(stars)))


def star_delta(previous_best: int, earned: int) -> int:
    """How much a completion adds to the running total: only the improvement counts."""
    return max(0, clamp_stars(earned) - clamp_stars(previous_best))


class LevelProgressionTracker:
    """Per-level best stars and sequential level gating.

    Level 1 is always open. Level k opens once level k-1 has been cleared with
    at least ``CLEAR_STARS`` stars. Replaying a level only ever raises its best
    star count, and the running total moves by the improvement, never by the
    raw stars earned.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        total_levels: int = TOTAL_LEVELS,
        unlock_all: Optional[bool] = None,
    ) -> None:
        self._store = store
        self._total_levels = total_levels
        if unlock_all is None:
            unlock_all = os.environ.get(UNLOCK_ALL_ENV_VAR) == "1"
        self._unlock_all = unlock_all
        self._progress: Dict[int, LevelProgress] = {}
        self._total_stars = 0
        self._load()

    @property
    def total_levels(self) -> int:
        return self._total_levels

    @property
    def total_stars(self) -> int:
        return self._total_stars

    def is_unlocked(self, level: int) -> bool:
        if level < 1 or level > self._total_levels:
            return False
        if level == 1 or self._unlock_all:
            return True
        return self.stars_for_level(level - 1) >= CLEAR_STARS

    def stars_for_level(self, level: int) -> int:
        progress = self._progress.get(level)
        return progress.best_stars if progress else 0

    def progress_for(self, level: int) -> LevelProgress:
        progress = self._progress.get(level)
        return replace(progress) if progress is not None else LevelProgress()

    def record_completion(
        self,
        level: int,
        earned_stars: int,
        accuracy: Optional[float] = None,
        elapsed_seconds: Optional[float] = None,
    ) -> int:
        """Record a finished round; returns how many stars were added to the total."""
        if level < 1 or level > self._total_levels:
            logger.info("Ignoring completion for out-of-range level %r", level)
            return 0
        if not self.is_unlocked(level):
            logger.info("Ignoring completion for locked level %d", level)
            return 0

        stars = clamp_stars(earned_stars)
        current = self._progress.get(level, LevelProgress())
        current.attempts += 1
        if accuracy is not None:
            current.best_accuracy = max(current.best_accuracy, max(0.0, min(1.0, float(accuracy))))
        if elapsed_seconds is not None and elapsed_seconds >= 0:
            if current.best_time is None or elapsed_seconds < current.best_time:
                current.best_time = float(elapsed_seconds)

        delta = star_delta(current.best_stars, stars)
        if delta > 0:
            current.best_stars = stars
            self._total_stars += delta
            logger.info("Level %d best is now %d stars (total %d)", level, stars, self._total_stars)
        self._progress[level] = current
        self._save()
        return delta

    def max_unlocked_level(self) -> int:
        max_level = 1
        for level in range(1, self._total_levels + 1):
            if self.is_unlocked(level):
                max_level = level
        return max_level

    def completed_count(self) -> int:
        return sum(1 for p in self._progress.values() if p.best_stars > 0)

    def is_all_complete(self) -> bool:
        return all(self.stars_for_level(level) > 0 for level in range(1, self._total_levels + 1))

    def recommended_next_level(self) -> int:
        """First open level without stars; the last level once every level has stars."""
        for level in range(1, self._total_levels + 1):
            if self.is_unlocked(level) and self.stars_for_level(level) == 0:
                return level
        if self.is_all_complete():
            return self._total_levels
        return self.max_unlocked_level()

    def stats(self) -> ProgressionStats:
        completed = self.completed_count()
        return ProgressionStats(
            completed_count=completed,
            total_stars=self._total_stars,
            max_unlocked_level=self.max_unlocked_level(),
            completion_fraction=completed / self._total_levels if self._total_levels else 0.0,
            average_stars_per_completed_level=self._total_stars / completed if completed else 0.0,
        )

    def reset(self) -> None:
        self._progress = {}
        self._total_stars = 0
        self._save()
        logger.info("Level progress reset")

    def _save(self) -> None:
        if self._store is None:
            return
        self._store.set(KEY_TOTAL_STARS, self._total_stars)
        self._store.set(KEY_LEVELS, {str(level): asdict(p) for level, p in self._progress.items()})
        self._store.save_all()

    def _load(self) -> None:
        if self._store is None:
            return
        raw_levels = self._store.get(KEY_LEVELS, {})
        if not isinstance(raw_levels, dict):
            logger.warning("Ignoring malformed %s: %r", KEY_LEVELS, raw_levels)
            raw_levels = {}
        for key, value in raw_levels.items():
            try:
                level = int(key)
                if not isinstance(value, dict):
                    raise ValueError("expected a mapping")
                best_time = value.get("best_time")
                progress = LevelProgress(
                    best_stars=clamp_stars(value.get("best_stars", 0)),
                    attempts=max(0, int(value.get("attempts", 0))),
                    best_accuracy=float(value.get("best_accuracy", 0.0)),
                    best_time=float(best_time) if best_time is not None else None,
                )
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning("Ignoring stored progress for level %r: %s", key, e)
                continue
            if 1 <= level <= self._total_levels:
                self._progress[level] = progress
        # The per-level map is authoritative; a stale total is recomputed from it.
        self._total_stars = sum(p.best_stars for p in self._progress.values())
        stored_total = self._store.get(KEY_TOTAL_STARS)
        if stored_total is not None and stored_total != self._total_stars:
            logger.warning(
                "Stored total stars %r disagree with level map (%d); using level map",
                stored_total,
                self._total_stars,
            )
