from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set

from hiragana_match.core.progression import TOTAL_LEVELS, clamp_stars, star_delta
from hiragana_match.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

SPEED_RUN_SECONDS = 5.0
STREAK_TARGET = 5
COLLECTOR_TARGET = 30

KEY_TOTAL_STARS = "unlocks.total_stars"
KEY_CHARACTERS = "unlocks.characters"
KEY_ACHIEVEMENTS = "unlocks.achievements"
KEY_LEVELS = "unlocks.levels"
KEY_STREAK = "unlocks.streak"
KEY_TOTALS = "unlocks.totals"


class Achievement(str, Enum):
    FIRST_COMPLETION = "first_completion"
    PERFECT_SCORE = "perfect_score"
    SPEED_RUN = "speed_run"
    STREAK = "streak"
    COLLECTOR = "collector"
    MASTER = "master"

    @property
    def title(self) -> str:
        return _ACHIEVEMENT_TEXT[self][0]

    @property
    def description(self) -> str:
        return _ACHIEVEMENT_TEXT[self][1]


_ACHIEVEMENT_TEXT = {
    Achievement.FIRST_COMPLETION: ("初回クリア", "初めてレベルをクリア！"),
    Achievement.PERFECT_SCORE: ("パーフェクト", "100%の正解率を達成！"),
    Achievement.SPEED_RUN: ("スピードマスター", "素早くクリア！"),
    Achievement.STREAK: ("連続チャンピオン", "連続でレベルクリア！"),
    Achievement.COLLECTOR: ("コレクター", "たくさんのキャラクターを解放！"),
    Achievement.MASTER: ("ひらがなマスター", "全てのひらがなをマスター！"),
}


@dataclass(frozen=True)
class RewardGroup:
    name: str
    threshold: int
    symbols: tuple[str, ...]


REWARD_GROUPS: tuple[RewardGroup, ...] = (
    RewardGroup("あ行", 0, ("あ", "い", "う", "え", "お")),
    RewardGroup("か行", 1, ("か", "き", "く", "け", "こ")),
    RewardGroup("さ行", 3, ("さ", "し", "す", "せ", "そ")),
    RewardGroup("た行", 6, ("た", "ち", "つ", "て", "と")),
    RewardGroup("な行", 10, ("な", "に", "ぬ", "ね", "の")),
    RewardGroup("は行", 15, ("は", "ひ", "ふ", "へ", "ほ")),
    RewardGroup("ま行", 21, ("ま", "み", "む", "め", "も")),
    RewardGroup("や行", 28, ("や", "ゆ", "よ")),
    RewardGroup("ら行", 36, ("ら", "り", "る", "れ", "ろ")),
    RewardGroup("わ行", 45, ("わ", "を", "ん")),
)


class RequirementKind(str, Enum):
    ALL_LEVELS_COMPLETED = "all_levels_completed"
    PERFECT_STREAK = "perfect_streak"
    TOTAL_STARS = "total_stars"
    TIME_RECORD = "time_record"


@dataclass(frozen=True)
class SpecialRequirement:
    kind: RequirementKind
    value: float = 0

    @classmethod
    def all_levels_completed(cls) -> "SpecialRequirement":
        return cls(RequirementKind.ALL_LEVELS_COMPLETED)

    @classmethod
    def perfect_streak(cls, count: int) -> "SpecialRequirement":
        return cls(RequirementKind.PERFECT_STREAK, count)

    @classmethod
    def total_stars(cls, count: int) -> "SpecialRequirement":
        return cls(RequirementKind.TOTAL_STARS, count)

    @classmethod
    def time_record(cls, seconds: float) -> "SpecialRequirement":
        return cls(RequirementKind.TIME_RECORD, seconds)


@dataclass(frozen=True)
class LevelStatistics:
    level: int
    best_stars: int
    best_accuracy: float
    best_time: float
    total_attempts: int
    average_stars: float


@dataclass(frozen=True)
class StarStatistics:
    total_stars: int
    total_levels_completed: int
    average_stars_per_level: float
    total_time_played: float
    average_accuracy: float
    highest_streak: int


@dataclass(frozen=True)
class UnlockProgress:
    unlocked_count: int
    total_count: int
    progress_fraction: float
    current_group: str
    next_group: Optional[str]


@dataclass(frozen=True)
class NextUnlockInfo:
    stars_needed: int
    characters: tuple[str, ...]
    group_name: str


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------

def default_unlocked() -> Set[str]:
    return set(REWARD_GROUPS[0].symbols)


def newly_unlocked(total_stars: int, unlocked: Iterable[str]) -> List[str]:
    """Symbols whose group threshold is met but that are not yet in *unlocked*, in group order."""
    have = set(unlocked)
    batch: List[str] = []
    for group in REWARD_GROUPS:
        if total_stars < group.threshold:
            break
        for symbol in group.symbols:
            if symbol not in have:
                have.add(symbol)
                batch.append(symbol)
    return batch


def satisfied_achievements(
    *,
    completed_levels: int,
    stars: int,
    accuracy: float,
    average_time: float,
    current_streak: int,
    unlocked_count: int,
    total_levels: int = TOTAL_LEVELS,
) -> Set[Achievement]:
    satisfied: Set[Achievement] = set()
    if completed_levels >= 1:
        satisfied.add(Achievement.FIRST_COMPLETION)
    if accuracy >= 1.0:
        satisfied.add(Achievement.PERFECT_SCORE)
    if stars > 0 and average_time <= SPEED_RUN_SECONDS:
        satisfied.add(Achievement.SPEED_RUN)
    if current_streak >= STREAK_TARGET:
        satisfied.add(Achievement.STREAK)
    if unlocked_count >= COLLECTOR_TARGET:
        satisfied.add(Achievement.COLLECTOR)
    if completed_levels >= total_levels:
        satisfied.add(Achievement.MASTER)
    return satisfied


def new_achievements(already: Iterable[Achievement], satisfied: Iterable[Achievement]) -> List[Achievement]:
    """Achievements in *satisfied* that have not fired yet, in declaration order."""
    have = set(already)
    wanted = set(satisfied)
    return [a for a in Achievement if a in wanted and a not in have]


def next_streak(current: int, stars: int) -> int:
    return current + 1 if stars > 0 else 0


def updated_level_statistics(
    previous: Optional[LevelStatistics],
    level: int,
    stars: int,
    accuracy: float,
    time: float,
) -> LevelStatistics:
    if previous is None:
        return LevelStatistics(
            level=level,
            best_stars=stars,
            best_accuracy=accuracy,
            best_time=time,
            total_attempts=1,
            average_stars=float(stars),
        )
    attempts = previous.total_attempts + 1
    return replace(
        previous,
        best_stars=max(previous.best_stars, stars),
        best_accuracy=max(previous.best_accuracy, accuracy),
        best_time=min(previous.best_time, time),
        total_attempts=attempts,
        average_stars=(previous.average_stars * previous.total_attempts + stars) / attempts,
    )


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------

class UnlockTracker:
    """Cumulative stars, unlocked characters and achievements.

    Characters unlock in reward groups as the star total crosses each group's
    threshold. Every refresh reports its whole batch in one
    ``on_characters_unlocked`` call. Achievements fire once each.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        on_characters_unlocked: Optional[Callable[[List[str]], None]] = None,
        on_achievement_unlocked: Optional[Callable[[Achievement], None]] = None,
        total_levels: int = TOTAL_LEVELS,
    ) -> None:
        self._store = store
        self.on_characters_unlocked = on_characters_unlocked
        self.on_achievement_unlocked = on_achievement_unlocked
        self._total_levels = total_levels
        self._reset_state()
        self._load()
        # Groups already earned by the stored total are applied silently.
        self._unlocked.update(newly_unlocked(self._total_stars, self._unlocked))

    # -- stars and characters ----------------------------------------------

    @property
    def total_stars(self) -> int:
        return self._total_stars

    def add_stars(self, stars: int) -> None:
        if stars <= 0:
            if stars < 0:
                logger.info("Ignoring negative star award %d", stars)
            return
        self._total_stars += int(stars)

    def refresh_unlocks(self) -> List[str]:
        batch = newly_unlocked(self._total_stars, self._unlocked)
        if batch:
            self._unlocked.update(batch)
            logger.info("Unlocked %d characters: %s", len(batch), "".join(batch))
            if self.on_characters_unlocked is not None:
                self.on_characters_unlocked(list(batch))
            self._apply_achievements({Achievement.COLLECTOR} if len(self._unlocked) >= COLLECTOR_TARGET else set())
        return batch

    def unlocked_characters(self) -> List[str]:
        order = {s: i for i, s in enumerate(s for g in REWARD_GROUPS for s in g.symbols)}
        return sorted(self._unlocked, key=lambda s: (order.get(s, len(order)), s))

    def is_character_unlocked(self, symbol: str) -> bool:
        return symbol in self._unlocked

    def unlock_special_character(self, symbol: str, requirement: SpecialRequirement) -> bool:
        """Unlock *symbol* outside the group table when *requirement* holds."""
        if symbol in self._unlocked or not self._requirement_met(requirement):
            return False
        self._unlocked.add(symbol)
        if self.on_characters_unlocked is not None:
            self.on_characters_unlocked([symbol])
        self._save()
        return True

    # -- completions ---------------------------------------------------------

    def record_level_completion(
        self,
        level: int,
        stars: int,
        accuracy: float,
        time: float,
        question_count: int = 5,
    ) -> None:
        if level < 1 or level > self._total_levels:
            logger.info("Ignoring completion for out-of-range level %r", level)
            return
        stars = clamp_stars(stars)
        accuracy = max(0.0, min(1.0, float(accuracy)))
        time = max(0.0, float(time))

        previous = self._levels.get(level)
        delta = star_delta(previous.best_stars if previous else 0, stars)
        if delta > 0:
            self.add_stars(delta)
            self.refresh_unlocks()

        self._levels[level] = updated_level_statistics(previous, level, stars, accuracy, time)
        self._time_played += time
        self._accuracy_sum += accuracy
        self._completions += 1

        self._current_streak = next_streak(self._current_streak, stars)
        self._highest_streak = max(self._highest_streak, self._current_streak)

        average_time = time / question_count if question_count > 0 else float("inf")
        self._apply_achievements(
            satisfied_achievements(
                completed_levels=self.completed_levels(),
                stars=stars,
                accuracy=accuracy,
                average_time=average_time,
                current_streak=self._current_streak,
                unlocked_count=len(self._unlocked),
                total_levels=self._total_levels,
            )
        )
        self._save()

    def completed_levels(self) -> int:
        return sum(1 for s in self._levels.values() if s.best_stars > 0)

    @property
    def current_streak(self) -> int:
        return self._current_streak

    @property
    def highest_streak(self) -> int:
        return self._highest_streak

    # -- achievements --------------------------------------------------------

    def unlocked_achievements(self) -> FrozenSet[Achievement]:
        return frozenset(self._achievements)

    def has_achievement(self, achievement: Achievement) -> bool:
        return achievement in self._achievements

    def _apply_achievements(self, satisfied: Set[Achievement]) -> None:
        for achievement in new_achievements(self._achievements, satisfied):
            self._achievements.add(achievement)
            logger.info("Achievement unlocked: %s", achievement.value)
            if self.on_achievement_unlocked is not None:
                self.on_achievement_unlocked(achievement)

    # -- reporting -----------------------------------------------------------

    def level_statistics(self, level: int) -> Optional[LevelStatistics]:
        return self._levels.get(level)

    def star_statistics(self) -> StarStatistics:
        recorded = len(self._levels)
        return StarStatistics(
            total_stars=self._total_stars,
            total_levels_completed=recorded,
            average_stars_per_level=self._total_stars / recorded if recorded else 0.0,
            total_time_played=self._time_played,
            average_accuracy=self._accuracy_sum / self._completions if self._completions else 0.0,
            highest_streak=self._highest_streak,
        )

    def unlock_progress(self) -> UnlockProgress:
        total = sum(len(g.symbols) for g in REWARD_GROUPS)
        unlocked = len(self._unlocked)
        current = REWARD_GROUPS[0].name
        upcoming: Optional[str] = None
        for group in REWARD_GROUPS:
            if self._total_stars >= group.threshold:
                current = group.name
            elif upcoming is None:
                upcoming = group.name
        return UnlockProgress(
            unlocked_count=unlocked,
            total_count=total,
            progress_fraction=min(1.0, unlocked / total) if total else 0.0,
            current_group=current,
            next_group=upcoming,
        )

    def next_unlock_info(self) -> Optional[NextUnlockInfo]:
        for group in REWARD_GROUPS:
            if self._total_stars < group.threshold:
                return NextUnlockInfo(
                    stars_needed=group.threshold - self._total_stars,
                    characters=group.symbols,
                    group_name=group.name,
                )
        return None

    def reset(self) -> None:
        self._reset_state()
        self._save()
        logger.info("Unlock progress reset")

    # -- internals -----------------------------------------------------------

    def _requirement_met(self, requirement: SpecialRequirement) -> bool:
        kind = requirement.kind
        if kind is RequirementKind.ALL_LEVELS_COMPLETED:
            return self.completed_levels() >= self._total_levels
        if kind is RequirementKind.PERFECT_STREAK:
            return self._highest_streak >= requirement.value
        if kind is RequirementKind.TOTAL_STARS:
            return self._total_stars >= requirement.value
        if kind is RequirementKind.TIME_RECORD:
            times = [s.best_time for s in self._levels.values()]
            return bool(times) and min(times) <= requirement.value
        return False

    def _reset_state(self) -> None:
        self._total_stars = 0
        self._unlocked: Set[str] = default_unlocked()
        self._achievements: Set[Achievement] = set()
        self._levels: Dict[int, LevelStatistics] = {}
        self._current_streak = 0
        self._highest_streak = 0
        self._time_played = 0.0
        self._accuracy_sum = 0.0
        self._completions = 0

    def _save(self) -> None:
        if self._store is None:
            return
        self._store.set(KEY_TOTAL_STARS, self._total_stars)
        self._store.set(KEY_CHARACTERS, self.unlocked_characters())
        self._store.set(KEY_ACHIEVEMENTS, [a.value for a in Achievement if a in self._achievements])
        self._store.set(KEY_LEVELS, {str(level): asdict(s) for level, s in self._levels.items()})
        self._store.set(KEY_STREAK, {"current": self._current_streak, "highest": self._highest_streak})
        self._store.set(
            KEY_TOTALS,
            {
                "time_played": self._time_played,
                "accuracy_sum": self._accuracy_sum,
                "completions": self._completions,
            },
        )
        self._store.save_all()

    def _load(self) -> None:
        if self._store is None:
            return
        store = self._store
        try:
            self._total_stars = max(0, int(store.get(KEY_TOTAL_STARS, 0)))
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Ignoring stored total stars: %s", e)

        characters = store.get(KEY_CHARACTERS)
        if isinstance(characters, list):
            self._unlocked = default_unlocked() | {str(c) for c in characters}

        achievements = store.get(KEY_ACHIEVEMENTS)
        if isinstance(achievements, list):
            for raw in achievements:
                try:
                    self._achievements.add(Achievement(raw))
                except ValueError:
                    logger.warning("Ignoring unknown stored achievement %r", raw)

        levels = store.get(KEY_LEVELS)
        if isinstance(levels, dict):
            for key, value in levels.items():
                try:
                    level = int(key)
                    self._levels[level] = LevelStatistics(
                        level=level,
                        best_stars=clamp_stars(value["best_stars"]),
                        best_accuracy=float(value["best_accuracy"]),
                        best_time=float(value["best_time"]),
                        total_attempts=int(value["total_attempts"]),
                        average_stars=float(value["average_stars"]),
                    )
                except (KeyError, TypeError, ValueError, OverflowError) as e:
                    logger.warning("Ignoring stored statistics for level %r: %s", key, e)

        streak = store.get(KEY_STREAK)
        totals = store.get(KEY_TOTALS)
        try:
            if isinstance(streak, dict):
                self._current_streak = max(0, int(streak.get("current", 0)))
                self._highest_streak = max(self._current_streak, int(streak.get("highest", 0)))
            if isinstance(totals, dict):
                self._time_played = float(totals.get("time_played", 0.0))
                self._accuracy_sum = float(totals.get("accuracy_sum", 0.0))
                self._completions = max(0, int(totals.get("completions", 0)))
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Ignoring stored streak/totals: %s", e)
