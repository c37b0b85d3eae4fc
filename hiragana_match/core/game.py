from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional

from hiragana_match.core.catalog import HiraganaCatalog
from hiragana_match.core.levels import LevelRepository
from hiragana_match.core.progression import LevelProgressionTracker
from hiragana_match.core.questions import QuestionGenerator
from hiragana_match.core.scoring import RoundResult, stars_for_result
from hiragana_match.core.session import MatchingSession
from hiragana_match.core.settings import SettingsStore
from hiragana_match.core.storage import KeyValueStore
from hiragana_match.core.unlocks import Achievement, UnlockTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundOutcome:
    level: int
    result: RoundResult
    stars: int
    stars_added: int
    new_characters: tuple[str, ...]
    next_level_unlocked: bool
    recommended_level: int


class GameCoordinator:
    """Runs the play loop: generate a round, score it, record progress and rewards."""

    def __init__(
        self,
        catalog: HiraganaCatalog,
        levels: LevelRepository,
        settings: SettingsStore,
        progression: LevelProgressionTracker,
        unlocks: UnlockTracker,
        generator: Optional[QuestionGenerator] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.catalog = catalog
        self.levels = levels
        self.settings = settings
        self.progression = progression
        self.unlocks = unlocks
        self.generator = generator or QuestionGenerator(catalog, levels)
        self._clock = clock

    @classmethod
    def create(
        cls,
        store: KeyValueStore,
        *,
        rng: Optional[random.Random] = None,
        on_characters_unlocked: Optional[Callable[[List[str]], None]] = None,
        on_achievement_unlocked: Optional[Callable[[Achievement], None]] = None,
        unlock_all: Optional[bool] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "GameCoordinator":
        """Wire every component against one key-value store."""
        catalog = HiraganaCatalog()
        levels = LevelRepository(catalog)
        return cls(
            catalog=catalog,
            levels=levels,
            settings=SettingsStore(store),
            progression=LevelProgressionTracker(store, total_levels=len(levels), unlock_all=unlock_all),
            unlocks=UnlockTracker(
                store,
                on_characters_unlocked=on_characters_unlocked,
                on_achievement_unlocked=on_achievement_unlocked,
                total_levels=len(levels),
            ),
            generator=QuestionGenerator(catalog, levels, rng=rng),
            clock=clock,
        )

    def start_round(self, level: int) -> MatchingSession:
        """A fresh session for *level*; empty when the level is unknown or locked."""
        definition = self.levels.find(level)
        if definition is None or not self.progression.is_unlocked(level):
            logger.info("Level %r is not playable", level)
            return MatchingSession(level, [], clock=self._clock)
        questions = self.generator.generate_round(
            definition.number,
            definition.question_count,
            self.settings.choice_count,
        )
        return MatchingSession(level, questions, clock=self._clock)

    def finish_round(self, session: MatchingSession) -> Optional[RoundOutcome]:
        """Score a completed session and feed it to both trackers."""
        if session.is_empty() or not session.is_complete():
            return None
        result = session.result()
        stars = stars_for_result(result)
        level = session.level
        was_next_unlocked = self.progression.is_unlocked(level + 1)
        before = set(self.unlocks.unlocked_characters())

        stars_added = self.progression.record_completion(
            level, stars, accuracy=result.accuracy, elapsed_seconds=result.elapsed_seconds
        )
        self.unlocks.record_level_completion(
            level,
            stars,
            result.accuracy,
            result.elapsed_seconds,
            question_count=result.total,
        )

        new_characters = tuple(s for s in self.unlocks.unlocked_characters() if s not in before)
        outcome = RoundOutcome(
            level=level,
            result=result,
            stars=stars,
            stars_added=stars_added,
            new_characters=new_characters,
            next_level_unlocked=not was_next_unlocked and self.progression.is_unlocked(level + 1),
            recommended_level=self.progression.recommended_next_level(),
        )
        logger.info(
            "Level %d finished: %d/%d correct in %.1fs, %d stars",
            level,
            result.correct,
            result.total,
            result.elapsed_seconds,
            stars,
        )
        return outcome

    def hint_for(self, session: MatchingSession) -> str:
        if not self.settings.show_hints or session.is_complete():
            return ""
        return self.catalog.hint_for(session.current_question().target)

    def reset_progress(self) -> None:
        self.progression.reset()
        self.unlocks.reset()
