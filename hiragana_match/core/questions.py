from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Union

from hiragana_match.core.catalog import CharacterEntry, HiraganaCatalog
from hiragana_match.core.levels import LevelDefinition, LevelRepository
from hiragana_match.core.settings import Difficulty

logger = logging.getLogger(__name__)

MIN_CHOICES = 2
MAX_CHOICES = 4


@dataclass(frozen=True)
class Question:
    target: str
    choices: tuple[CharacterEntry, ...]
    correct_answer: CharacterEntry

    def is_correct(self, concept: str) -> bool:
        return concept == self.correct_answer.concept

    @property
    def correct_index(self) -> int:
        return self.choices.index(self.correct_answer)


def choice_count_for(difficulty: Union[Difficulty, str]) -> int:
    """Number of answer choices shown per question: easy 2, normal 3, hard 4."""
    try:
        return Difficulty(difficulty).choice_count
    except ValueError:
        logger.info("Unknown difficulty %r, using normal", difficulty)
        return Difficulty.NORMAL.choice_count


class QuestionGenerator:
    """Builds rounds of picture-matching questions for a level."""

    def __init__(
        self,
        catalog: HiraganaCatalog,
        levels: LevelRepository,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._catalog = catalog
        self._levels = levels
        self._rng = rng if rng is not None else random.Random()

    def generate_round(self, level: int, question_count: int, choice_count: int) -> List[Question]:
        """Return *question_count* questions for *level*.

        Targets are drawn with replacement, so a kana may repeat within a round.
        An unknown level, or one with no characters, yields an empty list.
        """
        definition = self._levels.find(level)
        if definition is None or not definition.characters:
            logger.info("No characters to play for level %r", level)
            return []
        if question_count <= 0:
            return []
        choice_count = max(MIN_CHOICES, min(MAX_CHOICES, int(choice_count)))

        questions: List[Question] = []
        for _ in range(question_count):
            target = self._rng.choice(definition.characters)
            correct = self._catalog.entry_for(target)
            if correct is None:
                logger.warning("Level %d references unknown kana %r; skipping", level, target)
                continue
            choices = self._build_choices(correct, choice_count)
            questions.append(Question(target=target, choices=tuple(choices), correct_answer=correct))
        return questions

    def generate_level_round(self, definition: LevelDefinition, difficulty: Union[Difficulty, str]) -> List[Question]:
        return self.generate_round(definition.number, definition.question_count, choice_count_for(difficulty))

    def generate_choices(self, symbol: str, count: int = 3) -> List[CharacterEntry]:
        """Shuffled choices for *symbol*, or an empty list if the symbol is unknown."""
        correct = self._catalog.entry_for(symbol)
        if correct is None:
            return []
        return self._build_choices(correct, max(MIN_CHOICES, min(MAX_CHOICES, int(count))))

    def _build_choices(self, correct: CharacterEntry, choice_count: int) -> List[CharacterEntry]:
        pool = [
            entry
            for entry in self._catalog.all_entries()
            if entry.symbol != correct.symbol and entry.concept != correct.concept
        ]
        distractors = self._rng.sample(pool, min(choice_count - 1, len(pool)))
        choices = distractors + [correct]
        self._rng.shuffle(choices)
        return choices
