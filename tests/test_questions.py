"""Tests for hiragana_match.core.questions – round generation."""

from __future__ import annotations

import random

import pytest

from hiragana_match.core.catalog import HiraganaCatalog
from hiragana_match.core.levels import LevelRepository
from hiragana_match.core.questions import Question, QuestionGenerator, choice_count_for
from hiragana_match.core.settings import Difficulty


@pytest.fixture()
def generator(catalog: HiraganaCatalog, levels: LevelRepository) -> QuestionGenerator:
    return QuestionGenerator(catalog, levels, rng=random.Random(1234))


def _assert_well_formed(question: Question, choice_count: int) -> None:
    assert len(question.choices) == choice_count
    assert question.choices.count(question.correct_answer) == 1
    assert question.correct_answer.symbol == question.target
    concepts = [c.concept for c in question.choices]
    assert len(concepts) == len(set(concepts))
    symbols = [c.symbol for c in question.choices]
    assert symbols.count(question.target) == 1


# ---------------------------------------------------------------------------
# choice_count_for
# ---------------------------------------------------------------------------

class TestChoiceCount:
    @pytest.mark.parametrize(
        "difficulty, expected",
        [(Difficulty.EASY, 2), (Difficulty.NORMAL, 3), (Difficulty.HARD, 4), ("hard", 4)],
    )
    def test_known(self, difficulty, expected: int):
        assert choice_count_for(difficulty) == expected

    def test_unknown_falls_back_to_normal(self):
        assert choice_count_for("impossible") == 3


# ---------------------------------------------------------------------------
# generate_round
# ---------------------------------------------------------------------------

class TestGenerateRound:
    def test_level_one_round(self, generator: QuestionGenerator):
        questions = generator.generate_round(1, 5, 3)
        assert len(questions) == 5
        for q in questions:
            _assert_well_formed(q, 3)
            assert q.target in ("あ", "い", "う", "え", "お")

    @pytest.mark.parametrize("choice_count", [2, 3, 4])
    def test_choice_counts(self, generator: QuestionGenerator, choice_count: int):
        for q in generator.generate_round(3, 8, choice_count):
            _assert_well_formed(q, choice_count)

    def test_choice_count_clamped(self, generator: QuestionGenerator):
        assert all(len(q.choices) == 4 for q in generator.generate_round(1, 3, 9))
        assert all(len(q.choices) == 2 for q in generator.generate_round(1, 3, 1))

    def test_targets_within_level(self, generator: QuestionGenerator, levels: LevelRepository):
        allowed = set(levels.get(4).characters)
        assert all(q.target in allowed for q in generator.generate_round(4, 30, 3))

    def test_distractors_may_come_from_any_row(self, generator: QuestionGenerator, catalog: HiraganaCatalog):
        level_one = set(catalog.entries_for_level(1))
        seen = {c.symbol for q in generator.generate_round(1, 40, 4) for c in q.choices}
        assert seen - level_one

    @pytest.mark.parametrize("level", [0, 11, -3])
    def test_unknown_level_is_empty(self, generator: QuestionGenerator, level: int):
        assert generator.generate_round(level, 5, 3) == []

    def test_zero_questions(self, generator: QuestionGenerator):
        assert generator.generate_round(1, 0, 3) == []

    def test_seeded_rng_is_reproducible(self, catalog: HiraganaCatalog, levels: LevelRepository):
        a = QuestionGenerator(catalog, levels, rng=random.Random(7)).generate_round(2, 5, 3)
        b = QuestionGenerator(catalog, levels, rng=random.Random(7)).generate_round(2, 5, 3)
        assert a == b

    def test_correct_index_points_at_answer(self, generator: QuestionGenerator):
        for q in generator.generate_round(2, 5, 3):
            assert q.choices[q.correct_index] == q.correct_answer
            assert q.is_correct(q.correct_answer.concept)


class TestGenerateLevelRound:
    def test_uses_level_question_count(self, generator: QuestionGenerator, levels: LevelRepository):
        definition = levels.get(10)
        questions = generator.generate_level_round(definition, Difficulty.EASY)
        assert len(questions) == definition.question_count
        assert all(len(q.choices) == 2 for q in questions)


class TestGenerateChoices:
    def test_contains_correct(self, generator: QuestionGenerator):
        choices = generator.generate_choices("さ", 4)
        assert len(choices) == 4
        assert [c.symbol for c in choices].count("さ") == 1

    def test_unknown_symbol(self, generator: QuestionGenerator):
        assert generator.generate_choices("Z") == []
