"""Tests for hiragana_match.core.session – MatchingSession."""

from __future__ import annotations

import pytest

from hiragana_match.core.catalog import CharacterEntry
from hiragana_match.core.questions import Question
from hiragana_match.core.session import MatchingSession

ANT = CharacterEntry("あ", "ant", "animal")
DOG = CharacterEntry("い", "dog", "animal")
RABBIT = CharacterEntry("う", "rabbit", "animal")


def _questions() -> list[Question]:
    return [
        Question(target="あ", choices=(DOG, ANT, RABBIT), correct_answer=ANT),
        Question(target="い", choices=(DOG, ANT, RABBIT), correct_answer=DOG),
        Question(target="う", choices=(DOG, ANT, RABBIT), correct_answer=RABBIT),
    ]


# ---------------------------------------------------------------------------
# Basics
# ---------------------------------------------------------------------------

class TestMatchingSessionBasics:
    def test_initial_state(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        assert s.level == 1
        assert s.index == 0
        assert s.total_questions == 3
        assert s.correct_count == 0
        assert not s.is_complete()
        assert not s.is_empty()
        assert s.current_question().target == "あ"

    def test_empty_session(self, clock):
        s = MatchingSession(99, [], clock=clock)
        assert s.is_empty()
        assert s.is_complete()
        assert s.progress() == 0.0
        with pytest.raises(IndexError):
            s.current_question()


# ---------------------------------------------------------------------------
# Answering
# ---------------------------------------------------------------------------

class TestMatchingSessionSubmit:
    def test_correct_answer(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        r = s.submit("ant")
        assert r.correct
        assert r.expected_concept == "ant"
        assert s.correct_count == 1
        assert s.index == 1

    def test_wrong_answer_still_advances(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        r = s.submit("rabbit")
        assert not r.correct
        assert r.chosen_concept == "rabbit"
        assert r.expected_concept == "ant"
        assert s.correct_count == 0
        assert s.current_question().target == "い"

    def test_complete_round(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        s.submit("ant")
        s.submit("ant")
        s.submit("rabbit")
        assert s.is_complete()
        assert s.correct_count == 2
        assert [a.correct for a in s.answers] == [True, False, True]
        assert s.progress() == 1.0

    def test_submit_after_complete(self, clock):
        s = MatchingSession(1, _questions()[:1], clock=clock)
        s.submit("ant")
        r = s.submit("ant")
        assert not r.correct
        assert r.expected_concept == ""
        assert s.correct_count == 1

    def test_progress(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        s.submit("ant")
        assert s.progress() == pytest.approx(1 / 3)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class TestMatchingSessionTiming:
    def test_clock_stops_at_last_answer(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        clock.advance(4.0)
        s.submit("ant")
        s.submit("dog")
        clock.advance(2.0)
        s.submit("rabbit")
        clock.advance(100.0)
        assert s.elapsed_seconds() == pytest.approx(6.0)

    def test_running_clock(self, clock):
        s = MatchingSession(1, _questions(), clock=clock)
        clock.advance(3.5)
        assert s.elapsed_seconds() == pytest.approx(3.5)

    def test_result(self, clock):
        s = MatchingSession(2, _questions(), clock=clock)
        for concept in ("ant", "dog", "cat"):
            clock.advance(1.0)
            s.submit(concept)
        result = s.result()
        assert result.correct == 2
        assert result.total == 3
        assert result.elapsed_seconds == pytest.approx(3.0)
