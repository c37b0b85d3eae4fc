"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from hiragana_match.core.levels import LevelDefinition
from hiragana_match.core.progression import LevelProgressionTracker


@dataclass
class LevelState:
    """UI state for a single level: stars, unlock status, and selection."""

    level: LevelDefinition
    unlocked: bool
    stars: int
    is_current: bool = False


def build_level_states(levels: list[LevelDefinition], progression: LevelProgressionTracker) -> list[LevelState]:
    """Unlock/star state for every level, with the recommended level marked current."""
    recommended = progression.recommended_next_level()
    return [
        LevelState(
            level=level,
            unlocked=progression.is_unlocked(level.number),
            stars=progression.stars_for_level(level.number),
            is_current=level.number == recommended,
        )
        for level in levels
    ]


def map_position(index: int, columns: int) -> tuple[int, int]:
    """Grid cell for the *index*-th level card; odd rows run right to left."""
    row, col = divmod(index, columns)
    if row % 2 == 1:
        col = columns - 1 - col
    return row, col
