from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from hiragana_match.core.catalog import HiraganaCatalog


@dataclass(frozen=True)
class LevelDefinition:
    number: int
    title: str
    description: str
    row: str
    characters: tuple[str, ...]
    required_stars: int
    question_count: int


class LevelRepository:
    """Levels loaded from ``data/levels/level<N>.yaml``.

    Each file names the kana row it introduces; the characters in scope are
    accumulated across preceding levels, so level k always covers level k-1.
    """

    def __init__(self, catalog: HiraganaCatalog, levels_dir: Optional[Path] = None) -> None:
        if levels_dir is None:
            levels_dir = Path(__file__).resolve().parent.parent / "data" / "levels"
        self._catalog = catalog
        self._levels_dir = levels_dir
        self._levels = self._load_levels()

    def all(self) -> List[LevelDefinition]:
        return list(self._levels.values())

    def get(self, number: int) -> LevelDefinition:
        return self._levels[number]

    def find(self, number: int) -> Optional[LevelDefinition]:
        return self._levels.get(number)

    def __len__(self) -> int:
        return len(self._levels)

    def _load_levels(self) -> Dict[int, LevelDefinition]:
        base_dir = self._levels_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        def _number(p: Path) -> int:
            m = re.match(r"^level(\d+)$", p.stem)
            return int(m.group(1)) if m else -1

        paths = [p for p in base_dir.glob("level*.yaml") if _number(p) > 0]
        levels: Dict[int, LevelDefinition] = {}
        characters: List[str] = []

        for expected, level_path in enumerate(sorted(paths, key=_number), start=1):
            number = _number(level_path)
            if number != expected:
                raise ValueError(f"{level_path.name}: levels must be numbered 1..N without gaps")
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{level_path.name}: expected YAML with 'title' and 'row'")
            title = raw.get("title")
            if not title or not isinstance(title, str):
                raise ValueError(f"{level_path.name}: missing or invalid 'title'")
            row_name = raw.get("row")
            row = self._catalog.row(str(row_name)) if row_name else None
            if row is None:
                raise ValueError(f"{level_path.name}: unknown kana row {row_name!r}")
            try:
                required_stars = int(raw.get("required_stars", 0))
                question_count = int(raw.get("question_count", 5))
            except (TypeError, ValueError):
                raise ValueError(f"{level_path.name}: 'required_stars' and 'question_count' must be integers")
            if question_count < 1:
                raise ValueError(f"{level_path.name}: 'question_count' must be positive")

            characters.extend(s for s in row.symbols if s not in characters)
            levels[number] = LevelDefinition(
                number=number,
                title=title.strip(),
                description=str(raw.get("description") or "").strip(),
                row=row.name,
                characters=tuple(characters),
                required_stars=max(0, required_stars),
                question_count=question_count,
            )

        if not levels:
            raise ValueError("No level files (level*.yaml) found in data/levels")
        return levels
