from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharacterEntry:
    symbol: str
    concept: str
    category: str

    @property
    def sound_file(self) -> str:
        return f"{self.symbol}.mp3" if self.symbol else ""


PLACEHOLDER_ENTRY = CharacterEntry(symbol="", concept="", category="")


@dataclass(frozen=True)
class KanaRow:
    name: str
    symbols: tuple[str, ...]


class HiraganaCatalog:
    """Read-only table of every kana the game knows, grouped into rows.

    Loaded once from ``data/hiragana.yaml`` and passed to whoever needs it.
    Lookups of unknown symbols return ``None`` rather than raising.
    """

    def __init__(self, data_file: Optional[Path] = None) -> None:
        if data_file is None:
            data_file = Path(__file__).resolve().parent.parent / "data" / "hiragana.yaml"
        self._data_file = data_file
        self._rows, self._entries = self._load(data_file)

    def entry_for(self, symbol: str) -> Optional[CharacterEntry]:
        entry = self._entries.get(symbol)
        if entry is None:
            logger.debug("Unknown kana symbol requested: %r", symbol)
        return entry

    def entry_or_placeholder(self, symbol: str) -> CharacterEntry:
        return self.entry_for(symbol) or PLACEHOLDER_ENTRY

    def entries_for_level(self, level_number: int) -> List[str]:
        """Symbols of rows 1..level_number in teaching order; empty when out of range."""
        if level_number < 1 or level_number > len(self._rows):
            return []
        symbols: List[str] = []
        for row in self._rows[:level_number]:
            symbols.extend(row.symbols)
        return symbols

    def all_symbols(self) -> Set[str]:
        return set(self._entries)

    def all_entries(self) -> List[CharacterEntry]:
        return list(self._entries.values())

    def rows(self) -> List[KanaRow]:
        return list(self._rows)

    def row(self, name: str) -> Optional[KanaRow]:
        for row in self._rows:
            if row.name == name:
                return row
        return None

    def is_correct_answer(self, symbol: str, concept: str) -> bool:
        entry = self.entry_for(symbol)
        if entry is None:
            return False
        return entry.concept == concept

    def hint_for(self, symbol: str) -> str:
        entry = self.entry_for(symbol)
        if entry is None:
            return ""
        return f"{symbol}は{entry.category}の仲間だよ！"

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries

    @staticmethod
    def _load(data_file: Path) -> tuple[List[KanaRow], Dict[str, CharacterEntry]]:
        if not data_file.exists():
            raise FileNotFoundError(f"Catalog file not found: {data_file}")
        raw = yaml.safe_load(data_file.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("rows"), list):
            raise ValueError(f"{data_file.name}: expected YAML with a 'rows' list")

        rows: List[KanaRow] = []
        entries: Dict[str, CharacterEntry] = {}
        concepts: Set[str] = set()
        for index, raw_row in enumerate(raw["rows"], start=1):
            if not isinstance(raw_row, dict):
                raise ValueError(f"{data_file.name}: row {index} is not a mapping")
            name = raw_row.get("name")
            if not name or not isinstance(name, str):
                raise ValueError(f"{data_file.name}: row {index} has missing or invalid 'name'")
            raw_entries = raw_row.get("entries") or []
            symbols: List[str] = []
            for item in raw_entries:
                if not isinstance(item, dict):
                    raise ValueError(f"{data_file.name}: row {name!r} has a non-mapping entry")
                symbol = str(item.get("symbol") or "").strip()
                concept = str(item.get("concept") or "").strip()
                category = str(item.get("category") or "").strip()
                if not symbol or not concept:
                    raise ValueError(f"{data_file.name}: row {name!r} entry needs 'symbol' and 'concept'")
                if symbol in entries:
                    raise ValueError(f"{data_file.name}: duplicate symbol {symbol!r}")
                if concept in concepts:
                    raise ValueError(f"{data_file.name}: duplicate concept {concept!r}")
                entries[symbol] = CharacterEntry(symbol=symbol, concept=concept, category=category)
                concepts.add(concept)
                symbols.append(symbol)
            if not symbols:
                raise ValueError(f"{data_file.name}: row {name!r} has no entries")
            rows.append(KanaRow(name=name.strip(), symbols=tuple(symbols)))

        if not rows:
            raise ValueError(f"{data_file.name}: no rows defined")
        logger.debug("Loaded %d kana in %d rows from %s", len(entries), len(rows), data_file)
        return rows, entries
