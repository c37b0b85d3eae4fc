from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "HIRAGANA_MATCH_HOME"


def default_store_path() -> Path:
    """~/.hiragana_match/store.json, or $HIRAGANA_MATCH_HOME/store.json when set."""
    override = os.environ.get(HOME_ENV_VAR)
    base = Path(override).expanduser() if override else Path.home() / ".hiragana_match"
    return base / "store.json"


class KeyValueStore:
    """Flat key-value store persisted as one JSON document.

    Reads never fail: a missing, unreadable or corrupt file behaves like a
    fresh install. Writes happen on ``save_all()``; write errors are logged
    and the in-memory values stay current.
    """

    def __init__(self, file_path: Optional[Path] = None, *, persist: bool = True) -> None:
        self._file_path = file_path if file_path is not None else default_store_path()
        self._persist = persist
        self._values: Dict[str, Any] = self._load() if persist else {}

    @classmethod
    def in_memory(cls) -> "KeyValueStore":
        return cls(Path(os.devnull), persist=False)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._values)

    def clear(self) -> None:
        self._values = {}
        self.save_all()

    def save_all(self) -> None:
        if not self._persist:
            return
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                json.dumps(self._values, indent=2, ensure_ascii=False, sort_keys=True),
                encoding="utf-8",
            )
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save store to %s: %s", self._file_path, e)

    def _load(self) -> Dict[str, Any]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load store from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring store at %s: expected a JSON object", self._file_path)
            return {}
        return payload
