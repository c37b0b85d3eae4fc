from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from hiragana_match.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

SettingListener = Callable[[str], None]


class GameSpeed(str, Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"

    @property
    def choice_count(self) -> int:
        return {Difficulty.EASY: 2, Difficulty.NORMAL: 3, Difficulty.HARD: 4}[self]


MIN_VOLUME, MAX_VOLUME = 0.0, 1.0
MIN_VOICE_SPEED, MAX_VOICE_SPEED = 0.5, 2.0

_DEFAULTS: Dict[str, object] = {
    "sound_enabled": True,
    "music_enabled": True,
    "auto_advance": False,
    "show_hints": True,
    "large_text": False,
    "reduce_animations": False,
    "sound_volume": 0.8,
    "voice_speed": 1.0,
    "playtime_limit": 0,
    "game_speed": GameSpeed.NORMAL,
    "difficulty": Difficulty.NORMAL,
}

_BOOL_FIELDS = (
    "sound_enabled",
    "music_enabled",
    "auto_advance",
    "show_hints",
    "large_text",
    "reduce_animations",
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class SettingsStore:
    """User settings with clamping setters.

    Every mutation is written to the key-value store under ``settings.<field>``
    and announced to listeners with the field name. Listeners subscribe to all
    fields or to a single one; ``reset`` reaches every listener.
    """

    KEY_PREFIX = "settings."

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        on_setting_changed: Optional[SettingListener] = None,
    ) -> None:
        self._store = store
        self._values: Dict[str, object] = dict(_DEFAULTS)
        self._listeners: List[Tuple[Optional[str], SettingListener]] = []
        if on_setting_changed is not None:
            self.subscribe(on_setting_changed)
        self._load()

    # -- subscriptions -------------------------------------------------------

    def subscribe(self, callback: SettingListener, field: Optional[str] = None) -> None:
        self._listeners.append((field, callback))

    def unsubscribe(self, callback: SettingListener) -> None:
        self._listeners = [(f, cb) for f, cb in self._listeners if cb is not callback]

    # -- read access ---------------------------------------------------------

    @property
    def sound_enabled(self) -> bool:
        return bool(self._values["sound_enabled"])

    @property
    def music_enabled(self) -> bool:
        return bool(self._values["music_enabled"])

    @property
    def auto_advance(self) -> bool:
        return bool(self._values["auto_advance"])

    @property
    def show_hints(self) -> bool:
        return bool(self._values["show_hints"])

    @property
    def large_text(self) -> bool:
        return bool(self._values["large_text"])

    @property
    def reduce_animations(self) -> bool:
        return bool(self._values["reduce_animations"])

    @property
    def sound_volume(self) -> float:
        return float(self._values["sound_volume"])  # type: ignore[arg-type]

    @property
    def voice_speed(self) -> float:
        return float(self._values["voice_speed"])  # type: ignore[arg-type]

    @property
    def playtime_limit(self) -> int:
        return int(self._values["playtime_limit"])  # type: ignore[call-overload]

    @property
    def game_speed(self) -> GameSpeed:
        return self._values["game_speed"]  # type: ignore[return-value]

    @property
    def difficulty(self) -> Difficulty:
        return self._values["difficulty"]  # type: ignore[return-value]

    @property
    def choice_count(self) -> int:
        return self.difficulty.choice_count

    # -- setters -------------------------------------------------------------

    def set_sound_enabled(self, enabled: bool) -> None:
        self._update("sound_enabled", bool(enabled))

    def set_music_enabled(self, enabled: bool) -> None:
        self._update("music_enabled", bool(enabled))

    def toggle_sound(self) -> None:
        self._update("sound_enabled", not self.sound_enabled)

    def toggle_music(self) -> None:
        self._update("music_enabled", not self.music_enabled)

    def set_auto_advance(self, enabled: bool) -> None:
        self._update("auto_advance", bool(enabled))

    def set_show_hints(self, enabled: bool) -> None:
        self._update("show_hints", bool(enabled))

    def set_large_text(self, enabled: bool) -> None:
        self._update("large_text", bool(enabled))

    def set_reduce_animations(self, enabled: bool) -> None:
        self._update("reduce_animations", bool(enabled))

    def set_sound_volume(self, volume: float) -> None:
        value = self._number_or_none("sound_volume", volume)
        if value is not None:
            self._update("sound_volume", _clamp(value, MIN_VOLUME, MAX_VOLUME))

    def set_voice_speed(self, speed: float) -> None:
        value = self._number_or_none("voice_speed", speed)
        if value is not None:
            self._update("voice_speed", _clamp(value, MIN_VOICE_SPEED, MAX_VOICE_SPEED))

    def set_playtime_limit(self, minutes: int) -> None:
        value = self._number_or_none("playtime_limit", minutes)
        if value is not None:
            self._update("playtime_limit", max(0, int(value)))

    def set_game_speed(self, speed: Union[GameSpeed, str]) -> None:
        parsed = _parse_enum(GameSpeed, speed)
        if parsed is None:
            logger.info("Ignoring unknown game speed %r", speed)
            return
        self._update("game_speed", parsed)

    def set_difficulty(self, difficulty: Union[Difficulty, str]) -> None:
        parsed = _parse_enum(Difficulty, difficulty)
        if parsed is None:
            logger.info("Ignoring unknown difficulty %r", difficulty)
            return
        self._update("difficulty", parsed)

    def update_settings(
        self,
        sound_enabled: bool,
        music_enabled: bool,
        playtime_limit: int,
        voice_speed: float,
    ) -> None:
        """Bulk update used by the settings screen; fires one notification per field."""
        self.set_sound_enabled(sound_enabled)
        self.set_music_enabled(music_enabled)
        self.set_playtime_limit(playtime_limit)
        self.set_voice_speed(voice_speed)

    def reset_to_defaults(self) -> None:
        self._values = dict(_DEFAULTS)
        self._save_all_fields()
        self._notify("reset")

    def validate(self) -> bool:
        return (
            MIN_VOLUME <= self.sound_volume <= MAX_VOLUME
            and MIN_VOICE_SPEED <= self.voice_speed <= MAX_VOICE_SPEED
            and self.playtime_limit >= 0
        )

    # -- formatting ----------------------------------------------------------

    def formatted_sound_volume(self) -> str:
        return f"{int(round(self.sound_volume * 100))}%"

    def formatted_voice_speed(self) -> str:
        return f"{self.voice_speed:.1f}x"

    def formatted_playtime_limit(self) -> str:
        if self.playtime_limit == 0:
            return "制限なし"
        return f"{self.playtime_limit}分"

    def as_dict(self) -> Dict[str, object]:
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in self._values.items()
        }

    # -- internals -----------------------------------------------------------

    def _number_or_none(self, field: str, value: object) -> Optional[float]:
        try:
            return _finite(value)
        except (TypeError, ValueError, OverflowError):
            logger.info("Ignoring invalid %s %r", field, value)
            return None

    def _update(self, field: str, value: object) -> None:
        self._values[field] = value
        if self._store is not None:
            self._store.set(self.KEY_PREFIX + field, value.value if isinstance(value, Enum) else value)
            self._store.save_all()
        self._notify(field)

    def _notify(self, field: str) -> None:
        for wanted, callback in list(self._listeners):
            if wanted is None or wanted == field or field == "reset":
                callback(field)

    def _save_all_fields(self) -> None:
        if self._store is None:
            return
        for key, value in self.as_dict().items():
            self._store.set(self.KEY_PREFIX + key, value)
        self._store.save_all()

    def _load(self) -> None:
        """Read persisted fields; absent or malformed values keep their defaults."""
        if self._store is None:
            return
        for field in _BOOL_FIELDS:
            raw = self._store.get(self.KEY_PREFIX + field)
            if isinstance(raw, bool):
                self._values[field] = raw
            elif raw is not None:
                logger.warning("Ignoring stored %s=%r (not a boolean)", field, raw)
        numeric = {
            "sound_volume": lambda v: _clamp(_finite(v), MIN_VOLUME, MAX_VOLUME),
            "voice_speed": lambda v: _clamp(_finite(v), MIN_VOICE_SPEED, MAX_VOICE_SPEED),
            "playtime_limit": lambda v: max(0, int(_finite(v))),
        }
        for field, convert in numeric.items():
            raw = self._store.get(self.KEY_PREFIX + field)
            if raw is None:
                continue
            try:
                self._values[field] = convert(raw)
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning("Ignoring stored %s=%r: %s", field, raw, e)
        game_speed = _parse_enum(GameSpeed, self._store.get(self.KEY_PREFIX + "game_speed"))
        if game_speed is not None:
            self._values["game_speed"] = game_speed
        difficulty = _parse_enum(Difficulty, self._store.get(self.KEY_PREFIX + "difficulty"))
        if difficulty is not None:
            self._values["difficulty"] = difficulty


def _finite(value: object) -> float:
    number = float(value)  # type: ignore[arg-type]
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is not a finite number")
    return number


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None
