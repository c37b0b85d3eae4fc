"""Matching screen widgets: the big kana label and the picture choice buttons."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QPushButton, QWidget

from hiragana_match.core.catalog import CharacterEntry
from hiragana_match.ui.colors import HomeColors

# Stand-in pictures until illustrated assets exist for every concept.
CONCEPT_EMOJI = {
    "ant": "🐜", "dog": "🐕", "rabbit": "🐇", "shrimp": "🦐", "demon": "👹",
    "crab": "🦀", "giraffe": "🦒", "bear": "🐻", "cake": "🍰", "top": "🪀",
    "monkey": "🐒", "deer": "🦌", "watermelon": "🍉", "cicada": "🦗", "sky": "🌤",
    "octopus": "🐙", "butterfly": "🦋", "crane": "🕊", "hand": "✋", "clock": "🕰",
    "eggplant": "🍆", "carrot": "🥕", "doll": "🪆", "cat": "🐈", "field": "🌾",
    "flower": "🌸", "chick": "🐤", "boat": "⛵", "snake": "🐍", "bone": "🦴",
    "bean": "🫘", "ear": "👂", "bug": "🐛", "eye": "👁", "peach": "🍑",
    "arrow": "🏹", "hot_water": "♨", "night": "🌙",
    "trumpet": "🎺", "apple": "🍎", "loop": "➰", "refrigerator": "🧊", "candle": "🕯",
    "ring": "💍", "man": "🧑", "antenna": "📡",
}


def concept_label(entry: CharacterEntry) -> str:
    picture = CONCEPT_EMOJI.get(entry.concept, "")
    name = entry.concept.replace("_", " ")
    return f"{picture}\n{name}" if picture else name


class HeroKanaLabel(QLabel):
    """Large circle showing the kana being asked about."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setFixedSize(180, 180)
        self.setStyleSheet(
            f"""
            QLabel {{
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 {HomeColors.PRIMARY_LIGHT}, stop:1 {HomeColors.PRIMARY});
                color: white;
                border-radius: 90px;
                font-size: 96px;
                font-weight: 900;
            }}
            """
        )


class ChoiceButton(QPushButton):
    """One picture answer; reports its concept key when clicked."""

    def __init__(self, on_choose: Callable[[str], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._concept = ""
        self._on_choose = on_choose
        self.setMinimumSize(160, 160)
        self.setCursor(Qt.PointingHandCursor)
        self.clicked.connect(lambda: self._on_choose(self._concept))
        self.set_feedback(None)

    @property
    def concept(self) -> str:
        return self._concept

    def set_entry(self, entry: CharacterEntry) -> None:
        self._concept = entry.concept
        self.setText(concept_label(entry))
        self.set_feedback(None)

    def set_feedback(self, correct: Optional[bool]) -> None:
        border = HomeColors.CARD_BORDER
        if correct is True:
            border = HomeColors.CORRECT
        elif correct is False:
            border = HomeColors.WRONG
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {HomeColors.CARD_BG};
                color: {HomeColors.TEXT_PRIMARY};
                border: 4px solid {border};
                border-radius: 20px;
                font-size: 28px;
                font-weight: 700;
            }}
            """
        )
