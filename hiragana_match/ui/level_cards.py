"""Level map: one card per kana row, laid out as a winding path."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QLineF, Qt
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QGridLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from hiragana_match.ui.colors import HomeColors, blend_hex, level_color, star_text
from hiragana_match.ui.models import LevelState, map_position

LOCKED_TIP = "まえのレベルで★2つをとろう"


class LevelCard(QFrame):
    """Shows a level's first kana, title and best stars; clickable once unlocked."""

    def __init__(
        self,
        number: int,
        on_click: Callable[[int], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._number = number
        self._on_click = on_click
        self._state: Optional[LevelState] = None
        self._color = level_color(number)

        self.setObjectName("levelCard")
        self.setMinimumSize(140, 150)
        self.setCursor(Qt.PointingHandCursor)

        self._kana = QLabel("")
        self._kana.setAlignment(Qt.AlignCenter)
        self._caption = QLabel("")
        self._caption.setAlignment(Qt.AlignCenter)
        self._caption.setWordWrap(True)
        self._stars = QLabel("")
        self._stars.setAlignment(Qt.AlignCenter)

        column = QVBoxLayout(self)
        column.setContentsMargins(12, 10, 12, 10)
        column.setSpacing(4)
        column.addWidget(self._kana, 1)
        column.addWidget(self._caption)
        column.addWidget(self._stars)

        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(18)
        shadow.setOffset(0, 6)
        shadow.setColor(QColor(62, 39, 35, 60))
        self.setGraphicsEffect(shadow)

    @property
    def unlocked(self) -> bool:
        return self._state is not None and self._state.unlocked

    def set_state(self, state: LevelState) -> None:
        self._state = state
        level = state.level
        self._kana.setText(level.row[:1] if state.unlocked else "🔒")
        self._caption.setText(f"{level.number}. {level.title}")
        self._stars.setText(star_text(state.stars))
        self.setToolTip(level.description if state.unlocked else LOCKED_TIP)
        self._restyle()

    def _restyle(self) -> None:
        state = self._state
        base = self._color if self.unlocked else HomeColors.STAR_OFF
        top = blend_hex(base, "#FFFFFF", 0.2)
        border = HomeColors.PRIMARY if state is not None and state.is_current else "rgba(255, 255, 255, 0.5)"
        self.setStyleSheet(
            f"""
            QFrame#levelCard {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1, stop:0 {top}, stop:1 {base});
                border: 3px solid {border};
                border-radius: 18px;
            }}
            QLabel {{ color: white; background: transparent; }}
            """
        )
        self._kana.setStyleSheet("font-size: 40px; font-weight: 900;")
        self._caption.setStyleSheet("font-size: 12px; font-weight: 700;")
        self._stars.setStyleSheet(f"color: {HomeColors.STAR_ON}; font-size: 20px;")

    def mousePressEvent(self, event) -> None:
        if self.unlocked:
            self._on_click(self._number)
        super().mousePressEvent(event)


class LevelMapWidget(QWidget):
    """Grid of LevelCards joined by a path; unlocked stretches are drawn solid."""

    COLUMNS = 5

    def __init__(
        self,
        *,
        on_level_clicked: Callable[[int], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._on_level_clicked = on_level_clicked
        self._cards: list[LevelCard] = []
        self._grid = QGridLayout(self)
        self._grid.setContentsMargins(20, 20, 20, 20)
        self._grid.setSpacing(28)

    def set_level_states(self, states: list[LevelState]) -> None:
        if len(states) != len(self._cards):
            self._rebuild(len(states))
        for card, state in zip(self._cards, states):
            card.set_state(state)
        self.update()

    def _rebuild(self, count: int) -> None:
        for card in self._cards:
            self._grid.removeWidget(card)
            card.deleteLater()
        self._cards = []
        for index in range(count):
            card = LevelCard(index + 1, self._on_level_clicked, parent=self)
            row, col = map_position(index, self.COLUMNS)
            self._grid.addWidget(card, row, col)
            self._cards.append(card)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if len(self._cards) < 2:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        for a, b in zip(self._cards, self._cards[1:]):
            pen = QPen(QColor(HomeColors.PRIMARY_LIGHT if b.unlocked else HomeColors.TEXT_MUTED))
            pen.setWidth(5)
            pen.setCapStyle(Qt.RoundCap)
            if not b.unlocked:
                pen.setStyle(Qt.DashLine)
            painter.setPen(pen)
            painter.drawLine(QLineF(a.geometry().center().toPointF(), b.geometry().center().toPointF()))
