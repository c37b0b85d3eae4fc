from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from hiragana_match.core.game import GameCoordinator, RoundOutcome
from hiragana_match.core.session import MatchingSession
from hiragana_match.core.settings import GameSpeed
from hiragana_match.core.storage import KeyValueStore
from hiragana_match.core.unlocks import Achievement
from hiragana_match.ui.colors import HomeColors, star_text
from hiragana_match.ui.game_widgets import ChoiceButton, HeroKanaLabel
from hiragana_match.ui.level_cards import LevelMapWidget
from hiragana_match.ui.models import build_level_states

logger = logging.getLogger(__name__)

ADVANCE_DELAY_MS = {GameSpeed.SLOW: 1600, GameSpeed.NORMAL: 900, GameSpeed.FAST: 400}


class MainWindow(QMainWindow):
    """Two screens: a level map with progress, and the matching game itself."""

    def __init__(self, game: GameCoordinator, store: KeyValueStore) -> None:
        super().__init__()
        self._game = game
        self._store = store
        self._session: Optional[MatchingSession] = None
        self._awaiting_advance = False
        self._notices: List[str] = []

        game.unlocks.on_characters_unlocked = self._on_characters_unlocked
        game.unlocks.on_achievement_unlocked = self._on_achievement_unlocked

        self._stack = QStackedWidget()
        self._home_screen = QWidget()
        self._game_screen = QWidget()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._game_screen)
        self.setCentralWidget(self._stack)

        self._build_home()
        self._build_game()
        self.setWindowTitle("ひらがなマッチ")
        self.setMinimumSize(1000, 700)
        self.setStyleSheet(
            f"QMainWindow {{ background: qlineargradient(x1:0, y1:0, x2:0, y2:1,"
            f" stop:0 {HomeColors.BG_TOP}, stop:1 {HomeColors.BG_BOTTOM}); }}"
        )
        self._refresh_home()

    # -- construction --------------------------------------------------------

    def _build_home(self) -> None:
        layout = QVBoxLayout(self._home_screen)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(16)

        header = QHBoxLayout()
        title = QLabel("ひらがなマッチ")
        title.setStyleSheet(f"color: {HomeColors.PRIMARY}; font-size: 30px; font-weight: 900;")
        header.addWidget(title)
        header.addStretch(1)
        self._summary_label = QLabel("")
        self._summary_label.setStyleSheet(f"color: {HomeColors.TEXT_SECONDARY}; font-size: 16px; font-weight: 700;")
        header.addWidget(self._summary_label)
        reset_button = QPushButton("リセット")
        reset_button.clicked.connect(self._reset_progress)
        header.addWidget(reset_button)
        layout.addLayout(header)

        self._next_unlock_label = QLabel("")
        self._next_unlock_label.setStyleSheet(f"color: {HomeColors.TEXT_MUTED}; font-size: 14px;")
        layout.addWidget(self._next_unlock_label)

        self._level_map = LevelMapWidget(on_level_clicked=self._start_level)
        layout.addWidget(self._level_map, 1)

    def _build_game(self) -> None:
        layout = QVBoxLayout(self._game_screen)
        layout.setContentsMargins(24, 16, 24, 24)
        layout.setSpacing(18)

        top = QHBoxLayout()
        back = QPushButton("← もどる")
        back.clicked.connect(self._show_home_screen)
        top.addWidget(back)
        self._game_title = QLabel("")
        self._game_title.setStyleSheet(f"color: {HomeColors.TEXT_PRIMARY}; font-size: 20px; font-weight: 900;")
        top.addWidget(self._game_title, 1, Qt.AlignCenter)
        self._progress_label = QLabel("")
        top.addWidget(self._progress_label)
        layout.addLayout(top)

        self._hero = HeroKanaLabel()
        layout.addWidget(self._hero, 0, Qt.AlignHCenter)

        self._hint_label = QLabel("")
        self._hint_label.setAlignment(Qt.AlignCenter)
        self._hint_label.setStyleSheet(f"color: {HomeColors.TEXT_SECONDARY}; font-size: 16px;")
        layout.addWidget(self._hint_label)

        self._choices_row = QHBoxLayout()
        self._choices_row.setSpacing(20)
        self._choice_buttons: List[ChoiceButton] = []
        for _ in range(4):
            button = ChoiceButton(self._on_choice)
            self._choice_buttons.append(button)
            self._choices_row.addWidget(button)
        layout.addLayout(self._choices_row, 1)

        self._feedback_label = QLabel("")
        self._feedback_label.setAlignment(Qt.AlignCenter)
        self._feedback_label.setStyleSheet("font-size: 22px; font-weight: 900;")
        layout.addWidget(self._feedback_label)

        self._next_button = QPushButton("つぎへ →")
        self._next_button.clicked.connect(self._load_current_question)
        self._next_button.hide()
        layout.addWidget(self._next_button, 0, Qt.AlignHCenter)

    # -- home ----------------------------------------------------------------

    def _refresh_home(self) -> None:
        game = self._game
        stats = game.progression.stats()
        unlocked = game.unlocks.unlock_progress()
        self._summary_label.setText(
            f"★ {stats.total_stars}   クリア {stats.completed_count}/{game.progression.total_levels}"
            f"   もじ {unlocked.unlocked_count}/{unlocked.total_count}"
        )
        info = game.unlocks.next_unlock_info()
        if info is None:
            self._next_unlock_label.setText("すべてのもじをあつめたよ！")
        else:
            self._next_unlock_label.setText(f"あと★{info.stars_needed}で {info.group_name} がふえるよ")
        self._level_map.set_level_states(build_level_states(game.levels.all(), game.progression))

    def _show_home_screen(self) -> None:
        self._session = None
        self._refresh_home()
        self._stack.setCurrentWidget(self._home_screen)

    def _reset_progress(self) -> None:
        answer = QMessageBox.question(self, "リセット", "ほんとうに はじめから やりなおす？")
        if answer == QMessageBox.StandardButton.Yes:
            self._game.reset_progress()
            self._refresh_home()

    # -- game ----------------------------------------------------------------

    def _start_level(self, level: int) -> None:
        session = self._game.start_round(level)
        if session.is_empty():
            logger.info("Nothing to play for level %d", level)
            return
        self._session = session
        definition = self._game.levels.get(level)
        self._game_title.setText(f"レベル {level}: {definition.title}")
        self._stack.setCurrentWidget(self._game_screen)
        self._load_current_question()

    def _load_current_question(self) -> None:
        session = self._session
        if session is None or session.is_complete():
            return
        self._awaiting_advance = False
        self._next_button.hide()
        question = session.current_question()
        self._hero.setText(question.target)
        self._hint_label.setText(self._game.hint_for(session))
        self._feedback_label.setText("")
        self._progress_label.setText(f"{session.index + 1}/{session.total_questions}")
        for i, button in enumerate(self._choice_buttons):
            if i < len(question.choices):
                button.set_entry(question.choices[i])
                button.show()
            else:
                button.hide()

    def _on_choice(self, concept: str) -> None:
        session = self._session
        if session is None or session.is_complete() or self._awaiting_advance:
            return
        question = session.current_question()
        answer = session.submit(concept)
        for button in self._choice_buttons:
            if button.concept == question.correct_answer.concept:
                button.set_feedback(True)
            elif button.concept == concept:
                button.set_feedback(False)
        if answer.correct:
            self._feedback_label.setText("せいかい！")
            self._feedback_label.setStyleSheet(f"color: {HomeColors.CORRECT}; font-size: 22px; font-weight: 900;")
        else:
            self._feedback_label.setText("ざんねん…")
            self._feedback_label.setStyleSheet(f"color: {HomeColors.WRONG}; font-size: 22px; font-weight: 900;")

        self._awaiting_advance = True
        delay = ADVANCE_DELAY_MS[self._game.settings.game_speed]
        if session.is_complete():
            QTimer.singleShot(delay, self._level_completed)
        elif self._game.settings.auto_advance:
            QTimer.singleShot(delay, self._load_current_question)
        else:
            self._next_button.show()

    def _level_completed(self) -> None:
        session = self._session
        if session is None:
            return
        outcome = self._game.finish_round(session)
        if outcome is not None:
            self._show_outcome(outcome)
        self._show_home_screen()

    def _show_outcome(self, outcome: RoundOutcome) -> None:
        lines = [
            star_text(outcome.stars),
            f"{outcome.result.correct}/{outcome.result.total} せいかい",
            f"{outcome.result.elapsed_seconds:.0f} びょう",
        ]
        if outcome.next_level_unlocked:
            lines.append(f"レベル {outcome.level + 1} がひらいたよ！")
        lines.extend(self._notices)
        self._notices = []
        QMessageBox.information(self, "クリア！", "\n".join(lines))

    # -- notifications -------------------------------------------------------

    def _on_characters_unlocked(self, batch: List[str]) -> None:
        self._notices.append(f"あたらしいもじ: {' '.join(batch)}")

    def _on_achievement_unlocked(self, achievement: Achievement) -> None:
        self._notices.append(f"🏅 {achievement.title}: {achievement.description}")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Persist everything when closing the app."""
        self._store.save_all()
        super().closeEvent(event)
