"""Application entry point and setup for the Hiragana Match game."""

import logging
import os
import sys

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication

from hiragana_match.core.game import GameCoordinator
from hiragana_match.core.storage import KeyValueStore
from hiragana_match.ui.main_window import MainWindow

LOG_LEVEL_ENV_VAR = "HIRAGANA_MATCH_LOG_LEVEL"


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_application_font(app: QApplication) -> None:
    """Prefer a Japanese-capable font, with emoji fallbacks for the picture choices."""
    app_font = QFont()
    app_font.setFamilies(
        [
            "Hiragino Maru Gothic ProN",  # macOS
            "Yu Gothic UI",  # Windows
            "Noto Sans CJK JP",  # Linux
            "Noto Color Emoji",
            "Segoe UI Emoji",
            "Apple Color Emoji",
        ]
    )
    app_font.setPointSize(12)
    app.setFont(app_font)


def run() -> None:
    """Initialize the application, load progress, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Hiragana Match")
    app.setApplicationDisplayName("ひらがなマッチ")

    load_application_font(app)

    store = KeyValueStore()
    logging.info("Using progress store at %s", store.file_path)
    game = GameCoordinator.create(store)

    window = MainWindow(game=game, store=store)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
