"""
DrawingTrainer — timed figure and gesture drawing practice.
Entry point for the application.
"""

import faulthandler
import logging
import sys
from pathlib import Path

faulthandler.enable()

# Ensure drawing_trainer is importable
sys.path.insert(0, str(Path(__file__).resolve().parent))

from PySide6.QtWidgets import QApplication

from drawing_trainer.config import CONFIG_PATH, load_config, save_config
from drawing_trainer.ui.main_window import MainWindow
from drawing_trainer.ui.styles import DARK_STYLESHEET


def setup_logging(config: dict) -> None:
    level = getattr(logging, str(config.get("log_level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(config["log_file"], encoding="utf-8"),
        ],
    )


def main() -> None:
    config = load_config()
    setup_logging(config)
    logger = logging.getLogger(__name__)
    if not CONFIG_PATH.exists():
        # First run: write the defaults out so there is a file to edit
        save_config(config)
        logger.info("Wrote default settings to %s", CONFIG_PATH)
    logger.info("Starting DrawingTrainer...")

    app = QApplication(sys.argv)
    app.setApplicationName("DrawingTrainer")
    app.setOrganizationName("DrawingTrainer")
    app.setStyleSheet(DARK_STYLESHEET)

    window = MainWindow(config)
    window.show()

    logger.info("Application started.")
    sys.exit(app.exec())


if __name__ == "__main__":
    main()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Loads config/settings.json (writing it on first run), configures
#   logging to console and file, creates the Qt application with the dark
#   theme, and opens MainWindow.
#
# Key points:
#   - Config is loaded before logging so the level and log file come from it.
#   - app.exec() runs the Qt event loop; every countdown tick is a QTimer
#     timeout delivered by this loop.
