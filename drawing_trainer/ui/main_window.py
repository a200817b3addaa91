"""
Main Window — the central hub of DrawingTrainer.

Contains:
  - Library tab (reference photos and tags)
  - Planner tab (session plans, Start Session)
  - Session tab (the running practice session)
  - Gallery tab (completed drawings and artists)
  - History tab (finished sessions)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QMainWindow, QTabWidget, QMessageBox

from drawing_trainer.config import DEFAULT_CONFIG
from drawing_trainer.data.database import Database
from drawing_trainer.data.models import SessionPlan
from drawing_trainer.data.repository import Repository
from drawing_trainer.services.artist_service import ArtistService
from drawing_trainer.services.errors import DrawingTrainerError
from drawing_trainer.services.gallery_service import GalleryService
from drawing_trainer.services.history_service import HistoryService
from drawing_trainer.services.library_service import LibraryService
from drawing_trainer.services.photo_selector import PhotoSelector
from drawing_trainer.services.photo_storage import PhotoStorage
from drawing_trainer.services.plan_service import PlanService
from drawing_trainer.ui.gallery_widget import GalleryWidget
from drawing_trainer.ui.history_widget import HistoryWidget
from drawing_trainer.ui.library_widget import LibraryWidget
from drawing_trainer.ui.planner_widget import PlannerWidget
from drawing_trainer.ui.post_session_dialog import PostSessionDialog
from drawing_trainer.ui.session_widget import SessionWidget

logger = logging.getLogger(__name__)

LIBRARY_TAB, PLANNER_TAB, SESSION_TAB, GALLERY_TAB, HISTORY_TAB = range(5)


class MainWindow(QMainWindow):
    """The main application window."""

    def __init__(self, config: Optional[dict] = None) -> None:
        super().__init__()
        self.config = config or DEFAULT_CONFIG.copy()
        self.setWindowTitle("DrawingTrainer")
        self.setMinimumSize(900, 650)
        self.resize(1100, 780)

        # ── Initialize core systems ─────────────────────────────────────
        self.db = Database(Path(self.config["db_path"]))
        self.db.connect()
        self.repo = Repository(self.db.conn)
        self.storage = PhotoStorage(self.config["storage_dir"])
        self.library = LibraryService(self.repo, self.storage)
        self.plans = PlanService(self.repo)
        self.history = HistoryService(self.repo)
        self.selector = PhotoSelector(self.repo)
        self.gallery = GalleryService(self.repo, self.storage)
        self.artists = ArtistService(self.repo)

        self._build_ui()

    # ── UI Construction ─────────────────────────────────────────────────

    def _build_ui(self) -> None:
        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        self.library_widget = LibraryWidget(self.library)
        self.tabs.addTab(self.library_widget, "Library")

        self.planner = PlannerWidget(self.plans, self.library)
        self.planner.start_requested.connect(self._on_start_requested)
        self.tabs.addTab(self.planner, "Planner")

        self.session_widget = SessionWidget(
            self.history, self.selector, self.config["tick_interval_ms"],
        )
        self.session_widget.session_finished.connect(self._on_session_finished)
        self.tabs.addTab(self.session_widget, "Session")

        self.gallery_widget = GalleryWidget(self.gallery, self.artists, self.library)
        self.tabs.addTab(self.gallery_widget, "Gallery")

        self.history_widget = HistoryWidget(self.history)
        self.history_widget.session_opened.connect(self._on_history_opened)
        self.tabs.addTab(self.history_widget, "History")

        self.tabs.currentChanged.connect(self._on_tab_changed)

    # ── Session flow ────────────────────────────────────────────────────

    @Slot(object)
    def _on_start_requested(self, plan: SessionPlan) -> None:
        if self.session_widget.is_running:
            QMessageBox.information(self, "Session Running",
                                    "Finish or end the current session first.")
            self.tabs.setCurrentIndex(SESSION_TAB)
            return
        self.tabs.setCurrentIndex(SESSION_TAB)
        if self.session_widget.start_plan(plan):
            self.planner.set_session_running(True)
            logger.info("Started plan '%s' from the planner.", plan.name)

    @Slot(int)
    def _on_session_finished(self, session_id: int) -> None:
        dialog = PostSessionDialog(session_id, self.history, self.gallery, self.artists, self)
        dialog.exec()
        self.session_widget.teardown()
        self.planner.set_session_running(False)
        self.gallery_widget.refresh()
        self.tabs.setCurrentIndex(PLANNER_TAB)

    @Slot(int)
    def _on_history_opened(self, session_id: int) -> None:
        dialog = PostSessionDialog(session_id, self.history, self.gallery, self.artists, self)
        dialog.setWindowTitle("Session Summary")
        dialog.exec()
        self.gallery_widget.refresh()

    # ── Misc ────────────────────────────────────────────────────────────

    @Slot(int)
    def _on_tab_changed(self, index: int) -> None:
        if index == LIBRARY_TAB:
            self.library_widget.refresh()
        elif index == PLANNER_TAB:
            self.planner.refresh()
        elif index == GALLERY_TAB:
            self.gallery_widget.refresh()
        elif index == HISTORY_TAB:
            self.history_widget.refresh()

    def closeEvent(self, event: QCloseEvent) -> None:
        session = self.session_widget.session
        if self.session_widget.is_running:
            reply = QMessageBox.question(
                self, "Session Active",
                "A drawing session is running.\n\nEnd it and quit?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            )
            if reply != QMessageBox.StandardButton.Yes:
                event.ignore()
                return
            # Detach the post-session dialog; we're closing
            session.on_finished = None
            try:
                session.end_session()
            except DrawingTrainerError as e:
                logger.error("Could not complete session on exit: %s", e)
        self.session_widget.teardown()
        self.db.close()
        event.accept()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Creates the database, repository and every service once, then hands
#   them to the five tabs. It is the only place that knows about all of them.
#
# Data flow:
#   Planner "Start Session" -> start_requested(plan) -> SessionWidget builds
#   a fresh PracticeSession -> on completion session_finished(id) ->
#   PostSessionDialog for drawing uploads -> session torn down, gallery
#   refreshed.
#
# Talking points:
#   1. One PracticeSession per run: nothing from a finished run (timer,
#      callbacks) can leak into the next one.
#   2. closeEvent completes a running session before the connection closes,
#      so history never holds a half-open session from a normal quit.
