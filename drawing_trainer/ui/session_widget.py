"""
Session View — the full-screen-ish panel shown while a plan is running.

Shows the reference photo, the countdown, exercise progress and the break
countdown. Owns one PracticeSession per run and tears it down afterwards.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtGui import QPixmap, QResizeEvent
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QProgressBar, QMessageBox, QSizePolicy,
)

from drawing_trainer.data.models import ReferencePhoto, SessionPlan
from drawing_trainer.services.countdown_timer import CountdownTimer
from drawing_trainer.services.errors import DrawingTrainerError
from drawing_trainer.services.history_service import HistoryService
from drawing_trainer.services.photo_selector import PhotoSelector
from drawing_trainer.services.practice_session import PracticeSession, SessionState
from drawing_trainer.ui.formatting import format_timer_text

logger = logging.getLogger(__name__)


class SessionWidget(QWidget):
    """Runs a PracticeSession and mirrors its state on screen."""

    # session_id of the run that just completed
    session_finished = Signal(int)

    def __init__(
        self,
        history: HistoryService,
        selector: PhotoSelector,
        tick_interval_ms: int = 100,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.history = history
        self.selector = selector
        self.tick_interval_ms = tick_interval_ms
        self.session: Optional[PracticeSession] = None
        self._pixmap: Optional[QPixmap] = None
        self._setup_ui()
        self._update_controls()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(10)
        layout.setContentsMargins(16, 16, 16, 16)

        # ── Header ──────────────────────────────────────────────────────
        header = QHBoxLayout()
        self.plan_label = QLabel("No session running")
        self.plan_label.setObjectName("title")
        header.addWidget(self.plan_label)
        header.addStretch()
        self.exercise_label = QLabel("")
        self.exercise_label.setObjectName("subtitle")
        header.addWidget(self.exercise_label)
        layout.addLayout(header)

        # ── Photo ───────────────────────────────────────────────────────
        self.photo_label = QLabel("Pick a plan in the Planner tab to begin.")
        self.photo_label.setObjectName("photo_view")
        self.photo_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.photo_label.setSizePolicy(QSizePolicy.Policy.Ignored, QSizePolicy.Policy.Ignored)
        self.photo_label.setMinimumHeight(320)
        layout.addWidget(self.photo_label, stretch=1)

        # ── Timer & progress ───────────────────────────────────────────
        self.timer_label = QLabel("00:00")
        self.timer_label.setObjectName("timer")
        self.timer_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.timer_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 1000)
        self.progress_bar.setTextVisible(False)
        layout.addWidget(self.progress_bar)

        self.break_label = QLabel("")
        self.break_label.setObjectName("subtitle")
        self.break_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.break_label)

        # ── Controls ────────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)

        self.btn_pause = QPushButton("Pause")
        self.btn_pause.clicked.connect(self._on_pause)
        btn_row.addWidget(self.btn_pause)

        self.btn_skip = QPushButton("Skip Photo")
        self.btn_skip.clicked.connect(self._on_skip)
        btn_row.addWidget(self.btn_skip)

        self.btn_end = QPushButton("End Session")
        self.btn_end.setObjectName("danger")
        self.btn_end.clicked.connect(self._on_end)
        btn_row.addWidget(self.btn_end)

        layout.addLayout(btn_row)

    # ── Lifecycle ───────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self.session is not None and self.session.state not in (
            SessionState.IDLE, SessionState.COMPLETE,
        )

    def start_plan(self, plan: SessionPlan) -> bool:
        """Begin a fresh run of plan. Returns False if it could not start."""
        self.teardown()
        self.session = PracticeSession(
            self.history,
            self.selector,
            timer=CountdownTimer(self.tick_interval_ms),
            on_state_changed=self._on_state_changed,
            on_tick=self._on_tick,
            on_photo_changed=self._on_photo_changed,
            on_paused_changed=self._on_paused_changed,
            on_finished=self._on_finished,
            on_error=self._on_error,
        )
        self.plan_label.setText(plan.name)
        try:
            self.session.start(plan)
        except DrawingTrainerError as e:
            # on_error has already shown the message
            logger.error("Could not start plan %s: %s", plan.id, e)
            return False
        self._update_controls()
        return True

    def teardown(self) -> None:
        """Dispose the current run (if any) and reset the view."""
        if self.session is not None:
            self.session.dispose()
            self.session = None
        self._pixmap = None
        self.photo_label.clear()
        self.photo_label.setText("Pick a plan in the Planner tab to begin.")
        self.plan_label.setText("No session running")
        self.exercise_label.setText("")
        self.timer_label.setText("00:00")
        self.break_label.setText("")
        self.progress_bar.setValue(0)
        self._update_controls()

    # ── Button handlers ─────────────────────────────────────────────────

    @Slot()
    def _on_pause(self) -> None:
        if self.session:
            self.session.toggle_pause()

    @Slot()
    def _on_skip(self) -> None:
        if not self.session:
            return
        try:
            self.session.skip()
        except DrawingTrainerError as e:
            logger.error("Skip failed: %s", e)

    @Slot()
    def _on_end(self) -> None:
        if not self.session:
            return
        reply = QMessageBox.question(
            self, "End Session",
            "End this session now? Exercises not reached yet won't be recorded.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        try:
            self.session.end_session()
        except DrawingTrainerError as e:
            logger.error("End session failed: %s", e)

    # ── PracticeSession callbacks ───────────────────────────────────────

    def _on_state_changed(self, state: SessionState) -> None:
        if state == SessionState.DRAWING:
            self.exercise_label.setText(self.session.exercise_info)
            self.break_label.setText("")
        elif state == SessionState.BREAK:
            self.progress_bar.setValue(0)
            self._pixmap = None
            self.photo_label.clear()
            self.photo_label.setText("Break")
        self._update_controls()

    def _on_tick(self, remaining: float) -> None:
        self.timer_label.setText(format_timer_text(remaining))
        if self.session.state == SessionState.DRAWING:
            self.progress_bar.setValue(int(self.session.progress * 1000))
        elif self.session.state == SessionState.BREAK:
            self.break_label.setText(
                f"Next exercise in {self.session.break_seconds_remaining}s"
            )

    def _on_photo_changed(self, photo: Optional[ReferencePhoto]) -> None:
        if photo is None:
            self._pixmap = None
            self.photo_label.clear()
            self.photo_label.setText("No photos with this tag. Draw from imagination!")
            return
        pixmap = QPixmap(photo.file_path)
        if pixmap.isNull():
            logger.warning("Could not load %s", photo.file_path)
            self._pixmap = None
            self.photo_label.setText(photo.original_file_name)
            return
        self._pixmap = pixmap
        self._show_pixmap()

    def _on_paused_changed(self, paused: bool) -> None:
        self.btn_pause.setText("Resume" if paused else "Pause")

    def _on_finished(self, session_id: int) -> None:
        self._update_controls()
        # Let the session unwind before listeners tear it down
        QTimer.singleShot(0, lambda: self.session_finished.emit(session_id))

    def _on_error(self, message: str) -> None:
        self._update_controls()
        QMessageBox.critical(
            self, "Session Error",
            f"{message}\n\nYou can try ending the session to save what was recorded.",
        )

    # ── Helpers ─────────────────────────────────────────────────────────

    def _show_pixmap(self) -> None:
        if self._pixmap is None:
            return
        self.photo_label.setPixmap(self._pixmap.scaled(
            self.photo_label.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self._show_pixmap()

    def _update_controls(self) -> None:
        state = self.session.state if self.session else SessionState.IDLE
        failed = self.session is not None and self.session.last_error is not None
        active = state in (SessionState.DRAWING, SessionState.BREAK)
        self.btn_pause.setEnabled(active and not failed)
        self.btn_skip.setEnabled(state == SessionState.DRAWING and not failed)
        self.btn_end.setEnabled(active or (failed and state != SessionState.IDLE))
