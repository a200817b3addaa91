"""
History — completed sessions, newest first. Double-click reopens a session's
summary so drawings can still be attached afterwards.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView, QMessageBox,
)

from drawing_trainer.services.errors import DrawingTrainerError
from drawing_trainer.services.history_service import HistoryService

logger = logging.getLogger(__name__)


class HistoryWidget(QWidget):
    """Table of finished sessions."""

    # session_id the user wants to review
    session_opened = Signal(int)

    def __init__(self, history: HistoryService, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.history = history
        self._setup_ui()
        self.refresh()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)

        header = QHBoxLayout()
        title = QLabel("Session History")
        title.setObjectName("title")
        header.addWidget(title)
        header.addStretch()
        self.btn_open = QPushButton("Open Summary")
        self.btn_open.setObjectName("primary")
        self.btn_open.clicked.connect(self._on_open)
        header.addWidget(self.btn_open)
        layout.addLayout(header)

        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Plan", "Started", "Finished", "Photos (skipped)"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.verticalHeader().setVisible(False)
        self.table.cellDoubleClicked.connect(lambda *_: self._on_open())
        layout.addWidget(self.table)

    def refresh(self) -> None:
        try:
            sessions = self.history.list_completed_sessions()
        except DrawingTrainerError as e:
            logger.error("Could not load history: %s", e)
            QMessageBox.critical(self, "History", str(e))
            return
        self.table.setRowCount(len(sessions))
        for row, s in enumerate(sessions):
            plan_item = QTableWidgetItem(s.plan_name or "Unknown")
            plan_item.setData(Qt.ItemDataRole.UserRole, s.id)
            self.table.setItem(row, 0, plan_item)
            self.table.setItem(row, 1, QTableWidgetItem(_fmt(s.started_at)))
            self.table.setItem(row, 2, QTableWidgetItem(_fmt(s.completed_at)))
            skipped = sum(1 for r in s.results if r.was_skipped)
            self.table.setItem(row, 3, QTableWidgetItem(f"{len(s.results)} ({skipped})"))
        self.btn_open.setEnabled(bool(sessions))

    def _on_open(self) -> None:
        row = self.table.currentRow()
        if row < 0:
            return
        self.session_opened.emit(self.table.item(row, 0).data(Qt.ItemDataRole.UserRole))


def _fmt(when) -> str:
    return when.strftime("%Y-%m-%d %H:%M") if when else ""
