"""
Post-Session Dialog — summary of a finished session with drawing uploads.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QLabel, QTableWidget, QTableWidgetItem,
    QHeaderView, QAbstractItemView, QPushButton, QDialogButtonBox,
    QFileDialog, QMessageBox, QComboBox, QHBoxLayout, QWidget,
)

from drawing_trainer.data.models import DrawingSession, ExerciseResult
from drawing_trainer.services.artist_service import ArtistService
from drawing_trainer.services.errors import DrawingTrainerError
from drawing_trainer.services.gallery_service import GalleryService
from drawing_trainer.services.history_service import HistoryService

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.jpg *.jpeg *.png *.bmp *.gif *.webp *.tif *.tiff)"


class PostSessionDialog(QDialog):
    """Lists every photo shown in a session and lets the user attach drawings."""

    def __init__(
        self,
        session_id: int,
        history: HistoryService,
        gallery: GalleryService,
        artists: ArtistService,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.session_id = session_id
        self.history = history
        self.gallery = gallery
        self.artists = artists
        self.session: Optional[DrawingSession] = None
        self.setWindowTitle("Session Complete")
        self.setMinimumSize(620, 420)
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        self.summary_label = QLabel("")
        self.summary_label.setObjectName("title")
        layout.addWidget(self.summary_label)

        artist_row = QHBoxLayout()
        artist_row.addWidget(QLabel("Artist:"))
        self.artist_combo = QComboBox()
        self.artist_combo.addItem("(none)", None)
        for a in self.artists.list_artists():
            self.artist_combo.addItem(a.name, a.id)
        artist_row.addWidget(self.artist_combo)
        artist_row.addStretch()
        layout.addLayout(artist_row)

        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["#", "Tag", "Reference", "Drawing"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        layout.addWidget(self.table)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def refresh(self) -> None:
        try:
            self.session = self.history.get_session_with_results(self.session_id)
        except DrawingTrainerError as e:
            QMessageBox.critical(self, "Error", str(e))
            return
        if self.session is None:
            self.summary_label.setText("Session not found.")
            return
        self.summary_label.setText(HistoryService.session_summary(self.session))

        results = self.session.results
        self.table.setRowCount(0)
        self.table.setRowCount(len(results))
        for row, result in enumerate(results):
            self.table.setItem(row, 0, QTableWidgetItem(str(result.sort_order + 1)))
            self.table.setItem(row, 1, QTableWidgetItem(result.tag_name or "?"))
            ref = "(no photo)" if result.reference_photo_id is None else result.photo_path
            if result.was_skipped:
                ref = f"{ref}  [skipped]"
            self.table.setItem(row, 2, QTableWidgetItem(ref))
            if result.drawing is not None:
                self.table.setItem(row, 3, QTableWidgetItem(result.drawing.original_file_name))
            else:
                btn = QPushButton("Upload...")
                btn.clicked.connect(lambda _=False, r=result: self._on_upload(r))
                self.table.setCellWidget(row, 3, btn)

    def _on_upload(self, result: ExerciseResult) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Choose Drawing", "", IMAGE_FILTER)
        if not path:
            return
        try:
            self.gallery.upload_drawing(result.id, path, self.artist_combo.currentData())
        except (ValueError, OSError) as e:
            QMessageBox.warning(self, "Upload Failed", str(e))
            return
        self.refresh()
