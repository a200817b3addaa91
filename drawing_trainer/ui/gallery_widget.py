"""
Gallery — completed drawings, filterable by tag and artist, plus artist management.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QDateTime, Slot
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QComboBox,
    QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView,
    QMessageBox, QInputDialog, QFileDialog, QDialog, QFormLayout, QSpinBox,
    QDateTimeEdit, QDialogButtonBox, QLineEdit,
)

from drawing_trainer.services.artist_service import ArtistService
from drawing_trainer.services.gallery_service import GalleryService
from drawing_trainer.services.library_service import LibraryService
from drawing_trainer.ui.formatting import format_duration

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.jpg *.jpeg *.png *.bmp *.gif *.webp *.tif *.tiff)"


class GalleryWidget(QWidget):

    def __init__(
        self,
        gallery: GalleryService,
        artists: ArtistService,
        library: LibraryService,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.gallery = gallery
        self.artists = artists
        self.library = library
        self._setup_ui()
        self.refresh()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)

        title = QLabel("Gallery")
        title.setObjectName("title")
        layout.addWidget(title)

        # ── Filters ─────────────────────────────────────────────────────
        bar = QHBoxLayout()
        bar.addWidget(QLabel("Tag:"))
        self.tag_combo = QComboBox()
        self.tag_combo.currentIndexChanged.connect(self._refresh_table)
        bar.addWidget(self.tag_combo)
        bar.addWidget(QLabel("Artist:"))
        self.artist_combo = QComboBox()
        self.artist_combo.currentIndexChanged.connect(self._refresh_table)
        bar.addWidget(self.artist_combo)
        bar.addStretch()

        btn_add = QPushButton("Add Drawing")
        btn_add.setObjectName("primary")
        btn_add.clicked.connect(self._on_add_drawing)
        bar.addWidget(btn_add)
        layout.addLayout(bar)

        self.table = QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Drawing", "Tag", "Duration", "Drawn", "Artist"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.verticalHeader().setVisible(False)
        layout.addWidget(self.table)

        # ── Artists ─────────────────────────────────────────────────────
        artist_bar = QHBoxLayout()
        btn_assign = QPushButton("Set Artist...")
        btn_assign.clicked.connect(self._on_assign_artist)
        artist_bar.addWidget(btn_assign)
        artist_bar.addStretch()
        btn_new_artist = QPushButton("New Artist")
        btn_new_artist.clicked.connect(self._on_new_artist)
        artist_bar.addWidget(btn_new_artist)
        btn_rename = QPushButton("Rename Artist")
        btn_rename.clicked.connect(self._on_rename_artist)
        artist_bar.addWidget(btn_rename)
        btn_del_artist = QPushButton("Delete Artist")
        btn_del_artist.setObjectName("danger")
        btn_del_artist.clicked.connect(self._on_delete_artist)
        artist_bar.addWidget(btn_del_artist)
        layout.addLayout(artist_bar)

    # ── Data ────────────────────────────────────────────────────────────

    def refresh(self) -> None:
        self._fill_combo(self.tag_combo, "All tags",
                         [(t.id, t.name) for t in self.library.list_tags()])
        self._fill_combo(self.artist_combo, "All artists",
                         [(a.id, a.name) for a in self.artists.list_artists()])
        self._refresh_table()

    @staticmethod
    def _fill_combo(combo: QComboBox, all_label: str, entries) -> None:
        current = combo.currentData()
        combo.blockSignals(True)
        combo.clear()
        combo.addItem(all_label, None)
        for entry_id, name in entries:
            combo.addItem(name, entry_id)
        combo.setCurrentIndex(max(combo.findData(current), 0))
        combo.blockSignals(False)

    def _refresh_table(self, *_args) -> None:
        drawings = self.gallery.list_drawings(self.tag_combo.currentData(),
                                              self.artist_combo.currentData())
        self.table.setRowCount(len(drawings))
        for row, d in enumerate(drawings):
            name_item = QTableWidgetItem(d.original_file_name)
            name_item.setData(Qt.ItemDataRole.UserRole, d.id)
            name_item.setToolTip(d.file_path)
            self.table.setItem(row, 0, name_item)
            self.table.setItem(row, 1, QTableWidgetItem(d.tag_name))
            self.table.setItem(row, 2, QTableWidgetItem(format_duration(d.duration_seconds)))
            when = d.drawn_at or d.uploaded_at
            self.table.setItem(row, 3, QTableWidgetItem(when.strftime("%Y-%m-%d %H:%M") if when else ""))
            self.table.setItem(row, 4, QTableWidgetItem(d.artist_name))

    def _selected_drawing_id(self) -> Optional[int]:
        row = self.table.currentRow()
        if row < 0:
            return None
        return self.table.item(row, 0).data(Qt.ItemDataRole.UserRole)

    def _pick_artist(self, title: str):
        """(ok, artist_id) from a chooser that includes '(none)'."""
        artists = self.artists.list_artists()
        names = ["(none)"] + [a.name for a in artists]
        name, ok = QInputDialog.getItem(self, title, "Artist:", names, 0, False)
        if not ok:
            return False, None
        return True, next((a.id for a in artists if a.name == name), None)

    # ── Slots ───────────────────────────────────────────────────────────

    @Slot()
    def _on_add_drawing(self) -> None:
        dialog = AddDrawingDialog(self.library, self.artists, self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        try:
            self.gallery.add_drawing(
                dialog.file_path,
                dialog.tag_combo.currentData(),
                dialog.duration_spin.value(),
                drawn_at=dialog.drawn_edit.dateTime().toPython(),
                artist_id=dialog.artist_combo.currentData(),
            )
        except (ValueError, OSError) as e:
            QMessageBox.warning(self, "Add Drawing", str(e))
            return
        self._refresh_table()

    @Slot()
    def _on_assign_artist(self) -> None:
        drawing_id = self._selected_drawing_id()
        if drawing_id is None:
            return
        ok, artist_id = self._pick_artist("Set Artist")
        if ok:
            self.gallery.set_artist(drawing_id, artist_id)
            self._refresh_table()

    @Slot()
    def _on_new_artist(self) -> None:
        name, ok = QInputDialog.getText(self, "New Artist", "Name:")
        if not ok:
            return
        try:
            self.artists.create_artist(name)
        except ValueError as e:
            QMessageBox.warning(self, "Invalid Name", str(e))
            return
        self.refresh()

    @Slot()
    def _on_rename_artist(self) -> None:
        artist_id = self.artist_combo.currentData()
        if artist_id is None:
            QMessageBox.information(self, "Rename Artist", "Pick an artist in the filter first.")
            return
        name, ok = QInputDialog.getText(self, "Rename Artist", "New name:",
                                        QLineEdit.EchoMode.Normal, self.artist_combo.currentText())
        if not ok:
            return
        try:
            self.artists.rename_artist(artist_id, name)
        except ValueError as e:
            QMessageBox.warning(self, "Invalid Name", str(e))
            return
        self.refresh()

    @Slot()
    def _on_delete_artist(self) -> None:
        artist_id = self.artist_combo.currentData()
        if artist_id is None:
            return
        reply = QMessageBox.question(
            self, "Delete Artist",
            f"Delete '{self.artist_combo.currentText()}'? Their drawings stay in the gallery.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.artists.delete_artist(artist_id)
            self.refresh()


class AddDrawingDialog(QDialog):
    """Details for a drawing made outside a session."""

    def __init__(self, library: LibraryService, artists: ArtistService, parent=None) -> None:
        super().__init__(parent)
        self.file_path = ""
        self.setWindowTitle("Add Drawing")
        self.setMinimumWidth(380)

        layout = QFormLayout(self)

        file_row = QHBoxLayout()
        self.file_label = QLabel("(no file)")
        file_row.addWidget(self.file_label)
        btn_browse = QPushButton("Browse...")
        btn_browse.clicked.connect(self._on_browse)
        file_row.addWidget(btn_browse)
        layout.addRow("File:", file_row)

        self.tag_combo = QComboBox()
        self.tag_combo.addItem("(none)", None)
        for t in library.list_tags():
            self.tag_combo.addItem(t.name, t.id)
        layout.addRow("Tag:", self.tag_combo)

        self.duration_spin = QSpinBox()
        self.duration_spin.setRange(0, 24 * 3600)
        self.duration_spin.setSuffix(" s")
        self.duration_spin.setValue(60)
        layout.addRow("Duration:", self.duration_spin)

        self.drawn_edit = QDateTimeEdit(QDateTime.currentDateTime())
        self.drawn_edit.setCalendarPopup(True)
        layout.addRow("Drawn:", self.drawn_edit)

        self.artist_combo = QComboBox()
        self.artist_combo.addItem("(none)", None)
        for a in artists.list_artists():
            self.artist_combo.addItem(a.name, a.id)
        layout.addRow("Artist:", self.artist_combo)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    @Slot()
    def _on_browse(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Choose Drawing", "", IMAGE_FILTER)
        if path:
            self.file_path = path
            self.file_label.setText(path.rsplit("/", 1)[-1])

    @Slot()
    def _on_accept(self) -> None:
        if not self.file_path:
            QMessageBox.warning(self, "Missing File", "Please choose a drawing file.")
            return
        self.accept()
