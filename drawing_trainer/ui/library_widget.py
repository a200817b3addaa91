"""
Library — import reference photos and manage their tags.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QComboBox,
    QListWidget, QListWidgetItem, QFileDialog, QMessageBox, QInputDialog,
    QProgressDialog, QApplication,
)

from drawing_trainer.services.library_service import LibraryService

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.jpg *.jpeg *.png *.bmp *.gif *.webp *.tif *.tiff)"


class LibraryWidget(QWidget):
    """Photo list filtered by tag, with a checkable tag list for the selection."""

    def __init__(self, library: LibraryService, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.library = library
        self._setup_ui()
        self.refresh()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)

        title = QLabel("Reference Library")
        title.setObjectName("title")
        layout.addWidget(title)

        # ── Toolbar ─────────────────────────────────────────────────────
        bar = QHBoxLayout()
        bar.addWidget(QLabel("Show:"))
        self.filter_combo = QComboBox()
        self.filter_combo.currentIndexChanged.connect(self._refresh_photos)
        bar.addWidget(self.filter_combo)
        bar.addStretch()

        btn_tag = QPushButton("New Tag")
        btn_tag.clicked.connect(self._on_new_tag)
        bar.addWidget(btn_tag)
        btn_files = QPushButton("Import Photos")
        btn_files.setObjectName("primary")
        btn_files.clicked.connect(self._on_import_files)
        bar.addWidget(btn_files)
        btn_folder = QPushButton("Import Folder")
        btn_folder.clicked.connect(self._on_import_folder)
        bar.addWidget(btn_folder)
        layout.addLayout(bar)

        # ── Photos + tags ───────────────────────────────────────────────
        body = QHBoxLayout()
        self.photo_list = QListWidget()
        self.photo_list.currentItemChanged.connect(self._on_photo_selected)
        body.addWidget(self.photo_list, stretch=3)

        side = QVBoxLayout()
        side.addWidget(QLabel("Tags for selected photo:"))
        self.tag_list = QListWidget()
        self.tag_list.itemChanged.connect(self._on_tag_toggled)
        side.addWidget(self.tag_list)
        self.btn_delete = QPushButton("Delete Photo")
        self.btn_delete.setObjectName("danger")
        self.btn_delete.clicked.connect(self._on_delete)
        side.addWidget(self.btn_delete)
        body.addLayout(side, stretch=1)
        layout.addLayout(body)

        self.count_label = QLabel("")
        self.count_label.setObjectName("subtitle")
        layout.addWidget(self.count_label)

    # ── Data ────────────────────────────────────────────────────────────

    def refresh(self) -> None:
        current = self.filter_combo.currentData()
        self.filter_combo.blockSignals(True)
        self.filter_combo.clear()
        self.filter_combo.addItem("All photos", None)
        for tag in self.library.list_tags():
            self.filter_combo.addItem(tag.name, tag.id)
        idx = self.filter_combo.findData(current)
        self.filter_combo.setCurrentIndex(max(idx, 0))
        self.filter_combo.blockSignals(False)
        self._refresh_photos()

    def _refresh_photos(self, *_args) -> None:
        self.photo_list.clear()
        photos = self.library.list_photos(self.filter_combo.currentData())
        for p in photos:
            item = QListWidgetItem(f"{p.original_file_name}  ({p.width}x{p.height})")
            item.setData(Qt.ItemDataRole.UserRole, p.id)
            item.setToolTip(p.file_path)
            self.photo_list.addItem(item)
        self.count_label.setText(f"{len(photos)} photos")
        self._load_tags(None)

    def _load_tags(self, photo_id: Optional[int]) -> None:
        self.tag_list.blockSignals(True)
        self.tag_list.clear()
        photo = self.library.get_photo(photo_id) if photo_id is not None else None
        for tag in self.library.list_tags():
            item = QListWidgetItem(tag.name)
            item.setData(Qt.ItemDataRole.UserRole, tag.id)
            if photo is not None:
                item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                checked = tag.id in photo.tag_ids
                item.setCheckState(Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked)
            self.tag_list.addItem(item)
        self.tag_list.blockSignals(False)
        self.btn_delete.setEnabled(photo is not None)

    def _selected_photo_id(self) -> Optional[int]:
        item = self.photo_list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def _ask_tags(self) -> Optional[List[int]]:
        """Pick the tag new imports get. None means the user cancelled."""
        tags = self.library.list_tags()
        names = ["(no tag)"] + [t.name for t in tags]
        default = self.filter_combo.currentIndex()
        name, ok = QInputDialog.getItem(self, "Tag", "Tag imported photos as:",
                                        names, default, False)
        if not ok:
            return None
        return [t.id for t in tags if t.name == name]

    # ── Slots ───────────────────────────────────────────────────────────

    def _on_photo_selected(self, current: Optional[QListWidgetItem], _previous=None) -> None:
        self._load_tags(current.data(Qt.ItemDataRole.UserRole) if current else None)

    def _on_tag_toggled(self, item: QListWidgetItem) -> None:
        photo_id = self._selected_photo_id()
        if photo_id is None:
            return
        enabled = item.checkState() == Qt.CheckState.Checked
        self.library.set_photo_tag(photo_id, item.data(Qt.ItemDataRole.UserRole), enabled)

    @Slot()
    def _on_new_tag(self) -> None:
        name, ok = QInputDialog.getText(self, "New Tag", "Tag name:")
        if not ok:
            return
        try:
            self.library.create_tag(name)
        except ValueError as e:
            QMessageBox.warning(self, "Invalid Tag", str(e))
            return
        self.refresh()

    @Slot()
    def _on_import_files(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Import Photos", "", IMAGE_FILTER)
        if not paths:
            return
        tag_ids = self._ask_tags()
        if tag_ids is None:
            return
        failed = []
        for path in paths:
            try:
                self.library.import_photo(path, tag_ids)
            except (ValueError, OSError) as e:
                logger.warning("Import of %s failed: %s", path, e)
                failed.append(path)
        if failed:
            QMessageBox.warning(self, "Import", f"{len(failed)} file(s) could not be imported.")
        self._refresh_photos()

    @Slot()
    def _on_import_folder(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Import Folder")
        if not folder:
            return
        tag_ids = self._ask_tags()
        if tag_ids is None:
            return
        dialog = QProgressDialog("Importing photos...", "", 0, 0, self)
        dialog.setCancelButton(None)
        dialog.setWindowModality(Qt.WindowModality.WindowModal)
        dialog.show()

        def on_progress(done: int, total: int) -> None:
            dialog.setMaximum(total)
            dialog.setValue(done)
            QApplication.processEvents()

        try:
            imported = self.library.import_folder(folder, tag_ids, on_progress)
        except OSError as e:
            QMessageBox.warning(self, "Import", str(e))
            return
        finally:
            dialog.close()
        QMessageBox.information(self, "Import", f"Imported {len(imported)} photos.")
        self._refresh_photos()

    @Slot()
    def _on_delete(self) -> None:
        photo_id = self._selected_photo_id()
        if photo_id is None:
            return
        reply = QMessageBox.question(
            self, "Delete Photo", "Remove this photo from the library?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.library.delete_photo(photo_id)
            self._refresh_photos()
