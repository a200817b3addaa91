"""
Planner — build, edit and start session plans.

The editor table works on grouped rows (tag, duration, count) so that
"10 x Figure 30s" is one row; PlanService expands them when saving.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QListWidget,
    QListWidgetItem, QLineEdit, QTableWidget, QComboBox, QSpinBox,
    QHeaderView, QMessageBox, QGroupBox,
)

from drawing_trainer.data.models import SessionPlan
from drawing_trainer.services.library_service import LibraryService
from drawing_trainer.services.plan_service import PlanService
from drawing_trainer.ui.formatting import format_duration

logger = logging.getLogger(__name__)


class PlannerWidget(QWidget):
    """Plan list on the left, plan editor on the right."""

    start_requested = Signal(object)  # SessionPlan

    def __init__(self, plans: PlanService, library: LibraryService,
                 parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.plans = plans
        self.library = library
        self._editing_id: Optional[int] = None
        self._running = False
        self._setup_ui()
        self.refresh()

    def _setup_ui(self) -> None:
        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        # ── Plan list ───────────────────────────────────────────────────
        left = QVBoxLayout()
        title = QLabel("Plans")
        title.setObjectName("title")
        left.addWidget(title)

        self.plan_list = QListWidget()
        self.plan_list.currentItemChanged.connect(self._on_plan_selected)
        left.addWidget(self.plan_list)

        list_btns = QHBoxLayout()
        btn_new = QPushButton("New")
        btn_new.clicked.connect(self._on_new)
        list_btns.addWidget(btn_new)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.setObjectName("danger")
        self.btn_delete.clicked.connect(self._on_delete)
        list_btns.addWidget(self.btn_delete)
        left.addLayout(list_btns)
        layout.addLayout(left, stretch=1)

        # ── Editor ──────────────────────────────────────────────────────
        editor = QGroupBox("Plan")
        ed_layout = QVBoxLayout(editor)

        self.name_input = QLineEdit()
        self.name_input.setPlaceholderText("Plan name...")
        ed_layout.addWidget(self.name_input)

        self.table = QTableWidget(0, 3)
        self.table.setHorizontalHeaderLabels(["Tag", "Seconds", "Count"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.verticalHeader().setVisible(False)
        ed_layout.addWidget(self.table)

        row_btns = QHBoxLayout()
        btn_add = QPushButton("Add Row")
        btn_add.clicked.connect(lambda: self._add_row())
        row_btns.addWidget(btn_add)
        btn_remove = QPushButton("Remove Row")
        btn_remove.clicked.connect(self._on_remove_row)
        row_btns.addWidget(btn_remove)
        row_btns.addStretch()
        self.total_label = QLabel("")
        self.total_label.setObjectName("subtitle")
        row_btns.addWidget(self.total_label)
        ed_layout.addLayout(row_btns)

        action_btns = QHBoxLayout()
        self.btn_save = QPushButton("Save Plan")
        self.btn_save.clicked.connect(lambda: self._on_save())
        action_btns.addWidget(self.btn_save)
        self.btn_start = QPushButton("Start Session")
        self.btn_start.setObjectName("primary")
        self.btn_start.setMinimumHeight(40)
        self.btn_start.clicked.connect(self._on_start)
        action_btns.addWidget(self.btn_start)
        ed_layout.addLayout(action_btns)

        layout.addWidget(editor, stretch=2)

    # ── Data ────────────────────────────────────────────────────────────

    def refresh(self, select_id: Optional[int] = None) -> None:
        self.plan_list.blockSignals(True)
        self.plan_list.clear()
        for plan in self.plans.list_plans():
            total = format_duration(plan.total_seconds) or "0s"
            item = QListWidgetItem(f"{plan.name}  ({len(plan.exercises)} x, {total})")
            item.setData(Qt.ItemDataRole.UserRole, plan.id)
            self.plan_list.addItem(item)
            if plan.id == select_id:
                self.plan_list.setCurrentItem(item)
        self.plan_list.blockSignals(False)
        if select_id is None:
            self._load_plan(None)
        self._update_buttons()

    def _load_plan(self, plan: Optional[SessionPlan]) -> None:
        self._editing_id = plan.id if plan else None
        self.name_input.setText(plan.name if plan else "")
        self.table.setRowCount(0)
        if plan:
            for ex, count in PlanService.group_exercises(plan.exercises):
                self._add_row(ex.tag_id, ex.duration_seconds, count)
        self._update_total()
        self._update_buttons()

    def _add_row(self, tag_id: Optional[int] = None, seconds: int = 60, count: int = 1) -> None:
        row = self.table.rowCount()
        self.table.insertRow(row)

        tag_combo = QComboBox()
        for tag in self.library.list_tags():
            tag_combo.addItem(tag.name, tag.id)
        if tag_id is not None:
            idx = tag_combo.findData(tag_id)
            if idx >= 0:
                tag_combo.setCurrentIndex(idx)
        self.table.setCellWidget(row, 0, tag_combo)

        sec_spin = QSpinBox()
        sec_spin.setRange(0, 3600)
        sec_spin.setSingleStep(15)
        sec_spin.setValue(seconds)
        sec_spin.valueChanged.connect(self._update_total)
        self.table.setCellWidget(row, 1, sec_spin)

        count_spin = QSpinBox()
        count_spin.setRange(1, 100)
        count_spin.setValue(count)
        count_spin.valueChanged.connect(self._update_total)
        self.table.setCellWidget(row, 2, count_spin)

        self._update_total()

    def _editor_groups(self) -> List[Tuple[int, int, int]]:
        groups = []
        for row in range(self.table.rowCount()):
            tag_id = self.table.cellWidget(row, 0).currentData()
            seconds = self.table.cellWidget(row, 1).value()
            count = self.table.cellWidget(row, 2).value()
            if tag_id is not None:
                groups.append((tag_id, seconds, count))
        return groups

    # ── Slots ───────────────────────────────────────────────────────────

    def _update_total(self, *_args) -> None:
        total = sum(sec * count for _, sec, count in self._editor_groups())
        self.total_label.setText(f"Total: {format_duration(total) or '0s'}")

    def _on_plan_selected(self, current: Optional[QListWidgetItem], _previous=None) -> None:
        if current is None:
            return
        self._load_plan(self.plans.get_plan(current.data(Qt.ItemDataRole.UserRole)))

    @Slot()
    def _on_new(self) -> None:
        self.plan_list.blockSignals(True)
        self.plan_list.setCurrentRow(-1)
        self.plan_list.blockSignals(False)
        self._load_plan(None)
        self._add_row()

    @Slot()
    def _on_remove_row(self) -> None:
        row = self.table.currentRow()
        if row < 0:
            row = self.table.rowCount() - 1
        if row >= 0:
            self.table.removeRow(row)
            self._update_total()

    def _on_save(self) -> Optional[SessionPlan]:
        exercises = PlanService.expand_groups(self._editor_groups())
        try:
            if self._editing_id is None:
                plan = self.plans.create_plan(self.name_input.text(), exercises)
            else:
                plan = self.plans.update_plan(self._editing_id, self.name_input.text(), exercises)
        except ValueError as e:
            QMessageBox.warning(self, "Invalid Plan", str(e))
            return None
        if plan is None:
            QMessageBox.warning(self, "Missing Plan", "That plan no longer exists.")
            self.refresh()
            return None
        self.refresh(select_id=plan.id)
        return plan

    @Slot()
    def _on_delete(self) -> None:
        if self._editing_id is None or self._running:
            return
        reply = QMessageBox.question(
            self, "Delete Plan",
            "Delete this plan? Past sessions stay in your history.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.plans.delete_plan(self._editing_id)
            self.refresh()

    @Slot()
    def _on_start(self) -> None:
        plan = self._on_save()
        if plan is not None:
            self.start_requested.emit(plan)

    def set_session_running(self, running: bool) -> None:
        """Lock plan edits while a run still points at the current exercise rows."""
        self._running = running
        self.btn_start.setEnabled(not running)
        self.btn_save.setEnabled(not running)
        self._update_buttons()

    def _update_buttons(self) -> None:
        self.btn_delete.setEnabled(self._editing_id is not None and not self._running)
