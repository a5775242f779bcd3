# scenery/gui/scenery_config.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QAbstractItemView,
    QButtonGroup,
    QDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QRadioButton,
    QTableWidget,
    QVBoxLayout,
    QWidget,
)

from scenery.core.models import Variation
from scenery.gui.texts import tr
from scenery.ui.viewmodels import SceneryConfigViewModel

COL_NAME, COL_FILE, COL_GM, COL_PLAYER, COL_PREVIEW, COL_DELETE = range(6)


class ImagePreviewDialog(QDialog):
    def __init__(self, parent: Optional[QWidget], path: Path):
        super().__init__(parent)
        self.setWindowTitle(tr("preview.title"))
        self.resize(720, 540)
        self.label = QLabel()
        self.label.setAlignment(Qt.AlignCenter)
        pix = QPixmap(str(path))
        if pix.isNull():
            self.label.setText(tr("preview.unavailable"))
        else:
            self.label.setPixmap(
                pix.scaled(700, 500, Qt.KeepAspectRatio, Qt.SmoothTransformation)
            )
        close_btn = QPushButton(tr("common.close"))
        close_btn.clicked.connect(self.accept)
        layout = QVBoxLayout(self)
        layout.addWidget(self.label)
        layout.addWidget(close_btn, alignment=Qt.AlignRight)


class SceneryConfigDialog(QDialog):
    """
    Variation table of one scene. Row 0 is the default image, the last row
    is always an empty row for a new variation. Closing without saving
    discards the edits.
    """

    def __init__(
        self,
        vm: SceneryConfigViewModel,
        browser,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.vm = vm
        self.browser = browser
        self.resize(700, 420)

        self.table = QTableWidget(0, 6, self)
        self.table.setSelectionMode(QAbstractItemView.NoSelection)
        self.table.verticalHeader().setVisible(False)
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(COL_FILE, QHeaderView.Stretch)
        self.gm_group = QButtonGroup(self)
        self.pl_group = QButtonGroup(self)

        self.add_btn = QPushButton()
        self.scan_btn = QPushButton()
        self.submit_btn = QPushButton()
        btn_layout = QHBoxLayout()
        btn_layout.addWidget(self.add_btn)
        btn_layout.addWidget(self.scan_btn)
        btn_layout.addStretch()
        btn_layout.addWidget(self.submit_btn)

        layout = QVBoxLayout(self)
        layout.addWidget(self.table)
        layout.addLayout(btn_layout)

        self.add_btn.clicked.connect(self.on_add)
        self.scan_btn.clicked.connect(self.on_scan)
        self.submit_btn.clicked.connect(self.on_submit)
        self.vm.rows_changed.connect(self._on_rows_changed)
        self.vm.error.connect(self._on_error)
        self.vm.busy_changed.connect(self._on_busy)
        self.vm.submitted.connect(lambda _payload: self.accept())

        self._gm_file = self.vm.store.gm_image
        self._pl_file = self.vm.store.pl_image
        self.retranslate_ui()
        self.render_rows(self.vm.rows())

    # --- table <-> rows ---
    def render_rows(self, rows: List[Variation]):
        for group in (self.gm_group, self.pl_group):
            for btn in group.buttons():
                group.removeButton(btn)
        self.table.setRowCount(len(rows))
        for r, v in enumerate(rows):
            name_edit = QLineEdit(tr("config.default") if r == 0 else v.name)
            name_edit.setReadOnly(r == 0)
            self.table.setCellWidget(r, COL_NAME, name_edit)
            self.table.setCellWidget(r, COL_FILE, QLineEdit(v.file))

            gm_radio = QRadioButton()
            pl_radio = QRadioButton()
            self.gm_group.addButton(gm_radio, r)
            self.pl_group.addButton(pl_radio, r)
            self.table.setCellWidget(r, COL_GM, gm_radio)
            self.table.setCellWidget(r, COL_PLAYER, pl_radio)

            preview_btn = QPushButton(tr("config.preview"))
            preview_btn.clicked.connect(lambda _=False, row=r: self.preview_row(row))
            self.table.setCellWidget(r, COL_PREVIEW, preview_btn)
            delete_btn = QPushButton(tr("config.delete"))
            delete_btn.setEnabled(r != 0)
            delete_btn.clicked.connect(lambda _=False, row=r: self.on_delete(row))
            self.table.setCellWidget(r, COL_DELETE, delete_btn)

        self._check_file(self.gm_group, rows, self._gm_file)
        self._check_file(self.pl_group, rows, self._pl_file)

    @staticmethod
    def _check_file(group: QButtonGroup, rows: List[Variation], file: Optional[str]):
        row = next((i for i, v in enumerate(rows) if file and v.file == file), 0)
        group.button(row).setChecked(True)

    def _text(self, row: int, col: int) -> str:
        w = self.table.cellWidget(row, col)
        return w.text() if isinstance(w, QLineEdit) else ""

    def current_rows(self) -> List[Variation]:
        rows = []
        for r in range(self.table.rowCount()):
            name = self.vm.store.default_label if r == 0 else self._text(r, COL_NAME)
            rows.append(Variation(name=name, file=self._text(r, COL_FILE)))
        return rows

    def _remember_selection(self, rows: List[Variation]):
        gm_row = self.gm_group.checkedId()
        pl_row = self.pl_group.checkedId()
        if 0 <= gm_row < len(rows):
            self._gm_file = rows[gm_row].file
        if 0 <= pl_row < len(rows):
            self._pl_file = rows[pl_row].file

    def _capture(self):
        rows = self.current_rows()
        self._remember_selection(rows)
        self.vm.capture(rows)

    # --- actions ---
    def on_add(self):
        self._capture()
        self.vm.add_row()

    def on_delete(self, row: int):
        self._capture()
        self.vm.delete_row(row)

    def on_scan(self):
        self._capture()
        self.vm.scan()

    def on_submit(self):
        rows = self.current_rows()
        self._remember_selection(rows)
        self.vm.submit(
            rows,
            gm_row=self.gm_group.checkedId(),
            pl_row=self.pl_group.checkedId(),
        )

    def preview_row(self, row: int):
        file = self._text(row, COL_FILE)
        if not file:
            return
        ImagePreviewDialog(self, self.browser.absolute(file)).exec()

    # --- vm signals ---
    def _on_rows_changed(self, rows: List[Variation]):
        self.render_rows(rows)

    def _on_error(self, message: str):
        QMessageBox.critical(self, tr("common.error"), message)

    def _on_busy(self, busy: bool):
        self.scan_btn.setEnabled(not busy)
        self.submit_btn.setEnabled(not busy)
        self.scan_btn.setText(tr("config.scanning") if busy else tr("config.scan"))

    def retranslate_ui(self):
        self.setWindowTitle(tr("config.title"))
        self.table.setHorizontalHeaderLabels(
            [
                tr("config.col.name"),
                tr("config.col.file"),
                tr("config.col.gm"),
                tr("config.col.player"),
                tr("config.col.actions"),
                tr("config.col.actions"),
            ]
        )
        self.add_btn.setText(tr("config.add"))
        self.scan_btn.setText(tr("config.scan"))
        self.submit_btn.setText(tr("config.submit"))
