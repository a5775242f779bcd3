# scenery/gui/scene_view.py
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QPainter, QPixmap
from PySide6.QtWidgets import (
    QGraphicsPixmapItem,
    QGraphicsScene,
    QGraphicsView,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from scenery.gui.scenery_config import SceneryConfigDialog
from scenery.gui.texts import tr
from scenery.ui.viewmodels import SceneryConfigViewModel, ViewerViewModel


class SceneView(QGraphicsView):
    """
    QGraphicsView holding the background pixmap of the scene.
    draw(path) always reloads: a redraw is requested precisely because the
    image may have changed on disk or under the same name.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setDragMode(QGraphicsView.ScrollHandDrag)
        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)
        self._pix_item: Optional[QGraphicsPixmapItem] = None
        self.current_path: Optional[str] = None
        self.draw_count = 0

    def draw(self, path: Optional[str]):
        self.draw_count += 1
        self._scene.clear()
        self._pix_item = None
        self.current_path = path
        if not path:
            return
        pix = QPixmap(path)
        if pix.isNull():
            return
        item = QGraphicsPixmapItem(pix)
        item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)
        self._scene.addItem(item)
        self._pix_item = item
        self.fitInView(item, Qt.AspectRatioMode.KeepAspectRatio)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self._pix_item is not None:
            self.fitInView(self._pix_item, Qt.AspectRatioMode.KeepAspectRatio)


class SceneWindow(QWidget):
    """Viewer window of one scene, for either role."""

    # scene update payloads, as saved by the config dialog of this window
    scene_updated = Signal(object)

    def __init__(self, service, scene, is_privileged: bool, scheduler=None):
        super().__init__()
        self.service = service
        self.scene = scene
        kwargs = {} if scheduler is None else {"scheduler": scheduler}
        self.vm = ViewerViewModel(service, scene, is_privileged, **kwargs)
        self._config_dialog: Optional[SceneryConfigDialog] = None
        self.resize(1000, 700)

        layout = QVBoxLayout(self)
        top = QHBoxLayout()
        self.role_label = QLabel()
        self.configure_btn = QPushButton()
        self.configure_btn.setEnabled(is_privileged)
        top.addWidget(self.role_label)
        top.addStretch()
        top.addWidget(self.configure_btn)
        layout.addLayout(top)
        self.view = SceneView(self)
        layout.addWidget(self.view)

        self.vm.redraw_requested.connect(self._on_redraw)
        self.scene_updated.connect(self.vm.on_scene_updated)
        self.configure_btn.clicked.connect(self.open_config)

        self.retranslate_ui()
        # initial render pass
        self._on_redraw(self.vm.start())

    def _on_redraw(self, path: str):
        self.view.draw(str(self.service.browser.absolute(path)) if path else None)

    def open_config(self):
        if not self.vm.is_privileged:
            return
        vm = SceneryConfigViewModel(self.service, self.scene)
        vm.submitted.connect(self.scene_updated)
        dlg = SceneryConfigDialog(vm, self.service.browser, parent=self)
        self._config_dialog = dlg
        dlg.finished.connect(self._on_config_closed)
        dlg.show()
        return dlg

    def _on_config_closed(self, _result=None):
        self._config_dialog = None

    def retranslate_ui(self):
        role = tr("viewer.role.gm") if self.vm.is_privileged else tr("viewer.role.player")
        self.setWindowTitle(tr("viewer.title", scene=self.scene.name, role=role))
        self.role_label.setText(role)
        self.configure_btn.setText(tr("viewer.configure"))
