# scenery/ui/viewmodels.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import QObject, QThreadPool, QTimer, Signal, Slot

from scenery.core.models import Scene, ValidationError, Variation
from scenery.core.ports import Scheduler
from scenery.gui.texts import tr
from scenery.ui.workers import ScanRunnable

logger = logging.getLogger(__name__)


def qt_scheduler(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


class SceneryConfigViewModel(QObject):
    """
    Editing session of one scene's variations, bound to the config dialog.

    Row numbers are display rows: row 0 is the background, the last row is
    the empty placeholder.

    Signals:
      - rows_changed(list)  -> rows to render (list of Variation)
      - error(str)          -> message to show the editor
      - busy_changed(bool)  -> a scan is running
      - submitted(dict)     -> scene update payload after a successful save
    """

    rows_changed = Signal(object)
    error = Signal(str)
    busy_changed = Signal(bool)
    submitted = Signal(object)

    def __init__(
        self, service, scene: Scene, thread_pool: Optional[QThreadPool] = None
    ):
        super().__init__()
        self.service = service
        self.scene = scene
        self.store = service.open_editor(scene)
        self._pool = thread_pool
        self._scan: Optional[ScanRunnable] = None

    def rows(self) -> List[Variation]:
        return self.store.list_for_display()

    def capture(self, rows: List[Any]) -> None:
        """Take the rows as currently edited in the form."""
        self.store.sync_from_display(rows)

    def _emit_rows(self):
        self.rows_changed.emit(self.rows())

    @Slot()
    def add_row(self):
        self.store.add_variation()
        self._emit_rows()

    @Slot(int)
    def delete_row(self, row: int):
        if row <= 0:
            return
        if self.store.remove_variation(row - 1) is not None:
            self._emit_rows()

    # --- scan ---
    @property
    def scanning(self) -> bool:
        return self._scan is not None

    def scan(self, wait: bool = False):
        """Look for variations next to the background image."""
        if self._scan is not None:
            return
        base = self.store.background or ""
        if not base:
            self.error.emit(tr("config.no_default_file"))
            return
        runnable = ScanRunnable(self.service, base)
        runnable.signals.result.connect(self.apply_scan_result)
        runnable.signals.error.connect(self._on_scan_error)
        runnable.signals.finished.connect(self._on_scan_finished)
        self._scan = runnable
        self.busy_changed.emit(True)
        if wait:
            runnable.run()
            return
        if self._pool is None:
            self._pool = QThreadPool.globalInstance()
        self._pool.start(runnable)

    @Slot(object)
    def apply_scan_result(self, candidates: List[Variation]):
        added = self.service.add_candidates(self.store, candidates)
        logger.info("scan added %d variations", len(added))
        if added:
            self._emit_rows()

    @Slot(object)
    def _on_scan_error(self, payload):
        exc, tb = payload
        logger.warning("scan failed: %s\n%s", exc, tb)
        self.error.emit(str(exc))

    @Slot()
    def _on_scan_finished(self):
        self._scan = None
        self.busy_changed.emit(False)

    # --- submit ---
    def submit(
        self,
        rows: Optional[List[Any]] = None,
        gm_row: Any = 0,
        pl_row: Any = None,
    ) -> bool:
        try:
            data = self.service.submit(
                self.scene,
                self.store,
                form_input=rows,
                selected_gm_index=gm_row,
                selected_pl_index=pl_row,
            )
        except ValidationError as exc:
            self.error.emit(str(exc))
            return False
        except OSError as exc:
            logger.warning("saving scene %s failed: %s", self.scene.name, exc)
            self.error.emit(str(exc))
            return False
        self.submitted.emit(self.service.update_payload(data))
        return True


class ViewerViewModel(QObject):
    """
    One viewer session of a scene. Acts as the SceneCanvas of its resolver:
    apply_image only records the image, force_redraw asks the view to draw it.

    Signals:
      - redraw_requested(str) -> path of the image to draw
    """

    redraw_requested = Signal(str)

    def __init__(
        self,
        service,
        scene: Scene,
        is_privileged: bool,
        scheduler: Optional[Scheduler] = qt_scheduler,
    ):
        super().__init__()
        self.service = service
        self.scene = scene
        self.is_privileged = is_privileged
        self.image = scene.img
        self.resolver = service.make_resolver(self, scheduler=scheduler)

    # SceneCanvas
    def apply_image(self, path: str) -> None:
        self.image = path

    def force_redraw(self) -> None:
        self.redraw_requested.emit(self.image)

    def start(self) -> str:
        self.service.start_viewer(self.scene, self.resolver, self.is_privileged)
        return self.image

    @Slot(object)
    def on_scene_updated(self, changes: Dict[str, Any]):
        self.resolver.on_scene_updated(changes, self.is_privileged)
