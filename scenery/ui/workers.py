# scenery/ui/workers.py
from __future__ import annotations

import traceback

from PySide6.QtCore import QObject, QRunnable, Signal


# Worker signals for generic tasks
class WorkerSignals(QObject):
    """
    Common signals available from worker runnables.
    - finished() always emitted on completion (no args)
    - error(tuple) emitted on exception: (exc, traceback_str)
    - result(object) emitted with task-specific result
    """

    finished = Signal()
    error = Signal(object)
    result = Signal(object)


class ScanRunnable(QRunnable):
    """
    Runnable to list the directory of the default image in a background
    thread. Emits the matching Variation list on `result`; the store is left
    to the receiver on the UI thread.
    """

    def __init__(self, service, base_path: str):
        super().__init__()
        self.signals = WorkerSignals()
        self.service = service
        self.base_path = base_path

    def run(self):
        try:
            candidates = self.service.find_candidates(self.base_path)
            self.signals.result.emit(candidates)
        except Exception as exc:
            tb = traceback.format_exc()
            self.signals.error.emit((exc, tb))
        finally:
            self.signals.finished.emit()
