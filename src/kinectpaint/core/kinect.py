import logging

import numpy as np
from PySide6.QtCore import QThread, Signal

logger = logging.getLogger(__name__)


class PaintWorker(QThread):
    frame_ready = Signal(np.ndarray)
    debug_ready = Signal(np.ndarray)
    status_changed = Signal(str)

    def __init__(self, pipeline, interval_ms=33):
        super().__init__()
        self.pipeline = pipeline
        self.interval_ms = interval_ms
        self.running = True
        self._last_status = None

    def run(self):
        logger.info("Paint thread started")
        while self.running:
            try:
                output = self.pipeline.step()
            except Exception:
                logger.exception("Frame processing failed")
                self.msleep(500)
                continue

            self._emit_status(self.pipeline.status)
            if output is not None:
                self.frame_ready.emit(output)
                if self.pipeline.last_debug is not None:
                    self.debug_ready.emit(self.pipeline.last_debug)
            self.msleep(self.interval_ms)
        logger.info("Paint thread stopped")

    def _emit_status(self, status):
        if status != self._last_status:
            self._last_status = status
            self.status_changed.emit(status)

    def stop(self):
        self.running = False
        self.wait()
