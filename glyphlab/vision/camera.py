"""
GlyphLab Camera Reader.
"""
import threading
from typing import Optional, Tuple

import cv2
import numpy as np

from glyphlab.config import CONFIG
from glyphlab.core.errors import PerceptionError


class ThreadedCamera:
    """
    Background frame grabber.

    The knob angle is read from whichever frame the main loop gets. A blocking
    `VideoCapture.read()` in that loop hands it frames queued up while the
    hand model was busy, and the knob then lags the real hand.

    A daemon thread keeps draining the device into a single slot; `read()`
    copies whatever is in the slot and never waits on the device.
    """
    def __init__(self, src: Optional[int] = None):
        src = CONFIG["CAMERA_INDEX"] if src is None else src
        self.cap = cv2.VideoCapture(src)
        if not self.cap.isOpened():
            self.cap.release()
            raise PerceptionError(f"Camera {src} could not be opened")

        try:
            self.cap.set(cv2.CAP_PROP_FPS, CONFIG["TARGET_FPS"])
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, CONFIG["FRAME_WIDTH"])
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, CONFIG["FRAME_HEIGHT"])
            ok, first = self.cap.read()
        except cv2.error as exc:
            self.cap.release()
            raise PerceptionError(f"Camera {src} failed to start: {exc}") from exc

        self._slot_lock = threading.Lock()
        self._latest: Tuple[bool, Optional[np.ndarray]] = (ok, first)
        self.running = True
        self._thread = threading.Thread(target=self._drain, name="camera", daemon=True)
        self._thread.start()

    def _drain(self):
        while self.running:
            ok, frame = self.cap.read()
            if not ok:
                # Device gone; the main loop sees `running` drop and shuts down
                self.running = False
                break
            with self._slot_lock:
                self._latest = (ok, frame)

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Copy of the newest frame (the grabber keeps overwriting the slot)."""
        with self._slot_lock:
            ok, frame = self._latest
        return ok, (frame.copy() if frame is not None else None)

    def release(self):
        """Stops the grabber thread, then frees the device."""
        self.running = False
        if self._thread.is_alive():
            self._thread.join(timeout=1.0)
        self.cap.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
