"""
GlyphLab Background Mesh Builder.

Why this exists:
A mesh rebuild (noise pass + normals) can take longer than one perception
tick. If the perception loop waited for it, hand tracking would stutter.

This class runs regeneration on a daemon thread behind a single "latest"
slot. Submitting while a build is in flight overwrites whatever was waiting,
so the worker always picks up the freshest parameters (no queue).
"""
import logging
import threading
from typing import Optional, Tuple

from glyphlab.core.types import GlyphMesh, Mode, ParameterVector
from glyphlab.geometry.glyph_mesh import GlyphMeshGenerator


class AsyncMeshBuilder:
    def __init__(self, generator: Optional[GlyphMeshGenerator] = None):
        self.generator = generator or GlyphMeshGenerator()
        self._pending: Optional[Tuple[ParameterVector, Mode]] = None
        self._busy = False
        self._running = False
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "AsyncMeshBuilder":
        with self._cond:
            if self._running:
                return self
            self._running = True
        self._thread = threading.Thread(target=self._worker, name="glyph-mesh", daemon=True)
        self._thread.start()
        return self

    def submit(self, params: ParameterVector, mode: Mode) -> None:
        """Non-blocking. Replaces any request that has not started yet."""
        with self._cond:
            self._pending = (params, mode)
            self._cond.notify_all()

    def latest(self) -> Optional[GlyphMesh]:
        return self.generator.last_valid

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Blocks until nothing is pending or building. False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._pending is None and not self._busy, timeout)

    def stop(self) -> None:
        with self._cond:
            self._running = False
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _worker(self):
        """Background loop: take the latest request, build, repeat."""
        while True:
            with self._cond:
                while self._running and self._pending is None:
                    self._cond.wait()
                if not self._running:
                    return
                job, self._pending = self._pending, None
                self._busy = True
            try:
                self.generator.generate(*job)
            except Exception as exc:
                # The worker outlives a bad job; the next submit gets built
                logging.error(f"❌ Mesh worker job failed ({type(exc).__name__}: {exc})")
            finally:
                with self._cond:
                    self._busy = False
                    self._cond.notify_all()

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
