"""
GlyphLab Controller.
Acts as the central nervous system: one LandmarkFrame in, knob state, trail
and mesh updated. Exposes read-only snapshots for the HUD.
"""
from typing import Optional

from glyphlab.core.kinematics import PinchInterpreter
from glyphlab.core.state_manager import StateManager
from glyphlab.core.trail import TrailBuffer
from glyphlab.core.types import GlyphMesh, LandmarkFrame, OverlaySnapshot, ParameterVector, PinchState
from glyphlab.geometry.glyph_mesh import GlyphMeshGenerator


class GlyphController:
    def __init__(self, state: Optional[StateManager] = None, mesh_builder=None,
                 interpreter: Optional[PinchInterpreter] = None, trail: Optional[TrailBuffer] = None):
        self.state = state or StateManager()
        self.interpreter = interpreter or PinchInterpreter()
        self.trail = trail or TrailBuffer()
        # Anything with submit(params, mode) / latest()
        self.mesh_builder = mesh_builder or GlyphMeshGenerator()

        # Pinch State (Persisted for the next delta and for the HUD)
        self.last_pinch: PinchState = PinchState.idle()
        self.message = "No hands detected"

        snap = self.state.snapshot()
        self.mesh_builder.submit(snap.params, snap.mode)

    def process(self, frame: LandmarkFrame) -> PinchState:
        # 1. Interpret (previous pinch passed explicitly)
        reading = self.interpreter.interpret(frame, self.last_pinch)
        pinch = reading.pinch

        # 2. Trail (every frame a hand is visible)
        if frame.present and pinch.centroid is not None:
            self.trail.push(pinch.centroid)

        # 3. Knob transition
        changed = self.state.apply(reading)

        # 4. Regenerate only on change
        if changed:
            snap = self.state.snapshot()
            self.mesh_builder.submit(snap.params, snap.mode)

        # 5. State Update
        self.last_pinch = pinch
        if not frame.present:
            self.message = "No hands detected"
        else:
            self.message = "pinchMove" if pinch.is_pinching else "handTracking"
        return pinch

    def set_parameters(self, params: ParameterVector) -> bool:
        """Console write path. Re-clamped by the StateManager."""
        changed = self.state.override_parameters(params)
        if changed:
            snap = self.state.snapshot()
            self.mesh_builder.submit(snap.params, snap.mode)
        return changed

    def overlay_snapshot(self) -> OverlaySnapshot:
        snap = self.state.snapshot()
        return OverlaySnapshot(
            angle=snap.angle,
            mode=snap.mode,
            confidence=self.last_pinch.confidence,
            trail=self.trail.points(),
        )

    @property
    def mesh(self) -> Optional[GlyphMesh]:
        return self.mesh_builder.latest()
