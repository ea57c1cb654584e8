"""
GlyphLab State Management.
The knob is a pure transition: previous KnobState + PinchReading -> next
KnobState. StateManager is the single writer that owns the current value;
every reader gets a frozen snapshot.
"""
import math
import threading
from typing import Optional, Tuple

from glyphlab.config import CONFIG
from glyphlab.core.types import (
    PARAMETER_MODES,
    KnobState,
    Mode,
    ParameterVector,
    PinchReading,
    RotationAccumulator,
)


def rotate_accumulator(acc: RotationAccumulator, delta: float) -> Tuple[RotationAccumulator, int]:
    """
    Adds `delta` to the knob and resolves mode clicks.

    Returns the new accumulator and the number of clicks taken (may be
    negative, may exceed 1 on a fast turn).
    """
    step = CONFIG["MODE_STEP_ANGLE"]
    new_angle = acc.angle + delta

    if abs(new_angle) >= step:
        steps = math.floor(new_angle / step)
        return RotationAccumulator(new_angle - steps * step, acc.mode.advance(steps)), steps

    return RotationAccumulator(new_angle, acc.mode), 0


def apply_parameter_delta(params: ParameterVector, mode: Mode, delta: float) -> ParameterVector:
    """Stroke/Noise/Texture take the delta; every other mode leaves params alone."""
    name = PARAMETER_MODES.get(mode)
    if name is None:
        return params
    return params.with_value(name, getattr(params, name) + delta)


def advance_knob(state: KnobState, reading: PinchReading) -> KnobState:
    """One perception tick of the knob. Frozen while not pinching."""
    if not reading.pinch.is_pinching:
        return state

    delta = reading.delta if math.isfinite(reading.delta) else 0.0
    acc, _ = rotate_accumulator(state.accumulator, delta)
    params = apply_parameter_delta(state.params, acc.mode, delta)
    return KnobState(accumulator=acc, params=params)


def initial_state() -> KnobState:
    return KnobState(
        accumulator=RotationAccumulator(0.0, Mode.from_label(CONFIG["DEFAULT_MODE"])),
        params=ParameterVector.defaults(),
    )


class StateManager:
    def __init__(self, state: Optional[KnobState] = None):
        self._state = state if state is not None else initial_state()
        self._lock = threading.Lock()

    def snapshot(self) -> KnobState:
        """Copy-on-read. KnobState is frozen, so the reference is the copy."""
        with self._lock:
            return self._state

    @property
    def mode(self) -> Mode:
        return self.snapshot().mode

    @property
    def params(self) -> ParameterVector:
        return self.snapshot().params

    def apply(self, reading: PinchReading) -> bool:
        """Runs one transition. Returns True if mode or params changed."""
        with self._lock:
            prev = self._state
            nxt = advance_knob(prev, reading)
            self._state = nxt
        return nxt.mode != prev.mode or nxt.params != prev.params

    def override_parameters(self, params: ParameterVector) -> bool:
        """External write path (console). Values are re-clamped before storing."""
        clean = params.clamped()
        with self._lock:
            prev = self._state
            self._state = KnobState(accumulator=prev.accumulator, params=clean)
        return clean != prev.params
