"""
GlyphLab Types.
Central definition of Data Contracts to prevent circular imports.

Everything here is immutable. The state machine hands out new values instead
of editing old ones, so any reader holding a reference holds a consistent
snapshot.
"""
import colorsys
import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from glyphlab.config import CONFIG, MODE_LABELS


def clamp_unit(value: float, fallback: float = 0.0) -> float:
    """Clamps into [0, 1]. NaN is replaced by `fallback` (itself clamped)."""
    if value is None or math.isnan(value):
        value = fallback
        if math.isnan(value):
            return 0.0
    return min(1.0, max(0.0, float(value)))


# --- GEOMETRY TYPES ---
@dataclass(frozen=True)
class Point2D:
    x: float
    y: float


# --- MODE TYPES ---
class Mode(Enum):
    SHAPE = "Shape"
    STROKE = "Stroke"
    HANDLES = "Handles"
    INTERPOLATE = "Interpolate"
    NOISE = "Noise"
    TEXTURE = "Texture"

    @classmethod
    def ordered(cls) -> Tuple["Mode", ...]:
        """Knob order, as configured by MODE_LABELS."""
        return tuple(cls(label) for label in MODE_LABELS)

    @classmethod
    def from_label(cls, raw_label: str) -> "Mode":
        if not isinstance(raw_label, str):
            raise ValueError(f"Mode label must be a string, got {raw_label!r}")
        clean = raw_label.strip().lower()
        for member in cls:
            if member.value.lower() == clean or member.name.lower() == clean:
                return member
        raise ValueError(f"Unknown mode label: {raw_label!r}")

    @property
    def index(self) -> int:
        return self.ordered().index(self)

    def advance(self, steps: int) -> "Mode":
        """Moves `steps` clicks around the knob. Negative steps turn back."""
        modes = self.ordered()
        return modes[(self.index + int(steps)) % len(modes)]


# Modes whose rotation feeds a parameter, and the field they drive.
PARAMETER_MODES: Dict[Mode, str] = {
    Mode.STROKE: "stroke",
    Mode.NOISE: "noise",
    Mode.TEXTURE: "texture",
}


# --- PERCEPTION TYPES ---
@dataclass(frozen=True)
class LandmarkFrame:
    present: bool
    points: Tuple[Tuple[float, float], ...] = ()

    @classmethod
    def absent(cls) -> "LandmarkFrame":
        return cls(present=False, points=())

    @classmethod
    def from_landmarks(cls, landmark_list: Any) -> "LandmarkFrame":
        """
        Normalizes one hand into a stable frame record.

        Accepts MediaPipe landmark objects (anything exposing `.x`/`.y`),
        (x, y) or (x, y, z) rows, or a flat list of 42/63 floats.
        Malformed input degrades to an absent frame.
        """
        if landmark_list is None:
            return cls.absent()
        items = list(landmark_list)
        if not items:
            return cls.absent()

        expected = CONFIG["LANDMARK_COUNT"]
        try:
            if hasattr(items[0], 'x'):
                coords = np.array([[lm.x, lm.y] for lm in items], dtype=np.float64)
            else:
                raw = np.asarray(items, dtype=np.float64)
                if raw.ndim == 2:
                    coords = raw[:, :2]
                elif raw.ndim == 1 and raw.size == expected * 3:
                    coords = raw.reshape(-1, 3)[:, :2]
                elif raw.ndim == 1 and raw.size == expected * 2:
                    coords = raw.reshape(-1, 2)
                else:
                    return cls.absent()
        except (TypeError, ValueError) as exc:
            logging.debug(f"Unreadable landmark payload: {exc}")
            return cls.absent()

        if coords.shape != (expected, 2) or not np.all(np.isfinite(coords)):
            return cls.absent()

        coords = np.clip(coords, 0.0, 1.0)
        return cls(present=True, points=tuple((float(x), float(y)) for x, y in coords))

    def point(self, idx: int) -> Point2D:
        x, y = self.points[idx]
        return Point2D(x, y)


@dataclass(frozen=True)
class PinchState:
    is_pinching: bool
    centroid: Optional[Point2D]
    angle: float
    confidence: float

    @classmethod
    def idle(cls) -> "PinchState":
        return cls(
            is_pinching=False,
            centroid=None,
            angle=0.0,
            confidence=CONFIG["CONFIDENCE_ABSENT"],
        )


@dataclass(frozen=True)
class PinchReading:
    """Interpreter output for one perception tick."""
    pinch: PinchState
    delta: float = 0.0


# --- KNOB STATE ---
@dataclass(frozen=True)
class RotationAccumulator:
    angle: float = 0.0
    mode: Mode = Mode.SHAPE


@dataclass(frozen=True)
class ParameterVector:
    stroke: float = 0.5
    noise: float = 0.0
    texture: float = 0.3

    @classmethod
    def defaults(cls) -> "ParameterVector":
        return cls(**CONFIG["DEFAULT_PARAMETERS"]).clamped()

    def clamped(self) -> "ParameterVector":
        return ParameterVector(
            stroke=clamp_unit(self.stroke),
            noise=clamp_unit(self.noise),
            texture=clamp_unit(self.texture),
        )

    def with_value(self, name: str, value: float) -> "ParameterVector":
        """Returns a copy with one field replaced and re-clamped."""
        if name not in ("stroke", "noise", "texture"):
            raise KeyError(name)
        return replace(self, **{name: clamp_unit(value, getattr(self, name))})

    def as_dict(self) -> Dict[str, float]:
        return {"stroke": self.stroke, "noise": self.noise, "texture": self.texture}


@dataclass(frozen=True)
class KnobState:
    """The durable state: knob position + parameter vector."""
    accumulator: RotationAccumulator = field(default_factory=RotationAccumulator)
    params: ParameterVector = field(default_factory=ParameterVector.defaults)

    @property
    def mode(self) -> Mode:
        return self.accumulator.mode

    @property
    def angle(self) -> float:
        return self.accumulator.angle


@dataclass(frozen=True)
class OverlaySnapshot:
    """Read-only view for the radial indicator and the glow trail."""
    angle: float
    mode: Mode
    confidence: float
    trail: Tuple[Point2D, ...] = ()


# --- RENDER TYPES ---
@dataclass(frozen=True)
class MaterialDescriptor:
    hue: float
    saturation: float
    lightness: float
    metalness: float
    roughness: float

    def rgb(self) -> Tuple[float, float, float]:
        """HSL -> RGB, each channel in [0, 1]."""
        return colorsys.hls_to_rgb(self.hue % 1.0, self.lightness, self.saturation)


@dataclass(frozen=True, eq=False)
class GlyphMesh:
    positions: np.ndarray   # (N, 3) float64
    normals: np.ndarray     # (N, 3) float64, unit length
    faces: np.ndarray       # (M, 3) int64 indices into positions
    material: MaterialDescriptor

    def __post_init__(self):
        # Renderer and overlay are observers; nobody writes into the buffers.
        for arr in (self.positions, self.normals, self.faces):
            arr.setflags(write=False)

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def face_count(self) -> int:
        return int(self.faces.shape[0])

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.positions.min(axis=0), self.positions.max(axis=0)
