"""
GlyphLab Glyph Mesh Generator.
=============================

Builds the "O"-like glyph: a rectangular outer contour with an elliptical
counterform, extruded and bevelled, optionally roughened by a noise field.

Construction:
1. **Rays:** Both contours are sampled on the same set of polar angles
   (uniform curve segments + the 4 rectangle corners). Outer and hole point
   `i` sit on the same ray, so a cap is a simple radial quad strip.
2. **Layers:** A stack of (z, bevel offset) slices. Front bevel, body steps,
   back bevel. The outer contour grows by the offset, the hole shrinks.
3. **Walls & Caps:** Neighbouring layers are stitched into quads; the first
   and last layer get caps.
4. **Noise:** Optional per-vertex displacement, then normals are recomputed.

`build_glyph_mesh` is pure: the same (params, mode) always gives the same
buffers.
"""
import logging
import math
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np

from glyphlab.config import CONFIG
from glyphlab.core.errors import GlyphMeshError
from glyphlab.core.types import GlyphMesh, MaterialDescriptor, Mode, ParameterVector
from glyphlab.geometry.noise import GradientNoise3D


@lru_cache(maxsize=4)
def _noise_field(seed) -> GradientNoise3D:
    return GradientNoise3D(seed)


def contour_angles(half_w: float, half_h: float, segments: int) -> np.ndarray:
    """Uniform polar samples plus the four rectangle corners, sorted in [0, 2pi)."""
    base = np.linspace(0.0, 2 * math.pi, segments, endpoint=False)
    a = math.atan2(half_h, half_w)
    corners = np.array([a, math.pi - a, math.pi + a, 2 * math.pi - a])
    return np.unique(np.concatenate([base, corners]))


def outer_ring(angles: np.ndarray, half_w: float, half_h: float, offset: float) -> np.ndarray:
    """
    Rectangle points on each ray, pushed outward by `offset`.
    Edge points move along the edge normal, corners along the diagonal, so
    the result is the rectangle grown by `offset` on every side.
    """
    cos, sin = np.cos(angles), np.sin(angles)
    with np.errstate(divide="ignore"):
        tx = np.where(np.abs(cos) > 1e-12, half_w / np.abs(cos), np.inf)
        ty = np.where(np.abs(sin) > 1e-12, half_h / np.abs(sin), np.inf)
    t = np.minimum(tx, ty)
    pts = np.stack([cos * t, sin * t], axis=1)

    on_x = np.isclose(np.abs(pts[:, 0]), half_w)
    on_y = np.isclose(np.abs(pts[:, 1]), half_h)
    normals = np.stack([
        np.where(on_x, np.sign(pts[:, 0]), 0.0),
        np.where(on_y, np.sign(pts[:, 1]), 0.0),
    ], axis=1)
    return pts + offset * normals


def hole_ring(angles: np.ndarray, radius_x: float, radius_y: float, offset: float) -> np.ndarray:
    """Ellipse points on each ray, with both radii reduced by `offset`."""
    rx, ry = radius_x - offset, radius_y - offset
    if rx <= 0 or ry <= 0:
        raise GlyphMeshError(f"Counterform collapsed: radii ({rx:.3f}, {ry:.3f})")
    cos, sin = np.cos(angles), np.sin(angles)
    r = 1.0 / np.sqrt((cos / rx) ** 2 + (sin / ry) ** 2)
    return np.stack([cos * r, sin * r], axis=1)


def extrusion_layers(depth: float, bevel_size: float, bevel_thickness: float,
                     bevel_segments: int, steps: int) -> List[Tuple[float, float]]:
    """(z, offset) per slice, front to back. Quarter-circle bevel profile."""
    if steps < 1 or bevel_segments < 0:
        raise GlyphMeshError(f"Invalid extrusion: steps={steps}, bevel_segments={bevel_segments}")
    front = []
    for b in range(bevel_segments):
        t = b / bevel_segments
        z = bevel_thickness * math.cos(t * math.pi / 2)
        front.append((-z, bevel_size * math.sin(t * math.pi / 2)))

    body = [(depth * s / steps, bevel_size) for s in range(steps + 1)]
    back = [(depth - z, bs) for z, bs in reversed(front)]
    return front + body + back


def compute_vertex_normals(positions: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Area-weighted average of adjacent face normals, unit length."""
    v0 = positions[faces[:, 0]]
    v1 = positions[faces[:, 1]]
    v2 = positions[faces[:, 2]]
    face_normals = np.cross(v1 - v0, v2 - v0)

    normals = np.zeros_like(positions)
    for k in range(3):
        np.add.at(normals, faces[:, k], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    if np.any(lengths < 1e-12):
        raise GlyphMeshError("Vertex with zero-area neighbourhood")
    return normals / lengths[:, None]


def glyph_material(params: ParameterVector) -> MaterialDescriptor:
    return MaterialDescriptor(
        hue=CONFIG["HUE_BASE"] + params.texture * CONFIG["HUE_TEXTURE_GAIN"],
        saturation=CONFIG["SATURATION"],
        lightness=CONFIG["LIGHTNESS"],
        metalness=CONFIG["METALNESS"],
        roughness=CONFIG["ROUGHNESS"],
    )


def _stitch(n: int, layer_count: int) -> np.ndarray:
    """Triangle indices for walls and caps. Layer k owns [outer ring | hole ring]."""
    i = np.arange(n)
    j = (i + 1) % n
    tris = []

    for k in range(layer_count - 1):
        a, b = k * 2 * n, (k + 1) * 2 * n
        o0, o1, p0, p1 = a + i, a + j, b + i, b + j
        tris.append(np.stack([o0, o1, p1], axis=1))
        tris.append(np.stack([o0, p1, p0], axis=1))
        # Hole wall faces the counterform, so the winding flips
        h0, h1, q0, q1 = a + n + i, a + n + j, b + n + i, b + n + j
        tris.append(np.stack([h0, q1, h1], axis=1))
        tris.append(np.stack([h0, q0, q1], axis=1))

    # Front cap (-z)
    o0, o1, h0, h1 = i, j, n + i, n + j
    tris.append(np.stack([h0, o1, o0], axis=1))
    tris.append(np.stack([h0, h1, o1], axis=1))

    # Back cap (+z)
    base = (layer_count - 1) * 2 * n
    o0, o1, h0, h1 = base + i, base + j, base + n + i, base + n + j
    tris.append(np.stack([h0, o0, o1], axis=1))
    tris.append(np.stack([h0, o1, h1], axis=1))

    return np.concatenate(tris).astype(np.int64)


def build_glyph_mesh(params: ParameterVector, mode: Mode) -> GlyphMesh:
    """
    Pure (ParameterVector, Mode) -> GlyphMesh.

    Raises:
        GlyphMeshError: if the geometry degenerates or goes non-finite.
    """
    params = params.clamped()
    depth = CONFIG["EXTRUDE_BASE_DEPTH"] + params.stroke * CONFIG["EXTRUDE_STROKE_GAIN"]
    bevel = CONFIG["BEVEL_BASE"] + params.texture * CONFIG["BEVEL_TEXTURE_GAIN"]
    half_w, half_h = CONFIG["OUTER_HALF_WIDTH"], CONFIG["OUTER_HALF_HEIGHT"]
    radius_x, radius_y = CONFIG["HOLE_RADIUS_X"], CONFIG["HOLE_RADIUS_Y"]

    angles = contour_angles(half_w, half_h, CONFIG["CURVE_SEGMENTS"])
    layers = extrusion_layers(depth, bevel, bevel, CONFIG["BEVEL_SEGMENTS"], CONFIG["EXTRUDE_STEPS"])
    n = len(angles)

    slices = []
    for z, offset in layers:
        ring = np.concatenate([
            outer_ring(angles, half_w, half_h, offset),
            hole_ring(angles, radius_x, radius_y, offset),
        ])
        slices.append(np.column_stack([ring, np.full(2 * n, z)]))
    positions = np.concatenate(slices)
    faces = _stitch(n, len(layers))

    if mode == Mode.NOISE or params.noise > CONFIG["NOISE_ACTIVE_THRESHOLD"]:
        field = _noise_field(CONFIG["NOISE_SEED"])
        sample = field.sample(positions * CONFIG["NOISE_SCALE"])
        positions = positions + (sample * params.noise * CONFIG["NOISE_AMPLITUDE"])[:, None]

    normals = compute_vertex_normals(positions, faces)

    if not (np.all(np.isfinite(positions)) and np.all(np.isfinite(normals))):
        raise GlyphMeshError("Non-finite vertex data")

    return GlyphMesh(positions=positions, normals=normals, faces=faces, material=glyph_material(params))


class GlyphMeshGenerator:
    """
    Regenerates on change, remembers the last good mesh.

    A failed build never reaches the renderer: it logs and hands back the
    previous mesh instead.
    """
    def __init__(self):
        self.last_valid: Optional[GlyphMesh] = None
        self.build_count = 0
        self._last_key = None

    def generate(self, params: ParameterVector, mode: Mode) -> Optional[GlyphMesh]:
        key = (params.clamped(), mode)
        if key == self._last_key and self.last_valid is not None:
            return self.last_valid

        try:
            with np.errstate(invalid="raise", divide="raise", over="raise"):
                mesh = build_glyph_mesh(*key)
        except (GlyphMeshError, FloatingPointError, ValueError) as exc:
            logging.warning(f"⚠️ Glyph rebuild failed ({exc}); keeping last valid mesh.")
            return self.last_valid
        except Exception as exc:
            # Out-of-range tuning values can fail anywhere in the build
            logging.error(f"❌ Glyph rebuild crashed ({type(exc).__name__}: {exc}); keeping last valid mesh.")
            return self.last_valid

        self.last_valid = mesh
        self._last_key = key
        self.build_count += 1
        return mesh

    # --- Mesh sink interface (shared with AsyncMeshBuilder) ---
    def submit(self, params: ParameterVector, mode: Mode) -> None:
        self.generate(params, mode)

    def latest(self) -> Optional[GlyphMesh]:
        return self.last_valid
