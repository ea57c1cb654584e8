"""
GlyphLab HUD.
Draws the knob overlay, the glow trail, the hand skeleton, the parameter
panel, and a flat-shaded preview of the glyph. Reads snapshots only.
"""
import math
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from glyphlab.config import CONFIG
from glyphlab.core.types import GlyphMesh, LandmarkFrame, OverlaySnapshot, ParameterVector, Point2D

# MediaPipe hand topology (wrist = 0)
HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (17, 18), (18, 19), (19, 20),
    (0, 17),
)


def _lerp_color(a, b, t):
    return tuple(int(round(ca + (cb - ca) * t)) for ca, cb in zip(a, b))


def _rotation(ax: float, ay: float) -> np.ndarray:
    cx, sx = math.cos(ax), math.sin(ax)
    cy, sy = math.cos(ay), math.sin(ay)
    rot_x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    rot_y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    return rot_y @ rot_x


class HUD:
    def __init__(self):
        # --- THEME COLORS (BGR) ---
        self.C_CYAN = (238, 211, 34)     # Knob / trail start
        self.C_PINK = (119, 39, 219)     # Trail end
        self.C_ROSE = (182, 114, 244)    # Landmarks
        self.C_WHITE = (255, 255, 255)
        self.C_DIM = (90, 90, 90)
        self.C_DARK = (20, 20, 20)       # Backgrounds
        self.PARAM_COLORS = {
            "stroke": (249, 232, 103),   # cyan
            "noise": (249, 121, 240),    # fuchsia
            "texture": (183, 211, 110),  # emerald
        }

    def _draw_glass_panel(self, img, x, y, w, h, color, alpha=0.6):
        """Draws a semi-transparent 'Glass' background."""
        # Safety check for image bounds
        if y + h > img.shape[0] or x + w > img.shape[1] or x < 0 or y < 0:
            return

        sub_img = img[y:y + h, x:x + w]
        fill = np.full(sub_img.shape, color, dtype=np.uint8)
        img[y:y + h, x:x + w] = cv2.addWeighted(sub_img, 1 - alpha, fill, alpha, 1.0)
        cv2.rectangle(img, (x, y), (x + w, y + h), color, 1)

    def _to_frame_px(self, p: Point2D, w: int, h: int) -> Tuple[int, int]:
        """Reference-surface pixels -> this frame's pixels."""
        return (int(p.x * w / CONFIG["SURFACE_WIDTH"]), int(p.y * h / CONFIG["SURFACE_HEIGHT"]))

    def draw_skeleton(self, frame, hand: LandmarkFrame):
        if not hand.present:
            return
        h, w = frame.shape[:2]
        pts = [(int(x * w), int(y * h)) for x, y in hand.points]
        for a, b in HAND_CONNECTIONS:
            cv2.line(frame, pts[a], pts[b], self.C_CYAN, 3)
        for p in pts:
            cv2.circle(frame, p, 3, self.C_ROSE, -1)

    def draw_trail(self, frame, trail: Sequence[Point2D]):
        """Glow trail: blurred wide stroke underneath a sharp gradient stroke."""
        if len(trail) < 2:
            return
        h, w = frame.shape[:2]
        pts = [self._to_frame_px(p, w, h) for p in trail]

        glow = np.zeros_like(frame)
        n = len(pts) - 1
        for i in range(n):
            color = _lerp_color(self.C_CYAN, self.C_PINK, i / n)
            cv2.line(glow, pts[i], pts[i + 1], color, 9)
        glow = cv2.GaussianBlur(glow, (0, 0), 6)
        cv2.add(frame, glow, dst=frame)

        for i in range(n):
            color = _lerp_color(self.C_CYAN, self.C_PINK, i / n)
            cv2.line(frame, pts[i], pts[i + 1], color, 3, cv2.LINE_AA)

    def draw_knob(self, frame, overlay: OverlaySnapshot):
        """Radial indicator: progress arc + marker at the knob angle."""
        h, w = frame.shape[:2]
        size = 160
        x, y = w - size - 16, 16
        self._draw_glass_panel(frame, x, y, size, size, self.C_DARK, 0.5)

        center = (x + size // 2, y + size // 2)
        radius = int(size * 0.44)
        pct = (overlay.angle % (2 * math.pi)) / (2 * math.pi)

        cv2.circle(frame, center, radius, self.C_DIM, 8)
        if pct > 0:
            cv2.ellipse(frame, center, (radius, radius), -90, 0, pct * 360, self.C_CYAN, 8, cv2.LINE_AA)
        marker = (
            int(center[0] + radius * math.cos(overlay.angle - math.pi / 2)),
            int(center[1] + radius * math.sin(overlay.angle - math.pi / 2)),
        )
        cv2.circle(frame, marker, 5, self.C_WHITE, -1)

        cv2.putText(frame, "MODE", (center[0] - 22, center[1] - 22),
                    cv2.FONT_HERSHEY_PLAIN, 1.0, self.C_CYAN, 1)
        label = overlay.mode.value
        (tw, _), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 2)
        cv2.putText(frame, label, (center[0] - tw // 2, center[1] + 6),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, self.C_WHITE, 2)
        cv2.putText(frame, f"Confidence {round(overlay.confidence * 100)}%", (center[0] - 55, center[1] + 30),
                    cv2.FONT_HERSHEY_PLAIN, 0.9, self.C_WHITE, 1)

    def draw_parameters(self, frame, params: ParameterVector):
        h, w = frame.shape[:2]
        x, y, bar_w = 20, h - 110, 200
        self._draw_glass_panel(frame, x - 10, y - 25, bar_w + 110, 105, self.C_DARK, 0.5)
        for row, (name, value) in enumerate(params.as_dict().items()):
            by = y + row * 28
            color = self.PARAM_COLORS[name]
            cv2.putText(frame, name.capitalize(), (x, by + 10), cv2.FONT_HERSHEY_PLAIN, 1.0, self.C_WHITE, 1)
            cv2.rectangle(frame, (x + 70, by), (x + 70 + bar_w, by + 10), self.C_DIM, -1)
            cv2.rectangle(frame, (x + 70, by), (x + 70 + int(bar_w * value), by + 10), color, -1)
            cv2.putText(frame, f"{value:.2f}", (x + 80 + bar_w, by + 10), cv2.FONT_HERSHEY_PLAIN, 1.0, color, 1)

    def render(self, frame, overlay: OverlaySnapshot, params: ParameterVector,
               hand: LandmarkFrame, message: str = ""):
        self.draw_skeleton(frame, hand)
        self.draw_trail(frame, overlay.trail)
        self.draw_knob(frame, overlay)
        self.draw_parameters(frame, params)
        if message:
            self._draw_glass_panel(frame, 12, 12, 220, 30, self.C_DARK, 0.4)
            cv2.putText(frame, message, (22, 33), cv2.FONT_HERSHEY_PLAIN, 1.2, self.C_WHITE, 1)

    def render_glyph(self, mesh: Optional[GlyphMesh], elapsed: float,
                     size: Tuple[int, int] = (480, 480)) -> np.ndarray:
        """
        Flat-shaded orthographic preview (painter's algorithm).
        The glyph spins at PREVIEW_SPIN_Y / PREVIEW_SPIN_X rad/s.
        """
        w, h = size
        img = np.full((h, w, 3), (26, 15, 11), dtype=np.uint8)
        if mesh is None:
            return img

        rot = _rotation(elapsed * CONFIG["PREVIEW_SPIN_X"], elapsed * CONFIG["PREVIEW_SPIN_Y"])
        pos = mesh.positions - mesh.positions.mean(axis=0)
        p = pos @ rot.T
        vn = mesh.normals @ rot.T

        tri = p[mesh.faces]
        face_n = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        visible = face_n[:, 2] > 0

        light = np.array([0.4, 0.5, 0.77])
        light /= np.linalg.norm(light)
        shade = np.clip(vn[mesh.faces].mean(axis=1) @ light, 0.0, 1.0) * 0.75 + 0.25

        r, g, b = mesh.material.rgb()
        base = np.array([b, g, r]) * 255

        scale = min(w, h) * 0.28
        screen = np.empty(tri.shape[:2] + (2,), dtype=np.int32)
        screen[..., 0] = (tri[..., 0] * scale + w / 2).astype(np.int32)
        screen[..., 1] = (-tri[..., 1] * scale + h / 2).astype(np.int32)

        depth = tri[..., 2].mean(axis=1)
        for idx in np.argsort(depth):
            if not visible[idx]:
                continue
            color = tuple(int(c) for c in base * shade[idx])
            cv2.fillConvexPoly(img, screen[idx], color, cv2.LINE_AA)
        return img

    def draw_fps(self, frame, fps):
        cv2.putText(frame, f"{int(fps)} FPS", (frame.shape[1] - 100, frame.shape[0] - 20),
                    cv2.FONT_HERSHEY_PLAIN, 1.2, self.C_CYAN, 1)
