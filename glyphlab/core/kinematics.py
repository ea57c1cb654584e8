"""
GlyphLab Kinematics (The Knob Reader).
Turns one LandmarkFrame into a PinchReading: pinch flag, knob angle, and the
angular delta since the previous pinching frame.

The interpreter is stateless. The caller passes the previous PinchState in
and keeps the returned one; nothing is captured between calls.
"""
import math
from typing import Optional

from glyphlab.config import CONFIG
from glyphlab.core.types import LandmarkFrame, PinchReading, PinchState, Point2D


def wrap_angle(delta: float) -> float:
    """Folds an angular difference into (-pi, pi]."""
    return math.atan2(math.sin(delta), math.cos(delta))


class PinchInterpreter:

    def get_pinch_dist(self, frame: LandmarkFrame) -> float:
        """Euclidean distance between Thumb tip and Index tip (normalized units)."""
        thumb = frame.points[CONFIG["THUMB_TIP"]]
        index = frame.points[CONFIG["INDEX_TIP"]]
        return math.hypot(index[0] - thumb[0], index[1] - thumb[1])

    def get_knob_angle(self, frame: LandmarkFrame) -> float:
        """Direction of the thumb -> index vector, in (-pi, pi]."""
        thumb = frame.points[CONFIG["THUMB_TIP"]]
        index = frame.points[CONFIG["INDEX_TIP"]]
        return math.atan2(index[1] - thumb[1], index[0] - thumb[0])

    def get_centroid_px(self, frame: LandmarkFrame) -> Point2D:
        """Pinch midpoint scaled to the reference surface (1280x720 by default)."""
        thumb = frame.points[CONFIG["THUMB_TIP"]]
        index = frame.points[CONFIG["INDEX_TIP"]]
        return Point2D(
            (thumb[0] + index[0]) / 2 * CONFIG["SURFACE_WIDTH"],
            (thumb[1] + index[1]) / 2 * CONFIG["SURFACE_HEIGHT"],
        )

    def interpret(self, frame: LandmarkFrame, previous: Optional[PinchState] = None) -> PinchReading:
        """
        Reads one perception tick.

        Args:
            frame: The normalized landmarks for this tick.
            previous: The PinchState returned for the prior tick (None on the first).

        Returns:
            PinchReading with delta = 0 unless this tick AND the previous one pinched.
        """
        if not frame.present:
            return PinchReading(PinchState.idle(), 0.0)

        is_pinching = self.get_pinch_dist(frame) < CONFIG["PINCH_THRESHOLD"]
        angle = self.get_knob_angle(frame)

        delta = 0.0
        if is_pinching and previous is not None and previous.is_pinching:
            delta = angle - previous.angle
            if CONFIG["WRAP_AWARE_DELTA"]:
                delta = wrap_angle(delta)
            # Known issue: without WRAP_AWARE_DELTA, crossing the +-pi seam
            # reads as a ~2*pi jump.
        if not math.isfinite(delta):
            delta = 0.0

        confidence = CONFIG["CONFIDENCE_PINCHING"] if is_pinching else CONFIG["CONFIDENCE_TRACKING"]
        state = PinchState(
            is_pinching=is_pinching,
            centroid=self.get_centroid_px(frame),
            angle=angle,
            confidence=confidence,
        )
        return PinchReading(state, delta)
