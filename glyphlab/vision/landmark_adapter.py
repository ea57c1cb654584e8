"""
GlyphLab Landmark Stream Adapter.
================================

Wraps the MediaPipe Hands solution and reduces each result to one
LandmarkFrame: present or absent, 21 normalized (x, y) points.

"No hand" is the normal idle state, not a failure: it comes back as an
absent frame and never raises.
"""
import logging
from typing import Any, Optional

import numpy as np

from glyphlab.config import CONFIG
from glyphlab.core.errors import PerceptionError
from glyphlab.core.types import LandmarkFrame


class LandmarkStreamAdapter:
    """
    Attributes:
        hands: The hand model. Anything with `process(rgb)` and `close()`;
            defaults to `mediapipe.solutions.hands.Hands`.
    """
    def __init__(self, hands: Any = None):
        self.hands = hands if hands is not None else self._create_hands()

    def _create_hands(self):
        try:
            import mediapipe as mp
        except ImportError as exc:
            raise PerceptionError("❌ 'mediapipe' not found. Install it via pip.") from exc

        return mp.solutions.hands.Hands(
            max_num_hands=CONFIG["MAX_NUM_HANDS"],
            model_complexity=CONFIG["MODEL_COMPLEXITY"],
            min_detection_confidence=CONFIG["MIN_DETECTION_CONFIDENCE"],
            min_tracking_confidence=CONFIG["MIN_TRACKING_CONFIDENCE"],
        )

    @staticmethod
    def to_frame(results: Any) -> LandmarkFrame:
        """First detected hand -> LandmarkFrame. No hands -> absent."""
        hands = getattr(results, "multi_hand_landmarks", None)
        if not hands:
            return LandmarkFrame.absent()
        first = hands[0]
        return LandmarkFrame.from_landmarks(getattr(first, "landmark", first))

    def process(self, rgb_frame: Optional[np.ndarray]) -> LandmarkFrame:
        """One perception tick. Expects RGB (OpenCV frames must be converted first)."""
        if rgb_frame is None:
            return LandmarkFrame.absent()
        if self.hands is None:
            raise PerceptionError("Adapter used after close()")
        return self.to_frame(self.hands.process(rgb_frame))

    def close(self) -> None:
        """Releases the model. Safe to call twice."""
        if self.hands is None:
            return
        hands, self.hands = self.hands, None
        try:
            hands.close()
        except Exception as exc:
            logging.error(f"❌ Hand model did not close cleanly: {exc}")
            raise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
