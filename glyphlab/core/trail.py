"""
GlyphLab Glow Trail.

Rolling window of recent pinch centroids for the overlay. Uses
`collections.deque` with maxlen: appending past capacity drops the oldest
point in O(1).
"""
from collections import deque
from typing import Optional, Tuple

from glyphlab.config import CONFIG
from glyphlab.core.types import Point2D


class TrailBuffer:
    def __init__(self, capacity: Optional[int] = None):
        self.capacity = CONFIG["TRAIL_CAPACITY"] if capacity is None else capacity
        self._points = deque(maxlen=self.capacity)

    def push(self, point: Point2D) -> None:
        self._points.append(point)

    def points(self) -> Tuple[Point2D, ...]:
        """Oldest first."""
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)
