import unittest

from glyphlab.config import CONFIG
from glyphlab.core.trail import TrailBuffer
from glyphlab.core.types import Point2D


class TestTrailBuffer(unittest.TestCase):
    def test_default_capacity(self):
        self.assertEqual(TrailBuffer().capacity, CONFIG["TRAIL_CAPACITY"])
        self.assertEqual(CONFIG["TRAIL_CAPACITY"], 60)

    def test_keeps_last_points_in_order(self):
        """100 pushes into a 60-slot trail -> points 40..99, oldest first."""
        trail = TrailBuffer(60)
        for i in range(100):
            trail.push(Point2D(float(i), 0.0))
        self.assertEqual(len(trail), 60)
        self.assertEqual([p.x for p in trail.points()], [float(i) for i in range(40, 100)])

    def test_under_capacity(self):
        trail = TrailBuffer(5)
        trail.push(Point2D(1.0, 2.0))
        trail.push(Point2D(3.0, 4.0))
        self.assertEqual(trail.points(), (Point2D(1.0, 2.0), Point2D(3.0, 4.0)))

    def test_zero_capacity_is_respected(self):
        trail = TrailBuffer(0)
        trail.push(Point2D(1.0, 1.0))
        self.assertEqual(trail.capacity, 0)
        self.assertEqual(len(trail), 0)

    def test_snapshot_is_detached(self):
        trail = TrailBuffer(3)
        trail.push(Point2D(0.0, 0.0))
        snap = trail.points()
        trail.push(Point2D(1.0, 1.0))
        self.assertEqual(len(snap), 1)
        self.assertEqual(len(trail), 2)


if __name__ == '__main__':
    unittest.main()
