import unittest

import numpy as np

from glyphlab.core.errors import PerceptionError
from glyphlab.vision.landmark_adapter import LandmarkStreamAdapter
from glyphlab.vision.session import perception_session


# Mocks for the MediaPipe result structure
class MockLandmark:
    def __init__(self, x, y):
        self.x = x
        self.y = y
        self.z = 0.0


class MockHandLandmarks:
    def __init__(self, points):
        self.landmark = [MockLandmark(x, y) for x, y in points]


class MockResults:
    def __init__(self, hands=None):
        self.multi_hand_landmarks = hands


class MockHands:
    def __init__(self, results=None, fail_close=False):
        self.results = results or MockResults()
        self.closed = 0
        self.fail_close = fail_close

    def process(self, rgb):
        return self.results

    def close(self):
        self.closed += 1
        if self.fail_close:
            raise RuntimeError("model busy")


class MockCamera:
    def __init__(self, index=None):
        self.index = index
        self.released = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.released = True
        return False


class TestLandmarkStreamAdapter(unittest.TestCase):
    def test_first_hand_becomes_frame(self):
        first = MockHandLandmarks([(i / 40, 0.25) for i in range(21)])
        second = MockHandLandmarks([(0.9, 0.9)] * 21)
        adapter = LandmarkStreamAdapter(MockHands(MockResults([first, second])))
        frame = adapter.process(np.zeros((4, 4, 3), dtype=np.uint8))
        self.assertTrue(frame.present)
        self.assertAlmostEqual(frame.point(8).x, 0.2)

    def test_no_hand_is_absent(self):
        adapter = LandmarkStreamAdapter(MockHands())
        self.assertFalse(adapter.process(np.zeros((4, 4, 3), dtype=np.uint8)).present)
        self.assertFalse(adapter.process(None).present)
        self.assertFalse(LandmarkStreamAdapter.to_frame(MockResults([])).present)

    def test_close_is_idempotent(self):
        hands = MockHands()
        adapter = LandmarkStreamAdapter(hands)
        adapter.close()
        adapter.close()
        self.assertEqual(hands.closed, 1)
        with self.assertRaises(PerceptionError):
            adapter.process(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_close_failure_propagates(self):
        adapter = LandmarkStreamAdapter(MockHands(fail_close=True))
        with self.assertLogs(level="ERROR"):
            with self.assertRaises(RuntimeError):
                adapter.close()


class TestPerceptionSession(unittest.TestCase):
    def setUp(self):
        self.cameras = []
        self.hands = MockHands()

    def camera_factory(self, index):
        cam = MockCamera(index)
        self.cameras.append(cam)
        return cam

    def adapter_factory(self):
        return LandmarkStreamAdapter(self.hands)

    def test_released_on_normal_exit(self):
        with perception_session(3, self.camera_factory, self.adapter_factory) as (cam, adapter):
            self.assertEqual(cam.index, 3)
            self.assertIsInstance(adapter, LandmarkStreamAdapter)
        self.assertTrue(self.cameras[0].released)
        self.assertEqual(self.hands.closed, 1)

    def test_released_on_error_in_body(self):
        with self.assertRaises(KeyError):
            with perception_session(0, self.camera_factory, self.adapter_factory):
                raise KeyError("boom")
        self.assertTrue(self.cameras[0].released)
        self.assertEqual(self.hands.closed, 1)

    def test_camera_released_when_model_fails_to_load(self):
        def broken_adapter():
            raise PerceptionError("model missing")

        with self.assertRaises(PerceptionError):
            with perception_session(0, self.camera_factory, broken_adapter):
                self.fail("body must not run")
        self.assertTrue(self.cameras[0].released)


if __name__ == '__main__':
    unittest.main()
