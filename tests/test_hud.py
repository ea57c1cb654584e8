import unittest

import numpy as np

from glyphlab.control.controller import GlyphController
from glyphlab.core.types import LandmarkFrame, Mode, ParameterVector
from glyphlab.geometry.glyph_mesh import build_glyph_mesh
from glyphlab.ui.hud import HUD


class TestHUD(unittest.TestCase):
    def setUp(self):
        self.hud = HUD()
        self.frame = np.zeros((720, 1280, 3), dtype=np.uint8)

    def test_render_overlay(self):
        ctrl = GlyphController()
        hand = LandmarkFrame.from_landmarks([(0.4 + i / 100, 0.5) for i in range(21)])
        for _ in range(5):
            ctrl.process(hand)
        self.hud.render(self.frame, ctrl.overlay_snapshot(), ctrl.state.params, hand, ctrl.message)
        self.assertGreater(self.frame.sum(), 0)

    def test_render_without_hand(self):
        ctrl = GlyphController()
        self.hud.render(self.frame, ctrl.overlay_snapshot(), ctrl.state.params,
                        LandmarkFrame.absent(), ctrl.message)
        self.assertGreater(self.frame.sum(), 0)

    def test_render_glyph(self):
        mesh = build_glyph_mesh(ParameterVector(0.5, 0.4, 0.3), Mode.NOISE)
        img = self.hud.render_glyph(mesh, elapsed=1.5, size=(320, 240))
        self.assertEqual(img.shape, (240, 320, 3))
        blank = self.hud.render_glyph(None, elapsed=0.0, size=(320, 240))
        self.assertGreater(np.abs(img.astype(int) - blank.astype(int)).sum(), 0)


if __name__ == '__main__':
    unittest.main()
