import math
import unittest

import numpy as np

from glyphlab.config import CONFIG
from glyphlab.core.errors import GlyphMeshError
from glyphlab.core.types import Mode, ParameterVector
from glyphlab.geometry.glyph_mesh import (
    GlyphMeshGenerator,
    build_glyph_mesh,
    contour_angles,
    extrusion_layers,
)

DEFAULTS = ParameterVector(0.5, 0.0, 0.3)
N = 68                 # 64 curve segments + 4 corners
LAYERS = 8 + 3 + 8     # front bevel + body + back bevel


class TestGlyphGeometry(unittest.TestCase):
    def setUp(self):
        self._saved = dict(CONFIG)

    def tearDown(self):
        CONFIG.clear()
        CONFIG.update(self._saved)

    def test_contour_angles_include_corners(self):
        angles = contour_angles(1.0, 1.4, 64)
        self.assertEqual(len(angles), N)
        self.assertTrue(np.all(np.diff(angles) > 0))
        self.assertTrue(np.any(np.isclose(angles, math.atan2(1.4, 1.0))))

    def test_layer_profile(self):
        layers = extrusion_layers(0.5, 0.1, 0.1, 8, 2)
        self.assertEqual(len(layers), LAYERS)
        self.assertAlmostEqual(layers[0][0], -0.1)
        self.assertAlmostEqual(layers[0][1], 0.0)
        self.assertAlmostEqual(layers[-1][0], 0.6)
        self.assertEqual([z for z, _ in layers[8:11]], [0.0, 0.25, 0.5])
        self.assertTrue(all(off == 0.1 for _, off in layers[8:11]))

    def test_layer_profile_rejects_zero_steps(self):
        with self.assertRaises(GlyphMeshError):
            extrusion_layers(0.5, 0.1, 0.1, 8, 0)

    def test_counts(self):
        mesh = build_glyph_mesh(DEFAULTS, Mode.SHAPE)
        self.assertEqual(mesh.vertex_count, LAYERS * 2 * N)
        self.assertEqual(mesh.face_count, 76 * N)
        self.assertEqual(mesh.normals.shape, mesh.positions.shape)
        self.assertEqual(mesh.faces.max(), mesh.vertex_count - 1)

    def test_extent_follows_stroke_and_texture(self):
        """Defaults: depth 0.5, bevel 0.092 -> z in [-0.092, 0.592], x up to 1.092."""
        lo, hi = build_glyph_mesh(DEFAULTS, Mode.SHAPE).bounds()
        self.assertAlmostEqual(lo[2], -0.092)
        self.assertAlmostEqual(hi[2], 0.592)
        self.assertAlmostEqual(hi[0], 1.092)
        self.assertAlmostEqual(hi[1], 1.492)

        deeper = build_glyph_mesh(ParameterVector(1.0, 0.0, 0.3), Mode.SHAPE)
        self.assertAlmostEqual(deeper.bounds()[1][2], 0.6 + 0.092)

    def test_deterministic(self):
        for params in (DEFAULTS, ParameterVector(0.2, 0.8, 0.6)):
            a = build_glyph_mesh(params, Mode.SHAPE)
            b = build_glyph_mesh(params, Mode.SHAPE)
            np.testing.assert_array_equal(a.positions, b.positions)
            np.testing.assert_array_equal(a.normals, b.normals)
            np.testing.assert_array_equal(a.faces, b.faces)

    def test_noise_gate(self):
        flat = build_glyph_mesh(DEFAULTS, Mode.SHAPE)
        below = build_glyph_mesh(ParameterVector(0.5, 0.005, 0.3), Mode.SHAPE)
        np.testing.assert_array_equal(flat.positions, below.positions)

        # Noise mode with zero amplitude adds nothing either
        zero = build_glyph_mesh(DEFAULTS, Mode.NOISE)
        np.testing.assert_allclose(flat.positions, zero.positions)

    def test_noise_displaces_vertices(self):
        flat = build_glyph_mesh(ParameterVector(0.5, 0.0, 0.3), Mode.SHAPE)
        rough = build_glyph_mesh(ParameterVector(0.5, 1.0, 0.3), Mode.SHAPE)
        shift = rough.positions - flat.positions
        self.assertGreater(np.abs(shift).max(), 1e-3)
        self.assertLessEqual(np.abs(shift).max(), 1.5 * CONFIG["NOISE_AMPLITUDE"])
        # Same scalar on every axis
        np.testing.assert_allclose(shift[:, 0], shift[:, 1])
        np.testing.assert_allclose(shift[:, 1], shift[:, 2])

    def test_normals_are_unit_length(self):
        mesh = build_glyph_mesh(ParameterVector(0.3, 0.7, 0.9), Mode.NOISE)
        np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)

    def test_normals_face_outward(self):
        mesh = build_glyph_mesh(DEFAULTS, Mode.SHAPE)
        # First body layer, outer ring, ray at angle 0
        self.assertGreater(mesh.normals[8 * 2 * N][0], 0.9)
        # Middle body layer, hole ring, ray at angle 0
        self.assertLess(mesh.normals[9 * 2 * N + N][0], -0.9)
        # Front cap faces -z
        self.assertLess(mesh.normals[0][2], -0.5)
        # Back cap faces +z
        self.assertGreater(mesh.normals[(LAYERS - 1) * 2 * N][2], 0.5)

    def test_material_hue_follows_texture(self):
        self.assertAlmostEqual(build_glyph_mesh(DEFAULTS, Mode.SHAPE).material.hue, 0.61)
        self.assertAlmostEqual(build_glyph_mesh(ParameterVector(0.5, 0.0, 1.0), Mode.SHAPE).material.hue, 0.68)

    def test_buffers_are_read_only(self):
        mesh = build_glyph_mesh(DEFAULTS, Mode.SHAPE)
        with self.assertRaises(ValueError):
            mesh.positions[0, 0] = 5.0
        with self.assertRaises(ValueError):
            mesh.faces[0, 0] = 1


class TestGlyphMeshGenerator(unittest.TestCase):
    def setUp(self):
        self._saved = dict(CONFIG)
        self.gen = GlyphMeshGenerator()

    def tearDown(self):
        CONFIG.clear()
        CONFIG.update(self._saved)

    def test_memoized_on_unchanged_inputs(self):
        first = self.gen.generate(DEFAULTS, Mode.SHAPE)
        again = self.gen.generate(DEFAULTS, Mode.SHAPE)
        self.assertIs(first, again)
        self.assertEqual(self.gen.build_count, 1)
        self.gen.generate(DEFAULTS, Mode.STROKE)
        self.assertEqual(self.gen.build_count, 2)

    def test_failure_keeps_last_valid(self):
        good = self.gen.generate(DEFAULTS, Mode.SHAPE)
        CONFIG["HOLE_RADIUS_X"] = 0.05  # smaller than the bevel offset
        with self.assertLogs(level="WARNING") as logs:
            result = self.gen.generate(ParameterVector(0.6, 0.0, 0.3), Mode.SHAPE)
        self.assertIs(result, good)
        self.assertIs(self.gen.latest(), good)
        self.assertIn("keeping last valid mesh", logs.output[0])

    def test_first_failure_returns_none(self):
        CONFIG["HOLE_RADIUS_X"] = 0.05
        with self.assertLogs(level="WARNING"):
            self.assertIsNone(self.gen.generate(DEFAULTS, Mode.SHAPE))
        self.assertEqual(self.gen.build_count, 0)

    def test_bad_step_count_keeps_last_valid(self):
        good = self.gen.generate(DEFAULTS, Mode.SHAPE)
        CONFIG["EXTRUDE_STEPS"] = 0
        with self.assertLogs(level="WARNING"):
            result = self.gen.generate(ParameterVector(0.7, 0.0, 0.3), Mode.SHAPE)
        self.assertIs(result, good)

    def test_unexpected_error_keeps_last_valid(self):
        """Anything raised mid-build is logged, never propagated."""
        good = self.gen.generate(DEFAULTS, Mode.SHAPE)
        CONFIG["CURVE_SEGMENTS"] = "many"
        with self.assertLogs(level="ERROR") as logs:
            result = self.gen.generate(ParameterVector(0.7, 0.0, 0.3), Mode.SHAPE)
        self.assertIs(result, good)
        self.assertIn("keeping last valid mesh", logs.output[0])

    def test_submit_is_synchronous(self):
        self.gen.submit(DEFAULTS, Mode.SHAPE)
        self.assertIsNotNone(self.gen.latest())


if __name__ == '__main__':
    unittest.main()
