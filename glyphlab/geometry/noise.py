"""
GlyphLab Noise Field.

Seeded 3-D gradient noise (Perlin "improved" construction), vectorized over
whole vertex buffers. A fixed seed gives the same field on every run, which
is what keeps mesh regeneration reproducible.

Values are roughly in [-1, 1] and exactly 0 on integer lattice points.
"""
import zlib
from itertools import product
from typing import Union

import numpy as np

# 12 cube-edge gradients
_GRADIENTS = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)


def seed_to_int(seed: Union[int, str]) -> int:
    """String seeds hash through CRC32 so 'glyph' is stable across processes."""
    if isinstance(seed, str):
        return zlib.crc32(seed.encode("utf-8"))
    return int(seed)


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6 - 15) + 10)


class GradientNoise3D:
    def __init__(self, seed: Union[int, str] = 0):
        self.seed = seed
        perm = np.random.default_rng(seed_to_int(seed)).permutation(256)
        # Doubled so corner hashing never needs a modulo
        self._perm = np.concatenate([perm, perm])

    def sample(self, points) -> np.ndarray:
        """
        Evaluates the field.

        Args:
            points: (N, 3) array-like of noise-space coordinates.

        Returns:
            (N,) float64 array.
        """
        p = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        cell = np.floor(p)
        frac = p - cell
        ci = cell.astype(np.int64) & 255
        u = _fade(frac)

        X, Y, Z = ci[:, 0], ci[:, 1], ci[:, 2]
        perm = self._perm
        corners = {}
        for dx, dy, dz in product((0, 1), repeat=3):
            h = perm[perm[perm[X + dx] + Y + dy] + Z + dz]
            grad = _GRADIENTS[h % 12]
            offset = frac - np.array([dx, dy, dz], dtype=np.float64)
            corners[(dx, dy, dz)] = np.einsum("ij,ij->i", grad, offset)

        # Trilinear blend, x then y then z
        ux, uy, uz = u[:, 0], u[:, 1], u[:, 2]
        x00 = corners[(0, 0, 0)] + ux * (corners[(1, 0, 0)] - corners[(0, 0, 0)])
        x10 = corners[(0, 1, 0)] + ux * (corners[(1, 1, 0)] - corners[(0, 1, 0)])
        x01 = corners[(0, 0, 1)] + ux * (corners[(1, 0, 1)] - corners[(0, 0, 1)])
        x11 = corners[(0, 1, 1)] + ux * (corners[(1, 1, 1)] - corners[(0, 1, 1)])
        y0 = x00 + uy * (x10 - x00)
        y1 = x01 + uy * (x11 - x01)
        return y0 + uz * (y1 - y0)
