"""Seeded two-channel 2-D gradient noise used to drive shape drift."""

from __future__ import annotations

import math

import numpy as np

_TABLE_SIZE = 256
_DIAGONAL = 1.0 / math.sqrt(2.0)
# Unit gradients; with unit gradients 2-D Perlin noise stays within +-sqrt(0.5).
_GRADIENTS = np.array(
    [
        (1.0, 0.0),
        (-1.0, 0.0),
        (0.0, 1.0),
        (0.0, -1.0),
        (_DIAGONAL, _DIAGONAL),
        (-_DIAGONAL, _DIAGONAL),
        (_DIAGONAL, -_DIAGONAL),
        (-_DIAGONAL, -_DIAGONAL),
    ],
    dtype=np.float64,
)
_AMPLITUDE = math.sqrt(0.5)


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


class NoiseField:
    """Smooth noise field sampled at 2-D points, yielding two values per point.

    Each channel is an independent Perlin lattice built from its own
    permutation table, so the two outputs at one point are uncorrelated.
    All outputs are normalised to ``[0, 1]``.
    """

    channels = 2

    def __init__(self, rng: np.random.Generator) -> None:
        self._permutations = [
            rng.permutation(_TABLE_SIZE).astype(np.int64) for _ in range(self.channels)
        ]

    def sample(self, x: float, y: float) -> tuple[float, float]:
        """Return both channel values at a single point."""
        values = self.sample_many(np.array([x], dtype=np.float64), np.array([y], dtype=np.float64))
        return float(values[0, 0]), float(values[1, 0])

    def sample_many(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Sample both channels at many points.

        Returns an array of shape ``(2, len(xs))``.
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        return np.stack([self._channel(perm, xs, ys) for perm in self._permutations])

    @staticmethod
    def _channel(perm: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        x0 = np.floor(xs)
        y0 = np.floor(ys)
        fx = xs - x0
        fy = ys - y0
        xi = x0.astype(np.int64) & (_TABLE_SIZE - 1)
        yi = y0.astype(np.int64) & (_TABLE_SIZE - 1)

        def corner(ix: np.ndarray, iy: np.ndarray, dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
            index = perm[(perm[ix & (_TABLE_SIZE - 1)] + iy) & (_TABLE_SIZE - 1)] & 7
            grad = _GRADIENTS[index]
            return grad[:, 0] * dx + grad[:, 1] * dy

        n00 = corner(xi, yi, fx, fy)
        n10 = corner(xi + 1, yi, fx - 1.0, fy)
        n01 = corner(xi, yi + 1, fx, fy - 1.0)
        n11 = corner(xi + 1, yi + 1, fx - 1.0, fy - 1.0)

        u = _fade(fx)
        v = _fade(fy)
        nx0 = n00 + u * (n10 - n00)
        nx1 = n01 + u * (n11 - n01)
        value = nx0 + v * (nx1 - nx0)
        return np.clip((value / _AMPLITUDE + 1.0) * 0.5, 0.0, 1.0)
