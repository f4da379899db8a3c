"""
Three-point 2D affine transform (6 dof).

The affine model is stored as a 3x3 matrix with last row [0, 0, 1] so it
shares metrics, normalization and chaining with homographies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from .metrics import AsymmetricError
from .normalization import isotropic_normalization
from .two_view import Kernel, NormalizedSolver, ResidualMetric

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ThreePointSolver:
    """
    Least-squares affine solver. Returns [] for collinear points.
    """

    minimum_samples: ClassVar[int] = 3

    def solve(self, x1: np.ndarray, x2: np.ndarray) -> list[np.ndarray]:
        x1 = np.asarray(x1, dtype=np.float64)
        x2 = np.asarray(x2, dtype=np.float64)
        n = x1.shape[1]
        if n < self.minimum_samples:
            return []

        A = np.zeros((2 * n, 6), dtype=np.float64)
        A[0::2, 0:2] = x1.T
        A[0::2, 2] = 1.0
        A[1::2, 3:5] = x1.T
        A[1::2, 5] = 1.0
        b = x2.T.reshape(-1)

        if not (np.all(np.isfinite(A)) and np.all(np.isfinite(b))):
            return []

        params, _, rank, _ = np.linalg.lstsq(A, b, rcond=None)
        if rank < 6:
            logger.debug(f"Collinear affine sample (rank {rank})")
            return []

        return [np.array([
            [params[0], params[1], params[2]],
            [params[3], params[4], params[5]],
            [0.0, 0.0, 1.0],
        ])]


def make_kernel(
    x1: np.ndarray,
    x2: np.ndarray,
    normalized: bool = True,
    metric: ResidualMetric | None = None,
) -> Kernel:
    """
    Affine kernel over (2, n) correspondences.
    """
    solver = ThreePointSolver()
    if normalized:
        solver = NormalizedSolver(solver, isotropic_normalization)
    return Kernel(solver, metric or AsymmetricError(), x1, x2)
