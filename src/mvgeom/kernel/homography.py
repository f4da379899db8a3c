"""
Four-point homography via the Direct Linear Transform (DLT).

Each correspondence contributes two linear equations in the nine entries
of H; the null vector of the stacked system is found with SVD. More than
four correspondences give the algebraic least-squares fit.
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


def _design_matrix(x1: np.ndarray, x2: np.ndarray) -> np.ndarray:
    n = x1.shape[1]
    A = np.zeros((2 * n, 9), dtype=np.float64)
    for i in range(n):
        x, y = x1[:, i]
        u, v = x2[:, i]
        A[2 * i] = [x, y, 1.0, 0.0, 0.0, 0.0, -u * x, -u * y, -u]
        A[2 * i + 1] = [0.0, 0.0, 0.0, x, y, 1.0, -v * x, -v * y, -v]
    return A


@dataclass(frozen=True, slots=True)
class FourPointSolver:
    """
    DLT homography solver. Returns [] for collinear or repeated points.
    """

    minimum_samples: ClassVar[int] = 4

    tolerance: float = 1e-10

    def solve(self, x1: np.ndarray, x2: np.ndarray) -> list[np.ndarray]:
        x1 = np.asarray(x1, dtype=np.float64)
        x2 = np.asarray(x2, dtype=np.float64)
        if x1.shape[1] < self.minimum_samples:
            return []

        A = _design_matrix(x1, x2)
        if not np.all(np.isfinite(A)):
            return []

        # SVD to find null space
        _, s, vh = np.linalg.svd(A, full_matrices=True)
        if s[0] == 0 or s[7] <= self.tolerance * s[0]:
            logger.debug(f"Rank-deficient DLT system, singular values {s}")
            return []

        H = vh[-1].reshape(3, 3)
        if abs(np.linalg.det(H)) <= self.tolerance:
            logger.debug("DLT solution is a singular homography")
            return []

        if H[2, 2] < 0:
            H = -H
        return [H]


def make_kernel(
    x1: np.ndarray,
    x2: np.ndarray,
    normalized: bool = True,
    metric: ResidualMetric | None = None,
) -> Kernel:
    """
    Homography kernel over (2, n) correspondences.

    By default use the normalized version for increased robustness.
    """
    solver = FourPointSolver()
    if normalized:
        solver = NormalizedSolver(solver, isotropic_normalization)
    return Kernel(solver, metric or AsymmetricError(), x1, x2)
