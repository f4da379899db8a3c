"""
Two-point homography for a purely rotating camera (panoramic mosaicing).

A camera rotating about its optical center with principal point at the
image origin and unknown focal length f induces

    H = K R K^-1,   K = diag(f, f, 1)

between two views. Two correspondences fix both f and R: the rays
(x, y, f) of a rotated camera keep the angle between them, which gives a
polynomial in f^2, and each admissible root determines R by aligning the
two rays.

Image coordinates must be relative to the principal point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

import numpy as np
from numpy.polynomial import polynomial

from .metrics import AsymmetricError
from .normalization import shared_scale_normalization
from .two_view import Kernel, NormalizedSolver, ResidualMetric

logger = logging.getLogger(__name__)


def _angle_polynomial(x1: np.ndarray, x2: np.ndarray) -> np.ndarray:
    """
    Coefficients (ascending, in u = f^2) of

        (a.b)^2 |a'|^2 |b'|^2 - (a'.b')^2 |a|^2 |b|^2

    for rays a = (x, y, f). The u^4 terms cancel, leaving a cubic.
    """
    a, b = x1[:, 0], x1[:, 1]
    a2, b2 = x2[:, 0], x2[:, 1]

    lhs = polynomial.polymul(
        polynomial.polypow([a @ b, 1.0], 2),
        polynomial.polymul([a2 @ a2, 1.0], [b2 @ b2, 1.0]),
    )
    rhs = polynomial.polymul(
        polynomial.polypow([a2 @ b2, 1.0], 2),
        polynomial.polymul([a @ a, 1.0], [b @ b, 1.0]),
    )
    return (lhs - rhs)[:4]


def _positive_real_roots(coefficients: np.ndarray, tolerance: float) -> list[float]:
    coefficients = polynomial.polytrim(coefficients, tol=tolerance)
    if len(coefficients) < 2:
        return []

    roots = []
    for root in polynomial.polyroots(coefficients):
        if abs(root.imag) > 1e-8 * max(1.0, abs(root.real)):
            continue
        u = root.real
        # Polish the root against the full-precision cubic.
        for _ in range(2):
            slope = polynomial.polyval(u, polynomial.polyder(coefficients))
            if slope == 0:
                break
            u -= polynomial.polyval(u, coefficients) / slope
        if u > 0:
            roots.append(float(u))
    return roots


def _signed_area(x: np.ndarray) -> float:
    return x[0, 0] * x[1, 1] - x[1, 0] * x[0, 1]


def _ray_frame(a: np.ndarray, b: np.ndarray) -> np.ndarray | None:
    """
    Orthonormal frame whose first axis is a and whose second axis is
    normal to the plane of a and b. None if a and b are parallel.
    """
    e1 = a / np.linalg.norm(a)
    normal = np.cross(a, b)
    norm = np.linalg.norm(normal)
    if norm <= 1e-12 * np.linalg.norm(a) * np.linalg.norm(b):
        return None
    e2 = normal / norm
    e3 = np.cross(e1, e2)
    return np.column_stack([e1, e2, e3])


@dataclass(frozen=True, slots=True)
class TwoPointSolver:
    """
    Minimal solver for rotational homographies from 2 correspondences.

    Returns every candidate consistent with both correspondences, or an
    empty list for coincident points or pairs that no camera rotation
    explains.
    """

    minimum_samples: ClassVar[int] = 2

    tolerance: float = 1e-9

    def solve(self, x1: np.ndarray, x2: np.ndarray) -> list[np.ndarray]:
        x1 = np.asarray(x1, dtype=np.float64)[:, :2]
        x2 = np.asarray(x2, dtype=np.float64)[:, :2]

        scale = max(np.abs(x1).max(), np.abs(x2).max())
        if (
            not np.isfinite(scale)
            or scale == 0
            or np.linalg.norm(x1[:, 0] - x1[:, 1]) <= self.tolerance * scale
            or np.linalg.norm(x2[:, 0] - x2[:, 1]) <= self.tolerance * scale
        ):
            logger.debug("Coincident points in rotational sample")
            return []

        # Solve for f^2 in units of scale^2 so the coefficients are O(1).
        coefficients = _angle_polynomial(x1 / scale, x2 / scale)
        magnitude = np.abs(coefficients).max()
        if magnitude <= self.tolerance:
            # The two views are congruent and every f fits. A rotation about
            # the optical axis gives the same H for all f; a mirrored pair
            # leaves H undetermined.
            if _signed_area(x1) * _signed_area(x2) <= 0:
                logger.debug("Mirrored rotational sample has no unique solution")
                return []
            focal_squares = [1.0]
        else:
            focal_squares = _positive_real_roots(
                coefficients / magnitude, self.tolerance
            )

        Hs = []
        for u in focal_squares:
            H = self._homography_for_focal(x1, x2, u * scale**2)
            if H is not None:
                Hs.append(H)

        if not Hs:
            logger.debug("No admissible focal length for rotational sample")
        return Hs

    def _homography_for_focal(
        self,
        x1: np.ndarray,
        x2: np.ndarray,
        u: float,
    ) -> np.ndarray | None:
        f = np.sqrt(u)
        rays1 = np.vstack([x1, np.full((1, 2), f)])
        rays2 = np.vstack([x2, np.full((1, 2), f)])

        # Squaring the angle constraint admits supplementary angles.
        if (rays1[:, 0] @ rays1[:, 1]) * (rays2[:, 0] @ rays2[:, 1]) < 0:
            return None

        frame1 = _ray_frame(rays1[:, 0], rays1[:, 1])
        frame2 = _ray_frame(rays2[:, 0], rays2[:, 1])
        if frame1 is None or frame2 is None:
            return None

        R = frame2 @ frame1.T
        K = np.diag([f, f, 1.0])
        K_inv = np.diag([1.0 / f, 1.0 / f, 1.0])
        H = K @ R @ K_inv

        if not np.all(np.isfinite(H)):
            return None

        # Imprecise roots of near-degenerate samples.
        residuals = AsymmetricError().errors(H, x1, x2)
        scale = max(np.abs(x1).max(), np.abs(x2).max())
        if not np.all(residuals <= 1e-6 * scale**2):
            logger.debug(f"Rejecting focal length {f:.6g}: residuals {residuals}")
            return None
        return H


def make_kernel(
    x1: np.ndarray,
    x2: np.ndarray,
    normalized: bool = True,
    metric: ResidualMetric | None = None,
) -> Kernel:
    """
    Rotational-homography kernel over (2, n) principal-point centred points.

    By default use the normalized version for increased robustness. Both
    views share one conditioning scale so the focal length stays common.
    """
    solver = TwoPointSolver()
    if normalized:
        solver = NormalizedSolver(solver, shared_scale_normalization)
    return Kernel(solver, metric or AsymmetricError(), x1, x2)
