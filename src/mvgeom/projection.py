"""
Camera projection matrix algebra.

Composition and decomposition of P = K [R | t], and recovery of the
calibration matrix from the image of the absolute conic.
"""

from __future__ import annotations

import logging

import numpy as np
import scipy.linalg

from .errors import NumericalSingularity
from .types import CameraDecomposition

logger = logging.getLogger(__name__)


def p_from_krt(K: np.ndarray, R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """
    Compose a 3x4 projection matrix P = K [R | t].
    """
    Rt = np.hstack([R, np.asarray(t, dtype=np.float64).reshape(3, 1)])
    return K @ Rt


def krt_from_p(P: np.ndarray) -> CameraDecomposition:
    """
    Decompose a 3x4 projection matrix into K, R and t.

    Uses the RQ decomposition of the leading 3x3 block (HZ A4.1.1, p.579):
    three Givens rotations zero K(2,1), K(2,0) and K(1,0) in that order.
    Signs are then fixed so that K has a positive diagonal, t solves
    K t = P[:, 3], and K is scaled so that K(2,2) = 1.

    Args:
        P: 3x4 projection matrix

    Returns:
        CameraDecomposition with K upper-triangular (positive diagonal,
        K(2,2) = 1), R a proper rotation and t a (3,) vector

    Raises:
        NumericalSingularity: If the leading 3x3 block of P is singular
    """
    P = np.asarray(P, dtype=np.float64)
    K = P[:, :3].copy()

    scale = np.abs(K).max()
    if not np.isfinite(scale) or scale == 0:
        raise NumericalSingularity("Leading 3x3 block of P is zero or not finite")
    if abs(np.linalg.det(K / scale)) <= 1e-12:
        raise NumericalSingularity("Leading 3x3 block of P is singular")

    Q = np.eye(3)

    # Set K(2,1) to zero.
    if K[2, 1] != 0:
        c, s = -K[2, 2], K[2, 1]
        l = np.hypot(c, s)
        c, s = c / l, s / l
        Qx = np.array([
            [1.0, 0.0, 0.0],
            [0.0, c, -s],
            [0.0, s, c],
        ])
        K = K @ Qx
        Q = Qx.T @ Q

    # Set K(2,0) to zero.
    if K[2, 0] != 0:
        c, s = K[2, 2], K[2, 0]
        l = np.hypot(c, s)
        c, s = c / l, s / l
        Qy = np.array([
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ])
        K = K @ Qy
        Q = Qy.T @ Q

    # Set K(1,0) to zero.
    if K[1, 0] != 0:
        c, s = -K[1, 1], K[1, 0]
        l = np.hypot(c, s)
        c, s = c / l, s / l
        Qz = np.array([
            [c, -s, 0.0],
            [s, c, 0.0],
            [0.0, 0.0, 1.0],
        ])
        K = K @ Qz
        Q = Qz.T @ Q

    R = Q

    # The rotations leave round-off below the diagonal.
    K = np.triu(K)

    # Ensure that the diagonal is positive.
    if K[2, 2] < 0:
        K = -K
        R = -R
    if K[1, 1] < 0:
        S = np.diag([1.0, -1.0, 1.0])
        K = K @ S
        R = S @ R
    if K[0, 0] < 0:
        S = np.diag([-1.0, 1.0, 1.0])
        K = K @ S
        R = S @ R

    try:
        t = scipy.linalg.solve(K, P[:, 3])
    except (np.linalg.LinAlgError, ValueError) as e:
        raise NumericalSingularity(f"Cannot solve K t = p: {e}") from e

    # A negative global scale on P leaves R improper.
    if np.linalg.det(R) < 0:
        logger.debug("P has negative scale; negating R and t")
        R = -R
        t = -t

    K = K / K[2, 2]

    return CameraDecomposition(calibration=K, rotation=R, translation=t)


def k_from_absolute_conic(W: np.ndarray) -> np.ndarray:
    """
    Recover the calibration matrix K from the image of the absolute conic.

    K is the upper-triangular factor with K K^T = inv(W). Cholesky gives a
    lower-triangular factor, so the indices of inv(W) are reversed before
    the factorization and reversed back afterwards. The Cholesky factor has
    a positive diagonal, so K needs no sign correction.

    Args:
        W: 3x3 symmetric positive-definite conic

    Returns:
        3x3 upper-triangular K with positive diagonal (not rescaled)

    Raises:
        NumericalSingularity: If W is singular or non-finite, or inv(W) is
            not positive definite
    """
    try:
        dual = np.linalg.inv(np.asarray(W, dtype=np.float64))
        flipped_dual = dual[::-1, ::-1]
        L = scipy.linalg.cholesky(flipped_dual, lower=True)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise NumericalSingularity(f"Cannot factor absolute conic: {e}") from e

    return L[::-1, ::-1].copy()
