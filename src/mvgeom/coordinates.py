"""
Homogeneous and Euclidean coordinate conversion.

Pure functions. Point sets are (d, n) arrays; a single point may be given
as a (d,) vector and is returned in the same form.
"""

from __future__ import annotations

import numpy as np

from .errors import NumericalSingularity


def euclidean_to_homogeneous(X: np.ndarray) -> np.ndarray:
    """
    Append a unit coordinate: (d, n) -> (d + 1, n), or (d,) -> (d + 1,).
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim == 1:
        return np.append(X, 1.0)
    return np.vstack([X, np.ones((1, X.shape[1]), dtype=np.float64)])


def homogeneous_to_euclidean(H: np.ndarray) -> np.ndarray:
    """
    Divide every row but the last by the last row.

    Args:
        H: (d + 1, n) homogeneous points, or a single (d + 1,) point

    Returns:
        (d, n) Euclidean points, or a (d,) point

    Raises:
        NumericalSingularity: If any point has a zero homogeneous scale
            (a point at infinity)
    """
    H = np.asarray(H, dtype=np.float64)
    w = H[-1]
    if np.any(w == 0):
        raise NumericalSingularity("Point at infinity has no Euclidean form")
    return H[:-1] / w


def project(P: np.ndarray, X: np.ndarray) -> np.ndarray:
    """
    Project 3D points through a 3x4 camera matrix.

    Args:
        P: 3x4 projection matrix
        X: (3, n) points, or a single (3,) point

    Returns:
        (2, n) image points, or a single (2,) point
    """
    return homogeneous_to_euclidean(P @ euclidean_to_homogeneous(X))


def depth(R: np.ndarray, t: np.ndarray, X: np.ndarray) -> float | np.ndarray:
    """
    Depth of points in the camera frame: third coordinate of R @ X + t.

    Positive depth means the point is in front of the camera. The sign test
    is left to the caller.
    """
    X = np.asarray(X, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64).reshape(3)
    if X.ndim == 1:
        return float(R[2] @ X + t[2])
    return R[2] @ X + t[2]
