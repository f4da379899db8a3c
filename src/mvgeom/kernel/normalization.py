"""
Coordinate conditioning for model fitting.

Raw pixel coordinates (hundreds to thousands) make DLT-style fits badly
conditioned. Points are mapped to a frame with unit-order coordinates
before fitting and the fitted model is mapped back afterwards (HZ p.109).
"""

from __future__ import annotations

import numpy as np

from ..errors import DegenerateInput, NumericalSingularity
from ..types import Normalization


def _apply(T: np.ndarray, x: np.ndarray) -> np.ndarray:
    return T[:2, :2] @ x + T[:2, 2:3]


def normalization_transform(points: np.ndarray) -> np.ndarray:
    """
    Isotropic conditioning transform for one point set.

    Translates the centroid to the origin and scales so that the RMS
    distance from it is sqrt(2).

    Args:
        points: (2, n) point set

    Returns:
        3x3 similarity transform T

    Raises:
        DegenerateInput: If all points coincide
    """
    points = np.asarray(points, dtype=np.float64)
    centroid = points.mean(axis=1)
    rms = np.sqrt(np.mean(np.sum((points - centroid[:, None]) ** 2, axis=0)))
    if not np.isfinite(rms) or rms == 0:
        raise DegenerateInput("Cannot condition coincident points")

    s = np.sqrt(2.0) / rms
    return np.array([
        [s, 0.0, -s * centroid[0]],
        [0.0, s, -s * centroid[1]],
        [0.0, 0.0, 1.0],
    ])


def isotropic_normalization(x1: np.ndarray, x2: np.ndarray) -> Normalization:
    """
    Condition each point set independently (centroid and scale).
    """
    T1 = normalization_transform(x1)
    T2 = normalization_transform(x2)
    return Normalization(x1=_apply(T1, x1), x2=_apply(T2, x2), T1=T1, T2=T2)


def shared_scale_normalization(x1: np.ndarray, x2: np.ndarray) -> Normalization:
    """
    Condition both point sets with one common scale about the origin.

    Models that assume the principal point at the origin and a focal
    length shared by both views (pure camera rotation) stay in their class
    only under this conditioning.
    """
    x1 = np.asarray(x1, dtype=np.float64)
    x2 = np.asarray(x2, dtype=np.float64)
    points = np.hstack([x1, x2])
    rms = np.sqrt(np.mean(np.sum(points**2, axis=0)))
    if not np.isfinite(rms) or rms == 0:
        raise DegenerateInput("Cannot condition points that all lie at the origin")

    s = np.sqrt(2.0) / rms
    T = np.diag([s, s, 1.0])
    return Normalization(x1=s * x1, x2=s * x2, T1=T, T2=T.copy())


def unnormalize(T1: np.ndarray, T2: np.ndarray, H: np.ndarray) -> np.ndarray:
    """
    Map a model fitted on conditioned points back to raw coordinates.

    Returns:
        inv(T2) @ H @ T1

    Raises:
        NumericalSingularity: If T2 is singular
    """
    try:
        T2_inv = np.linalg.inv(T2)
    except np.linalg.LinAlgError as e:
        raise NumericalSingularity(f"Conditioning transform is singular: {e}") from e
    return T2_inv @ H @ T1
