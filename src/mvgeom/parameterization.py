"""
Parameter-vector conversions for nonlinear refinement.

A rank-2 3x3 matrix (e.g. a fundamental matrix) is parameterized with 9
numbers as a straightforward SVD F = U S V^T with S = diag(1, s, 0). U and
V^T are rotations stored as unnormalized (x, y, z, w) quaternions, and s is
driven by one unconstrained parameter:

    u  - p[0:4]
    s  - p[4]
    vt - p[5:9]

Camera poses use the 6-vector (Rodrigues rotation, translation).
"""

from __future__ import annotations

import logging

import cv2
import numpy as np
from scipy.spatial.transform import Rotation

from .errors import InvalidParameterization, NumericalSingularity

logger = logging.getLogger(__name__)

NUM_RANK2_PARAMETERS = 9
NUM_POSE_PARAMETERS = 6


# ============================================================================
# Rank-2 Matrices
# ============================================================================


def _rotation_from_quaternion(q: np.ndarray) -> np.ndarray:
    if not np.all(np.isfinite(q)) or np.linalg.norm(q) == 0:
        raise InvalidParameterization(f"Quaternion {q} does not describe a rotation")
    return Rotation.from_quat(q).as_matrix()


def rank2_to_matrix(params: np.ndarray) -> np.ndarray:
    """
    Decode 9 parameters into a rank-2 3x3 matrix.

    s = 1 / (1 + p[4]^2) keeps 0 < s <= 1, so the singular values stay
    nonnegative and in order for any value the optimizer picks.

    Args:
        params: (9,) parameter vector

    Returns:
        3x3 matrix U diag(1, s, 0) V^T

    Raises:
        InvalidParameterization: If either quaternion has zero norm
    """
    p = np.asarray(params, dtype=np.float64).reshape(NUM_RANK2_PARAMETERS)

    U = _rotation_from_quaternion(p[0:4])
    Vt = _rotation_from_quaternion(p[5:9])
    s = 1.0 / (1.0 + p[4] * p[4])

    F = U @ np.diag([1.0, s, 0.0]) @ Vt

    logger.debug(f"Decoded rank-2 matrix with s = {s:.6g}")
    return F


def rank2_from_matrix(F: np.ndarray) -> np.ndarray:
    """
    Encode a 3x3 matrix into the 9-parameter rank-2 form.

    The third singular value is ignored; if F has rank 3 the encoding
    describes the closest rank-2 matrix in the Frobenius sense, scaled so
    that its leading singular value is 1.

    U and V^T from the SVD are either rotations or reflections. A reflection
    is turned into a rotation by negating its third singular vector, which
    only multiplies the zero singular value and so leaves the decoded matrix
    unchanged.

    Args:
        F: 3x3 matrix

    Returns:
        (9,) parameter vector

    Raises:
        NumericalSingularity: If F has fewer than two nonzero singular values
    """
    F = np.asarray(F, dtype=np.float64)
    U, sigma, Vt = np.linalg.svd(F)

    logger.debug(f"Rank-2 encoding, singular values {sigma}")

    if not np.isfinite(sigma[0]) or sigma[1] <= 1e-12 * sigma[0]:
        raise NumericalSingularity(
            f"Matrix has rank below 2 (singular values {sigma})"
        )

    if np.linalg.det(U) < 0:
        U[:, 2] = -U[:, 2]
    if np.linalg.det(Vt) < 0:
        Vt[2, :] = -Vt[2, :]

    u = Rotation.from_matrix(U).as_quat()
    vt = Rotation.from_matrix(Vt).as_quat()
    s = np.sqrt(max(sigma[0] / sigma[1] - 1.0, 0.0))

    return np.concatenate([u, [s], vt])


# ============================================================================
# Camera Poses
# ============================================================================


def pose_to_vector(rotation: np.ndarray, translation: np.ndarray) -> np.ndarray:
    """
    Convert a camera pose to a 6-element vector for bundle adjustment.
    [rodrigues_x, rodrigues_y, rodrigues_z, tx, ty, tz]
    """
    rodrigues = cv2.Rodrigues(np.asarray(rotation, dtype=np.float64))[0][:, 0]
    return np.hstack([rodrigues, np.asarray(translation, dtype=np.float64).reshape(3)])


def pose_from_vector(vector: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Create (rotation, translation) from a 6-element pose vector.
    """
    vector = np.asarray(vector, dtype=np.float64).reshape(NUM_POSE_PARAMETERS)
    rotation = cv2.Rodrigues(vector[0:3].copy())[0]
    translation = vector[3:6].copy()
    return rotation, translation
