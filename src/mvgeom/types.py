"""
Core data structures for mvgeom.

All types are frozen dataclasses with slots for immutability and performance.
Logic is in separate pure functions - these are data containers only.

Point sets are (d, n) arrays: one row per coordinate, one column per point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np


# ============================================================================
# Camera Matrices
# ============================================================================


@dataclass(frozen=True, slots=True)
class CameraDecomposition:
    """
    Calibration, rotation and translation recovered from a 3x4 projection.

    calibration @ [rotation | translation] reproduces the projection matrix
    up to the scale removed when calibration[2, 2] was set to 1.
    """

    calibration: np.ndarray  # 3x3 upper-triangular K, positive diagonal
    rotation: np.ndarray  # 3x3 proper rotation R
    translation: np.ndarray  # (3,) translation t

    def __iter__(self):
        # Allows K, R, t = krt_from_p(P)
        return iter((self.calibration, self.rotation, self.translation))


# ============================================================================
# Coordinate Conditioning
# ============================================================================


@dataclass(frozen=True, slots=True)
class Normalization:
    """
    Two conditioned point sets and the transforms that produced them.

    x1_normalized = T1 @ x1 and x2_normalized = T2 @ x2 in homogeneous
    coordinates.
    """

    x1: np.ndarray  # (2, n) conditioned points of view 1
    x2: np.ndarray  # (2, n) conditioned points of view 2
    T1: np.ndarray  # 3x3 conditioning transform of view 1
    T2: np.ndarray  # 3x3 conditioning transform of view 2


# ============================================================================
# Mosaic Geometry
# ============================================================================


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Axis-aligned extent of a set of warped images, in pixels.
    """

    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin


# ============================================================================
# Estimation Configuration
# ============================================================================


@dataclass(frozen=True, slots=True)
class EstimationConfig:
    """
    Which kernel to build for a robust-sampling driver, and its noise model.
    Corresponds to the TOML [estimation] section.
    """

    model: Literal["panoramic", "homography", "affine"] = "homography"
    metric: Literal["asymmetric", "symmetric"] = "asymmetric"
    normalized: bool = True
    noise_sigma: float = 1.0  # Pixel noise standard deviation
    confidence: float = 0.95  # Chi-squared quantile for the inlier threshold
    # Read only by the external sampling driver to size its iteration count
    outliers_probability: float = 1e-2
