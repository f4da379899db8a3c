"""
Reprojection error metrics for 2D projective models.

Each metric scores one correspondence (error) or a whole (2, n) set
(errors). Batched scoring is Numba-compiled since a robust-sampling driver
scores every correspondence against every candidate model.

A correspondence that cannot be scored (mapped to infinity, or a singular
model for the symmetric metric) gets an infinite residual, never NaN.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np
from numba import jit
from scipy.stats import chi2


# ============================================================================
# Numba Helpers
# ============================================================================


@jit(nopython=True, cache=True)
def _asymmetric_errors(H: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> np.ndarray:
    """
    Squared distance between x2 and H applied to x1, per column.

    Args:
        H: 3x3 model
        x1: (2, n) points in view 1
        x2: (2, n) points in view 2

    Returns:
        (n,) squared residuals
    """
    n = x1.shape[1]
    out = np.empty(n)

    for i in range(n):
        x = x1[0, i]
        y = x1[1, i]
        w = H[2, 0] * x + H[2, 1] * y + H[2, 2]
        if w == 0.0:
            out[i] = np.inf
            continue
        u = (H[0, 0] * x + H[0, 1] * y + H[0, 2]) / w
        v = (H[1, 0] * x + H[1, 1] * y + H[1, 2]) / w
        du = x2[0, i] - u
        dv = x2[1, i] - v
        out[i] = du * du + dv * dv

    return out


def _as_point_set(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    if x.ndim == 1:
        x = x.reshape(2, 1)
    return np.ascontiguousarray(x)


def _inverse_or_none(H: np.ndarray) -> np.ndarray | None:
    try:
        H_inv = np.linalg.inv(H)
    except np.linalg.LinAlgError:
        return None
    if not np.all(np.isfinite(H_inv)):
        return None
    return H_inv


# ============================================================================
# Metrics
# ============================================================================


@dataclass(frozen=True, slots=True)
class AsymmetricError:
    """
    Forward transfer error. Distributed as chi-squared with k = 2.
    """

    degrees_of_freedom: ClassVar[int] = 2

    def error(self, H: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> float:
        return float(self.errors(H, x1, x2)[0])

    def errors(self, H: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> np.ndarray:
        H = np.ascontiguousarray(H, dtype=np.float64)
        return _asymmetric_errors(H, _as_point_set(x1), _as_point_set(x2))


@dataclass(frozen=True, slots=True)
class SymmetricError:
    """
    Forward plus backward transfer error. Distributed as chi-squared with
    k = 4.

    The single-correspondence form inverts H on every call; errors() inverts
    it once for the whole set.
    """

    degrees_of_freedom: ClassVar[int] = 4

    def error(self, H: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> float:
        return float(self.errors(H, x1, x2)[0])

    def errors(self, H: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> np.ndarray:
        H = np.ascontiguousarray(H, dtype=np.float64)
        x1 = _as_point_set(x1)
        x2 = _as_point_set(x2)

        H_inv = _inverse_or_none(H)
        if H_inv is None:
            return np.full(x1.shape[1], np.inf)

        H_inv = np.ascontiguousarray(H_inv)
        return _asymmetric_errors(H, x1, x2) + _asymmetric_errors(H_inv, x2, x1)


# ============================================================================
# Thresholds
# ============================================================================


def chi_squared_threshold(
    sigma: float,
    degrees_of_freedom: int,
    confidence: float = 0.95,
) -> float:
    """
    Squared-residual inlier threshold for Gaussian pixel noise.

    A correct correspondence scores below the threshold with probability
    `confidence` when its residual is chi-squared distributed.

    Args:
        sigma: Standard deviation of the pixel noise
        degrees_of_freedom: 2 for AsymmetricError, 4 for SymmetricError
        confidence: Quantile of the chi-squared distribution, in (0, 1)

    Returns:
        Threshold on the squared residual
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    return float(sigma**2 * chi2.ppf(confidence, degrees_of_freedom))
