"""
Estimation kernels for robust-sampling drivers.

A kernel is a minimal solver, a residual metric and (optionally) a
coordinate normalizer over a fixed set of correspondences. All functions
are pure - no threading, no state. The driver handles sampling and
concurrency.
"""

from .metrics import (
    AsymmetricError,
    SymmetricError,
    chi_squared_threshold,
)

from .normalization import (
    isotropic_normalization,
    normalization_transform,
    shared_scale_normalization,
    unnormalize,
)

from .two_view import (
    CoordinateNormalizer,
    Kernel,
    MinimalSolver,
    NormalizedSolver,
    ResidualMetric,
)

from .panography import TwoPointSolver
from .homography import FourPointSolver
from .affine import ThreePointSolver

__all__ = [
    # Metrics
    "AsymmetricError",
    "SymmetricError",
    "chi_squared_threshold",
    # Normalization
    "isotropic_normalization",
    "normalization_transform",
    "shared_scale_normalization",
    "unnormalize",
    # Kernel
    "CoordinateNormalizer",
    "Kernel",
    "MinimalSolver",
    "NormalizedSolver",
    "ResidualMetric",
    # Solvers
    "TwoPointSolver",
    "FourPointSolver",
    "ThreePointSolver",
]
