"""
Generic two-view estimation kernel.

A kernel bundles a minimal solver, a residual metric and the
correspondences, and exposes the interface a robust-sampling (RANSAC-style)
driver needs:

1) minimum_samples() - smallest subset the solver accepts
2) fit(samples)      - zero or more candidate models from a subset
3) error(model, i)   - residual of correspondence i under a model

The driver owns iteration count, threshold and best-model bookkeeping.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from ..errors import DegenerateInput, NumericalSingularity
from ..types import Normalization
from .normalization import unnormalize

logger = logging.getLogger(__name__)


# ============================================================================
# Capability Protocols
# ============================================================================


class MinimalSolver(Protocol):
    """
    Fits a model from a (usually minimal) set of correspondences.
    Returns an empty list for a degenerate sample instead of raising.
    """

    @property
    def minimum_samples(self) -> int: ...

    def solve(self, x1: np.ndarray, x2: np.ndarray) -> list[np.ndarray]: ...


class ResidualMetric(Protocol):
    """
    Nonnegative residual of correspondences under a model.
    """

    degrees_of_freedom: int

    def error(self, model: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> float: ...

    def errors(self, model: np.ndarray, x1: np.ndarray, x2: np.ndarray) -> np.ndarray: ...


class CoordinateNormalizer(Protocol):
    """
    Conditions two point sets before fitting.
    """

    def __call__(self, x1: np.ndarray, x2: np.ndarray) -> Normalization: ...


# ============================================================================
# Normalized Solver
# ============================================================================


@dataclass(frozen=True, slots=True)
class NormalizedSolver:
    """
    Wraps a solver so it fits on conditioned coordinates.

    Both point sets are conditioned, the base solver runs on them, and
    every candidate is mapped back to raw coordinates.
    """

    solver: MinimalSolver
    normalizer: CoordinateNormalizer

    @property
    def minimum_samples(self) -> int:
        return self.solver.minimum_samples

    def solve(self, x1: np.ndarray, x2: np.ndarray) -> list[np.ndarray]:
        try:
            normalization = self.normalizer(x1, x2)
        except DegenerateInput as e:
            logger.debug(f"Skipping sample that cannot be conditioned: {e}")
            return []

        models = []
        for model in self.solver.solve(normalization.x1, normalization.x2):
            try:
                models.append(unnormalize(normalization.T1, normalization.T2, model))
            except NumericalSingularity as e:
                logger.debug(f"Dropping candidate: {e}")
        return models


# ============================================================================
# Kernel
# ============================================================================


def _validate_correspondences(x1: np.ndarray, x2: np.ndarray) -> None:
    if x1.ndim != 2 or x1.shape[0] != 2:
        raise ValueError(f"Expected x1 shape (2, n) but got {x1.shape}")
    if x2.ndim != 2 or x2.shape[0] != 2:
        raise ValueError(f"Expected x2 shape (2, n) but got {x2.shape}")
    if x1.shape[1] != x2.shape[1]:
        raise ValueError(
            f"Point sets differ in size: {x1.shape[1]} vs {x2.shape[1]}"
        )


@dataclass(frozen=True)
class Kernel:
    """
    Solver x metric x correspondences, as consumed by a robust driver.

    Column i of x1 corresponds to column i of x2.
    """

    solver: MinimalSolver
    metric: ResidualMetric
    x1: np.ndarray
    x2: np.ndarray

    def __post_init__(self):
        x1 = np.ascontiguousarray(self.x1, dtype=np.float64)
        x2 = np.ascontiguousarray(self.x2, dtype=np.float64)
        _validate_correspondences(x1, x2)
        object.__setattr__(self, "x1", x1)
        object.__setattr__(self, "x2", x2)

    def minimum_samples(self) -> int:
        return self.solver.minimum_samples

    def num_samples(self) -> int:
        return self.x1.shape[1]

    def fit(self, samples: Sequence[int]) -> list[np.ndarray]:
        """
        Fit candidate models to the selected correspondences.

        Args:
            samples: Column indices of the subset

        Returns:
            Zero or more 3x3 models; empty for a degenerate subset
        """
        samples = np.asarray(samples, dtype=np.intp)
        if samples.size < self.minimum_samples():
            logger.debug(
                f"Sample of {samples.size} is below the minimum of "
                f"{self.minimum_samples()}"
            )
            return []
        return self.solver.solve(self.x1[:, samples], self.x2[:, samples])

    def error(self, model: np.ndarray, sample: int) -> float:
        """
        Residual of correspondence `sample` under `model`.
        """
        return self.metric.error(model, self.x1[:, sample], self.x2[:, sample])

    def errors(self, model: np.ndarray) -> np.ndarray:
        """
        Residuals of all correspondences under `model`, shape (n,).
        """
        return self.metric.errors(model, self.x1, self.x2)
