"""
Configuration loading/saving.

Pure functions operating on dataclasses.
- TOML for estimation configuration
- Kernel construction from a configuration
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import rtoml

from .kernel import affine, homography, panography
from .kernel.metrics import AsymmetricError, SymmetricError, chi_squared_threshold
from .kernel.two_view import Kernel
from .types import EstimationConfig

MODELS = {
    "panoramic": panography.make_kernel,
    "homography": homography.make_kernel,
    "affine": affine.make_kernel,
}

METRICS = {
    "asymmetric": AsymmetricError,
    "symmetric": SymmetricError,
}


# ============================================================================
# TOML Estimation Configuration
# ============================================================================


def _validate(config: EstimationConfig) -> EstimationConfig:
    if config.model not in MODELS:
        raise ValueError(
            f"Unknown model {config.model!r}, expected one of {sorted(MODELS)}"
        )
    if config.metric not in METRICS:
        raise ValueError(
            f"Unknown metric {config.metric!r}, expected one of {sorted(METRICS)}"
        )
    if config.noise_sigma <= 0:
        raise ValueError(f"noise_sigma must be positive, got {config.noise_sigma}")
    if not 0.0 < config.confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {config.confidence}")
    if not 0.0 <= config.outliers_probability < 1.0:
        raise ValueError(
            f"outliers_probability must be in [0, 1), got {config.outliers_probability}"
        )
    return config


def load_estimation_config(path: Path) -> EstimationConfig:
    """
    Load estimation configuration from TOML file.

    Reads the [estimation] section; missing keys take their defaults.

    Args:
        path: Path to config.toml file

    Returns:
        EstimationConfig dataclass

    Raises:
        ValueError: If a value is out of range or names an unknown model
    """
    data = rtoml.load(Path(path))
    section = data.get("estimation", {})
    defaults = create_default_estimation_config()

    return _validate(EstimationConfig(
        model=section.get("model", defaults.model),
        metric=section.get("metric", defaults.metric),
        normalized=section.get("normalized", defaults.normalized),
        noise_sigma=float(section.get("noise_sigma", defaults.noise_sigma)),
        confidence=float(section.get("confidence", defaults.confidence)),
        outliers_probability=float(
            section.get("outliers_probability", defaults.outliers_probability)
        ),
    ))


def save_estimation_config(config: EstimationConfig, path: Path) -> None:
    """
    Save estimation configuration to TOML file.

    Args:
        config: EstimationConfig dataclass
        path: Path to save config.toml
    """
    data = {
        "estimation": {
            "model": config.model,
            "metric": config.metric,
            "normalized": config.normalized,
            "noise_sigma": config.noise_sigma,
            "confidence": config.confidence,
            "outliers_probability": config.outliers_probability,
        },
    }

    # Ensure parent directory exists
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        rtoml.dump(data, f)


def create_default_estimation_config() -> EstimationConfig:
    """
    Create a default estimation configuration.

    Normalized homography with one-pixel noise, as used for video mosaics.
    """
    return EstimationConfig()


# ============================================================================
# Kernel Construction
# ============================================================================


def create_kernel(config: EstimationConfig, x1: np.ndarray, x2: np.ndarray) -> Kernel:
    """
    Build the kernel described by `config` over (2, n) correspondences.
    """
    _validate(config)
    return MODELS[config.model](
        x1,
        x2,
        normalized=config.normalized,
        metric=METRICS[config.metric](),
    )


def inlier_threshold(config: EstimationConfig) -> float:
    """
    Squared-residual inlier threshold matching the configured metric.
    """
    _validate(config)
    dof = METRICS[config.metric].degrees_of_freedom
    return chi_squared_threshold(config.noise_sigma, dof, config.confidence)
