"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest
from scipy.spatial.transform import Rotation


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after test."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def sample_calibration_matrix():
    """Typical calibration matrix with a little skew."""
    return np.array([
        [800.0, 0.5, 320.0],
        [0.0, 780.0, 240.0],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


@pytest.fixture
def sample_rotation():
    """A generic proper rotation."""
    return Rotation.from_euler("xyz", [10.0, -20.0, 30.0], degrees=True).as_matrix()


@pytest.fixture
def sample_translation():
    return np.array([1.0, 2.0, 3.0], dtype=np.float64)


@pytest.fixture
def rotational_homography():
    """H = K R K^-1 for a camera with f = 500 panning and tilting."""
    K = np.diag([500.0, 500.0, 1.0])
    R = Rotation.from_euler("yx", [8.0, -5.0], degrees=True).as_matrix()
    return K @ R @ np.linalg.inv(K)


def _apply_homography(H, x):
    xh = H @ np.vstack([x, np.ones((1, x.shape[1]))])
    return xh[:2] / xh[2]


@pytest.fixture
def rotational_points(rotational_homography):
    """
    Principal-point centred correspondences under rotational_homography.
    Returns (x1, x2), each (2, 6).
    """
    x1 = np.array([
        [100.0, -120.0, 30.0, -60.0, 150.0, 10.0],
        [50.0, 80.0, -90.0, -20.0, 40.0, 120.0],
    ])
    return x1, _apply_homography(rotational_homography, x1)


@pytest.fixture
def sample_homography():
    """A general projective transform between pixel frames."""
    return np.array([
        [1.1, 0.05, 30.0],
        [-0.02, 0.95, -12.0],
        [1e-4, 2e-4, 1.0],
    ])


@pytest.fixture
def homography_points(sample_homography):
    """
    Pixel correspondences under sample_homography. Returns (x1, x2), each
    (2, 12).
    """
    xs, ys = np.meshgrid([20.0, 230.0, 410.0, 600.0], [15.0, 200.0, 440.0])
    x1 = np.vstack([xs.ravel(), ys.ravel()])
    return x1, _apply_homography(sample_homography, x1)
