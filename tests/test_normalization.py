"""
Tests for mvgeom.kernel.normalization.
"""

import numpy as np
import pytest

from mvgeom.errors import DegenerateInput, NumericalSingularity
from mvgeom.kernel.normalization import (
    isotropic_normalization,
    normalization_transform,
    shared_scale_normalization,
    unnormalize,
)
from mvgeom.types import Normalization


def _apply(T, x):
    xh = T @ np.vstack([x, np.ones((1, x.shape[1]))])
    return xh[:2] / xh[2]


class TestNormalizationTransform:
    def test_zero_mean_unit_scale(self, homography_points):
        x1, _ = homography_points
        xn = _apply(normalization_transform(x1), x1)

        np.testing.assert_allclose(xn.mean(axis=1), [0.0, 0.0], atol=1e-12)
        rms = np.sqrt(np.mean(np.sum(xn**2, axis=0)))
        assert rms == pytest.approx(np.sqrt(2.0))

    def test_coincident_points_raise(self):
        x = np.array([[5.0, 5.0, 5.0], [1.0, 1.0, 1.0]])
        with pytest.raises(DegenerateInput):
            normalization_transform(x)


class TestIsotropicNormalization:
    def test_points_match_transforms(self, homography_points):
        x1, x2 = homography_points
        normalization = isotropic_normalization(x1, x2)

        assert isinstance(normalization, Normalization)
        np.testing.assert_allclose(normalization.x1, _apply(normalization.T1, x1))
        np.testing.assert_allclose(normalization.x2, _apply(normalization.T2, x2))


class TestSharedScaleNormalization:
    def test_same_transform_without_translation(self, rotational_points):
        x1, x2 = rotational_points
        normalization = shared_scale_normalization(x1, x2)

        np.testing.assert_array_equal(normalization.T1, normalization.T2)
        assert normalization.T1[0, 2] == 0.0
        assert normalization.T1[1, 2] == 0.0
        np.testing.assert_allclose(normalization.x1, _apply(normalization.T1, x1))

        points = np.hstack([normalization.x1, normalization.x2])
        rms = np.sqrt(np.mean(np.sum(points**2, axis=0)))
        assert rms == pytest.approx(np.sqrt(2.0))

    def test_points_at_origin_raise(self):
        with pytest.raises(DegenerateInput):
            shared_scale_normalization(np.zeros((2, 2)), np.zeros((2, 2)))


class TestUnnormalize:
    def test_inverts_conditioning(self, sample_homography, homography_points):
        x1, x2 = homography_points
        normalization = isotropic_normalization(x1, x2)
        T1, T2 = normalization.T1, normalization.T2
        H_normalized = T2 @ sample_homography @ np.linalg.inv(T1)

        np.testing.assert_allclose(
            unnormalize(T1, T2, H_normalized), sample_homography, rtol=1e-9, atol=1e-12
        )

    def test_singular_transform_raises(self):
        with pytest.raises(NumericalSingularity):
            unnormalize(np.eye(3), np.zeros((3, 3)), np.eye(3))
