"""
Tests for mvgeom.projection.
"""

import numpy as np
import pytest

from mvgeom.errors import NumericalSingularity
from mvgeom.projection import k_from_absolute_conic, krt_from_p, p_from_krt
from mvgeom.types import CameraDecomposition


class TestPFromKRt:
    def test_identity_calibration(self, sample_translation):
        P = p_from_krt(np.eye(3), np.eye(3), sample_translation)

        assert P.shape == (3, 4)
        np.testing.assert_array_equal(P[:, :3], np.eye(3))
        np.testing.assert_array_equal(P[:, 3], sample_translation)

    def test_composition(self, sample_calibration_matrix, sample_rotation, sample_translation):
        P = p_from_krt(sample_calibration_matrix, sample_rotation, sample_translation)
        np.testing.assert_allclose(P[:, :3], sample_calibration_matrix @ sample_rotation)
        np.testing.assert_allclose(P[:, 3], sample_calibration_matrix @ sample_translation)


class TestKRtFromP:
    def test_identity_rotation(self, sample_calibration_matrix, sample_translation):
        """Composing then decomposing recovers K, R = I and t = (1, 2, 3)."""
        P = p_from_krt(sample_calibration_matrix, np.eye(3), sample_translation)
        K, R, t = krt_from_p(P)

        np.testing.assert_allclose(K, sample_calibration_matrix, rtol=1e-9, atol=1e-9)
        np.testing.assert_allclose(R, np.eye(3), atol=1e-9)
        np.testing.assert_allclose(t, sample_translation, rtol=1e-9)

    def test_general_rotation(self, sample_calibration_matrix, sample_rotation, sample_translation):
        P = p_from_krt(sample_calibration_matrix, sample_rotation, sample_translation)
        result = krt_from_p(P)

        assert isinstance(result, CameraDecomposition)
        np.testing.assert_allclose(result.calibration, sample_calibration_matrix, rtol=1e-9, atol=1e-9)
        np.testing.assert_allclose(result.rotation, sample_rotation, atol=1e-9)
        np.testing.assert_allclose(result.translation, sample_translation, rtol=1e-9, atol=1e-9)

    def test_contract(self, sample_calibration_matrix, sample_rotation, sample_translation):
        """K is upper-triangular with positive diagonal and K(2,2) = 1; det(R) = 1."""
        P = 3.7 * p_from_krt(sample_calibration_matrix, sample_rotation, sample_translation)
        K, R, t = krt_from_p(P)

        np.testing.assert_array_equal(np.tril(K, -1), np.zeros((3, 3)))
        assert np.all(np.diag(K) > 0)
        assert K[2, 2] == pytest.approx(1.0)
        assert np.linalg.det(R) == pytest.approx(1.0)
        np.testing.assert_allclose(3.7 * p_from_krt(K, R, t), P, rtol=1e-9, atol=1e-9)

    def test_negative_scale(self, sample_calibration_matrix, sample_rotation, sample_translation):
        """A negative global scale still yields a proper rotation."""
        P = -2.0 * p_from_krt(sample_calibration_matrix, sample_rotation, sample_translation)
        K, R, t = krt_from_p(P)

        assert np.linalg.det(R) == pytest.approx(1.0)
        np.testing.assert_allclose(K, sample_calibration_matrix, rtol=1e-9, atol=1e-9)
        np.testing.assert_allclose(R, sample_rotation, atol=1e-9)
        np.testing.assert_allclose(t, sample_translation, rtol=1e-9, atol=1e-9)

    def test_singular_block_raises(self):
        P = np.zeros((3, 4))
        P[0, 0] = 1.0
        P[1, 1] = 1.0
        with pytest.raises(NumericalSingularity):
            krt_from_p(P)


class TestKFromAbsoluteConic:
    def test_recovers_calibration(self, sample_calibration_matrix):
        K_true = sample_calibration_matrix
        W = np.linalg.inv(K_true @ K_true.T)

        K = k_from_absolute_conic(W)

        np.testing.assert_allclose(K, K_true, rtol=1e-7, atol=1e-6)

    def test_upper_triangular(self, sample_calibration_matrix):
        W = np.linalg.inv(sample_calibration_matrix @ sample_calibration_matrix.T)
        K = k_from_absolute_conic(W)

        np.testing.assert_allclose(np.tril(K, -1), np.zeros((3, 3)), atol=1e-12)
        assert np.all(np.diag(K) > 0)
        np.testing.assert_allclose(np.linalg.inv(K @ K.T), W, rtol=1e-6, atol=1e-12)

    def test_non_finite_raises(self, sample_calibration_matrix):
        W = np.linalg.inv(sample_calibration_matrix @ sample_calibration_matrix.T)
        W[0, 1] = np.nan
        with pytest.raises(NumericalSingularity):
            k_from_absolute_conic(W)

    def test_not_positive_definite_raises(self):
        with pytest.raises(NumericalSingularity):
            k_from_absolute_conic(-np.eye(3))

    def test_singular_raises(self):
        with pytest.raises(NumericalSingularity):
            k_from_absolute_conic(np.zeros((3, 3)))
