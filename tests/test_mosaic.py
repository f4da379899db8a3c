"""
Tests for mvgeom.mosaic.
"""

import numpy as np
import pytest

from mvgeom.errors import NumericalSingularity
from mvgeom.mosaic import chain_transforms, global_bounding_box, registration_transform
from mvgeom.types import BoundingBox


def _translation(dx, dy):
    return np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]])


class TestChainTransforms:
    def test_empty(self):
        absolute = chain_transforms([])
        assert len(absolute) == 1
        np.testing.assert_array_equal(absolute[0], np.eye(3))

    def test_accumulates_in_order(self, sample_homography):
        A = _translation(10.0, 0.0)
        absolute = chain_transforms([A, sample_homography])

        assert len(absolute) == 3
        np.testing.assert_array_equal(absolute[1], A)
        np.testing.assert_allclose(absolute[2], sample_homography @ A)


class TestGlobalBoundingBox:
    def test_single_frame(self):
        bbox = global_bounding_box((640, 480), [])
        assert bbox == BoundingBox(xmin=0.0, xmax=640.0, ymin=0.0, ymax=480.0)

    def test_translated_frames(self):
        bbox = global_bounding_box((640, 480), [_translation(100.0, -20.0)])

        assert bbox.xmin == 0.0
        assert bbox.xmax == 740.0
        assert bbox.ymin == -20.0
        assert bbox.ymax == 480.0
        assert bbox.width == 740.0
        assert bbox.height == 500.0

    def test_rounds_up(self):
        bbox = global_bounding_box((640, 480), [_translation(0.4, -0.6)])
        assert bbox.xmax == 641.0
        assert bbox.ymin == 0.0

    def test_corner_at_infinity_raises(self):
        H = np.diag([1.0, 1.0, 0.0])
        with pytest.raises(NumericalSingularity):
            global_bounding_box((640, 480), [H])


class TestRegistrationTransform:
    def test_moves_minimum_to_origin(self):
        bbox = BoundingBox(xmin=-35.0, xmax=700.0, ymin=-20.0, ymax=480.0)
        T = registration_transform(bbox)

        np.testing.assert_allclose(T @ [-35.0, -20.0, 1.0], [0.0, 0.0, 1.0])
