"""
Chaining of relative 2D transforms for video mosaicing.

A robust driver estimates one relative transform per consecutive pair of
frames (H_i maps frame i to frame i + 1). These functions turn them into
absolute transforms and the extent of the mosaic canvas. Warping and
blending pixels is left to the renderer.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from .coordinates import homogeneous_to_euclidean
from .types import BoundingBox

logger = logging.getLogger(__name__)


def chain_transforms(relative: Sequence[np.ndarray]) -> list[np.ndarray]:
    """
    Accumulate relative transforms into transforms from the first frame.

    Args:
        relative: [H_1, ..., H_{n-1}] with q_{i+1} = H_i q_i

    Returns:
        [I, H_1, H_2 H_1, ..., H_{n-1} ... H_1], one per frame
    """
    absolute = [np.eye(3)]
    for H in relative:
        absolute.append(np.asarray(H, dtype=np.float64) @ absolute[-1])
    return absolute


def global_bounding_box(
    image_size: tuple[int, int],
    relative: Sequence[np.ndarray],
) -> BoundingBox:
    """
    Extent of all frames once warped into the first frame's coordinates.

    Args:
        image_size: (width, height) shared by all frames
        relative: Relative transforms between consecutive frames

    Returns:
        BoundingBox with coordinates rounded up to whole pixels

    Raises:
        NumericalSingularity: If a frame corner is mapped to infinity
    """
    width, height = image_size
    corners = np.array([
        [0.0, 0.0, width, width],
        [0.0, height, height, 0.0],
        [1.0, 1.0, 1.0, 1.0],
    ])

    warped = [
        np.ceil(homogeneous_to_euclidean(H @ corners))
        for H in chain_transforms(relative)
    ]
    points = np.hstack(warped)

    bbox = BoundingBox(
        xmin=float(points[0].min()),
        xmax=float(points[0].max()),
        ymin=float(points[1].min()),
        ymax=float(points[1].max()),
    )
    logger.debug(f"Mosaic bounding box: {bbox}")
    return bbox


def registration_transform(bbox: BoundingBox) -> np.ndarray:
    """
    Translation moving the bounding box minimum to the canvas origin.
    """
    return np.array([
        [1.0, 0.0, -bbox.xmin],
        [0.0, 1.0, -bbox.ymin],
        [0.0, 0.0, 1.0],
    ])
