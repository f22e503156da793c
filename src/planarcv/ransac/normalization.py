# Andy Zhao
"""
Isotropic point normalization (Hartley) for DLT conditioning.

    T = [[s, 0, -s*cx],
         [0, s, -s*cy],
         [0, 0,     1]]

with (cx, cy) the centroid and s = sqrt(2) / mean_dist, so that the
normalized set has centroid (0, 0) and mean distance sqrt(2) from it.

T is a similarity (isotropic scale + translation), so its inverse has a
closed form and never needs a general 3x3 inversion:

    T^-1 = [[1/s, 0, cx],
            [0, 1/s, cy],
            [0,   0,  1]]
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .types import Points2D, Mat3x3

# Below this mean spread the points coincide and the scale is undefined.
_EPS_SPREAD = 1e-12


def normalize_points(points: Points2D) -> Optional[tuple[Points2D, Mat3x3]]:
    """
    Center a point set on its centroid and scale it to mean distance sqrt(2).

    Returns:
      (normalized (N,2) points, 3x3 normalization transform),
      or None if the set has no spread (all points coincide) or holds a
      non-finite coordinate.
    """
    if points.ndim != 2 or points.shape[1] != 2 or points.shape[0] == 0:
        raise ValueError(f"normalize_points expects non-empty (N,2) points, got {points.shape}")

    pts = points.astype(np.float64)
    if not np.isfinite(pts).all():
        return None

    centroid = pts.mean(axis=0)
    centered = pts - centroid

    mean_dist = float(np.mean(np.linalg.norm(centered, axis=1)))
    if not math.isfinite(mean_dist) or mean_dist < _EPS_SPREAD:
        return None

    scale = math.sqrt(2.0) / mean_dist
    cx, cy = float(centroid[0]), float(centroid[1])

    T = np.array(
        [
            [scale, 0.0, -scale * cx],
            [0.0, scale, -scale * cy],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
    return centered * scale, T


def similarity_inverse(T: Mat3x3) -> Mat3x3:
    """
    Invert a normalization transform using its similarity structure.

    T = [[s, 0, tx], [0, s, ty], [0, 0, 1]]  ->  T^-1 = [[1/s, 0, -tx/s], [0, 1/s, -ty/s], [0, 0, 1]]
    """
    s = float(T[0, 0])
    inv_s = 1.0 / s
    return np.array(
        [
            [inv_s, 0.0, -float(T[0, 2]) * inv_s],
            [0.0, inv_s, -float(T[1, 2]) * inv_s],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
