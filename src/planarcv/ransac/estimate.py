# Andy Zhao
"""
Entry points for robust homography estimation.

    mask = find_homography(pts0, pts1)                       # inlier mask only
    result = estimate_homography(pts0, pts1, config=cfg)     # mask + model + stats

Both accept either two aligned (N,2) arrays, or (via as_point_arrays) a
sequence of ((x, y), (u, v)) correspondences.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from .types import Points2D, Mask2D, Mat3x3, RansacConfig, RansacResult, as_points2d
from .core import ransac
from .homography_fitter import HomographyFitter
from .sampling import IndexSampler


def as_point_arrays(correspondences: Iterable[Sequence[Sequence[float]]]) -> tuple[Points2D, Points2D]:
    """
    Split ((x, y), (u, v)) correspondences into aligned (N,2) src / dst arrays.
    Order is kept, so index i of any mask refers to correspondence i.
    """
    pairs = np.asarray(list(correspondences), dtype=np.float64)
    if pairs.size == 0:
        empty = np.zeros((0, 2), dtype=np.float64)
        return empty, empty.copy()
    if pairs.ndim != 3 or pairs.shape[1:] != (2, 2):
        raise ValueError(f"Expected correspondences shape (N, 2, 2), got {pairs.shape}")
    return pairs[:, 0, :].copy(), pairs[:, 1, :].copy()


def estimate_homography(
        pts0,
        pts1,
        config: Optional[RansacConfig] = None,
        *,
        sampler: Optional[IndexSampler] = None,
) -> RansacResult[Mat3x3]:
    """
    Robustly fit a homography pts0 -> pts1.

    Returns the full RansacResult (best model, inlier mask, iteration count,
    stop reason). Never raises for estimation failures: the worst case is
    model=None with an all-False mask.
    """
    src = as_points2d(pts0, name="pts0")
    dst = as_points2d(pts1, name="pts1")
    if config is None:
        config = RansacConfig()

    return ransac(HomographyFitter(), src, dst, config=config, sampler=sampler)


def find_homography(
        pts0,
        pts1,
        config: Optional[RansacConfig] = None,
        *,
        sampler: Optional[IndexSampler] = None,
) -> Mask2D:
    """
    Inlier mask of the best homography, one bool per correspondence.

    All False means "no reliable geometric consensus" (too few matches or no
    usable sample).
    """
    return estimate_homography(pts0, pts1, config, sampler=sampler).inliers
