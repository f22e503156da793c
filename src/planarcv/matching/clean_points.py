# Andy Zhao
"""
Utilities for preparing correspondence sets around robust estimation.

Before RANSAC, remove:
- NaNs/Infs
- extreme motion outliers (optional, helps stability and speed)

After RANSAC:
- keep only the correspondences selected by an inlier mask
"""

from __future__ import annotations
import numpy as np
from ..ransac.types import Points2D, BoolArray


def clean_points(
    pts0: Points2D,
    pts1: Points2D,
    *,
    max_motion_px: float | None = None,
) -> tuple[Points2D, Points2D, BoolArray]:
    pts0 = np.asarray(pts0, dtype=np.float64)
    pts1 = np.asarray(pts1, dtype=np.float64)

    if pts0.ndim != 2 or pts1.ndim != 2 or pts0.shape != pts1.shape or pts0.shape[1] != 2:
        raise ValueError(f"Expected pts0/pts1 shape (N,2) matching; got {pts0.shape} vs {pts1.shape}")

    mask = np.isfinite(pts0).all(axis=1) & np.isfinite(pts1).all(axis=1)

    # big-jump pruning (only meaningful when both sides share a coordinate frame)
    if max_motion_px is not None:
        motion = np.linalg.norm(np.where(mask[:, None], pts1 - pts0, 0.0), axis=1)
        mask &= motion <= float(max_motion_px)

    return pts0[mask], pts1[mask], mask


def apply_mask(
    pts0: Points2D,
    pts1: Points2D,
    mask: BoolArray,
) -> tuple[Points2D, Points2D]:
    """
    Keep correspondences where mask is True (e.g. RANSAC inliers).
    """
    mask = np.asarray(mask, dtype=bool).reshape(-1)
    if pts0.shape[0] != mask.shape[0] or pts1.shape[0] != mask.shape[0]:
        raise ValueError(
            f"mask must have length N; got {mask.shape[0]} vs {pts0.shape[0]}/{pts1.shape[0]}"
        )
    return pts0[mask], pts1[mask]
