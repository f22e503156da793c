# Andy Zhao
"""
Adapter: makes homography functions conform to the ModelFitter Protocol.

This keeps ransac/core.py generic and reusable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import Points2D, Mat3x3, FloatArray, ModelFitter
from .homography import fit_homography_minimal, fit_homography_least_squares, residuals_reprojection


@dataclass(frozen=True)
class HomographyFitter(ModelFitter[Mat3x3]):

    def fit_minimal(self, pts0: Points2D, pts1: Points2D) -> Optional[Mat3x3]:
        return fit_homography_minimal(pts0, pts1)

    def fit_least_squares(self, pts0: Points2D, pts1: Points2D) -> Optional[Mat3x3]:
        return fit_homography_least_squares(pts0, pts1)

    def residuals(self, model: Mat3x3, pts0: Points2D, pts1: Points2D) -> FloatArray:
        return residuals_reprojection(model, pts0, pts1)
