# Andy Zhao
"""
RANSAC package

This module provides:
- A reusable generic RANSAC implementation
- Typed geometry primitives and configuration
- Model interface definitions
- Normalized-DLT homography model (minimal + least squares)
- Injectable random index sampling
"""

from .types import (
    FloatArray, BoolArray, IndexArray, Points2D, PointsHomog, Mask2D, Mat3x3,
    ModelFitter, RansacConfig, RansacResult, HOMOGRAPHY_MIN_SAMPLES,
    as_points2d, as_homogeneous, is_valid_mat3x3,
)

from .normalization import normalize_points, similarity_inverse

from .linalg import solve_linear_system

from .homography import (
    build_dlt_system, fit_homography_minimal, fit_homography_least_squares,
    project_points, reprojection_error, residuals_reprojection,
)

from .homography_fitter import HomographyFitter

from .sampling import IndexSampler, RngIndexSampler, default_sampler, seeded_sampler

from .core import ransac

from .estimate import as_point_arrays, estimate_homography, find_homography

__all__ = [
    "FloatArray", "BoolArray", "IndexArray", "Points2D", "PointsHomog", "Mask2D", "Mat3x3",
    "ModelFitter", "RansacConfig", "RansacResult", "HOMOGRAPHY_MIN_SAMPLES",
    "as_points2d", "as_homogeneous", "is_valid_mat3x3",
    "normalize_points", "similarity_inverse",
    "solve_linear_system",
    "build_dlt_system", "fit_homography_minimal", "fit_homography_least_squares",
    "project_points", "reprojection_error", "residuals_reprojection",
    "HomographyFitter",
    "IndexSampler", "RngIndexSampler", "default_sampler", "seeded_sampler",
    "ransac",
    "as_point_arrays", "estimate_homography", "find_homography",
]
