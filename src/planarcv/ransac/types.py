# Andy Zhao

"""
Shared typed primitives for the homography/RANSAC pipeline.

Defines:
- Typed NumPy aliases for geometry
    - Points are (N,2) float arrays
    - Transforms are 3x3 homogeneous matrices
- Generic model protocol for RANSAC
- RANSAC configuration (tunable knobs)
- Structured RANSAC result container (model + inliers + stats)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TypeVar, Generic, Optional, TypeAlias, Literal

import numpy as np
import numpy.typing as npt

# ---------- Numpy typing aliases ----------
# - float64 for geometry / matrices (more stable for linear algebra)
# - bool_ for masks

FloatArray: TypeAlias = npt.NDArray[np.float64]
BoolArray: TypeAlias = npt.NDArray[np.bool_]
IndexArray: TypeAlias = npt.NDArray[np.intp]

# Points in 2D image coordinates.
Points2D: TypeAlias = FloatArray      # shape: (N, 2)

# Homogeneous points [x, y, 1] for 3x3 transforms.
PointsHomog: TypeAlias = FloatArray   # shape: (N, 3)

# Boolean inlier mask: True as inlier, False as outlier
Mask2D: TypeAlias = BoolArray         # shape: (N,)

# 3x3 homogeneous transform matrix (homography or normalization similarity).
Mat3x3: TypeAlias = FloatArray        # shape: (3, 3)

StopReason: TypeAlias = Literal["insufficient", "exhausted", "early_exit", "confidence"]

# Homography has 8 DOF -> 4 correspondences
HOMOGRAPHY_MIN_SAMPLES = 4

M = TypeVar("M")


class ModelFitter(Protocol[M]):
    """
    Interface that a model must implement to be usable by the generic RANSAC implementation.

    RANSAC steps:
    1) Fit a model from a minimal sample
    2) Score all correspondences with a per-point residual error
    3) Optionally refit the winning model from all inliers
    """

    def fit_minimal(self, pts0: Points2D, pts1: Points2D) -> Optional[M]:
        """
        Fit from the minimal number of correspondences required.
        Return None if the sample is degenerate (coincident points, singular system).
        """
        ...

    def fit_least_squares(self, pts0: Points2D, pts1: Points2D) -> Optional[M]:
        """
        Refit the model using all inliers.
        Return None if the set is degenerate or the solve fails.
        """
        ...

    def residuals(self, model: M, pts0: Points2D, pts1: Points2D) -> FloatArray:
        """
        Return a vector of residual errors, one per correspondence.
        Shape: (N,). Smaller = better. +inf marks "can never be an inlier".
        """
        ...


# ---------- RANSAC configuration ----------
@dataclass(frozen=True)
class RansacConfig:
    """
    Tunable knobs of the RANSAC loop.

    Parameters:
    - max_iterations:
        Hard upper bound on loop iterations. The only termination guarantee.
    - confidence:
        Desired probability of having drawn one all-inlier sample.
        Only used when adaptive_stop=True, otherwise kept for documentation.
    - threshold:
        Reprojection error cutoff in pixels. Must match the coordinate
        space of the input correspondences.
    - min_sample:
        Minimal sample size. Homography needs exactly 4.
    - early_exit_inlier_ratio:
        Stop as soon as the best inlier ratio is strictly above this.
    - adaptive_stop:
        Also stop once the classic k = log(1-p)/log(1-w^s) bound is reached.
    - refine_model:
        Refit the returned model on all inliers (least squares).
        The inlier mask is not recomputed.
    """
    max_iterations: int = 2000
    confidence: float = 0.995
    threshold: float = 5.0
    min_sample: int = HOMOGRAPHY_MIN_SAMPLES
    early_exit_inlier_ratio: float = 0.7
    adaptive_stop: bool = False
    refine_model: bool = False

    def __post_init__(self) -> None:
        # bool is an int subclass
        if not isinstance(self.max_iterations, (int, np.integer)) or isinstance(self.max_iterations, bool):
            raise ValueError(
                f"RansacConfig.max_iterations must be an integer, got {type(self.max_iterations).__name__}"
            )
        if self.max_iterations < 1:
            raise ValueError(f"RansacConfig.max_iterations must be >= 1, got {self.max_iterations}")
        if not (0.0 < self.confidence < 1.0):
            raise ValueError(f"RansacConfig.confidence must be in (0, 1), got {self.confidence}")
        if not (self.threshold > 0.0):
            raise ValueError(f"RansacConfig.threshold must be > 0, got {self.threshold}")
        if self.min_sample != HOMOGRAPHY_MIN_SAMPLES:
            raise ValueError(f"RansacConfig.min_sample is fixed to {HOMOGRAPHY_MIN_SAMPLES}, got {self.min_sample}")
        if not (0.0 <= self.early_exit_inlier_ratio <= 1.0):
            raise ValueError(
                f"RansacConfig.early_exit_inlier_ratio must be in [0, 1], got {self.early_exit_inlier_ratio}"
            )


# ---------- RANSAC output container ----------
# frozen=True means "immutable" after construction
@dataclass(frozen=True)
class RansacResult(Generic[M]):
    model: Optional[M]      # best model found, None if no candidate ever scored
    inliers: Mask2D         # boolean mask of inliers under the best model
    num_inliers: int        # count of True values in inliers
    iterations: int         # how many RANSAC iterations were actually run
    threshold: float        # the inlier threshold used
    stop_reason: StopReason

    @property
    def inlier_ratio(self) -> float:
        n = int(self.inliers.shape[0])
        return self.num_inliers / n if n > 0 else 0.0


# ---------- Helper Function ----------
def as_points2d(pts, *, name: str = "pts") -> Points2D:
    """
    Convert array-like input to a float64 (N,2) array, validating the shape.
    An empty input becomes shape (0,2).
    """
    arr = np.asarray(pts, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected {name} shape (N, 2) but got {arr.shape}")
    return arr


def as_homogeneous(pts: Points2D) -> PointsHomog:
    """
    Convert (N,2) points -> (N,3) homogeneous points: [x, y, 1].
    """
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"Expected points shape (N, 2) but got {pts.shape}")

    ones = np.ones((pts.shape[0], 1), dtype=np.float64)
    return np.hstack([pts.astype(np.float64), ones])


def is_valid_mat3x3(T: Mat3x3) -> bool:
    """
    Verify a 3x3 transform matrix.
    Used for rejecting failed fits.
    """
    return isinstance(T, np.ndarray) and T.shape == (3, 3) and bool(np.isfinite(T).all())
