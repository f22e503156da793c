# Andy Zhao
"""
Homography model utilities (3x3 projective form).

We estimate a homography H such that:

    [x', y', w']^T  ~  H @ [x, y, 1]^T,     (u, v) = (x'/w', y'/w')

where:

    H = [[h1, h2, h3],
         [h4, h5, h6],
         [h7, h8, h9]]

H is defined up to scale. The minimal solver fixes h9 = 1 in the normalized
frame, which leaves 8 unknowns and turns 4 correspondences into a square 8x8
linear system (no nullspace / SVD needed).

For each normalized correspondence (x, y) -> (u, v):

    u * (h7*x + h8*y + 1) = h1*x + h2*y + h3
    v * (h7*x + h8*y + 1) = h4*x + h5*y + h6

rearranged into rows of A h = b:

    [-x, -y, -1,  0,  0,  0, u*x, u*y] . h = -u
    [ 0,  0,  0, -x, -y, -1, v*x, v*y] . h = -v
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .types import (
    Points2D, Mat3x3, FloatArray, HOMOGRAPHY_MIN_SAMPLES,
    as_homogeneous, is_valid_mat3x3)
from .normalization import normalize_points, similarity_inverse
from .linalg import solve_linear_system

# |w| below this means the point projects to infinity
W_EPS = 1e-8


# ---------- Minimal (4-point) fit ----------
def build_dlt_system(src: Points2D, dst: Points2D) -> tuple[FloatArray, FloatArray]:
    """
    Build the inhomogeneous DLT system (h9 = 1) from 4 correspondences.

    Returns:
      A (8,8), b (8,)
    """
    A = np.zeros((8, 8), dtype=np.float64)
    b_vec = np.zeros((8,), dtype=np.float64)

    for i in range(HOMOGRAPHY_MIN_SAMPLES):
        x, y = float(src[i, 0]), float(src[i, 1])
        u, v = float(dst[i, 0]), float(dst[i, 1])

        A[2 * i + 0, :] = [-x, -y, -1.0, 0.0, 0.0, 0.0, u * x, u * y]
        b_vec[2 * i + 0] = -u

        A[2 * i + 1, :] = [0.0, 0.0, 0.0, -x, -y, -1.0, v * x, v * y]
        b_vec[2 * i + 1] = -v

    return A, b_vec


def fit_homography_minimal(pts0: Points2D, pts1: Points2D) -> Optional[Mat3x3]:
    """
    Fit a homography from exactly 4 point correspondences (normalized DLT).

    pts0: (4,2) source points
    pts1: (4,2) target points

    Returns:
      3x3 homography in pixel coordinates, or None if the sample is degenerate
      (coincident points, singular system, non-finite result).
    """
    if pts0.shape != (4, 2) or pts1.shape != (4, 2):
        raise ValueError(f"fit_homography_minimal expects (4,2) inputs, got {pts0.shape} and {pts1.shape}")

    # Normalize both sides independently
    norm0 = normalize_points(pts0)
    norm1 = normalize_points(pts1)
    if norm0 is None or norm1 is None:
        return None
    src_n, T1 = norm0
    dst_n, T2 = norm1

    A, b_vec = build_dlt_system(src_n, dst_n)
    h = solve_linear_system(A, b_vec)
    if h is None:
        return None

    H_norm = np.append(h, 1.0).reshape(3, 3)

    # Denormalize: H = T2^-1 @ H' @ T1
    H = similarity_inverse(T2) @ H_norm @ T1

    if not is_valid_mat3x3(H):
        return None
    return H


# ---------- Least squares refit ----------
def fit_homography_least_squares(pts0: Points2D, pts1: Points2D) -> Optional[Mat3x3]:
    """
    Fit a homography from N >= 4 correspondences (normalized DLT, SVD).

    Used after RANSAC picks inliers: h is the right singular vector of the
    (2N x 9) system with the smallest singular value, i.e. it minimizes
    ||A h|| subject to ||h|| = 1. The result is scaled so H[2,2] = 1.
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    if pts0.ndim != 2 or pts0.shape[1] != 2:
        raise ValueError(f"Expected pts shape (N,2), got {pts0.shape}")
    if pts0.shape[0] < HOMOGRAPHY_MIN_SAMPLES:
        return None

    norm0 = normalize_points(pts0)
    norm1 = normalize_points(pts1)
    if norm0 is None or norm1 is None:
        return None
    src_n, T1 = norm0
    dst_n, T2 = norm1

    n = src_n.shape[0]
    x, y = src_n[:, 0], src_n[:, 1]
    u, v = dst_n[:, 0], dst_n[:, 1]
    zeros = np.zeros((n,), dtype=np.float64)
    ones = np.ones((n,), dtype=np.float64)

    A = np.zeros((2 * n, 9), dtype=np.float64)
    A[0::2] = np.stack([-x, -y, -ones, zeros, zeros, zeros, u * x, u * y, u], axis=1)
    A[1::2] = np.stack([zeros, zeros, zeros, -x, -y, -ones, v * x, v * y, v], axis=1)

    try:
        _, singular_vals, Vt = np.linalg.svd(A)
    except np.linalg.LinAlgError:
        return None

    # 8 DOF: a one-dimensional nullspace needs rank 8
    tol = singular_vals[0] * max(A.shape) * np.finfo(np.float64).eps
    if int(np.count_nonzero(singular_vals > tol)) < 8:
        return None

    H_norm = Vt[-1].reshape(3, 3)
    H = similarity_inverse(T2) @ H_norm @ T1

    if abs(H[2, 2]) < W_EPS:
        return None
    H = H / H[2, 2]

    if not is_valid_mat3x3(H):
        return None
    return H


# ---------- Projection + residuals ----------
def project_points(H: Mat3x3, pts: Points2D) -> Points2D:
    """
    Map (N,2) points through H, returning (N,2) points.

    Points whose homogeneous w is below W_EPS land at infinity and come back as +inf.
    Non-finite input points come back as +inf too.
    """
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"Expected pts shape (N,2), got {pts.shape}")
    if H.shape != (3, 3):
        raise ValueError(f"Expected H shape (3,3), got {H.shape}")

    finite = np.isfinite(pts).all(axis=1)

    # (N,3) = (N,3) @ (3,3)^T, only over finite rows
    ph = np.zeros((pts.shape[0], 3), dtype=np.float64)
    ph[finite] = as_homogeneous(pts[finite]) @ H.T
    w = ph[:, 2]
    at_inf = ~finite | (np.abs(w) < W_EPS)

    w_safe = np.where(at_inf, 1.0, w)
    out = ph[:, :2] / w_safe[:, None]
    out[at_inf] = np.inf
    return out


def reprojection_error(H: Mat3x3, src, dst) -> float:
    """
    Euclidean distance between H(src) and dst, for a single correspondence.

    Returns +inf when src projects to infinity (|w| < W_EPS) or either point is not finite.
    """
    x, y = float(src[0]), float(src[1])
    if not all(math.isfinite(v) for v in (x, y, float(dst[0]), float(dst[1]))):
        return math.inf

    w = H[2, 0] * x + H[2, 1] * y + H[2, 2]
    if abs(w) < W_EPS:
        return math.inf

    proj_x = (H[0, 0] * x + H[0, 1] * y + H[0, 2]) / w
    proj_y = (H[1, 0] * x + H[1, 1] * y + H[1, 2]) / w

    return math.hypot(proj_x - float(dst[0]), proj_y - float(dst[1]))


def residuals_reprojection(H: Mat3x3, pts0: Points2D, pts1: Points2D) -> FloatArray:
    """
    Per-point reprojection error, vectorized form of reprojection_error:

        e_i = || H(pts0[i]) - pts1[i] ||_2      (+inf if pts0[i] maps to infinity or pts1[i] is not finite)

    Returns shape (N,)
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")

    projected = project_points(H, pts0)
    at_inf = ~np.isfinite(projected).all(axis=1) | ~np.isfinite(pts1).all(axis=1)

    err = np.full((pts0.shape[0],), np.inf, dtype=np.float64)
    ok = ~at_inf
    err[ok] = np.linalg.norm(projected[ok] - pts1[ok].astype(np.float64), axis=1)
    return err
