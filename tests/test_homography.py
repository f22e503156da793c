from __future__ import annotations

import math
import warnings

import cv2
import numpy as np
import pytest

from planarcv.ransac.homography import (
    build_dlt_system,
    fit_homography_least_squares,
    fit_homography_minimal,
    project_points,
    reprojection_error,
    residuals_reprojection,
)
from planarcv.ransac.homography_fitter import HomographyFitter


H_TRUE = np.array(
    [[1.10, 0.05, 20.0],
     [-0.03, 0.95, 10.0],
     [1e-4, 5e-5, 1.0]],
    dtype=np.float64,
)


def _quad():
    return np.array([[10.0, 20.0], [400.0, 35.0], [380.0, 330.0], [50.0, 300.0]])


def test_minimal_fit_recovers_exact_homography():
    src = _quad()
    dst = project_points(H_TRUE, src)

    H = fit_homography_minimal(src, dst)
    assert H is not None

    for s, d in zip(src, dst):
        assert reprojection_error(H, s, d) < 1e-3
    assert np.allclose(H / H[2, 2], H_TRUE, atol=1e-6)


def test_minimal_fit_agrees_with_opencv():
    src = _quad()
    dst = np.array([[0.0, 0.0], [300.0, 10.0], [320.0, 240.0], [-5.0, 250.0]])

    H = fit_homography_minimal(src, dst)
    H_cv = cv2.getPerspectiveTransform(src.astype(np.float32), dst.astype(np.float32))

    query = np.array([[100.0, 100.0], [250.0, 200.0], [0.0, 0.0]])
    assert np.allclose(project_points(H, query), project_points(H_cv, query), atol=1e-2)


def test_dlt_rows_encode_projection_equations():
    src = np.array([[0.5, -0.2], [1.0, 1.0], [-1.0, 0.3], [0.1, -1.2]])
    dst = np.array([[0.4, 0.1], [0.9, 1.3], [-1.1, 0.2], [0.0, -1.0]])
    A, b = build_dlt_system(src, dst)

    assert A.shape == (8, 8)
    assert b.shape == (8,)
    x, y = src[1]
    u, v = dst[1]
    assert np.allclose(A[2], [-x, -y, -1.0, 0.0, 0.0, 0.0, u * x, u * y])
    assert np.allclose(A[3], [0.0, 0.0, 0.0, -x, -y, -1.0, v * x, v * y])
    assert b[2] == -u and b[3] == -v


def test_collinear_sample_is_degenerate():
    src = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
    dst = np.array([[5.0, 1.0], [40.0, 7.0], [13.0, 60.0], [2.0, 33.0]])

    assert fit_homography_minimal(src, dst) is None


def test_coincident_sample_is_degenerate():
    src = _quad()
    dst = np.tile([[7.0, 7.0]], (4, 1))

    assert fit_homography_minimal(src, dst) is None


def test_minimal_fit_rejects_wrong_sample_size():
    with pytest.raises(ValueError):
        fit_homography_minimal(np.zeros((5, 2)), np.zeros((5, 2)))


def test_projection_at_infinity_is_never_an_inlier():
    # w = x, so any source point with x == 0 maps to infinity
    H = np.array([[1.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0],
                  [1.0, 0.0, 0.0]])

    assert reprojection_error(H, (0.0, 5.0), (0.0, 5.0)) == math.inf

    pts0 = np.array([[0.0, 5.0], [2.0, 4.0]])
    pts1 = np.array([[0.0, 5.0], [1.0, 2.0]])
    err = residuals_reprojection(H, pts0, pts1)

    assert err[0] == np.inf
    assert err[1] == pytest.approx(0.0)
    assert not (err < 5.0)[0]


def test_non_finite_correspondences_score_as_infinite():
    pts0 = np.array([[np.nan, 5.0], [10.0, 20.0], [np.inf, 1.0], [30.0, 40.0]])
    pts1 = project_points(H_TRUE, np.array([[0.0, 5.0], [10.0, 20.0], [0.0, 1.0], [30.0, 40.0]]))
    pts1[3] = [np.inf, -np.inf]

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        err = residuals_reprojection(H_TRUE, pts0, pts1)
        scalar = reprojection_error(H_TRUE, pts0[0], pts1[0])

    assert err[0] == np.inf and err[2] == np.inf and err[3] == np.inf
    assert err[1] == pytest.approx(0.0, abs=1e-9)
    assert scalar == math.inf


def test_scalar_and_vector_errors_agree():
    rng = np.random.default_rng(11)
    pts0 = rng.uniform(0, 640, size=(30, 2))
    pts1 = rng.uniform(0, 640, size=(30, 2))

    err = residuals_reprojection(H_TRUE, pts0, pts1)
    expected = [reprojection_error(H_TRUE, s, d) for s, d in zip(pts0, pts1)]

    assert err.shape == (30,)
    assert np.allclose(err, expected)


def test_least_squares_recovers_homography():
    rng = np.random.default_rng(5)
    pts0 = rng.uniform([0, 0], [640, 480], size=(40, 2))
    pts1 = project_points(H_TRUE, pts0)

    H = fit_homography_least_squares(pts0, pts1)
    assert H is not None
    assert H[2, 2] == pytest.approx(1.0)
    assert np.max(residuals_reprojection(H, pts0, pts1)) < 1e-6


def test_least_squares_with_noise_agrees_with_opencv():
    rng = np.random.default_rng(6)
    pts0 = rng.uniform([0, 0], [640, 480], size=(60, 2))
    pts1 = project_points(H_TRUE, pts0) + rng.normal(0.0, 0.5, size=(60, 2))

    H = fit_homography_least_squares(pts0, pts1)
    H_cv, _ = cv2.findHomography(pts0.astype(np.float32), pts1.astype(np.float32), 0)

    query = rng.uniform([0, 0], [640, 480], size=(10, 2))
    assert np.allclose(project_points(H, query), project_points(H_cv, query), atol=0.5)


def test_least_squares_needs_four_points():
    pts = _quad()[:3]
    assert fit_homography_least_squares(pts, pts) is None


def test_fitter_adapter_delegates():
    fitter = HomographyFitter()
    src = _quad()
    dst = project_points(H_TRUE, src)

    H = fitter.fit_minimal(src, dst)
    assert np.all(fitter.residuals(H, src, dst) < 1e-6)
    assert fitter.fit_least_squares(src, dst) is not None
