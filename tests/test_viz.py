from __future__ import annotations

import numpy as np
import pytest

from planarcv.ransac import RansacResult
from planarcv.viz import (
    DrawParams,
    draw_matches,
    draw_ransac_summary,
    make_side_by_side,
    ransac_summary_lines,
)


def _blank(h: int, w: int) -> np.ndarray:
    return np.zeros((h, w, 3), dtype=np.uint8)


def test_side_by_side_pads_shorter_image():
    out = make_side_by_side(_blank(100, 60), _blank(80, 40))
    assert out.shape == (100, 100, 3)


def test_side_by_side_accepts_grayscale():
    out = make_side_by_side(np.zeros((50, 50), dtype=np.uint8), _blank(50, 30))
    assert out.shape == (50, 80, 3)


def test_side_by_side_rejects_empty():
    with pytest.raises(ValueError):
        make_side_by_side(np.zeros((0, 0, 3), dtype=np.uint8), _blank(10, 10))


def test_inliers_green_outliers_red():
    pts0 = np.array([[20.0, 20.0], [60.0, 70.0]])
    pts1 = np.array([[30.0, 25.0], [10.0, 80.0]])
    inliers = np.array([True, False])

    vis = draw_matches(_blank(100, 100), _blank(100, 100), pts0, pts1, inliers)

    assert vis.shape == (100, 200, 3)
    assert vis[20, 20].tolist() == [0, 255, 0]
    assert vis[25, 130].tolist() == [0, 255, 0]
    assert vis[70, 60].tolist() == [0, 0, 255]


def test_outliers_can_be_hidden():
    pts0 = np.array([[20.0, 20.0], [60.0, 70.0]])
    pts1 = np.array([[30.0, 25.0], [10.0, 80.0]])
    inliers = np.array([True, False])

    vis = draw_matches(
        _blank(100, 100), _blank(100, 100), pts0, pts1, inliers,
        params=DrawParams(draw_outliers=False),
    )

    assert vis[20, 20].tolist() == [0, 255, 0]
    assert vis[70, 60].tolist() == [0, 0, 0]


def test_max_draw_picks_a_random_subset():
    pts0 = np.array([[20.0, 20.0], [60.0, 70.0]])
    pts1 = np.array([[30.0, 25.0], [10.0, 80.0]])
    params = DrawParams(max_draw=1)

    picked = set()
    for seed in range(20):
        vis = draw_matches(_blank(100, 100), _blank(100, 100), pts0, pts1,
                           params=params, rng=np.random.default_rng(seed))
        first = vis[20, 20].tolist() == [0, 255, 0]
        second = vis[70, 60].tolist() == [0, 255, 0]
        # exactly one of the two is drawn
        assert first != second
        picked.add(0 if first else 1)

    assert picked == {0, 1}


def test_max_draw_subset_is_reproducible():
    rng = np.random.default_rng(0)
    pts0 = rng.uniform(5, 95, size=(50, 2))
    pts1 = rng.uniform(5, 95, size=(50, 2))
    params = DrawParams(max_draw=10)

    a = draw_matches(_blank(100, 100), _blank(100, 100), pts0, pts1, params=params, rng=np.random.default_rng(3))
    b = draw_matches(_blank(100, 100), _blank(100, 100), pts0, pts1, params=params, rng=np.random.default_rng(3))

    assert np.array_equal(a, b)


def test_max_draw_counts_only_visible_matches():
    # hidden outliers do not use up the budget
    pts0 = np.array([[60.0, 70.0], [20.0, 20.0]])
    pts1 = np.array([[10.0, 80.0], [30.0, 25.0]])
    inliers = np.array([False, True])

    vis = draw_matches(
        _blank(100, 100), _blank(100, 100), pts0, pts1, inliers,
        params=DrawParams(max_draw=1, draw_outliers=False), rng=np.random.default_rng(0),
    )

    assert vis[20, 20].tolist() == [0, 255, 0]
    assert vis[70, 60].tolist() == [0, 0, 0]


def test_working_size_scales_points_per_image():
    # left image is 2x the working size, right image is half of it
    img0 = _blank(100, 200)
    img1 = _blank(25, 50)
    pts0 = np.array([[10.0, 10.0]])
    pts1 = np.array([[40.0, 40.0]])

    vis = draw_matches(img0, img1, pts0, pts1, params=DrawParams(working_size=(100, 50)))

    assert vis.shape == (100, 250, 3)
    assert vis[20, 20].tolist() == [0, 255, 0]
    assert vis[20, 220].tolist() == [0, 255, 0]
    assert vis[10, 10].tolist() == [0, 0, 0]


@pytest.mark.parametrize("size", [(0, 600), (800, -1), (800,)])
def test_invalid_working_size_raises(size):
    with pytest.raises(ValueError):
        DrawParams(working_size=size)


def test_draw_matches_validates_mask_length():
    pts = np.zeros((3, 2))
    with pytest.raises(ValueError):
        draw_matches(_blank(10, 10), _blank(10, 10), pts, pts, np.ones(2, dtype=bool))


def _result(model, num_inliers=10, n=12):
    inliers = np.array([True] * num_inliers + [False] * (n - num_inliers))
    return RansacResult(
        model=model,
        inliers=inliers,
        num_inliers=num_inliers,
        iterations=37,
        threshold=5.0,
        stop_reason="early_exit" if model is not None else "exhausted",
    )


def test_summary_lines_report_result_fields():
    lines = ransac_summary_lines(_result(np.eye(3)))

    assert lines == [
        "inliers 10/12 (83%)",
        "iters 37  stop: early_exit",
        "threshold 5 px",
    ]


def test_summary_lines_flag_missing_model():
    lines = ransac_summary_lines(_result(None, num_inliers=0))

    assert lines[0] == "inliers 0/12 (0%)"
    assert lines[-1] == "no homography"


def test_summary_box_darkens_corner_and_keeps_input():
    img = np.full((120, 400, 3), 100, dtype=np.uint8)
    out = draw_ransac_summary(img, _result(np.eye(3)), alpha=0.6)

    assert (img == 100).all()
    assert out[2, 2].tolist() == [40, 40, 40]
    assert out[-1, -1].tolist() == [100, 100, 100]


@pytest.mark.parametrize("model, channel", [(np.eye(3), 1), (None, 2)])
def test_summary_text_color_follows_outcome(model, channel):
    out = draw_ransac_summary(_blank(720, 1280), _result(model))
    box = out[:200, :700]

    other = 2 if channel == 1 else 1
    assert box[..., channel].max() > 200
    assert box[..., other].max() == 0
    assert box[..., 0].max() == 0


def test_summary_rejects_empty_image():
    with pytest.raises(ValueError):
        draw_ransac_summary(np.zeros((0, 0, 3), dtype=np.uint8), _result(np.eye(3)))
