"""
Visualization utilities for match sets.
  - building side-by-side match images (inliers green, outliers red)
  - overlaying a RANSAC summary
  - optionally showing or saving them
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from ..ransac.types import Points2D, BoolArray, RansacResult

Color = tuple[int, int, int]


@dataclass(frozen=True)
class DrawParams:
    """
    Drawing settings for draw_matches (BGR colors).

    - max_draw: cap on drawn correspondences, keeps dense match sets readable.
      Above the cap a random subset is drawn, not the first max_draw.
    - draw_outliers: False hides correspondences rejected by RANSAC.
    - working_size: (width, height) the points were detected at, e.g. the
      800x600 input of a feature network. Points are scaled from it to each
      image's real size. None means points are already in image pixels.
    """
    inlier_color: Color = (0, 255, 0)
    outlier_color: Color = (0, 0, 255)
    line_thickness: int = 1
    point_radius: int = 3
    max_draw: int = 500
    draw_outliers: bool = True
    working_size: Optional[tuple[int, int]] = None

    def __post_init__(self) -> None:
        if self.max_draw < 0:
            raise ValueError("DrawParams.max_draw must be >= 0")
        if self.line_thickness < 1:
            raise ValueError("DrawParams.line_thickness must be >= 1")
        if self.working_size is not None:
            if len(self.working_size) != 2 or min(self.working_size) <= 0:
                raise ValueError(f"DrawParams.working_size must be (width, height) > 0, got {self.working_size}")


def _as_bgr(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return img


def make_side_by_side(left_bgr: np.ndarray, right_bgr: np.ndarray) -> np.ndarray:
    """
    Create a side-by-side image: [ Left | Right ].

    Unlike cropping to a shared size, the shorter image is padded with black
    so keypoint coordinates stay valid in both halves.
    """
    if left_bgr is None or right_bgr is None:
        raise ValueError("make_side_by_side received None image(s).")
    if left_bgr.size == 0 or right_bgr.size == 0:
        raise ValueError("make_side_by_side received empty image(s).")

    L = _as_bgr(left_bgr)
    R = _as_bgr(right_bgr)

    h = max(L.shape[0], R.shape[0])
    canvas = np.zeros((h, L.shape[1] + R.shape[1], 3), dtype=L.dtype)
    canvas[:L.shape[0], :L.shape[1]] = L
    canvas[:R.shape[0], L.shape[1]:] = R
    return canvas


def _scale_to_image(pts: Points2D, img: np.ndarray, working_size: Optional[tuple[int, int]]) -> Points2D:
    """Map points from working resolution (width, height) to img's pixel grid."""
    pts = np.asarray(pts, dtype=np.float64)
    if working_size is None:
        return pts
    h, w = img.shape[:2]
    ws, hs = working_size
    return pts * np.array([w / float(ws), h / float(hs)])


def draw_matches(
        img0: np.ndarray,
        img1: np.ndarray,
        pts0: Points2D,
        pts1: Points2D,
        inliers: Optional[BoolArray] = None,
        *,
        params: DrawParams = DrawParams(),
        rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Draw correspondences pts0 (in img0) -> pts1 (in img1) on a side-by-side canvas.
    - inliers==True : params.inlier_color
    - inliers==False: params.outlier_color (skipped if draw_outliers is False)
    - inliers None  : everything drawn as inlier

    When more than params.max_draw correspondences are drawable, a uniform
    random subset of params.max_draw is drawn. rng makes that subset
    reproducible (default: fresh unseeded generator).
    """
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    if inliers is not None and len(inliers) != pts0.shape[0]:
        raise ValueError(f"inliers must have length N; got {len(inliers)} vs {pts0.shape[0]}")

    vis = make_side_by_side(img0, img1)
    x_offset = _as_bgr(img0).shape[1]

    p0_img = _scale_to_image(pts0, img0, params.working_size)
    p1_img = _scale_to_image(pts1, img1, params.working_size)

    ok_mask = np.ones((pts0.shape[0],), dtype=bool) if inliers is None else np.asarray(inliers, dtype=bool)
    drawable = np.isfinite(p0_img).all(axis=1) & np.isfinite(p1_img).all(axis=1)
    if not params.draw_outliers:
        drawable &= ok_mask
    candidates = np.flatnonzero(drawable)

    if candidates.shape[0] > params.max_draw:
        if rng is None:
            rng = np.random.default_rng()
        candidates = np.sort(rng.choice(candidates, size=params.max_draw, replace=False))

    for i in candidates:
        p0 = (int(round(p0_img[i, 0])), int(round(p0_img[i, 1])))
        p1 = (int(round(p1_img[i, 0])) + x_offset, int(round(p1_img[i, 1])))

        color = params.inlier_color if ok_mask[i] else params.outlier_color
        cv2.line(vis, p0, p1, color, params.line_thickness, cv2.LINE_AA)
        cv2.circle(vis, p0, params.point_radius, color, -1)
        cv2.circle(vis, p1, params.point_radius, color, -1)

    return vis


def ransac_summary_lines(result: RansacResult) -> list[str]:
    """Human readable lines describing a RANSAC outcome."""
    n = int(result.inliers.shape[0])
    lines = [
        f"inliers {result.num_inliers}/{n} ({result.inlier_ratio:.0%})",
        f"iters {result.iterations}  stop: {result.stop_reason}",
        f"threshold {result.threshold:g} px",
    ]
    if result.model is None:
        lines.append("no homography")
    return lines


def draw_ransac_summary(
        vis_bgr: np.ndarray,
        result: RansacResult,
        *,
        params: DrawParams = DrawParams(),
        alpha: float = 0.6,
) -> np.ndarray:
    """
    Overlay a RANSAC summary box at the top-left of a match image.

    Text uses params.inlier_color when a model was found, params.outlier_color
    otherwise. The box behind it darkens the image by alpha. Returns a copy.
    """
    if vis_bgr is None or vis_bgr.size == 0:
        raise ValueError("draw_ransac_summary received an empty image.")
    if not (0.0 <= alpha <= 1.0):
        raise ValueError(f"alpha must be in [0, 1], got {alpha}")

    out = _as_bgr(vis_bgr).copy()
    lines = ransac_summary_lines(result)
    color = params.inlier_color if result.model is not None else params.outlier_color

    # Text grows with the canvas so the box stays readable on large images
    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = float(np.clip(out.shape[0] / 720.0, 0.4, 1.2))
    thickness = max(1, int(round(2 * font_scale)))
    pad = 8

    sizes = [cv2.getTextSize(t, font, font_scale, thickness) for t in lines]
    line_h = max(h + base for (_, h), base in sizes) + pad // 2
    box_w = max(w for (w, _), _ in sizes) + 2 * pad
    box_h = line_h * len(lines) + pad

    x1 = min(box_w, out.shape[1])
    y1 = min(box_h, out.shape[0])
    roi = out[:y1, :x1]
    out[:y1, :x1] = cv2.addWeighted(roi, 1.0 - alpha, np.zeros_like(roi), alpha, 0.0)

    for i, text in enumerate(lines):
        y = pad + (i + 1) * line_h - pad // 2
        cv2.putText(out, text, (pad, y), font, font_scale, color, thickness, cv2.LINE_AA)
    return out


def show_and_save_matches(
        vis_bgr: np.ndarray,
        *,
        output_path: Optional[Path] = None,
        title: str = "Matches",
        show: bool = True,
) -> np.ndarray:
    """
    Optionally display a match image (waits for a keypress) and save it.
    """
    if show:
        cv2.imshow(title, vis_bgr)
        cv2.waitKey(0)
        cv2.destroyWindow(title)

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(output_path), vis_bgr)

    return vis_bgr
