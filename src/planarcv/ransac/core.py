# Andy Zhao
"""
Generic RANSAC loop (model-agnostic).

RANSAC overview:
- Randomly sample a *minimal* subset of correspondences
- Fit a candidate model from that subset
- Score all correspondences by computing residual errors
- Mark inliers where error < threshold
- Keep the model with the most inliers (strictly more replaces the best)
- Stop early once the best inlier ratio is high enough
- Optionally refit the winning model on all inliers (least squares)

Uses the ModelFitter Protocol from types.py and an injected IndexSampler
from sampling.py, so the loop has no hidden global state.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, TypeVar

import numpy as np

from ..logger import setup_logger
from .types import Points2D, Mask2D, ModelFitter, RansacConfig, RansacResult, StopReason
from .sampling import IndexSampler, default_sampler

M = TypeVar("M")

logger = logging.getLogger(__name__)
if os.environ.get("PLANARCV_RANSAC_DEBUG", "0") == "1":
    setup_logger("planarcv.ransac", level="DEBUG")


def _required_iter_for_confidence(
        *,
        p_all_inliers: float,
        inlier_ratio: float,
        sample_size: int,
) -> int:
    """
    Compute the number of RANSAC iterations needed so that the probability
    of having drawn at least ONE all-inlier minimal sample is >= p_all_inliers.

    inlier ratio w = (# inliers) / N, Minimal sample s = min_sample,
    - P(all-inliers) = w^s
    - P(not-all-inlier-for-k-times) = (1 - w^s)^k
    - P(at-least-once-all-inliers) = 1 - (1 - w^s)^k >= p

    Formula:
       k >= log(1 - p) / log(1 - w^s)

    Edge cases:
     - w == 0  -> impossible, return "infinite-ish" (capped by max_iterations)
     - w == 1  -> 1 iteration is enough
    """
    # Clamp inputs to avoid log(0)
    p = float(np.clip(p_all_inliers, 1e-12, 1.0 - 1e-12))
    w = float(np.clip(inlier_ratio, 0.0, 1.0))
    s = int(sample_size)

    if s <= 0:
        raise ValueError("sample_size must be >= 1")

    if w >= 1.0:
        return 1

    if w <= 0.0:
        return int(1e9)

    w_to_s = float(np.clip(w ** s, 1e-12, 1.0 - 1e-12))

    k = int(np.ceil(np.log(1 - p) / np.log(1 - w_to_s)))
    return max(1, k)


def ransac(
        model_fitter: ModelFitter[M],
        pts0: Points2D,
        pts1: Points2D,
        *,
        config: RansacConfig,
        sampler: Optional[IndexSampler] = None,
) -> RansacResult[M]:
    """
    Run RANSAC to fit a model between pts0 -> pts1.

    Inputs:
    - model_fitter: provides fit_minimal, fit_least_squares, residuals
    - pts0, pts1: (N,2) corresponding points (same N)
    - config: iteration bound, threshold, early exit ratio, ...
    - sampler: source of random indices (default: fresh unseeded sampler)

    Returns:
    - RansacResult. With fewer than config.min_sample correspondences, or if no
      candidate ever produced an inlier, model is None and the mask is all False.
    """
    # ---------- Input validation ----------
    if pts0.shape != pts1.shape:
        raise ValueError(f"pts0 and pts1 must have same shape, got {pts0.shape} vs {pts1.shape}")
    if pts0.ndim != 2 or pts0.shape[1] != 2:
        raise ValueError(f"Expected pts shape (N,2), got {pts0.shape}")

    n = pts0.shape[0]
    min_samples = config.min_sample

    if n < min_samples:
        # Not enough matches to fit the model
        return RansacResult(
            model=None,
            inliers=np.zeros((n,), dtype=bool),
            num_inliers=0,
            iterations=0,
            threshold=float(config.threshold),
            stop_reason="insufficient",
        )

    if sampler is None:
        sampler = default_sampler()

    # Track the best hypothesis
    best_model: Optional[M] = None
    best_inliers: Mask2D = np.zeros((n,), dtype=bool)
    best_num_inliers = 0

    target_iters = config.max_iterations
    iters_run = 0
    stop_reason: StopReason = "exhausted"

    # ---------- Main RANSAC Loop ----------
    while iters_run < target_iters:
        iters_run += 1

        # Sample a minimal subset of correspondences (unique indices, no replacement)
        sample_idx = sampler.draw(n, min_samples)

        # Fit model from minimal set, None if degenerate
        model = model_fitter.fit_minimal(pts0[sample_idx], pts1[sample_idx])
        if model is None:
            continue

        # Residuals for ALL correspondences (shape: (N,))
        err = model_fitter.residuals(model, pts0, pts1)
        inliers: Mask2D = err < config.threshold
        num_inliers = int(np.count_nonzero(inliers))

        # Strictly more inliers replaces the best; ties keep the earlier one
        if num_inliers <= best_num_inliers:
            continue

        best_model = model
        best_inliers = inliers
        best_num_inliers = num_inliers

        w = best_num_inliers / float(n)
        logger.debug("better model: inliers=%d/%d, w=%.3f, iter=%d", best_num_inliers, n, w, iters_run)

        if w > config.early_exit_inlier_ratio:
            stop_reason = "early_exit"
            break

        if config.adaptive_stop:
            iter_needed = _required_iter_for_confidence(
                p_all_inliers=config.confidence,
                inlier_ratio=w,
                sample_size=min_samples,
            )
            target_iters = min(target_iters, max(iter_needed, iters_run))
            if iters_run >= target_iters:
                stop_reason = "confidence"
                break

    # Adaptive bound reached at the top of the loop rather than right after an update
    if stop_reason == "exhausted" and iters_run < config.max_iterations:
        stop_reason = "confidence"

    final_model = best_model
    if config.refine_model and best_model is not None:
        refit = model_fitter.fit_least_squares(pts0[best_inliers], pts1[best_inliers])
        # If least squares refit fails, fall back to the best minimal model
        if refit is not None:
            final_model = refit

    logger.debug(
        "ransac done: reason=%s, iterations=%d, inliers=%d/%d",
        stop_reason, iters_run, best_num_inliers, n,
    )

    return RansacResult(
        model=final_model,
        inliers=best_inliers,
        num_inliers=best_num_inliers,
        iterations=iters_run,
        threshold=float(config.threshold),
        stop_reason=stop_reason,
    )
