# Andy Zhao
"""
Boundary value handed over by the feature matching stage.

The matcher produces aligned keypoints in a shared pixel space. Some
extractors also report a per-keypoint scale; others do not, so `scales`
is an explicit Optional rather than an empty array.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..ransac.types import Points2D, FloatArray, BoolArray, as_points2d


@dataclass(frozen=True)
class MatchSet:
    keypoints0: Points2D                # (N,2) reference image
    keypoints1: Points2D                # (N,2) target image
    scales: Optional[FloatArray] = None  # (N,) or absent

    def __post_init__(self) -> None:
        k0 = as_points2d(self.keypoints0, name="keypoints0")
        k1 = as_points2d(self.keypoints1, name="keypoints1")
        if k0.shape != k1.shape:
            raise ValueError(f"keypoints0 and keypoints1 must have same shape, got {k0.shape} vs {k1.shape}")
        # frozen dataclass: normalize fields through object.__setattr__
        object.__setattr__(self, "keypoints0", k0)
        object.__setattr__(self, "keypoints1", k1)

        if self.scales is not None:
            s = np.asarray(self.scales, dtype=np.float64).reshape(-1)
            if s.shape[0] != k0.shape[0]:
                raise ValueError(f"scales must have length N; got {s.shape[0]} vs {k0.shape[0]}")
            object.__setattr__(self, "scales", s)

    def __len__(self) -> int:
        return int(self.keypoints0.shape[0])

    def filtered(self, mask: BoolArray) -> "MatchSet":
        """
        Matches selected by mask (e.g. RANSAC inliers). Absent scales stay absent.
        """
        mask = np.asarray(mask, dtype=bool).reshape(-1)
        if mask.shape[0] != len(self):
            raise ValueError(f"mask must have length N; got {mask.shape[0]} vs {len(self)}")
        return MatchSet(
            keypoints0=self.keypoints0[mask],
            keypoints1=self.keypoints1[mask],
            scales=None if self.scales is None else self.scales[mask],
        )
