# Andy Zhao
"""
Random index sampling for RANSAC hypothesis generation.

The RANSAC loop never touches a global RNG. It receives an IndexSampler,
so tests can inject a seeded one and replay the exact iteration sequence:

    sampler = seeded_sampler(0)
    sampler.draw(n=12, k=4)   # -> 4 distinct indices in [0, 12)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

import numpy as np

from .types import IndexArray


class IndexSampler(Protocol):
    def draw(self, n: int, k: int) -> IndexArray:
        """
        Return k distinct indices drawn uniformly from range(n), without replacement.
        """
        ...


@dataclass
class RngIndexSampler:
    """
    IndexSampler backed by a numpy Generator.

    Cost per draw does not grow with n, so large match sets stay cheap.
    """
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def draw(self, n: int, k: int) -> IndexArray:
        if k < 0 or k > n:
            raise ValueError(f"Cannot draw {k} distinct indices from {n}")
        return self.rng.choice(n, size=k, replace=False).astype(np.intp)


def default_sampler() -> RngIndexSampler:
    """Fresh, OS-entropy seeded sampler (not shared between calls)."""
    return RngIndexSampler(np.random.default_rng())


def seeded_sampler(seed: Optional[int]) -> RngIndexSampler:
    """Reproducible sampler: same seed -> same index sequence."""
    return RngIndexSampler(np.random.default_rng(seed))
