"""
Matching boundary package
"""
from .types import MatchSet
from .clean_points import clean_points, apply_mask

__all__ = [
    "MatchSet",
    "clean_points", "apply_mask",
]
