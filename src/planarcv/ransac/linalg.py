# Andy Zhao
"""
Dense linear solve for the minimal homography system.

The 4-point DLT with h9 fixed to 1 is a square 8x8 system A h = b.
Solved with Gaussian elimination + partial pivoting:

- Forward elimination: at column i, swap in the row with the largest |A[k, i]| (k >= i),
  then zero out everything below the pivot.
- Back substitution: recover x from the upper-triangular system.

A pivot smaller than eps means the system is singular (or close enough
that the answer is noise), which for RANSAC means "degenerate sample".
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .types import FloatArray

PIVOT_EPS = 1e-8


def solve_linear_system(A: FloatArray, b: FloatArray, *, eps: float = PIVOT_EPS) -> Optional[FloatArray]:
    """
    Solve the square system A x = b.

    A: (n,n), b: (n,)
    Inputs are not modified (works on private copies).

    Returns:
      x (n,), or None if a pivot falls below eps.
    """
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"solve_linear_system expects a square matrix, got {A.shape}")
    n = A.shape[0]
    if b.shape != (n,):
        raise ValueError(f"solve_linear_system expects b shape ({n},), got {b.shape}")

    mat = np.array(A, dtype=np.float64, copy=True)
    rhs = np.array(b, dtype=np.float64, copy=True)

    # ---------- Forward elimination ----------
    for i in range(n):
        # Partial pivoting: largest magnitude in column i at or below row i
        pivot_row = i + int(np.argmax(np.abs(mat[i:, i])))
        pivot = mat[pivot_row, i]

        if abs(pivot) < eps:
            return None

        if pivot_row != i:
            mat[[i, pivot_row], i:] = mat[[pivot_row, i], i:]
            rhs[[i, pivot_row]] = rhs[[pivot_row, i]]

        # Eliminate below the pivot
        for k in range(i + 1, n):
            factor = mat[k, i] / pivot
            if factor == 0.0:
                continue
            mat[k, i:] -= factor * mat[i, i:]
            rhs[k] -= factor * rhs[i]

    # ---------- Back substitution ----------
    x = np.zeros((n,), dtype=np.float64)
    for i in range(n - 1, -1, -1):
        s = float(np.dot(mat[i, i + 1:], x[i + 1:]))
        x[i] = (rhs[i] - s) / mat[i, i]

    return x
