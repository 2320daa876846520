"""Box projection and parity polytope membership helpers."""

from __future__ import annotations

import numpy as np


def project_box(v: np.ndarray, low: float = 0.0, high: float = 1.0) -> np.ndarray:
    """Project ``v`` into the axis-aligned box ``[low, high]``."""
    if low > high:
        raise ValueError("lower bound must not exceed upper bound")
    return np.clip(v, low, high)


def most_violated_facet(x: np.ndarray) -> tuple[np.ndarray, float]:
    """Return the odd set ``V`` maximizing ``sum_V x - sum_{~V} x - (|V| - 1)``.

    ``V`` is the set of coordinates above one half; when it has even size the
    coordinate closest to one half switches sides.
    """
    x = np.asarray(x, dtype=float)
    if x.ndim != 1 or x.size == 0:
        raise ValueError("input must be a non-empty 1-D array")
    members = x > 0.5
    if members.sum() % 2 == 0:
        flip = int(np.argmin(np.abs(x - 0.5)))
        members[flip] = not members[flip]
    signs = np.where(members, 1.0, -1.0)
    violation = float(signs @ x - (members.sum() - 1))
    return members, violation


def in_parity_polytope(x: np.ndarray, tol: float = 1e-9) -> bool:
    """Check membership in the convex hull of even-weight binary vectors."""
    x = np.asarray(x, dtype=float)
    if np.any(x < -tol) or np.any(x > 1.0 + tol):
        return False
    _, violation = most_violated_facet(x)
    return violation <= tol
