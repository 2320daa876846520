"""Reference LP decoder built on SciPy.

Feldman's relaxation written out with every odd-subset inequality of every
check. The number of rows grows as ``2^(d-1)`` in the check degree ``d``, so
this is meant for short codes and for validating the ADMM decoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Tuple

import numpy as np
from scipy.optimize import linprog

from codes import TannerGraph


@dataclass
class LPDecodeResult:
    x: np.ndarray
    status: int
    objective: float


class LPDecoderError(RuntimeError):
    pass


def _check_inequalities(
    graph: TannerGraph, max_degree: int
) -> Tuple[np.ndarray, np.ndarray]:
    rows = []
    rhs = []
    for j, sl in enumerate(graph.check_slices):
        neighbours = graph.edge_var[sl]
        degree = neighbours.size
        if degree > max_degree:
            raise LPDecoderError(
                f"check {j} has degree {degree}; explicit LP supports at most {max_degree}"
            )
        for size in range(1, degree + 1, 2):
            for subset in combinations(range(degree), size):
                row = np.zeros(graph.n, dtype=float)
                row[neighbours] = -1.0
                row[neighbours[list(subset)]] = 1.0
                rows.append(row)
                rhs.append(size - 1.0)
    return np.vstack(rows), np.asarray(rhs, dtype=float)


def solve_lp_decode(
    graph: TannerGraph,
    llr: np.ndarray,
    *,
    max_degree: int = 12,
) -> LPDecodeResult:
    """Minimize ``llr^T x`` over the fundamental polytope of ``graph``."""
    c = np.asarray(llr, dtype=float).reshape(-1)
    if c.size != graph.n:
        raise ValueError("llr must have one entry per code bit")

    A_ub, b_ub = _check_inequalities(graph, max_degree)
    res = linprog(
        c,
        A_ub=A_ub,
        b_ub=b_ub,
        bounds=[(0, 1)] * graph.n,
        method="highs",
    )
    if not res.success:
        raise LPDecoderError(res.message)
    return LPDecodeResult(res.x, res.status, float(c @ res.x))
