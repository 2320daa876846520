"""Exact Euclidean projection onto the parity polytope.

The parity polytope of length ``n`` is the convex hull of all binary vectors
with an even number of ones. Projecting onto it is the per-check subproblem of
ADMM LP decoding; see Barman, Liu, Draper and Recht, "Decomposition methods for
large scale LP decoding" (arXiv:1204.0556).

The optimum is ``clip(v - beta * f_r)`` for a facet indicator ``f_r`` picked
from the sorted input and a scalar ``beta >= 0``. ``beta`` is found exactly by
sweeping the breakpoints of the piecewise-linear facet sum, so a call costs one
sort plus a linear pass.
"""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass, replace
from itertools import groupby
from operator import attrgetter
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike

from utils.projection import project_box

logger = logging.getLogger(__name__)

ZERO_TOL = 1e-10


class ProjectionError(RuntimeError):
    """Raised when a vector cannot be projected onto the parity polytope."""


class InvalidInputError(ProjectionError):
    """The input is empty, not a vector, or holds non-finite values."""


class DegenerateBracketError(ProjectionError):
    """The final linear segment has no active coordinates to solve for beta."""


@dataclass(frozen=True)
class IndexedValue:
    index: int
    value: float


@dataclass(frozen=True)
class Breakpoint:
    """Value of beta at which the coordinate at ``position`` saturates."""

    position: int
    value: float
    upper: bool


@dataclass(frozen=True)
class WaterfillState:
    clip_idx: int
    zero_idx: int
    active_sum: float

    @property
    def width(self) -> int:
        return self.zero_idx - self.clip_idx - 1

    def total(self, beta: float) -> float:
        return (self.clip_idx + 1) + self.active_sum - beta * self.width

    def absorb(self, breakpoint: Breakpoint, value: float) -> "WaterfillState":
        if breakpoint.upper:
            return replace(
                self, clip_idx=self.clip_idx - 1, active_sum=self.active_sum + value
            )
        return replace(
            self, zero_idx=self.zero_idx + 1, active_sum=self.active_sum - value
        )

    def solve(self, r: int) -> float:
        """Return the beta at which this segment's facet sum equals ``r``."""
        if self.width == 0:
            raise DegenerateBracketError(
                f"no active coordinates left (clip_idx={self.clip_idx}, "
                f"zero_idx={self.zero_idx})"
            )
        return (self.clip_idx + 1 + self.active_sum - r) / self.width


def classify_input(values: np.ndarray) -> Optional[np.ndarray]:
    """Return the projection directly when it is a trivial vertex."""
    if np.all(values <= 0.0):
        return np.zeros(values.size, dtype=float)
    # All-ones has odd weight for odd n, so it is only a vertex for even n.
    if values.size % 2 == 0 and np.all(values > 1.0):
        return np.ones(values.size, dtype=float)
    return None


def rank(values: np.ndarray) -> Tuple[IndexedValue, ...]:
    items = (IndexedValue(index, float(value)) for index, value in enumerate(values))
    return tuple(sorted(items, key=attrgetter("value"), reverse=True))


def clip_ranked(ranked: Sequence[IndexedValue]) -> Tuple[IndexedValue, ...]:
    return tuple(
        IndexedValue(item.index, min(max(item.value, 0.0), 1.0)) for item in ranked
    )


def parity_target(clipped: Sequence[IndexedValue]) -> int:
    """Largest even integer not exceeding the clipped sum."""
    r = int(math.floor(sum(item.value for item in clipped)))
    if r % 2:
        r -= 1
    return r


def facet_sum(clipped: Sequence[IndexedValue], r: int) -> float:
    """Evaluate ``f_r^T z`` in rank order: the first ``r + 1`` positions count +1."""
    upper = sum(item.value for item in clipped[: r + 1])
    lower = sum(item.value for item in clipped[r + 1 :])
    return upper - lower


def merge_breakpoints(ranked: Sequence[IndexedValue], r: int) -> Tuple[Breakpoint, ...]:
    """Merge the upper and lower saturation points into non-decreasing order.

    Upper candidates ``v_i - 1`` are walked from ``i = r`` down to ``0`` and
    lower candidates ``-v_j`` from ``j = r + 1`` up, so both runs are already
    sorted. Equal values emit the lower-half candidate first.
    """
    upper = (
        Breakpoint(position, ranked[position].value - 1.0, True)
        for position in range(r, -1, -1)
    )
    lower = (
        Breakpoint(position, -ranked[position].value, False)
        for position in range(r + 1, len(ranked))
    )
    return tuple(heapq.merge(lower, upper, key=attrgetter("value")))


def beta_upper_bound(ranked: Sequence[IndexedValue], r: int) -> float:
    if r + 2 <= len(ranked):
        return (ranked[r].value - ranked[r + 1].value) / 2.0
    return ranked[r].value


def initial_state(
    ranked: Sequence[IndexedValue], r: int, zero_tol: float = ZERO_TOL
) -> WaterfillState:
    """Waterfilling state at ``beta = 0``.

    ``clip_idx`` is the last rank position saturated at one and ``zero_idx``
    the first rank position sitting below zero. A coordinate counts as
    saturated exactly when its breakpoint falls inside the sweep window, so
    every breakpoint is accounted for once.
    """
    clip_idx = sum(1 for item in ranked if item.value - 1.0 >= zero_tol) - 1
    zero_idx = sum(1 for item in ranked if -item.value < zero_tol)
    active_sum = 0.0
    for position, item in enumerate(ranked):
        if clip_idx < position <= r:
            active_sum += item.value
        elif r < position < zero_idx:
            active_sum -= item.value
    return WaterfillState(clip_idx, zero_idx, active_sum)


def search_beta(
    ranked: Sequence[IndexedValue], r: int, zero_tol: float = ZERO_TOL
) -> float:
    """Locate the beta at which the facet sum drops to ``r``.

    The sweep keeps two snapshots: ``state`` after absorbing the latest group
    of equal breakpoints and ``previous`` before it. Once the facet sum falls
    below ``r`` the root lies on the segment described by ``previous``.
    """
    beta_max = beta_upper_bound(ranked, r)
    window = [
        bp for bp in merge_breakpoints(ranked, r) if zero_tol <= bp.value < beta_max
    ]

    state = initial_state(ranked, r, zero_tol)
    previous = state
    total = state.total(0.0)
    for beta, group in groupby(window, key=attrgetter("value")):
        previous = state
        for bp in group:
            state = state.absorb(bp, ranked[bp.position].value)
        total = state.total(beta)
        if total < r:
            break

    if total > r:
        return state.solve(r)
    return previous.solve(r)


def assemble(ranked: Sequence[IndexedValue], r: int, beta: float) -> np.ndarray:
    shifted = np.array(
        [
            item.value - beta if position <= r else item.value + beta
            for position, item in enumerate(ranked)
        ],
        dtype=float,
    )
    indices = np.array([item.index for item in ranked], dtype=int)
    results = np.empty(len(ranked), dtype=float)
    results[indices] = project_box(shifted)
    return results


class ParityPolytopeProjector:
    """Projection onto the even-parity polytope with a configurable zero test."""

    def __init__(self, *, zero_tol: float = ZERO_TOL) -> None:
        if zero_tol < 0:
            raise ValueError("zero_tol must be non-negative")
        self._zero_tol = zero_tol

    def project(self, v: np.ndarray) -> np.ndarray:
        values = np.asarray(v, dtype=float)
        if values.ndim != 1:
            raise InvalidInputError("input must be a 1-D vector")
        if values.size == 0:
            raise InvalidInputError("cannot project an empty vector")
        if not np.all(np.isfinite(values)):
            raise InvalidInputError("input holds non-finite values")

        shortcut = classify_input(values)
        if shortcut is not None:
            return shortcut

        ranked = rank(values)
        clipped = clip_ranked(ranked)
        r = parity_target(clipped)
        if facet_sum(clipped, r) <= r:
            results = np.empty(values.size, dtype=float)
            for item in clipped:
                results[item.index] = item.value
            return results

        beta = search_beta(ranked, r, self._zero_tol)
        logger.debug("parity projection n=%d r=%d beta=%.12g", values.size, r, beta)
        return assemble(ranked, r, beta)


_DEFAULT_PROJECTOR = ParityPolytopeProjector()


def project_parity_polytope(v: np.ndarray) -> np.ndarray:
    """Project ``v`` onto the convex hull of even-weight binary vectors."""
    return _DEFAULT_PROJECTOR.project(v)


def project_array(a: ArrayLike) -> np.ndarray:
    """Project a vector handed over as ``(n,)``, ``(n, 1)`` or ``(1, n)``.

    The result has the shape of the input.
    """
    arr = np.asarray(a, dtype=float)
    if arr.ndim > 2 or (arr.ndim == 2 and 1 not in arr.shape):
        raise InvalidInputError(f"expected a vector, got shape {arr.shape}")
    return project_parity_polytope(arr.reshape(-1)).reshape(arr.shape)
