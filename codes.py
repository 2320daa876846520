"""Parity-check matrices and their Tanner graphs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class TannerGraph:
    """Edge-list view of a binary parity-check matrix.

    Edges are ordered check by check, so the edges of check ``j`` occupy the
    slice ``check_slices[j]`` of ``edge_var``.
    """

    H: np.ndarray
    edge_check: np.ndarray
    edge_var: np.ndarray
    check_degree: np.ndarray
    var_degree: np.ndarray

    @property
    def m(self) -> int:
        return self.H.shape[0]

    @property
    def n(self) -> int:
        return self.H.shape[1]

    @property
    def num_edges(self) -> int:
        return self.edge_var.size

    @property
    def check_slices(self) -> list[slice]:
        stops = np.cumsum(self.check_degree)
        starts = stops - self.check_degree
        return [slice(int(a), int(b)) for a, b in zip(starts, stops)]

    @classmethod
    def from_parity_check(cls, H: np.ndarray) -> "TannerGraph":
        H = np.asarray(H)
        if H.ndim != 2 or H.size == 0:
            raise ValueError("parity-check matrix must be a non-empty 2-D array")
        if not np.all((H == 0) | (H == 1)):
            raise ValueError("parity-check matrix must be binary")
        H = H.astype(np.int8)
        edge_check, edge_var = np.nonzero(H)
        return cls(
            H=H,
            edge_check=edge_check,
            edge_var=edge_var,
            check_degree=H.sum(axis=1).astype(int),
            var_degree=H.sum(axis=0).astype(int),
        )


def hamming_parity_check(order: int) -> np.ndarray:
    """Parity checks of the ``(2^order - 1, 2^order - 1 - order)`` Hamming code."""
    if order < 2:
        raise ValueError("Hamming code order must be at least 2")
    columns = np.arange(1, 2**order)
    bits = (columns[None, :] >> np.arange(order)[:, None]) & 1
    return bits.astype(np.int8)


def repetition_parity_check(length: int) -> np.ndarray:
    """Checks ``x_i + x_{i+1} = 0`` of the length-``length`` repetition code."""
    if length < 2:
        raise ValueError("repetition code length must be at least 2")
    H = np.zeros((length - 1, length), dtype=np.int8)
    rows = np.arange(length - 1)
    H[rows, rows] = 1
    H[rows, rows + 1] = 1
    return H


def load_parity_check(path: str | Path) -> np.ndarray:
    path = Path(path).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix == ".npy":
        return np.load(path)
    if path.suffix in {".csv", ".txt"}:
        return np.loadtxt(path, delimiter=",", ndmin=2)
    raise ValueError(f"unsupported parity-check file type: {path}")


def gf2_rank(H: np.ndarray) -> int:
    """Rank of ``H`` over GF(2), by Gaussian elimination."""
    rows = np.asarray(H, dtype=np.int8).copy() % 2
    rank = 0
    for col in range(rows.shape[1]):
        pivots = np.nonzero(rows[rank:, col])[0]
        if pivots.size == 0:
            continue
        pivot = rank + int(pivots[0])
        rows[[rank, pivot]] = rows[[pivot, rank]]
        below = np.nonzero(rows[:, col])[0]
        for row in below:
            if row != rank:
                rows[row] ^= rows[rank]
        rank += 1
        if rank == rows.shape[0]:
            break
    return rank


def code_rate(H: np.ndarray) -> float:
    n = np.asarray(H).shape[1]
    return (n - gf2_rank(H)) / float(n)


def syndrome(H: np.ndarray, bits: np.ndarray) -> np.ndarray:
    return (np.asarray(H, dtype=int) @ np.asarray(bits, dtype=int)) % 2
