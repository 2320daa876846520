"""Simulated binary-input channels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .base import Channel


@dataclass
class BinarySymmetricChannel(Channel):
    """Flip every bit independently with probability ``crossover``."""

    n: int
    crossover: float
    rng: Optional[np.random.Generator] = None

    def __post_init__(self) -> None:
        if not 0.0 < self.crossover < 0.5:
            raise ValueError("crossover probability must lie in (0, 0.5)")
        if self.rng is None:
            self.rng = np.random.default_rng()
        self._magnitude = math.log((1.0 - self.crossover) / self.crossover)

    def llr(self, codeword: np.ndarray) -> np.ndarray:
        codeword = np.asarray(codeword, dtype=np.int8)
        if codeword.size != self.n:
            raise ValueError(f"codeword length {codeword.size} does not match n={self.n}")
        flips = (self.rng.random(self.n) < self.crossover).astype(np.int8)
        received = codeword ^ flips
        return self._magnitude * (1.0 - 2.0 * received)


@dataclass
class AWGNChannel(Channel):
    """BPSK (``0 -> +1``, ``1 -> -1``) over additive white Gaussian noise."""

    n: int
    ebn0_db: float
    rate: float = 1.0
    rng: Optional[np.random.Generator] = None

    def __post_init__(self) -> None:
        if not 0.0 < self.rate <= 1.0:
            raise ValueError("code rate must lie in (0, 1]")
        if self.rng is None:
            self.rng = np.random.default_rng()
        ebn0 = 10.0 ** (self.ebn0_db / 10.0)
        self.sigma = math.sqrt(1.0 / (2.0 * self.rate * ebn0))

    def llr(self, codeword: np.ndarray) -> np.ndarray:
        codeword = np.asarray(codeword, dtype=float)
        if codeword.size != self.n:
            raise ValueError(f"codeword length {codeword.size} does not match n={self.n}")
        y = (1.0 - 2.0 * codeword) + self.rng.normal(0.0, self.sigma, self.n)
        return 2.0 * y / self.sigma**2
