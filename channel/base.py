"""Base types for noisy channels."""

from __future__ import annotations

from typing import Protocol

import numpy as np


class Channel(Protocol):
    """Memoryless binary-input channel reporting log-likelihood ratios."""

    n: int

    def llr(self, codeword: np.ndarray) -> np.ndarray:
        """Transmit ``codeword`` and return ``log P(y|0) / P(y|1)`` per bit."""
