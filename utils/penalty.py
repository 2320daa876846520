"""ADMM penalty scheduling helpers."""

from __future__ import annotations

import numpy as np


def adjust_penalty(
    mu: float,
    primal_residual: float,
    dual_residual: float,
    *,
    balance: float,
    step: float,
    mu_min: float,
    mu_max: float,
) -> float:
    """Residual balancing: grow ``mu`` when the primal residual dominates, shrink it otherwise."""
    if primal_residual > balance * dual_residual:
        mu *= step
    elif dual_residual > balance * primal_residual:
        mu /= step
    return float(np.clip(mu, mu_min, mu_max))
