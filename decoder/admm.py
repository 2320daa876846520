"""ADMM solver for LP decoding of binary linear codes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from codes import TannerGraph, syndrome
from polytope import ParityPolytopeProjector
from utils.penalty import adjust_penalty
from utils.projection import project_box

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeResult:
    x: np.ndarray
    bits: np.ndarray
    iterations: int
    converged: bool
    primal_residual: float
    dual_residual: float
    objective: float
    integral: bool
    valid_codeword: bool


class DecoderError(RuntimeError):
    """Raised when the decoder is misconfigured or fed mismatched inputs."""


class ADMMDecoder:
    """Minimize ``llr^T x`` over the fundamental polytope of ``graph``.

    Every check keeps a replica ``z_j`` of its bits and an (unscaled) dual
    ``lambda_j``; both are stored per edge of the Tanner graph. The z-update is
    one parity polytope projection per check.
    """

    def __init__(
        self,
        graph: TannerGraph,
        *,
        mu: float = 3.0,
        rho: float = 1.0,
        tol: float = 1e-5,
        max_iterations: int = 1000,
        adaptive_penalty: bool = False,
        balance: float = 10.0,
        penalty_step: float = 2.0,
        mu_min: float = 1e-2,
        mu_max: float = 1e3,
        integral_tol: float = 1e-6,
        projector: Optional[ParityPolytopeProjector] = None,
    ) -> None:
        if mu <= 0:
            raise DecoderError("penalty mu must be positive")
        if not 0 < rho < 2:
            raise DecoderError("over-relaxation rho must lie in (0, 2)")
        if max_iterations < 1:
            raise DecoderError("max_iterations must be at least 1")
        if np.any(graph.var_degree == 0):
            raise DecoderError("every variable must take part in at least one check")
        self._graph = graph
        self._mu = mu
        self._rho = rho
        self._tol = tol
        self._max_iterations = max_iterations
        self._adaptive_penalty = adaptive_penalty
        self._balance = balance
        self._penalty_step = penalty_step
        self._mu_min = mu_min
        self._mu_max = mu_max
        self._integral_tol = integral_tol
        self._projector = projector or ParityPolytopeProjector()
        # All-zero rows are redundant checks with nothing to project.
        self._slices = [sl for sl in graph.check_slices if sl.stop > sl.start]

    def decode(self, llr: np.ndarray) -> DecodeResult:
        gamma = np.asarray(llr, dtype=float).reshape(-1)
        graph = self._graph
        if gamma.size != graph.n:
            raise DecoderError(
                f"expected {graph.n} log-likelihood ratios, got {gamma.size}"
            )

        mu = self._mu
        z = np.full(graph.num_edges, 0.5)
        lam = np.zeros(graph.num_edges)
        x = np.zeros(graph.n)
        primal = dual = np.inf
        converged = False
        iterations = 0

        while iterations < self._max_iterations:
            iterations += 1
            x = self._update_x(z, lam, gamma, mu)

            Px = x[graph.edge_var]
            w = self._rho * Px + (1.0 - self._rho) * z
            v = w + lam / mu
            z_prev = z
            z = np.empty_like(v)
            for sl in self._slices:
                z[sl] = self._projector.project(v[sl])
            lam = lam + mu * (w - z)

            primal = float(np.linalg.norm(Px - z))
            dual = float(mu * np.linalg.norm(z - z_prev))
            if primal <= self._tol and dual <= self._tol:
                converged = True
                break
            if self._adaptive_penalty:
                mu = adjust_penalty(
                    mu,
                    primal,
                    dual,
                    balance=self._balance,
                    step=self._penalty_step,
                    mu_min=self._mu_min,
                    mu_max=self._mu_max,
                )

        if converged:
            logger.debug("ADMM converged after %d iterations", iterations)
        else:
            logger.info(
                "ADMM stopped at the iteration limit (%d): primal=%.3g dual=%.3g",
                iterations,
                primal,
                dual,
            )

        bits = (x > 0.5).astype(np.int8)
        distance = np.minimum(x, 1.0 - x)
        return DecodeResult(
            x=x,
            bits=bits,
            iterations=iterations,
            converged=converged,
            primal_residual=primal,
            dual_residual=dual,
            objective=float(gamma @ x),
            integral=bool(np.all(distance <= self._integral_tol)),
            valid_codeword=not syndrome(graph.H, bits).any(),
        )

    def _update_x(
        self, z: np.ndarray, lam: np.ndarray, gamma: np.ndarray, mu: float
    ) -> np.ndarray:
        graph = self._graph
        message = np.bincount(graph.edge_var, weights=z - lam / mu, minlength=graph.n)
        return project_box((message - gamma / mu) / graph.var_degree)
