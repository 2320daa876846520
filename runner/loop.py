"""Frame-by-frame decoding simulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from channel import Channel
from codes import TannerGraph
from config import Config
from decoder.admm import ADMMDecoder
from polytope import ParityPolytopeProjector, ProjectionError

logger = logging.getLogger(__name__)


@dataclass
class FrameRecord:
    frame: int
    iterations: int
    converged: bool
    integral: bool
    bit_errors: int
    word_error: bool
    primal_residual: float
    dual_residual: float
    objective: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "frame": self.frame,
            "iterations": self.iterations,
            "converged": self.converged,
            "integral": self.integral,
            "bit_errors": self.bit_errors,
            "word_error": self.word_error,
            "primal_residual": self.primal_residual,
            "dual_residual": self.dual_residual,
            "objective": self.objective,
        }


def build_decoder(cfg: Config, graph: TannerGraph) -> ADMMDecoder:
    dec = cfg.decoder
    return ADMMDecoder(
        graph,
        mu=dec.mu,
        rho=dec.rho,
        tol=dec.tol,
        max_iterations=dec.max_iterations,
        adaptive_penalty=dec.adaptive_penalty,
        balance=dec.balance,
        penalty_step=dec.penalty_step,
        mu_min=dec.mu_min,
        mu_max=dec.mu_max,
        projector=ParityPolytopeProjector(zero_tol=dec.zero_tol),
    )


def run_loop(cfg: Config, channel: Channel, graph: TannerGraph) -> list[FrameRecord]:
    """Send the all-zero codeword ``cfg.run.frames`` times and decode each frame.

    LP decoding is symmetric on memoryless binary-input channels, so the
    all-zero codeword is representative of every codeword.
    """
    if channel.n != graph.n:
        raise ValueError(f"channel length {channel.n} does not match code length {graph.n}")
    decoder = build_decoder(cfg, graph)
    codeword = np.zeros(graph.n, dtype=np.int8)
    history: list[FrameRecord] = []
    word_errors = 0

    for frame in range(cfg.run.frames):
        llr = channel.llr(codeword)
        try:
            result = decoder.decode(llr)
        except ProjectionError as exc:
            raise RuntimeError(f"projection failed at frame {frame}: {exc}") from exc

        bit_errors = int(np.count_nonzero(result.bits != codeword))
        word_error = bit_errors > 0 or not result.integral
        word_errors += int(word_error)
        history.append(
            FrameRecord(
                frame=frame,
                iterations=result.iterations,
                converged=result.converged,
                integral=result.integral,
                bit_errors=bit_errors,
                word_error=word_error,
                primal_residual=result.primal_residual,
                dual_residual=result.dual_residual,
                objective=result.objective,
            )
        )

        if (frame + 1) % 100 == 0:
            logger.info("frame %d: %d word errors so far", frame + 1, word_errors)
        max_errors = cfg.run.max_word_errors
        if max_errors is not None and word_errors >= max_errors:
            logger.info("stopping after %d word errors at frame %d", word_errors, frame + 1)
            break

    return history


def summarize(history: Iterable[FrameRecord], n: int) -> dict[str, float]:
    records = list(history)
    if not records:
        return {
            "frames": 0,
            "bit_error_rate": 0.0,
            "word_error_rate": 0.0,
            "mean_iterations": 0.0,
            "integral_fraction": 0.0,
        }
    frames = len(records)
    return {
        "frames": frames,
        "bit_error_rate": sum(rec.bit_errors for rec in records) / float(frames * n),
        "word_error_rate": sum(rec.word_error for rec in records) / float(frames),
        "mean_iterations": float(np.mean([rec.iterations for rec in records])),
        "integral_fraction": sum(rec.integral for rec in records) / float(frames),
    }
