"""Plotting utilities for decoding simulations."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import matplotlib.pyplot as plt
import numpy as np

from runner.loop import FrameRecord


def generate_plots(history: Iterable[FrameRecord], out_dir: str | Path) -> None:
    records = list(history)
    if not records:
        return
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    frames = np.array([rec.frame for rec in records], dtype=float)
    iterations = np.array([rec.iterations for rec in records], dtype=float)
    word_errors = np.array([rec.word_error for rec in records], dtype=float)
    residuals = np.array([rec.primal_residual for rec in records], dtype=float)

    plt.figure(figsize=(6, 4))
    plt.plot(frames, iterations, label="iterations")
    plt.plot(frames, _running_mean(iterations), label="running mean", linestyle="--")
    plt.xlabel("frame")
    plt.ylabel("ADMM iterations")
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path / "iterations.png", dpi=150)
    plt.close()

    plt.figure(figsize=(6, 4))
    plt.plot(frames, _running_mean(word_errors))
    plt.xlabel("frame")
    plt.ylabel("word error rate")
    plt.tight_layout()
    plt.savefig(out_path / "word_error_rate.png", dpi=150)
    plt.close()

    finite = residuals[np.isfinite(residuals) & (residuals > 0)]
    if finite.size:
        plt.figure(figsize=(6, 4))
        plt.hist(np.log10(finite), bins=30)
        plt.xlabel("log10 final primal residual")
        plt.ylabel("frames")
        plt.tight_layout()
        plt.savefig(out_path / "residuals.png", dpi=150)
        plt.close()


def _running_mean(values: np.ndarray) -> np.ndarray:
    return np.cumsum(values) / np.arange(1, values.size + 1)
