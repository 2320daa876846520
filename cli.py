"""Command-line interface for ADMM decoding simulations."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from channel import AWGNChannel, BinarySymmetricChannel, Channel
from codes import TannerGraph, code_rate
from config import Config, load_config
from plots.metrics import generate_plots
from runner.loop import run_loop, summarize
from telemetry.writer import write_history, write_summary

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ADMM LP decoding simulator")
    parser.add_argument(
        "--config",
        required=True,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output directory for history, summary and plots.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    cfg = load_config(args.config)
    graph = cfg.tanner_graph()
    channel = _make_channel(cfg, graph)
    logger.info(
        "decoding %d frames of a (%d checks x %d bits) code over %s",
        cfg.run.frames,
        graph.m,
        graph.n,
        cfg.channel.type,
    )
    history = run_loop(cfg, channel, graph)
    summary = summarize(history, graph.n)
    logger.info(
        "WER=%.3g BER=%.3g mean iterations=%.1f",
        summary["word_error_rate"],
        summary["bit_error_rate"],
        summary["mean_iterations"],
    )

    out_dir = Path(args.out)
    write_history(out_dir / "history.jsonl", history)
    write_summary(out_dir / "summary.json", summary)
    if cfg.run.plots:
        generate_plots(history, out_dir / "plots")


def _make_channel(cfg: Config, graph: TannerGraph) -> Channel:
    rng = np.random.default_rng(cfg.channel.seed)
    if cfg.channel.type == "bsc":
        return BinarySymmetricChannel(n=graph.n, crossover=cfg.channel.crossover, rng=rng)
    if cfg.channel.type == "awgn":
        return AWGNChannel(
            n=graph.n,
            ebn0_db=cfg.channel.ebn0_db,
            rate=code_rate(graph.H),
            rng=rng,
        )
    raise ValueError(f"unknown channel type: {cfg.channel.type}")


if __name__ == "__main__":
    main()
