"""Configuration loading for decoding simulations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

import numpy as np
import yaml

from codes import (
    TannerGraph,
    hamming_parity_check,
    load_parity_check,
    repetition_parity_check,
)


@dataclass
class CodeConfig:
    kind: Literal["hamming", "repetition", "file"] = "hamming"
    order: int = 3
    length: int = 5
    path: Optional[Path] = None


@dataclass
class ChannelConfig:
    type: Literal["bsc", "awgn"] = "bsc"
    crossover: float = 0.05
    ebn0_db: float = 3.0
    seed: Optional[int] = None


@dataclass
class DecoderConfig:
    mu: float = 3.0
    rho: float = 1.0
    tol: float = 1e-5
    max_iterations: int = 1000
    adaptive_penalty: bool = False
    balance: float = 10.0
    penalty_step: float = 2.0
    mu_min: float = 1e-2
    mu_max: float = 1e3
    zero_tol: float = 1e-10


@dataclass
class RunConfig:
    frames: int = 100
    seed: int = 0
    max_word_errors: Optional[int] = None
    plots: bool = True


@dataclass
class Config:
    code: CodeConfig
    channel: ChannelConfig
    decoder: DecoderConfig
    run: RunConfig
    base_path: Path

    def parity_check(self) -> np.ndarray:
        if self.code.kind == "hamming":
            return hamming_parity_check(self.code.order)
        if self.code.kind == "repetition":
            return repetition_parity_check(self.code.length)
        if self.code.kind == "file":
            if self.code.path is None:
                raise ValueError("code.path is required when code.kind is 'file'")
            return load_parity_check(self.code.path)
        raise ValueError(f"unsupported code kind: {self.code.kind}")

    def tanner_graph(self) -> TannerGraph:
        return TannerGraph.from_parity_check(self.parity_check())


_CODE_KINDS = {"hamming", "repetition", "file"}
_CHANNEL_TYPES = {"bsc", "awgn"}


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def load_config(path: str | Path) -> Config:
    cfg_path = Path(path).expanduser().resolve()
    with cfg_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    base = cfg_path.parent

    code_raw = raw.get("code") or {}
    channel_raw = raw.get("channel") or {}
    decoder_raw = raw.get("decoder") or {}
    run_raw = raw.get("run") or {}

    code_path = code_raw.get("path")
    code = CodeConfig(
        kind=str(code_raw.get("kind", "hamming")),
        order=int(code_raw.get("order", 3)),
        length=int(code_raw.get("length", 5)),
        path=(base / code_path) if code_path is not None else None,
    )
    if code.kind not in _CODE_KINDS:
        raise ValueError(f"unknown code kind: {code.kind}")

    run = RunConfig(
        frames=int(run_raw.get("frames", 100)),
        seed=int(run_raw.get("seed", 0)),
        max_word_errors=_optional_int(run_raw.get("max_word_errors")),
        plots=bool(run_raw.get("plots", True)),
    )

    channel = ChannelConfig(
        type=str(channel_raw.get("type", "bsc")),
        crossover=float(channel_raw.get("crossover", 0.05)),
        ebn0_db=float(channel_raw.get("ebn0_db", 3.0)),
        seed=_optional_int(channel_raw.get("seed", run.seed + 1)),
    )
    if channel.type not in _CHANNEL_TYPES:
        raise ValueError(f"unknown channel type: {channel.type}")

    decoder = DecoderConfig(
        mu=float(decoder_raw.get("mu", 3.0)),
        rho=float(decoder_raw.get("rho", 1.0)),
        tol=float(decoder_raw.get("tol", 1e-5)),
        max_iterations=int(decoder_raw.get("max_iterations", 1000)),
        adaptive_penalty=bool(decoder_raw.get("adaptive_penalty", False)),
        balance=float(decoder_raw.get("balance", 10.0)),
        penalty_step=float(decoder_raw.get("penalty_step", 2.0)),
        mu_min=float(decoder_raw.get("mu_min", 1e-2)),
        mu_max=float(decoder_raw.get("mu_max", 1e3)),
        zero_tol=float(decoder_raw.get("zero_tol", 1e-10)),
    )

    return Config(
        code=code,
        channel=channel,
        decoder=decoder,
        run=run,
        base_path=base,
    )
