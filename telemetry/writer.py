"""Persist per-frame decoding records and the run summary."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import numpy as np

from runner.loop import FrameRecord


def write_history(path: str | Path, records: Iterable[FrameRecord]) -> int:
    """Write one JSON line per frame and return the number of frames written."""
    lines = [_encode(record.to_dict()) for record in records]
    _prepare(path).write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return len(lines)


def write_summary(path: str | Path, summary: Mapping[str, Any]) -> None:
    _prepare(path).write_text(_encode(summary, indent=2) + "\n", encoding="utf-8")


def _prepare(path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def _encode(payload: Mapping[str, Any], indent: int | None = None) -> str:
    # Decoder outputs carry numpy scalars.
    return json.dumps(payload, indent=indent, default=_to_builtin)


def _to_builtin(obj: Any) -> Any:
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"cannot encode {type(obj).__name__} as JSON")
