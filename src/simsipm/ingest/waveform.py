# src/simsipm/ingest/waveform.py
"""Loader for sampled waveforms.

Supported files:

* ``.npy`` with a one-dimensional array of amplitudes;
* ``.npz`` with a ``waveform`` entry and an optional scalar ``sampling``;
* ``.csv`` with one column of amplitudes, or two columns ``time,amplitude``
  whose constant time step (ns) defines the sampling period.  A header row
  is skipped when its first cell is not numeric.

``sampling`` passed to :func:`load_waveform` overrides the value found in the
file; when neither is present the period defaults to 1 ns.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..core.signal import AnalogSignal

DEFAULT_SAMPLING = 1.0


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def _read_csv(path: Path) -> tuple[np.ndarray, Optional[float]]:
    with open(path, "r", encoding="utf8", newline="") as fh:
        rows: List[List[str]] = [
            [cell.strip().lstrip("\ufeff") for cell in r] for r in csv.reader(fh) if any(c.strip() for c in r)
        ]
    if rows and not _is_number(rows[0][0]):
        rows = rows[1:]
    if not rows:
        return np.zeros(0, dtype=np.float32), None

    data = np.asarray(rows, dtype=float)
    if data.ndim != 2:
        raise ValueError("CSV must be 2D")
    if data.shape[1] == 1:
        return data[:, 0], None
    if data.shape[1] != 2:
        raise ValueError(f"Expected 1 or 2 CSV columns, got {data.shape[1]}")

    times, amplitudes = data[:, 0], data[:, 1]
    if times.size < 2:
        return amplitudes, None
    steps = np.diff(times)
    if not np.allclose(steps, steps[0]) or steps[0] <= 0:
        raise ValueError("time column must be strictly increasing with a constant step")
    return amplitudes, float(steps[0])


def load_waveform(path: str | Path, *, sampling: Optional[float] = None) -> AnalogSignal:
    """Load an :class:`~simsipm.core.signal.AnalogSignal` from ``path``."""

    path = Path(path)
    suffix = path.suffix.lower()
    file_sampling: Optional[float] = None

    if suffix == ".npy":
        samples = np.load(path)
    elif suffix == ".npz":
        with np.load(path) as data:
            if "waveform" not in data.files:
                raise ValueError(f"{path} has no 'waveform' entry")
            samples = data["waveform"]
            if "sampling" in data.files:
                file_sampling = float(data["sampling"])
    elif suffix == ".csv":
        samples, file_sampling = _read_csv(path)
    else:
        raise ValueError(f"Unsupported waveform file format: {path.suffix}")

    samples = np.asarray(samples)
    if samples.ndim != 1:
        raise ValueError(f"waveform must be one-dimensional, got shape {samples.shape}")

    if sampling is None:
        sampling = file_sampling if file_sampling is not None else DEFAULT_SAMPLING
    return AnalogSignal(samples, sampling)
