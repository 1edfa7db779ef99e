"""Signal processing helpers.

Feature kernels operating on an already windowed, baseline-subtracted
segment of a waveform.  Times are returned relative to the first sample of
the segment in units of samples; :class:`~simsipm.core.signal.AnalogSignal`
converts them to ns.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


def integral(segment: np.ndarray) -> float:
    """Return the sum of *segment* (0.0 for an empty segment)."""

    return float(np.sum(segment, dtype=np.float64))


def peak(segment: np.ndarray) -> float:
    """Return the maximum of *segment* (0.0 for an empty segment)."""

    if segment.size == 0:
        return 0.0
    return float(np.max(segment))


def samples_over_threshold(segment: np.ndarray, threshold: float) -> int:
    """Return how many samples of *segment* are strictly above ``threshold``."""

    return int(np.count_nonzero(segment > threshold))


def first_crossing(segment: np.ndarray, threshold: float) -> Optional[int]:
    """Return the index of the first sample strictly above ``threshold``.

    ``None`` is returned if no sample exceeds the threshold.
    """

    above = np.flatnonzero(segment > threshold)
    if above.size == 0:
        return None
    return int(above[0])


def argmax(segment: np.ndarray) -> Optional[int]:
    """Return the index of the first maximum of *segment*, or ``None`` if empty."""

    if segment.size == 0:
        return None
    return int(np.argmax(segment))
