"""Helpers for mapping time windows onto sample indices."""

from __future__ import annotations

import math
from typing import Optional, Tuple

from ..types import TimeWindow

# Digits kept when dividing times by the sampling period, so that e.g.
# 0.3 / 0.1 maps to index 3 and not 2.9999999999999996.
_INDEX_DIGITS = 9


def window_indices(window: TimeWindow, sampling: float, n_samples: int) -> Optional[Tuple[int, int]]:
    """Return the inclusive index range ``(start, stop)`` covered by *window*.

    Sample ``i`` sits at time ``i * sampling``.  The range is clamped to
    ``[0, n_samples - 1]``; ``None`` is returned when no sample falls inside
    the window.  ``ValueError`` is raised if ``sampling`` is not positive.
    """

    if sampling <= 0:
        raise ValueError("sampling must be positive")
    if n_samples <= 0 or math.isnan(window.start) or math.isnan(window.stop):
        return None

    first = round(window.start / sampling, _INDEX_DIGITS)
    last = round(window.stop / sampling, _INDEX_DIGITS)
    start = max(math.ceil(first), 0) if math.isfinite(first) else (0 if first < 0 else n_samples)
    stop = min(math.floor(last), n_samples - 1) if math.isfinite(last) else (n_samples - 1 if last > 0 else -1)
    if start > stop:
        return None
    return start, stop
