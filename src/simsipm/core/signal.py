"""Container for the sampled analog output of a SiPM.

The waveform amplitude is scaled such that the signal from one
photoelectron has height equal to 1 (not considering noise), so that
quantities like SNR and CCGV scale proportionally.

All feature queries take a closed time window ``[t0, t1]`` in ns.  Sample
``i`` sits at time ``i * sampling``; the window is clamped to the samples
that exist.  A window that covers no sample yields ``0.0`` for
:meth:`AnalogSignal.integral`, :meth:`AnalogSignal.peak` and
:meth:`AnalogSignal.tot`, and :data:`NO_TIME` (``-1.0``) for the timing
queries :meth:`AnalogSignal.toa` and :meth:`AnalogSignal.top`.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from ..types import TimeWindow
from ..utils import features
from ..utils.windows import window_indices

#: Returned by timing queries when no qualifying sample exists.
NO_TIME = -1.0


class AnalogSignal:
    """Fixed sampling rate waveform with simple feature extraction.

    Parameters
    ----------
    waveform:
        Sampled amplitudes.  Stored as a one-dimensional ``float32`` array.
    sampling:
        Sampling period in ns per sample.  Must be positive.
    """

    def __init__(self, waveform: Sequence[float] | np.ndarray = (), sampling: float = 1.0) -> None:
        sampling = float(sampling)
        if not sampling > 0 or not math.isfinite(sampling):
            raise ValueError("sampling must be a positive finite number")
        self._waveform = np.array(waveform, dtype=np.float32).reshape(-1)
        self._sampling = sampling

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return int(self._waveform.size)

    def __getitem__(self, i: int) -> float:
        return float(self._waveform[i])

    def __setitem__(self, i: int, value: float) -> None:
        self._waveform[i] = value

    @property
    def data(self) -> np.ndarray:
        """Writable underlying buffer, for bulk producers."""

        return self._waveform

    @property
    def waveform(self) -> np.ndarray:
        """Read-only view of the samples."""

        view = self._waveform.view()
        view.flags.writeable = False
        return view

    @property
    def size(self) -> int:
        """Number of points in the waveform."""

        return len(self)

    @property
    def sampling(self) -> float:
        """Sampling time of the signal in ns."""

        return self._sampling

    @property
    def length(self) -> float:
        """Number of samples divided by the sampling period.

        Kept as ``size / sampling`` for compatibility with existing
        consumers; use :attr:`duration` for ``size * sampling``.
        """

        return self.size / self._sampling

    @property
    def duration(self) -> float:
        """Time spanned by the waveform in ns."""

        return self.size * self._sampling

    # ------------------------------------------------------------------
    # Feature extraction
    # ------------------------------------------------------------------

    def _segment(self, t0: float, t1: float, baseline: float) -> tuple[int, np.ndarray]:
        indices = window_indices(TimeWindow(t0, t1), self._sampling, self.size)
        if indices is None:
            return 0, np.empty(0, dtype=np.float64)
        start, stop = indices
        segment = self._waveform[start : stop + 1].astype(np.float64) - baseline
        return start, segment

    def integral(self, t0: float, t1: float, baseline: float = 0.0) -> float:
        """Return the time integral of the signal over ``[t0, t1]``.

        Computed as the sum of ``sample - baseline`` multiplied by the
        sampling period, so the unit is amplitude x ns.
        """

        _, segment = self._segment(t0, t1, baseline)
        return features.integral(segment) * self._sampling

    def peak(self, t0: float, t1: float, baseline: float = 0.0) -> float:
        """Return the maximum of ``sample - baseline`` over ``[t0, t1]``."""

        _, segment = self._segment(t0, t1, baseline)
        return features.peak(segment)

    def tot(self, t0: float, t1: float, threshold: float, baseline: float = 0.0) -> float:
        """Return the time over threshold in ns.

        Counts the samples in ``[t0, t1]`` whose baseline-subtracted value is
        strictly above ``threshold`` and multiplies by the sampling period.
        """

        _, segment = self._segment(t0, t1, baseline)
        return features.samples_over_threshold(segment, threshold) * self._sampling

    def toa(self, t0: float, t1: float, threshold: float, baseline: float = 0.0) -> float:
        """Return the time of arrival in ns.

        This is the absolute time of the first sample in ``[t0, t1]`` whose
        baseline-subtracted value is strictly above ``threshold``, or
        :data:`NO_TIME` if there is none.
        """

        start, segment = self._segment(t0, t1, baseline)
        index = features.first_crossing(segment, threshold)
        if index is None:
            return NO_TIME
        return (start + index) * self._sampling

    def top(self, t0: float, t1: float, threshold: float = -math.inf, baseline: float = 0.0) -> float:
        """Return the time of peak in ns.

        The absolute time of the first maximum in ``[t0, t1]``.
        :data:`NO_TIME` is returned for an empty window or when the peak
        does not exceed ``threshold``.
        """

        start, segment = self._segment(t0, t1, baseline)
        index = features.argmax(segment)
        if index is None or not segment[index] > threshold:
            return NO_TIME
        return (start + index) * self._sampling

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        lines = [
            "===> SiPM Analog Signal <===",
            f"Address: {hex(id(self))}",
            f"Sampling time: {self._sampling:.2f} ns",
            f"Number of points: {self.size}",
            f"Signal length: {self.length:.2f}",
        ]
        if self.size:
            lines.append(f"Peak amplitude: {float(np.max(self._waveform)):.2f}")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"AnalogSignal(size={self.size}, sampling={self._sampling})"

    def to_string(self) -> str:
        """Return the same report as :func:`str`."""

        return str(self)
