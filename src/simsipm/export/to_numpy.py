from __future__ import annotations

"""Utilities for writing waveforms and PDE spectra to disk."""

from pathlib import Path

import numpy as np

from ..core.properties import DeviceProperties
from ..core.signal import AnalogSignal


def save_waveform(signal: AnalogSignal, path: str | Path) -> Path:
    """Persist ``signal`` so that :func:`~simsipm.ingest.load_waveform` can read it.

    Parameters
    ----------
    signal:
        Waveform to write.
    path:
        Destination.  ``.csv`` files hold two columns ``time,amplitude``
        with time in ns; anything else is written as an ``.npz`` archive
        with ``waveform`` and ``sampling`` entries.
    """

    path = Path(path)
    if path.suffix.lower() == ".csv":
        times = np.arange(signal.size, dtype=float) * signal.sampling
        arr = np.column_stack([times, signal.waveform.astype(float)])
        np.savetxt(path, arr, delimiter=",", header="time,amplitude", comments="")
    else:
        np.savez(path, waveform=signal.waveform, sampling=signal.sampling)
        if path.suffix.lower() != ".npz":
            path = path.with_name(path.name + ".npz")
    return path


def spectrum_array(properties: DeviceProperties) -> np.ndarray:
    """Return the resampled PDE spectrum as an ``(N, 2)`` array.

    The array is empty (shape ``(0, 2)``) unless a spectrum is set.
    """

    items = list(properties.pde_spectrum.items())
    return np.asarray(items, dtype=float).reshape(-1, 2)


def save_spectrum(properties: DeviceProperties, path: str | Path) -> Path:
    """Write the resampled PDE spectrum of ``properties``.

    ``.csv`` files hold ``wavelength,pde`` columns; other paths become an
    ``.npz`` archive with ``wavelength`` and ``pde`` entries.
    """

    arr = spectrum_array(properties)
    if arr.size == 0:
        raise ValueError("properties have no PDE spectrum")
    path = Path(path)
    if path.suffix.lower() == ".csv":
        np.savetxt(path, arr, delimiter=",", header="wavelength,pde", comments="")
    else:
        np.savez(path, wavelength=arr[:, 0], pde=arr[:, 1])
        if path.suffix.lower() != ".npz":
            path = path.with_name(path.name + ".npz")
    return path
