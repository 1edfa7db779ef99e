"""Writers for waveforms and PDE spectra."""

from .to_numpy import save_spectrum, save_waveform, spectrum_array

__all__ = ["save_waveform", "save_spectrum", "spectrum_array"]
