"""Core algorithms and data structures for simsipm."""

from .properties import DeviceProperties, property_names
from .signal import NO_TIME, AnalogSignal
from .spectrum import PDE_SPECTRUM_POINTS, evaluate_pde, resample_pde_spectrum

__all__ = [
    "DeviceProperties",
    "property_names",
    "AnalogSignal",
    "NO_TIME",
    "PDE_SPECTRUM_POINTS",
    "evaluate_pde",
    "resample_pde_spectrum",
]
