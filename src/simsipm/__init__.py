"""Device property model and analog waveform container for SiPM simulation."""

from .core import AnalogSignal, DeviceProperties
from .errors import InvalidParameter, SettingsParseError, UnknownProperty
from .ingest import load_properties, read_settings
from .types import HitDistribution, PdeType

__version__ = "0.1.0"

__all__ = [
    "AnalogSignal",
    "DeviceProperties",
    "HitDistribution",
    "InvalidParameter",
    "PdeType",
    "SettingsParseError",
    "UnknownProperty",
    "load_properties",
    "read_settings",
]
