"""Readers for settings files and sampled waveforms."""

from .settings_file import load_properties, read_settings
from .waveform import load_waveform

__all__ = ["read_settings", "load_properties", "load_waveform"]
