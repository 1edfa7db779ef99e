from __future__ import annotations

"""Configuration utilities for simsipm.

This module defines the runtime configuration of the command line tools
using Pydantic models.  The :class:`Settings` container groups sections for
logging, the default device description, feature extraction windows and
export formatting.  Instances can be populated from environment variables
(``SIMSIPM_`` prefix, ``__`` as nested delimiter) or from YAML/JSON files
with matching nested keys.

These settings only control the tools; the physical device parameters live
in :class:`~simsipm.core.properties.DeviceProperties`.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.logging import DEFAULT_FORMAT


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class LoggingSettings(SectionModel):
    """Log level and format of the ``simsipm`` logger."""

    level: str = "INFO"
    format: str = DEFAULT_FORMAT

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class DeviceSettings(SectionModel):
    """Default device description used when no file is given."""

    properties: str | None = None


class FeatureSettings(SectionModel):
    """Window and levels used for waveform feature extraction."""

    start: float = 0.0
    stop: float | None = None
    baseline: float = 0.0
    threshold: float = 0.5


class WaveformSettings(SectionModel):
    """Options for loading waveform files."""

    sampling: float | None = Field(default=None, gt=0)


class ExportSettings(SectionModel):
    """Formatting of printed tables."""

    precision: int = Field(default=4, ge=0)


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    device: DeviceSettings = Field(default_factory=DeviceSettings)
    features: FeatureSettings = Field(default_factory=FeatureSettings)
    waveform: WaveformSettings = Field(default_factory=WaveformSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)

    model_config = SettingsConfigDict(
        env_prefix="SIMSIPM_",
        env_nested_delimiter="__",
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)
