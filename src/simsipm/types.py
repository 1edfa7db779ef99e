"""Common type helpers for simsipm.

This module defines the enumerations and lightweight containers shared by
the property model and the waveform container.  The photon detection
efficiency is a tagged union of three pydantic models so that only one
representation can be active at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PdeType(str, Enum):
    """Active representation of the photon detection efficiency."""

    NONE = "none"
    SCALAR = "scalar"
    SPECTRUM = "spectrum"


class HitDistribution(str, Enum):
    """Where photons are presumed to land on the cell grid."""

    UNIFORM = "uniform"
    CIRCLE = "circle"
    GAUSSIAN = "gaussian"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class _PdeModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class NoPde(_PdeModel):
    """Detection efficiency disabled (100 %)."""

    kind: Literal["none"] = "none"


class ScalarPde(_PdeModel):
    """Single wavelength independent efficiency."""

    kind: Literal["scalar"] = "scalar"
    value: float = Field(ge=0.0, le=1.0)


class SpectrumPde(_PdeModel):
    """Efficiency sampled on a uniform wavelength grid."""

    kind: Literal["spectrum"] = "spectrum"
    wavelengths: Tuple[float, ...]
    efficiencies: Tuple[float, ...]

    @model_validator(mode="after")
    def check_grid(self) -> "SpectrumPde":
        if len(self.wavelengths) != len(self.efficiencies):
            raise ValueError(
                f"{len(self.wavelengths)} wavelengths for {len(self.efficiencies)} efficiencies"
            )
        if any(b <= a for a, b in zip(self.wavelengths, self.wavelengths[1:])):
            raise ValueError("wavelengths must be strictly increasing")
        return self


Pde = Union[NoPde, ScalarPde, SpectrumPde]


@dataclass(frozen=True)
class TimeWindow:
    """Closed time interval ``[start, stop]`` expressed in ns."""

    start: float
    stop: float

    @property
    def duration(self) -> float:
        """Return the interval length in ns."""

        return self.stop - self.start
