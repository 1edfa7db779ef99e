"""Physical parameters of a SiPM.

:class:`DeviceProperties` holds every parameter a simulator needs: geometry,
pulse shape and sampling, noise sources and the photon detection efficiency
(PDE).  It is a pydantic model with assignment validation; the typed
``set_*`` methods translate validation failures into
:class:`~simsipm.errors.InvalidParameter` and leave the object unchanged.

Out-of-domain values are always rejected, never clamped.

Noise sources are switched on by setting their value and off with the
matching ``set_*_off`` method; a disabled source is stored as ``None``.
"""

from __future__ import annotations

import logging
import math
from typing import Annotated, Any, Dict, Optional, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidParameter, UnknownProperty
from ..types import HitDistribution, NoPde, Pde, PdeType, ScalarPde, SpectrumPde
from . import spectrum

logger = logging.getLogger(__name__)

PositiveFloat = Annotated[float, Field(gt=0.0)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]
Probability = Annotated[float, Field(ge=0.0, le=1.0)]

# Lower-case property token -> typed setter.  ``cellrecovery`` is kept as an
# alias of ``recoverytime`` for older settings files.
_PROPERTY_SETTERS: Dict[str, str] = {
    "size": "set_size",
    "pitch": "set_pitch",
    "sampling": "set_sampling",
    "cellrecovery": "set_recovery_time",
    "recoverytime": "set_recovery_time",
    "signallength": "set_signal_length",
    "risetime": "set_rise_time",
    "falltimefast": "set_fall_time_fast",
    "falltimeslow": "set_fall_time_slow",
    "slowcomponentfraction": "set_slow_component_fraction",
    "tauapfast": "set_tau_ap_fast",
    "tauapslow": "set_tau_ap_slow",
    "ccgv": "set_ccgv",
    "snr": "set_snr",
    "pde": "set_pde",
    "dcr": "set_dcr",
    "xt": "set_xt",
    "dxt": "set_dxt",
    "ap": "set_ap",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _side_cells(size: float, pitch: float) -> int:
    return _round_half_up(1000.0 * size / pitch)


def property_names() -> list[str]:
    """Return the tokens understood by :meth:`DeviceProperties.set_property`."""

    return sorted(_PROPERTY_SETTERS)


class DeviceProperties(BaseModel):
    """Container of all SiPM parameters.

    Units follow the usual conventions of the field: ``size`` in mm,
    ``pitch`` in um, times in ns, ``dcr`` in Hz and ``snr_db`` in dB.
    Probabilities and fractions are dimensionless in ``[0, 1]``.
    """

    model_config = ConfigDict(validate_assignment=True, allow_inf_nan=False, extra="forbid")

    size: PositiveFloat = 1.0
    pitch: PositiveFloat = 25.0
    sampling: PositiveFloat = 1.0
    signal_length: PositiveFloat = 500.0
    rise_time: PositiveFloat = 1.0
    fall_time_fast: PositiveFloat = 50.0
    fall_time_slow: Optional[PositiveFloat] = None
    slow_component_fraction: Probability = 0.2
    recovery_time: NonNegativeFloat = 50.0
    dcr: Optional[NonNegativeFloat] = 200e3
    xt: Optional[Probability] = 0.05
    dxt: Optional[Probability] = None
    ap: Optional[Probability] = 0.03
    tau_ap_fast: PositiveFloat = 10.0
    tau_ap_slow: PositiveFloat = 80.0
    ccgv: NonNegativeFloat = 0.05
    snr_db: float = 30.0
    pde: Pde = Field(default_factory=NoPde, discriminator="kind")
    hit_distribution: HitDistribution = HitDistribution.UNIFORM

    @model_validator(mode="after")
    def check_geometry(self) -> "DeviceProperties":
        if _side_cells(self.size, self.pitch) < 1:
            raise ValueError(f"a {self.size} mm device with {self.pitch} um pitch holds no cells")
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        # Model validators run after the field is stored; restore it on failure.
        previous = self.__dict__.copy()
        try:
            super().__setattr__(name, value)
        except ValidationError:
            object.__setattr__(self, "__dict__", previous)
            raise

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    @property
    def side_cells(self) -> int:
        """Number of cells along one side of the device."""
        return _side_cells(self.size, self.pitch)

    @property
    def n_cells(self) -> int:
        """Total number of cells."""
        return self.side_cells * self.side_cells

    @property
    def signal_points(self) -> int:
        """Number of samples in a signal of ``signal_length`` ns."""
        return _round_half_up(self.signal_length / self.sampling)

    @property
    def snr_linear(self) -> float:
        """Noise amplitude relative to a single photoelectron, ``10**(-snr_db/20)``."""
        return 10.0 ** (-self.snr_db / 20.0)

    @property
    def pde_type(self) -> PdeType:
        return PdeType(self.pde.kind)

    @property
    def pde_value(self) -> float:
        """Scalar efficiency, 1.0 unless a scalar PDE is set."""
        return self.pde.value if isinstance(self.pde, ScalarPde) else 1.0

    @property
    def pde_spectrum(self) -> Dict[float, float]:
        """Resampled spectrum as an ordered ``wavelength -> efficiency`` mapping."""
        if isinstance(self.pde, SpectrumPde):
            return dict(zip(self.pde.wavelengths, self.pde.efficiencies))
        return {}

    @property
    def has_dcr(self) -> bool:
        return self.dcr is not None

    @property
    def has_xt(self) -> bool:
        return self.xt is not None

    @property
    def has_dxt(self) -> bool:
        return self.xt is not None and self.dxt is not None

    @property
    def has_ap(self) -> bool:
        return self.ap is not None

    @property
    def has_slow_component(self) -> bool:
        return self.fall_time_slow is not None

    def evaluate_pde(self, wavelength: Optional[float] = None) -> float:
        """Return the detection efficiency for a photon of ``wavelength`` nm.

        Without a wavelength, or with no spectrum set, the scalar efficiency
        (1.0 when PDE is off) is returned.
        """

        if isinstance(self.pde, SpectrumPde):
            if wavelength is None:
                raise ValueError("a wavelength is required when a PDE spectrum is set")
            return spectrum.evaluate_pde(self.pde.wavelengths, self.pde.efficiencies, wavelength)
        return self.pde_value

    # ------------------------------------------------------------------
    # Generic setter
    # ------------------------------------------------------------------

    def set_property(
        self,
        name: str,
        value: float,
        *,
        strict: bool = False,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """Set a property from its case-insensitive name.

        Unknown names are reported as a warning on ``log`` (the module
        logger by default) and otherwise ignored.  With ``strict=True`` an
        :class:`~simsipm.errors.UnknownProperty` is raised instead.
        """

        setter = _PROPERTY_SETTERS.get(name.lower())
        if setter is None:
            if strict:
                raise UnknownProperty(name)
            (log or logger).warning("Property: %s not found!", name)
            return
        getattr(self, setter)(value)

    def _assign(self, field: str, value: Any) -> None:
        try:
            setattr(self, field, value)
        except ValidationError as exc:
            raise InvalidParameter(field, value, exc.errors()[0]["msg"]) from exc

    # ------------------------------------------------------------------
    # Typed setters
    # ------------------------------------------------------------------

    def set_size(self, value: float) -> None:
        self._assign("size", value)

    def set_pitch(self, value: float) -> None:
        self._assign("pitch", value)

    def set_sampling(self, value: float) -> None:
        self._assign("sampling", value)

    def set_signal_length(self, value: float) -> None:
        self._assign("signal_length", value)

    def set_rise_time(self, value: float) -> None:
        self._assign("rise_time", value)

    def set_fall_time_fast(self, value: float) -> None:
        self._assign("fall_time_fast", value)

    def set_fall_time_slow(self, value: float) -> None:
        """Set the slow decay constant, enabling the slow pulse component."""
        self._assign("fall_time_slow", value)

    def set_slow_component_fraction(self, value: float) -> None:
        self._assign("slow_component_fraction", value)

    def set_recovery_time(self, value: float) -> None:
        self._assign("recovery_time", value)

    def set_tau_ap_fast(self, value: float) -> None:
        self._assign("tau_ap_fast", value)

    def set_tau_ap_slow(self, value: float) -> None:
        self._assign("tau_ap_slow", value)

    def set_ccgv(self, value: float) -> None:
        self._assign("ccgv", value)

    def set_snr(self, value: float) -> None:
        """Set the signal to noise ratio in dB."""
        self._assign("snr_db", value)

    def set_dcr(self, value: float) -> None:
        """Set the dark count rate in Hz, enabling dark counts."""
        self._assign("dcr", value)

    def set_xt(self, value: float) -> None:
        """Set the optical crosstalk probability, enabling crosstalk."""
        self._assign("xt", value)

    def set_dxt(self, value: float) -> None:
        """Set the delayed crosstalk probability as a fraction of ``xt``."""
        self._assign("dxt", value)

    def set_ap(self, value: float) -> None:
        """Set the afterpulse probability, enabling afterpulses."""
        self._assign("ap", value)

    def set_pde(self, value: float) -> None:
        """Use a single wavelength independent efficiency."""
        try:
            pde = ScalarPde(value=value)
        except ValidationError as exc:
            raise InvalidParameter("pde", value, exc.errors()[0]["msg"]) from exc
        self._assign("pde", pde)

    def set_pde_spectrum(
        self,
        wavelengths: Sequence[float] | np.ndarray,
        efficiencies: Sequence[float] | np.ndarray,
    ) -> None:
        """Resample a measured PDE curve and use it as the active efficiency.

        See :func:`simsipm.core.spectrum.resample_pde_spectrum`.
        """

        grid, pde = spectrum.resample_pde_spectrum(wavelengths, efficiencies)
        self._assign("pde", SpectrumPde(wavelengths=tuple(grid.tolist()), efficiencies=tuple(pde.tolist())))

    def set_hit_distribution(self, value: HitDistribution | str) -> None:
        if isinstance(value, str):
            value = value.lower()
        self._assign("hit_distribution", value)

    def set_dcr_off(self) -> None:
        self.dcr = None

    def set_xt_off(self) -> None:
        self.xt = None

    def set_dxt_off(self) -> None:
        self.dxt = None

    def set_ap_off(self) -> None:
        self.ap = None

    def set_slow_component_off(self) -> None:
        self.fall_time_slow = None

    def set_pde_off(self) -> None:
        self.pde = NoPde()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        out = [
            "===> SiPM Properties <===",
            f"Address: {hex(id(self))}",
            f"Size: {self.size:.2f} mm",
            f"Pitch: {self.pitch:.2f} um",
            f"Number of cells: {self.n_cells}",
            f"Hit distribution: {self.hit_distribution.label}",
            f"Cell recovery time: {self.recovery_time:.2f} ns",
        ]
        if self.has_dcr:
            out.append(f"Dark count rate: {self.dcr / 1e3:.2f} kHz")
        else:
            out.append("Dark count is OFF")
        if self.has_xt:
            out.append(f"Optical crosstalk probability: {self.xt * 100:.2f} %")
        else:
            out.append("Optical crosstalk is OFF")
        if self.has_dxt:
            out.append(f"Delayed optical crosstalk probability (as a fraction of xt): {self.dxt * 100:.2f} %")
        else:
            out.append("Delayed optical crosstalk is OFF")
        if self.has_ap:
            out.append(f"Afterpulse probability: {self.ap * 100:.2f} %")
            out.append(f"Tau afterpulses (fast): {self.tau_ap_fast:.2f} ns")
            out.append(f"Tau afterpulses (slow): {self.tau_ap_slow:.2f} ns")
        else:
            out.append("Afterpulse is OFF")
        out.append(f"Cell-to-cell gain variation: {self.ccgv * 100:.2f} %")
        out.append(f"SNR: {self.snr_db:.2f} dB")
        if self.pde_type is PdeType.SCALAR:
            out.append(f"Photon detection efficiency: {self.pde_value * 100:.2f} %")
        elif self.pde_type is PdeType.SPECTRUM:
            out.append("Photon detection efficiency: depending on wavelength")
            out.append("Photon wavelength\tDetection efficiency")
            out.extend(f"{x:.2f} -> {y:.2f}" for x, y in self.pde_spectrum.items())
        else:
            out.append("Photon detection efficiency is OFF (100 %)")
        out.append(f"Rising time of signal: {self.rise_time:.2f} ns")
        out.append(f"Falling time of signal (fast): {self.fall_time_fast:.2f} ns")
        if self.has_slow_component:
            out.append(f"Falling time of signal (slow): {self.fall_time_slow:.2f} ns")
            out.append(f"Slow component fraction: {self.slow_component_fraction * 100:.2f} %")
        out.append(f"Signal length: {self.signal_length:.2f} ns")
        out.append(f"Sampling time: {self.sampling:.2f} ns")
        return "\n".join(out) + "\n"

    def to_string(self) -> str:
        """Return the same report as :func:`str`."""

        return str(self)


__all__ = ["DeviceProperties", "property_names"]
