import logging

import pytest

from simsipm import DeviceProperties, HitDistribution, InvalidParameter, PdeType, UnknownProperty
from simsipm.core.properties import property_names
from simsipm.types import SpectrumPde


def test_defaults_and_derived_values():
    props = DeviceProperties()
    assert props.side_cells == 40
    assert props.n_cells == 1600
    assert props.signal_points == 500
    assert props.snr_linear == pytest.approx(10 ** (-1.5))
    assert props.pde_type is PdeType.NONE
    assert props.hit_distribution is HitDistribution.UNIFORM
    assert props.has_dcr and props.has_xt and props.has_ap
    assert not props.has_dxt
    assert not props.has_slow_component


def test_derived_values_follow_setters():
    props = DeviceProperties()
    props.set_size(6)
    props.set_pitch(25)
    assert props.n_cells == 240 ** 2
    props.set_sampling(0.5)
    props.set_signal_length(250)
    assert props.signal_points == 500
    props.set_snr(20)
    assert props.snr_linear == pytest.approx(0.1)


@pytest.mark.parametrize("name", ["SIZE", "size", "Size"])
def test_set_property_is_case_insensitive(name):
    props = DeviceProperties()
    props.set_property(name, 3.0)
    assert props.size == 3.0


def test_set_property_aliases():
    props = DeviceProperties()
    props.set_property("CellRecovery", 12.0)
    assert props.recovery_time == 12.0
    props.set_property("recoveryTime", 30.0)
    assert props.recovery_time == 30.0
    assert "cellrecovery" in property_names()


def test_unknown_property_is_reported_and_ignored(caplog):
    caplog.set_level(logging.WARNING, logger="simsipm")
    props = DeviceProperties()
    before = props.model_dump()
    props.set_property("bogus", 1.0)
    assert props.model_dump() == before
    assert "Property: bogus not found!" in caplog.text


def test_unknown_property_uses_injected_logger(caplog):
    caplog.set_level(logging.WARNING)
    log = logging.getLogger("tests.diagnostics")
    DeviceProperties().set_property("nothing", 2.0, log=log)
    assert [r.name for r in caplog.records] == ["tests.diagnostics"]


def test_unknown_property_strict():
    with pytest.raises(UnknownProperty) as excinfo:
        DeviceProperties().set_property("bogus", 1.0, strict=True)
    assert excinfo.value.name == "bogus"
    assert "not found" in str(excinfo.value)


@pytest.mark.parametrize(
    "setter, value",
    [
        ("set_size", -1.0),
        ("set_pitch", 0.0),
        ("set_sampling", 0.0),
        ("set_xt", 1.5),
        ("set_dxt", -0.1),
        ("set_ap", 2.0),
        ("set_dcr", -5.0),
        ("set_slow_component_fraction", 1.1),
        ("set_pde", 1.2),
        ("set_ccgv", -0.01),
        ("set_snr", float("nan")),
    ],
)
def test_out_of_domain_values_are_rejected(setter, value):
    props = DeviceProperties()
    before = props.model_dump()
    with pytest.raises(InvalidParameter):
        getattr(props, setter)(value)
    assert props.model_dump() == before


def test_geometry_must_hold_at_least_one_cell():
    props = DeviceProperties()
    with pytest.raises(InvalidParameter) as excinfo:
        props.set_pitch(3000.0)
    assert excinfo.value.name == "pitch"
    assert props.pitch == 25.0
    with pytest.raises(InvalidParameter):
        props.set_size(0.01)
    assert props.size == 1.0


def test_constructor_validates_geometry():
    with pytest.raises(ValueError):
        DeviceProperties(size=1.0, pitch=5000.0)


def test_field_assignment_validates_geometry():
    props = DeviceProperties()
    before = props.model_dump()
    with pytest.raises(ValueError):
        props.pitch = 1e6
    assert props.model_dump() == before
    assert props.n_cells == 1600
    with pytest.raises(ValueError):
        props.size = 0.001
    assert props.size == 1.0
    props.pitch = 50.0
    assert props.n_cells == 400


def test_noise_sources_toggle():
    props = DeviceProperties()
    props.set_dxt(0.1)
    assert props.has_dxt
    props.set_xt_off()
    assert not props.has_xt
    assert not props.has_dxt
    props.set_xt(0.2)
    assert props.has_dxt
    props.set_dcr_off()
    props.set_ap_off()
    assert not props.has_dcr and not props.has_ap
    props.set_fall_time_slow(120.0)
    assert props.has_slow_component
    props.set_slow_component_off()
    assert not props.has_slow_component


def test_pde_variants_are_exclusive():
    props = DeviceProperties()
    props.set_pde(0.3)
    assert props.pde_type is PdeType.SCALAR
    assert props.evaluate_pde() == 0.3
    assert props.pde_spectrum == {}

    props.set_pde_spectrum([300, 400, 500], [0.1, 0.4, 0.2])
    assert props.pde_type is PdeType.SPECTRUM
    assert len(props.pde_spectrum) == 32
    assert props.pde_value == 1.0

    props.set_pde(0.5)
    assert props.pde_type is PdeType.SCALAR
    assert props.pde_spectrum == {}

    props.set_pde_off()
    assert props.pde_type is PdeType.NONE
    assert props.evaluate_pde(420.0) == 1.0


def test_evaluate_pde_spectrum():
    props = DeviceProperties()
    props.set_pde_spectrum([300, 600], [0.2, 0.2])
    assert props.evaluate_pde(450.0) == pytest.approx(0.2)
    assert props.evaluate_pde(100.0) == pytest.approx(0.2)
    with pytest.raises(ValueError):
        props.evaluate_pde()


def test_hit_distribution():
    props = DeviceProperties()
    props.set_hit_distribution("Gaussian")
    assert props.hit_distribution is HitDistribution.GAUSSIAN
    props.set_hit_distribution(HitDistribution.CIRCLE)
    assert "Hit distribution: Circle" in str(props)
    with pytest.raises(InvalidParameter):
        props.set_hit_distribution("square")


def test_report_sections():
    props = DeviceProperties()
    text = str(props)
    assert text.startswith("===> SiPM Properties <===\n")
    assert f"Address: {hex(id(props))}" in text
    assert "Number of cells: 1600" in text
    assert "Dark count rate: 200.00 kHz" in text
    assert "Optical crosstalk probability: 5.00 %" in text
    assert "Delayed optical crosstalk is OFF" in text
    assert "Tau afterpulses (slow): 80.00 ns" in text
    assert "Photon detection efficiency is OFF (100 %)" in text
    assert "Falling time of signal (slow)" not in text

    props.set_dcr_off()
    props.set_ap_off()
    props.set_pde(0.25)
    props.set_fall_time_slow(100.0)
    text = props.to_string()
    assert "Dark count is OFF" in text
    assert "Afterpulse is OFF" in text
    assert "Photon detection efficiency: 25.00 %" in text
    assert "Slow component fraction: 20.00 %" in text


def test_report_lists_spectrum():
    props = DeviceProperties()
    props.set_pde_spectrum([300, 500], [0.2, 0.4])
    text = str(props)
    assert "Photon detection efficiency: depending on wavelength" in text
    assert "300.00 -> 0.20" in text


@pytest.mark.parametrize(
    "wavelengths, efficiencies",
    [
        ((1.0,), (0.1, 0.2)),
        ((300.0, 400.0), (0.1,)),
        ((400.0, 300.0), (0.1, 0.2)),
        ((300.0, 300.0), (0.1, 0.2)),
    ],
)
def test_spectrum_pde_rejects_bad_grid(wavelengths, efficiencies):
    with pytest.raises(ValueError):
        SpectrumPde(wavelengths=wavelengths, efficiencies=efficiencies)


def test_spectrum_pde_accepts_resampled_grid():
    props = DeviceProperties()
    props.set_pde_spectrum([300, 400, 500], [0.2, 0.4, 0.3])
    props.pde = SpectrumPde(wavelengths=props.pde.wavelengths, efficiencies=props.pde.efficiencies)
    assert len(props.pde_spectrum) == 32
