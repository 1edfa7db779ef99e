import io
import json
import logging

import pytest

from simsipm import DeviceProperties, HitDistribution, PdeType, SettingsParseError
from simsipm.ingest import load_properties, read_settings


def test_read_settings_example(tmp_path, caplog):
    caplog.set_level(logging.WARNING, logger="simsipm")
    path = tmp_path / "sipm.txt"
    path.write_text("size=6\npitch=25\nsampling=1\nsnr=30\n# comment\nbadkey=1\n")

    props = read_settings(path)

    assert props.size == 6.0
    assert props.pitch == 25.0
    assert props.n_cells == 57600
    assert props.snr_linear == pytest.approx(0.031623, rel=1e-4)
    assert "Property: badkey not found!" in caplog.text


def test_whitespace_case_and_comments(tmp_path):
    path = tmp_path / "sipm.txt"
    path.write_text(
        "\n"
        "   # leading comment\n"
        "// another comment\n"
        "  Pitch = 50 \n"
        "DCR\t=\t1e5\n"
        "\n"
        "FallTimeSlow = 120\n"
    )
    props = read_settings(path)
    assert props.pitch == 50.0
    assert props.dcr == 1e5
    assert props.has_slow_component


def test_malformed_value_aborts(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("size=3\npitch=abc\n")
    with pytest.raises(SettingsParseError) as excinfo:
        read_settings(path)
    assert excinfo.value.line == 2
    msg = str(excinfo.value)
    assert f"{path}:2:" in msg
    assert "'abc'" in msg


def test_missing_equals_aborts(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("size 3\n")
    with pytest.raises(SettingsParseError) as excinfo:
        read_settings(path)
    assert excinfo.value.line == 1


def test_rejected_value_reports_line(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("xt=0.1\nxt=2\n")
    with pytest.raises(SettingsParseError) as excinfo:
        read_settings(path)
    assert excinfo.value.line == 2
    assert "xt" in str(excinfo.value)


def test_missing_file_returns_defaults(tmp_path, caplog):
    caplog.set_level(logging.ERROR, logger="simsipm")
    props = read_settings(tmp_path / "missing.txt")
    assert props.model_dump() == DeviceProperties().model_dump()
    assert "Could not open" in caplog.text


def test_read_settings_from_stream(caplog):
    caplog.set_level(logging.WARNING)
    log = logging.getLogger("tests.settings")
    props = read_settings(io.StringIO("PDE=0.4\nfoo=1\n"), log=log)
    assert props.pde_type is PdeType.SCALAR
    assert props.pde_value == 0.4
    assert [r.name for r in caplog.records] == ["tests.settings"]


def test_stream_errors_name_the_stream():
    with pytest.raises(SettingsParseError) as excinfo:
        read_settings(io.StringIO("size=x\n"))
    assert str(excinfo.value).startswith("<stream>:1:")


def test_load_properties_yaml(tmp_path):
    path = tmp_path / "sipm.yaml"
    path.write_text(
        "size: 3\n"
        "Pitch: 50\n"
        "hit_distribution: circle\n"
        "pde_spectrum:\n"
        "  wavelengths: [300, 400, 500]\n"
        "  efficiencies: [0.2, 0.4, 0.3]\n"
    )
    props = load_properties(path)
    assert props.n_cells == 60 ** 2
    assert props.hit_distribution is HitDistribution.CIRCLE
    assert props.pde_type is PdeType.SPECTRUM
    assert len(props.pde_spectrum) == 32


def test_load_properties_json(tmp_path):
    path = tmp_path / "sipm.json"
    path.write_text(json.dumps({"xt": 0.1, "dxt": 0.2, "cellrecovery": 20}))
    props = load_properties(path)
    assert props.has_dxt
    assert props.recovery_time == 20.0


def test_load_properties_text_fallback(tmp_path):
    path = tmp_path / "sipm.conf"
    path.write_text("size=2\n")
    assert load_properties(path).size == 2.0


def test_load_properties_requires_mapping(tmp_path):
    path = tmp_path / "sipm.json"
    path.write_text("[1, 2]")
    with pytest.raises(TypeError):
        load_properties(path)
