import json
import pytest

from simsipm.config import Settings, load_settings


def test_from_env(monkeypatch):
    monkeypatch.setenv("SIMSIPM_FEATURES__THRESHOLD", "0.3")
    monkeypatch.setenv("SIMSIPM_LOGGING__LEVEL", "debug")
    s = Settings()
    assert s.features.threshold == 0.3
    assert s.logging.level == "DEBUG"


def test_defaults():
    s = Settings()
    assert s.features.start == 0.0
    assert s.features.stop is None
    assert s.waveform.sampling is None
    assert s.export.precision == 4


def test_load_settings_json(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"features": {"baseline": 0.1}, "export": {"precision": 2}}))
    s = load_settings(p)
    assert s.features.baseline == 0.1
    assert s.export.precision == 2


def test_load_settings_yaml(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text("device:\n  properties: sipm.txt\nwaveform:\n  sampling: 0.5\n")
    s = load_settings(p)
    assert s.device.properties == "sipm.txt"
    assert s.waveform.sampling == 0.5


def test_load_settings_requires_mapping(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text("[1]")
    with pytest.raises(TypeError):
        load_settings(p)
