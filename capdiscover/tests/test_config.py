import json

import pytest
from pydantic import ValidationError

from capdiscover.config import CONFIG_ENV, CandidateConfig, DiscoveryConfig, load_config
from capdiscover.errors import ConfigError


def test_defaults_without_file(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    config = load_config()
    assert config == DiscoveryConfig()
    assert config.builtin is True and config.entry_points is True


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "discovery.json"
    path.write_text(json.dumps({
        "pins": {"httpx": "0.27.0"},
        "capabilities": {"log": {"prefer": ["loguru"]}},
    }), encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(path))
    config = load_config()
    assert config.pins == {"httpx": "0.27.0"}
    assert config.capabilities["log"].prefer == ["loguru"]
    assert config.capabilities["log"].use_defaults is True


def test_invalid_files_raise_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(bad)
    wrong = tmp_path / "wrong.json"
    wrong.write_text(json.dumps({"capabilities": {"log": {"candidates": [{"package": "x", "entry": "nocolon"}]}}}))
    with pytest.raises(ConfigError):
        load_config(wrong)


def test_candidate_config_validation():
    assert CandidateConfig(package=" pkg ", entry="m:f").package == "pkg"
    with pytest.raises(ValidationError):
        CandidateConfig(package="  ", entry="m:f")
    config = CandidateConfig(package="pkg", entry="m:f")
    with pytest.raises(ValidationError):
        config.entry = "broken"
