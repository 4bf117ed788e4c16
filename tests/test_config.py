import logging

import pytest
import structlog
from structlog.testing import capture_logs

from qlab.config import ENV_VAR, LabSettings, load_settings, pct
from qlab.log import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _no_settings_env(monkeypatch):
    monkeypatch.delenv(ENV_VAR, raising=False)


def test_defaults():
    s = load_settings()

    assert s == LabSettings()
    assert s.confidence == 0.95
    assert s.lattice_steps == 50


def test_yaml_then_overrides(tmp_path):
    path = tmp_path / "qlab.yaml"
    path.write_text("n_paths: 500\nconfidence: 0.99\nseed: 42\n")

    s = load_settings(path, n_paths=200)

    assert s.n_paths == 200
    assert s.confidence == 0.99
    assert s.seed == 42


def test_env_var_points_to_file(tmp_path, monkeypatch):
    path = tmp_path / "qlab.yaml"
    path.write_text("lookback: 60\n")
    monkeypatch.setenv(ENV_VAR, str(path))

    assert load_settings().lookback == 60


def test_missing_file_keeps_defaults(tmp_path):
    with capture_logs() as logs:
        s = load_settings(tmp_path / "absent.yaml")

    assert s == LabSettings()
    assert any(e["event"] == "settings_file_missing" for e in logs)


def test_out_of_range_values_are_clamped():
    with capture_logs() as logs:
        s = load_settings(confidence=1.5, lookback=1, correlation=-3.0, n_steps=0)

    assert s.confidence == pytest.approx(1.0 - 1e-6)
    assert s.lookback == 2
    assert s.correlation == -1.0
    assert s.n_steps == 1
    assert sum(e["event"] == "setting_clamped" for e in logs) == 4


def test_non_numeric_value_rejected():
    with pytest.raises(ValueError):
        load_settings(horizon="ten")


def test_unknown_setting_ignored():
    with capture_logs() as logs:
        s = load_settings(colour="gold")

    assert s == LabSettings()
    assert any(e["event"] == "setting_ignored" for e in logs)


def test_pct():
    assert pct(2.5) == 0.025
    assert pct(100) == 1.0


def test_configure_logging_json(caplog):
    caplog.set_level(logging.INFO)
    try:
        configure_logging(level="INFO", format_json=True)
        get_logger("qlab.tests").warning("hello", answer=42)
    finally:
        structlog.reset_defaults()

    assert '"event": "hello"' in caplog.text
    assert '"answer": 42' in caplog.text
