from __future__ import annotations

import pytest

from pysimvar.config import EngineSettings
from pysimvar.exceptions import SimVarConfigError

_ENV_KEYS = ("SIMVAR_CONFIG", "SIMVAR_INTERVAL_MS", "SIMVAR_SEED", "SIMVAR_FETCH_TIMEOUT", "SIMVAR_RENDER_HZ")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_environment() -> None:
    settings = EngineSettings.from_env()

    assert settings == EngineSettings()
    assert settings.config_source is None
    assert settings.render_hz == 60


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIMVAR_CONFIG", " http://localhost:5173/_public/simvars.json ")
    monkeypatch.setenv("SIMVAR_INTERVAL_MS", "250")
    monkeypatch.setenv("SIMVAR_SEED", "42")
    monkeypatch.setenv("SIMVAR_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("SIMVAR_RENDER_HZ", "30")

    settings = EngineSettings.from_env()

    assert settings.config_source == "http://localhost:5173/_public/simvars.json"
    assert settings.interval_ms == 250
    assert settings.seed == 42
    assert settings.fetch_timeout == 2.5
    assert settings.render_hz == 30


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIMVAR_INTERVAL_MS", "not-a-number")
    monkeypatch.setenv("SIMVAR_CONFIG", "/etc/simvars.json")

    settings = EngineSettings.from_env(interval_ms=100, config_source="local.json")

    assert settings.interval_ms == 100
    assert settings.config_source == "local.json"


def test_blank_values_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIMVAR_CONFIG", "  ")
    monkeypatch.setenv("SIMVAR_SEED", "")

    assert EngineSettings.from_env() == EngineSettings()


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("SIMVAR_INTERVAL_MS", "fast"),
        ("SIMVAR_SEED", "1.5"),
        ("SIMVAR_RENDER_HZ", "sixty"),
    ],
)
def test_invalid_environment_values_raise(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(SimVarConfigError, match=key):
        EngineSettings.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"interval_ms": 0},
        {"interval_ms": -10},
        {"render_hz": 0},
        {"fetch_timeout": -1},
    ],
)
def test_non_positive_values_rejected(kwargs: dict) -> None:
    with pytest.raises(SimVarConfigError):
        EngineSettings(**kwargs)


def test_settings_are_frozen() -> None:
    settings = EngineSettings()
    with pytest.raises(AttributeError):
        settings.seed = 3  # type: ignore[misc]
