"""Host settings for pysimvar."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pysimvar._constants import DEFAULT_FETCH_TIMEOUT, DEFAULT_RENDER_HZ
from pysimvar.exceptions import SimVarConfigError


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise SimVarConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class EngineSettings:
    """Where the variable configuration comes from and how the clocks run.

    Parameters
    ----------
    config_source : str or None
        URL or local path of ``simvars.json``. ``None`` uses the built-in
        defaults.
    interval_ms : float or None
        Overrides the state tick interval from the configuration file.
    seed : int or None
        Seed for the random source, for reproducible runs.
    fetch_timeout : float
        Seconds allowed for fetching a remote configuration.
    render_hz : float
        Update rate of the panel instrument's render clock.
    """

    config_source: str | None = None
    interval_ms: float | None = None
    seed: int | None = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    render_hz: float = DEFAULT_RENDER_HZ

    def __post_init__(self) -> None:
        if self.interval_ms is not None and self.interval_ms <= 0:
            raise SimVarConfigError(f"interval_ms must be positive, got {self.interval_ms}")
        if self.render_hz <= 0:
            raise SimVarConfigError(f"render_hz must be positive, got {self.render_hz}")
        if self.fetch_timeout <= 0:
            raise SimVarConfigError(f"fetch_timeout must be positive, got {self.fetch_timeout}")

    @classmethod
    def from_env(cls, **overrides: Any) -> EngineSettings:
        """Create settings from ``SIMVAR_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        kwargs: dict[str, Any] = {}

        source = env.get("SIMVAR_CONFIG")
        if source is not None and source.strip():
            kwargs["config_source"] = source.strip()

        _ENV_NUMBERS = {
            "SIMVAR_INTERVAL_MS": ("interval_ms", float),
            "SIMVAR_SEED": ("seed", int),
            "SIMVAR_FETCH_TIMEOUT": ("fetch_timeout", float),
            "SIMVAR_RENDER_HZ": ("render_hz", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMBERS.items():
            if field_name in overrides:
                continue
            value = _env_number(env, env_key, cast)
            if value is not None:
                kwargs[field_name] = value

        kwargs.update(overrides)
        return cls(**kwargs)
