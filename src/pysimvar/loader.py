"""Load the variable configuration, falling back to built-in defaults.

The configuration is read exactly once at startup. ``http(s)://`` sources
are fetched with aiohttp; anything else is treated as a local JSON file.
Any failure is logged and replaced by :func:`fallback_config`; a restart
re-attempts the load.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import aiohttp
from pydantic import ValidationError

from pysimvar._constants import (
    AIRSPEED_INDICATED,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_INTERVAL_MS,
    FLAPS_HANDLE_INDEX,
    FUEL_TOTAL_CAPACITY,
    FUEL_TOTAL_QUANTITY,
    TRAILING_EDGE_FLAPS_LEFT_PERCENT,
)
from pysimvar.exceptions import ConfigUnavailableError
from pysimvar.models.config import SimVarsConfig

_logger = logging.getLogger(__name__)

_FALLBACK: dict[str, Any] = {
    "intervalMs": DEFAULT_INTERVAL_MS,
    "variables": [
        {
            "name": AIRSPEED_INDICATED,
            "unit": "knots",
            "initial": 110,
            "randomWalk": {"min": 60, "max": 160, "step": 1.2},
        },
        {"name": FUEL_TOTAL_QUANTITY, "unit": "gallons", "initial": 40, "decrement": 0.01},
        {"name": FUEL_TOTAL_CAPACITY, "unit": "gallons", "initial": 50},
        {
            "name": FLAPS_HANDLE_INDEX,
            "unit": "number",
            "initial": 0,
            "cycle": {"count": 4, "probability": 0.01},
        },
        {
            "name": TRAILING_EDGE_FLAPS_LEFT_PERCENT,
            "unit": "percent",
            "initial": 0,
            "derivedFrom": FLAPS_HANDLE_INDEX,
            "formula": "(base/3)*100",
        },
    ],
}


def fallback_config() -> SimVarsConfig:
    """Built-in configuration covering the variables the panel needs."""
    return SimVarsConfig.model_validate(_FALLBACK)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def _fetch_url(url: str, session: aiohttp.ClientSession, timeout: float) -> str:
    headers = {"cache-control": "no-cache", "accept": "application/json"}
    _logger.debug("GET %s", url)
    try:
        async with session.get(url, headers=headers, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
            text = await resp.text()
            if resp.status != 200:
                raise ConfigUnavailableError(f"HTTP {resp.status} from {url}", source=url)
            return text
    except ConfigUnavailableError:
        raise
    except (aiohttp.ClientError, TimeoutError, UnicodeDecodeError, LookupError) as exc:
        raise ConfigUnavailableError(f"Request to {url} failed: {exc}", source=url) from exc


async def _read_file(path: Path) -> str:
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigUnavailableError(f"Cannot read {path}: {exc}", source=str(path)) from exc


async def _read_source(
    source: str | Path,
    session: aiohttp.ClientSession | None,
    timeout: float,
) -> SimVarsConfig:
    label = str(source)
    if isinstance(source, str) and _is_url(source):
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                text = await _fetch_url(source, own_session, timeout)
        else:
            text = await _fetch_url(source, session, timeout)
    else:
        text = await _read_file(Path(source))

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigUnavailableError(f"Invalid JSON in {label}: {exc}", source=label) from exc

    try:
        return SimVarsConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigUnavailableError(f"Invalid configuration in {label}: {exc}", source=label) from exc


async def load_config(
    source: str | Path | None = None,
    *,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> SimVarsConfig:
    """Load the configuration from *source*; never raises.

    Parameters
    ----------
    source
        ``http(s)://`` URL or local path of a ``simvars.json`` document.
        ``None`` selects the built-in configuration.
    session
        Optional aiohttp session for URL sources; a private one is
        created (and closed) otherwise.
    timeout
        Total seconds allowed for the fetch.
    """
    if source is None:
        _logger.info("No SimVar configuration source; using built-in defaults")
        return fallback_config()

    try:
        config = await _read_source(source, session, timeout)
    except ConfigUnavailableError as exc:
        _logger.warning("SimVar configuration unavailable, using built-in defaults: %s", exc)
        return fallback_config()

    _logger.info("Loaded SimVar configuration from %s with %d variables", source, len(config.variables))
    return config
