"""State engine: advances the variable store on a fixed clock."""

from __future__ import annotations

import logging
import random
from typing import Any

import aiohttp

from pysimvar._scheduler import RepeatingTask
from pysimvar.config import EngineSettings
from pysimvar.loader import load_config
from pysimvar.models.config import SimVarsConfig
from pysimvar.models.rules import DerivedRule
from pysimvar.state.store import VariableStore

_logger = logging.getLogger(__name__)


def evaluation_order(config: SimVarsConfig) -> list[str]:
    """Store keys in the order rules are applied within one tick.

    Non-derived variables first, then derived ones, each group in
    declaration order. A derived variable therefore sees its source's
    value for the *current* tick when the source is non-derived. A
    derived-on-derived chain only sees the current tick when the source
    is declared earlier; otherwise it lags by one tick. Duplicate names
    keep their first declaration.
    """
    seen: set[str] = set()
    base: list[str] = []
    derived: list[str] = []
    for definition in config.variables:
        key = definition.key
        if key in seen:
            _logger.warning("Duplicate SimVar %s in configuration; later declaration ignored", definition.name)
            continue
        seen.add(key)
        if isinstance(definition.rule, DerivedRule):
            derived.append(key)
        else:
            base.append(key)
    return base + derived


class StateEngine:
    """Owns the tick clock for one :class:`VariableStore`.

    Usage::

        engine = await StateEngine.from_settings(EngineSettings.from_env())
        async with engine:
            ...  # ticks run every ``config.interval_ms``

    The engine's only observable effect is store mutation; producers read
    values through :meth:`get_value`.
    """

    def __init__(
        self,
        config: SimVarsConfig,
        *,
        store: VariableStore | None = None,
        rng: random.Random | None = None,
        interval_ms: float | None = None,
    ) -> None:
        self._config = config
        self._store = store if store is not None else VariableStore(rng=rng)
        for definition in config.variables:
            self._store.seed(definition.name, definition.unit, definition.initial, definition.rule)
        self._order = evaluation_order(config)
        self._interval_ms = interval_ms if interval_ms is not None else config.interval_ms
        self._ticker = RepeatingTask(self.tick, self._interval_ms / 1000.0, name="simvar-tick")
        self._tick_count = 0
        _logger.debug("StateEngine seeded %d variables", len(self._order))

    @classmethod
    async def from_settings(
        cls,
        settings: EngineSettings | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> StateEngine:
        """Load the configuration described by *settings* and build an engine."""
        settings = settings or EngineSettings()
        config = await load_config(settings.config_source, session=session, timeout=settings.fetch_timeout)
        rng = random.Random(settings.seed) if settings.seed is not None else None
        return cls(config, rng=rng, interval_ms=settings.interval_ms)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> StateEngine:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        was_running = self._ticker.is_running
        await self._ticker.wait_cancelled()
        if was_running:
            _logger.info("StateEngine stopped after %d ticks", self._tick_count)

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self._ticker.is_running:
            return
        self._ticker.start()
        _logger.info("StateEngine started (%d variables, %.0f ms interval)", len(self._order), self._interval_ms)

    def stop(self) -> None:
        """Cancel the tick clock. Idempotent."""
        if not self._ticker.is_running:
            return
        self._ticker.cancel()
        _logger.info("StateEngine stopped after %d ticks", self._tick_count)

    @property
    def is_running(self) -> bool:
        return self._ticker.is_running

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Apply every declared variable's rule once.

        A variable whose rule fails is logged and keeps its value; the rest
        of the tick still runs.
        """
        for key in self._order:
            try:
                self._store.apply_rule(key)
            except Exception:
                _logger.exception("Rule for SimVar %s failed; value left unchanged", key)
        self._tick_count += 1

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def config(self) -> SimVarsConfig:
        return self._config

    @property
    def store(self) -> VariableStore:
        return self._store

    @property
    def order(self) -> list[str]:
        return list(self._order)

    # ------------------------------------------------------------------
    # Read surface and debug pokes
    # ------------------------------------------------------------------

    def get_value(self, name: str) -> float:
        """Current value of *name*; ``0.0`` with a warning when unknown."""
        return self._store.get(name)

    def force_set(self, name: str, value: float) -> None:
        """Override a value directly, bypassing the rule pipeline."""
        _logger.debug("force_set %s = %s", name, value)
        self._store.set(name, value)

    def dump(self) -> dict[str, float]:
        """Snapshot of every current value."""
        return self._store.snapshot()
