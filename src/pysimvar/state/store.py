"""In-memory variable store.

This is the only component allowed to mutate variable values. Names are
case-insensitive: every key is upper-cased on the way in.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import assert_never

from pysimvar.exceptions import MissingDependencyError, UnknownVariableError
from pysimvar.expression import evaluate
from pysimvar.models.rules import CycleRule, DecrementRule, DerivedRule, RandomWalkRule, Rule, StaticRule
from pysimvar.state.rules import step_cycle, step_decrement, step_random_walk

_logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.strip().upper()


@dataclass
class VariableEntry:
    """Current value, unit and evolution rule of one variable."""

    value: float
    unit: str = ""
    rule: Rule = field(default_factory=StaticRule)


class VariableStore:
    """Name -> value mapping with per-variable evolution rules.

    Randomness is drawn from *rng* so a seeded :class:`random.Random`
    makes every tick reproducible.
    """

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._entries: dict[str, VariableEntry] = {}
        self._registered: dict[str, int] = {}
        self._missing_sources: set[str] = set()
        self._next_id = 1

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def names(self) -> list[str]:
        return list(self._entries)

    def seed(self, name: str, unit: str = "", initial: float = 0.0, rule: Rule | None = None) -> bool:
        """Create *name* only if absent. Returns ``True`` when an entry was created."""
        key = _key(name)
        if key in self._entries:
            return False
        self._entries[key] = VariableEntry(value=float(initial), unit=unit, rule=rule or StaticRule())
        return True

    def entry(self, name: str) -> VariableEntry:
        """Return the live entry for *name*; raises :class:`UnknownVariableError`."""
        try:
            return self._entries[_key(name)]
        except KeyError:
            raise UnknownVariableError(name) from None

    def get(self, name: str, default: float = 0.0) -> float:
        """Current value of *name*, or *default* (with a warning) when unknown."""
        try:
            return self.entry(name).value
        except UnknownVariableError:
            _logger.warning("Unknown SimVar requested: %s", name)
            return default

    def set(self, name: str, value: float, unit: str = "") -> None:
        """Overwrite *name* unconditionally, creating a static entry when absent."""
        key = _key(name)
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = VariableEntry(value=float(value), unit=unit)
        else:
            entry.value = float(value)

    def unit(self, name: str) -> str:
        return self.entry(name).unit

    def rule(self, name: str) -> Rule:
        return self.entry(name).rule

    def snapshot(self) -> dict[str, float]:
        """Copy of all current values keyed by upper-cased name."""
        return {key: entry.value for key, entry in self._entries.items()}

    # ------------------------------------------------------------------
    # Registered ids (simulator-style integer handles)
    # ------------------------------------------------------------------

    def registered_id(self, name: str) -> int:
        """Stable integer handle for *name*, allocated on first request."""
        key = _key(name)
        reg_id = self._registered.get(key)
        if reg_id is None:
            reg_id = self._next_id
            self._registered[key] = reg_id
            self._next_id += 1
        return reg_id

    def get_by_id(self, reg_id: int) -> float:
        """Value behind a registered handle; ``0.0`` for unknown handles or unseeded names."""
        for key, value in self._registered.items():
            if value == reg_id:
                entry = self._entries.get(key)
                return entry.value if entry is not None else 0.0
        return 0.0

    # ------------------------------------------------------------------
    # Rule application
    # ------------------------------------------------------------------

    def _source_value(self, name: str, rule: DerivedRule) -> float:
        source = self._entries.get(_key(rule.source))
        if source is None:
            raise MissingDependencyError(name, rule.source)
        return source.value

    def apply_rule(self, name: str) -> float | None:
        """Advance *name* by one tick according to its rule.

        Returns the new value, or ``None`` when *name* is unknown.
        """
        entry_key = _key(name)
        entry = self._entries.get(entry_key)
        if entry is None:
            _logger.warning("Cannot apply rule to unknown SimVar: %s", name)
            return None

        rule = entry.rule
        if isinstance(rule, StaticRule):
            pass
        elif isinstance(rule, RandomWalkRule):
            entry.value = step_random_walk(entry.value, rule, self._rng)
        elif isinstance(rule, DecrementRule):
            entry.value = step_decrement(entry.value, rule)
        elif isinstance(rule, CycleRule):
            entry.value = step_cycle(entry.value, rule, self._rng)
        elif isinstance(rule, DerivedRule):
            try:
                base = self._source_value(name, rule)
            except MissingDependencyError as exc:
                if entry_key not in self._missing_sources:
                    self._missing_sources.add(entry_key)
                    _logger.warning("%s; value left unchanged", exc)
                return entry.value
            if rule.formula:
                entry.value = evaluate(rule.formula, base=base, value=entry.value)
            else:
                entry.value = base
        else:
            assert_never(rule)
        return entry.value
