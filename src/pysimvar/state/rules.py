"""Single-tick step functions for the non-derived rules.

This module intentionally contains *no* store access: each function maps the
current value (and a random source) to the next value. Derived rules need
the store and are resolved in :mod:`pysimvar.state.store`.
"""

from __future__ import annotations

import random

from pysimvar.models.rules import CycleRule, DecrementRule, RandomWalkRule


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def step_random_walk(current: float, rule: RandomWalkRule, rng: random.Random) -> float:
    delta = rng.uniform(-rule.step, rule.step)
    return clamp(current + delta, rule.min, rule.max)


def step_decrement(current: float, rule: DecrementRule) -> float:
    return max(0.0, current - rule.rate)


def step_cycle(current: float, rule: CycleRule, rng: random.Random) -> float:
    """Advance to the next detent with ``rule.probability``.

    A value seeded outside ``[0, count)`` is wrapped on the first transition.
    """
    if rng.random() < rule.probability:
        return (current + 1) % rule.count
    return current
