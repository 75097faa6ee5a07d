"""Models for the ``simvars.json`` variable configuration."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field, field_validator, model_validator

from pysimvar._constants import DEFAULT_INTERVAL_MS
from pysimvar.models._base import SimBaseModel
from pysimvar.models.rules import CycleRule, DecrementRule, DerivedRule, RandomWalkRule, Rule, StaticRule

_logger = logging.getLogger(__name__)


class VariableDefinition(SimBaseModel):
    """One entry of the ``variables`` list.

    Behaviour is chosen by which optional field is present; none of them
    means the variable is static. When several are given the precedence is
    ``derivedFrom`` > ``randomWalk`` > ``decrement`` > ``cycle``.
    """

    name: str = Field(min_length=1)
    unit: str = ""
    initial: float = 0.0
    random_walk: RandomWalkRule | None = None
    decrement: float | None = Field(default=None, ge=0)
    cycle: CycleRule | None = None
    derived_from: str | None = None
    formula: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name

    @model_validator(mode="after")
    def _warn_ambiguous(self) -> VariableDefinition:
        present = [
            label
            for label, field_value in (
                ("derivedFrom", self.derived_from),
                ("randomWalk", self.random_walk),
                ("decrement", self.decrement),
                ("cycle", self.cycle),
            )
            if field_value is not None
        ]
        if len(present) > 1:
            _logger.warning(
                "Variable %s declares %s; using %s",
                self.name,
                ", ".join(present),
                present[0],
            )
        if self.formula is not None and self.derived_from is None:
            _logger.warning("Variable %s has a formula but no derivedFrom; formula ignored", self.name)
        return self

    @property
    def key(self) -> str:
        """Case-insensitive store key."""
        return self.name.upper()

    @property
    def rule(self) -> Rule:
        if self.derived_from is not None and self.derived_from.strip():
            return DerivedRule(source=self.derived_from.strip(), formula=self.formula)
        if self.random_walk is not None:
            return self.random_walk
        if self.decrement is not None:
            return DecrementRule(rate=self.decrement)
        if self.cycle is not None:
            return self.cycle
        return StaticRule()


class SimVarsConfig(SimBaseModel):
    """Tick interval plus the ordered variable set."""

    interval_ms: float = Field(default=DEFAULT_INTERVAL_MS, gt=0)
    variables: list[VariableDefinition] = Field(default_factory=list)

    @field_validator("interval_ms", mode="before")
    @classmethod
    def _zero_means_default(cls, value: Any) -> Any:
        # A missing or zero interval in the file falls back to the default.
        if value == 0:
            return DEFAULT_INTERVAL_MS
        return value

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0
