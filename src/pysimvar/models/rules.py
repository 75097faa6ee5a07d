"""Evolution rules: a tagged union over the five ways a variable can move."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, model_validator

from pysimvar.models._base import SimBaseModel


class StaticRule(SimBaseModel):
    """Value never changes on its own."""

    kind: Literal["static"] = "static"


class RandomWalkRule(SimBaseModel):
    """Uniform step in ``[-step, +step]`` per tick, clamped to ``[min, max]``."""

    kind: Literal["random_walk"] = "random_walk"
    min: float
    max: float
    step: float = Field(ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> RandomWalkRule:
        if self.min > self.max:
            raise ValueError(f"randomWalk min ({self.min}) must not exceed max ({self.max})")
        return self


class DecrementRule(SimBaseModel):
    """Linear decay by ``rate`` per tick, floored at zero."""

    kind: Literal["decrement"] = "decrement"
    rate: float = Field(ge=0)


class CycleRule(SimBaseModel):
    """Discrete detent stepping: ``(v + 1) mod count`` with ``probability`` per tick."""

    kind: Literal["cycle"] = "cycle"
    count: int = Field(default=1, ge=1)
    probability: float = Field(default=0.0, ge=0.0, le=1.0)


class DerivedRule(SimBaseModel):
    """Computed from another variable, optionally through a formula."""

    kind: Literal["derived"] = "derived"
    source: str = Field(min_length=1)
    formula: str | None = None


Rule = Annotated[
    StaticRule | RandomWalkRule | DecrementRule | CycleRule | DerivedRule,
    Field(discriminator="kind"),
]
