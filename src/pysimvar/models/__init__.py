"""Data models for the variable configuration and evolution rules."""

from pysimvar.models._base import SimBaseModel
from pysimvar.models.config import SimVarsConfig, VariableDefinition
from pysimvar.models.rules import (
    CycleRule,
    DecrementRule,
    DerivedRule,
    RandomWalkRule,
    Rule,
    StaticRule,
)

__all__ = [
    "CycleRule",
    "DecrementRule",
    "DerivedRule",
    "RandomWalkRule",
    "Rule",
    "SimBaseModel",
    "SimVarsConfig",
    "StaticRule",
    "VariableDefinition",
]
