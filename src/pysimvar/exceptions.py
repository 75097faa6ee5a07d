"""Custom exception hierarchy for pysimvar.

Runtime failures (unreachable configuration, bad formulas, missing derived
sources) are caught at the component boundary and degraded to a logged
warning plus a safe default. Invalid host settings and strict lookups via
:meth:`VariableStore.entry` raise to the caller.
"""

from __future__ import annotations


class SimVarError(Exception):
    """Base exception for all pysimvar errors."""


class SimVarConfigError(SimVarError):
    """Invalid host settings (environment or explicit overrides)."""


class ConfigUnavailableError(SimVarError):
    """The variable configuration could not be fetched or parsed."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class UnknownVariableError(SimVarError, KeyError):
    """A variable name is not present in the store."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown variable: {self.name}"


class FormulaError(SimVarError):
    """A derived-variable formula is malformed or failed to evaluate."""

    def __init__(self, message: str, *, formula: str = "", position: int | None = None) -> None:
        self.formula = formula
        self.position = position
        super().__init__(message)


class MissingDependencyError(SimVarError):
    """A derived variable's source is not present in the store."""

    def __init__(self, name: str, source: str) -> None:
        self.name = name
        self.source = source
        super().__init__(f"{name} is derived from missing variable {source}")
