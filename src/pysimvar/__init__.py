"""pysimvar - SimVar telemetry state engine and precision-gated event bus."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pysimvar")
except PackageNotFoundError:
    __version__ = "0+local"

from pysimvar.bus import ConsumerSubject, EventBus, round_to_precision
from pysimvar.config import EngineSettings
from pysimvar.engine import StateEngine, evaluation_order
from pysimvar.exceptions import (
    ConfigUnavailableError,
    FormulaError,
    MissingDependencyError,
    SimVarConfigError,
    SimVarError,
    UnknownVariableError,
)
from pysimvar.expression import compile_formula, evaluate
from pysimvar.loader import fallback_config, load_config
from pysimvar.models import (
    CycleRule,
    DecrementRule,
    DerivedRule,
    RandomWalkRule,
    Rule,
    SimVarsConfig,
    StaticRule,
    VariableDefinition,
)
from pysimvar.panel import PanelEvents, PanelInstrument, PanelView
from pysimvar.state.store import VariableStore

__all__ = [
    "__version__",
    "ConfigUnavailableError",
    "ConsumerSubject",
    "CycleRule",
    "DecrementRule",
    "DerivedRule",
    "EngineSettings",
    "EventBus",
    "FormulaError",
    "MissingDependencyError",
    "PanelEvents",
    "PanelInstrument",
    "PanelView",
    "RandomWalkRule",
    "Rule",
    "SimVarConfigError",
    "SimVarError",
    "SimVarsConfig",
    "StateEngine",
    "StaticRule",
    "UnknownVariableError",
    "VariableDefinition",
    "VariableStore",
    "compile_formula",
    "evaluate",
    "evaluation_order",
    "fallback_config",
    "load_config",
    "round_to_precision",
]
