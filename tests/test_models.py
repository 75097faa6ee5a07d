"""Tests for configuration parsing into tagged evolution rules."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from pysimvar.loader import fallback_config
from pysimvar.models.config import SimVarsConfig, VariableDefinition
from pysimvar.models.rules import CycleRule, DecrementRule, DerivedRule, RandomWalkRule, StaticRule


class TestVariableDefinition:
    def test_absent_behaviour_means_static(self) -> None:
        definition = VariableDefinition.model_validate({"name": "FUEL TOTAL CAPACITY", "unit": "gallons", "initial": 50})
        assert isinstance(definition.rule, StaticRule)
        assert definition.initial == 50.0

    def test_camel_case_keys(self) -> None:
        definition = VariableDefinition.model_validate(
            {"name": "IAS", "randomWalk": {"min": 60, "max": 160, "step": 1.2}}
        )
        assert definition.rule == RandomWalkRule(min=60, max=160, step=1.2)

    def test_decrement_and_cycle(self) -> None:
        fuel = VariableDefinition.model_validate({"name": "FUEL", "decrement": 0.01})
        flaps = VariableDefinition.model_validate({"name": "FLAPS", "cycle": {"count": 4, "probability": 0.01}})
        assert fuel.rule == DecrementRule(rate=0.01)
        assert flaps.rule == CycleRule(count=4, probability=0.01)

    def test_cycle_defaults(self) -> None:
        flaps = VariableDefinition.model_validate({"name": "FLAPS", "cycle": {}})
        assert flaps.rule == CycleRule(count=1, probability=0.0)

    def test_derived(self) -> None:
        definition = VariableDefinition.model_validate(
            {"name": "FLAPS PCT", "derivedFrom": "FLAPS HANDLE INDEX", "formula": "(base/3)*100"}
        )
        assert definition.rule == DerivedRule(source="FLAPS HANDLE INDEX", formula="(base/3)*100")

    def test_nulls_fall_back_to_defaults(self) -> None:
        definition = VariableDefinition.model_validate({"name": "X", "unit": None, "initial": None, "decrement": None})
        assert definition.unit == ""
        assert definition.initial == 0.0
        assert isinstance(definition.rule, StaticRule)

    def test_derived_wins_over_other_behaviours(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="pysimvar.models.config"):
            definition = VariableDefinition.model_validate(
                {"name": "MIXED", "decrement": 1, "derivedFrom": "SRC", "randomWalk": {"min": 0, "max": 1, "step": 1}}
            )
        assert isinstance(definition.rule, DerivedRule)
        assert any("MIXED" in r.getMessage() for r in caplog.records)

    def test_key_is_upper_case(self) -> None:
        assert VariableDefinition(name="  Airspeed Indicated ").key == "AIRSPEED INDICATED"

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": ""},
            {"name": "X", "randomWalk": {"min": 10, "max": 0, "step": 1}},
            {"name": "X", "randomWalk": {"min": 0, "max": 10, "step": -1}},
            {"name": "X", "decrement": -0.5},
            {"name": "X", "cycle": {"count": 0}},
            {"name": "X", "cycle": {"count": 4, "probability": 1.5}},
        ],
    )
    def test_invalid_definitions_rejected(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            VariableDefinition.model_validate(payload)


class TestSimVarsConfig:
    def test_defaults(self) -> None:
        config = SimVarsConfig.model_validate({})
        assert config.interval_ms == 1000
        assert config.variables == []

    def test_zero_interval_means_default(self) -> None:
        assert SimVarsConfig.model_validate({"intervalMs": 0}).interval_ms == 1000

    def test_negative_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SimVarsConfig.model_validate({"intervalMs": -5})

    def test_interval_seconds(self) -> None:
        assert SimVarsConfig(interval_ms=250).interval_seconds == 0.25

    def test_models_are_frozen(self) -> None:
        config = fallback_config()
        with pytest.raises(ValidationError):
            config.interval_ms = 5  # type: ignore[misc]

    def test_fallback_covers_panel_variables(self) -> None:
        names = [v.name for v in fallback_config().variables]
        assert names == [
            "AIRSPEED INDICATED",
            "FUEL TOTAL QUANTITY",
            "FUEL TOTAL CAPACITY",
            "FLAPS HANDLE INDEX",
            "TRAILING EDGE FLAPS LEFT PERCENT",
        ]
