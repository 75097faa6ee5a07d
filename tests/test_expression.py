from __future__ import annotations

import logging

import pytest

from pysimvar.exceptions import FormulaError
from pysimvar.expression import MAX_NESTING, compile_formula, evaluate, tokenize


def _warnings(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.levelno == logging.WARNING]


def test_flaps_percent_formula_matches_direct_arithmetic() -> None:
    for s in (0.0, 1.0, 2.0, 3.0):
        assert evaluate("(base/3)*100", base=s, value=0.0) == (s / 3) * 100


def test_operator_precedence_and_unary_minus() -> None:
    assert evaluate("1 + 2 * 3", base=0, value=0) == 7.0
    assert evaluate("(1 + 2) * 3", base=0, value=0) == 9.0
    assert evaluate("-base + value", base=2, value=5) == 3.0
    assert evaluate("10 - 4 - 3", base=0, value=0) == 3.0
    assert evaluate("8 / 4 / 2", base=0, value=0) == 1.0
    assert evaluate("--base", base=4, value=0) == 4.0


def test_blend_of_old_and_new_values() -> None:
    assert evaluate("value * 0.5 + base * 0.5", base=10, value=20) == pytest.approx(15.0)


def test_number_literal_forms() -> None:
    assert evaluate(".5 + 1.", base=0, value=0) == 1.5
    assert evaluate("2e2", base=0, value=0) == 200.0


def test_malformed_formula_returns_zero_with_one_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="pysimvar.expression"):
        result = evaluate("base +", base=5, value=0)

    assert result == 0
    assert len(_warnings(caplog)) == 1


@pytest.mark.parametrize(
    "formula",
    [
        "__import__('os')",
        "base.__class__",
        "open",
        "abs(base)",
        "base ** 2",
        "base; value",
        "",
        "   ",
        "(base",
        "base)",
    ],
)
def test_anything_outside_the_grammar_is_rejected(formula: str, caplog: pytest.LogCaptureFixture) -> None:
    with pytest.raises(FormulaError):
        compile_formula(formula)

    with caplog.at_level(logging.WARNING, logger="pysimvar.expression"):
        assert evaluate(formula, base=1, value=1) == 0.0
    assert len(_warnings(caplog)) == 1


def test_division_by_zero_degrades_to_zero(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="pysimvar.expression"):
        assert evaluate("base / value", base=1, value=0) == 0.0
    assert len(_warnings(caplog)) == 1


def test_unknown_identifier_reports_position() -> None:
    with pytest.raises(FormulaError) as exc_info:
        compile_formula("base + speed")
    assert exc_info.value.position == 7
    assert "speed" in str(exc_info.value)


def test_compiled_formula_is_cached() -> None:
    assert compile_formula("base * 2") is compile_formula("base * 2")


def test_tokenize_ends_with_eof() -> None:
    tokens = tokenize("base*2")
    assert [t.kind for t in tokens] == ["NAME", "OP", "NUMBER", "EOF"]


@pytest.mark.parametrize(
    "formula",
    [
        "(" * 2000 + "base" + ")" * 2000,
        "-" * 5000 + "base",
    ],
)
def test_deep_nesting_is_rejected_without_raising(formula: str, caplog: pytest.LogCaptureFixture) -> None:
    with pytest.raises(FormulaError, match="Nesting deeper"):
        compile_formula(formula)

    with caplog.at_level(logging.WARNING, logger="pysimvar.expression"):
        assert evaluate(formula, base=1, value=0) == 0.0
    assert len(_warnings(caplog)) == 1


def test_nesting_up_to_the_limit_is_allowed() -> None:
    formula = "(" * MAX_NESTING + "base" + ")" * MAX_NESTING
    assert evaluate(formula, base=3, value=0) == 3.0
    assert evaluate("-" * MAX_NESTING + "base", base=3, value=0) == 3.0


def test_overlong_operator_chain_degrades_to_zero(caplog: pytest.LogCaptureFixture) -> None:
    formula = "base" + " + 1" * 20000

    with caplog.at_level(logging.WARNING, logger="pysimvar.expression"):
        assert evaluate(formula, base=0, value=0) == 0.0
    assert len(_warnings(caplog)) == 1
