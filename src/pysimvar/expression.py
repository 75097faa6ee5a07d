"""Restricted arithmetic formulas for derived variables.

A formula is parsed once into a tiny AST and evaluated by walking the tree.
The grammar only knows numbers, the two inputs ``base`` and ``value``,
``+ - * /``, unary signs and parentheses::

    expr   := term (("+" | "-") term)*
    term   := unary (("*" | "/") unary)*
    unary  := ("+" | "-") unary | atom
    atom   := NUMBER | "base" | "value" | "(" expr ")"

Nothing outside the two inputs is reachable from a formula.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass

from pysimvar.exceptions import FormulaError

_logger = logging.getLogger(__name__)

#: Identifiers a formula may reference.
INPUT_NAMES: frozenset[str] = frozenset({"base", "value"})

#: Deepest allowed nesting of parentheses and unary signs.
MAX_NESTING = 100

_TOKEN_RE = re.compile(
    r"""
    (?P<NUMBER>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<NAME>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<OP>[-+*/()])
  | (?P<SKIP>\s+)
  | (?P<MISMATCH>.)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    text: str
    pos: int


def tokenize(formula: str) -> list[Token]:
    """Split *formula* into tokens, ending with an ``EOF`` token."""
    tokens: list[Token] = []
    for m in _TOKEN_RE.finditer(formula):
        kind = m.lastgroup or "MISMATCH"
        if kind == "SKIP":
            continue
        if kind == "MISMATCH":
            raise FormulaError(
                f"Unexpected character {m.group(0)!r} at {m.start()}",
                formula=formula,
                position=m.start(),
            )
        tokens.append(Token(kind, m.group(0), m.start()))
    tokens.append(Token("EOF", "", len(formula)))
    return tokens


# ------------------------------------------------------------------
# AST
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Number:
    value: float


@dataclass(frozen=True, slots=True)
class Name:
    name: str


@dataclass(frozen=True, slots=True)
class Unary:
    op: str
    operand: Node


@dataclass(frozen=True, slots=True)
class Binary:
    left: Node
    op: str
    right: Node


Node = Number | Name | Unary | Binary


class _Parser:
    def __init__(self, formula: str) -> None:
        self.formula = formula
        self.tokens = tokenize(formula)
        self.i = 0
        self.depth = 0

    def cur(self) -> Token:
        return self.tokens[self.i]

    def match_op(self, *ops: str) -> str | None:
        t = self.cur()
        if t.kind == "OP" and t.text in ops:
            self.i += 1
            return t.text
        return None

    def error(self, message: str) -> FormulaError:
        t = self.cur()
        found = t.text if t.kind != "EOF" else "end of formula"
        return FormulaError(f"{message} at {t.pos}, got {found!r}", formula=self.formula, position=t.pos)

    def enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise self.error(f"Nesting deeper than {MAX_NESTING} levels")

    def parse(self) -> Node:
        node = self.parse_expr()
        if self.cur().kind != "EOF":
            raise self.error("Unexpected trailing input")
        return node

    def parse_expr(self) -> Node:
        node = self.parse_term()
        while (op := self.match_op("+", "-")) is not None:
            node = Binary(node, op, self.parse_term())
        return node

    def parse_term(self) -> Node:
        node = self.parse_unary()
        while (op := self.match_op("*", "/")) is not None:
            node = Binary(node, op, self.parse_unary())
        return node

    def parse_unary(self) -> Node:
        op = self.match_op("+", "-")
        if op is not None:
            self.enter()
            node = Unary(op, self.parse_unary())
            self.depth -= 1
            return node
        return self.parse_atom()

    def parse_atom(self) -> Node:
        t = self.cur()
        if t.kind == "NUMBER":
            self.i += 1
            return Number(float(t.text))
        if t.kind == "NAME":
            if t.text not in INPUT_NAMES:
                raise FormulaError(
                    f"Unknown identifier {t.text!r} at {t.pos} (allowed: base, value)",
                    formula=self.formula,
                    position=t.pos,
                )
            self.i += 1
            return Name(t.text)
        if self.match_op("("):
            self.enter()
            node = self.parse_expr()
            if self.match_op(")") is None:
                raise self.error("Expected ')'")
            self.depth -= 1
            return node
        raise self.error("Expected a number, 'base', 'value' or '('")


def _walk(node: Node, inputs: dict[str, float]) -> float:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Name):
        return inputs[node.name]
    if isinstance(node, Unary):
        operand = _walk(node.operand, inputs)
        return -operand if node.op == "-" else operand
    left = _walk(node.left, inputs)
    right = _walk(node.right, inputs)
    if node.op == "+":
        return left + right
    if node.op == "-":
        return left - right
    if node.op == "*":
        return left * right
    if right == 0:
        raise ZeroDivisionError("division by zero")
    return left / right


@dataclass(frozen=True, slots=True)
class Formula:
    """A compiled formula."""

    source: str
    root: Node

    def evaluate(self, *, base: float, value: float) -> float:
        """Evaluate against the two inputs.

        Raises :class:`FormulaError` when evaluation fails (e.g. division by zero).
        """
        try:
            return float(_walk(self.root, {"base": float(base), "value": float(value)}))
        except (ArithmeticError, ValueError, RecursionError) as exc:
            raise FormulaError(f"Evaluation failed: {exc}", formula=self.source) from exc


@functools.lru_cache(maxsize=128)
def compile_formula(formula: str) -> Formula:
    """Parse *formula* into a :class:`Formula`.

    Raises :class:`FormulaError` for malformed input. Successful compilations
    are cached; failures are not.
    """
    if not isinstance(formula, str) or not formula.strip():
        raise FormulaError("Formula is empty", formula=str(formula))
    return Formula(source=formula, root=_Parser(formula).parse())


def evaluate(formula: str, *, base: float, value: float) -> float:
    """Compile and evaluate *formula*; never raises.

    On any :class:`FormulaError` a warning is logged and ``0.0`` is returned.
    """
    try:
        return compile_formula(formula).evaluate(base=base, value=value)
    except FormulaError as exc:
        _logger.warning("Formula error in %r: %s", formula, exc)
        return 0.0
