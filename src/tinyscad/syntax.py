"""Immutable syntax tree for parsed tinyscad programs."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

# --- Expressions ---


@dataclass(frozen=True)
class Literal:
    value: float | bool


@dataclass(frozen=True)
class VariableRef:
    name: str


@dataclass(frozen=True)
class ArrayLiteral:
    items: tuple[Expression, ...]


@dataclass(frozen=True)
class UnaryMinus:
    operand: Expression


@dataclass(frozen=True)
class BinaryOp:
    op: str  # one of + - * /
    left: Expression
    right: Expression


Expression = Union[Literal, VariableRef, ArrayLiteral, UnaryMinus, BinaryOp]


# --- Statements ---


@dataclass(frozen=True)
class Block:
    statements: tuple[Statement, ...]


@dataclass(frozen=True)
class Invocation:
    """A primitive call such as ``translate([1, 0, 0]) { ... }``."""

    name: str
    positional: tuple[Expression, ...] = ()
    named: Mapping[str, Expression] = field(default_factory=lambda: MappingProxyType({}))
    block: Block | None = None
    line: int = 0
    column: int = 0

    def argument(self, name: str, position: int | None = None) -> Expression | None:
        """Return a named argument, falling back to a positional slot."""
        if name in self.named:
            return self.named[name]
        if position is not None and position < len(self.positional):
            return self.positional[position]
        return None


@dataclass(frozen=True)
class Assignment:
    name: str
    expression: Expression


@dataclass(frozen=True)
class ForLoop:
    variable: str
    start: Expression
    end: Expression
    body: Block
    step: Expression | None = None


@dataclass(frozen=True)
class CallStatement:
    invocation: Invocation


Statement = Union[Assignment, ForLoop, CallStatement]


@dataclass(frozen=True)
class Program:
    statements: tuple[Statement, ...]
