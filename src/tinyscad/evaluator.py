"""Evaluate a parsed program against caller parameters into a triangle mesh."""

from __future__ import annotations

import logging
import math
import numbers
from enum import Enum
from typing import Callable, Mapping

from tinyscad.config import DEFAULT_CONFIG, EngineConfig
from tinyscad.errors import (
    DivergentLoopStep,
    DivisionByZero,
    InvalidVectorArity,
    LoopBudgetExceeded,
    MissingArgument,
    NotANumber,
    UndefinedVariable,
    UnsupportedCall,
)
from tinyscad.scope import Frame
from tinyscad.syntax import (
    ArrayLiteral,
    Assignment,
    BinaryOp,
    CallStatement,
    Expression,
    ForLoop,
    Invocation,
    Literal,
    Program,
    Statement,
    UnaryMinus,
    VariableRef,
)
from tinyscad.tessellation import Triangle, cube_triangles, cylinder_triangles

logger = logging.getLogger(__name__)


class Primitive(str, Enum):
    """The closed set of callable built-ins."""

    UNION = "union"
    TRANSLATE = "translate"
    CUBE = "cube"
    CYLINDER = "cylinder"


def evaluate(
    program: Program,
    params: Mapping[str, float] | None = None,
    config: EngineConfig | None = None,
) -> list[Triangle]:
    """Evaluate ``program`` with ``params`` seeded into the root scope.

    The result is the concatenation, in document order, of the triangles
    produced by each top-level statement. The program is never mutated, so
    one parsed program can be evaluated any number of times.
    """
    triangles = Evaluator(config).run(program, params)
    logger.debug("Evaluated %d statements into %d triangles", len(program.statements), len(triangles))
    return triangles


class Evaluator:
    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._statements: dict[type, Callable[[Statement, Frame], list[Triangle]]] = {
            Assignment: self._exec_assignment,
            ForLoop: self._exec_for,
            CallStatement: self._exec_call,
        }
        self._primitives: dict[Primitive, Callable[[Invocation, Frame], list[Triangle]]] = {
            Primitive.UNION: self._call_union,
            Primitive.TRANSLATE: self._call_translate,
            Primitive.CUBE: self._call_cube,
            Primitive.CYLINDER: self._call_cylinder,
        }

    def run(self, program: Program, params: Mapping[str, float] | None = None) -> list[Triangle]:
        root = Frame(init=params)
        return self.exec_statements(program.statements, root)

    # --- Statements ---

    def exec_statements(self, statements: tuple[Statement, ...], frame: Frame) -> list[Triangle]:
        triangles: list[Triangle] = []
        for statement in statements:
            triangles.extend(self._statements[type(statement)](statement, frame))
        return triangles

    def _exec_assignment(self, statement: Assignment, frame: Frame) -> list[Triangle]:
        frame[statement.name] = self.eval_expression(statement.expression, frame)
        return []

    def _exec_for(self, statement: ForLoop, frame: Frame) -> list[Triangle]:
        start = to_number(self.eval_expression(statement.start, frame))
        end = to_number(self.eval_expression(statement.end, frame))
        if statement.step is not None:
            step = to_number(self.eval_expression(statement.step, frame))
        else:
            step = 1.0 if start <= end else -1.0
        if step == 0:
            raise DivergentLoopStep()

        tolerance = self.config.loop_tolerance
        budget = self.config.max_loop_iterations

        triangles: list[Triangle] = []
        iterations = 0
        value = start
        while _within_end(value, end, step, tolerance):
            if budget is not None and iterations >= budget:
                raise LoopBudgetExceeded(budget)
            body_frame = frame.child({statement.variable: value})
            triangles.extend(self.exec_statements(statement.body.statements, body_frame))
            iterations += 1
            value += step

        logger.debug("for %s: %d iterations", statement.variable, iterations)
        return triangles

    def _exec_call(self, statement: CallStatement, frame: Frame) -> list[Triangle]:
        call = statement.invocation
        try:
            primitive = Primitive(call.name)
        except ValueError:
            raise UnsupportedCall(call.name, call.line, call.column) from None
        return self._primitives[primitive](call, frame)

    def _exec_block(self, call: Invocation, frame: Frame) -> list[Triangle]:
        if call.block is None:
            raise MissingArgument(call.name, "block")
        return self.exec_statements(call.block.statements, frame.child())

    # --- Primitives ---

    def _call_union(self, call: Invocation, frame: Frame) -> list[Triangle]:
        return self._exec_block(call, frame)

    def _call_translate(self, call: Invocation, frame: Frame) -> list[Triangle]:
        if call.block is None:
            raise MissingArgument("translate", "block")
        if not call.positional:
            raise MissingArgument("translate", "vector")
        offset = to_vector(self.eval_expression(call.positional[0], frame), 3)

        triangles = self._exec_block(call, frame)
        return [(_shift(a, offset), _shift(b, offset), _shift(c, offset)) for a, b, c in triangles]

    def _call_cube(self, call: Invocation, frame: Frame) -> list[Triangle]:
        size_expr = call.argument("size", 0)
        if size_expr is None:
            raise MissingArgument("cube", "size")
        size = to_vector(self.eval_expression(size_expr, frame), 3)
        center = bool(self._optional(call, "center", frame, False))
        return cube_triangles(size, center)

    def _call_cylinder(self, call: Invocation, frame: Frame) -> list[Triangle]:
        h_expr = call.argument("h", 0)
        if h_expr is None:
            raise MissingArgument("cylinder", "h")

        r_expr = call.named.get("r")
        d_expr = call.named.get("d")
        if r_expr is None and d_expr is None:
            raise MissingArgument("cylinder", "r or d")

        h = to_number(self.eval_expression(h_expr, frame))
        if r_expr is not None:
            r = to_number(self.eval_expression(r_expr, frame))
        else:
            r = to_number(self.eval_expression(d_expr, frame)) / 2
        center = bool(self._optional(call, "center", frame, False))
        fn = to_number(self._optional(call, "$fn", frame, self.config.default_segments))
        segments = max(self.config.min_segments, math.floor(fn + 0.5))
        return cylinder_triangles(h, r, segments, center)

    def _optional(self, call: Invocation, name: str, frame: Frame, default: object) -> object:
        if name not in call.named:
            return default
        return self.eval_expression(call.named[name], frame)

    # --- Expressions ---

    def eval_expression(self, node: Expression, frame: Frame) -> object:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, VariableRef):
            try:
                return frame[node.name]
            except KeyError:
                raise UndefinedVariable(node.name) from None
        if isinstance(node, ArrayLiteral):
            return tuple(self.eval_expression(item, frame) for item in node.items)
        if isinstance(node, UnaryMinus):
            return -to_number(self.eval_expression(node.operand, frame))
        if isinstance(node, BinaryOp):
            left = to_number(self.eval_expression(node.left, frame))
            right = to_number(self.eval_expression(node.right, frame))
            return _apply_operator(node.op, left, right)
        raise TypeError(f"Unknown expression node: {type(node).__name__}")


def _shift(point: tuple, offset: tuple) -> tuple[float, float, float]:
    return (point[0] + offset[0], point[1] + offset[1], point[2] + offset[2])


def _within_end(value: float, end: float, step: float, tolerance: float) -> bool:
    if step > 0:
        return value <= end + tolerance
    return value >= end - tolerance


def _apply_operator(op: str, left: float, right: float) -> float:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            raise DivisionByZero()
        return left / right
    raise ValueError(f"Unknown operator: {op!r}")


def to_number(value: object) -> float:
    """Coerce a runtime value to a finite float."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isfinite(number):
            return number
    raise NotANumber(value)


def to_vector(value: object, length: int) -> tuple[float, ...]:
    if not isinstance(value, (tuple, list)) or len(value) != length:
        raise InvalidVectorArity(length, value)
    return tuple(to_number(item) for item in value)
