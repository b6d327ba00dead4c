"""Tests for program evaluation."""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from tinyscad.config import EngineConfig
from tinyscad.errors import (
    DivergentLoopStep,
    DivisionByZero,
    EvalError,
    InvalidVectorArity,
    LoopBudgetExceeded,
    MissingArgument,
    NotANumber,
    UndefinedVariable,
    UnsupportedCall,
)
from tinyscad.evaluator import Primitive, evaluate, to_number
from tinyscad.mesh import compute_bounds
from tinyscad.parser import parse_program


def run(source, params=None, config=None):
    return evaluate(parse_program(source), params or {}, config)


def _loop_values(source, params=None):
    """Each iteration emits one unit cube translated by the loop value along X."""
    triangles = run(source, params)
    assert len(triangles) % 12 == 0
    return [triangles[k][0][0] for k in range(0, len(triangles), 12)]


class TestBasics:
    def test_empty_program(self):
        assert run("") == []

    def test_assignments_emit_nothing(self):
        assert run("a = 1; b = a * 2;") == []

    def test_params_seed_root_scope(self):
        bounds = compute_bounds(run("cube([w, 1, 1]);", {"w": 3}))
        assert bounds.max == (3.0, 1.0, 1.0)

    def test_top_level_assignment_overrides_param(self):
        bounds = compute_bounds(run("w = 2; cube([w, 1, 1]);", {"w": 3}))
        assert bounds.max[0] == 2.0

    def test_statements_concatenate_in_document_order(self):
        triangles = run("cube([1, 1, 1]); cube([5, 5, 5]);")
        assert len(triangles) == 24
        assert compute_bounds(triangles[:12]).max == (1.0, 1.0, 1.0)
        assert compute_bounds(triangles[12:]).max == (5.0, 5.0, 5.0)

    def test_primitive_set_is_closed(self):
        assert {p.value for p in Primitive} == {"union", "translate", "cube", "cylinder"}


class TestExpressions:
    def test_arithmetic(self):
        bounds = compute_bounds(run("cube([1 + 2 * 3, (1 + 2) * 3, 10 / 4 - -1]);"))
        assert bounds.max == (7.0, 9.0, 3.5)

    def test_booleans_coerce_in_arithmetic(self):
        bounds = compute_bounds(run("cube([true + 1, 1, 1]);"))
        assert bounds.max[0] == 2.0

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            run("x = 1 / 0;")

    def test_division_by_computed_zero(self):
        with pytest.raises(DivisionByZero):
            run("a = 2; x = 1 / (a - 2);")

    def test_undefined_variable(self):
        with pytest.raises(UndefinedVariable, match="missing") as exc:
            run("x = missing + 1;")
        assert exc.value.name == "missing"

    def test_vector_in_arithmetic(self):
        with pytest.raises(NotANumber):
            run("x = [1, 2] + 1;")

    def test_negating_a_vector(self):
        with pytest.raises(NotANumber):
            run("x = -[1, 2, 3];")

    def test_nan_param_fails_at_point_of_use(self):
        run("x = w;", {"w": math.nan})
        with pytest.raises(NotANumber):
            run("x = w + 1;", {"w": math.nan})

    def test_infinite_param_is_rejected(self):
        with pytest.raises(NotANumber):
            run("x = -w;", {"w": math.inf})

    def test_arrays_are_coerced_lazily(self):
        assert run("v = [1, true, [2]];") == []

    def test_to_number(self):
        assert to_number(True) == 1.0
        assert to_number(False) == 0.0
        assert to_number(3) == 3.0
        with pytest.raises(NotANumber):
            to_number((1.0,))

    @pytest.mark.parametrize("value", [np.float32(2), np.float64(2), np.int64(2), np.int32(2)])
    def test_numpy_scalars_are_numbers(self, value):
        assert to_number(value) == 2.0
        assert isinstance(to_number(value), float)

    def test_numpy_scalar_params(self):
        triangles = evaluate(parse_program("cube([w, 1, 1]);"), {"w": np.float32(2)})
        assert compute_bounds(triangles).size == pytest.approx((2.0, 1.0, 1.0))

    def test_non_finite_numpy_scalar_rejected(self):
        with pytest.raises(NotANumber):
            to_number(np.float32("nan"))


class TestScopes:
    def test_loop_bindings_do_not_leak(self):
        with pytest.raises(UndefinedVariable, match="y"):
            run("for (i = [0 : 1]) { y = i; } cube([y, 1, 1]);")

    def test_loop_variable_does_not_leak(self):
        with pytest.raises(UndefinedVariable):
            run("for (i = [0 : 1]) { } x = i;")

    def test_block_assignment_shadows_without_overwriting(self):
        triangles = run(
            "a = 1;\n"
            "union() { a = 5; cube([a, 1, 1]); }\n"
            "cube([a, 1, 1]);"
        )
        assert compute_bounds(triangles[:12]).max[0] == 5.0
        assert compute_bounds(triangles[12:]).max[0] == 1.0

    def test_translate_block_has_own_scope(self):
        with pytest.raises(UndefinedVariable):
            run("translate([0, 0, 0]) { b = 2; } x = b;")

    def test_inner_blocks_see_outer_bindings(self):
        triangles = run(
            "s = 2;\n"
            "for (i = [1 : 1]) { translate([i, 0, 0]) { cube([s, s, s]); } }"
        )
        bounds = compute_bounds(triangles)
        assert bounds.min == (1.0, 0.0, 0.0)
        assert bounds.max == (3.0, 2.0, 2.0)

    def test_each_iteration_starts_fresh(self):
        triangles = run("for (i = [0 : 2]) { w = i + 1; translate([i, 0, 0]) { cube([w, 1, 1]); } }")
        sizes = [compute_bounds(triangles[k : k + 12]).size[0] for k in range(0, 36, 12)]
        assert sizes == [1.0, 2.0, 3.0]


class TestForLoop:
    def test_explicit_step(self):
        values = _loop_values("for (i = [0 : 2 : 6]) { translate([i, 0, 0]) { cube([1, 1, 1]); } }")
        assert values == [0.0, 2.0, 4.0, 6.0]

    def test_implicit_descending(self):
        values = _loop_values("for (i = [5 : 1]) { translate([i, 0, 0]) { cube([1, 1, 1]); } }")
        assert values == [5.0, 4.0, 3.0, 2.0, 1.0]

    def test_single_iteration(self):
        values = _loop_values("for (i = [3 : 3]) { translate([i, 0, 0]) { cube([1, 1, 1]); } }")
        assert values == [3.0]

    def test_explicit_negative_step(self):
        values = _loop_values(
            "for (i = [6 : -3 : 0]) { translate([i, 0, 0]) { cube([1, 1, 1]); } }"
        )
        assert values == [6.0, 3.0, 0.0]

    def test_step_not_landing_on_end(self):
        values = _loop_values("for (i = [0 : 4 : 10]) { translate([i, 0, 0]) { cube([1, 1, 1]); } }")
        assert values == [0.0, 4.0, 8.0]

    def test_mismatched_step_direction_runs_zero_times(self):
        assert run("for (i = [0 : -1 : 5]) { cube([1, 1, 1]); }") == []
        assert run("for (i = [5 : 1 : 0]) { cube([1, 1, 1]); }") == []

    def test_fractional_step_absorbs_drift(self):
        triangles = run("for (i = [0 : 0.1 : 1]) { cube([1, 1, 1]); }")
        assert len(triangles) == 11 * 12

    def test_bounds_from_params(self):
        triangles = run("for (i = [0 : n - 1]) { cube([1, 1, 1]); }", {"n": 4})
        assert len(triangles) == 48

    def test_zero_step(self):
        with pytest.raises(DivergentLoopStep):
            run("for (i = [0 : 0 : 5]) { }")

    def test_non_numeric_bound(self):
        with pytest.raises(NotANumber):
            run("for (i = [0 : [1, 2]]) { }")

    def test_iteration_budget(self):
        config = EngineConfig(max_loop_iterations=3)
        assert len(run("for (i = [0 : 2]) { cube([1, 1, 1]); }", config=config)) == 36
        with pytest.raises(LoopBudgetExceeded, match="3"):
            run("for (i = [0 : 100]) { cube([1, 1, 1]); }", config=config)

    def test_custom_tolerance(self):
        config = EngineConfig(loop_tolerance=0.0)
        triangles = run("for (i = [0 : 0.1 : 0.3]) { cube([1, 1, 1]); }", config=config)
        # 0.1 + 0.1 + 0.1 overshoots 0.3 without tolerance
        assert len(triangles) == 3 * 12


class TestCube:
    def test_triangle_count_and_span(self):
        triangles = run("cube(size = [1, 1, 1], center = false);")
        assert len(triangles) == 12
        bounds = compute_bounds(triangles)
        assert bounds.min == (0.0, 0.0, 0.0)
        assert bounds.max == (1.0, 1.0, 1.0)

    def test_centered(self):
        bounds = compute_bounds(run("cube(size = [1, 1, 1], center = true);"))
        assert bounds.min == (-0.5, -0.5, -0.5)
        assert bounds.max == (0.5, 0.5, 0.5)

    def test_positional_size(self):
        bounds = compute_bounds(run("cube([2, 3, 4]);"))
        assert bounds.size == (2.0, 3.0, 4.0)

    def test_named_size_wins_over_positional(self):
        bounds = compute_bounds(run("cube([9, 9, 9], size = [1, 2, 3]);"))
        assert bounds.size == (1.0, 2.0, 3.0)

    def test_missing_size(self):
        with pytest.raises(MissingArgument) as exc:
            run("cube();")
        assert (exc.value.call_name, exc.value.argument) == ("cube", "size")

    def test_size_must_be_three_items(self):
        with pytest.raises(InvalidVectorArity):
            run("cube([1, 1]);")

    def test_scalar_size_rejected(self):
        with pytest.raises(InvalidVectorArity):
            run("cube(5);")


class TestCylinder:
    def _side_vertices(self, triangles):
        points = np.asarray(triangles, dtype=np.float64).reshape(-1, 3)
        on_axis = np.isclose(points[:, 0], 0) & np.isclose(points[:, 1], 0)
        return points[~on_axis]

    def test_triangle_count(self):
        assert len(run("cylinder(h = 10, r = 2, $fn = 12);")) == 48

    def test_default_segments(self):
        assert len(run("cylinder(h = 1, r = 1);")) == 4 * 24

    def test_side_vertices_on_radius(self):
        triangles = run("cylinder(h = 3, r = 2.5, $fn = 10);")
        ring = self._side_vertices(triangles)
        assert_allclose(np.hypot(ring[:, 0], ring[:, 1]), 2.5, atol=1e-9)

    def test_diameter(self):
        bounds = compute_bounds(run("cylinder(h = 1, d = 4, $fn = 8);"))
        assert_allclose(bounds.max[0], 2.0)
        assert_allclose(bounds.min[0], -2.0)

    def test_radius_wins_over_diameter(self):
        bounds = compute_bounds(run("cylinder(h = 1, r = 1, d = 10, $fn = 8);"))
        assert_allclose(bounds.max[0], 1.0)

    def test_wedge_zero_starts_at_angle_zero(self):
        triangles = run("cylinder(h = 1, r = 2, $fn = 6);")
        assert_allclose(triangles[0][0], (2.0, 0.0, 0.0), atol=1e-12)

    def test_height_and_center(self):
        bounds = compute_bounds(run("cylinder(4, r = 1);"))
        assert (bounds.min[2], bounds.max[2]) == (0.0, 4.0)
        bounds = compute_bounds(run("cylinder(h = 4, r = 1, center = true);"))
        assert (bounds.min[2], bounds.max[2]) == (-2.0, 2.0)

    def test_segments_clamped_to_minimum(self):
        assert len(run("cylinder(h = 1, r = 1, $fn = 3);")) == 4 * 6

    def test_segments_rounded(self):
        assert len(run("cylinder(h = 1, r = 1, $fn = 7.5);")) == 4 * 8
        assert len(run("cylinder(h = 1, r = 1, $fn = 7.4);")) == 4 * 7

    def test_configured_segments(self):
        config = EngineConfig(default_segments=8, min_segments=4)
        assert len(run("cylinder(h = 1, r = 1);", config=config)) == 32
        assert len(run("cylinder(h = 1, r = 1, $fn = 4);", config=config)) == 16

    def test_missing_height(self):
        with pytest.raises(MissingArgument, match="cylinder requires h"):
            run("cylinder(r = 1);")

    def test_missing_radius(self):
        with pytest.raises(MissingArgument, match="r or d"):
            run("cylinder(h = 1);")

    def test_positional_radius_is_not_accepted(self):
        with pytest.raises(MissingArgument):
            run("cylinder(1, 2);")


class TestTranslateAndUnion:
    def test_translate_shifts_every_vertex(self):
        base = run("cube([1, 2, 3]); cylinder(h = 1, r = 1, $fn = 6);")
        moved = run(
            "translate([2, 3, -1]) { cube([1, 2, 3]); cylinder(h = 1, r = 1, $fn = 6); }"
        )
        assert len(moved) == len(base)
        diff = np.asarray(moved) - np.asarray(base)
        assert_allclose(diff.reshape(-1, 3), np.tile([2.0, 3.0, -1.0], (len(base) * 3, 1)))

    def test_nested_translate(self):
        bounds = compute_bounds(
            run("translate([1, 0, 0]) { translate([0, 2, 0]) { cube([1, 1, 1]); } }")
        )
        assert bounds.min == (1.0, 2.0, 0.0)

    def test_translate_by_expression(self):
        bounds = compute_bounds(run("translate([a * 2, 0, -a]) { cube([1, 1, 1]); }", {"a": 1.5}))
        assert bounds.min == (3.0, 0.0, -1.5)

    def test_translate_requires_block(self):
        with pytest.raises(MissingArgument, match="translate requires block"):
            run("translate([1, 0, 0]);")

    def test_translate_requires_vector(self):
        with pytest.raises(MissingArgument, match="vector"):
            run("translate() { cube([1, 1, 1]); }")

    def test_translate_vector_arity(self):
        with pytest.raises(InvalidVectorArity):
            run("translate([1, 0]) { cube([1, 1, 1]); }")

    def test_union_passes_triangles_through(self):
        assert run("union() { cube([1, 2, 3]); }") == run("cube([1, 2, 3]);")

    def test_empty_union(self):
        assert run("union() { }") == []

    def test_union_requires_block(self):
        with pytest.raises(MissingArgument):
            run("union();")


class TestDispatchErrors:
    def test_unsupported_call(self):
        with pytest.raises(UnsupportedCall) as exc:
            run("cube([1, 1, 1]);\nsphere(r = 1);")
        assert exc.value.name == "sphere"
        assert "line 2, col 1" in str(exc.value)

    def test_errors_abort_whole_evaluation(self):
        with pytest.raises(EvalError):
            run("cube([1, 1, 1]); x = nope;")


class TestDeterminism:
    def test_repeated_evaluation_is_identical(self):
        program = parse_program(
            "for (i = [0 : 0.3 : 2]) { translate([i, i / 3, 0]) { cylinder(h = i + 1, r = 0.5); } }"
        )
        first = evaluate(program, {})
        second = evaluate(program, {})
        assert first == second

    def test_program_reuse_with_different_params(self):
        program = parse_program("cube([w, 1, 1]);")
        small = evaluate(program, {"w": 1})
        large = evaluate(program, {"w": 4})
        assert compute_bounds(small).max[0] == 1.0
        assert compute_bounds(large).max[0] == 4.0
        assert evaluate(program, {"w": 1}) == small
