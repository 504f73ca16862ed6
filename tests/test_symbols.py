"""Tests for symbolic variables and parameters (processbased.symbols)."""

from __future__ import annotations

import sympy as sp

from processbased.symbols import (
    LiteralParameter,
    default_value,
    derivative,
    free_parameters,
    free_variables,
    has_symbolic_var,
    is_parameter,
    is_variable,
    parameter,
    symbol_name,
    t,
    variable,
    variables,
)


class TestVariables:
    def test_variable_is_function_of_t(self) -> None:
        x = variable("x")
        assert is_variable(x)
        assert x.args == (t,)
        assert symbol_name(x) == "x"

    def test_default_value(self) -> None:
        x = variable("x", 0.5)
        assert default_value(x) == 0.5

    def test_no_default_value(self) -> None:
        x = variable("x_nodefault")
        assert default_value(x) is None

    def test_identity_is_by_name(self) -> None:
        a = variable("w", 1.0)
        b = variable("w", 2.0)
        assert a == b
        assert hash(a) == hash(b)

    def test_redeclaring_replaces_default(self) -> None:
        variable("w2", 1.0)
        w = variable("w2")
        assert default_value(w) is None

    def test_variables_helper(self) -> None:
        a, b = variables("a b", b=3.0)
        assert symbol_name(a) == "a" and symbol_name(b) == "b"
        assert default_value(a) is None
        assert default_value(b) == 3.0

    def test_derivative_wrt_own_argument(self) -> None:
        s = sp.Symbol("s", real=True)
        x = variable("x", independent=s)
        assert derivative(x) == sp.Derivative(x, s)
        assert derivative(variable("y")) == sp.Derivative(variable("y"), t)


class TestParameters:
    def test_parameter_default(self) -> None:
        k = parameter("k", 0.3)
        assert is_parameter(k)
        assert not is_variable(k)
        assert default_value(k) == 0.3

    def test_parameter_and_variable_namespaces_are_separate(self) -> None:
        x = variable("q", 1.0)
        q = parameter("q", 2.0)
        assert default_value(x) == 1.0
        assert default_value(q) == 2.0

    def test_independent_is_not_a_parameter(self) -> None:
        assert not is_parameter(t)

    def test_default_value_of_non_symbolic(self) -> None:
        assert default_value(2.5) == 2.5
        assert default_value(LiteralParameter(4)) == 4
        assert default_value(sp.Symbol("k") * 2) is None


class TestFreeVariables:
    def test_excludes_parameters_and_time(self) -> None:
        x, y = variable("x"), variable("y")
        k = parameter("k", 1.0)
        expr = k * x + sp.sin(t) * y
        found = free_variables(expr)
        assert set(found) == {x, y}
        assert len(found) == 2

    def test_deduplicated_and_deterministic(self) -> None:
        x, y = variable("x"), variable("y")
        expr = x**2 + x * y + y
        assert free_variables(expr) == free_variables(expr)
        assert len(free_variables(expr)) == 2

    def test_variables_inside_derivative(self) -> None:
        x = variable("x")
        assert free_variables(derivative(x)) == [x]

    def test_numbers_have_no_variables(self) -> None:
        assert free_variables(1.5) == []

    def test_free_parameters(self) -> None:
        x = variable("x")
        a, b = parameter("a", 1.0), parameter("b", 2.0)
        params = free_parameters(a * x + b * derivative(x))
        assert set(params) == {a, b}
        assert t not in params


class TestHasSymbolicVar:
    def test_by_symbol(self) -> None:
        x, y = variable("x"), variable("y")
        eqs = [sp.Eq(x, 2 * y)]
        assert has_symbolic_var(eqs, y)
        assert not has_symbolic_var(eqs, variable("unused"))

    def test_by_name(self) -> None:
        x = variable("x")
        k = parameter("k", 1.0)
        eq = sp.Eq(x, k)
        assert has_symbolic_var(eq, "k")
        assert has_symbolic_var(eq, "x")
        assert not has_symbolic_var(eq, "m")
