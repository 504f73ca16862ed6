"""Tests for process types and the generic process API."""

from __future__ import annotations

import pytest
import sympy as sp

from processbased.errors import ProcessError
from processbased.processes import (
    AdditionProcess,
    EquationProcess,
    ExpRelaxation,
    ParameterProcess,
    TimeDerivative,
    as_process,
    lhs,
    lhs_variable,
    rhs,
    synthesize_parameter,
    timescale,
)
from processbased.symbols import (
    LiteralParameter,
    default_value,
    derivative,
    free_variables,
    parameter,
    variable,
)
from processbased.timescales import NO_TIME_DERIVATIVE, Timescale, TimescaleKind


class TestEquationProcess:
    def test_algebraic_lhs(self) -> None:
        x, y = variable("x"), variable("y")
        p = as_process(sp.Eq(x, 2 * y))
        assert isinstance(p, EquationProcess)
        assert p.lhs_variable == x
        assert p.timescale == NO_TIME_DERIVATIVE
        assert p.rhs == 2 * y

    def test_derivative_lhs(self) -> None:
        x, y = variable("x"), variable("y")
        p = as_process(sp.Eq(derivative(x), y))
        assert p.lhs_variable == x
        assert p.timescale == Timescale.unit()

    def test_scaled_derivative_lhs(self) -> None:
        x, y = variable("x"), variable("y")
        k = parameter("k", 2.0)
        eq = sp.Eq(k * derivative(x), y)
        p = as_process(eq)
        assert p.lhs_variable == x
        assert p.timescale.kind == TimescaleKind.PARAMETER
        assert p.timescale.value == k
        assert p.equation is eq

    def test_lhs_kept_verbatim(self) -> None:
        x, y = variable("x"), variable("y")
        eq = sp.Eq(derivative(x), y)
        assert lhs(eq) == eq.lhs

    @pytest.mark.parametrize("build_lhs", [
        lambda x, y: x + y,
        lambda x, y: x * y,
        lambda x, y: y * derivative(x),
        lambda x, y: sp.Symbol("k", real=True),
    ])
    def test_invalid_lhs(self, build_lhs) -> None:
        x, y = variable("x"), variable("y")
        with pytest.raises(ProcessError, match="not one of x, D\\(x\\)"):
            as_process(sp.Eq(build_lhs(x, y), 1.0))

    def test_as_process_rejects_other_types(self) -> None:
        with pytest.raises(TypeError, match="Expected a Process or a sympy Eq"):
            as_process("x = 1")

    def test_process_is_unchanged(self) -> None:
        x = variable("x")
        p = TimeDerivative(x, 1.0)
        assert as_process(p) is p

    def test_self_reference_is_allowed(self) -> None:
        x = variable("x")
        p = as_process(sp.Eq(derivative(x), -x))
        assert free_variables(p.rhs) == [x]


class TestParameterProcess:
    def test_numeric_value(self) -> None:
        T = variable("T")
        p = ParameterProcess(T, 0.5)
        T_0 = sp.Symbol("T_0", real=True)
        assert p.parameter == T_0
        assert p.equation == sp.Eq(T, T_0)
        assert default_value(T_0) == 0.5

    def test_uses_variable_default(self) -> None:
        T = variable("T", 0.25)
        p = ParameterProcess(T)
        assert default_value(p.parameter) == 0.25
        assert p.timescale == NO_TIME_DERIVATIVE

    def test_parameter_expression(self) -> None:
        T = variable("T")
        k = parameter("k", 1.0)
        p = ParameterProcess(T, 2 * k)
        assert p.rhs == 2 * k

    def test_literal(self) -> None:
        T = variable("T")
        p = ParameterProcess(T, LiteralParameter(1.5))
        assert p.rhs == sp.Float(1.5)

    def test_requires_value(self) -> None:
        T = variable("T")
        with pytest.raises(ProcessError, match="has no default value"):
            ParameterProcess(T)

    def test_synthesize_parameter(self) -> None:
        T = variable("T", 0.5)
        param, process = synthesize_parameter(T)
        assert param == sp.Symbol("T_0", real=True)
        assert process.lhs_variable == T
        assert process.rhs == param

    def test_synthesize_with_suffix(self) -> None:
        T = variable("T")
        param, _ = synthesize_parameter(T, 1.0, suffix="init")
        assert param == sp.Symbol("T_init", real=True)

    def test_synthesize_passes_expression_through(self) -> None:
        T = variable("T")
        k = parameter("k", 1.0)
        param, process = synthesize_parameter(T, k)
        assert param == k
        assert process.rhs == k


class TestTimeDerivative:
    def test_unit(self) -> None:
        x = variable("x")
        p = TimeDerivative(x, 1.0)
        assert p.lhs == derivative(x)
        assert p.rhs == sp.Float(1.0)

    def test_numeric_tau(self) -> None:
        x = variable("x")
        p = TimeDerivative(x, -x, tau=3.0)
        tau = sp.Symbol("tau_x", real=True)
        assert p.lhs == tau * derivative(x)
        assert default_value(tau) == 3.0

    def test_zero_tau(self) -> None:
        x, y = variable("x"), variable("y")
        p = TimeDerivative(x, y, tau=0)
        assert p.lhs == x
        assert timescale(p).is_zero


class TestExpRelaxation:
    def test_rhs(self) -> None:
        z, x = variable("z"), variable("x")
        p = ExpRelaxation(z, x**2)
        assert p.lhs_variable == z
        assert p.lhs == derivative(z)
        assert p.rhs == x**2 - z

    def test_parameter_tau(self) -> None:
        z, x = variable("z"), variable("x")
        tau = parameter("tau", 1.0)
        p = ExpRelaxation(z, x, tau)
        assert p.lhs == tau * derivative(z)

    def test_zero_tau_is_instantaneous(self) -> None:
        z, x = variable("z"), variable("x")
        p = ExpRelaxation(z, x**2, tau=0.0)
        assert p.lhs == z
        assert p.rhs == x**2

    def test_from_process(self) -> None:
        z, x = variable("z"), variable("x")
        p = ExpRelaxation.from_process(sp.Eq(z, 2 * x), tau=LiteralParameter(0.5))
        assert p.lhs == 0.5 * derivative(z)
        assert p.rhs == 2 * x - z


class TestAdditionProcess:
    def test_adds_expressions(self) -> None:
        x, y = variable("x"), variable("y")
        p = AdditionProcess(TimeDerivative(x, y), 1.0, -x)
        assert p.lhs_variable == x
        assert p.lhs == derivative(x)
        assert sp.simplify(p.rhs - (y + 1.0 - x)) == 0

    def test_adds_processes(self) -> None:
        x, y = variable("x"), variable("y")
        p = AdditionProcess(ExpRelaxation(x, y), TimeDerivative(x, 2 * y))
        assert sp.simplify(p.rhs - (3 * y - x)) == 0
        assert p.timescale == Timescale.unit()

    def test_mismatched_variable(self) -> None:
        x, y = variable("x"), variable("y")
        with pytest.raises(ProcessError, match="does not match"):
            AdditionProcess(TimeDerivative(x, 1.0), TimeDerivative(y, 1.0))


class TestGenericAPI:
    def test_functions_accept_equations(self) -> None:
        x, y = variable("x"), variable("y")
        eq = sp.Eq(x, y)
        assert lhs_variable(eq) == x
        assert rhs(eq) == y
        assert lhs(eq) == x
        assert timescale(eq) == NO_TIME_DERIVATIVE

    def test_str(self) -> None:
        x = variable("x")
        assert str(TimeDerivative(x, 1.0)).startswith("TimeDerivative: ")
