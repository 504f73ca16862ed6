"""Tests for the residual backends."""

from __future__ import annotations

import casadi as ca
import numpy as np
import pytest
import sympy as sp

from processbased import ProcessError, TimeDerivative, build_model, derivative, parameter, variable
from processbased.backends import CasadiBackend, NumpyBackend


@pytest.fixture
def decay():
    """D(x) = -k*x with the algebraic output z = x^2."""
    x = variable("x", 2.0)
    z = variable("z", 4.0)
    k = parameter("k", 0.5)
    return build_model([TimeDerivative(x, -k * x), sp.Eq(z, x**2)], name="decay")


@pytest.mark.parametrize("backend_cls", [CasadiBackend, NumpyBackend])
class TestBackends:
    def test_residual(self, decay, backend_cls) -> None:
        backend = backend_cls(decay).compile()
        res = backend.residual([0.1], [2.0], [4.0], [0.5])
        assert res.shape == (2,)
        assert np.allclose(res, [1.1, 0.0])

    def test_residual_is_zero_on_solution(self, decay, backend_cls) -> None:
        backend = backend_cls(decay).compile()
        x = 3.0
        res = backend.residual([-0.5 * x], [x], [x**2], [0.5], t=1.0)
        assert np.allclose(res, [0.0, 0.0])

    def test_requires_compile(self, decay, backend_cls) -> None:
        with pytest.raises(RuntimeError, match="compiled"):
            backend_cls(decay).residual([0.1], [2.0], [4.0], [0.5])

    def test_default_vectors(self, decay, backend_cls) -> None:
        backend = backend_cls(decay)
        assert np.allclose(backend.parameter_vector(), [0.5])
        assert np.allclose(backend.state_vector(), [2.0])

    def test_rejects_derivative_of_algebraic_variable(self, backend_cls) -> None:
        x, y = variable("x"), variable("y")
        model = build_model([TimeDerivative(x, derivative(y)), sp.Eq(y, x)])
        assert model.algebraic == [y]
        with pytest.raises(ProcessError, match="time derivative of y\\(t\\), which is not a state"):
            backend_cls(model).compile()


class TestCasadiBackend:
    def test_function_signature(self, decay) -> None:
        backend = CasadiBackend(decay).compile()
        f = backend.f_residual
        assert f.name_in() == ["xdot", "x", "z", "p", "t"]
        assert f.name_out() == ["res"]
        assert f.size1_out(0) == 2

    def test_jacobian(self, decay) -> None:
        backend = CasadiBackend(decay).compile()
        res = backend.f_residual(backend.xdot, backend.x, backend.z, backend.p, backend.t)
        J = ca.jacobian(res, backend.x)
        f_J = ca.Function("J", [backend.x, backend.p], [J])
        assert np.allclose(np.array(f_J(2.0, 0.5)).flatten(), [0.5, -4.0])

    def test_timescale_parameter(self) -> None:
        x = variable("x", 1.0)
        model = build_model([TimeDerivative(x, 1.0, tau=2.0)])
        backend = CasadiBackend(model).compile()
        assert np.allclose(backend.residual([0.5], [1.0], [], backend.parameter_vector()), [0.0])


class TestNumpyBackend:
    def test_example_system(self, zxy) -> None:
        z, x, y, processes = zxy
        model = build_model(processes)
        backend = NumpyBackend(model).compile()
        res = backend.residual([0.5, 0.3], [1.0, 2.0], [-1.0], [])
        assert np.allclose(res, [-2.5, 0.4, 0.0])

    def test_size_mismatch(self, decay) -> None:
        backend = NumpyBackend(decay).compile()
        with pytest.raises(ValueError, match="Expected 1 values for x"):
            backend.residual([0.1], [2.0, 1.0], [4.0], [0.5])

    def test_missing_default(self) -> None:
        x = variable("x")
        model = build_model([TimeDerivative(x, -x)])
        with pytest.raises(ValueError, match="No default value for: x"):
            NumpyBackend(model).state_vector()
