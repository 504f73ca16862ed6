"""Shared fixtures."""

from __future__ import annotations

import pytest
import sympy as sp

from processbased import DefaultRegistry, ExpRelaxation, derivative, variable


@pytest.fixture
def registry() -> DefaultRegistry:
    """An empty registry isolated from the global one."""
    return DefaultRegistry()


@pytest.fixture
def zxy():
    """
    The z/x/y system::

        D(z) = x^2 - z
        D(x) = 0.1*y
        y = z - x

    z and y default to 0.0, x has no default value.
    """
    z = variable("z", 0.0)
    x = variable("x")
    y = variable("y", 0.0)
    processes = [
        ExpRelaxation(z, x**2),
        sp.Eq(derivative(x), 0.1 * y),
        sp.Eq(y, z - x),
    ]
    return z, x, y, processes
