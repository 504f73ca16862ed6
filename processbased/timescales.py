"""
Timescales of processes.

A process's timescale decides the left-hand side of its equation: the
bare variable, or its first time-derivative scaled by a coefficient.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from numbers import Real
from typing import Any

import sympy as sp

from processbased.parameters import TIMESCALE_PREFIX, new_derived_named_parameter
from processbased.symbols import LiteralParameter, derivative


class TimescaleKind(Enum):
    """Kind of timescale."""

    NONE = auto()  # no time derivative: lhs = x
    UNIT = auto()  # lhs = D(x)
    NUMERIC = auto()  # lhs = tau_x*D(x), tau_x a new named parameter
    PARAMETER = auto()  # lhs = tau*D(x), tau given as a parameter expression
    LITERAL = auto()  # lhs = value*D(x), value inserted verbatim


@dataclass(frozen=True)
class Timescale:
    """
    Timescale of a process.

    Examples:
        Timescale.none()             -> x
        Timescale.unit()             -> D(x)
        Timescale.numeric(2.0)       -> tau_x*D(x), tau_x = 2.0
        Timescale.parameter(k)       -> k*D(x)
        Timescale.literal(2.0)       -> 2.0*D(x)
    """

    kind: TimescaleKind
    value: Any = None

    @staticmethod
    def none() -> "Timescale":
        return Timescale(TimescaleKind.NONE)

    @staticmethod
    def unit() -> "Timescale":
        return Timescale(TimescaleKind.UNIT)

    @staticmethod
    def numeric(value: Any) -> "Timescale":
        return Timescale(TimescaleKind.NUMERIC, value)

    @staticmethod
    def parameter(value: sp.Basic) -> "Timescale":
        return Timescale(TimescaleKind.PARAMETER, value)

    @staticmethod
    def literal(value: Any) -> "Timescale":
        return Timescale(TimescaleKind.LITERAL, value)

    @staticmethod
    def from_value(value: Any) -> "Timescale":
        """
        Normalize a user-supplied timescale.

        ``None`` means a unit timescale, a :class:`LiteralParameter` is a
        literal, numbers are numeric and other sympy expressions are
        parameters.
        """
        if isinstance(value, Timescale):
            return value
        if value is None:
            return Timescale.unit()
        if isinstance(value, LiteralParameter):
            return Timescale.literal(value.value)
        if isinstance(value, bool):
            raise TypeError(f"Invalid timescale: {value!r}")
        if isinstance(value, (Real, sp.Number)):
            return Timescale.numeric(value)
        if isinstance(value, sp.Basic):
            return Timescale.parameter(value)
        raise TypeError(f"Invalid timescale: {value!r}")

    @property
    def is_zero(self) -> bool:
        """True for numeric or literal timescales equal to zero."""
        if self.kind in (TimescaleKind.NUMERIC, TimescaleKind.LITERAL):
            return bool(self.value == 0)
        return False

    @property
    def has_derivative(self) -> bool:
        """True if the generated left-hand side contains a time derivative."""
        return self.kind != TimescaleKind.NONE and not self.is_zero


NO_TIME_DERIVATIVE = Timescale.none()


def derive_lhs(var: sp.Expr, timescale: Timescale) -> sp.Expr:
    """
    Left-hand side of the equation defining ``var`` for the given timescale.

    A zero numeric or literal timescale degrades to the bare variable and
    creates no parameter.
    """
    kind = timescale.kind
    if kind == TimescaleKind.NONE or timescale.is_zero:
        return var
    if kind == TimescaleKind.UNIT:
        return derivative(var)
    if kind == TimescaleKind.NUMERIC:
        tau = new_derived_named_parameter(var, timescale.value, TIMESCALE_PREFIX)
        return tau * derivative(var)
    if kind == TimescaleKind.PARAMETER:
        return timescale.value * derivative(var)
    if kind == TimescaleKind.LITERAL:
        return sp.sympify(timescale.value) * derivative(var)
    raise ValueError(f"Unknown timescale kind: {kind}")
