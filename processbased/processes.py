"""
Processes: rules defining exactly one variable.

A process couples a variable (its left-hand-side variable) with the
expression governing it. Plain ``sympy.Eq`` equations are accepted
wherever processes are, and are promoted with :func:`as_process`.

Implementing a new process type:
    Subclass :class:`Process` and provide ``lhs_variable`` and ``rhs``.
    Optionally override ``timescale`` (defaults to no time derivative)
    or, for full control, ``lhs``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import sympy as sp

from processbased.errors import ProcessError
from processbased.parameters import FALLBACK_SUFFIX, new_derived_named_parameter
from processbased.symbols import default_value, free_variables, is_variable
from processbased.timescales import NO_TIME_DERIVATIVE, Timescale, derive_lhs

__all__ = [
    "Process",
    "EquationProcess",
    "ParameterProcess",
    "TimeDerivative",
    "ExpRelaxation",
    "AdditionProcess",
    "as_process",
    "lhs_variable",
    "rhs",
    "lhs",
    "timescale",
    "synthesize_parameter",
]


class Process(ABC):
    """Base class of all processes."""

    @property
    @abstractmethod
    def lhs_variable(self) -> sp.Expr:
        """The single variable this process defines."""

    @property
    @abstractmethod
    def rhs(self) -> sp.Expr:
        """Right-hand side: the expression governing the variable."""

    @property
    def timescale(self) -> Timescale:
        return NO_TIME_DERIVATIVE

    @property
    def lhs(self) -> sp.Expr:
        """Left-hand side, derived from :attr:`timescale`."""
        return derive_lhs(self.lhs_variable, self.timescale)

    @property
    def equation(self) -> sp.Eq:
        return sp.Eq(self.lhs, self.rhs, evaluate=False)

    def __str__(self) -> str:
        return f"{type(self).__name__}: {self.lhs} ~ {self.rhs}"


def _derivative_variable(expr: sp.Basic) -> Optional[sp.Expr]:
    """Variable ``x`` if ``expr`` is the first derivative ``D(x)``, else None."""
    if (
        isinstance(expr, sp.Derivative)
        and is_variable(expr.expr)
        and expr.derivative_count == 1
    ):
        return expr.expr
    return None


def _infer_lhs(lhs_expr: sp.Basic) -> tuple[sp.Expr, Timescale]:
    """
    Variable and timescale of an equation's left-hand side.

    Accepted forms are ``x``, ``D(x)`` and ``c*D(x)`` where ``c`` contains
    no variables.
    """
    if is_variable(lhs_expr):
        return lhs_expr, NO_TIME_DERIVATIVE
    var = _derivative_variable(lhs_expr)
    if var is not None:
        return var, Timescale.unit()
    if isinstance(lhs_expr, sp.Mul):
        derivs = [a for a in lhs_expr.args if _derivative_variable(a) is not None]
        if len(derivs) == 1:
            coeff = sp.Mul(*[a for a in lhs_expr.args if a is not derivs[0]])
            if not free_variables(coeff):
                return _derivative_variable(derivs[0]), Timescale.parameter(coeff)
    raise ProcessError(
        f"The LHS `{lhs_expr}` of the equation is not one of x, D(x), c*D(x) "
        f"with x a variable and c free of variables. Wrap it in a Process "
        f"subtype to define its variable explicitly."
    )


@dataclass(eq=False)
class EquationProcess(Process):
    """A plain equation promoted to a process. Its LHS is kept verbatim."""

    eq: sp.Eq
    _variable: sp.Expr = field(init=False, repr=False)
    _timescale: Timescale = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._variable, self._timescale = _infer_lhs(self.eq.lhs)

    @property
    def lhs_variable(self) -> sp.Expr:
        return self._variable

    @property
    def rhs(self) -> sp.Expr:
        return self.eq.rhs

    @property
    def timescale(self) -> Timescale:
        return self._timescale

    @property
    def lhs(self) -> sp.Expr:
        return self.eq.lhs

    @property
    def equation(self) -> sp.Eq:
        return self.eq


@dataclass(eq=False)
class ParameterProcess(Process):
    """
    Equate ``variable`` to a constant encapsulated in a parameter.

    If ``value`` is a number, a parameter named ``<variable>_0`` with that
    default value is created. A parameter expression is used directly.
    If ``value`` is omitted, the variable's default value is used.

    Example:
        >>> T = variable("T", 0.5)
        >>> ParameterProcess(T).equation
        Eq(T(t), T_0)
    """

    variable: sp.Expr
    value: Any = None
    suffix: str = FALLBACK_SUFFIX
    parameter: Any = field(init=False)

    def __post_init__(self) -> None:
        if self.value is None:
            self.value = default_value(self.variable)
        if self.value is None:
            raise ProcessError(
                f"ParameterProcess({self.variable}) requires a value, "
                f"but {self.variable} has no default value."
            )
        self.parameter = new_derived_named_parameter(
            self.variable, self.value, self.suffix, prefix=False
        )

    @property
    def lhs_variable(self) -> sp.Expr:
        return self.variable

    @property
    def rhs(self) -> sp.Expr:
        return sp.sympify(self.parameter)


@dataclass(eq=False)
class TimeDerivative(Process):
    """
    ``tau*D(variable) ~ expression``.

    A numeric ``tau`` becomes a new parameter ``tau_<variable>``, a
    parameter expression is used as is and ``None`` means 1 with no
    parameter. If ``tau`` is zero, ``variable ~ expression`` is created.
    """

    variable: sp.Expr
    expression: Any
    tau: Any = None

    @property
    def lhs_variable(self) -> sp.Expr:
        return self.variable

    @property
    def rhs(self) -> sp.Expr:
        return sp.sympify(self.expression)

    @property
    def timescale(self) -> Timescale:
        return Timescale.from_value(self.tau)


@dataclass(eq=False)
class ExpRelaxation(Process):
    """
    Exponential relaxation of ``variable`` towards ``expression``:
    ``tau*D(variable) ~ expression - variable``.

    Timescale handling is as for :class:`TimeDerivative`. If ``tau`` is
    zero, the relaxation is instantaneous: ``variable ~ expression``.
    """

    variable: sp.Expr
    expression: Any
    tau: Any = None

    @classmethod
    def from_process(cls, process: Any, tau: Any = None) -> "ExpRelaxation":
        """Relax the variable of ``process`` towards that process's rhs."""
        process = as_process(process)
        return cls(process.lhs_variable, process.rhs, tau)

    @property
    def lhs_variable(self) -> sp.Expr:
        return self.variable

    @property
    def rhs(self) -> sp.Expr:
        expression = sp.sympify(self.expression)
        if self.timescale.is_zero:
            return expression
        return expression - self.variable

    @property
    def timescale(self) -> Timescale:
        return Timescale.from_value(self.tau)


class AdditionProcess(Process):
    """
    Add terms to the rhs of ``process``.

    Each added item is either an expression, or a process (or equation)
    whose rhs is added; such processes must define the same variable.
    """

    def __init__(self, process: Any, *added: Any) -> None:
        self.process = as_process(process)
        self.added = list(added)
        for item in self.added:
            if isinstance(item, (Process, sp.Eq)):
                other = lhs_variable(item)
                if other != self.process.lhs_variable:
                    raise ProcessError(
                        f"Added process for {other} does not match the "
                        f"variable {self.process.lhs_variable} of the base process."
                    )

    @property
    def lhs_variable(self) -> sp.Expr:
        return self.process.lhs_variable

    @property
    def rhs(self) -> sp.Expr:
        terms = [rhs(a) if isinstance(a, (Process, sp.Eq)) else sp.sympify(a) for a in self.added]
        return sp.Add(self.process.rhs, *terms)

    @property
    def timescale(self) -> Timescale:
        return self.process.timescale

    @property
    def lhs(self) -> sp.Expr:
        return self.process.lhs


def as_process(item: Any) -> Process:
    """Promote an equation to a process; processes are returned unchanged."""
    if isinstance(item, Process):
        return item
    if isinstance(item, sp.Eq):
        return EquationProcess(item)
    raise TypeError(
        f"Expected a Process or a sympy Eq, got {type(item).__name__}: {item!r}"
    )


def lhs_variable(item: Any) -> sp.Expr:
    """Variable defined by a process or equation."""
    return as_process(item).lhs_variable


def rhs(item: Any) -> sp.Expr:
    """Right-hand side of a process or equation."""
    return as_process(item).rhs


def lhs(item: Any) -> sp.Expr:
    """Left-hand side of a process or equation."""
    return as_process(item).lhs


def timescale(item: Any) -> Timescale:
    """Timescale of a process or equation."""
    return as_process(item).timescale


def synthesize_parameter(
    variable: sp.Expr, value: Any = None, suffix: str = FALLBACK_SUFFIX
) -> tuple[Any, ParameterProcess]:
    """
    Parameter and equating process for a process-less variable.

    A parameter expression ``value`` is returned unchanged. Otherwise a
    parameter named ``<variable>_<suffix>`` is created holding ``value``
    (or the variable's default value).
    """
    process = ParameterProcess(variable, value, suffix=suffix)
    return process.parameter, process
