"""
Model assembly.

A Model is the resolved system of equations: one process per variable,
with variables partitioned into states (those defined through a time
derivative) and algebraic variables, plus the parameters the equations
reference. The model is not simplified; it is meant to be composed
further or compiled by a backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import sympy as sp

from processbased.errors import DuplicateAssignmentError, ProcessError
from processbased.processes import Process
from processbased.registry import DefaultRegistry
from processbased.resolution import resolve
from processbased.symbols import default_value, free_parameters, has_symbolic_var, t

__all__ = ["ModelKind", "Model", "build_model"]


class ModelKind(Enum):
    """Kind of model to assemble."""

    ODE = "ode"  # differential-algebraic system, derivatives allowed
    ALGEBRAIC = "algebraic"  # no time derivatives allowed


@dataclass
class Model:
    """
    A resolved system of equations.

    Built by :func:`build_model`; the fields after ``fallbacks`` are
    derived from the processes on construction.
    """

    name: str
    processes: list[Process] = field(default_factory=list)
    kind: ModelKind = ModelKind.ODE
    independent: sp.Symbol = t
    synthesized_parameters: list[Any] = field(default_factory=list)
    fallbacks: list[sp.Expr] = field(default_factory=list)

    equations: list[sp.Eq] = field(init=False)
    states: list[sp.Expr] = field(init=False)
    algebraic: list[sp.Expr] = field(init=False)
    parameters: list[sp.Symbol] = field(init=False)
    defaults: dict[sp.Basic, Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.equations = []
        self.states = []
        self.algebraic = []
        self.parameters = []
        self.defaults = {}
        self._by_variable: dict[sp.Expr, Process] = {}

        for process in self.processes:
            var = process.lhs_variable
            if var in self._by_variable:
                raise DuplicateAssignmentError(var, self._by_variable[var], process)
            self._by_variable[var] = process

            eq = process.equation
            self.equations.append(eq)
            if eq.lhs.has(sp.Derivative):
                if self.kind == ModelKind.ALGEBRAIC:
                    raise ProcessError(
                        f"Model '{self.name}' is algebraic, but the process of {var} "
                        f"has a time derivative: {eq}"
                    )
                self.states.append(var)
            else:
                self.algebraic.append(var)

            for p in free_parameters(eq, self.independent):
                if p not in self.parameters:
                    self.parameters.append(p)

        # Defaults are looked up once so later redeclarations do not alter the model.
        for sym in self.unknowns + self.parameters:
            value = default_value(sym)
            if value is not None:
                self.defaults[sym] = value

    @property
    def unknowns(self) -> list[sp.Expr]:
        """States followed by algebraic variables."""
        return self.states + self.algebraic

    @property
    def variables(self) -> list[sp.Expr]:
        """Defined variables in process order."""
        return [p.lhs_variable for p in self.processes]

    def process_for(self, variable: sp.Expr) -> Optional[Process]:
        """The process defining ``variable``, or None."""
        return self._by_variable.get(variable)

    def parameter_defaults(self) -> dict[sp.Symbol, Any]:
        return {p: self.defaults[p] for p in self.parameters if p in self.defaults}

    def initial_conditions(self) -> dict[sp.Expr, Any]:
        return {s: self.defaults[s] for s in self.states if s in self.defaults}

    def residuals(self) -> list[sp.Expr]:
        """Equations in residual form ``lhs - rhs``."""
        return [eq.lhs - eq.rhs for eq in self.equations]

    def has_symbolic_var(self, var: Any) -> bool:
        return has_symbolic_var(self.equations, var)

    def summary(self) -> str:
        lines = [
            f"Model '{self.name}' ({self.kind.value})",
            f"  States: {len(self.states)}",
            f"  Algebraic: {len(self.algebraic)}",
            f"  Parameters: {len(self.parameters)}",
        ]
        if self.equations:
            lines.append("\nEquations:")
            for eq in self.equations:
                lines.append(f"  {eq.lhs} ~ {eq.rhs}")
        if self.fallbacks:
            lines.append("\nParameter fallbacks: " + ", ".join(str(v) for v in self.fallbacks))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()


def build_model(
    processes: Any,
    default: Any = None,
    *,
    model_kind: Union[ModelKind, str] = ModelKind.ODE,
    name: Optional[str] = None,
    independent: sp.Symbol = t,
    warn_default: bool = True,
    registry: Optional[DefaultRegistry] = None,
) -> Model:
    """
    Construct a model from processes and default processes.

    During construction:

    - variables introduced by a process but lacking a process of their own
      obtain one from ``default``,
    - failing that, a variable with a default value is equated to a named
      parameter holding that value (warning if ``warn_default``),
    - otherwise an informative :class:`~processbased.errors.MissingProcessError`
      is raised, naming the processes that introduced the variable,
    - a variable with two processes raises
      :class:`~processbased.errors.DuplicateAssignmentError`.

    Args:
        processes: List of processes, ``sympy.Eq`` equations, nested lists, or Models
        default: Default processes (list or mapping), or a registry namespace
            (e.g. a module) with registered default processes
        model_kind: Kind of model to assemble
        name: Model name (defaults to the model kind)
        independent: Independent variable
        warn_default: Warn when a variable falls back to a parameter
        registry: Registry for namespace defaults (defaults to the global one)

    Example:
        >>> z, y = variable("z", 0.0), variable("y", 0.0)
        >>> x = variable("x")
        >>> model = build_model([
        ...     ExpRelaxation(z, x**2),
        ...     sp.Eq(derivative(x), 0.1 * y),
        ...     sp.Eq(y, z - x),
        ... ], name="example")
    """
    kind = ModelKind(model_kind)
    resolution = resolve(processes, default, warn_default=warn_default, registry=registry)
    return Model(
        name=name or kind.value,
        processes=resolution.processes,
        kind=kind,
        independent=independent,
        synthesized_parameters=resolution.parameters,
        fallbacks=resolution.fallbacks,
    )
