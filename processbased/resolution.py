"""
Process resolution.

Given the processes supplied by the user, and optionally default
processes, compute a complete system in which every variable referenced
by any process has exactly one process defining it.

Algorithm
---------
1. Flatten the input (nested lists, equations, partial models) into an
   ordered list of processes.
2. Assign each process to its variable; a second process for the same
   variable is a :class:`~processbased.errors.DuplicateAssignmentError`.
3. Every variable referenced in an assigned rhs that has no process yet
   joins the frontier. Which processes introduced it is recorded.
4. Drain the frontier in introduction order. Each variable obtains, in
   order of preference:

   a. its default process (which may introduce further variables),
   b. a :class:`~processbased.processes.ParameterProcess` if the variable
      has a default value (with a
      :class:`~processbased.errors.ParameterFallbackWarning`),
   c. otherwise resolution fails with
      :class:`~processbased.errors.MissingProcessError`.

The closure runs over the reference graph (process -> variables of its
rhs). It does not order equations for evaluation. A variable is assigned
before its rhs is expanded and is never enqueued twice, so default
processes referring to each other in a cycle terminate.
"""

from __future__ import annotations

import warnings
from collections import deque
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import sympy as sp

from processbased.errors import (
    DuplicateAssignmentError,
    MissingProcessError,
    ParameterFallbackWarning,
    ProcessError,
    find_stack_level,
)
from processbased.parameters import is_parameter_expression
from processbased.processes import ParameterProcess, Process, as_process
from processbased.registry import DEFAULT_REGISTRY, DefaultRegistry
from processbased.symbols import default_value, free_variables

__all__ = [
    "Resolution",
    "ResolutionState",
    "flatten_processes",
    "default_dict",
    "resolve",
]


def flatten_processes(items: Any) -> list[Process]:
    """
    Flatten a process collection into an ordered list of processes.

    Elements may be processes, ``sympy.Eq`` equations, nested lists or
    tuples of those, or a Model whose equations are expanded in place.
    """
    from processbased.model import Model

    flat: list[Process] = []

    def visit(item: Any) -> None:
        if isinstance(item, Model):
            for eq in item.equations:
                visit(eq)
        elif isinstance(item, (Process, sp.Eq)):
            flat.append(as_process(item))
        elif isinstance(item, (list, tuple)):
            for sub in item:
                visit(sub)
        else:
            raise TypeError(
                f"Cannot use {type(item).__name__} as a process: {item!r}. Expected a "
                f"Process, a sympy Eq, a Model, or a list of those."
            )

    visit(items)
    return flat


def default_dict(
    default: Any, registry: Optional[DefaultRegistry] = None
) -> Mapping[sp.Expr, Process]:
    """
    Variable -> default process mapping for the ``default`` argument of
    :func:`resolve`.

    ``default`` may be None, a process collection (later entries win), a
    mapping, or a namespace handle looked up in ``registry``.
    """
    if default is None:
        return {}
    if isinstance(default, Mapping):
        mapping = {}
        for var, p in default.items():
            p = as_process(p)
            if p.lhs_variable != var:
                raise ProcessError(
                    f"Default process for {var} defines {p.lhs_variable} instead."
                )
            mapping[var] = p
        return mapping
    if isinstance(default, (list, tuple, Process, sp.Eq)) or _is_model(default):
        return {p.lhs_variable: p for p in flatten_processes(default)}
    if isinstance(default, Hashable):
        return (registry or DEFAULT_REGISTRY).mapping(default)
    raise TypeError(f"Cannot use {type(default).__name__} as default processes: {default!r}")


def _is_model(obj: Any) -> bool:
    from processbased.model import Model

    return isinstance(obj, Model)


@dataclass
class Resolution:
    """Result of :func:`resolve`."""

    processes: list[Process]
    parameters: list[Any] = field(default_factory=list)
    fallbacks: list[sp.Expr] = field(default_factory=list)

    @property
    def equations(self) -> list[sp.Eq]:
        return [p.equation for p in self.processes]

    @property
    def variables(self) -> list[sp.Expr]:
        return [p.lhs_variable for p in self.processes]


@dataclass
class ResolutionState:
    """
    Mutable state of one resolution.

    - ``assigned``: variable -> process, in assignment order
    - ``frontier``: variables referenced but not yet assigned, FIFO
    - ``provenance``: variable -> processes whose rhs introduced it
    - ``supplied``: number of leading entries of ``assigned`` that came
      from the user's input rather than the closure
    """

    assigned: dict[sp.Expr, Process] = field(default_factory=dict)
    frontier: deque = field(default_factory=deque)
    provenance: dict[sp.Expr, list[Process]] = field(default_factory=dict)
    supplied: int = 0

    def assign(self, process: Process) -> None:
        var = process.lhs_variable
        existing = self.assigned.get(var)
        if existing is not None:
            raise DuplicateAssignmentError(var, existing, process)
        self.assigned[var] = process

    def introduce(self, process: Process) -> None:
        """Add the unassigned variables of ``process``'s rhs to the frontier."""
        for var in free_variables(process.rhs):
            if var in self.assigned:
                continue
            if var not in self.provenance:
                self.frontier.append(var)
                self.provenance[var] = []
            self.provenance[var].append(process)

    def pop(self) -> sp.Expr:
        return self.frontier.popleft()

    def is_supplied(self, process: Process) -> bool:
        """True if ``process`` was given by the user rather than added by the closure."""
        return any(p is process for p in list(self.assigned.values())[: self.supplied])

    def chain(self, var: sp.Expr) -> str:
        """
        Human-readable provenance of ``var``, followed back through processes
        that were themselves added by the closure.
        """
        lines: list[str] = []
        seen: set = set()
        pending = [(var, 0)]
        while pending:
            current, depth = pending.pop(0)
            if current in seen:
                continue
            seen.add(current)
            for process in self.provenance.get(current, []):
                origin = "provided" if self.is_supplied(process) else "added"
                lines.append(
                    f"{'  ' * depth}{current} <- {origin} process of {process.lhs_variable}"
                )
                if origin == "added":
                    pending.append((process.lhs_variable, depth + 1))
        return "Provenance:\n" + "\n".join(lines) if lines else ""


def _fallback_message(var: sp.Expr, process: ParameterProcess, state: ResolutionState) -> str:
    introducers = ", ".join(str(p.lhs_variable) for p in state.provenance.get(var, []))
    message = (
        f"Variable {var} was introduced in process of variable(s) {introducers}.\n"
        f"However, a process for {var} was not provided,\n"
        f"and there is no default process for it either.\n"
        f"Since it has a default value, we make it a parameter by adding a process:\n"
        f"`ParameterProcess({var})`: {process.lhs} ~ {process.rhs}."
    )
    chain = state.chain(var)
    return f"{message}\n{chain}" if chain else message


def resolve(
    processes: Any,
    default: Any = None,
    warn_default: bool = True,
    registry: Optional[DefaultRegistry] = None,
) -> Resolution:
    """
    Resolve ``processes`` into a complete set of processes.

    Args:
        processes: Process collection (processes, equations, nested lists, models)
        default: Default processes (collection or mapping), or a registry namespace
        warn_default: Warn when a variable falls back to a parameter
        registry: Registry used for namespace defaults (default: the global registry)

    Returns:
        Resolution with the processes in input order followed by those added
        during closure, and the parameters synthesized for fallbacks.

    Raises:
        DuplicateAssignmentError: a variable has two processes
        MissingProcessError: a referenced variable cannot be resolved
    """
    defaults = default_dict(default, registry)
    state = ResolutionState()
    result = Resolution(processes=[])

    for process in flatten_processes(processes):
        state.assign(process)
    state.supplied = len(state.assigned)
    for process in list(state.assigned.values()):
        state.introduce(process)

    while state.frontier:
        var = state.pop()
        process = defaults.get(var)
        if process is not None:
            state.assign(process)
            state.introduce(process)
            continue

        if default_value(var) is not None:
            process = ParameterProcess(var)
            state.assign(process)
            state.introduce(process)
            if isinstance(process.parameter, sp.Symbol) and not is_parameter_expression(
                process.value
            ):
                result.parameters.append(process.parameter)
            result.fallbacks.append(var)
            if warn_default:
                warnings.warn(
                    _fallback_message(var, process, state),
                    ParameterFallbackWarning,
                    stacklevel=find_stack_level(),
                )
            continue

        raise MissingProcessError(var, state.provenance.get(var, []), state.chain(var))

    result.processes = list(state.assigned.values())
    return result
