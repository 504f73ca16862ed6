"""
Symbolic variables and parameters.

Variables are sympy applied undefined functions of the independent
variable, e.g. ``x(t)``. Parameters are time-independent real symbols.

Default values are kept in a name-keyed :class:`SymbolTable` rather than
on the sympy objects. sympy identifies symbols by name and caches
constructed expressions, so a default attached to an object would leak
between declarations sharing a name. Redeclaring a name replaces its
default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Optional

import sympy as sp
from sympy.core.function import AppliedUndef

__all__ = [
    "t",
    "SymbolKind",
    "SymbolInfo",
    "SymbolTable",
    "SYMBOLS",
    "LiteralParameter",
    "variable",
    "variables",
    "parameter",
    "derivative",
    "default_value",
    "symbol_name",
    "is_variable",
    "is_parameter",
    "free_variables",
    "free_parameters",
    "has_symbolic_var",
]

# Unitless independent variable (time).
t = sp.Symbol("t", real=True)


class SymbolKind(Enum):
    """Kind of declared symbol."""

    VARIABLE = "variable"
    PARAMETER = "parameter"


@dataclass
class SymbolInfo:
    """Metadata of a declared variable or parameter."""

    name: str
    kind: SymbolKind
    default: Any = None
    description: str = ""


@dataclass
class SymbolTable:
    """
    Name-keyed store of symbol metadata.

    Variables and parameters live in separate namespaces, so a parameter
    ``x`` does not shadow a variable ``x(t)``.
    """

    _entries: dict[tuple[SymbolKind, str], SymbolInfo] = field(default_factory=dict)

    def declare(self, info: SymbolInfo) -> None:
        self._entries[(info.kind, info.name)] = info

    def get(self, kind: SymbolKind, name: str) -> Optional[SymbolInfo]:
        return self._entries.get((kind, name))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


SYMBOLS = SymbolTable()


@dataclass(frozen=True)
class LiteralParameter:
    """
    Wrap a number so it is inserted verbatim into generated equations.

    Functions that would normally turn a number into a named parameter
    (timescales, :func:`~processbased.parameters.new_derived_named_parameter`,
    :func:`~processbased.parameters.convert_to_parameters`) insert the
    literal value instead.
    """

    value: Any

    def __str__(self) -> str:
        return str(self.value)


def variable(
    name: str,
    default: Any = None,
    independent: sp.Symbol = t,
    description: str = "",
) -> sp.Expr:
    """
    Declare a time-dependent variable ``name(independent)``.

    Args:
        name: Variable name
        default: Default value (number or parameter expression), or None
        independent: Independent variable the variable depends on
        description: Free-form description

    Returns:
        The sympy expression ``name(independent)``

    Example:
        >>> x = variable("x", 0.5)
        >>> x
        x(t)
        >>> default_value(x)
        0.5
    """
    SYMBOLS.declare(SymbolInfo(name, SymbolKind.VARIABLE, default, description))
    return sp.Function(name, real=True)(independent)


def variables(names: str, independent: sp.Symbol = t, **defaults: Any) -> tuple[sp.Expr, ...]:
    """Declare several variables at once: ``x, y = variables("x y", y=0.0)``."""
    return tuple(
        variable(name, defaults.get(name), independent=independent) for name in names.split()
    )


def parameter(name: str, default: Any = None, description: str = "") -> sp.Symbol:
    """Declare a time-independent parameter with an optional default value."""
    SYMBOLS.declare(SymbolInfo(name, SymbolKind.PARAMETER, default, description))
    return sp.Symbol(name, real=True)


def derivative(var: sp.Expr, independent: Optional[sp.Symbol] = None) -> sp.Expr:
    """
    First time-derivative of ``var``.

    If ``independent`` is not given, differentiate with respect to the
    variable's own argument (falling back to :data:`t`).
    """
    if independent is None:
        independent = t
        if isinstance(var, AppliedUndef) and len(var.args) == 1 and var.args[0].is_Symbol:
            independent = var.args[0]
    return sp.Derivative(var, independent)


def symbol_name(x: Any) -> str:
    """Name of a variable (``x`` for ``x(t)``) or symbol; ``str(x)`` otherwise."""
    if isinstance(x, AppliedUndef):
        return x.func.__name__
    if isinstance(x, sp.Symbol):
        return x.name
    return str(x)


def is_variable(x: Any) -> bool:
    """True if ``x`` is a time-dependent variable."""
    return isinstance(x, AppliedUndef)


def is_parameter(x: Any, independent: sp.Symbol = t) -> bool:
    """True if ``x`` is a time-independent symbol other than the independent variable."""
    return isinstance(x, sp.Symbol) and x != independent


def default_value(x: Any) -> Any:
    """
    Default value of a symbolic variable or parameter, or None if it has none.

    Non-symbolic inputs (numbers) are returned unchanged. A
    :class:`LiteralParameter` returns its wrapped value.
    """
    if isinstance(x, LiteralParameter):
        return x.value
    if isinstance(x, (Real, sp.Number)):
        return x
    if isinstance(x, AppliedUndef):
        info = SYMBOLS.get(SymbolKind.VARIABLE, symbol_name(x))
    elif isinstance(x, sp.Symbol):
        info = SYMBOLS.get(SymbolKind.PARAMETER, x.name)
    else:
        return None
    return None if info is None else info.default


def free_variables(expr: Any) -> list[sp.Expr]:
    """
    Variables referenced by ``expr``, deduplicated, in preorder.

    Parameters, plain symbols and the independent variable are not
    variables. Variables appearing only inside a derivative count.
    """
    found: list[sp.Expr] = []
    seen: set = set()
    for node in sp.preorder_traversal(sp.sympify(expr)):
        if isinstance(node, AppliedUndef) and node not in seen:
            seen.add(node)
            found.append(node)
    return found


def free_parameters(expr: Any, independent: sp.Symbol = t) -> list[sp.Symbol]:
    """Parameters (symbols other than ``independent``) referenced by ``expr``, in preorder."""
    found: list[sp.Symbol] = []
    for node in sp.preorder_traversal(sp.sympify(expr)):
        if is_parameter(node, independent) and node not in found:
            found.append(node)
    return found


def has_symbolic_var(eqs: Any, var: Any) -> bool:
    """
    True if the symbolic variable or parameter ``var`` occurs in ``eqs``.

    ``eqs`` may be a single expression or equation, an iterable of them,
    or anything with an ``equations`` attribute (e.g. a Model). If ``var``
    is a string, symbols are compared by name only.
    """
    if hasattr(eqs, "equations"):
        eqs = eqs.equations
    if isinstance(eqs, sp.Basic):
        eqs = [eqs]
    for eq in eqs:
        for node in sp.preorder_traversal(eq):
            if isinstance(var, str):
                if isinstance(node, (AppliedUndef, sp.Symbol)) and symbol_name(node) == var:
                    return True
            elif node == var:
                return True
    return False
