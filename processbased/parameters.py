"""
Automatic named parameters.

Helpers that turn plain numbers into named parameters whose names derive
from a variable, while passing parameter expressions through untouched
and :class:`~processbased.symbols.LiteralParameter` values through as
literals.
"""

from __future__ import annotations

from numbers import Real
from typing import Any

import sympy as sp

from processbased.symbols import LiteralParameter, parameter, symbol_name

# Name conventions for automatically created parameters.
TIMESCALE_PREFIX = "tau"
FALLBACK_SUFFIX = "0"
CONNECTOR = "_"


def is_parameter_expression(value: Any) -> bool:
    """True for sympy expressions that are not plain numbers (e.g. ``k`` or ``2*k``)."""
    return isinstance(value, sp.Basic) and not isinstance(value, sp.Number)


def derived_name(base: Any, extra: str, prefix: bool = True, connector: str = CONNECTOR) -> str:
    """``tau_x`` style name built from ``base`` (a variable, symbol or string) and ``extra``."""
    name = base if isinstance(base, str) else symbol_name(base)
    return f"{extra}{connector}{name}" if prefix else f"{name}{connector}{extra}"


def new_derived_named_parameter(
    variable: Any,
    value: Any,
    extra: str,
    prefix: bool = True,
    connector: str = CONNECTOR,
) -> Any:
    """
    Create a named parameter derived from ``variable``.

    - A parameter expression ``value`` is returned as is.
    - A :class:`LiteralParameter` is replaced by its literal value.
    - Otherwise a new parameter named from ``variable`` and ``extra`` is
      created, with default value ``value``.

    Example:
        >>> x = variable("x")
        >>> p = new_derived_named_parameter(x, 0.5, "tau")
        >>> p, default_value(p)
        (tau_x, 0.5)
    """
    if isinstance(value, LiteralParameter):
        return value.value
    if is_parameter_expression(value):
        return value
    return parameter(derived_name(variable, extra, prefix, connector), value)


def convert_to_parameters(**values: Any) -> list[Any]:
    """
    Convert keyword values into parameters named after their keywords.

    Parameter expressions are left unaltered and
    :class:`LiteralParameter` values become their literals. Useful for
    exposing keyword arguments of process factories as named parameters::

        def damping(v, c=0.1):
            (c,) = convert_to_parameters(c=c)
            return TimeDerivative(v, -c * v)
    """
    converted = []
    for name, value in values.items():
        if isinstance(value, LiteralParameter):
            converted.append(value.value)
        elif is_parameter_expression(value):
            converted.append(value)
        elif isinstance(value, (Real, sp.Number)):
            converted.append(parameter(name, value))
        else:
            raise TypeError(f"Cannot convert {name}={value!r} to a parameter")
    return converted
