"""
Conversion of sympy expressions to CasADi.
"""

from __future__ import annotations

from functools import reduce
from typing import Any, Callable, Optional

import casadi as ca
import sympy

__all__ = ["sympy_to_casadi"]

_FUNCTIONS: dict[type, Callable[..., Any]] = {
    sympy.sin: ca.sin,
    sympy.cos: ca.cos,
    sympy.tan: ca.tan,
    sympy.asin: ca.asin,
    sympy.acos: ca.acos,
    sympy.atan: ca.atan,
    sympy.sinh: ca.sinh,
    sympy.cosh: ca.cosh,
    sympy.tanh: ca.tanh,
    sympy.asinh: ca.asinh,
    sympy.acosh: ca.acosh,
    sympy.atanh: ca.atanh,
    sympy.exp: ca.exp,
    sympy.log: ca.log,
    sympy.Abs: ca.fabs,
    sympy.sign: ca.sign,
    sympy.floor: ca.floor,
    sympy.ceiling: ca.ceil,
    sympy.atan2: ca.atan2,
    sympy.Min: lambda *a: reduce(ca.fmin, a),
    sympy.Max: lambda *a: reduce(ca.fmax, a),
}

_RELATIONS: dict[type, Callable[[Any, Any], Any]] = {
    sympy.StrictLessThan: lambda a, b: a < b,
    sympy.LessThan: lambda a, b: a <= b,
    sympy.StrictGreaterThan: lambda a, b: a > b,
    sympy.GreaterThan: lambda a, b: a >= b,
    sympy.Equality: lambda a, b: a == b,
    sympy.Unequality: lambda a, b: a != b,
}


def sympy_to_casadi(f: Any, symbols: Optional[dict[str, Any]] = None) -> tuple[Any, dict[str, Any]]:
    """
    Convert a sympy expression to a CasADi expression.

    @f: sympy expression
    @symbols: name -> casadi symbol map. Symbols missing from the map are
        created as new ``ca.SX`` symbols and added to it.
    @return: (casadi expression, symbols)
    """
    if symbols is None:
        symbols = {}
    return _sympy_parser(sympy.sympify(f), symbols), symbols


def _sympy_parser(f: Any, symbols: dict[str, Any]) -> Any:
    prs = lambda g: _sympy_parser(g, symbols)
    f_type = type(f)
    if f.is_Number or f.is_NumberSymbol:
        return float(f)
    if isinstance(f, sympy.Symbol):
        if f.name not in symbols:
            symbols[f.name] = ca.SX.sym(f.name)
        return symbols[f.name]
    if f_type == sympy.Add:
        return reduce(lambda a, b: a + b, [prs(arg) for arg in f.args])
    if f_type == sympy.Mul:
        return reduce(lambda a, b: a * b, [prs(arg) for arg in f.args])
    if f_type == sympy.Pow:
        base, power = f.args
        if power == sympy.S.Half:
            return ca.sqrt(prs(base))
        return prs(base) ** prs(power)
    if f_type in _RELATIONS:
        return _RELATIONS[f_type](prs(f.lhs), prs(f.rhs))
    if f_type == sympy.Piecewise:
        result = None
        for expr, cond in reversed(f.args):
            if cond == sympy.true:
                result = prs(expr)
            elif result is None:
                raise NotImplementedError(f"Piecewise without default branch: {f}")
            else:
                result = ca.if_else(prs(cond), prs(expr), result)
        return result
    if f_type in _FUNCTIONS:
        return _FUNCTIONS[f_type](*[prs(arg) for arg in f.args])
    raise NotImplementedError(f"Cannot convert {f_type.__name__} to casadi: {f}")
