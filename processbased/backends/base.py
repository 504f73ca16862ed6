"""
Base backend interface.
"""

from abc import ABC, abstractmethod
from typing import Any

import numpy as np
import sympy as sp

from processbased.errors import ProcessError
from processbased.model import Model
from processbased.symbols import derivative, symbol_name


class Backend(ABC):
    """
    Abstract base class for all backends.

    A backend compiles a Model into a numeric residual function in
    implicit form::

        0 = F(xdot, x, z, p, t)

    where ``x`` are the states, ``xdot`` their time derivatives, ``z`` the
    algebraic variables, ``p`` the parameters and ``t`` the independent
    variable. Vector layouts follow ``model.states``, ``model.algebraic``
    and ``model.parameters``.
    """

    def __init__(self, model: Model) -> None:
        """
        Initialize the backend with a model.

        Args:
            model: The model to compile
        """
        self.model = model
        self._compiled = False

    @abstractmethod
    def compile(self) -> "Backend":
        """Compile the model residual. Returns the backend for chaining."""

    @abstractmethod
    def residual(self, xdot: Any, x: Any, z: Any, p: Any, t: float = 0.0) -> np.ndarray:
        """
        Evaluate the residual.

        Returns:
            Array of shape (n_equations,)
        """

    def _ensure_compiled(self) -> None:
        """Raise an error if the model hasn't been compiled yet."""
        if not self._compiled:
            raise RuntimeError("Model must be compiled before use. Call compile() first.")

    def _symbolic_system(
        self,
    ) -> tuple[list[sp.Symbol], list[sp.Symbol], list[sp.Symbol], list[sp.Expr]]:
        """
        Residuals with variables and derivatives replaced by plain symbols.

        Returns:
            (der_symbols, state_symbols, algebraic_symbols, residuals)
        """
        replacements: dict[sp.Basic, sp.Symbol] = {}
        der_syms, state_syms, alg_syms = [], [], []
        for s in self.model.states:
            name = symbol_name(s)
            der_syms.append(sp.Symbol(f"der_{name}", real=True))
            state_syms.append(sp.Symbol(name, real=True))
            replacements[derivative(s)] = der_syms[-1]
            replacements[s] = state_syms[-1]
        for z in self.model.algebraic:
            alg_syms.append(sp.Symbol(symbol_name(z), real=True))
            replacements[z] = alg_syms[-1]
        residuals = self.model.residuals()
        leftover = {
            d.expr for r in residuals for d in r.atoms(sp.Derivative) if d not in replacements
        }
        if leftover:
            names = ", ".join(sorted(str(v) for v in leftover))
            raise ProcessError(
                f"Model '{self.model.name}' uses the time derivative of {names}, which "
                f"is not a state. Backends only support time derivatives of states."
            )
        residuals = [r.xreplace(replacements) for r in residuals]
        return der_syms, state_syms, alg_syms, residuals

    def parameter_vector(self) -> np.ndarray:
        """Default parameter values, ordered as ``model.parameters``."""
        return self._defaults_vector(self.model.parameters, self.model.parameter_defaults())

    def state_vector(self) -> np.ndarray:
        """Default initial state values, ordered as ``model.states``."""
        return self._defaults_vector(self.model.states, self.model.initial_conditions())

    @staticmethod
    def _defaults_vector(symbols: list, defaults: dict) -> np.ndarray:
        missing = [str(s) for s in symbols if s not in defaults]
        if missing:
            raise ValueError(f"No default value for: {', '.join(missing)}")
        return np.array([float(defaults[s]) for s in symbols], dtype=float)
