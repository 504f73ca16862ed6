"""NumPy backend implementation.

Lambdifies the model residual with sympy into a plain NumPy function.

Use this backend for:
- Fast numerical evaluation without a CasADi dependency at call time
- Comparing against the CasADi residual

NOT recommended for:
- Automatic differentiation (use CasADi)
"""

from typing import Any

import numpy as np
import sympy as sp

from .base import Backend


class NumpyBackend(Backend):
    """NumPy implementation of the residual backend."""

    def compile(self) -> "NumpyBackend":
        der_syms, state_syms, alg_syms, residuals = self._symbolic_system()
        args = [*der_syms, *state_syms, *alg_syms, *self.model.parameters, self.model.independent]
        self._sizes = (len(der_syms), len(state_syms), len(alg_syms), len(self.model.parameters))
        self._f = sp.lambdify(args, residuals, modules="numpy")
        self._compiled = True
        return self

    def residual(self, xdot: Any, x: Any, z: Any, p: Any, t: float = 0.0) -> np.ndarray:
        self._ensure_compiled()
        parts = [np.asarray(v, dtype=float).reshape(-1) for v in (xdot, x, z, p)]
        for part, size, label in zip(parts, self._sizes, ("xdot", "x", "z", "p")):
            if part.shape[0] != size:
                raise ValueError(f"Expected {size} values for {label}, got {part.shape[0]}")
        flat = np.concatenate(parts + [np.array([t], dtype=float)])
        return np.asarray(self._f(*flat), dtype=float).reshape(-1)
