"""CasADi backend implementation.

Compiles the model residual into a ``casadi.Function`` suitable for
implicit integrators, root finders and optimization.
"""

from typing import Any

import casadi as ca
import numpy as np

from processbased.symbolic import sympy_to_casadi

from .base import Backend


class CasadiBackend(Backend):
    """CasADi implementation of the residual backend.

    Example:
        >>> backend = CasadiBackend(model).compile()
        >>> backend.f_residual
        Function(residual:(xdot[2],x[2],z,p[1],t)->(res[3]) SXFunction)
    """

    def compile(self) -> "CasadiBackend":
        der_syms, state_syms, alg_syms, residuals = self._symbolic_system()
        params = self.model.parameters

        self.xdot = ca.SX.sym("xdot", len(der_syms))
        self.x = ca.SX.sym("x", len(state_syms))
        self.z = ca.SX.sym("z", len(alg_syms))
        self.p = ca.SX.sym("p", len(params))
        self.t = ca.SX.sym("t")

        symbols: dict[str, Any] = {self.model.independent.name: self.t}
        for vec, syms in [
            (self.xdot, der_syms),
            (self.x, state_syms),
            (self.z, alg_syms),
            (self.p, params),
        ]:
            for i, s in enumerate(syms):
                symbols[s.name] = vec[i]

        res = [ca.SX(sympy_to_casadi(r, symbols)[0]) for r in residuals]
        F = ca.vertcat(*res) if res else ca.SX(0, 1)
        self.f_residual = ca.Function(
            "residual",
            [self.xdot, self.x, self.z, self.p, self.t],
            [F],
            ["xdot", "x", "z", "p", "t"],
            ["res"],
        )
        self._compiled = True
        return self

    def residual(self, xdot: Any, x: Any, z: Any, p: Any, t: float = 0.0) -> np.ndarray:
        self._ensure_compiled()
        args = [_column(v) for v in (xdot, x, z, p)]
        return np.array(self.f_residual(*args, ca.DM(float(t)))).flatten()


def _column(v: Any) -> ca.DM:
    values = np.asarray(v, dtype=float).reshape(-1)
    return ca.DM(values.tolist()) if values.size else ca.DM(0, 1)
