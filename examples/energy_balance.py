"""
Example: zero-dimensional energy balance model built from processes.

The module plays the role of a small process library: it declares its
variables, offers predefined processes and registers some of them as
default processes under its own namespace. A user then only writes the
processes they care about and lets the rest be resolved.

    C*dT/dt = ASR - OLR
    ASR = S*(1 - alpha)/4
    OLR = epsilon*sigma*T^4
    alpha relaxes towards an ice-albedo curve of T
"""

import sys

import numpy as np
import sympy as sp

from processbased import (
    ExpRelaxation,
    ParameterProcess,
    TimeDerivative,
    build_model,
    parameter,
    register_default_process,
    variable,
)
from processbased.backends import CasadiBackend, NumpyBackend
from processbased.symbols import symbol_name

T = variable("T", 288.0, description="global mean surface temperature (K)")
ASR = variable("ASR", description="absorbed solar radiation (W/m^2)")
OLR = variable("OLR", description="outgoing longwave radiation (W/m^2)")
alpha = variable("alpha", 0.3, description="planetary albedo")
epsilon = variable("epsilon", 0.65, description="effective emissivity")

S = parameter("S", 1361.0, description="solar constant (W/m^2)")
sigma = parameter("sigma", 5.67e-8, description="Stefan-Boltzmann constant")
C = parameter("C", 10.0, description="heat capacity (W yr/m^2/K)")


def ice_albedo(T, max_alpha=0.45, min_alpha=0.1, Tfreeze=263.0, width=10.0):
    """Smooth transition between ice-covered and ice-free albedo."""
    return min_alpha + (max_alpha - min_alpha) * (1 - sp.tanh((T - Tfreeze) / width)) / 2


DEFAULTS = [
    sp.Eq(ASR, S * (1 - alpha) / 4),
    sp.Eq(OLR, epsilon * sigma * T**4),
    ExpRelaxation(alpha, ice_albedo(T), tau=5.0),
    ParameterProcess(epsilon),
]

for process in DEFAULTS:
    register_default_process(process, sys.modules[__name__])


if __name__ == "__main__":
    # Only the temperature process is provided; everything else is
    # resolved from the defaults registered above.
    model = build_model(
        [TimeDerivative(T, ASR - OLR, tau=C)],
        default=sys.modules[__name__],
        name="energy_balance",
    )
    print(model)
    print()

    print("Parameters:")
    for p, value in model.parameter_defaults().items():
        print(f"  {str(p):10s} = {value}")
    print()

    # Drop the albedo default: alpha has a default value, so it becomes
    # the parameter alpha_0 and a ParameterFallbackWarning is emitted.
    fixed = build_model(
        [TimeDerivative(T, ASR - OLR, tau=C)],
        default=[DEFAULTS[0], DEFAULTS[1], DEFAULTS[3]],
        name="fixed_albedo",
    )
    print(f"Fallbacks: {fixed.fallbacks}")
    print()

    # At rest (xdot = 0) the state rows show the energy imbalance, while
    # the algebraic rows vanish for consistent algebraic values.
    T0 = 288.0
    values = {
        "T": T0,
        "alpha": float(ice_albedo(T0)),
        "epsilon": 0.65,
    }
    values["ASR"] = 1361.0 * (1 - values["alpha"]) / 4
    values["OLR"] = 0.65 * 5.67e-8 * T0**4

    numpy_backend = NumpyBackend(model).compile()
    casadi_backend = CasadiBackend(model).compile()
    xdot = np.zeros(len(model.states))
    x = np.array([values[symbol_name(v)] for v in model.states])
    z = np.array([values[symbol_name(v)] for v in model.algebraic])
    p = numpy_backend.parameter_vector()
    print(f"States:    {model.states}")
    print(f"Algebraic: {model.algebraic}")
    print(f"NumPy residual:  {numpy_backend.residual(xdot, x, z, p)}")
    print(f"CasADi residual: {casadi_backend.residual(xdot, x, z, p)}")
