"""
Backends compiling a resolved Model into numeric residual functions:

- CasADi: residual as a ``casadi.Function`` (derivatives, optimization)
- NumPy: residual lambdified by sympy
"""

from processbased.backends.base import Backend
from processbased.backends.casadi_backend import CasadiBackend
from processbased.backends.numpy_backend import NumpyBackend

__all__ = ["Backend", "CasadiBackend", "NumpyBackend"]
