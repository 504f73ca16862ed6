"""
processbased - Process-based modelling with symbolic expressions

Build systems of equations from *processes*: rules that each define
exactly one variable. Variables introduced by a process but lacking one
are resolved from default processes, fall back to named parameters when
they have a default value, and otherwise produce precise errors naming
the processes that introduced them.
"""

from beartype.claw import beartype_package

beartype_package(__name__)

__version__ = "0.1.0"

from processbased.errors import (
    DuplicateAssignmentError,
    MissingProcessError,
    ParameterFallbackWarning,
    ProcessError,
    RegistryOverwriteWarning,
)
from processbased.symbols import (
    LiteralParameter,
    default_value,
    derivative,
    free_variables,
    has_symbolic_var,
    parameter,
    t,
    variable,
    variables,
)
from processbased.parameters import convert_to_parameters, new_derived_named_parameter
from processbased.timescales import NO_TIME_DERIVATIVE, Timescale, TimescaleKind
from processbased.processes import (
    AdditionProcess,
    EquationProcess,
    ExpRelaxation,
    ParameterProcess,
    Process,
    TimeDerivative,
    as_process,
    lhs,
    lhs_variable,
    rhs,
    synthesize_parameter,
    timescale,
)
from processbased.registry import (
    DEFAULT_REGISTRY,
    DefaultRegistry,
    default_processes,
    default_processes_eqs,
    register_default_process,
)
from processbased.resolution import Resolution, resolve
from processbased.model import Model, ModelKind, build_model

__all__ = [
    "__version__",
    # Errors and warnings
    "ProcessError",
    "DuplicateAssignmentError",
    "MissingProcessError",
    "ParameterFallbackWarning",
    "RegistryOverwriteWarning",
    # Symbols
    "t",
    "variable",
    "variables",
    "parameter",
    "derivative",
    "default_value",
    "free_variables",
    "has_symbolic_var",
    "LiteralParameter",
    "new_derived_named_parameter",
    "convert_to_parameters",
    # Timescales
    "Timescale",
    "TimescaleKind",
    "NO_TIME_DERIVATIVE",
    # Processes
    "Process",
    "EquationProcess",
    "ParameterProcess",
    "TimeDerivative",
    "ExpRelaxation",
    "AdditionProcess",
    "as_process",
    "lhs_variable",
    "rhs",
    "lhs",
    "timescale",
    "synthesize_parameter",
    # Default processes
    "DefaultRegistry",
    "DEFAULT_REGISTRY",
    "register_default_process",
    "default_processes",
    "default_processes_eqs",
    # Resolution and models
    "Resolution",
    "resolve",
    "Model",
    "ModelKind",
    "build_model",
]
