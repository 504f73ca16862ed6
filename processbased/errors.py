"""
Errors and warnings raised while turning processes into a model.

Fatal conditions derive from ``ValueError``. Advisory conditions are
``UserWarning`` subclasses emitted through :mod:`warnings`.
"""

from __future__ import annotations

import inspect
import os
from typing import Any, Sequence

import beartype

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep
_BEARTYPE_DIR = os.path.dirname(os.path.abspath(beartype.__file__)) + os.sep


def find_stack_level() -> int:
    """
    ``stacklevel`` for :func:`warnings.warn` pointing at the first frame
    outside processbased.

    Frames of the package and of the wrappers beartype generates around its
    functions are skipped, so warnings name the user's call site whichever
    public entry point was used.
    """
    frame = inspect.currentframe().f_back
    try:
        # Step over this function's own type-checking wrapper.
        while frame is not None and _is_wrapper(frame.f_code.co_filename):
            frame = frame.f_back
        # Level 1 is the function calling warnings.warn, level 2 its caller.
        level = 2
        frame = frame.f_back if frame is not None else None
        while frame is not None and (
            frame.f_code.co_filename.startswith(_PACKAGE_DIR)
            or _is_wrapper(frame.f_code.co_filename)
        ):
            frame = frame.f_back
            level += 1
    finally:
        del frame
    return level


def _is_wrapper(filename: str) -> bool:
    return filename.startswith(_BEARTYPE_DIR) or filename.startswith("<@beartype")


class ProcessError(ValueError):
    """Base class for invalid or inconsistent process definitions."""


class DuplicateAssignmentError(ProcessError):
    """Two processes define the same variable."""

    def __init__(self, variable: Any, existing: Any, duplicate: Any) -> None:
        self.variable = variable
        self.existing = existing
        self.duplicate = duplicate
        super().__init__(
            f"Variable {variable} has more than one process assigned to it.\n"
            f"First process:  {existing}\n"
            f"Second process: {duplicate}\n"
            f"Each variable must be defined by exactly one process."
        )


class MissingProcessError(ProcessError):
    """A referenced variable has no process, no default process and no default value."""

    def __init__(self, variable: Any, provenance: Sequence[Any], chain: str = "") -> None:
        self.variable = variable
        self.provenance = list(provenance)
        introducers = ", ".join(str(p.lhs_variable) for p in self.provenance)
        message = (
            f"Variable {variable} was introduced in process of variable(s) {introducers}.\n"
            f"However, a process for {variable} was not provided,\n"
            f"there is no default process for {variable}, "
            f"and {variable} doesn't have a default value.\n"
            f"Please provide a process for variable {variable}."
        )
        if chain:
            message += f"\n{chain}"
        super().__init__(message)


class ParameterFallbackWarning(UserWarning):
    """A process-less variable was equated to a parameter holding its default value."""


class RegistryOverwriteWarning(UserWarning):
    """A default process replaced a previously registered one."""
