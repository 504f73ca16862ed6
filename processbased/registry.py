"""
Registry of default processes.

Libraries built on processbased offer pools of predefined processes and
register some of them as *default* processes for their variables, under
a namespace handle (typically the library module). When a model is built
with that namespace as its default, a variable introduced by some process
but lacking a process of its own obtains its default process from the
registry.

Registration belongs to library initialization (e.g. module import
time). Resolution only reads the registry, so concurrent readers are
fine. Registration is not synchronized and must not run concurrently
with resolution against the same namespace.

Example::

    # mylib/__init__.py
    import sys
    from processbased import register_default_process

    for process in [ExpRelaxation(T, 2*S), ParameterProcess(S, 0.3)]:
        register_default_process(process, sys.modules[__name__])

    # user code
    model = build_model([...], default=mylib)
"""

from __future__ import annotations

import warnings
from collections.abc import Hashable
from typing import Any, Optional

import sympy as sp

from processbased.errors import RegistryOverwriteWarning, find_stack_level
from processbased.processes import Process, as_process

__all__ = [
    "DefaultRegistry",
    "DEFAULT_REGISTRY",
    "register_default_process",
    "default_processes",
    "default_processes_eqs",
]


class DefaultRegistry:
    """Namespace-keyed store of default processes, one per variable."""

    def __init__(self) -> None:
        self._namespaces: dict[Hashable, dict[sp.Expr, Process]] = {}

    def register(self, process: Any, namespace: Hashable, warn: bool = True) -> None:
        """
        Register ``process`` as the default for its variable in ``namespace``.

        An existing default for the same variable is overwritten; if
        ``warn`` is true a :class:`RegistryOverwriteWarning` is emitted.
        """
        process = as_process(process)
        defaults = self._namespaces.setdefault(namespace, {})
        var = process.lhs_variable
        if var in defaults and warn:
            warnings.warn(
                f"Overwriting default process for variable {var} in namespace "
                f"{_namespace_name(namespace)}.\n"
                f"Old: {defaults[var]}\nNew: {process}",
                RegistryOverwriteWarning,
                stacklevel=find_stack_level(),
            )
        defaults[var] = process

    def lookup(self, namespace: Hashable, variable: sp.Expr) -> Optional[Process]:
        """Default process of ``variable`` in ``namespace``, or None."""
        return self._namespaces.get(namespace, {}).get(variable)

    def all(self, namespace: Hashable) -> list[Process]:
        """Default processes of ``namespace`` in registration order."""
        return list(self._namespaces.get(namespace, {}).values())

    def mapping(self, namespace: Hashable) -> dict[sp.Expr, Process]:
        """Copy of the variable -> default process mapping of ``namespace``."""
        return dict(self._namespaces.get(namespace, {}))

    def namespaces(self) -> list[Hashable]:
        return list(self._namespaces)

    def __contains__(self, namespace: Hashable) -> bool:
        return namespace in self._namespaces

    def clear(self, namespace: Optional[Hashable] = None) -> None:
        """Forget one namespace, or all of them."""
        if namespace is None:
            self._namespaces.clear()
        else:
            self._namespaces.pop(namespace, None)


DEFAULT_REGISTRY = DefaultRegistry()


def _namespace_name(namespace: Hashable) -> str:
    return getattr(namespace, "__name__", str(namespace))


def register_default_process(
    process: Any,
    namespace: Hashable,
    warn: bool = True,
    registry: Optional[DefaultRegistry] = None,
) -> None:
    """
    Register ``process`` (a Process or equation) as the default process for
    its variable under ``namespace``.

    If ``warn``, a :class:`RegistryOverwriteWarning` is emitted when a
    default for the same variable already exists and is overwritten.
    """
    (registry or DEFAULT_REGISTRY).register(process, namespace, warn=warn)


def default_processes(namespace: Hashable, registry: Optional[DefaultRegistry] = None) -> list[Process]:
    """Default processes registered under ``namespace``, in registration order."""
    return (registry or DEFAULT_REGISTRY).all(namespace)


def default_processes_eqs(
    namespace: Hashable, registry: Optional[DefaultRegistry] = None
) -> list[sp.Eq]:
    """Same as :func:`default_processes`, as equations ``lhs ~ rhs``."""
    return [p.equation for p in default_processes(namespace, registry)]
