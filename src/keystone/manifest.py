"""Declared construction inputs and the DependencySet of a class.

Every construction-stage method (`construct`) carries a manifest: the tuple of
input names it needs. A manifest is either declared explicitly with
:func:`requires` or derived once from the method signature and cached on the
function. The DependencySet of a class is the ordered union of the manifests of
every construct method contributed by its MRO and by every mixin ever composed
into it.
"""

import inspect
from typing import Any, Callable

from keystone.constants import CONSTRUCT, REQUIRES_ATTR
from keystone.errors import DependencyError
from keystone.reflection import MixinInspector

__all__ = [
    "requires",
    "dependencies_of",
    "parameter_defaults",
    "construct_methods",
    "class_dependencies",
]


def requires(*names: str) -> Callable:
    """Declare the input names a construction-stage method needs.

    Example:
        >>> class Service(Component):
        ...     @requires("db", "cache")
        ...     def construct(self, db, cache=None):
        ...         self.db = db
    """
    for name in names:
        if not isinstance(name, str) or not name.isidentifier():
            raise DependencyError(f"Dependency name {name!r} is not a valid parameter name")

    def decorator(func: Callable) -> Callable:
        setattr(func, REQUIRES_ATTR, tuple(names))
        return func

    return decorator


def dependencies_of(func: Callable) -> tuple[str, ...]:
    """Return the manifest of a construction-stage method.

    Undecorated functions have their manifest derived from the named
    parameters following `self`; variadic parameters are not dependencies.

    Example:
        >>> def construct(self, db, *args, cache=None, **kwargs): ...
        >>> dependencies_of(construct)  # Returns ("db", "cache")
    """
    declared = getattr(func, REQUIRES_ATTR, None)
    if declared is not None:
        return declared

    derived = tuple(_named_parameters(func))
    try:
        setattr(func, REQUIRES_ATTR, derived)
    except AttributeError:
        # builtins and bound methods of extension types refuse attributes
        pass
    return derived


def parameter_defaults(func: Callable) -> dict[str, Any]:
    """Map each defaulted named parameter of `func` to its default value."""
    return {
        name: parameter.default
        for name, parameter in _signature_parameters(func).items()
        if parameter.default is not inspect.Parameter.empty
    }


def construct_methods(cls: type) -> list[Callable]:
    """Collect every construct method that contributes to `cls`.

    Class-level methods come first, most-derived class to eldest ancestor,
    followed by mixin methods from eldest to youngest mixin. A function is
    only listed once even when several classes expose it.
    """
    methods: list[Callable] = []
    for klass in cls.__mro__:
        method = vars(klass).get(CONSTRUCT)
        if inspect.isfunction(method):
            methods.append(method)

    methods.extend(MixinInspector(cls).get_method_chain(CONSTRUCT).values())
    return list(dict.fromkeys(methods))


def class_dependencies(cls: type) -> tuple[str, ...]:
    """Return the DependencySet of `cls`, in first-declared order."""
    names: dict[str, None] = {}
    for method in construct_methods(cls):
        names.update(dict.fromkeys(dependencies_of(method)))
    return tuple(names)


def _signature_parameters(func: Callable) -> dict[str, inspect.Parameter]:
    parameters = list(inspect.signature(func).parameters.values())
    if parameters and parameters[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        # the receiver (`self`)
        parameters = parameters[1:]
    return {
        parameter.name: parameter
        for parameter in parameters
        if parameter.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    }


def _named_parameters(func: Callable):
    for name, parameter in _signature_parameters(func).items():
        if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise DependencyError(
                f"Parameter '{name}' of {func.__qualname__} is positional-only "
                "and cannot be supplied by name"
            )
        yield name
