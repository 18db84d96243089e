import os
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

from keystone.container import Container
from keystone.runtime import Runtime

__all__ = ["make_runtime"]


def make_runtime(
    namespaces: Optional[Mapping[str, Union[str, os.PathLike]]] = None,
    values: Optional[Mapping[str, Any]] = None,
    singletons: Optional[Mapping[str, Callable[[Container], Any]]] = None,
) -> Runtime:
    """
    Construct and return a runtime with its namespaces and container populated.

    Values and singletons are registered after the built-in container entries,
    so a name such as `class_loader` given here replaces the built-in one.

    Args:
        namespaces: An optional mapping of namespace prefixes to root directories.
        values: An optional mapping of container names to static values.
        singletons: An optional mapping of container names to singleton factories.
            Each factory receives the container and is called at most once.

    Returns:
        A ready-to-use runtime.

    Raises:
        TypeError: If a singleton factory is not callable.

    Example:
        >>> runtime = make_runtime(
        ...     namespaces={"App": "/srv/app/lib"},
        ...     values={"region": "eu-west-1"},
        ...     singletons={"client": lambda c: Client(c.resolve("region"))},
        ... )
        >>> users = runtime.inst("App.service.Users")
    """
    runtime = Runtime()

    for prefix, root_path in (namespaces or {}).items():
        runtime.register_namespace(prefix, root_path)

    runtime.container.register_values(values or {})
    for name, factory in (singletons or {}).items():
        runtime.container.register_singleton(name, factory)

    return runtime
