"""Inversion-of-control container of named values and singleton factories.

The container is consulted by the class loader to fill in construction
dependencies that were not supplied explicitly. Only root-level code should
call :meth:`Container.resolve` directly; components receive their
dependencies through their construct methods.
"""

import logging
from collections.abc import Mapping, Set
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Union

from keystone.errors import DependencyError, UnknownDependencyError

__all__ = ["Container", "ContainerEntry", "DependencyNames"]

logger = logging.getLogger(__name__)

DependencyNames = Union[list, tuple, Set, Mapping]
"""Shapes accepted by `Container.resolve_many`; mappings contribute their keys."""


@dataclass
class ContainerEntry:
    """One named item in the container.

    Attributes:
        resolved: Whether `cached_value` holds the item's value.
        factory: Singleton factory, called once with the container; None for values.
        cached_value: The value, once resolved.
        alias_for: Name of the entry this alias forwards to; None for real entries.
    """

    resolved: bool = False
    factory: Optional[Callable[["Container"], Any]] = None
    cached_value: Any = None
    alias_for: Optional[str] = None

    @property
    def is_alias(self) -> bool:
        return self.alias_for is not None


class Container:
    """Registry of lazily-resolved singletons and static values.

    Example:
        >>> container = Container()
        >>> container.register_value("region", "eu-west-1")
        >>> container.register_singleton("client", lambda c: Client(c.resolve("region")))
        >>> container.resolve("client") is container.resolve("client")
        True
    """

    def __init__(self):
        self._entries: dict[str, ContainerEntry] = {}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def register_singleton(self, name: str, factory: Callable[["Container"], Any]):
        """Register a factory whose result is computed on first resolution and then cached."""
        if not callable(factory):
            raise TypeError(f"The singleton factory for '{name}' must be callable")
        self._entries[name] = ContainerEntry(factory=factory)

    def register_value(self, name: str, value: Any):
        self._entries[name] = ContainerEntry(resolved=True, cached_value=value)

    def register_values(self, values: Mapping[str, Any]):
        for name, value in values.items():
            self.register_value(name, value)

    def register_alias(self, name: str, target: Union[str, Iterable[str]]):
        """Make `target` (or each of several names) resolve to the entry called `name`."""
        aliases = [target] if isinstance(target, str) else list(target)
        for alias in aliases:
            self._entries[alias] = ContainerEntry(alias_for=name)

    def has(self, name: str) -> bool:
        return name in self._entries

    def resolve(self, name: str) -> Any:
        """Return the value registered under `name`.

        Raises:
            UnknownDependencyError: If nothing is registered under `name`.
            DependencyError: If `name` is part of an alias cycle.
        """
        return self._resolve(name, ())

    def resolve_many(self, names: DependencyNames) -> dict[str, Any]:
        """Resolve several names at once.

        Names the container does not hold, and aliases whose target it does not
        hold, are left out of the result instead of raising, so callers can
        request optional dependencies in bulk.

        Raises:
            TypeError: If `names` is not a list, tuple, set or mapping.
        """
        if isinstance(names, Mapping):
            names = list(names.keys())
        elif isinstance(names, (list, tuple, Set)):
            names = list(names)
        else:
            raise TypeError(
                "Invalid type for 'names' in Container.resolve_many(); a list, a tuple, a set "
                f"or a mapping was expected but {type(names).__name__} was provided"
            )

        return {name: self.resolve(name) for name in names if self._final_entry(name) is not None}

    def _final_entry(self, name: str) -> Optional[ContainerEntry]:
        # an alias cycle ends on an alias entry, which resolve() then rejects
        seen = set()
        entry = self._entries.get(name)
        while entry is not None and entry.is_alias and name not in seen:
            seen.add(name)
            name = entry.alias_for
            entry = self._entries.get(name)
        return entry

    def _resolve(self, name: str, seen: tuple[str, ...]) -> Any:
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownDependencyError(name)

        if entry.is_alias:
            if name in seen:
                raise DependencyError(f"Alias cycle detected: {' -> '.join(seen + (name,))}")
            return self._resolve(entry.alias_for, seen + (name,))

        if not entry.resolved:
            logger.debug("Resolving singleton '%s'", name)
            value = entry.factory(self)
            # the factory is discarded so it can never run twice
            self._entries[name] = ContainerEntry(resolved=True, cached_value=value)
            return value

        return entry.cached_value
