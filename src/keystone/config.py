"""Per-instance configuration store.

The store holds the values a component was constructed with. Values are
resolved at read time: a stored function is called once, with the store as its
only argument, and its result replaces the function. `None` is a real value,
distinct from a key that was never set.
"""

import functools
import inspect
from collections.abc import Mapping
from typing import Any, Iterator, Optional

from keystone.constants import NO_VALUE

__all__ = ["ConfigStore", "is_lazy_value"]


def is_lazy_value(value: Any) -> bool:
    """Check whether a stored value should be called on first read.

    Only plain functions, lambdas and partials count; classes and other
    callable objects are stored and returned as they are.
    """
    return inspect.isfunction(value) or isinstance(value, functools.partial)


class ConfigStore(Mapping):
    """Mapping of configuration names to lazily-resolved values.

    Example:
        >>> store = ConfigStore({"host": "localhost", "url": lambda cfg: f"http://{cfg['host']}"})
        >>> store.get("url")
        'http://localhost'
        >>> store.get("port", 8080)   # the default is persisted
        8080
        >>> store.get("port", 9090)
        8080
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, Any] = {}
        if values:
            self.apply(values)

    def __getitem__(self, name: str) -> Any:
        if name not in self._values:
            raise KeyError(name)
        return self._resolve_stored(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConfigStore({self._values!r})"

    def get(self, name: str, default: Any = None, allow_null: bool = True) -> Any:
        """Read a value, storing `default` if the name has no value yet.

        Args:
            name: Configuration key.
            default: Value to store and return when `name` is unset. Pass
                `NO_VALUE` to leave the store untouched and get `NO_VALUE` back.
            allow_null: When False, a stored `None` counts as unset.
        """
        if self.has(name, allow_null):
            return self._resolve_stored(name)

        if default is NO_VALUE:
            return NO_VALUE

        resolved = self._resolve(default)
        self._values[name] = resolved
        return resolved

    def set(self, name: str, value: Any) -> Any:
        self._values[name] = value
        return value

    def apply(self, values: Mapping[str, Any]):
        """Set every key/value pair of `values`."""
        for name, value in values.items():
            self.set(name, value)

    def has(self, name: str, allow_null: bool = True) -> bool:
        if name not in self._values:
            return False
        return allow_null or self._values[name] is not None

    def clear(self):
        self._values = {}

    def as_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the raw (unresolved) values."""
        return dict(self._values)

    def _resolve_stored(self, name: str) -> Any:
        current = self._values[name]
        resolved = self._resolve(current)
        if resolved is not current:
            self._values[name] = resolved
        return resolved

    def _resolve(self, value: Any) -> Any:
        while is_lazy_value(value):
            value = value(self)
        return value
