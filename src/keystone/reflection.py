"""Reflection over the mixins that contributed to a composed class.

Every `compose()` call stores a ResultContext on the class it produces. A
class built by composing an already-composed class therefore has several of
these records along its MRO; reading them from the eldest to the youngest
recovers every mixin ever applied, in application order.
"""

import inspect
import re
from typing import Any, Callable, Optional, Union

from keystone.constants import COMPOSITION_ATTR
from keystone.domain import ResultContext

__all__ = ["MixinInspector", "MixinQuery", "unwrap_method"]

MixinQuery = Union[str, re.Pattern]


class MixinInspector:
    """Read-only view of the mixins applied to a class or instance.

    Example:
        >>> inspector = MixinInspector(SomeComponent)
        >>> list(inspector.names)
        ['App.mixin.Timestamps', 'App.mixin.Auditing']
        >>> inspector.apply_method_chain("describe", instance)
        {'App.mixin.Timestamps': '...', 'App.mixin.Auditing': '...'}
    """

    def __init__(self, target: Any):
        self._target = target
        self._cls = target if inspect.isclass(target) else type(target)

    @property
    def meta_chain(self) -> list[ResultContext]:
        """Composition records from the youngest class to the eldest."""
        return [
            vars(klass)[COMPOSITION_ATTR]
            for klass in self._cls.__mro__
            if COMPOSITION_ATTR in vars(klass)
        ]

    @property
    def meta_chain_inverted(self) -> list[ResultContext]:
        """Composition records from the eldest class to the youngest."""
        return list(reversed(self.meta_chain))

    @property
    def all(self) -> dict[str, type]:
        """Every mixin ever applied, keyed by name, eldest application first."""
        mixins: dict[str, type] = {}
        for meta in self.meta_chain_inverted:
            for name, mixin in meta.mixins:
                mixins.setdefault(name, mixin)
        return mixins

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.all)

    def get(self, query: MixinQuery) -> Optional[type]:
        """Return the first mixin whose name equals (or matches) `query`."""
        if isinstance(query, str):
            return self.all.get(query)
        if isinstance(query, re.Pattern):
            return next(
                (mixin for name, mixin in self.all.items() if query.search(name)),
                None,
            )
        raise TypeError(_invalid_query("get", query))

    def has(self, query: MixinQuery) -> bool:
        """Check whether a mixin with the given name (or matching pattern) was applied."""
        if isinstance(query, str):
            return query in self.all
        if isinstance(query, re.Pattern):
            return any(query.search(name) for name in self.all)
        raise TypeError(_invalid_query("has", query))

    def get_method_chain(self, method_name: str) -> dict[str, Callable]:
        """Collect the method named `method_name` from every mixin that defines it.

        Returns:
            Mixin name to function, eldest mixin first.
        """
        chain: dict[str, Callable] = {}
        for name, mixin in self.all.items():
            method = unwrap_method(inspect.getattr_static(mixin, method_name, None))
            if method is not None:
                chain[name] = method
        return chain

    def apply_method_chain(self, method_name: str, *args, target: Any = None) -> dict[str, Any]:
        """Invoke a method chain against `target` (by default the inspected object).

        Each contributing mixin's method is called with the target as its first
        argument, followed by `args`.

        Returns:
            Mixin name to return value, eldest mixin first.
        """
        if target is None:
            target = self._target
        return {
            name: method(target, *args)
            for name, method in self.get_method_chain(method_name).items()
        }


def unwrap_method(member: Any) -> Optional[Callable]:
    if isinstance(member, (classmethod, staticmethod)):
        member = member.__func__
    if member is None or not callable(member) or inspect.isclass(member):
        return None
    return member


def _invalid_query(method: str, query: Any) -> str:
    return (
        f"Invalid mixin query passed to MixinInspector.{method}(); a string or a compiled "
        f"pattern was expected but {type(query).__name__} was provided"
    )
