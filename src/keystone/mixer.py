"""Composition of a base class with one or more mixins.

A mixin is an ordinary class whose members are copied onto a new subclass of
the base class. Mixins may react to being composed by defining any of the
composition hooks; each hook is called with the composed class as its first
argument and a context object as its second::

    class Timestamps:
        def on_compose(cls, context):
            cls.timestamp_fields = ("created", "updated")

        def touch(self):
            ...

    Model = mixer.compose("App.abstract.Model", "App.mixin.Timestamps")
"""

import inspect
import logging
import types
from typing import Any, Optional

from keystone.class_registry import ClassRegistry, ClassTarget
from keystone.constants import (
    AFTER_COMPOSE,
    BEFORE_COMPOSE,
    COMPOSITION_ATTR,
    ON_COMPOSE,
    PROTECTED_MEMBERS,
)
from keystone.domain import InvocationContext, MixinContext, OperationContext, ResultContext
from keystone.errors import CompositionError, KeystoneError
from keystone.reflection import unwrap_method

__all__ = ["Mixer"]

logger = logging.getLogger(__name__)


class Mixer:
    """Builds composed classes from a base class and a list of mixins."""

    def __init__(self, class_registry: Optional[ClassRegistry] = None):
        self._class_registry = class_registry if class_registry is not None else ClassRegistry()
        self._protected_members = PROTECTED_MEMBERS

    @property
    def protected_members(self) -> frozenset:
        return self._protected_members

    def compose(self, base: ClassTarget, *mixins: ClassTarget) -> type:
        """Compose `base` with `mixins` and return the resulting class.

        Args:
            base: Identifier or class of the base class.
            *mixins: Identifiers or classes of the mixins, in application order.

        Returns:
            A new subclass of the base class carrying the mixins' members.

        Raises:
            CompositionError: If the base class or any mixin cannot be resolved.
        """
        base_class_name, base_class = self._resolve(base, "base class")

        # a mixin named twice is applied once, at its first position
        resolved: dict[str, type] = {}
        for mixin in mixins:
            mixin_name, mixin_class = self._resolve(mixin, "mixin")
            resolved.setdefault(mixin_name, mixin_class)

        operation = OperationContext(base_class_name, base_class, tuple(resolved.items()))

        composed = _new_subclass(base_class)
        result = ResultContext(
            operation.base_class_name,
            operation.base_class,
            operation.mixins,
            composed,
        )
        setattr(composed, COMPOSITION_ATTR, result)

        before_results = self._invoke_for_all(BEFORE_COMPOSE, result)

        for mixin_name, mixin_class in result.mixins:
            self._copy_members(composed, mixin_class)
            self._invoke(ON_COMPOSE, _mixin_context(result, mixin_name, mixin_class))

        after_results = self._invoke_for_all(AFTER_COMPOSE, result)

        logger.debug(
            "Composed %s with mixins %s (before hooks: %s, after hooks: %s)",
            result.base_class_name,
            list(result.mixin_names),
            before_results,
            after_results,
        )
        return composed

    def _resolve(self, target: ClassTarget, role: str) -> tuple[str, type]:
        try:
            cls = self._class_registry.load(target)
            return self._class_registry.name_of(target), cls
        except (KeystoneError, TypeError) as exc:
            raise CompositionError(f"Unable to resolve {role} {target!r}: {exc}") from exc

    def _copy_members(self, composed: type, mixin_class: type):
        for key, value in vars(mixin_class).items():
            if key not in self._protected_members:
                setattr(composed, key, value)

    def _invoke(self, method_name: str, mixin_context: MixinContext) -> Any:
        method = unwrap_method(inspect.getattr_static(mixin_context.mixin_class, method_name, None))
        if method is None:
            return None

        context = InvocationContext(
            mixin_context.base_class_name,
            mixin_context.base_class,
            mixin_context.mixins,
            mixin_context.composed_class,
            mixin_context.mixin_class_name,
            mixin_context.mixin_class,
            method_name,
            method,
        )
        return method(mixin_context.composed_class, context)

    def _invoke_for_all(self, method_name: str, result: ResultContext) -> dict[str, Any]:
        return {
            mixin_name: self._invoke(method_name, _mixin_context(result, mixin_name, mixin_class))
            for mixin_name, mixin_class in result.mixins
        }


def _mixin_context(result: ResultContext, mixin_name: str, mixin_class: type) -> MixinContext:
    return MixinContext(
        result.base_class_name,
        result.base_class,
        result.mixins,
        result.composed_class,
        mixin_name,
        mixin_class,
    )


def _new_subclass(base_class: type) -> type:
    def populate(namespace: dict):
        namespace["__module__"] = base_class.__module__
        namespace["__qualname__"] = base_class.__qualname__
        namespace["__doc__"] = base_class.__doc__

    return types.new_class(base_class.__name__, (base_class,), {}, populate)
