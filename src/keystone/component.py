"""The base class for framework components and its staged construction protocol.

Constructing a Component runs these stages, strictly in order:

1. INIT: the framework data and the ConfigStore are initialized from the
   supplied configuration.
2. BEFORE_CONSTRUCT: every mixin's `before_construct(self)`, eldest mixin first.
3. CONSTRUCT: every `construct` method of the class hierarchy, most-derived
   class first, then every mixin's `construct`. Each receives its declared
   inputs by name from the ConfigStore. A method may return
   `ConstructResult.HALT_ANCESTORS` (or `False`) to skip every remaining
   construct method, or a mapping of settings to merge into the ConfigStore.
4. AFTER_CONSTRUCT and BEFORE_READY: the matching mixin hooks.
5. READY: `self.ready()`, ordinary single dispatch; only the most-derived
   override runs.
6. AFTER_READY: the matching mixin hooks.

Example:
    >>> class Greeter(Component):
    ...     def construct(self, greeting="Hello"):
    ...         self.greeting = greeting
    ...
    ...     def ready(self):
    ...         self.message = f"{self.greeting}, world"
    >>> Greeter({"greeting": "Hi"}).message
    'Hi, world'
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from keystone.class_registry import identifier_of
from keystone.config import ConfigStore
from keystone.constants import (
    AFTER_CONSTRUCT,
    AFTER_READY,
    BEFORE_CONSTRUCT,
    BEFORE_READY,
    FRAMEWORK_KEY,
    NO_VALUE,
    USE_CONFIG,
)
from keystone.domain import ConstructResult, FrameworkData, LifecycleStage
from keystone.errors import DependencyError, DependencyValidationError
from keystone.manifest import class_dependencies, construct_methods, dependencies_of, parameter_defaults
from keystone.reflection import MixinInspector

__all__ = ["Component"]

logger = logging.getLogger(__name__)


class Component:
    """Base class whose instances are built through the staged construction protocol.

    Args:
        config: Construction configuration. Values are stored in the instance's
            ConfigStore and mapped, by name, onto every construct method in the
            hierarchy. The reserved `__framework__` key carries identity and
            parent linkage and is removed from the configuration.
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        config = dict(config) if config else {}
        framework = config.pop(FRAMEWORK_KEY, None) or {}

        self._framework = FrameworkData(
            class_name=framework.get("class_name"),
            parent=framework.get("parent"),
            runtime=framework.get("runtime"),
            config=ConfigStore(),
        )
        self.configure(config)
        self._run_lifecycle()

    # -- lifecycle ------------------------------------------------------------

    def ready(self):
        """Called once construction has finished; override to finish setting up."""
        pass

    def _run_lifecycle(self):
        mixins = self.mixins

        self._enter(LifecycleStage.BEFORE_CONSTRUCT)
        mixins.apply_method_chain(BEFORE_CONSTRUCT)

        self._enter(LifecycleStage.CONSTRUCT)
        self._execute_construct_methods()

        self._enter(LifecycleStage.AFTER_CONSTRUCT)
        mixins.apply_method_chain(AFTER_CONSTRUCT)

        self._enter(LifecycleStage.BEFORE_READY)
        mixins.apply_method_chain(BEFORE_READY)

        self._enter(LifecycleStage.READY)
        self.ready()

        self._enter(LifecycleStage.AFTER_READY)
        mixins.apply_method_chain(AFTER_READY)

        self._enter(LifecycleStage.CONSTRUCTED)

    def _enter(self, stage: LifecycleStage):
        self._framework.stage = stage
        logger.debug("%s entering %s", self.class_name, stage.name)

    def _execute_construct_methods(self):
        for method in construct_methods(type(self)):
            result = self._execute_one_construct_method(method)
            if result is False or result is ConstructResult.HALT_ANCESTORS:
                logger.debug("%s halted construction at %s", self.class_name, method.__qualname__)
                break

    def _execute_one_construct_method(self, method: Callable) -> Any:
        defaults = parameter_defaults(method)
        arguments = {
            name: self.config.get(name, defaults.get(name))
            for name in dependencies_of(method)
        }

        result = method(self, **arguments)
        if isinstance(result, Mapping):
            self.config.apply(result)
        return result

    # -- identity -------------------------------------------------------------

    @property
    def framework(self) -> FrameworkData:
        return self._framework

    @property
    def class_name(self) -> str:
        if self._framework.class_name:
            return self._framework.class_name
        return identifier_of(type(self))

    @property
    def parent(self) -> Any:
        return self._framework.parent

    @property
    def runtime(self) -> Any:
        return self._framework.runtime

    @property
    def mixins(self) -> MixinInspector:
        return MixinInspector(self)

    @classmethod
    def class_dependencies(cls) -> tuple[str, ...]:
        """Names of every construction input this class (and its mixins) declares."""
        return class_dependencies(cls)

    # -- configuration --------------------------------------------------------

    @property
    def config(self) -> ConfigStore:
        return self._framework.config

    def configure(self, config: Mapping[str, Any]):
        """Replace the whole configuration."""
        self.config.clear()
        self.config.apply(config)

    def apply_config(self, config: Mapping[str, Any]):
        self.config.apply(config)

    def get_config(self, name: str, default: Any = None, allow_null: bool = True) -> Any:
        return self.config.get(name, default, allow_null)

    def set_config(self, name: str, value: Any) -> Any:
        return self.config.set(name, value)

    # -- validation -----------------------------------------------------------

    def require(
        self,
        name: str,
        value: Any = USE_CONFIG,
        instance_of: Any = None,
        expected_type: Optional[type] = None,
        allow_null: bool = False,
        from_mixin: Optional[str] = None,
    ) -> Any:
        """Validate that a dependency or parameter was supplied, and return it.

        Args:
            name: Name of the dependency or parameter.
            value: The value to check; by default it is read from the ConfigStore.
            instance_of: A class, or a class identifier resolved through the
                runtime, the value must be an instance of.
            expected_type: A type the value must be an instance of.
            allow_null: Whether `None` is acceptable.
            from_mixin: Name of the mixin asking, used in error messages.

        Raises:
            DependencyValidationError: If the value is missing or has the wrong type.
        """
        caller = inspect.currentframe().f_back.f_code.co_name
        from_config = value is USE_CONFIG
        if from_config:
            value = self.config.get(name, NO_VALUE)

        def fail(reason: str):
            if from_mixin is None:
                source = f"{self.class_name}::{caller}()"
            else:
                source = f"{from_mixin}::{caller}() (mixed into '{self.class_name}')"
            if from_config or caller == "construct":
                subject = f"The class dependency (construct parameter), '{name}',"
            else:
                subject = f"The method parameter, '{name}',"
            raise DependencyValidationError(
                f"Validation failure in {source}. {subject} failed validation. Reason: {reason}",
                parameter_name=name,
                member=caller,
                class_name=self.class_name,
            )

        if value is NO_VALUE or (value is None and not allow_null):
            fail("A value is required but was not provided.")
        if value is None:
            return None

        if expected_type is not None and not isinstance(value, expected_type):
            fail(
                f"A value of type '{expected_type.__name__}' was expected, "
                f"but '{type(value).__name__}' was provided."
            )

        if instance_of is not None:
            cls = self._resolve_class(instance_of)
            if not isinstance(value, cls):
                fail(f"The value is expected to be an instance of '{identifier_of(cls)}'.")

        return value

    def _resolve_class(self, target: Any) -> type:
        if inspect.isclass(target):
            return target
        if self.runtime is None:
            raise DependencyError(
                f"{self.class_name} cannot resolve class '{target}' because it was not created by a runtime"
            )
        return self.runtime.cls(target)

    def __repr__(self) -> str:
        return f"<{self.class_name}>"
