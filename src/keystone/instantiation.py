"""Instantiation of classes with dependencies filled in from the container."""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Optional

from keystone.class_registry import ClassRegistry, ClassTarget
from keystone.component import Component
from keystone.constants import FRAMEWORK_KEY
from keystone.container import Container
from keystone.errors import InstantiationError
from keystone.manifest import class_dependencies

__all__ = ["ClassLoader"]

logger = logging.getLogger(__name__)


class ClassLoader:
    """Creates instances of framework classes within a runtime.

    Every construction input a class declares that is missing from the
    explicit configuration is looked up in the container. Explicit values
    always win; names the container does not hold are left for the class to
    default or validate.

    Example:
        >>> container.register_value("db", database)
        >>> service = loader.instantiate("App.service.Users")  # receives `db`
        >>> other = loader.instantiate("App.service.Users", {"db": fake_db})
    """

    def __init__(
        self,
        container: Container,
        class_registry: ClassRegistry,
        runtime: Any = None,
    ):
        self._container = container
        self._class_registry = class_registry
        self._runtime = runtime

    @property
    def container(self) -> Container:
        return self._container

    @property
    def class_registry(self) -> ClassRegistry:
        return self._class_registry

    def inst(self, target: ClassTarget, config: Optional[Mapping[str, Any]] = None) -> Any:
        """Shorthand for :meth:`instantiate`."""
        return self.instantiate(target, config)

    def instantiate(self, target: ClassTarget, config: Optional[Mapping[str, Any]] = None) -> Any:
        """Instantiate a class, injecting container values for missing dependencies.

        Args:
            target: Class identifier, class or instance of the class to create.
            config: Explicit configuration; it is copied, never modified.

        Returns:
            The new instance.

        Raises:
            ResolutionError: If the class cannot be resolved.
            InstantiationError: If a class that is not a Component can be called
                neither with the configuration nor, when it is empty, without arguments.
        """
        config = dict(config) if isinstance(config, Mapping) else {}
        cls = self._class_registry.load(target)

        config = self._inject_container_values(cls, config)

        if not issubclass(cls, Component):
            config.pop(FRAMEWORK_KEY, None)
            return self._instantiate_plain(cls, config, self._class_registry.name_of(target))

        framework = dict(config.get(FRAMEWORK_KEY) or {})
        framework["class_name"] = self._class_registry.name_of(target)
        framework.setdefault("parent", None)
        framework.setdefault("runtime", self._runtime)
        config[FRAMEWORK_KEY] = framework

        logger.debug("Instantiating %s", framework["class_name"])
        return cls(config)

    def _inject_container_values(self, cls: type, config: dict[str, Any]) -> dict[str, Any]:
        needed = [name for name in class_dependencies(cls) if config.get(name) is None]
        if not needed:
            return config

        injected = self._container.resolve_many(needed)
        if injected:
            logger.debug("Injecting %s into %s", sorted(injected), cls.__qualname__)
        config.update(injected)
        return config

    def _instantiate_plain(self, cls: type, config: dict[str, Any], class_name: str) -> Any:
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            # extension types without an introspectable signature
            return cls(config)

        if _accepts(signature, config):
            return cls(config)
        if not config and _accepts(signature):
            return cls()

        if _accepts(signature):
            reason = f"its constructor takes no configuration, but {sorted(config)} was given"
        else:
            reason = "its constructor accepts neither a configuration mapping nor no arguments"
        raise InstantiationError(class_name, reason)


def _accepts(signature: inspect.Signature, *args) -> bool:
    try:
        signature.bind(*args)
    except TypeError:
        return False
    return True
