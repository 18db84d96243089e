"""The runtime context that owns one of each framework registry."""

import logging
import os
from typing import Any, Optional, Union

from keystone.class_registry import ClassRegistry, ClassTarget
from keystone.component import Component
from keystone.container import Container, DependencyNames
from keystone.domain import NamespaceEntry
from keystone.instantiation import ClassLoader
from keystone.mixer import Mixer
from keystone.mixins.configurable import Configurable
from keystone.mixins.loggable import Loggable
from keystone.mixins.parenting import Parenting
from keystone.namespaces import NamespaceResolver

__all__ = ["Runtime", "BUILTIN_CLASSES"]

logger = logging.getLogger(__name__)

BUILTIN_CLASSES: dict[str, type] = {
    "Keystone.abstract.Component": Component,
    "Keystone.asset.ClassLoader": ClassLoader,
    "Keystone.asset.ioc.Container": Container,
    "Keystone.asset.mixin.Parenting": Parenting,
    "Keystone.util.mixin.Configurable": Configurable,
    "Keystone.logging.mixin.Loggable": Loggable,
}
"""Classes every runtime can resolve without a registered namespace."""


class Runtime:
    """Holds the namespace resolver, class registry, mixer, container and class loader.

    Several runtimes can live side by side; nothing is shared between them
    except the class objects themselves.

    Args:
        namespaces: Namespace resolver to use; ignored when `class_registry` is given.
        class_registry: Class registry to use.
        mixer: Mixer to use; it should share this runtime's class registry.
        container: Dependency container to use.

    Example:
        >>> runtime = Runtime()
        >>> runtime.register_namespace("App", "/srv/app/lib")
        >>> Service = runtime.mix("App.service.Users", "Keystone.logging.mixin.Loggable")
        >>> users = runtime.inst(Service, {"page_size": 50})
    """

    def __init__(
        self,
        namespaces: Optional[NamespaceResolver] = None,
        class_registry: Optional[ClassRegistry] = None,
        mixer: Optional[Mixer] = None,
        container: Optional[Container] = None,
    ):
        self.class_registry = class_registry if class_registry is not None else ClassRegistry(namespaces)
        self.mixer = mixer if mixer is not None else Mixer(self.class_registry)
        self.container = container if container is not None else Container()
        self.class_loader = ClassLoader(self.container, self.class_registry, runtime=self)

        for identifier, cls in BUILTIN_CLASSES.items():
            self.class_registry.define(identifier, cls)

        self.container.register_values(
            {
                "container": self.container,
                "class_loader": self.class_loader,
                "runtime": self,
            }
        )

    @property
    def namespaces(self) -> NamespaceResolver:
        return self.class_registry.namespaces

    def register_namespace(self, prefix: str, root_path: Union[str, os.PathLike]) -> NamespaceEntry:
        return self.namespaces.register(prefix, root_path)

    def cls(self, target: ClassTarget) -> type:
        """Resolve a class identifier (or class, or instance) to its class."""
        return self.class_registry.load(target)

    def mix(self, base: ClassTarget, *mixins: ClassTarget) -> type:
        """Compose `base` with `mixins`; see :meth:`Mixer.compose`."""
        return self.mixer.compose(base, *mixins)

    def inst(self, target: ClassTarget, config: Optional[dict] = None) -> Any:
        """Instantiate a class with container injection; see :meth:`ClassLoader.instantiate`."""
        return self.class_loader.instantiate(target, config)

    def dep(self, name: str) -> Any:
        return self.container.resolve(name)

    def deps(self, names: DependencyNames) -> dict[str, Any]:
        return self.container.resolve_many(names)

    def clear_caches(self, classes: bool = True):
        """Drop cached state so that changed class files are loaded again."""
        if classes:
            self.class_registry.clear_cache()
            logger.debug("Cleared the class cache")
