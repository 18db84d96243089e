"""Loading, tagging and caching of class definitions by identifier."""

import importlib.util
import inspect
import logging
import os
import sys
from typing import Any, Optional, Union

from keystone.constants import CLASS_NAME_ATTR, CLASS_NAME_PATTERN, COMPOSITION_ATTR, MODULE_EXTENSION
from keystone.errors import ClassNotFoundError, InvalidIdentifierError
from keystone.namespaces import NamespaceResolver, normalize_prefix

__all__ = ["ClassRegistry", "ClassTarget", "identifier_of", "is_class_identifier"]

logger = logging.getLogger(__name__)

ClassTarget = Union[str, type, object]
"""Anything `ClassRegistry.load` accepts: an identifier, a class or an instance."""


def is_class_identifier(value: Any) -> bool:
    """Check whether `value` is a string using the class identifier syntax.

    Example:
        >>> is_class_identifier("App.widgets.Button")  # True
        >>> is_class_identifier("app.Button")          # False
    """
    return isinstance(value, str) and CLASS_NAME_PATTERN.match(value) is not None


def identifier_of(cls: type) -> str:
    """Return the identifier a class was tagged with.

    An untagged composed class is named after its base class; any other
    untagged class is named by its module path.
    """
    tagged = vars(cls).get(CLASS_NAME_ATTR)
    if tagged:
        return tagged
    composition = vars(cls).get(COMPOSITION_ATTR)
    if composition is not None:
        return composition.base_class_name
    return f"{cls.__module__}.{cls.__qualname__}"


class ClassRegistry:
    """Resolves class identifiers to class definitions.

    Statically defined classes are consulted first. Anything else is located
    through the namespace resolver and loaded from a `.py` file whose path is
    derived from the identifier. Every loaded class is tagged with its full
    identifier and cached until `clear_cache()` is called.

    Example:
        >>> registry = ClassRegistry(NamespaceResolver())
        >>> registry.namespaces.register("App", "/srv/app/lib")
        >>> Button = registry.load("App.widgets.Button")  # /srv/app/lib/widgets/Button.py
    """

    def __init__(self, namespaces: Optional[NamespaceResolver] = None):
        self.namespaces = namespaces if namespaces is not None else NamespaceResolver()
        self._definitions: dict[str, type] = {}
        self._cache: dict[str, type] = {}

    def define(self, identifier: str, cls: type) -> type:
        """Register a class under an identifier without touching the file system.

        Args:
            identifier: The full class identifier.
            cls: The class to associate with it.

        Returns:
            The class, tagged with its identifier.
        """
        _validate_identifier(identifier)
        if not inspect.isclass(cls):
            raise TypeError(f"{cls!r} is not a class and cannot be defined as '{identifier}'")
        _tag(cls, identifier)
        self._definitions[identifier] = cls
        self._cache[identifier] = cls
        return cls

    def load(self, target: ClassTarget) -> type:
        """Return the class definition for an identifier, class or instance.

        Raises:
            NamespaceNotFoundError: If no namespace matches the identifier.
            ClassNotFoundError: If the resolved file does not define the class.
            TypeError: If `target` is none of the supported shapes.
        """
        if isinstance(target, str):
            return self._load_by_name(target)
        if inspect.isclass(target):
            return target
        if inspect.isroutine(target) or inspect.ismodule(target) or target is None:
            raise TypeError(
                "ClassRegistry.load() expects a class identifier, a class or an instance, "
                f"but {type(target).__name__} was provided"
            )
        return type(target)

    def name_of(self, target: ClassTarget) -> str:
        """Return the full identifier of a class; see :func:`identifier_of`."""
        if isinstance(target, str):
            return target
        return identifier_of(self.load(target))

    def class_path(self, identifier: str) -> str:
        """Compute the absolute file path an identifier maps to."""
        entry = self.namespaces.resolve(identifier)
        suffix = normalize_prefix(identifier[len(entry.prefix):])
        relative = os.path.join(*suffix.split(".")) + MODULE_EXTENSION
        return os.path.join(entry.root_path, relative)

    def class_exists(self, identifier: str) -> bool:
        if identifier in self._cache:
            return True
        return os.path.isfile(self.class_path(identifier))

    def reverse_lookup(self, path: Union[str, os.PathLike], confirm: bool = False) -> Optional[str]:
        """Convert an absolute class file path back into a class identifier.

        Args:
            path: Path to a class file.
            confirm: When True, only return the identifier if it maps back to
                exactly the same path.

        Returns:
            The identifier, or None if no namespace owns the path or the result
            is not a valid identifier.
        """
        path = os.path.abspath(os.fspath(path))
        entry = self.namespaces.resolve_reverse(path)
        if entry is None:
            return None

        stem, _ = os.path.splitext(path)
        relative = os.path.relpath(stem, entry.root_path)
        identifier = ".".join(filter(None, [entry.prefix] + relative.split(os.sep)))

        if not is_class_identifier(identifier):
            return None
        if confirm and os.path.splitext(self.class_path(identifier))[0] != stem:
            return None
        return identifier

    def clear_cache(self):
        """Forget every file-loaded class; static definitions are kept."""
        self._cache = dict(self._definitions)

    def _load_by_name(self, identifier: str) -> type:
        cached = self._cache.get(identifier)
        if cached is not None:
            logger.debug("Class cache hit for '%s'", identifier)
            return cached

        _validate_identifier(identifier)
        path = self.class_path(identifier)
        if not os.path.isfile(path):
            raise ClassNotFoundError(identifier, path)

        cls = _load_class_from_file(identifier, path)
        _tag(cls, identifier)
        self._cache[identifier] = cls

        logger.debug("Loaded class '%s' from %s", identifier, path)
        return cls


def _validate_identifier(identifier: str):
    if not is_class_identifier(identifier):
        raise InvalidIdentifierError(f"'{identifier}' is not a valid class identifier")


def _tag(cls: type, identifier: str):
    # Only ever tag once; a class keeps the first name it was loaded under.
    if CLASS_NAME_ATTR not in vars(cls):
        setattr(cls, CLASS_NAME_ATTR, identifier)


def _load_class_from_file(identifier: str, path: str) -> type:
    class_name = identifier.rsplit(".", 1)[-1]
    module_spec = importlib.util.spec_from_file_location(identifier, path)
    if module_spec is None or module_spec.loader is None:
        raise ClassNotFoundError(identifier, path, "no module loader is available for the file")

    module = importlib.util.module_from_spec(module_spec)
    # insert into sys.modules before executing so the module can refer to itself
    sys.modules[identifier] = module
    try:
        module_spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[identifier]
        raise

    cls = getattr(module, class_name, None)
    if not inspect.isclass(cls):
        raise ClassNotFoundError(identifier, path, f"the module does not define a class named '{class_name}'")
    return cls
