"""Reserved names, markers and patterns shared across the framework."""

import re

__all__ = [
    "CLASS_NAME_ATTR",
    "COMPOSITION_ATTR",
    "REQUIRES_ATTR",
    "FRAMEWORK_KEY",
    "MODULE_EXTENSION",
    "CLASS_NAME_PATTERN",
    "CLASS_NAME_SEARCH_PATTERN",
    "COMPOSITION_HOOKS",
    "LIFECYCLE_HOOKS",
    "PROTECTED_MEMBERS",
    "NO_VALUE",
    "USE_CONFIG",
]

CLASS_NAME_ATTR = "__class_name__"
"""Attribute holding the full identifier a class was loaded under."""

COMPOSITION_ATTR = "__composition__"
"""Attribute holding the ResultContext of a composed class."""

REQUIRES_ATTR = "__requires__"
"""Attribute holding the input names declared by a construction-stage method."""

FRAMEWORK_KEY = "__framework__"
"""Reserved configuration key carrying identity and parent linkage."""

MODULE_EXTENSION = ".py"

CLASS_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*\.([a-z][A-Za-z0-9]*\.)*[A-Z][A-Za-z0-9]*$")
CLASS_NAME_SEARCH_PATTERN = re.compile(r"[A-Z][A-Za-z0-9]*\.([a-z][A-Za-z0-9]*\.)*[A-Z][A-Za-z0-9]*")

BEFORE_COMPOSE = "before_compose"
ON_COMPOSE = "on_compose"
AFTER_COMPOSE = "after_compose"

BEFORE_CONSTRUCT = "before_construct"
CONSTRUCT = "construct"
AFTER_CONSTRUCT = "after_construct"
BEFORE_READY = "before_ready"
READY = "ready"
AFTER_READY = "after_ready"

COMPOSITION_HOOKS = (BEFORE_COMPOSE, ON_COMPOSE, AFTER_COMPOSE)
LIFECYCLE_HOOKS = (BEFORE_CONSTRUCT, CONSTRUCT, AFTER_CONSTRUCT, BEFORE_READY, AFTER_READY)

PROTECTED_MEMBERS = frozenset(
    {
        "__init__",
        "__new__",
        "__init_subclass__",
        "__dict__",
        "__weakref__",
        "__module__",
        "__qualname__",
        "__doc__",
        "__annotations__",
        "__slots__",
        "__orig_bases__",
        "__parameters__",
        "__firstlineno__",
        "__static_attributes__",
        CLASS_NAME_ATTR,
        COMPOSITION_ATTR,
        *COMPOSITION_HOOKS,
        *LIFECYCLE_HOOKS,
    }
)
"""Members a mixin may never copy onto the class it is composed into."""


class _Marker:
    def __init__(self, label: str):
        self._label = label

    def __repr__(self) -> str:
        return f"<{self._label}>"


NO_VALUE = _Marker("no config value")
"""Default for ConfigStore.get that disables storing a default."""

USE_CONFIG = _Marker("use config value")
"""Default for Component.require meaning 'read the value from the config store'."""
