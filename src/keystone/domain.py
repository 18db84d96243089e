"""Domain models used throughout the framework."""

import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class NamespaceEntry:
    """Maps a dotted namespace prefix to a file-system root.

    Attributes:
        prefix: The normalized prefix, without leading or trailing dots.
        root_path: Absolute directory that class files under this prefix live in.
    """

    prefix: str
    root_path: str

    def matches(self, identifier: str) -> bool:
        return identifier.startswith(self.prefix)


@dataclass(frozen=True)
class OperationContext:
    """Metadata describing one `compose()` call.

    Attributes:
        base_class_name: Full name of the class mixins are applied to.
        base_class: The base class itself.
        mixins: Ordered `(name, class)` pairs for every mixin in this call.
    """

    base_class_name: str
    base_class: type
    mixins: tuple[tuple[str, type], ...]

    @property
    def mixin_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.mixins)

    def mixin_map(self) -> dict[str, type]:
        return dict(self.mixins)


@dataclass(frozen=True)
class ResultContext(OperationContext):
    """Operation metadata plus the class the operation produced.

    This is the record stored on every composed class; walking these records
    through the MRO recovers every mixin that ever contributed to a class.
    """

    composed_class: type


@dataclass(frozen=True)
class MixinContext(ResultContext):
    """Result metadata narrowed to one specific mixin."""

    mixin_class_name: str
    mixin_class: type


@dataclass(frozen=True)
class InvocationContext(MixinContext):
    """Mixin metadata narrowed to one hook invocation."""

    method_name: str
    method: Callable


class ConstructResult(enum.Enum):
    """Explicit outcomes a construction-stage method may return."""

    CONTINUE = "continue"
    HALT_ANCESTORS = "halt_ancestors"


class LifecycleStage(enum.Enum):
    """States a Component passes through while it is being constructed, in order."""

    INIT = "init"
    BEFORE_CONSTRUCT = "before_construct"
    CONSTRUCT = "construct"
    AFTER_CONSTRUCT = "after_construct"
    BEFORE_READY = "before_ready"
    READY = "ready"
    AFTER_READY = "after_ready"
    CONSTRUCTED = "constructed"


@dataclass
class FrameworkData:
    """Hidden per-instance data kept by every Component.

    Attributes:
        class_name: Full identifier the instance was created from, if known.
        parent: The instance that spawned this one, if any.
        runtime: The runtime the instance was created by, if any.
        config: The instance's ConfigStore.
        stage: The lifecycle stage the instance is in.
    """

    class_name: Optional[str] = None
    parent: Any = None
    runtime: Any = None
    config: Any = None
    stage: LifecycleStage = LifecycleStage.INIT
