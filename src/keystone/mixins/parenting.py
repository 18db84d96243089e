from collections.abc import Mapping
from typing import Any, Optional

from keystone.class_registry import ClassTarget, identifier_of
from keystone.constants import FRAMEWORK_KEY
from keystone.instantiation import ClassLoader

__all__ = ["Parenting"]


class Parenting:
    """Lets an instance create children that know who created them.

    The class loader is a construction dependency, normally injected from the
    runtime's container.

    Example:
        >>> Page = runtime.mix("App.abstract.Page", "Keystone.asset.mixin.Parenting")
        >>> page = runtime.inst(Page)
        >>> header = page.spawn("App.widgets.Header")
        >>> header.parent is page
        True
    """

    def construct(self, class_loader):
        self._class_loader = self.require(
            "class_loader",
            instance_of=ClassLoader,
            from_mixin=identifier_of(Parenting),
        )

    @property
    def class_loader(self) -> ClassLoader:
        return self._class_loader

    def spawn(self, target: ClassTarget, config: Optional[Mapping[str, Any]] = None) -> Any:
        """Instantiate a child whose parent is this instance.

        Args:
            target: Identifier or class of the child.
            config: Configuration for the child; it is copied, never modified.

        Returns:
            The new child instance.
        """
        config = dict(config) if config else {}
        framework = dict(config.get(FRAMEWORK_KEY) or {})
        framework["parent"] = self
        config[FRAMEWORK_KEY] = framework

        return self._class_loader.instantiate(target, config)
