from collections.abc import Mapping, MutableMapping
from typing import Any

from keystone.class_registry import identifier_of

__all__ = ["Configurable"]


class Configurable:
    """Applies defaults and type checks to configuration mappings.

    Each option is either a plain default value or a mapping with the optional
    keys `default` and `type`. Callable defaults are called, without arguments,
    to produce the value. Keys missing from the configuration receive their
    default, or None when there is none; keys that are present, even as None,
    are left alone.

    Example:
        >>> options = {"retries": 3, "timeout": {"default": 1.5, "type": float}}
        >>> component.parse_config({"retries": 5}, options)
        {'retries': 5, 'timeout': 1.5}
    """

    def parse_config(self, config: Any, options: Any) -> MutableMapping:
        """Apply `options` to `config` in place and return it.

        A `config` that is not a mutable mapping is replaced with a new dict.

        Raises:
            DependencyValidationError: If a value does not have its option's type.
        """
        if not isinstance(config, MutableMapping):
            config = {}
        if not isinstance(options, Mapping):
            return config

        for name, option in options.items():
            self._parse_config_option(config, name, _normalize_option(option))
        return config

    def splice_config(self, config: MutableMapping, options: Mapping) -> MutableMapping:
        """Move the option keys out of `config` into a new mapping and parse that.

        Example:
            >>> config = {"host": "db", "name": "users"}
            >>> component.splice_config(config, {"host": "localhost", "port": 5432})
            {'host': 'db', 'port': 5432}
            >>> config
            {'name': 'users'}
        """
        spliced = {name: config.pop(name) for name in options if name in config}
        return self.parse_config(spliced, options)

    def _parse_config_option(self, config: MutableMapping, name: str, option: Mapping):
        if name not in config:
            config[name] = option.get("default")

        expected_type = option.get("type")
        if expected_type is not None:
            self.require(
                name,
                config[name],
                expected_type=expected_type,
                allow_null=True,
                from_mixin=identifier_of(Configurable),
            )


def _normalize_option(option: Any) -> dict:
    if not isinstance(option, Mapping):
        option = {"default": option}
    option = dict(option)

    default = option.get("default")
    if callable(default):
        option["default"] = default()
    return option
