"""Namespace prefix registration and resolution.

A namespace maps a dotted prefix such as ``App.widgets`` to a directory on
disk. Entries are kept sorted by descending prefix length so the most specific
prefix always wins when an identifier is resolved.
"""

import logging
import os
import re
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from keystone.domain import NamespaceEntry
from keystone.errors import NamespaceNotFoundError

__all__ = ["NamespaceResolver", "normalize_prefix"]

logger = logging.getLogger(__name__)

RootPath = Union[str, os.PathLike, Iterable[str]]
PrefixMatch = Union[str, re.Pattern, Callable[[str], bool]]


def normalize_prefix(prefix: str) -> str:
    """Strip leading and trailing separators from a namespace prefix.

    Example:
        >>> normalize_prefix(".App.widgets.")  # Returns "App.widgets"
    """
    return prefix.strip(".")


class NamespaceResolver:
    """Ordered collection of NamespaceEntry objects."""

    def __init__(self):
        self._entries: list[NamespaceEntry] = []

    @property
    def entries(self) -> tuple[NamespaceEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, prefix: str) -> bool:
        prefix = normalize_prefix(prefix)
        return any(entry.prefix == prefix for entry in self._entries)

    def clear(self):
        self._entries = []

    def register(self, prefix: str, root_path: RootPath) -> NamespaceEntry:
        """Register (or replace) the root path for a namespace prefix.

        Args:
            prefix: Dotted namespace prefix; boundary dots are ignored.
            root_path: Directory, as a string, a path object or a sequence of
                path parts to be joined.

        Returns:
            The stored entry.
        """
        prefix = normalize_prefix(prefix)
        entry = NamespaceEntry(prefix, _normalize_root_path(root_path))

        self.remove_exact(prefix)
        self._entries.append(entry)
        self._sort()

        logger.debug("Registered namespace '%s' -> %s", entry.prefix, entry.root_path)
        return entry

    def remove_exact(self, prefix: str) -> bool:
        """Remove the single entry whose prefix equals `prefix`.

        Returns:
            True if an entry was removed.
        """
        prefix = normalize_prefix(prefix)
        for index, entry in enumerate(self._entries):
            if entry.prefix == prefix:
                del self._entries[index]
                return True
        return False

    def remove_matching(self, match: PrefixMatch) -> bool:
        """Remove every entry whose prefix matches.

        Args:
            match: A literal string the prefix must start with, a compiled
                regular expression searched against the prefix, or a predicate.

        Returns:
            True if one or more entries were removed.

        Raises:
            TypeError: If `match` is none of the supported types.
        """
        predicate = _make_predicate(match)
        kept = [entry for entry in self._entries if not predicate(entry.prefix)]
        removed = len(kept) != len(self._entries)
        self._entries = kept
        return removed

    def resolve(self, identifier: str) -> NamespaceEntry:
        """Find the most specific entry whose prefix begins `identifier`.

        Raises:
            NamespaceNotFoundError: If no entry matches.
        """
        for entry in self._entries:
            if entry.matches(identifier):
                return entry
        raise NamespaceNotFoundError(identifier)

    def resolve_reverse(self, path: Union[str, os.PathLike]) -> Optional[NamespaceEntry]:
        """Find the entry whose root path contains `path`, if any."""
        path = os.path.abspath(os.fspath(path))
        for entry in self._entries:
            if path == entry.root_path or path.startswith(entry.root_path + os.sep):
                return entry
        return None

    def _sort(self):
        # Longest prefix first; ties fall back to alphabetical order.
        self._entries.sort(key=lambda entry: (-len(entry.prefix), entry.prefix))


def _normalize_root_path(root_path: RootPath) -> str:
    if isinstance(root_path, (str, os.PathLike)):
        return str(Path(root_path).resolve())
    return str(Path(*root_path).resolve())


def _make_predicate(match: PrefixMatch) -> Callable[[str], bool]:
    if isinstance(match, str):
        return lambda prefix: prefix.startswith(match)
    if isinstance(match, re.Pattern):
        return lambda prefix: match.search(prefix) is not None
    if callable(match):
        return match
    raise TypeError(
        "Invalid 'match' passed to NamespaceResolver.remove_matching(); a string, "
        f"a compiled pattern or a predicate was expected but {type(match).__name__} was provided"
    )
