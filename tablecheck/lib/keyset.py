"""Duplicate detection over tuples of strings.

Keys are stored in a prefix tree: each node maps one tuple element's
literal value to the node for the remaining elements. Tuple elements are
never joined into a single string, so a value containing any separator
cannot collide with a different tuple, and keys of any arity work.
"""

from __future__ import annotations

from typing import Dict, Sequence

__all__ = ["CompositeKeySet"]


class CompositeKeySet:
    """A set of string tuples backed by a prefix tree.

    A tuple is contained when following its elements down from the root
    never hits a missing child. Within one set all keys are expected to
    share an arity (one primary key per table), so a stored tuple's prefix
    is never queried on its own. The empty tuple is never contained.

    Example:
        >>> keys = CompositeKeySet()
        >>> keys.exists(("1", "a"))
        False
        >>> keys.insert(("1", "a"))
        >>> ("1", "a") in keys
        True
    """

    def __init__(self) -> None:
        self._root: Dict[str, dict] = {}

    def exists(self, key: Sequence[str]) -> bool:
        if not key:
            return False
        node = self._root
        for part in key:
            child = node.get(part)
            if child is None:
                return False
            node = child
        return True

    def insert(self, key: Sequence[str]) -> None:
        node = self._root
        for part in key:
            node = node.setdefault(part, {})

    def __contains__(self, key: Sequence[str]) -> bool:
        return self.exists(key)
