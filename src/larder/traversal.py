"""Traversal of nested values along identifier paths.

An identifier path such as ``config.session.name`` names a registry entry followed
by keys to look up inside it. Each key is looked up with the first
:class:`Traversal` that accepts the current value, in this order:

    1. :class:`CollectionTraversal` for mappings and sequences
    2. :class:`ContainerTraversal` for registries and other ``has``/``get`` containers
    3. :class:`IndexedTraversal` for objects supporting ``in`` and ``[]``
    4. :class:`RecordTraversal` for any other object, by attribute

Scalars (``None``, numbers, strings and bytes) cannot be traversed at all.
"""

import inspect
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from numbers import Number
from typing import Any, Optional

from larder.domain import Container
from larder.errors import NotFoundError, UnsupportedValueError

__all__ = [
    "Traversal",
    "CollectionTraversal",
    "ContainerTraversal",
    "IndexedTraversal",
    "RecordTraversal",
    "TRAVERSALS",
    "load_key",
]

_INDEX_PATTERN = re.compile(r"-?(0|[1-9][0-9]*)")
_SCALARS = (Number, str, bytes, bytearray)


class Traversal(ABC):
    """Looks up keys within one family of values."""

    @abstractmethod
    def accepts(self, value: Any) -> bool:
        """Tell whether this traversal knows how to look inside ``value``."""

    @abstractmethod
    def lookup(self, value: Any, key: str) -> Any:
        """Return the item stored under ``key``.

        Raises:
            NotFoundError: If ``value`` holds nothing under ``key``.
        """


class CollectionTraversal(Traversal):
    """Mappings by key, sequences by position.

    Keys that spell an integer also match integer mapping keys, and select
    items of a sequence by their (non-negative) index.
    """

    def accepts(self, value: Any) -> bool:
        return isinstance(value, Mapping) or (
            isinstance(value, Sequence) and not isinstance(value, _SCALARS)
        )

    def lookup(self, value: Any, key: str) -> Any:
        index = _as_index(key)

        if isinstance(value, Mapping):
            if key in value:
                return value[key]
            if index is not None and index in value:
                return value[index]
        elif index is not None and not key.startswith("-") and index < len(value):
            return value[index]

        raise _not_found(key)


class ContainerTraversal(Traversal):
    """Nested registries, and anything else answering ``has`` and ``get``."""

    def accepts(self, value: Any) -> bool:
        return isinstance(value, Container)

    def lookup(self, value: Any, key: str) -> Any:
        if value.has(key):
            return value.get(key)
        raise _not_found(key)


class IndexedTraversal(Traversal):
    """Objects implementing ``__contains__`` and ``__getitem__``."""

    def accepts(self, value: Any) -> bool:
        value_type = type(value)
        return hasattr(value_type, "__contains__") and hasattr(value_type, "__getitem__")

    def lookup(self, value: Any, key: str) -> Any:
        if key in value:
            return value[key]
        raise _not_found(key)


class RecordTraversal(Traversal):
    """Plain objects, by public attribute.

    A truthy attribute other than a method is returned straight away. Failing
    that, the object's own fields are consulted, so fields holding ``0``,
    ``False``, ``""`` or ``None`` are still found while falsy class attributes
    and methods are not.
    """

    def accepts(self, value: Any) -> bool:
        return True

    def lookup(self, value: Any, key: str) -> Any:
        if not key.startswith("_"):
            attribute = getattr(value, key, None)
            if attribute and not inspect.isroutine(attribute):
                return attribute

            fields = _own_fields(value)
            if key in fields:
                return fields[key]

        raise _not_found(key)


TRAVERSALS: tuple[Traversal, ...] = (
    CollectionTraversal(),
    ContainerTraversal(),
    IndexedTraversal(),
    RecordTraversal(),
)


def load_key(value: Any, key: str, traversals: tuple[Traversal, ...] = TRAVERSALS) -> Any:
    """Look up ``key`` within ``value`` using the first accepting traversal.

    Raises:
        NotFoundError: If the value holds nothing under the key.
        UnsupportedValueError: If no traversal can look inside the value.
    """
    if value is None or isinstance(value, _SCALARS):
        raise _unsupported(value, key)

    for traversal in traversals:
        if traversal.accepts(value):
            return traversal.lookup(value, key)

    raise _unsupported(value, key)


def _as_index(key: str) -> Optional[int]:
    if _INDEX_PATTERN.fullmatch(key):
        return int(key)
    return None


def _own_fields(value: Any) -> dict[str, Any]:
    fields = dict(getattr(value, "__dict__", {}))
    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name not in fields and hasattr(value, name):
                fields[name] = getattr(value, name)
    return fields


def _not_found(key: str) -> NotFoundError:
    return NotFoundError(f"No entry was found for the identifier path key '{key}'")


def _unsupported(value: Any, key: str) -> UnsupportedValueError:
    return UnsupportedValueError(
        f"Cannot look up identifier path key '{key}' in a value of type {type(value).__name__}"
    )
