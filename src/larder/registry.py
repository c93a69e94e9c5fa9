"""Registration and lazy resolution of registry entries."""

import inspect
import logging
from typing import Any, Callable, Mapping, Optional

from larder.blueprint import BlueprintBuilder, Instantiate, argument_resolver, instantiate, make_blueprint
from larder.domain import Blueprint, Container, Entry, Factory, Payload, Raw, Resolved, Value
from larder.errors import CyclicResolutionError, DuplicateKeyError, NotFoundError
from larder.traversal import load_key

__all__ = [
    "Registry",
    "inferred_name",
]

logger = logging.getLogger(__name__)

_MISSING = object()


def inferred_name(target: Any) -> str:
    """Derive an entry id from a class or function name, removing any 'make_' prefix.

    Example:
        >>> inferred_name(Database)       # Returns "Database"
        >>> inferred_name(make_database)  # Returns "database"
        >>> inferred_name(my_service)     # Returns "my_service"
    """
    if inspect.isclass(target):
        return target.__name__

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    else:
        return target.__name__


class Registry:
    """Keyed store of values that are resolved lazily, at most once each.

    Entries are registered either as standard entries with :meth:`set`, or as
    blueprints with :meth:`set_blueprints`. Nothing is evaluated until an entry
    is first requested through :meth:`get` or :meth:`load`; the result is then
    cached and returned for every later request.

    A standard entry holds a plain value or a factory. Callables other than
    classes become factories, invoked with the container on first access; wrap a
    callable in :class:`~larder.domain.Value` to store the callable itself.

    Args:
        delegate: Optional container consulted for the first key of identifier
            paths and handed to factories in place of this registry.
        instantiate: Callable building an instance from a type and a list of
            arguments; used for blueprint entries.

    Example:
        >>> registry = Registry()
        >>> registry.set({
        ...     "config": {"db": {"url": "sqlite://"}},
        ...     "engine": lambda c: create_engine(c.load("config.db.url")),
        ... })
        >>> registry.get("engine") is registry.get("engine")
        True
    """

    def __init__(
        self,
        delegate: Optional[Container] = None,
        instantiate: Instantiate = instantiate,
    ):
        self._delegate = delegate
        self._entries: dict[str, Entry] = {}
        self._resolving: list[str] = []
        self._blueprint_builder = BlueprintBuilder(instantiate)
        self._resolve_argument = argument_resolver(self.load)

    @property
    def container(self) -> Container:
        """The delegate if one was given, otherwise the registry itself."""
        return self._delegate if self._delegate is not None else self

    def set(self, entries: Mapping[str, Any]):
        """Register standard entries.

        Args:
            entries: Mapping of entry ids to plain values or factories.

        Raises:
            DuplicateKeyError: If any id is already registered. No entry of the
                batch is added in that case.
        """
        self._set_entries(entries, _standard_payload)

    def set_blueprints(self, entries: Mapping[str, Any]):
        """Register blueprint entries.

        Args:
            entries: Mapping of entry ids to blueprint records (see
                :mod:`larder.blueprint`) or :class:`~larder.domain.Blueprint` objects.

        Raises:
            DuplicateKeyError: If any id is already registered.
            InvalidBlueprintError: If any record is malformed.
        """
        self._set_entries(entries, make_blueprint)

    def _set_entries(self, entries: Mapping[str, Any], make_payload: Callable[[Any], Payload]):
        for id in entries:
            if not isinstance(id, str):
                raise TypeError(f"Entry identifiers must be strings, got {id!r}")

        duplicates = [id for id in entries if id in self._entries]
        if duplicates:
            raise DuplicateKeyError(f"Duplicate entry identifiers: {duplicates}")

        payloads = {id: make_payload(value) for id, value in entries.items()}
        for id, payload in payloads.items():
            self._entries[id] = Raw(payload)

        logger.debug("Registered entries %s", list(payloads))

    def provides(self, id: Optional[str] = None) -> Callable:
        """Decorator to register a function as a factory entry.

        Args:
            id: Optional entry id; defaults to the function name with any 'make_'
                prefix removed.

        Example:
            @registry.provides()
            def make_session(container):
                return Session(container.get("engine"))
        """

        def decorator(func):
            self.set({id or inferred_name(func): Factory(func)})
            return func

        return decorator

    def get(self, id: str) -> Any:
        """Return the value of an entry, resolving it on first access.

        Raises:
            NotFoundError: If no entry exists for the id.
            CyclicResolutionError: If resolving the entry requires the entry itself.
        """
        entry = self._entries.get(id) if isinstance(id, str) else None
        if entry is None:
            raise NotFoundError(f"No entry was found for the identifier '{id}'")

        if isinstance(entry, Resolved):
            return entry.value

        if id in self._resolving:
            chain = self._resolving[self._resolving.index(id):] + [id]
            raise CyclicResolutionError(
                f"Entry '{id}' depends on itself: {' -> '.join(chain)}"
            )

        self._resolving.append(id)
        try:
            value = self._resolve(id, entry.payload)
        finally:
            self._resolving.pop()

        # Removed while resolving
        if self._entries.get(id) is entry:
            self._entries[id] = Resolved(value)
        return value

    def _resolve(self, id: str, payload: Payload) -> Any:
        if isinstance(payload, Factory):
            logger.debug("Invoking factory for entry '%s'", id)
            return payload(self.container)

        if isinstance(payload, Blueprint):
            logger.debug("Building entry '%s' from blueprint", id)
            return self._blueprint_builder.build(payload, self._resolve_argument)

        return payload.value

    def load(self, path: str, default: Any = _MISSING) -> Any:
        """Load a value using an identifier path.

        The path is a period separated string: the first part is an entry id,
        looked up on the delegate if there is one, and every further part is a
        key looked up inside the previous value. For example, if ``config`` is a
        dict, these are equivalent::

            registry.get("config")["session"]["name"]
            registry.load("config.session.name")

        Args:
            path: The identifier path to load.
            default: Returned instead of raising when the path cannot be found.
                ``None`` is a valid default.

        Returns:
            The value at the end of the path.

        Raises:
            NotFoundError: If a part of the path is missing and no default was given.
            UnsupportedValueError: If the path runs into a value that cannot be
                traversed, whether or not a default was given.
        """
        head, *keys = str(path).split(".")
        container = self.container

        try:
            if not container.has(head):
                raise NotFoundError(f"No entry was found for the identifier '{head}'")
            value = container.get(head)
            for key in keys:
                value = load_key(value, key)
        except NotFoundError:
            if default is _MISSING:
                raise
            return default

        return value

    def has(self, id: str) -> bool:
        """Tell whether an entry exists for the id, without resolving it."""
        return isinstance(id, str) and id in self._entries

    def is_resolved(self, id: str) -> bool:
        """Tell whether the entry has already been resolved.

        Raises:
            NotFoundError: If no entry exists for the id.
        """
        if not self.has(id):
            raise NotFoundError(f"No entry was found for the identifier '{id}'")
        return isinstance(self._entries[id], Resolved)

    def ids(self) -> list[str]:
        """Registered entry ids, in registration order."""
        return list(self._entries)

    def __contains__(self, id: str) -> bool:
        return self.has(id)

    def __getitem__(self, id: str) -> Any:
        return self.get(id)

    def __setitem__(self, id: str, value: Any):
        self.set({id: value})

    def __delitem__(self, id: str):
        if not self.has(id):
            raise NotFoundError(f"No entry was found for the identifier '{id}'")
        del self._entries[id]


def _standard_payload(value: Any) -> Payload:
    if isinstance(value, (Value, Factory)):
        return value
    if inspect.isclass(value) or not callable(value):
        return Value(value)
    return Factory(value)
