"""High level entry points for constructing registries."""

from typing import Any, Mapping, Optional

from larder.blueprint import Instantiate, instantiate as default_instantiate
from larder.domain import Container
from larder.registry import Registry

__all__ = ["make_registry"]


def make_registry(
    values: Optional[Mapping[str, Any]] = None,
    blueprints: Optional[Mapping[str, Any]] = None,
    delegate: Optional[Container] = None,
    instantiate: Optional[Instantiate] = None,
) -> Registry:
    """Create a :class:`Registry` populated with the given entries.

    Standard entries are registered before blueprints, so an id appearing in both
    mappings is reported as a duplicate of the standard entry.

    Args:
        values: Optional mapping of entry ids to plain values or factories.
        blueprints: Optional mapping of entry ids to blueprint records.
        delegate: Optional container consulted for identifier path heads and
            handed to factories.
        instantiate: Optional replacement for the default construction
            capability used by blueprints.

    Returns:
        The populated registry. Nothing in it has been resolved yet.

    Raises:
        DuplicateKeyError: If an id is registered twice.
        InvalidBlueprintError: If a blueprint record is malformed.

    Example:
        >>> registry = make_registry(
        ...     {"greeting": "Hello"},
        ...     {"greeter": {"type": "myapp.Greeter", "__init__": ["greeting"]}},
        ... )
        >>> registry.get("greeter").greet("Dominic")
    """
    registry = Registry(delegate, instantiate or default_instantiate)
    if values:
        registry.set(values)
    if blueprints:
        registry.set_blueprints(blueprints)
    return registry
