"""Utilities for constructing instances from blueprints.

A blueprint record is a mapping with a required ``type`` key naming the class to
build, an optional constructor key (``__init__``, or its alias ``__construct``)
listing the constructor arguments, and any number of further keys naming methods
to call on the new instance, in the record's order. Every argument list holds
argument specs: identifier paths, :class:`~larder.domain.Value` literals or
already-resolved objects.

Example:
    >>> record = {
    ...     "type": "logging.Logger",
    ...     "__init__": ["logger.name"],
    ...     "setLevel": ["logger.level"],
    ... }
    >>> blueprint = make_blueprint(record)
    >>> blueprint.setters
    (('setLevel', ('logger.level',)),)
"""

import importlib
import logging
from typing import Any, Callable, Mapping

from larder.domain import Blueprint, Value
from larder.errors import InvalidBlueprintError

__all__ = [
    "TYPE_KEY",
    "CONSTRUCTOR_KEYS",
    "make_blueprint",
    "import_target",
    "instantiate",
    "argument_resolver",
    "BlueprintBuilder",
]

logger = logging.getLogger(__name__)

TYPE_KEY = "type"
CONSTRUCTOR_KEYS = ("__init__", "__construct")

Instantiate = Callable[[Any, list[Any]], Any]
ArgumentResolver = Callable[[Any], Any]


def make_blueprint(record: Any) -> Blueprint:
    """Interpret a blueprint record.

    Args:
        record: A blueprint mapping, or an existing :class:`Blueprint`, which is
            returned unchanged.

    Returns:
        The parsed :class:`Blueprint`.

    Raises:
        InvalidBlueprintError: If the record is not a mapping, lacks a ``type``,
            names both constructor keys, or has an argument list that is not a
            list or tuple.
    """
    if isinstance(record, Blueprint):
        return record
    if not isinstance(record, Mapping):
        raise InvalidBlueprintError(
            f"Blueprint must be a mapping, got {type(record).__name__}"
        )
    if TYPE_KEY not in record:
        raise InvalidBlueprintError(f"Blueprint is missing the required '{TYPE_KEY}' key")

    constructor_keys = [key for key in CONSTRUCTOR_KEYS if key in record]
    if len(constructor_keys) > 1:
        raise InvalidBlueprintError(
            f"Blueprint may only use one of the constructor keys {constructor_keys}"
        )

    constructor_args = (
        _argument_specs(constructor_keys[0], record[constructor_keys[0]])
        if constructor_keys
        else None
    )

    setters = []
    for method_name, arguments in record.items():
        if method_name == TYPE_KEY or method_name in CONSTRUCTOR_KEYS:
            continue
        if not isinstance(method_name, str):
            raise InvalidBlueprintError(f"Method name {method_name!r} is not a string")
        setters.append((method_name, _argument_specs(method_name, arguments)))

    return Blueprint(record[TYPE_KEY], constructor_args, tuple(setters))


def _argument_specs(key: str, arguments: Any) -> tuple[Any, ...]:
    if not isinstance(arguments, (list, tuple)):
        raise InvalidBlueprintError(
            f"Arguments for '{key}' must be a list or tuple, got {type(arguments).__name__}"
        )
    return tuple(arguments)


def import_target(name: str) -> Any:
    """Import the object named by ``"package.module.Name"`` or ``"package.module:Name"``.

    Raises:
        InvalidBlueprintError: If the name has no module part or the module lacks
            the attribute.
        ImportError: If the module cannot be imported.
    """
    module_name, separator, attribute = name.partition(":")
    if not separator:
        module_name, _, attribute = name.rpartition(".")
    if not module_name or not attribute:
        raise InvalidBlueprintError(f"'{name}' is not an importable path")

    target = importlib.import_module(module_name)
    try:
        for part in attribute.split("."):
            target = getattr(target, part)
    except AttributeError as e:
        raise InvalidBlueprintError(
            f"Module '{module_name}' has no attribute '{attribute}'"
        ) from e
    return target


def instantiate(target: Any, args: list[Any]) -> Any:
    """Default construction capability: import ``target`` if needed and call it."""
    if isinstance(target, str):
        target = import_target(target)
    return target(*args)


def argument_resolver(load: Callable[[str], Any]) -> ArgumentResolver:
    """Build a function turning argument specs into argument values.

    Strings are identifier paths passed to ``load``, :class:`Value` wrappers yield
    their contents and anything else is used as-is.
    """

    def resolve(spec: Any) -> Any:
        if isinstance(spec, Value):
            return spec.value
        if isinstance(spec, str):
            return load(spec)
        return spec

    return resolve


class BlueprintBuilder:
    """Build configured instances from :class:`Blueprint` objects."""

    def __init__(self, instantiate: Instantiate = instantiate):
        self._instantiate = instantiate

    def build(self, blueprint: Blueprint, resolve: ArgumentResolver) -> Any:
        """Instantiate the blueprint's type and call its setters in order.

        Args:
            blueprint: The recipe to follow.
            resolve: Turns each argument spec into the value passed along.

        Returns:
            The configured instance. Errors raised while instantiating or calling
            a method propagate unchanged.
        """
        if blueprint.constructor_args is None:
            args = []
        else:
            args = [resolve(spec) for spec in blueprint.constructor_args]

        logger.debug("Instantiating %r with %d argument(s)", blueprint.target_type, len(args))
        instance = self._instantiate(blueprint.target_type, args)

        for method_name, specs in blueprint.setters:
            getattr(instance, method_name)(*[resolve(spec) for spec in specs])

        return instance
