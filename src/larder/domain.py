"""Domain models used throughout the registry."""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

__all__ = [
    "Container",
    "Value",
    "Factory",
    "Blueprint",
    "Payload",
    "Raw",
    "Resolved",
    "Entry",
]


@runtime_checkable
class Container(Protocol):
    """Anything that can answer ``has(id)`` and ``get(id)``.

    Registries satisfy this protocol, and so may any delegate handed to one.
    """

    def has(self, id: str) -> bool: ...

    def get(self, id: str) -> Any: ...


@dataclass(frozen=True)
class Value:
    """A plain value, returned as-is when the entry is resolved.

    Wrapping a callable in ``Value`` stores the callable itself instead of
    treating it as a factory. As a blueprint argument, ``Value`` passes its
    contents verbatim rather than loading them as an identifier path.
    """

    value: Any


@dataclass(frozen=True)
class Factory:
    """A callable invoked once, on first access, to produce the entry's value.

    Attributes:
        func: The callable producing the value.
        takes_container: Whether ``func`` accepts a positional argument. If so, it
            is called with the container; otherwise it is called with no arguments.
    """

    func: Callable[..., Any]
    takes_container: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "takes_container", _accepts_positional(self.func))

    def __call__(self, container: Container) -> Any:
        if self.takes_container:
            return self.func(container)
        return self.func()


@dataclass(frozen=True)
class Blueprint:
    """Declarative recipe for constructing an object.

    Attributes:
        target_type: The class to instantiate, or an import string naming it.
        constructor_args: Argument specs for the constructor. ``None`` means the
            instance is created without arguments.
        setters: Ordered ``(method_name, argument_specs)`` pairs, invoked on the new
            instance in this order.
    """

    target_type: Union[type, str]
    constructor_args: Optional[tuple[Any, ...]] = None
    setters: tuple[tuple[str, tuple[Any, ...]], ...] = ()


Payload = Union[Value, Factory, Blueprint]


@dataclass(frozen=True)
class Raw:
    """An entry that has not been resolved yet."""

    payload: Payload


@dataclass(frozen=True)
class Resolved:
    """An entry whose value has been computed and cached."""

    value: Any


Entry = Union[Raw, Resolved]


def _accepts_positional(func: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins expose no signature; assume they take the container.
        return True

    return any(
        parameter.kind
        in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        )
        for parameter in signature.parameters.values()
    )
