__all__ = [
    "RegistryError",
    "DuplicateKeyError",
    "NotFoundError",
    "UnsupportedValueError",
    "CyclicResolutionError",
    "InvalidBlueprintError",
]


class RegistryError(Exception):
    """Base class for every error raised by the registry."""

    pass


class DuplicateKeyError(RegistryError):
    """Raised when registration would reuse an existing entry id."""

    pass


class NotFoundError(RegistryError, LookupError):
    """Raised when an entry id, or a key along an identifier path, cannot be found."""

    pass


class UnsupportedValueError(RegistryError):
    """Raised when an identifier path runs into a value that cannot be traversed."""

    pass


class CyclicResolutionError(RegistryError):
    """Raised when resolving an entry requires the entry itself."""

    pass


class InvalidBlueprintError(RegistryError):
    """Raised when a blueprint record cannot be interpreted."""

    pass
