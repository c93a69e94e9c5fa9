"""Larder: a lazily-resolving component registry.

A registry is a keyed store of deferred values. Each entry is resolved at most
once, on first access, and cached thereafter. Entries come in three kinds:

    - plain values, returned as they were registered
    - factories, called with the container the first time they are needed
    - blueprints, declarative recipes naming a class, its constructor arguments
      and the setter methods to call on the new instance

Entries can also be reached by identifier path: ``registry.load("config.db.url")``
looks up the ``config`` entry and then the ``db`` and ``url`` keys within it,
whether the values along the way are mappings, sequences, nested registries or
plain objects.

Basic Usage:
    >>> from larder.builders import make_registry
    >>>
    >>> registry = make_registry({
    ...     "config": {"db": {"url": "sqlite://"}},
    ...     "database": lambda c: Database(c.load("config.db.url")),
    ... })
    >>> db = registry["database"]

The package consists of several modules:
    - registry: Entry registration, resolution and identifier path loading
    - builders: High-level registry construction functions
    - blueprint: Blueprint parsing and instance construction
    - traversal: Key lookup inside nested values
    - domain: Core domain models (Value, Factory, Blueprint, entry states)
    - errors: Framework-specific exceptions
"""
