from types import SimpleNamespace

import pytest

from larder.domain import Factory, Value
from larder.errors import (
    CyclicResolutionError,
    DuplicateKeyError,
    NotFoundError,
    UnsupportedValueError,
)
from larder.registry import Registry, inferred_name


@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def counter():
    calls = []

    def count(container):
        calls.append(container)
        return len(calls)

    count.calls = calls
    return count


def test_plain_value_is_returned_identically(registry):
    config = {"name": "Arthur Putey"}
    registry.set({"config": config, "answer": 42})

    assert registry.get("config") is config
    assert registry.get("config") is config
    assert registry.get("answer") == 42


def test_factory_is_invoked_once_with_the_registry(registry, counter):
    registry.set({"count": counter})

    assert registry.get("count") == 1
    assert registry.get("count") == 1
    assert counter.calls == [registry]


def test_factory_without_parameters_is_called_without_arguments(registry):
    registry.set({"greeting": lambda: "Hello"})

    assert registry.get("greeting") == "Hello"


def test_factory_can_depend_on_entries_registered_later(registry):
    registry.set({"greeting": lambda c: f"Hello {c.get('name')}"})
    registry.set({"name": "Dominic"})

    assert registry.get("greeting") == "Hello Dominic"


def test_classes_are_stored_as_values(registry):
    class Service:
        def __init__(self, container):
            raise AssertionError("should not be instantiated")

    registry.set({"service_type": Service})

    assert registry.get("service_type") is Service


def test_value_wrapper_stores_callable_itself(registry):
    def greeter(name):
        return f"Hello {name}"

    registry.set({"greeter": Value(greeter)})

    assert registry.get("greeter") is greeter


def test_explicit_factory_wrapper_is_honoured(registry):
    registry.set({"numbers": Factory(lambda: [1, 2, 3])})

    assert registry.get("numbers") == [1, 2, 3]


def test_failed_factory_is_retried_on_next_access(registry):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("not yet")
        return "ready"

    registry.set({"flaky": flaky})

    with pytest.raises(RuntimeError, match="not yet"):
        registry.get("flaky")
    assert not registry.is_resolved("flaky")
    assert registry.get("flaky") == "ready"
    assert registry.is_resolved("flaky")


def test_get_unknown_id_raises(registry):
    with pytest.raises(NotFoundError, match="No entry was found for the identifier 'missing'"):
        registry.get("missing")


def test_not_found_error_is_a_lookup_error(registry):
    with pytest.raises(LookupError):
        registry.get("missing")


def test_has_does_not_resolve(registry, counter):
    registry.set({"count": counter})

    assert registry.has("count")
    assert not registry.has("missing")
    assert not registry.has(42)
    assert counter.calls == []
    assert not registry.is_resolved("count")


def test_duplicate_ids_are_rejected_as_a_batch(registry):
    registry.set({"a": 1})

    with pytest.raises(DuplicateKeyError, match=r"Duplicate entry identifiers: \['a'\]"):
        registry.set({"b": 2, "a": 3})

    assert not registry.has("b")
    assert registry.get("a") == 1


def test_duplicates_between_values_and_blueprints_are_rejected(registry):
    registry.set_blueprints({"thing": {"type": dict}})

    with pytest.raises(DuplicateKeyError):
        registry.set({"thing": 1})
    with pytest.raises(DuplicateKeyError):
        registry.set_blueprints({"other": {"type": dict}, "thing": {"type": list}})

    assert registry.ids() == ["thing"]


def test_non_string_ids_are_rejected(registry):
    with pytest.raises(TypeError, match="Entry identifiers must be strings"):
        registry.set({1: "one"})


def test_self_dependency_is_detected(registry):
    registry.set({"a": lambda c: c.get("b"), "b": lambda c: c.get("a")})

    with pytest.raises(CyclicResolutionError, match="a -> b -> a"):
        registry.get("a")

    assert not registry.is_resolved("a")
    assert not registry.is_resolved("b")


def test_load_traverses_nested_values(registry):
    registry.set({"x": {"y": {"z": 42}}})

    assert registry.load("x.y.z") == 42
    assert registry.load("x.y.w", "fallback") == "fallback"
    with pytest.raises(NotFoundError, match="identifier path key 'w'"):
        registry.load("x.y.w")


def test_load_accepts_none_as_default(registry):
    registry.set({"x": {}})

    assert registry.load("x.y", None) is None
    assert registry.load("missing", None) is None


def test_load_never_suppresses_unsupported_values(registry):
    registry.set({"x": {"y": 42}})

    with pytest.raises(UnsupportedValueError, match="type int"):
        registry.load("x.y.z", "fallback")


def test_load_through_objects_and_nested_registries(registry):
    inner = Registry()
    inner.set({"url": "sqlite://"})
    registry.set({"settings": SimpleNamespace(db=inner, debug=False)})

    assert registry.load("settings.db.url") == "sqlite://"
    assert registry.load("settings.debug") is False


def test_load_head_uses_delegate():
    delegate = Registry()
    delegate.set({"name": "from delegate"})
    registry = Registry(delegate)
    registry.set({"name": "from registry"})

    assert registry.load("name") == "from delegate"
    assert registry.get("name") == "from registry"


class DictContainer:
    def __init__(self, values):
        self._values = values

    def has(self, id):
        return id in self._values

    def get(self, id):
        return self._values[id]


def test_load_defaults_apply_to_foreign_delegates():
    registry = Registry(DictContainer({"a": {"b": 1}}))

    assert registry.load("a.b") == 1
    assert registry.load("missing", "fallback") == "fallback"
    assert registry.load("missing.b", None) is None
    with pytest.raises(NotFoundError, match="identifier 'missing'"):
        registry.load("missing")


def test_factories_receive_the_delegate(counter):
    delegate = Registry()
    registry = Registry(delegate)
    registry.set({"count": counter})

    registry.get("count")

    assert counter.calls == [delegate]
    assert registry.container is delegate


def test_empty_registry_is_still_used_as_container(registry, counter):
    nested = Registry(registry)
    nested.set({"count": counter})

    nested.get("count")

    assert counter.calls == [registry]


def test_mapping_sugar(registry):
    registry["name"] = "Gawain"

    assert "name" in registry
    assert registry["name"] == "Gawain"
    with pytest.raises(DuplicateKeyError):
        registry["name"] = "Arthur"

    del registry["name"]

    assert "name" not in registry
    with pytest.raises(NotFoundError):
        registry["name"]
    with pytest.raises(NotFoundError):
        del registry["name"]


def test_deleted_entry_can_be_registered_again(registry, counter):
    registry.set({"count": counter})
    registry.get("count")
    del registry["count"]

    registry.set({"count": counter})

    assert not registry.is_resolved("count")
    assert registry.get("count") == 2


def test_provides_registers_a_factory(registry):
    @registry.provides()
    def make_greeting(container):
        return "Hello " + container.get("name")

    @registry.provides("name")
    def name():
        return "Dominic"

    assert registry.get("greeting") == "Hello Dominic"
    assert make_greeting(registry) == "Hello Dominic"


def test_ids_are_listed_in_registration_order(registry):
    registry.set({"b": 1, "a": 2})
    registry.set_blueprints({"c": {"type": dict}})

    assert registry.ids() == ["b", "a", "c"]


def test_is_resolved_on_unknown_id_raises(registry):
    with pytest.raises(NotFoundError):
        registry.is_resolved("missing")


def test_inferred_name():
    class Database:
        pass

    def make_database():
        pass

    def my_service():
        pass

    assert inferred_name(Database) == "Database"
    assert inferred_name(make_database) == "database"
    assert inferred_name(my_service) == "my_service"
