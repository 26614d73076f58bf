import logging

import pytest

from chainrules.errors import UnknownFactTypeError
from chainrules.fact_types import TypeRegistry
from chainrules.facts import FactStore


def _store(*classes) -> FactStore:
    types = TypeRegistry()
    for cls in classes:
        types.register_class(cls)
    return FactStore(types)


def test_add_appends_to_existing_type(hour_type):
    store = _store(hour_type)
    assert store.add(hour_type(1)) == "hour"
    assert store.add(hour_type(2)) == "hour"

    assert len(store) == 1
    assert store.get("Hour").values == [hour_type(1), hour_type(2)]


def test_value_of_returns_scalar_for_single_fact(hour_type):
    store = _store(hour_type)
    store.add(hour_type(7))
    assert store.value_of("HOUR") == hour_type(7)

    store.add(hour_type(8))
    assert store.value_of("hour") == [hour_type(7), hour_type(8)]


def test_value_of_unknown_type_raises_key_error(hour_type):
    store = _store(hour_type)
    with pytest.raises(KeyError):
        store.value_of("hour")


def test_add_unclassifiable_value_is_logged_not_raised(hour_type, caplog):
    store = _store(hour_type)
    with caplog.at_level(logging.WARNING, logger="chainrules.facts"):
        assert store.add("not an hour") is None

    assert len(store) == 0
    assert "could not store fact" in caplog.text


def test_add_survives_failing_classifier(hour_type):
    types = TypeRegistry()

    def _explode(value):
        raise RuntimeError("classifier broke")

    types.register("broken", _explode)
    store = FactStore(types)
    assert store.add(hour_type(1)) is None
    assert store.type_names() == []


def test_declare_replaces_collection_and_wraps_scalars():
    store = _store()
    store.declare("Countries", lambda: ["China", "France"])
    assert store.value_of("countries") == ["China", "France"]

    store.declare("countries", lambda: "France")
    assert store.value_of("countries") == "France"
    assert store.get("countries").values == ["France"]


def test_declare_calls_producer_once():
    calls = []

    def _producer():
        calls.append(1)
        return [1, 2, 3]

    store = _store()
    store.declare("numbers", _producer)
    store.value_of("numbers")
    store.snapshot()
    assert calls == [1]


def test_clear_empties_store(hour_type):
    store = _store(hour_type)
    store.add(hour_type(1))
    store.declare("countries", lambda: ["France"])
    store.clear()

    assert len(store) == 0
    assert not store.has_values("hour")
    assert "countries" not in store


def test_type_registry_first_match_wins():
    types = TypeRegistry()
    types.register("flag", lambda v: isinstance(v, bool))
    types.register_class(int, "number")

    assert types.classify(True) == "flag"
    assert types.classify(3) == "number"
    with pytest.raises(UnknownFactTypeError):
        types.classify("three")


def test_type_registry_rejects_empty_name_and_non_callable():
    types = TypeRegistry()
    with pytest.raises(ValueError):
        types.register("  ", int)
    with pytest.raises(TypeError):
        types.register("number", 3)
