import pytest

from paymentgw.ddd.entity import Entity, set_id, set_name
from paymentgw.registry.registry import Registry


def test_equals_compares_ids_only():
    assert Entity("a", "one").equals(Entity("a", "two"))
    assert not Entity("a", "one").equals(Entity("b", "one"))


def test_set_id_option():
    entity = Entity("old", "thing")
    set_id("new")(entity)
    assert entity.id == "new"


def test_set_name_option():
    entity = Entity("x", "old")
    set_name("renamed")(entity)
    assert entity.name == "renamed"


def test_set_id_on_value_without_id_raises():
    with pytest.raises(TypeError):
        set_id("x")(5)


def test_set_name_on_value_without_name_raises():
    with pytest.raises(TypeError):
        set_name("x")(object())


def test_options_applied_by_registry_build():
    reg = Registry()
    reg.register("entity", lambda: Entity("", ""), bytes, lambda d, v: None, None)
    built = reg.build("entity", set_id("id-1"), set_name("entity"))
    assert (built.id, built.name) == ("id-1", "entity")