"""Tests for modeler.model.instance — construction, accessors, dirty tracking."""

import pytest

from modeler import define_kind
from modeler.core.errors import IdentifierImmutableError, UnknownAttributeError


class TestConstruction:
    def test_populates_attrs(self, User):
        user = User({"name": "Tobi", "age": 2})
        assert user.name() == "Tobi"
        assert user.age() == 2

    def test_unknown_keys_ignored(self, User):
        user = User({"name": "Tobi", "color": "brown"})
        assert user.to_dict() == {"name": "Tobi"}

    def test_absent_attrs_read_none(self, User):
        user = User()
        assert user.name() is None
        assert user.has("name") is False
        assert "name" not in user.to_dict()

    def test_defaults_applied(self):
        Pet = define_kind("Pet").attr("id").attr("species", default="Ferret").attr("tags", default=list)
        pet = Pet()
        assert pet.species() == "Ferret"
        assert pet.tags() == []

    def test_callable_defaults_not_shared(self):
        Pet = define_kind("Pet").attr("tags", default=list)
        a, b = Pet(), Pet()
        a.tags().append("x")
        assert b.tags() == []

    def test_bag_value_overrides_default(self):
        Pet = define_kind("Pet").attr("species", default="Ferret")
        assert Pet(species="Cat").species() == "Cat"

    def test_explicit_none_is_stored(self, User):
        user = User({"name": None})
        assert "name" in user.to_dict()
        assert user.has("name") is False

    def test_back_reference(self, User, Pet):
        assert User().kind is User
        assert Pet().kind is Pet

    def test_fresh_state(self, User):
        user = User()
        assert user.errors == []
        assert user.destroyed is False

    def test_repr(self, User):
        assert repr(User(name="Tobi")) == "<User {'name': 'Tobi'}>"


class TestAccessors:
    def test_setter_returns_instance(self, User):
        user = User()
        assert user.name("Tobi") is user
        assert user.name() == "Tobi"

    def test_chained_sets(self, User):
        user = User().name("Tobi").age(3)
        assert user.to_dict() == {"name": "Tobi", "age": 3}

    def test_get(self, User):
        user = User({"name": "Tobi"})
        assert user.get("name") == "Tobi"
        assert user.get("age") is None
        assert user.get("age", 0) == 0

    def test_unknown_attribute_access(self, User):
        user = User()
        with pytest.raises(UnknownAttributeError):
            user.color()
        with pytest.raises(UnknownAttributeError):
            user.get("color")
        assert not hasattr(user, "color")

    def test_private_lookup_is_plain_attribute_error(self, User):
        with pytest.raises(AttributeError):
            User()._nope

    def test_dir_lists_attributes(self, User):
        assert {"id", "name", "age", "save"} <= set(dir(User()))

    def test_set_many(self, User):
        user = User()
        assert user.set({"name": "Tobi", "age": 2}) is user
        assert user.name() == "Tobi"
        assert user.age() == 2

    def test_set_keywords_and_unknown_keys(self, User):
        user = User().set({"name": "Tobi"}, age=4, color="brown")
        assert user.to_dict() == {"name": "Tobi", "age": 4}

    def test_has(self, User):
        user = User({"name": "Tobi", "age": 0})
        assert user.has("name") is True
        assert user.has("age") is True
        assert user.has("id") is False
        assert user.has("color") is False


class TestChangeEvents:
    def test_change_attr_event(self, User):
        user = User({"name": "Tobi"})
        seen = []
        user.on("change name", lambda val, old: seen.append((val, old)))

        user.name("Luna")

        assert seen == [("Luna", "Tobi")]

    def test_generic_change_event(self, User):
        user = User({"name": "Tobi"})
        seen = []
        user.on("change", lambda prop, val, old: seen.append((prop, val, old)))

        user.name("Luna")

        assert seen == [("name", "Luna", "Tobi")]

    def test_specific_event_before_generic(self, User):
        user = User({"name": "Tobi"})
        order = []
        user.on("change", lambda *args: order.append("change"))
        user.on("change name", lambda *args: order.append("change name"))

        user.name("Luna")

        assert order == ["change name", "change"]

    def test_unchanged_value_emits_nothing(self, User):
        user = User({"name": "Tobi"})
        seen = []
        user.on("change", lambda *args: seen.append(args))
        user.on("change name", lambda *args: seen.append(args))

        user.name("Tobi")

        assert seen == []

    def test_first_assignment_reports_none_as_old(self, User):
        user = User()
        seen = []
        user.on("change age", lambda val, old: seen.append((val, old)))

        user.age(1)

        assert seen == [(1, None)]

    def test_set_emits_one_pair_per_changed_attr(self, User):
        user = User({"name": "Tobi", "age": 2})
        seen = []
        user.on("change", lambda prop, val, old: seen.append(prop))

        user.set({"name": "Tobi", "age": 3, "id": None})

        assert seen == ["age", "id"]

    def test_instances_do_not_share_buses(self, User):
        a, b = User(), User()
        seen = []
        a.on("change", lambda *args: seen.append("a"))

        b.name("Tobi")

        assert seen == []

    def test_instance_event_api_chains(self, User):
        user = User()
        calls = []

        def listener():
            calls.append(1)

        assert user.on("ping", listener) is user
        assert user.emit("ping") is True
        assert user.off("ping", listener) is user
        assert user.once("ping", listener) is user
        user.emit("ping")
        user.emit("ping")
        assert calls == [1, 1]
        assert user.events.listener_count("ping") == 0


class TestIsNew:
    def test_defaults_to_true(self, User):
        assert User().is_new() is True

    def test_false_when_primary_key_present(self, User):
        assert User({"id": 0}).is_new() is False

    def test_none_identifier_is_new(self, User):
        assert User({"id": None}).is_new() is True

    def test_explicit_primary_key(self):
        Doc = define_kind("Doc").attr("slug", primary=True).attr("title")
        assert Doc(title="x").is_new() is True
        assert Doc(slug="intro").is_new() is False

    def test_kind_without_identifier_attr_is_always_new(self):
        Note = define_kind("Note").attr("text")
        assert Note({"text": "hi", "id": 4}).is_new() is True


class TestChanged:
    def test_clean_instance(self, Pet):
        assert not Pet().changed()
        assert Pet().changed() is False

    def test_constructed_values_are_dirty(self, Pet):
        pet = Pet({"name": "Tobi"})
        assert pet.changed() == {"name": None}
        assert pet.changed("name") is True
        assert pet.changed("species") is False
        assert pet.changes() == {"name": "Tobi"}

    def test_defaults_are_not_dirty(self):
        Pet = define_kind("Pet").attr("id").attr("species", default="Ferret")
        assert Pet().changed() is False

    def test_hydrated_instance_is_clean(self, Pet):
        pet = Pet({"id": 7, "name": "Tobi", "species": "Ferret"})
        assert pet.changed() is False
        assert pet.changed("name") is False

    def test_records_value_before_first_change(self, Pet):
        pet = Pet({"id": 7, "name": "Tobi"})
        pet.name("Luna")
        pet.name("Loki")

        assert pet.changed() == {"name": "Tobi"}
        assert pet.changes() == {"name": "Loki"}

    def test_reverting_clears_entry(self, Pet):
        pet = Pet({"id": 7, "name": "Tobi"})
        pet.name("Luna")
        pet.name("Tobi")

        assert pet.changed() is False

    def test_unchanged_set_is_not_dirty(self, Pet):
        pet = Pet({"id": 7, "name": "Tobi"})
        pet.name("Tobi")
        assert pet.changed("name") is False

    def test_changed_returns_copy(self, Pet):
        pet = Pet({"id": 7, "name": "Tobi"})
        pet.name("Luna")
        pet.changed()["species"] = "x"
        assert pet.changed() == {"name": "Tobi"}


class TestIdentifier:
    def test_hydrated_identifier_cannot_change(self, Pet):
        pet = Pet({"id": 7, "name": "Tobi"})
        with pytest.raises(IdentifierImmutableError) as exc_info:
            pet.id(8)
        assert exc_info.value.context.identifier == 7
        assert pet.id() == 7

    def test_same_identifier_is_noop(self, Pet):
        pet = Pet({"id": 7})
        assert pet.id(7) is pet

    def test_new_instance_identifier_is_assignable(self, Pet):
        pet = Pet()
        pet.id(3)
        assert pet.id() == 3


class TestToDict:
    def test_returns_attributes(self, User):
        obj = User({"name": "Tobi", "age": 2}).to_dict()
        assert obj["name"] == "Tobi"
        assert obj["age"] == 2

    def test_declaration_order(self, User):
        user = User()
        user.age(2).name("Tobi").id(1)
        assert list(user.to_dict()) == ["id", "name", "age"]

    def test_to_json_alias(self, User):
        user = User({"name": "Tobi"})
        assert user.to_json() == user.to_dict()

    def test_round_trip(self, User):
        user = User({"id": 5, "name": "Tobi", "age": 2})
        copy = User(user.to_dict())
        assert copy.to_dict() == user.to_dict()
        assert copy.name() == "Tobi" and copy.age() == 2 and copy.id() == 5

    def test_returns_new_dict(self, User):
        user = User({"name": "Tobi"})
        user.to_dict()["name"] = "changed"
        assert user.name() == "Tobi"
