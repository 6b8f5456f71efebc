import pytest

from entity_mapping.core.declarations import (
    GraphProperty,
    GraphType,
    KeyProperty,
    ModelProperty,
    RestType,
    concrete_type,
    get_graph_types,
    get_rest_types,
    graph_type,
    iter_model_properties,
    rest_type,
)
from tests.models import List, ListItem, Team, Web

pytestmark = pytest.mark.unit


def test_stacked_declarations_keep_top_down_order():
    declared = get_rest_types(List)

    assert [decl.target.__name__ for decl in declared] == ["Web", "Site"]
    assert all(isinstance(decl, RestType) for decl in declared)
    assert declared[0].update == "_api/web/lists/getbyid(guid'{Id}')/update"


def test_graph_declaration_is_recorded():
    declared = get_graph_types(Team)

    assert len(declared) == 1
    assert isinstance(declared[0], GraphType)
    assert declared[0].beta is True


def test_declarations_are_not_inherited():
    @graph_type(uri="parents/{Id}")
    class Parent:
        pass

    class Child(Parent):
        pass

    assert len(get_graph_types(Parent)) == 1
    assert get_graph_types(Child) == ()
    assert get_rest_types(Parent) == ()


def test_concrete_type_sets_mapping():
    class Impl:
        pass

    @concrete_type(Impl)
    class IThing:
        pass

    assert IThing.__entity_concrete_type__ is Impl


def test_class_access_returns_the_descriptor_token():
    token = List.Title

    assert isinstance(token, ModelProperty)
    assert token.name == "Title"
    assert token.owner is List
    assert repr(token) == "<ModelProperty List.Title>"


def test_instance_values_and_defaults():
    item = List()

    assert item.Title is None
    assert item.Requested is False

    item.Title = "Documents"
    assert item.Title == "Documents"


def test_default_factory_value_is_kept_per_instance():
    first = ListItem()
    second = ListItem()

    first.Values["Status"] = "Done"

    assert first.Values == {"Status": "Done"}
    assert first["Status"] == "Done"
    assert second.Values == {}


def test_key_property_reads_and_writes_through():
    team = Team()
    team.Id = "team-1"

    assert team.Key == "team-1"

    team.Key = "team-2"
    assert team.Id == "team-2"


def test_key_property_name():
    assert Team.Key.key_property_name == "Id"
    assert Team.DisplayName.key_property_name is None


def test_iter_model_properties_order_and_shadowing():
    class Base:
        Name = ModelProperty()
        Shared = ModelProperty(GraphProperty("base"))
        _Hidden = ModelProperty()

    class Derived(Base):
        Extra = ModelProperty()
        Shared = ModelProperty(GraphProperty("derived"))

    class Overridden(Base):
        Name = "plain attribute"

    names = [name for name, _ in iter_model_properties(Derived)]
    assert names == ["Extra", "Shared", "Name"]

    shared = dict(iter_model_properties(Derived))["Shared"]
    assert shared.annotations[0].field_name == "derived"

    assert [name for name, _ in iter_model_properties(Overridden)] == ["Shared"]


def test_web_properties_include_key_alias():
    names = [name for name, _ in iter_model_properties(Web)]

    assert names == ["Title", "ServerRelativeUrl", "Lists", "Id", "Key"]
    assert isinstance(Web.Key.annotations[0], KeyProperty)
