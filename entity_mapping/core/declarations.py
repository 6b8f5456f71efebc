"""
Declarative mapping configuration for entity models.

Models describe how they map onto the REST and graph backends from a single
place: class decorators declare the type-level resources and ``ModelProperty``
descriptors carry the field-level annotations:

    @rest_type(uri="_api/web/lists(guid'{Id}')", type_name="SP.List")
    @graph_type(uri="sites/{Parent.GraphId}/lists/{GraphId}")
    class List(BaseDataModel):
        Title = ModelProperty(data_type=str)
        Items = ModelProperty(
            GraphProperty("items", expandable=True, get="sites/{Site.GraphId}/lists/{GraphId}/items"),
            RestProperty("Items", expandable=True),
        )
        Id = ModelProperty(data_type=uuid.UUID)
        Key = ModelProperty(KeyProperty("Id"))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

REST_TYPES_ATTR = "__entity_rest_types__"
GRAPH_TYPES_ATTR = "__entity_graph_types__"
CONCRETE_TYPE_ATTR = "__entity_concrete_type__"


@dataclass(frozen=True)
class RestType:
    """
    Type-level mapping onto a REST resource.

    Attributes:
        uri: Resource URI template.
        target: Owner type this mapping applies to; defaults to the decorated type.
        type_name: REST entity type name (for example ``SP.List``).
        get: Get URI override, falls back to ``uri``.
        list_get: URI override for list queries, falls back to ``uri``.
        update: Update URI override, falls back to ``uri``.
        delete: Delete URI override, falls back to ``uri``.
        overflow_property: Backend property feeding the overflow field.
    """

    uri: str = ""
    target: Optional[type] = None
    type_name: str = ""
    get: str = ""
    list_get: str = ""
    update: str = ""
    delete: str = ""
    overflow_property: str = ""


@dataclass(frozen=True)
class GraphType:
    """
    Type-level mapping onto a graph resource.

    Attributes match :class:`RestType`, plus ``id`` (name of the graph key
    property, empty means the configured default) and ``beta``.
    """

    uri: str = ""
    target: Optional[type] = None
    id: str = ""
    get: str = ""
    list_get: str = ""
    update: str = ""
    delete: str = ""
    overflow_property: str = ""
    beta: bool = False


@dataclass(frozen=True)
class RestProperty:
    """Field-level REST mapping."""

    field_name: str = ""
    expandable: bool = False
    expand_by_default: bool = False
    use_custom_mapping: bool = False
    json_path: str = ""


@dataclass(frozen=True)
class GraphProperty:
    """Field-level graph mapping. ``get`` marks a collection loaded by its own query."""

    field_name: str = ""
    expandable: bool = False
    expand_by_default: bool = False
    use_custom_mapping: bool = False
    json_path: str = ""
    get: str = ""
    beta: bool = False


@dataclass(frozen=True)
class KeyProperty:
    """Marks a property as an alias for the model's key property."""

    key_property_name: str


@dataclass(frozen=True)
class SystemProperty:
    """Excludes a property from the mapped shape."""


class ModelProperty:
    """
    Descriptor declaring a mapped model property.

    Accessed on the class it returns itself, which makes ``Model.Field`` a
    typed field selector token. Accessed on an instance it reads the stored
    value; a property annotated with :class:`KeyProperty` reads and writes
    through to the key property it names.
    """

    def __init__(
        self,
        *annotations: Any,
        data_type: Any = Any,
        default: Any = None,
        default_factory: Optional[Callable[[], Any]] = None,
    ):
        self.annotations = tuple(annotations)
        self.data_type = data_type
        self.default = default
        self.default_factory = default_factory
        self.name: Optional[str] = None
        self.owner: Optional[type] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner
        self.name = name

    @property
    def key_property_name(self) -> Optional[str]:
        for annotation in self.annotations:
            if isinstance(annotation, KeyProperty):
                return annotation.key_property_name
        return None

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        key_name = self.key_property_name
        if key_name:
            return getattr(instance, key_name)
        values = instance.__dict__
        if self.name not in values:
            if self.default_factory is None:
                return self.default
            values[self.name] = self.default_factory()
        return values[self.name]

    def __set__(self, instance: Any, value: Any) -> None:
        key_name = self.key_property_name
        if key_name:
            setattr(instance, key_name, value)
            return
        instance.__dict__[self.name] = value

    def __repr__(self) -> str:
        owner = self.owner.__name__ if self.owner else "?"
        return f"<ModelProperty {owner}.{self.name}>"


def _declare(attr: str, declaration: Any) -> Callable[[type], type]:
    def decorator(cls: type) -> type:
        # Decorators apply bottom-up; keep the top-most declaration first.
        declared = list(cls.__dict__.get(attr, ()))
        declared.insert(0, declaration)
        setattr(cls, attr, tuple(declared))
        return cls

    return decorator


def rest_type(uri: str = "", **options: Any) -> Callable[[type], type]:
    """Declare a REST resource mapping on a model class. May be stacked."""
    return _declare(REST_TYPES_ATTR, RestType(uri=uri, **options))


def graph_type(uri: str = "", **options: Any) -> Callable[[type], type]:
    """Declare a graph resource mapping on a model class. May be stacked."""
    return _declare(GRAPH_TYPES_ATTR, GraphType(uri=uri, **options))


def concrete_type(target: Union[type, str]) -> Callable[[type], type]:
    """
    Map an interface class onto its implementation.

    ``target`` may be the class itself or a dotted import path, which lets an
    interface module name an implementation defined later.
    """

    def decorator(cls: type) -> type:
        setattr(cls, CONCRETE_TYPE_ATTR, target)
        return cls

    return decorator


def get_rest_types(model: type) -> tuple[RestType, ...]:
    """REST declarations made directly on ``model`` (not inherited)."""
    return tuple(model.__dict__.get(REST_TYPES_ATTR, ()))


def get_graph_types(model: type) -> tuple[GraphType, ...]:
    """Graph declarations made directly on ``model`` (not inherited)."""
    return tuple(model.__dict__.get(GRAPH_TYPES_ATTR, ()))


def iter_model_properties(model: type):
    """
    Yield ``(name, ModelProperty)`` for every public mapped property of a model.

    Properties declared on the model come first, then those inherited from its
    bases; a name shadowed by a subclass is reported once.
    """
    seen: set[str] = set()
    for klass in model.__mro__:
        for name, attr in vars(klass).items():
            if name in seen or name.startswith("_"):
                continue
            seen.add(name)
            if isinstance(attr, ModelProperty):
                yield name, attr
