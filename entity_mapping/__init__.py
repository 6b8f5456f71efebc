"""
entity-mapping: per-type metadata driving CRUD calls against REST and graph backends.

Usage:
    from entity_mapping import ModelProperty, GraphProperty, graph_type, get_class_info

    @graph_type(uri="teams/{GraphId}")
    class Team(BaseDataModel):
        DisplayName = ModelProperty(data_type=str)
        Channels = ModelProperty(GraphProperty("channels", expandable=True, get="teams/{GraphId}/channels"))
        Id = ModelProperty(data_type=str)
        Key = ModelProperty(KeyProperty("Id"))

    info = get_class_info(Team, None, Team.DisplayName)
"""

from typing import Any, Callable, Optional

from .core import (
    OVERFLOW_FIELD_NAME,
    BaseDataModel,
    EntityMappingSettings,
    EntityTypeRegistry,
    ExpandoDataModel,
    GraphProperty,
    GraphType,
    KeyProperty,
    ModelCollection,
    ModelProperty,
    RestProperty,
    RestType,
    SystemProperty,
    TransientObject,
    concrete_type,
    graph_type,
    rest_type,
)
from .exceptions import (
    ArgumentError,
    ConfigurationError,
    EntityMappingError,
    FieldSelectionError,
)
from .metadata import (
    EntityCallInfo,
    EntityFieldInfo,
    EntityManager,
    EntityStaticInfo,
    GraphTypeInfo,
    RestTypeInfo,
    as_value,
)
from .utils import to_camel_case

__version__ = "0.1.0"

__all__ = [
    "OVERFLOW_FIELD_NAME",
    "BaseDataModel",
    "EntityMappingSettings",
    "EntityTypeRegistry",
    "ExpandoDataModel",
    "GraphProperty",
    "GraphType",
    "KeyProperty",
    "ModelCollection",
    "ModelProperty",
    "RestProperty",
    "RestType",
    "SystemProperty",
    "TransientObject",
    "concrete_type",
    "graph_type",
    "rest_type",
    "ArgumentError",
    "ConfigurationError",
    "EntityMappingError",
    "FieldSelectionError",
    "EntityCallInfo",
    "EntityFieldInfo",
    "EntityManager",
    "EntityStaticInfo",
    "GraphTypeInfo",
    "RestTypeInfo",
    "as_value",
    "to_camel_case",
    "entity_manager",
    "get_entity_manager",
    "get_static_class_info",
    "get_class_info",
    "get_entity_key_expressions",
    "get_concrete_instance",
    "get_transient_instance",
]

# Global entity manager instance
entity_manager = EntityManager()


def get_entity_manager() -> EntityManager:
    """Return the process-wide entity manager."""
    return entity_manager


# Convenience functions
def get_static_class_info(model: type) -> EntityStaticInfo:
    """Get static metadata using the global entity manager."""
    return entity_manager.get_static_class_info(model)


def get_class_info(model: type, target: Any = None, *selectors: Any) -> EntityCallInfo:
    """Get call-scoped metadata using the global entity manager."""
    return entity_manager.get_class_info(model, target, *selectors)


def get_entity_key_expressions(entity: Any) -> tuple[Callable[[Any], Any], ...]:
    """Get key accessors using the global entity manager."""
    return entity_manager.get_entity_key_expressions(entity)


def get_concrete_instance(model: type, parent: Optional[Any] = None) -> Any:
    """Create a model instance using the global entity manager."""
    return entity_manager.get_concrete_instance(model, parent)


def get_transient_instance(model: type) -> TransientObject:
    """Create an untyped model instance using the global entity manager."""
    return entity_manager.get_transient_instance(model)
