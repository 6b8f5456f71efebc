"""
Core building blocks: declarations, model base classes, type registry and settings.
"""

from .declarations import (
    GraphProperty,
    GraphType,
    KeyProperty,
    ModelProperty,
    RestProperty,
    RestType,
    SystemProperty,
    concrete_type,
    graph_type,
    rest_type,
)
from .models import (
    OVERFLOW_FIELD_NAME,
    BaseDataModel,
    ExpandoDataModel,
    ModelCollection,
    TransientObject,
)
from .registry import EntityTypeRegistry
from .settings import EntityMappingSettings, get_entity_mapping_settings

__all__ = [
    "GraphProperty",
    "GraphType",
    "KeyProperty",
    "ModelProperty",
    "RestProperty",
    "RestType",
    "SystemProperty",
    "concrete_type",
    "graph_type",
    "rest_type",
    "OVERFLOW_FIELD_NAME",
    "BaseDataModel",
    "ExpandoDataModel",
    "ModelCollection",
    "TransientObject",
    "EntityTypeRegistry",
    "EntityMappingSettings",
    "get_entity_mapping_settings",
]
