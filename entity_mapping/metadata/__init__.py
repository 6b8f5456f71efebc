"""
Entity metadata resolution package.
"""

from .manager import EntityManager
from .scanner import MetadataScanner
from .selectors import FieldSelector, as_value, resolve_context_type, resolve_selector
from .types import (
    EntityCallInfo,
    EntityFieldInfo,
    EntityStaticInfo,
    GraphTypeInfo,
    RestTypeInfo,
)

__all__ = [
    "EntityManager",
    "MetadataScanner",
    "FieldSelector",
    "as_value",
    "resolve_context_type",
    "resolve_selector",
    "EntityCallInfo",
    "EntityFieldInfo",
    "EntityStaticInfo",
    "GraphTypeInfo",
    "RestTypeInfo",
]
