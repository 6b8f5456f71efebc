"""
EntityMappingSettings implementation.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, List, Optional

from django.conf import settings as django_settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from ..defaults import LIBRARY_DEFAULTS, merge_settings

SETTINGS_NAME = "ENTITY_MAPPING"


def _get_project_settings() -> dict[str, Any]:
    """Get the ``ENTITY_MAPPING`` dictionary from Django settings."""
    project_settings = getattr(django_settings, SETTINGS_NAME, None) or {}
    if not isinstance(project_settings, dict):
        return {}
    return project_settings


@dataclass
class EntityMappingSettings:
    """Settings controlling metadata resolution."""

    strict_field_selection: bool = False
    graph_key_field: str = "id"
    warm_on_startup: List[str] = field(default_factory=list)
    log_cache_misses: bool = True

    @classmethod
    def from_settings(cls, **overrides: Any) -> "EntityMappingSettings":
        merged = merge_settings(LIBRARY_DEFAULTS, _get_project_settings())
        merged = merge_settings(merged, overrides)
        valid_fields = set(cls.__dataclass_fields__.keys())
        return cls(**{k: v for k, v in merged.items() if k in valid_fields})


_resolved_settings: Optional[EntityMappingSettings] = None
_resolved_lock = threading.Lock()


def get_entity_mapping_settings() -> EntityMappingSettings:
    """
    Get the project settings, resolved once and reused until they change.
    """
    global _resolved_settings
    resolved = _resolved_settings
    if resolved is None:
        with _resolved_lock:
            if _resolved_settings is None:
                _resolved_settings = EntityMappingSettings.from_settings()
            resolved = _resolved_settings
    return resolved


def reset_entity_mapping_settings() -> None:
    global _resolved_settings
    with _resolved_lock:
        _resolved_settings = None


@receiver(setting_changed)
def _reload_entity_mapping_settings(sender, setting=None, **kwargs):
    if setting == SETTINGS_NAME:
        reset_entity_mapping_settings()
