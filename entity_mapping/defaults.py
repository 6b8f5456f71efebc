"""
Default configuration for the entity-mapping library.

Every setting the library consumes is listed here; projects override them
through the ``ENTITY_MAPPING`` dictionary in their Django settings.
"""

from __future__ import annotations

from typing import Any

LIBRARY_VERSION = "0.1.0"
LIBRARY_NAME = "entity-mapping"

LIBRARY_DEFAULTS: dict[str, Any] = {
    # Raise FieldSelectionError for selectors that do not name one field
    # instead of skipping them.
    "strict_field_selection": False,
    # Graph key property used when a GraphType declaration leaves ``id`` empty.
    "graph_key_field": "id",
    # Dotted model paths scanned when the app registry is ready.
    "warm_on_startup": [],
    "log_cache_misses": True,
}


def merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge settings dictionaries, values from ``override`` win."""
    result = dict(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_settings(result[key], value)
        else:
            result[key] = value
    return result
