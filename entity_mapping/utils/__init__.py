"""
Utility helpers for entity-mapping.
"""

from .naming import to_camel_case

__all__ = ["to_camel_case"]
