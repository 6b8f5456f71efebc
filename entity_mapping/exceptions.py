"""
Custom exceptions for entity metadata resolution.

This module defines the error taxonomy raised while resolving, caching and
specializing entity metadata.
"""

from typing import Any, List, Optional

from django.core.exceptions import ImproperlyConfigured


class EntityMappingError(Exception):
    """Base exception for entity mapping errors."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        self.model_name = model_name
        super().__init__(message)


class ConfigurationError(EntityMappingError, ImproperlyConfigured):
    """Raised when a model's declarations cannot produce valid metadata."""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ):
        self.errors = list(errors or [])
        super().__init__(message, model_name)


class ArgumentError(EntityMappingError, ValueError):
    """Raised when a required argument is missing."""

    def __init__(self, message: str, argument: Optional[str] = None):
        self.argument = argument
        super().__init__(message)


class FieldSelectionError(EntityMappingError):
    """Raised in strict mode when a field selector does not name a single field."""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        selector: Optional[Any] = None,
    ):
        self.selector = selector
        super().__init__(message, model_name)
