"""
EntityTypeRegistry implementation.

Resolves interface classes onto their implementations and builds model
instances through registered factory functions.
"""

import logging
import threading
from typing import Any, Callable, Optional, Union

from django.utils.module_loading import import_string

from ..exceptions import ArgumentError, ConfigurationError
from .declarations import CONCRETE_TYPE_ATTR
from .models import BaseDataModel, TransientObject

logger = logging.getLogger(__name__)


class EntityTypeRegistry:
    """
    Registry of interface to implementation mappings and model factories.
    """

    def __init__(self):
        self._concrete_types: dict[type, Union[type, str]] = {}
        self._factories: dict[type, Callable[[], Any]] = {}
        self._lock = threading.Lock()

    def register_concrete_type(self, interface: type, concrete: Union[type, str]) -> None:
        """Map ``interface`` onto ``concrete`` (a class or a dotted import path)."""
        with self._lock:
            if interface in self._concrete_types:
                logger.info(
                    "Concrete type for '%s' already registered, updating...",
                    interface.__name__,
                )
            self._concrete_types[interface] = concrete

    def register_factory(self, model: type, factory: Callable[[], Any]) -> None:
        """Use ``factory`` instead of ``model()`` when instances of ``model`` are built."""
        with self._lock:
            self._factories[model] = factory

    def unregister(self, model: type) -> None:
        with self._lock:
            self._concrete_types.pop(model, None)
            self._factories.pop(model, None)

    def resolve_concrete_type(self, model: type) -> type:
        """
        Translate an interface into its registered implementation.

        Explicit registrations take precedence over a ``@concrete_type``
        declaration on the interface. Types without a mapping are returned
        unchanged.
        """
        target = self._concrete_types.get(model)
        if target is None:
            target = getattr(model, "__dict__", {}).get(CONCRETE_TYPE_ATTR)
        if target is None:
            return model
        if isinstance(target, str):
            target = import_string(target)
        return target

    def create_instance(self, model: Optional[type], parent: Optional[Any] = None) -> Any:
        """
        Build an instance of the implementation behind ``model``.

        Args:
            model: Reference type, an interface or a concrete class.
            parent: Parent attached to models that track one.

        Raises:
            ArgumentError: When ``model`` is None.
        """
        if model is None:
            raise ArgumentError("A model type is required", argument="model")

        concrete = self.resolve_concrete_type(model)
        factory = self._factories.get(concrete, concrete)
        instance = factory()
        if isinstance(instance, BaseDataModel):
            instance.parent = parent
        return instance

    def create_transient_instance(self, model: Optional[type]) -> TransientObject:
        """Build an untyped model instance for ``model``."""
        if model is None:
            raise ArgumentError("A model type is required", argument="model")

        concrete = self.resolve_concrete_type(model)
        factory = self._factories.get(concrete, concrete)
        instance = factory()
        if not isinstance(instance, TransientObject):
            raise ConfigurationError(
                f"{concrete.__name__} does not produce TransientObject instances",
                model_name=concrete.__name__,
            )
        return instance
