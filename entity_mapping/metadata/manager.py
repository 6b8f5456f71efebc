"""
EntityManager implementation.

The manager owns the process-wide metadata cache and exposes the operations
request builders use: static metadata lookup, per-call specialization, key
accessors and instance construction.
"""

import logging
import operator
import threading
from typing import Any, Callable, Iterable, Optional

from ..core.registry import EntityTypeRegistry
from ..core.settings import EntityMappingSettings, get_entity_mapping_settings
from ..exceptions import ArgumentError, ConfigurationError
from .scanner import MetadataScanner
from .selectors import FieldSelector
from .types import EntityCallInfo, EntityStaticInfo

logger = logging.getLogger(__name__)


class EntityManager:
    """
    Resolves, caches and specializes entity metadata.

    No lock is held while a model is scanned. The result is published with
    insert-if-absent, so concurrent first access may scan twice but every
    caller ends up with the same cached instance.
    """

    def __init__(
        self,
        registry: Optional[EntityTypeRegistry] = None,
        settings: Optional[EntityMappingSettings] = None,
    ):
        self.registry = registry or EntityTypeRegistry()
        self._settings = settings
        self._cache: dict[type, EntityStaticInfo] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._selector: Optional[FieldSelector] = None

    @property
    def settings(self) -> EntityMappingSettings:
        if self._settings is not None:
            return self._settings
        return get_entity_mapping_settings()

    def _field_selector(self) -> FieldSelector:
        settings = self.settings
        selector = self._selector
        if selector is None or selector.settings is not settings:
            selector = self._selector = FieldSelector(settings)
        return selector

    def get_static_class_info(self, model: type) -> EntityStaticInfo:
        """
        Get the static metadata of a model, scanning it on first use.

        Raises:
            ConfigurationError: When the model declares no backend mapping.
        """
        if model is None:
            raise ArgumentError("A model type is required", argument="model")

        model = self.registry.resolve_concrete_type(model)
        cached = self._cache.get(model)
        if cached is not None:
            with self._lock:
                self._hits += 1
            return cached

        settings = self.settings
        if settings.log_cache_misses:
            logger.debug("Scanning entity metadata for %s", model.__qualname__)
        scanned = MetadataScanner(settings).scan(model)

        with self._lock:
            self._misses += 1
            resident = self._cache.setdefault(model, scanned)
        if resident is not scanned:
            logger.debug("Metadata for %s published concurrently, reusing it", model.__qualname__)
        return resident

    def get_class_info(
        self,
        model: type,
        target: Any = None,
        *selectors: Any,
    ) -> EntityCallInfo:
        """
        Get call-scoped metadata for a model.

        Args:
            model: Model type or interface.
            target: Model instance the call is made for, optional.
            *selectors: Field selectors restricting what the call loads.
        """
        static_info = self.get_static_class_info(model)
        return self._field_selector().specialize(static_info, selectors, target)

    def get_entity_key_expressions(self, entity: Any) -> tuple[Callable[[Any], Any], ...]:
        """
        Build accessors returning the key value of instances of ``entity``'s type.

        Raises:
            ArgumentError: When ``entity`` is None.
            ConfigurationError: When the entity type has no key property.
        """
        if entity is None:
            raise ArgumentError("An entity is required", argument="entity")

        entity_type = type(entity)
        static_info = self.get_static_class_info(entity_type)
        if not static_info.actual_key_field_name:
            raise ConfigurationError(
                f"Invalid domain model configuration for entity "
                f"{entity_type.__module__}.{entity_type.__qualname__}: no key property",
                model_name=entity_type.__name__,
            )
        return (operator.attrgetter(static_info.actual_key_field_name),)

    def get_concrete_instance(self, model: type, parent: Any = None) -> Any:
        """Create an instance of the implementation behind ``model``."""
        return self.registry.create_instance(model, parent=parent)

    def get_transient_instance(self, model: type) -> Any:
        """Create an untyped model instance for ``model``."""
        return self.registry.create_transient_instance(model)

    def warm_cache(self, models: Iterable[type]) -> int:
        """Scan ``models`` ahead of use. Returns the number of models warmed."""
        count = 0
        for model in models:
            self.get_static_class_info(model)
            count += 1
        return count

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_cache_stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
            }
