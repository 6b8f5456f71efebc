"""
Django app configuration for the entity-mapping library.

On startup the app optionally scans the models listed in
``ENTITY_MAPPING["warm_on_startup"]`` so the first requests find their
metadata cached.
"""

import logging

from django.apps import AppConfig as BaseAppConfig
from django.conf import settings as django_settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class EntityMappingConfig(BaseAppConfig):
    """Django app configuration for entity-mapping."""

    name = "entity_mapping"
    verbose_name = "Entity Mapping"
    label = "entity_mapping"

    def ready(self):
        """Warm the metadata cache once Django has loaded."""
        try:
            self._warm_metadata_cache()
        except Exception as e:
            logger.error(f"Error warming entity metadata cache: {e}")
            if getattr(django_settings, "DEBUG", False):
                raise

    def _warm_metadata_cache(self):
        from . import entity_manager

        model_paths = entity_manager.settings.warm_on_startup
        if not model_paths:
            return

        models = [import_string(path) for path in model_paths]
        warmed = entity_manager.warm_cache(models)
        logger.info("Warmed entity metadata for %s models", warmed)
