"""
MetadataScanner implementation.

Reads the declarations on a concrete model class and builds its
:class:`EntityStaticInfo`.
"""

import logging
from typing import Optional

from ..core.declarations import (
    GraphProperty,
    GraphType,
    KeyProperty,
    ModelProperty,
    RestProperty,
    RestType,
    SystemProperty,
    get_graph_types,
    get_rest_types,
    iter_model_properties,
)
from ..core.models import OVERFLOW_FIELD_NAME, ExpandoDataModel
from ..core.settings import EntityMappingSettings
from ..exceptions import ConfigurationError
from ..utils.naming import to_camel_case
from .types import EntityFieldInfo, EntityStaticInfo, GraphTypeInfo, RestTypeInfo

logger = logging.getLogger(__name__)


class _ScanState:
    """Mutable working set for one scan."""

    def __init__(self, model: type):
        self.model = model
        self.rest_targets: list[RestTypeInfo] = []
        self.graph_targets: list[GraphTypeInfo] = []
        self.fields: list[EntityFieldInfo] = []
        self.key_property_name: Optional[str] = None
        self.errors: list[str] = []

    def find_field(self, name: str) -> Optional[EntityFieldInfo]:
        lowered = name.lower()
        for entry in self.fields:
            if entry.name.lower() == lowered:
                return entry
        return None


class MetadataScanner:
    """
    Builds static entity metadata from model declarations.

    Scanning is a pure function of the model class, so the result can be
    computed more than once and cached by the caller.
    """

    def __init__(self, settings: Optional[EntityMappingSettings] = None):
        self.settings = settings or EntityMappingSettings()

    def scan(self, model: type) -> EntityStaticInfo:
        """
        Extract static metadata for a concrete model class.

        Raises:
            ConfigurationError: When the model declares no backend mapping, or
                when one or more of its properties cannot be mapped.
        """
        rest_types = get_rest_types(model)
        graph_types = get_graph_types(model)
        if not rest_types and not graph_types:
            raise ConfigurationError(
                f"Model '{model.__name__}' must declare at least one "
                "rest_type or graph_type mapping",
                model_name=model.__name__,
            )

        state = _ScanState(model)
        state.rest_targets = [self._build_rest_target(model, decl) for decl in rest_types]
        state.graph_targets = [self._build_graph_target(model, decl) for decl in graph_types]

        for name, prop in iter_model_properties(model):
            try:
                self._scan_property(state, name, prop)
            except Exception as exc:
                state.errors.append(f"{model.__name__}.{name}: {exc}")

        if state.errors:
            raise ConfigurationError(
                f"Model '{model.__name__}' has {len(state.errors)} invalid "
                f"property declaration(s): {'; '.join(state.errors)}",
                model_name=model.__name__,
                errors=state.errors,
            )

        if state.key_property_name:
            self._apply_key(state)

        use_overflow_field = issubclass(model, ExpandoDataModel)
        if use_overflow_field:
            self._apply_overflow(state)

        return EntityStaticInfo(
            model=model,
            use_overflow_field=use_overflow_field,
            rest_targets=tuple(state.rest_targets),
            graph_targets=tuple(state.graph_targets),
            fields=tuple(entry.seal() for entry in state.fields),
            actual_key_field_name=state.key_property_name or "",
        )

    def _build_rest_target(self, model: type, decl: RestType) -> RestTypeInfo:
        return RestTypeInfo(
            target=decl.target or model,
            type_name=decl.type_name,
            uri=decl.uri,
            get=decl.get or decl.uri,
            list_get=decl.list_get or decl.uri,
            update=decl.update or decl.uri,
            delete=decl.delete or decl.uri,
            overflow_property=decl.overflow_property,
        )

    def _build_graph_target(self, model: type, decl: GraphType) -> GraphTypeInfo:
        return GraphTypeInfo(
            target=decl.target or model,
            id=decl.id or self.settings.graph_key_field,
            uri=decl.uri,
            get=decl.get or decl.uri,
            list_get=decl.list_get or decl.uri,
            update=decl.update or decl.uri,
            delete=decl.delete or decl.uri,
            overflow_property=decl.overflow_property,
            beta=decl.beta,
        )

    def _scan_property(self, state: _ScanState, name: str, prop: ModelProperty) -> None:
        field_info: Optional[EntityFieldInfo] = None
        skip_field = False

        for annotation in prop.annotations:
            if isinstance(annotation, RestProperty):
                field_info = self._ensure_field(state, name, prop)
                field_info.rest_name = annotation.field_name or name
                field_info.rest_expandable = annotation.expandable
                field_info.expand_by_default = annotation.expand_by_default
                field_info.rest_use_custom_mapping = annotation.use_custom_mapping
                field_info.rest_json_path = annotation.json_path
            elif isinstance(annotation, GraphProperty):
                field_info = self._ensure_field(state, name, prop)
                field_info.graph_name = annotation.field_name or to_camel_case(name)
                field_info.graph_expandable = annotation.expandable
                field_info.expand_by_default = annotation.expand_by_default
                field_info.graph_use_custom_mapping = annotation.use_custom_mapping
                field_info.graph_json_path = annotation.json_path
                field_info.graph_get = annotation.get
                field_info.graph_beta = annotation.beta
            elif isinstance(annotation, KeyProperty):
                state.key_property_name = annotation.key_property_name
                skip_field = True
            elif isinstance(annotation, SystemProperty):
                skip_field = True
            else:
                raise TypeError(f"unsupported annotation {annotation!r}")

        if field_info is None and not skip_field:
            field_info = self._ensure_field(state, name, prop)
            if not state.rest_targets:
                field_info.graph_name = to_camel_case(name)
            else:
                # Mixed models opt into graph fields explicitly via GraphProperty.
                field_info.rest_name = name

    def _ensure_field(self, state: _ScanState, name: str, prop: ModelProperty) -> EntityFieldInfo:
        field_info = state.find_field(name)
        if field_info is None:
            if prop.name is None:
                raise TypeError("property is not bound to a class attribute")
            field_info = EntityFieldInfo(name=name, data_type=prop.data_type, accessor=prop)
            state.fields.append(field_info)

        if state.rest_targets and not field_info.rest_name:
            field_info.rest_name = name
        return field_info

    def _apply_key(self, state: _ScanState) -> None:
        key_field = next(
            (entry for entry in state.fields if entry.name == state.key_property_name),
            None,
        )
        if key_field is None:
            logger.warning(
                "Key property '%s' of %s does not match a mapped property",
                state.key_property_name,
                state.model.__name__,
            )
            return

        if state.rest_targets:
            key_field.is_rest_key = True
        key_field.is_graph_key = True
        if not key_field.graph_name:
            key_field.graph_name = to_camel_case(key_field.name)

    def _apply_overflow(self, state: _ScanState) -> None:
        overflow_field = state.find_field(OVERFLOW_FIELD_NAME)
        if overflow_field is None:
            logger.warning(
                "Overflow field '%s' missing on %s",
                OVERFLOW_FIELD_NAME,
                state.model.__name__,
            )
            return

        if state.rest_targets:
            overflow_field.rest_name = state.rest_targets[0].overflow_property
        if state.graph_targets:
            overflow_field.graph_name = state.graph_targets[0].overflow_property

