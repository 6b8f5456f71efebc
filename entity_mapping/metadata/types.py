"""
Data structures describing entity metadata.
"""

import copy
from dataclasses import FrozenInstanceError, dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from ..core.models import OVERFLOW_FIELD_NAME


@dataclass(frozen=True)
class RestTypeInfo:
    """Resolved REST resource mapping for a model."""

    target: type
    type_name: str
    uri: str
    get: str
    list_get: str
    update: str
    delete: str
    overflow_property: str


@dataclass(frozen=True)
class GraphTypeInfo:
    """Resolved graph resource mapping for a model."""

    target: type
    id: str
    uri: str
    get: str
    list_get: str
    update: str
    delete: str
    overflow_property: str
    beta: bool = False


@dataclass
class EntityFieldInfo:
    """
    Mapping of one model property onto the REST and graph backends.

    Rows belonging to cached static metadata are sealed and reject assignment;
    :meth:`copy` returns a writable row for call-scoped use.
    """

    name: str
    data_type: Any = None
    accessor: Any = None
    rest_name: str = ""
    rest_expandable: bool = False
    rest_use_custom_mapping: bool = False
    rest_json_path: str = ""
    graph_name: str = ""
    graph_expandable: bool = False
    graph_use_custom_mapping: bool = False
    graph_json_path: str = ""
    graph_get: str = ""
    graph_beta: bool = False
    expand_by_default: bool = False
    is_rest_key: bool = False
    is_graph_key: bool = False
    load: bool = True
    _sealed: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if self._sealed:
            raise FrozenInstanceError(f"cannot assign to field '{name}'")
        super().__setattr__(name, value)

    def seal(self) -> "EntityFieldInfo":
        object.__setattr__(self, "_sealed", True)
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def copy(self) -> "EntityFieldInfo":
        clone = copy.copy(self)
        object.__setattr__(clone, "_sealed", False)
        return clone

    @property
    def is_key(self) -> bool:
        return self.is_rest_key or self.is_graph_key

    @property
    def graph_non_expandable_collection(self) -> bool:
        """Graph collections with their own ``get`` are loaded by a follow-up query."""
        return self.graph_expandable and bool(self.graph_get)

    def get_value(self, instance: Any) -> Any:
        return self.accessor.__get__(instance, type(instance))

    def set_value(self, instance: Any, value: Any) -> None:
        self.accessor.__set__(instance, value)


class _EntityInfoMixin:
    """Lookups shared by static and call-scoped metadata."""

    fields: Any
    rest_targets: Any
    graph_targets: Any
    actual_key_field_name: str

    def get_field(self, name: str) -> Optional[EntityFieldInfo]:
        """Find a field by property name, ignoring case."""
        lowered = name.lower()
        for entry in self.fields:
            if entry.name.lower() == lowered:
                return entry
        return None

    @property
    def key_fields(self) -> List[EntityFieldInfo]:
        return [entry for entry in self.fields if entry.is_key]

    @property
    def graph_non_expandable_collections(self) -> List[EntityFieldInfo]:
        return [entry for entry in self.fields if entry.graph_non_expandable_collection]

    @property
    def can_use_rest(self) -> bool:
        return bool(self.rest_targets)

    @property
    def overflow_field(self) -> Optional[EntityFieldInfo]:
        if not self.use_overflow_field:
            return None
        return self.get_field(OVERFLOW_FIELD_NAME)

    @property
    def can_use_graph(self) -> bool:
        return bool(self.graph_targets)


@dataclass(frozen=True)
class EntityStaticInfo(_EntityInfoMixin):
    """Metadata computed once per concrete model type."""

    model: type
    use_overflow_field: bool = False
    rest_targets: Tuple[RestTypeInfo, ...] = ()
    graph_targets: Tuple[GraphTypeInfo, ...] = ()
    fields: Tuple[EntityFieldInfo, ...] = ()
    actual_key_field_name: str = ""


@dataclass
class EntityCallInfo(_EntityInfoMixin):
    """
    Call-scoped copy of :class:`EntityStaticInfo`.

    The field rows are private copies, so flipping ``load`` never touches the
    cached metadata or other callers.
    """

    model: type
    use_overflow_field: bool = False
    rest_targets: Tuple[RestTypeInfo, ...] = ()
    graph_targets: Tuple[GraphTypeInfo, ...] = ()
    fields: List[EntityFieldInfo] = field(default_factory=list)
    actual_key_field_name: str = ""
    rest_fields_loaded_via_selection: bool = False
    graph_fields_loaded_via_selection: bool = False
    selected_fields: List[str] = field(default_factory=list)
    target: Optional[type] = None

    @classmethod
    def from_static(cls, static_info: EntityStaticInfo) -> "EntityCallInfo":
        return cls(
            model=static_info.model,
            use_overflow_field=static_info.use_overflow_field,
            rest_targets=static_info.rest_targets,
            graph_targets=static_info.graph_targets,
            fields=[entry.copy() for entry in static_info.fields],
            actual_key_field_name=static_info.actual_key_field_name,
        )

    @property
    def rest_target(self) -> Optional[RestTypeInfo]:
        """REST mapping for the current context, or the first declared one."""
        return _pick_target(self.rest_targets, self.target)

    @property
    def graph_target(self) -> Optional[GraphTypeInfo]:
        """Graph mapping for the current context, or the first declared one."""
        return _pick_target(self.graph_targets, self.target)

    @property
    def fields_to_load(self) -> List[EntityFieldInfo]:
        return [entry for entry in self.fields if entry.load]

    @property
    def rest_fields_to_load(self) -> List[EntityFieldInfo]:
        return [entry for entry in self.fields_to_load if entry.rest_name]

    @property
    def graph_fields_to_load(self) -> List[EntityFieldInfo]:
        return [entry for entry in self.fields_to_load if entry.graph_name]

    @property
    def graph_beta(self) -> bool:
        """True when the graph target or any field to load needs the beta endpoint."""
        target = self.graph_target
        if target is not None and target.beta:
            return True
        return any(entry.graph_beta for entry in self.graph_fields_to_load)


def _pick_target(targets: Iterable[Any], context: Optional[type]) -> Optional[Any]:
    targets = tuple(targets)
    if not targets:
        return None
    if context is not None:
        for candidate in targets:
            if candidate.target is context:
                return candidate
    return targets[0]
