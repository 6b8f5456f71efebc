"""
Field selection for per-call metadata.

Callers restrict what a request loads by passing field selectors. A selector
is one of:

- a field token, ``List.Title`` (class access on a ``ModelProperty``),
- a property name, ``"Title"``,
- a boxed selector, ``as_value(List.Id)``,
- a callable, ``lambda l: l.Title``, evaluated against a recording probe.

Each selector must name exactly one property of the model itself.
"""

import logging
from typing import Any, Iterable, Optional

from ..core.declarations import ModelProperty
from ..core.models import ModelCollection
from ..core.settings import EntityMappingSettings
from ..exceptions import FieldSelectionError
from .types import EntityCallInfo, EntityStaticInfo

logger = logging.getLogger(__name__)


class MemberAccess:
    """Attribute access recorded by a selector probe."""

    __slots__ = ("name", "owner")

    def __init__(self, name: str, owner: Any):
        self.name = name
        self.owner = owner

    def __getattr__(self, name: str) -> "MemberAccess":
        if name.startswith("__"):
            raise AttributeError(name)
        return MemberAccess(name, self)

    def __repr__(self) -> str:
        return f"<MemberAccess {self.name}>"


class SelectorProbe:
    """Stand-in model instance handed to callable selectors."""

    __slots__ = ()

    def __getattr__(self, name: str) -> MemberAccess:
        if name.startswith("__"):
            raise AttributeError(name)
        return MemberAccess(name, self)


class BoxedSelector:
    """Selector wrapped in a value conversion."""

    __slots__ = ("operand",)

    def __init__(self, operand: Any):
        self.operand = operand

    def __repr__(self) -> str:
        return f"as_value({self.operand!r})"


def as_value(selector: Any) -> BoxedSelector:
    """Box a selector, for example one whose value is not a plain object."""
    return BoxedSelector(selector)


def _is_probe_member(value: Any) -> bool:
    return isinstance(value, MemberAccess) and isinstance(value.owner, SelectorProbe)


def _resolve_member(selector: Any) -> Any:
    """
    Unwrap a selector to the member it refers to.

    Direct selectors may be a field token or a name. A callable selector must
    return a single member access of its argument. Either may be boxed once.
    Returns None for anything else.
    """
    if callable(selector) and not isinstance(selector, (type, ModelProperty, BoxedSelector)):
        try:
            result = selector(SelectorProbe())
        except (AttributeError, TypeError):
            return None
        if isinstance(result, BoxedSelector):
            result = result.operand
        return result if _is_probe_member(result) else None

    if isinstance(selector, BoxedSelector):
        selector = selector.operand
    if isinstance(selector, ModelProperty) and selector.name:
        return selector
    if isinstance(selector, str) and selector:
        return selector
    return None


def _member_name(member: Any) -> Optional[str]:
    if isinstance(member, ModelProperty):
        return member.name
    if isinstance(member, MemberAccess):
        return member.name
    return member


def resolve_selector(selector: Any) -> Optional[str]:
    """
    Return the property name a selector refers to.

    Returns None for anything that is not a single direct member access or
    one boxed member access (compound paths, method calls, other values).
    """
    member = _resolve_member(selector)
    if member is None:
        return None
    return _member_name(member)


def resolve_context_type(target: Any) -> Optional[type]:
    """
    Type of the model a target was loaded through.

    A collection in between is skipped, so an item loaded via ``web.lists``
    reports the web, not the collection.
    """
    parent = getattr(target, "parent", None)
    if isinstance(parent, ModelCollection):
        parent = parent.parent
    if parent is None:
        return None
    return type(parent)


class FieldSelector:
    """Specializes static metadata for a single call."""

    def __init__(self, settings: Optional[EntityMappingSettings] = None):
        self.settings = settings or EntityMappingSettings()

    def specialize(
        self,
        static_info: EntityStaticInfo,
        selectors: Iterable[Any] = (),
        target: Any = None,
    ) -> EntityCallInfo:
        """
        Build an :class:`EntityCallInfo` reflecting the caller's field selection.

        Args:
            static_info: Cached metadata for the model.
            selectors: Field selectors; empty means no restriction.
            target: Model instance the call is made for, used to find its context.
        """
        call_info = EntityCallInfo.from_static(static_info)
        selectors = list(selectors or ())

        if selectors:
            non_expandable = {
                entry.name.lower() for entry in call_info.graph_non_expandable_collections
            }
            rest_fields: list[str] = []
            graph_fields: list[str] = []
            for selector in selectors:
                name = self._resolve(static_info, selector)
                if name is None:
                    continue
                # Non expandable collections are loaded by a separate query.
                if name.lower() not in non_expandable:
                    graph_fields.append(name)
                rest_fields.append(name)

            if graph_fields:
                call_info.graph_fields_loaded_via_selection = True
                selected = {name.lower() for name in rest_fields}
                for entry in call_info.fields:
                    if entry.name.lower() not in selected:
                        entry.load = False

            if rest_fields:
                call_info.rest_fields_loaded_via_selection = True
            call_info.selected_fields = rest_fields

        for entry in call_info.key_fields:
            entry.load = True

        if target is not None:
            call_info.target = resolve_context_type(target)

        return call_info

    def _resolve(self, static_info: EntityStaticInfo, selector: Any) -> Optional[str]:
        model = static_info.model
        member = _resolve_member(selector)
        if member is None:
            reason = "not a single property access"
        elif isinstance(member, ModelProperty) and member.owner not in model.__mro__:
            reason = f"property of {member.owner.__name__ if member.owner else '?'}"
        elif static_info.get_field(_member_name(member)) is None:
            reason = "no such mapped property"
        else:
            return _member_name(member)

        if self.settings.strict_field_selection:
            raise FieldSelectionError(
                f"Selector {selector!r} does not select a property of {model.__name__}: {reason}",
                model_name=model.__name__,
                selector=selector,
            )
        logger.warning("Ignoring selector %r on %s: %s", selector, model.__name__, reason)
        return None
