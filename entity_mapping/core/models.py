"""
Base classes for entity models.

Every mapped model derives from :class:`TransientObject`. Models that live in
a parent/child hierarchy derive from :class:`BaseDataModel`; models that absorb
backend properties not declared statically derive from
:class:`ExpandoDataModel`.
"""

from typing import Any, Iterable, Iterator, Optional

from .declarations import ModelProperty

# Name of the single field that carries undeclared backend properties.
OVERFLOW_FIELD_NAME = "Values"


class TransientObject:
    """Untyped base for all entity models."""

    def __init__(self, **values: Any):
        for name, value in values.items():
            setattr(self, name, value)


class BaseDataModel(TransientObject):
    """Model that knows the object it was loaded through."""

    def __init__(self, parent: Optional[Any] = None, **values: Any):
        self.parent = parent
        super().__init__(**values)


class ExpandoDataModel(BaseDataModel):
    """Model with an overflow field for dynamically shaped resources."""

    Values = ModelProperty(data_type=dict, default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.Values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.Values[key] = value


class ModelCollection(BaseDataModel):
    """
    Plain collection wrapper between a model and its children.

    Children loaded through a collection have the collection as parent; the
    owning model is the collection's parent.
    """

    def __init__(self, parent: Optional[Any] = None, items: Optional[Iterable[Any]] = None):
        super().__init__(parent=parent)
        self.items = list(items or [])

    def add(self, item: Any) -> Any:
        if isinstance(item, BaseDataModel):
            item.parent = self
        self.items.append(item)
        return item

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
