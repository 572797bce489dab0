"""
Tabular schema and record representation.

Every filter in this package reads and writes data through three types:

- Attribute: a named field of type TEXT, CATEGORICAL or NUMERIC
- Schema: an ordered, immutable list of attributes with an optional
  label attribute
- Record: an ordered sequence of field values plus a weight

Values are stored the way the filters consume them:

- TEXT fields hold a ``str``
- CATEGORICAL fields hold the float index of the category in
  ``Attribute.values``
- NUMERIC fields hold a ``float``

``None`` marks a missing value in any field.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator, List, Optional, Sequence, Tuple


class AttributeType(str, Enum):
    TEXT = "text"
    CATEGORICAL = "categorical"
    NUMERIC = "numeric"


# ---------------------------------------------------------------------------
# Attribute
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Attribute:
    """
    A single named field of a schema.

    Attributes
    ----------
    name : str
        Field name. For word features this is the word itself.
    type : AttributeType
        Field type.
    values : Tuple[str, ...]
        Ordered category labels of a CATEGORICAL attribute; empty otherwise.
    """

    name: str
    type: AttributeType = AttributeType.NUMERIC
    values: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", AttributeType(self.type))
        object.__setattr__(self, "values", tuple(self.values))
        if self.type != AttributeType.CATEGORICAL and self.values:
            raise ValueError(
                f"Only categorical attributes carry values; got {self.type.value} "
                f"attribute '{self.name}' with values {list(self.values)}"
            )
        if len(set(self.values)) != len(self.values):
            raise ValueError(f"Duplicate category labels in attribute '{self.name}'")

    @property
    def is_text(self) -> bool:
        return self.type == AttributeType.TEXT

    @property
    def num_values(self) -> int:
        return len(self.values)

    def index_of_value(self, value: str) -> int:
        """
        Return the index of a category label.

        Raises
        ------
        ValueError
            If the attribute is not categorical or the label is unknown.
        """
        if self.type != AttributeType.CATEGORICAL:
            raise ValueError(f"Attribute '{self.name}' is not categorical")
        try:
            return self.values.index(value)
        except ValueError:
            raise ValueError(
                f"Unknown value '{value}' for attribute '{self.name}'. "
                f"Expected one of: {list(self.values)}"
            ) from None

    def copy(self) -> "Attribute":
        return replace(self)


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class Schema:
    """
    Ordered list of attributes plus an optional label attribute index.

    A Schema never changes once built; operations that alter the shape
    (inserting an attribute, setting the label) return a new Schema.
    """

    __slots__ = ("_name", "_attributes", "_label_index")

    def __init__(
        self,
        attributes: Sequence[Attribute],
        label_index: Optional[int] = None,
        name: str = "dataset",
    ) -> None:
        attributes = tuple(attributes)
        if label_index is not None and not 0 <= label_index < len(attributes):
            raise ValueError(
                f"Label index {label_index} out of range for schema with "
                f"{len(attributes)} attributes"
            )
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_attributes", attributes)
        object.__setattr__(self, "_label_index", label_index)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("Schema is immutable")

    def __reduce__(self):
        return (Schema, (self._attributes, self._label_index, self._name))

    @property
    def name(self) -> str:
        return self._name

    @property
    def attributes(self) -> Tuple[Attribute, ...]:
        return self._attributes

    @property
    def label_index(self) -> Optional[int]:
        return self._label_index

    @property
    def num_attributes(self) -> int:
        return len(self._attributes)

    @property
    def label_attribute(self) -> Optional[Attribute]:
        if self._label_index is None:
            return None
        return self._attributes[self._label_index]

    def attribute(self, index: int) -> Attribute:
        return self._attributes[index]

    def attribute_names(self) -> List[str]:
        return [att.name for att in self._attributes]

    def text_indices(self) -> List[int]:
        return [i for i, att in enumerate(self._attributes) if att.is_text]

    def non_text_indices(self) -> List[int]:
        return [i for i, att in enumerate(self._attributes) if not att.is_text]

    def with_label(self, label_index: Optional[int]) -> "Schema":
        return Schema(self._attributes, label_index=label_index, name=self._name)

    def insert_attribute(self, attribute: Attribute, position: int) -> "Schema":
        """
        Return a copy of this schema with ``attribute`` inserted at ``position``.

        The label index is shifted when the insertion happens at or before it.
        """
        if not 0 <= position <= len(self._attributes):
            raise ValueError(
                f"Insert position {position} out of range [0, {len(self._attributes)}]"
            )
        attributes = list(self._attributes)
        attributes.insert(position, attribute)

        label_index = self._label_index
        if label_index is not None and position <= label_index:
            label_index += 1
        return Schema(attributes, label_index=label_index, name=self._name)

    def __len__(self) -> int:
        return len(self._attributes)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self._attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return (
            self._name == other._name
            and self._attributes == other._attributes
            and self._label_index == other._label_index
        )

    def __hash__(self) -> int:
        return hash((self._name, self._attributes, self._label_index))

    def __repr__(self) -> str:
        return (
            f"Schema(name={self._name!r}, attributes={self.attribute_names()!r}, "
            f"label_index={self._label_index!r})"
        )


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, init=False)
class Record:
    """
    One row of a dataset: ordered field values and a scalar weight.

    ``None`` (or a float NaN) marks a missing value.
    """

    values: Tuple[Any, ...]
    weight: float = 1.0

    def __init__(self, values: Sequence[Any], weight: float = 1.0) -> None:
        object.__setattr__(self, "values", tuple(values))
        object.__setattr__(self, "weight", float(weight))

    @property
    def num_values(self) -> int:
        return len(self.values)

    def is_missing(self, index: int) -> bool:
        value = self.values[index]
        if value is None:
            return True
        return isinstance(value, float) and math.isnan(value)

    def value(self, index: int) -> Any:
        return self.values[index]

    def text(self, index: int) -> Optional[str]:
        """Return the string at ``index``, or None when it is missing."""
        if self.is_missing(index):
            return None
        value = self.values[index]
        if not isinstance(value, str):
            raise TypeError(f"Field {index} holds a {type(value).__name__}, not a string")
        return value

    def insert_missing(self, position: int) -> "Record":
        values = list(self.values)
        values.insert(position, None)
        return Record(values, weight=self.weight)
