"""
AddAttribute: inserts a new, always-missing attribute into the dataset.
"""

from __future__ import annotations

from typing import Optional, Sequence

from wordvec.data.schema import Attribute, AttributeType, Record, Schema
from wordvec.filters.base import BatchFilter


class AddAttribute(BatchFilter):
    """
    Adds a new attribute at a given position; every record gets a missing
    value there.

    Parameters
    ----------
    name : str
        Name of the new attribute. Names containing spaces are quoted;
        an empty name becomes "unnamed".
    position : int
        Where to insert the attribute (0-based). -1, or any out-of-range
        position, means last.
    labels : Optional[Sequence[str]]
        Category labels. When given, the new attribute is CATEGORICAL,
        otherwise NUMERIC.
    """

    def __init__(
        self,
        name: str = "unnamed",
        position: int = -1,
        labels: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__()
        self.name = name
        self.position = position
        self.labels = labels

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        new_name = (value or "").strip()
        if " " in new_name:
            if not new_name.startswith("'"):
                new_name = new_name.replace("'", " ")
            new_name = f"'{new_name}'"
        self._name = new_name or "unnamed"

    @property
    def labels(self) -> Optional[Sequence[str]]:
        return self._labels

    @labels.setter
    def labels(self, value: Optional[Sequence[str]]) -> None:
        self._labels = tuple(label.strip() for label in value) if value else None

    def _new_attribute(self) -> Attribute:
        if self._labels:
            return Attribute(self._name, AttributeType.CATEGORICAL, self._labels)
        return Attribute(self._name, AttributeType.NUMERIC)

    def begin_batch(self, schema: Schema) -> bool:
        super().begin_batch(schema)
        if self.position < 0 or self.position > schema.num_attributes:
            self._insert_at = schema.num_attributes
        else:
            self._insert_at = self.position
        self._output_schema = schema.insert_attribute(self._new_attribute(), self._insert_at)
        return True

    def accept(self, record: Record) -> bool:
        self._start_record(record)
        self._push(record.insert_missing(self._insert_at))
        return True
