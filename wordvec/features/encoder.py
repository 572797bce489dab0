"""
Sparse vector encoding for the word vector filter.

A record is re-expressed with a frozen Dictionary as a SparseVector:

- every dictionary word occurring in a non-missing text field of the
  record sets its feature to 1.0 (presence, not a count)
- every non-text field with a non-zero value is copied to index
  ``len(dictionary) + rank``, where ``rank`` is the field's position among
  the non-text attributes of the input schema
- words that are not in the dictionary are dropped

Missing non-text values are kept as NaN, the missing marker of the
numeric representation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from wordvec.data.schema import Record, Schema
from wordvec.features.dictionary import Dictionary
from wordvec.features.tokenizer import iter_record_tokens
from wordvec.filters.base import FilterStateError, FilterTypeError


# ---------------------------------------------------------------------------
# Sparse vector
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class SparseVector:
    """
    Sparse representation of one encoded record.

    Attributes
    ----------
    weight : float
        Weight of the original record.
    indices : np.ndarray
        Strictly ascending feature indices (int64), all in ``[0, width)``.
    values : np.ndarray
        Feature values (float64) aligned with ``indices``.
    width : int
        Total number of features; omitted indices are implicitly zero.
    """

    weight: float
    indices: np.ndarray
    values: np.ndarray
    width: int

    def __post_init__(self) -> None:
        indices = np.array(self.indices, dtype=np.int64)
        values = np.array(self.values, dtype=np.float64)

        if indices.ndim != 1 or values.shape != indices.shape:
            raise ValueError("indices and values must be 1-D arrays of the same length")
        if indices.size:
            if np.any(np.diff(indices) <= 0):
                raise ValueError("indices must be strictly ascending")
            if indices[0] < 0 or indices[-1] >= self.width:
                raise ValueError(f"indices must lie in [0, {self.width})")

        indices.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "weight", float(self.weight))
        object.__setattr__(self, "width", int(self.width))

    @classmethod
    def from_pairs(cls, pairs: Dict[int, float], width: int, weight: float = 1.0) -> "SparseVector":
        ordered = sorted(pairs.items())
        indices = [idx for idx, _ in ordered]
        values = [val for _, val in ordered]
        return cls(weight=weight, indices=indices, values=values, width=width)

    @property
    def num_values(self) -> int:
        return int(self.indices.size)

    def items(self) -> Iterator[Tuple[int, float]]:
        for idx, val in zip(self.indices.tolist(), self.values.tolist()):
            yield idx, val

    def value(self, index: int) -> float:
        pos = int(np.searchsorted(self.indices, index))
        if pos < self.indices.size and self.indices[pos] == index:
            return float(self.values[pos])
        return 0.0

    def to_dense(self) -> np.ndarray:
        dense = np.zeros(self.width, dtype=np.float64)
        dense[self.indices] = self.values
        return dense

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparseVector):
            return NotImplemented
        return (
            self.weight == other.weight
            and self.width == other.width
            and np.array_equal(self.indices, other.indices)
            and np.array_equal(self.values, other.values, equal_nan=True)
        )

    def __repr__(self) -> str:
        pairs = ", ".join(f"{idx}: {val:g}" for idx, val in self.items())
        return f"SparseVector(weight={self.weight:g}, width={self.width}, {{{pairs}}})"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _non_text_value(schema: Schema, record: Record, index: int) -> float:
    if record.is_missing(index):
        return math.nan
    value = record.value(index)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise FilterTypeError(
            f"Attribute '{schema.attribute(index).name}' "
            f"({schema.attribute(index).type.value}) holds a non-numeric "
            f"{type(value).__name__} value: {value!r}"
        )
    return float(value)


def encode_record(
    schema: Schema,
    record: Record,
    dictionary: Optional[Dictionary],
    output_schema: Optional[Schema],
) -> SparseVector:
    """
    Encode one record into a SparseVector using a frozen dictionary.

    Parameters
    ----------
    schema : Schema
        Input schema the record conforms to.
    record : Record
        Record to encode.
    dictionary : Optional[Dictionary]
        Frozen dictionary built from the training corpus.
    output_schema : Optional[Schema]
        Output schema derived from ``dictionary``; its width is the width
        of the vector.

    Returns
    -------
    SparseVector
        The encoded record, carrying the record's weight.

    Raises
    ------
    FilterStateError
        If the dictionary or output schema has not been built yet.
    FilterTypeError
        If a field value does not match its attribute type.
    """
    if dictionary is None or output_schema is None:
        raise FilterStateError("Dictionary has not been built; cannot encode records")

    contained: Dict[int, float] = {}
    for word in iter_record_tokens(schema, record):
        index = dictionary.get(word)
        if index is not None:
            contained[index] = 1.0

    first_copy = len(dictionary)
    for rank, i in enumerate(schema.non_text_indices()):
        value = _non_text_value(schema, record, i)
        if value != 0.0:
            contained[first_copy + rank] = value

    return SparseVector.from_pairs(contained, width=output_schema.num_attributes, weight=record.weight)


def encode_records(
    schema: Schema,
    records: List[Record],
    dictionary: Dictionary,
    output_schema: Schema,
) -> List[SparseVector]:
    return [encode_record(schema, r, dictionary, output_schema) for r in records]
