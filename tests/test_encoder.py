"""
Tests for the sparse vector encoder.

These tests validate that:

- dictionary words are encoded as presence (1.0), never as counts
- unknown words are silently dropped
- non-text values are copied, shifted past the dictionary indices, and
  zero values are omitted
- indices are strictly ascending and inside [0, width)
- encoding is idempotent and carries the record weight
- encoding without a dictionary, or with mistyped values, is an error
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from wordvec.data.schema import Attribute, AttributeType, Record, Schema
from wordvec.features.dictionary import Dictionary, build_dictionary, build_output_schema
from wordvec.features.encoder import SparseVector, encode_record, encode_records
from wordvec.filters.base import FilterStateError, FilterTypeError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _schema() -> Schema:
    return Schema(
        [
            Attribute("count", AttributeType.NUMERIC),
            Attribute("text", AttributeType.TEXT),
            Attribute("label", AttributeType.CATEGORICAL, ("ham", "spam")),
        ],
        label_index=2,
    )


def _encode(record: Record, dictionary: Dictionary, schema: Schema = None) -> SparseVector:
    schema = schema or _schema()
    return encode_record(schema, record, dictionary, build_output_schema(schema, dictionary))


DICTIONARY = Dictionary({"bird": 0, "cat": 1, "dog": 2})


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def test_two_record_corpus_encoding():
    schema = Schema([Attribute("text", AttributeType.TEXT)])
    records = [Record(["cat dog cat"]), Record(["dog bird"])]
    dictionary, output_schema = build_dictionary(schema, records, words_to_keep=3)

    first, second = encode_records(schema, records, dictionary, output_schema)
    assert list(first.items()) == [(1, 1.0), (2, 1.0)]
    assert list(second.items()) == [(0, 1.0), (2, 1.0)]
    assert first.width == second.width == 3


def test_presence_is_binary_not_a_count():
    vector = _encode(Record([0.0, "cat cat cat cat", 0.0]), DICTIONARY)
    assert list(vector.items()) == [(1, 1.0)]


def test_unknown_words_contribute_nothing():
    vector = _encode(Record([0.0, "zebra Cat DOG", 0.0]), DICTIONARY)
    assert vector.num_values == 0
    assert vector.width == 5


def test_non_text_values_are_shifted_past_the_dictionary():
    # count -> 3 + 0, label -> 3 + 1
    vector = _encode(Record([4.5, "dog", 1.0]), DICTIONARY)
    assert list(vector.items()) == [(2, 1.0), (3, 4.5), (4, 1.0)]


def test_zero_non_text_values_are_omitted_without_moving_later_fields():
    vector = _encode(Record([0.0, "bird", 1.0]), DICTIONARY)
    assert list(vector.items()) == [(0, 1.0), (4, 1.0)]


def test_missing_text_still_encodes_non_text_fields():
    vector = _encode(Record([2.0, None, 1.0]), DICTIONARY)
    assert list(vector.items()) == [(3, 2.0), (4, 1.0)]


def test_missing_non_text_value_is_kept_as_nan():
    vector = _encode(Record([None, "cat", 0.0]), DICTIONARY)
    assert vector.indices.tolist() == [1, 3]
    assert math.isnan(vector.value(3))


def test_indices_ascending_and_in_range():
    texts = ["dog cat bird", "bird", "", "cat? dog! (bird)", "nothing known"]
    for i, text in enumerate(texts):
        vector = _encode(Record([float(i), text, float(i % 2)], weight=0.5), DICTIONARY)
        indices = vector.indices
        assert np.all(np.diff(indices) > 0)
        assert np.all((indices >= 0) & (indices < vector.width))


def test_encoding_is_idempotent_and_keeps_weight():
    record = Record([1.0, "cat and dog", 0.0], weight=3.0)
    first = _encode(record, DICTIONARY)
    second = _encode(record, DICTIONARY)
    assert first == second
    assert first.weight == 3.0


def test_empty_dictionary_passes_non_text_fields_through():
    vector = _encode(Record([7.0, "anything", 0.0]), Dictionary({}))
    assert list(vector.items()) == [(0, 7.0)]
    assert vector.width == 2


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_encoding_without_dictionary_is_a_state_error():
    schema = _schema()
    with pytest.raises(FilterStateError):
        encode_record(schema, Record([1.0, "cat", 0.0]), None, None)


def test_non_numeric_value_in_numeric_field_is_reported():
    with pytest.raises(FilterTypeError):
        _encode(Record(["four", "cat", 0.0]), DICTIONARY)


def test_non_string_value_in_text_field_is_reported():
    with pytest.raises(FilterTypeError):
        _encode(Record([1.0, 12.0, 0.0]), DICTIONARY)


# ---------------------------------------------------------------------------
# SparseVector
# ---------------------------------------------------------------------------


def test_sparse_vector_validates_indices():
    with pytest.raises(ValueError):
        SparseVector(weight=1.0, indices=[2, 1], values=[1.0, 1.0], width=3)
    with pytest.raises(ValueError):
        SparseVector(weight=1.0, indices=[1, 1], values=[1.0, 1.0], width=3)
    with pytest.raises(ValueError):
        SparseVector(weight=1.0, indices=[0, 3], values=[1.0, 1.0], width=3)


def test_sparse_vector_to_dense_and_lookup():
    vector = SparseVector.from_pairs({3: 2.5, 0: 1.0}, width=5, weight=1.0)
    assert vector.indices.tolist() == [0, 3]
    assert vector.to_dense().tolist() == [1.0, 0.0, 0.0, 2.5, 0.0]
    assert vector.value(3) == 2.5
    assert vector.value(4) == 0.0
