"""
Tests for the AddAttribute filter.
"""

from __future__ import annotations

import pytest

from wordvec.data.schema import Attribute, AttributeType, Record, Schema
from wordvec.filters.add_attribute import AddAttribute
from wordvec.filters.base import FilterConfigurationError, use_filter


def _schema() -> Schema:
    return Schema(
        [Attribute("text", AttributeType.TEXT), Attribute("score", AttributeType.NUMERIC)],
        label_index=1,
    )


def test_default_appends_numeric_attribute():
    add = AddAttribute()
    assert add.begin_batch(_schema()) is True
    assert add.output_schema.attribute_names() == ["text", "score", "unnamed"]
    assert add.output_schema.attribute(2).type == AttributeType.NUMERIC

    assert add.accept(Record(["hi", 1.0], weight=2.0)) is True
    out = add.output()
    assert out.values == ("hi", 1.0, None)
    assert out.weight == 2.0


def test_insert_first_with_labels_shifts_label_index():
    add = AddAttribute(name="fold", position=0, labels=["train", " test "])
    output_schema, records = use_filter(add, _schema(), [Record(["a", 1.0]), Record(["b", 2.0])])

    assert output_schema.attribute(0) == Attribute("fold", AttributeType.CATEGORICAL, ("train", "test"))
    assert output_schema.label_index == 2
    assert [r.values for r in records] == [(None, "a", 1.0), (None, "b", 2.0)]


@pytest.mark.parametrize("position", [-1, 2, 99])
def test_out_of_range_position_means_last(position):
    add = AddAttribute(position=position)
    add.begin_batch(_schema())
    assert add.output_schema.attribute_names()[-1] == "unnamed"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("  ", "unnamed"),
        ("new col", "'new col'"),
        ("it's new", "'it s new'"),
        ("'quoted name'", "''quoted name''"),
    ],
)
def test_names_with_spaces_are_quoted(name, expected):
    assert AddAttribute(name=name).name == expected


def test_accept_without_schema_is_a_configuration_error():
    with pytest.raises(FilterConfigurationError):
        AddAttribute().accept(Record(["a", 1.0]))
