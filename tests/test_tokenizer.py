"""
Tests for delimiter-based tokenization.

These tests validate that:

- every delimiter (space, tab, newline, . , : ' " ( ) ? !) splits words
- words are returned verbatim, with no case folding
- missing text fields contribute no tokens
- a text field holding a non-string value is reported, not coerced
"""

from __future__ import annotations

import pytest

from wordvec.data.schema import Attribute, AttributeType, Record, Schema
from wordvec.features.tokenizer import DELIMITERS, iter_record_tokens, tokenize
from wordvec.filters.base import FilterTypeError


@pytest.mark.parametrize("delimiter", list(DELIMITERS))
def test_each_delimiter_splits_words(delimiter):
    assert tokenize(f"left{delimiter}right") == ["left", "right"]


def test_runs_of_delimiters_produce_no_empty_tokens():
    text = '  "Hello,"  (she said)...\tWhat?!\n'
    assert tokenize(text) == ["Hello", "she", "said", "What"]


def test_tokens_are_case_sensitive_and_keep_other_punctuation():
    assert tokenize("Cat cat CAT e-mail a;b") == ["Cat", "cat", "CAT", "e-mail", "a;b"]


@pytest.mark.parametrize("text", ["", "   ", ".,:'\"()?!", "\n\t"])
def test_empty_or_delimiter_only_text_has_no_tokens(text):
    assert tokenize(text) == []


def test_iter_record_tokens_skips_missing_and_non_text_fields():
    schema = Schema(
        [
            Attribute("subject", AttributeType.TEXT),
            Attribute("score", AttributeType.NUMERIC),
            Attribute("body", AttributeType.TEXT),
        ]
    )
    record = Record(["buy now", 3.0, "now!"])
    assert list(iter_record_tokens(schema, record)) == ["buy", "now", "now"]

    missing_subject = Record([None, 3.0, "hello world"])
    assert list(iter_record_tokens(schema, missing_subject)) == ["hello", "world"]


def test_iter_record_tokens_rejects_non_string_text():
    schema = Schema([Attribute("body", AttributeType.TEXT)])
    with pytest.raises(FilterTypeError):
        list(iter_record_tokens(schema, Record([42.0])))
