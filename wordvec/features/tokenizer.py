"""
Delimiter-based tokenization of text fields.

A word is a maximal run of characters that are not delimiters. Words are
returned verbatim: no lowercasing, stemming or stopword removal is applied,
so "Cat" and "cat" are different words.
"""

from __future__ import annotations

import re
from typing import Iterator, List

from wordvec.data.schema import Record, Schema
from wordvec.filters.base import FilterTypeError


DELIMITERS = " \n\t.,:'\"()?!"

_WORD_RE = re.compile("[^" + re.escape(DELIMITERS) + "]+")


def tokenize(text: str) -> List[str]:
    """
    Split a text string into words on the fixed delimiter set.

    Parameters
    ----------
    text : str
        Raw text.

    Returns
    -------
    List[str]
        Words in order of appearance, duplicates included.
    """
    if not text:
        return []
    return _WORD_RE.findall(text)


def iter_record_tokens(schema: Schema, record: Record) -> Iterator[str]:
    """
    Yield the words of every non-missing text field of a record, field by
    field in schema order.

    Raises
    ------
    FilterTypeError
        If a text field holds something other than a string.
    """
    for index in schema.text_indices():
        if record.is_missing(index):
            continue
        text = record.value(index)
        if not isinstance(text, str):
            raise FilterTypeError(
                f"Text attribute '{schema.attribute(index).name}' holds a "
                f"{type(text).__name__} value: {text!r}"
            )
        yield from tokenize(text)
