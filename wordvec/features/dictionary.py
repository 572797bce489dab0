"""
Dictionary building for the word vector filter.

This module turns a training corpus into a frozen word -> index mapping
and the output schema derived from it:

- count word occurrences, one count table per label value when the
  schema has a categorical label attribute, else a single table
- prune each table to (roughly) the ``words_to_keep`` most frequent words
- merge the retained words of every table into one Dictionary, assigning
  contiguous indices in a reproducible order
- derive the output schema: one numeric attribute per word, followed by
  the original non-text attributes

Pruning keeps every word whose count reaches the count found at rank
``size - words_to_keep`` of the ascending counts. Words tied at that count
are all kept, so a table may retain more than ``words_to_keep`` words,
never fewer (unless it has fewer distinct words to begin with).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from numbers import Real
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from wordvec.data.schema import Attribute, AttributeType, Record, Schema
from wordvec.features.tokenizer import iter_record_tokens
from wordvec.filters.base import FilterConfigurationError, FilterTypeError
from wordvec.utils.filter_utils import ensure_dir_exists


logger = logging.getLogger(__name__)

DEFAULT_WORDS_TO_KEEP = 1000
DEFAULT_DICTIONARY_FILENAME = "dictionary.json"


# ---------------------------------------------------------------------------
# Count tables
# ---------------------------------------------------------------------------


@dataclass
class CountTable:
    """
    Word occurrence counts for one label partition.

    Iteration helpers always sort explicitly, so results never depend on
    insertion order.
    """

    counts: Dict[str, int] = field(default_factory=dict)

    def add(self, word: str) -> None:
        self.counts[word] = self.counts.get(word, 0) + 1

    def __len__(self) -> int:
        return len(self.counts)

    def __getitem__(self, word: str) -> int:
        return self.counts[word]

    def sorted_words(self) -> List[str]:
        return sorted(self.counts)

    def ascending_counts(self) -> List[int]:
        return sorted(self.counts.values())


def _num_partitions(schema: Schema) -> int:
    label = schema.label_attribute
    if label is None or label.type != AttributeType.CATEGORICAL or label.num_values == 0:
        return 1
    return label.num_values


def _partition_of(schema: Schema, record: Record) -> int:
    label_index = schema.label_index
    if _num_partitions(schema) == 1:
        return 0
    # Records with a missing label are counted with the first label value.
    if record.is_missing(label_index):
        return 0
    value = record.value(label_index)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise FilterTypeError(
            f"Label attribute '{schema.attribute(label_index).name}' holds a "
            f"non-numeric {type(value).__name__} value: {value!r}"
        )
    return int(value)


def count_words(schema: Schema, records: Iterable[Record]) -> List[CountTable]:
    """
    Count word occurrences in every non-missing text field.

    Parameters
    ----------
    schema : Schema
        Schema of the records.
    records : Iterable[Record]
        Training records.

    Returns
    -------
    List[CountTable]
        One table per label value (in label value order), or a single
        table when there is no categorical label attribute.

    Raises
    ------
    FilterTypeError
        If a label value is not a numeric category index.
    ValueError
        If a label value index is out of range.
    """
    tables = [CountTable() for _ in range(_num_partitions(schema))]
    for record in records:
        partition = _partition_of(schema, record)
        if not 0 <= partition < len(tables):
            raise ValueError(
                f"Label value index {partition} out of range for "
                f"{len(tables)} label values"
            )
        table = tables[partition]
        for word in iter_record_tokens(schema, record):
            table.add(word)
    return tables


# ---------------------------------------------------------------------------
# Pruning
# ---------------------------------------------------------------------------


def check_words_to_keep(words_to_keep: int) -> None:
    if isinstance(words_to_keep, bool) or not isinstance(words_to_keep, int) or words_to_keep < 1:
        raise ValueError(f"words_to_keep must be a positive integer, got {words_to_keep!r}")


def pruning_threshold(counts: Sequence[int], words_to_keep: int) -> int:
    """
    Minimum count a word needs to survive pruning.

    Parameters
    ----------
    counts : Sequence[int]
        Occurrence counts of every distinct word in a partition.
    words_to_keep : int
        Target number of words for the partition.

    Returns
    -------
    int
        1 if the partition has fewer than ``words_to_keep`` distinct words,
        else the count at rank ``len(counts) - words_to_keep`` of the
        ascending counts, floored at 1.
    """
    check_words_to_keep(words_to_keep)
    if len(counts) < words_to_keep:
        return 1
    ascending = sorted(counts)
    return max(1, ascending[len(ascending) - words_to_keep])


def prune_counts(table: CountTable, words_to_keep: int) -> List[str]:
    """
    Return the words of ``table`` that survive pruning, in lexicographic order.
    """
    threshold = pruning_threshold(table.ascending_counts(), words_to_keep)
    retained = [word for word in table.sorted_words() if table[word] >= threshold]
    logger.debug(
        "Partition with %d distinct words: threshold=%d, retained=%d",
        len(table),
        threshold,
        len(retained),
    )
    return retained


# ---------------------------------------------------------------------------
# Dictionary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dictionary:
    """
    Frozen mapping from word to output feature index.

    Indices are contiguous, starting at 0. Lookups are exact and
    case-sensitive. ``word_to_index`` is a read-only view.
    """

    word_to_index: Mapping[str, int]

    def __post_init__(self) -> None:
        indices = sorted(self.word_to_index.values())
        if indices != list(range(len(indices))):
            raise ValueError("Dictionary indices must be contiguous and start at 0")
        object.__setattr__(self, "word_to_index", MappingProxyType(dict(self.word_to_index)))

    def __reduce__(self):
        return (Dictionary, (dict(self.word_to_index),))

    def __len__(self) -> int:
        return len(self.word_to_index)

    def __contains__(self, word: object) -> bool:
        return word in self.word_to_index

    def get(self, word: str) -> Optional[int]:
        return self.word_to_index.get(word)

    def words(self) -> List[str]:
        """Words in index order."""
        return sorted(self.word_to_index, key=self.word_to_index.__getitem__)

    def as_dict(self) -> Dict[str, int]:
        return dict(self.word_to_index)

    def to_json(self) -> Dict[str, Any]:
        return {"words": self.words()}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Dictionary":
        """
        Construct a Dictionary from a dictionary as produced by to_json().
        """
        return cls({word: idx for idx, word in enumerate(data["words"])})


def merge_partitions(tables: Sequence[CountTable], words_to_keep: int) -> Dictionary:
    """
    Prune every partition and merge the retained words into one Dictionary.

    Partitions are visited in label value order and words within a
    partition in lexicographic order; each word gets the next free index
    the first time it is seen.
    """
    word_to_index: Dict[str, int] = {}
    for table in tables:
        for word in prune_counts(table, words_to_keep):
            if word not in word_to_index:
                word_to_index[word] = len(word_to_index)
    return Dictionary(word_to_index)


def build_output_schema(schema: Schema, dictionary: Dictionary) -> Schema:
    """
    Derive the output schema for records encoded with ``dictionary``.

    The output has one NUMERIC attribute per dictionary word, in index
    order and named after the word, followed by a copy of every non-text
    attribute of ``schema`` in its original order. The label attribute, if
    it is a non-text attribute, keeps its label role at its new position.
    """
    attributes: List[Attribute] = [
        Attribute(word, AttributeType.NUMERIC) for word in dictionary.words()
    ]

    label_index: Optional[int] = None
    for i in schema.non_text_indices():
        if schema.label_index == i:
            label_index = len(attributes)
        attributes.append(schema.attribute(i).copy())

    return Schema(attributes, label_index=label_index, name=schema.name)


def build_dictionary(
    schema: Optional[Schema],
    records: Sequence[Record],
    words_to_keep: int = DEFAULT_WORDS_TO_KEEP,
) -> Tuple[Dictionary, Schema]:
    """
    Build the frozen Dictionary and output schema from a training corpus.

    Parameters
    ----------
    schema : Optional[Schema]
        Input schema of the corpus.
    records : Sequence[Record]
        The complete training corpus.
    words_to_keep : int
        Target number of words, per label value when the schema has a
        categorical label attribute, else overall.

    Returns
    -------
    Tuple[Dictionary, Schema]
        (dictionary, output_schema)

    Raises
    ------
    FilterConfigurationError
        If no input schema is defined.
    ValueError
        If ``words_to_keep`` is not a positive integer.
    """
    if schema is None:
        raise FilterConfigurationError("No input schema defined")
    check_words_to_keep(words_to_keep)

    tables = count_words(schema, records)
    dictionary = merge_partitions(tables, words_to_keep)
    output_schema = build_output_schema(schema, dictionary)

    logger.info(
        "Built dictionary of %d words from %d records (%d partition(s), words_to_keep=%d)",
        len(dictionary),
        len(records),
        len(tables),
        words_to_keep,
    )
    return dictionary, output_schema


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_dictionary(
    dictionary: Dictionary,
    artifacts_dir: str,
    filename: str = DEFAULT_DICTIONARY_FILENAME,
) -> str:
    """
    Save the dictionary to a JSON file under ``artifacts_dir``.

    Returns
    -------
    str
        Full path to the saved file.
    """
    ensure_dir_exists(artifacts_dir)
    path = os.path.join(artifacts_dir, filename)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(dictionary.to_json(), f, ensure_ascii=False, indent=2)

    return path


def load_dictionary(
    artifacts_dir: str,
    filename: str = DEFAULT_DICTIONARY_FILENAME,
) -> Dictionary:
    """
    Load a previously saved dictionary from disk.

    Raises
    ------
    FileNotFoundError
        If the dictionary file does not exist.
    """
    path = os.path.join(artifacts_dir, filename)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Dictionary file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return Dictionary.from_json(data)
