"""
StringToWordVector: converts text fields into word presence features.

The set of words (output attributes) is determined by the first batch
filtered, typically the training data:

- while no dictionary exists, accepted records are buffered
- at the end of the first batch the dictionary and output schema are
  built from the buffered records, which are then encoded
- from then on every accepted record is encoded immediately with the
  frozen dictionary

The lifecycle is held in an explicit FilterSession (UNSET -> BUILDING ->
FROZEN). Declaring a new input schema with ``begin_batch`` starts a fresh
session, and with it a fresh dictionary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from wordvec.data.schema import Record, Schema
from wordvec.features.dictionary import (
    DEFAULT_WORDS_TO_KEEP,
    Dictionary,
    check_words_to_keep,
    build_dictionary,
)
from wordvec.features.encoder import SparseVector, encode_record
from wordvec.filters.base import BatchFilter, FilterStateError


logger = logging.getLogger(__name__)


class FilterState(str, Enum):
    UNSET = "unset"
    BUILDING = "building"
    FROZEN = "frozen"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass
class FilterSession:
    """
    State of one dictionary lifecycle.

    Attributes
    ----------
    input_schema : Schema
        Schema declared for the incoming records.
    buffer : List[Record]
        Records waiting for the dictionary to be built.
    dictionary : Optional[Dictionary]
        Frozen dictionary, set once the session is FROZEN.
    output_schema : Optional[Schema]
        Output schema, set once the session is FROZEN.
    state : FilterState
        Current lifecycle state.
    """

    input_schema: Schema
    buffer: List[Record] = field(default_factory=list)
    dictionary: Optional[Dictionary] = None
    output_schema: Optional[Schema] = None
    state: FilterState = FilterState.UNSET

    @property
    def is_frozen(self) -> bool:
        return self.state == FilterState.FROZEN

    def buffer_record(self, record: Record) -> None:
        if self.state != FilterState.UNSET:
            raise FilterStateError(f"Cannot buffer records in state {self.state.value}")
        self.buffer.append(record)

    def begin_building(self) -> List[Record]:
        if self.state != FilterState.UNSET:
            raise FilterStateError(f"Cannot build a dictionary in state {self.state.value}")
        self.state = FilterState.BUILDING
        return self.buffer

    def abort_building(self) -> None:
        # Nothing was committed; the buffer is kept for the caller.
        self.state = FilterState.UNSET

    def freeze(self, dictionary: Dictionary, output_schema: Schema) -> None:
        if self.state != FilterState.BUILDING:
            raise FilterStateError(f"Cannot freeze a session in state {self.state.value}")
        self.dictionary = dictionary
        self.output_schema = output_schema
        self.buffer = []
        self.state = FilterState.FROZEN


def run_builder(session: FilterSession, words_to_keep: int) -> List[SparseVector]:
    """
    Build the session's dictionary from its buffered records and encode
    them.

    The session is only frozen when both the dictionary and every
    buffered vector were produced; on failure it goes back to UNSET and
    the error propagates.

    Returns
    -------
    List[SparseVector]
        Encoded buffered records, in the order they were accepted.
    """
    records = session.begin_building()
    try:
        dictionary, output_schema = build_dictionary(
            session.input_schema, records, words_to_keep=words_to_keep
        )
        vectors = [
            encode_record(session.input_schema, r, dictionary, output_schema)
            for r in records
        ]
    except Exception:
        session.abort_building()
        raise

    session.freeze(dictionary, output_schema)
    return vectors


def run_encoder(session: FilterSession, record: Record) -> SparseVector:
    if not session.is_frozen:
        raise FilterStateError("Dictionary has not been built; cannot encode records")
    return encode_record(session.input_schema, record, session.dictionary, session.output_schema)


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


class StringToWordVector(BatchFilter):
    """
    Converts text attributes into a set of attributes representing word
    occurrence in the text.

    Parameters
    ----------
    words_to_keep : int
        Number of words to attempt to keep, per label value when the input
        schema has a categorical label attribute, else overall.
    """

    def __init__(self, words_to_keep: int = DEFAULT_WORDS_TO_KEEP) -> None:
        super().__init__()
        check_words_to_keep(words_to_keep)
        self._words_to_keep = words_to_keep
        self._session: Optional[FilterSession] = None

    @property
    def words_to_keep(self) -> int:
        return self._words_to_keep

    @words_to_keep.setter
    def words_to_keep(self, value: int) -> None:
        # Takes effect for the next dictionary built.
        check_words_to_keep(value)
        self._words_to_keep = value

    @property
    def session(self) -> Optional[FilterSession]:
        return self._session

    @property
    def state(self) -> FilterState:
        if self._session is None:
            return FilterState.UNSET
        return self._session.state

    @property
    def dictionary(self) -> Optional[Dictionary]:
        if self._session is None:
            return None
        return self._session.dictionary

    def begin_batch(self, schema: Schema) -> bool:
        super().begin_batch(schema)
        self._session = FilterSession(input_schema=schema)
        return False

    def accept(self, record: Record) -> bool:
        """
        Input a record for filtering.

        Returns
        -------
        bool
            True if the encoded record may now be collected with output(),
            False if it was buffered until the dictionary is built.
        """
        self._start_record(record)
        session = self._session

        if session.is_frozen:
            self._push(run_encoder(session, record))
            return True

        session.buffer_record(record)
        return False

    def end_of_batch(self) -> bool:
        """
        Signal the end of a batch. The first time this is called for a
        session, the dictionary is built and buffered records are encoded.

        Returns
        -------
        bool
            True if there are encoded records pending output.
        """
        self._require_input_schema()
        session = self._session

        if session.state == FilterState.UNSET:
            num_buffered = len(session.buffer)
            vectors = run_builder(session, self._words_to_keep)
            self._output_schema = session.output_schema
            for vector in vectors:
                self._push(vector)
            logger.info(
                "Dictionary frozen with %d words; encoded %d buffered records (output width %d)",
                len(session.dictionary),
                num_buffered,
                session.output_schema.num_attributes,
            )

        return super().end_of_batch()
