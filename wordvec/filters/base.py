"""
Two-phase batch-filter protocol shared by every filter.

A filter is driven in batches:

1. ``begin_batch(schema)`` declares the shape of incoming records
2. ``accept(record)`` is called once per record; it returns True when a
   filtered output is ready to be pulled, False when the record was only
   buffered
3. ``end_of_batch()`` signals that the batch is complete; filters that
   need the whole batch before producing anything do their work here
4. ``output()`` pulls filtered outputs one at a time

The output queue is cleared on the first ``accept`` of a new batch, so
outputs left from a previous batch are dropped once new input arrives.

The helpers ``use_filter`` and ``batch_filter`` run a whole dataset (or a
train/test pair) through a filter.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Iterable, List, Optional, Tuple

from wordvec.data.schema import Record, Schema


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FilterError(Exception):
    """Base class for errors raised by filters."""


class FilterConfigurationError(FilterError):
    """Raised when a filter is used before its input schema is declared."""


class FilterStateError(FilterError):
    """Raised when an operation is invoked in the wrong lifecycle state."""


class FilterTypeError(FilterError, TypeError):
    """Raised when a field value does not match its declared attribute type."""


# ---------------------------------------------------------------------------
# Base filter
# ---------------------------------------------------------------------------


class BatchFilter:
    """
    Base class implementing output queueing and batch bookkeeping.

    Subclasses override ``begin_batch``, ``accept`` and ``end_of_batch``
    and call ``_push`` for every output they produce.
    """

    def __init__(self) -> None:
        self._input_schema: Optional[Schema] = None
        self._output_schema: Optional[Schema] = None
        self._queue: Deque[Any] = deque()
        self._new_batch = True

    @property
    def input_schema(self) -> Optional[Schema]:
        return self._input_schema

    @property
    def output_schema(self) -> Optional[Schema]:
        """Output schema, or None until the filter has determined it."""
        return self._output_schema

    def begin_batch(self, schema: Schema) -> bool:
        """
        Declare the input schema and start a new batch.

        Returns
        -------
        bool
            True if the output schema is available immediately.
        """
        if schema is None:
            raise FilterConfigurationError("Input schema must not be None")
        self._input_schema = schema
        self._output_schema = None
        self._new_batch = True
        return False

    def accept(self, record: Record) -> bool:
        raise NotImplementedError

    def end_of_batch(self) -> bool:
        """
        Signal that the current batch is finished.

        Returns
        -------
        bool
            True if there are outputs pending.
        """
        self._require_input_schema()
        self._new_batch = True
        return self.num_pending_output() != 0

    # -- output queue -------------------------------------------------------

    def output(self) -> Optional[Any]:
        """Pull the next filtered output, or None if nothing is pending."""
        if not self._queue:
            return None
        return self._queue.popleft()

    def output_peek(self) -> Optional[Any]:
        if not self._queue:
            return None
        return self._queue[0]

    def num_pending_output(self) -> int:
        return len(self._queue)

    def drain(self) -> List[Any]:
        outputs = list(self._queue)
        self._queue.clear()
        return outputs

    def _push(self, item: Any) -> None:
        self._queue.append(item)

    def _reset_queue(self) -> None:
        self._queue.clear()

    # -- checks -------------------------------------------------------------

    def _require_input_schema(self) -> Schema:
        if self._input_schema is None:
            raise FilterConfigurationError("No input schema defined")
        return self._input_schema

    def _start_record(self, record: Record) -> Schema:
        """
        Common bookkeeping at the top of ``accept``: validates the record
        against the input schema and clears the queue on a new batch.
        """
        schema = self._require_input_schema()
        if record.num_values != schema.num_attributes:
            raise ValueError(
                f"Record has {record.num_values} values but the input schema "
                f"declares {schema.num_attributes} attributes"
            )
        if self._new_batch:
            self._reset_queue()
            self._new_batch = False
        return schema


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def use_filter(
    batch_filter_: BatchFilter,
    schema: Schema,
    records: Iterable[Record],
) -> Tuple[Schema, List[Any]]:
    """
    Run a full dataset through a filter as a single batch.

    Parameters
    ----------
    batch_filter_ : BatchFilter
        Filter to apply. Its input schema is (re)declared.
    schema : Schema
        Schema of ``records``.
    records : Iterable[Record]
        Input records.

    Returns
    -------
    Tuple[Schema, List[Any]]
        The output schema and the filtered outputs in input order.
    """
    batch_filter_.begin_batch(schema)
    for record in records:
        batch_filter_.accept(record)
    batch_filter_.end_of_batch()
    return batch_filter_.output_schema, batch_filter_.drain()


def batch_filter(
    batch_filter_: BatchFilter,
    schema: Schema,
    first_batch: Iterable[Record],
    second_batch: Iterable[Record],
) -> Tuple[Schema, List[Any], List[Any]]:
    """
    Filter a training batch, then a second batch with the same filter state.

    Filters that learn something from their first batch (such as the word
    dictionary of StringToWordVector) apply it unchanged to the second one.

    Returns
    -------
    Tuple[Schema, List[Any], List[Any]]
        (output_schema, first_outputs, second_outputs)
    """
    output_schema, first_outputs = use_filter(batch_filter_, schema, first_batch)

    for record in second_batch:
        batch_filter_.accept(record)
    batch_filter_.end_of_batch()
    second_outputs = batch_filter_.drain()

    return output_schema, first_outputs, second_outputs
