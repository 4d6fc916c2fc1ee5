"""Column mapping for positional Cortex stream rows.

Cortex sends each stream sample as a bare list of values; the meaning of
each position is given once, by the ``cols`` header in the subscribe reply.
The mappers here are bound to that header when the subscription is made and
then reused for every row on the channel.
"""

from typing import Any, Callable, Dict, Sequence

from cortexevents.core.events import CommandSample, FacialSample


RowMapper = Callable[[Sequence[Any]], Dict[str, Any]]


def columns_to_record(header: Sequence[str]) -> RowMapper:
    """Bind a channel header and return a row -> record mapper.

    The returned function pairs each header name with the value at the same
    index. A row shorter than the header yields a record without the
    trailing keys; values past the end of the header are dropped.

    Args:
        header: Ordered field names from the subscription's ``cols``.

    Returns:
        A function turning one positional row into a labeled dict.

    Example:
        >>> to_record = columns_to_record(["act", "pow"])
        >>> to_record(["push", 0.7])
        {'act': 'push', 'pow': 0.7}
    """
    columns = tuple(header)

    def to_record(row: Sequence[Any]) -> Dict[str, Any]:
        return dict(zip(columns, row))

    return to_record


def facial_sample_from_row(header: Sequence[str]) -> Callable[[Sequence[Any]], FacialSample]:
    """Bind a ``fac`` header and return a row -> FacialSample converter."""
    to_record = columns_to_record(header)

    def convert(row: Sequence[Any]) -> FacialSample:
        return FacialSample.from_record(to_record(row))

    return convert


def command_sample_from_row(header: Sequence[str]) -> Callable[[Sequence[Any]], CommandSample]:
    """Bind a ``com`` header and return a row -> CommandSample converter."""
    to_record = columns_to_record(header)

    def convert(row: Sequence[Any]) -> CommandSample:
        return CommandSample.from_record(to_record(row))

    return convert
