"""Sample processing for cortexevents.

- columns: bind a stream header and turn positional rows into typed samples
- reducer: fold typed samples into the aggregated state

Example:
    >>> from cortexevents.core.events import AggregatedState
    >>> from cortexevents.processors import command_sample_from_row, reduce_command
    >>>
    >>> to_sample = command_sample_from_row(["act", "pow"])
    >>> state = AggregatedState()
    >>> reduce_command(state, to_sample(["push", 0.7]), threshold=0.5)
    StateSnapshot(command='push', eyes='neutral', brows='neutral', mouth='neutral')
"""

from cortexevents.processors.columns import (
    RowMapper,
    columns_to_record,
    command_sample_from_row,
    facial_sample_from_row,
)
from cortexevents.processors.reducer import reduce_command, reduce_facial

__all__ = [
    "RowMapper",
    "columns_to_record",
    "command_sample_from_row",
    "facial_sample_from_row",
    "reduce_command",
    "reduce_facial",
]
