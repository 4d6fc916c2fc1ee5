"""Snapshot publishers for cortexevents.

Available publishers:
    - ConsolePublisher: one formatted line per state change
"""

from cortexevents.publishers.base import Publisher
from cortexevents.publishers.console import ConsolePublisher, format_snapshot, pad

__all__ = [
    "Publisher",
    "ConsolePublisher",
    "format_snapshot",
    "pad",
]
