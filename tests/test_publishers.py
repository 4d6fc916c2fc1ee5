"""Tests for the cortexevents publishers module.

This module tests:
- pad / format_snapshot: console line layout
- ConsolePublisher: lifecycle and output
"""

import io

import pytest

from cortexevents.core.events import StateSnapshot
from cortexevents.publishers.console import ConsolePublisher, format_snapshot, pad


# ===========================================================================
# Fixtures
# ===========================================================================


@pytest.fixture
def mock_stdout():
    """Provide a StringIO buffer to capture stdout output."""
    return io.StringIO()


@pytest.fixture
def sample_snapshot():
    return StateSnapshot(command="push", eyes="lookL", brows="surprise", mouth="neutral")


# ===========================================================================
# Formatting
# ===========================================================================


class TestFormatting:
    """Tests for pad and format_snapshot."""

    def test_pad_short_text(self):
        assert pad("up", 5) == "up   "

    def test_pad_exact_width(self):
        assert pad("abcde", 5) == "abcde"

    def test_pad_long_text_is_kept(self):
        assert pad("smirkRight", 5) == "smirkRight"

    def test_format_snapshot(self, sample_snapshot):
        assert format_snapshot(sample_snapshot) == (
            "eyes: lookL      | brows: surprise   | mouth: neutral    | command: push"
        )

    def test_format_custom_width(self, sample_snapshot):
        line = format_snapshot(sample_snapshot, width=8)
        assert line.startswith("eyes: lookL    | brows: surprise | ")


# ===========================================================================
# ConsolePublisher
# ===========================================================================


class TestConsolePublisher:
    """Tests for ConsolePublisher."""

    def test_not_ready_before_start(self, mock_stdout):
        publisher = ConsolePublisher(stream=mock_stdout)
        assert publisher.is_ready is False

    def test_publish_before_start_raises(self, mock_stdout, sample_snapshot):
        publisher = ConsolePublisher(stream=mock_stdout)
        with pytest.raises(RuntimeError, match="not started"):
            publisher.publish(sample_snapshot)

    def test_publish_writes_line(self, mock_stdout, sample_snapshot):
        with ConsolePublisher(stream=mock_stdout) as publisher:
            publisher.publish(sample_snapshot)

        assert mock_stdout.getvalue() == format_snapshot(sample_snapshot) + "\n"

    def test_event_count(self, mock_stdout, sample_snapshot):
        with ConsolePublisher(stream=mock_stdout) as publisher:
            publisher.publish(sample_snapshot)
            publisher.publish(StateSnapshot())
            assert publisher.event_count == 2

    def test_one_bare_line_per_snapshot(self, mock_stdout, sample_snapshot):
        with ConsolePublisher(stream=mock_stdout) as publisher:
            publisher.publish(sample_snapshot)
            publisher.publish(StateSnapshot())

        assert mock_stdout.getvalue().splitlines() == [
            format_snapshot(sample_snapshot),
            format_snapshot(StateSnapshot()),
        ]

    def test_stop_is_idempotent(self, mock_stdout):
        publisher = ConsolePublisher(stream=mock_stdout)
        publisher.start()
        publisher.stop()
        publisher.stop()
        assert publisher.is_ready is False

    def test_works_as_result_callback(self, mock_stdout):
        from cortexevents.core.engine import watch_events
        from cortexevents.sources.mock import MockTransport

        transport = MockTransport()
        with ConsolePublisher(stream=mock_stdout) as publisher:
            stop = watch_events(transport, 0.0, publisher.publish)
            transport.push("com", ["lift", 0.3])
            stop()

        assert mock_stdout.getvalue() == (
            "eyes: neutral    | brows: neutral    | mouth: neutral    | command: lift\n"
        )
