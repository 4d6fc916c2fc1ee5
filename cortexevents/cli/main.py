"""
Standalone runner: watch a headset and print every state change.

Configuration comes from the environment:
    EMOTIV_CLIENT_ID, EMOTIV_CLIENT_SECRET   Cortex credentials (required)
    EMOTIV_LICENSE_ID, EMOTIV_HEADSET_ID     optional
    LOG_LEVEL                                1 (default), 2 or 3 for more detail
"""

import argparse
import logging
import sys
import threading
from typing import List, Optional

from cortexevents.core.config import Config
from cortexevents.core.engine import EventStream
from cortexevents.core.exceptions import BCIError
from cortexevents.publishers.console import ConsolePublisher
from cortexevents.sources.emotiv import CortexClient


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="cortexevents",
        description=(
            "Watch Emotiv facial expressions and mental commands and print "
            "the combined state whenever it changes. Configured through "
            "EMOTIV_CLIENT_ID, EMOTIV_CLIENT_SECRET and LOG_LEVEL."
        ),
    )


def _wait_for_shutdown(failed: threading.Event) -> None:
    """Block until Ctrl+C or until the client reports an error."""
    while not failed.wait(0.1):
        pass


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the watcher until interrupted.

    Args:
        argv: Command line arguments (without the program name).

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    _build_parser().parse_args(argv)

    try:
        config = Config.from_env()
    except BCIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    threshold = config.watch.threshold
    client = CortexClient.from_config(config.emotiv)
    publisher = ConsolePublisher()

    errors: List[Exception] = []
    failed = threading.Event()

    def on_error(error: Exception) -> None:
        errors.append(error)
        failed.set()

    client.on_error = on_error

    try:
        client.connect()
        client.init()

        print(
            "Watching for facial expressions and mental commands "
            f"above {round(threshold * 100)}% power"
        )

        with publisher, EventStream(
            client,
            threshold,
            publisher.publish,
            strict_changes=config.watch.strict_changes,
        ):
            _wait_for_shutdown(failed)
    except KeyboardInterrupt:
        print("\nStopped.")
    except BCIError as e:
        logger.debug("Watcher failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        client.disconnect()

    if errors:
        print(f"Error: {errors[0]}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """Console script entry point."""
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
