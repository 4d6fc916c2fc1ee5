"""State reduction for the combined facial/command state.

The reducer functions take the AggregatedState by reference, apply one
sample to it and return a snapshot when the sample changed something.
They hold no state of their own.

Facial samples update three fields in a fixed order: ``eyes`` (no power
rating, always attempted), then ``brows`` and ``mouth`` (only when their
power clears the threshold). Change detection is "any field touched": the
flag is set by the first write that differs and is never checked against
the final state. Pass ``strict=True`` to compare the final state with the
state before the sample instead.
"""

import logging
from typing import Optional

from cortexevents.core.events import (
    AggregatedState,
    CommandSample,
    FacialSample,
    StateSnapshot,
)


logger = logging.getLogger(__name__)


def _meets_threshold(power: Optional[float], threshold: float) -> bool:
    """A missing power rating never clears the threshold."""
    return power is not None and power >= threshold


def _set_field(state: AggregatedState, name: str, value: Optional[str]) -> bool:
    """Write value into state.<name> if it differs. Returns True on change."""
    if value is None or getattr(state, name) == value:
        return False
    setattr(state, name, value)
    return True


def reduce_facial(
    state: AggregatedState,
    sample: FacialSample,
    threshold: float,
    strict: bool = False,
) -> Optional[StateSnapshot]:
    """Apply a facial expression sample to the state.

    Args:
        state: Aggregated state, mutated in place.
        sample: The labeled ``fac`` sample.
        threshold: Minimum power for brows/mouth updates.
        strict: Emit only if the final state differs from the prior state.

    Returns:
        A snapshot of the state after the sample if it counts as a change,
        otherwise None.
    """
    before = state.snapshot() if strict else None

    updated = False
    if _set_field(state, "eyes", sample.eye_action):
        updated = True
    if _meets_threshold(sample.upper_power, threshold):
        if _set_field(state, "brows", sample.upper_action):
            updated = True
    if _meets_threshold(sample.lower_power, threshold):
        if _set_field(state, "mouth", sample.lower_action):
            updated = True

    after = state.snapshot()
    if strict:
        updated = after != before

    if not updated:
        return None

    logger.debug("Facial sample changed state: %s", after)
    return after


def reduce_command(
    state: AggregatedState,
    sample: CommandSample,
    threshold: float,
) -> Optional[StateSnapshot]:
    """Apply a mental command sample to the state.

    The command is replaced only when it differs from the current one and
    its power clears the threshold.

    Returns:
        A snapshot of the updated state, or None if nothing changed.
    """
    if not _meets_threshold(sample.power, threshold):
        logger.debug(
            "Ignoring command %r: power %s below threshold %s",
            sample.action,
            sample.power,
            threshold,
        )
        return None

    if not _set_field(state, "command", sample.action):
        return None

    snapshot = state.snapshot()
    logger.debug("Command sample changed state: %s", snapshot)
    return snapshot
