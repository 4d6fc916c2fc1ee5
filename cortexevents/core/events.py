"""Typed samples and state objects for the Cortex event streams.

Cortex delivers every stream sample as a positional row whose layout is
described by the ``cols`` header returned at subscription time. The records
below are what those rows become once they have been labeled:

- ``fac`` (facial expressions): ``eyeAct, uAct, uPow, lAct, lPow``
- ``com`` (mental commands): ``act, pow``
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


NEUTRAL = "neutral"


class EmotivStream(Enum):
    """Cortex data streams consumed by the event watcher."""

    COM = "com"  # Mental commands
    FAC = "fac"  # Facial expressions


def _as_label(value: Any) -> Optional[str]:
    """Return value if it is a usable action label, otherwise None."""
    if isinstance(value, str):
        return value
    return None


def _as_power(value: Any) -> Optional[float]:
    """Return value as a float power rating, or None if it is not numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class FacialSample:
    """One labeled sample from the ``fac`` stream.

    Attributes:
        eye_action: Eye direction/action (blink, winkL, lookR, ...). Has no
            power rating.
        upper_action: Upper face (brows) action, e.g. surprise, frown.
        upper_power: Power rating of the upper face action.
        lower_action: Lower face (mouth) action, e.g. smile, clench.
        lower_power: Power rating of the lower face action.

    Any field missing from the row, or of the wrong type, is None.
    """

    eye_action: Optional[str] = None
    upper_action: Optional[str] = None
    upper_power: Optional[float] = None
    lower_action: Optional[str] = None
    lower_power: Optional[float] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FacialSample":
        """Build a sample from a labeled ``fac`` record."""
        return cls(
            eye_action=_as_label(record.get("eyeAct")),
            upper_action=_as_label(record.get("uAct")),
            upper_power=_as_power(record.get("uPow")),
            lower_action=_as_label(record.get("lAct")),
            lower_power=_as_power(record.get("lPow")),
        )


@dataclass(frozen=True)
class CommandSample:
    """One labeled sample from the ``com`` stream.

    Attributes:
        action: Detected mental command (push, pull, lift, ...).
        power: Power rating of the command.
    """

    action: Optional[str] = None
    power: Optional[float] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CommandSample":
        """Build a sample from a labeled ``com`` record."""
        return cls(
            action=_as_label(record.get("act")),
            power=_as_power(record.get("pow")),
        )


@dataclass
class AggregatedState:
    """The current combined state of both streams.

    Owned by a single EventStream and mutated in place by the reducer.
    """

    command: str = NEUTRAL
    eyes: str = NEUTRAL
    brows: str = NEUTRAL
    mouth: str = NEUTRAL

    def snapshot(self) -> "StateSnapshot":
        """Return an immutable copy of the current state."""
        return StateSnapshot(
            command=self.command,
            eyes=self.eyes,
            brows=self.brows,
            mouth=self.mouth,
        )


@dataclass(frozen=True)
class StateSnapshot:
    """Immutable copy of the aggregated state handed to result callbacks.

    Attributes:
        command: Last accepted mental command.
        eyes: Last eye action.
        brows: Last accepted upper face action.
        mouth: Last accepted lower face action.
    """

    command: str = NEUTRAL
    eyes: str = NEUTRAL
    brows: str = NEUTRAL
    mouth: str = NEUTRAL

    def as_dict(self) -> Dict[str, str]:
        """Return the snapshot as a plain ``{command, eyes, brows, mouth}`` dict."""
        return asdict(self)
