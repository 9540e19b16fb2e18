"""
Termination Signals

A run ends in exactly one of three ways:

- Exit                 run produces no result at all
- Return(value)        run produces exactly value, no wrapping
- AbortIterationLimit  escalation passed max_level (scheduler only)

Exit and Return come from transition functions. AbortIterationLimit is
synthesized by the scheduler and handed to the abort hook; a transition
function that returns one is breaking protocol.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

from continuation_machine.errors import IterationLimitReached
from continuation_machine.state import MachineState


class SignalKind(Enum):
    """Termination signal kinds."""
    EXIT = "exit"
    RETURN = "return"
    ABORT_ITERATION_LIMIT = "abort_iteration_limit"


@dataclass(frozen=True)
class Exit:
    """Terminate; the whole run yields nothing."""

    @property
    def kind(self) -> SignalKind:
        return SignalKind.EXIT

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value}


@dataclass(frozen=True)
class Return:
    """Terminate; the whole run yields exactly value."""
    value: Any = ()

    @property
    def kind(self) -> SignalKind:
        return SignalKind.RETURN

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "value": repr(self.value)}


@dataclass(frozen=True)
class AbortIterationLimit:
    """
    Iteration limit reached.

    level is the last attempted escalation level (== max_level);
    applications is the cumulative count, 2**(max_level + 1) - 1.
    state is the last state produced, tag cleared.
    """
    level: int
    max_level: int
    applications: int
    state: MachineState

    @property
    def kind(self) -> SignalKind:
        return SignalKind.ABORT_ITERATION_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "level": self.level,
            "max_level": self.max_level,
            "applications": self.applications,
            "state": self.state.to_dict(),
        }


EXIT = Exit()

TerminationSignal = Union[Exit, Return, AbortIterationLimit]

# What a transition function may return besides a MachineState
TRANSITION_SIGNALS = (Exit, Return)
ALL_SIGNALS = (Exit, Return, AbortIterationLimit)


def is_signal(obj: Any) -> bool:
    return isinstance(obj, ALL_SIGNALS)


def result_of(signal: TerminationSignal) -> Any:
    """
    The caller-visible result of a run.

    Exit -> (), Return(v) -> v. An abort has no result: this raises
    IterationLimitReached rather than surfacing partial state.
    """
    if isinstance(signal, Exit):
        return ()
    if isinstance(signal, Return):
        return signal.value
    if isinstance(signal, AbortIterationLimit):
        raise IterationLimitReached(signal)
    raise TypeError(f"not a termination signal: {signal!r}")
