"""
Machine Errors

Engine outcomes travel as termination signals (see signals.py). Exceptions
are reserved for two things:

1. Caller errors - unknown names, malformed transition output, bad config
2. The loud default abort - IterationLimitReached

Everything derives from MachineError so callers can catch the family.
"""

from typing import Any


# Diagnostic marker. Appears first in every iteration-limit message so the
# failure reads as "limit reached", never as ordinary output.
ITERATION_LIMIT_MARKER = "CM_ERROR_ITERATION_LIMIT_REACHED"


class MachineError(Exception):
    """Base class for continuation machine errors."""


class IterationLimitReached(MachineError):
    """
    Raised by the default abort hook when escalation passes max_level.

    Carries the AbortIterationLimit signal that triggered it.
    """

    def __init__(self, abort: Any):
        self.abort = abort
        super().__init__(
            f"{ITERATION_LIMIT_MARKER}: transition '{abort.state.function_ref}' "
            f"did not terminate within {abort.applications} applications "
            f"(max_level={abort.max_level}). "
            f"If you see this, the run is over the machine's iteration limit."
        )


class UnresolvedFunctionError(MachineError, KeyError):
    """A function identifier has no entry in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"no transition function registered under '{self.name}'"


class DuplicateFunctionError(MachineError):
    """A name was registered twice in the same registry."""


class TransitionProtocolError(MachineError):
    """Transition output is neither a machine state nor Exit/Return."""


class HygieneViolation(MachineError, TypeError):
    """A callable was placed where an inert reference is required."""


class ConfigError(MachineError, ValueError):
    """Invalid machine configuration."""
