"""
Abort hooks - what happens when escalation passes max_level.

The scheduler never decides the abort outcome itself. It builds an
AbortIterationLimit and hands it to the configured hook:

    raise_iteration_limit     (default) fail loudly with IterationLimitReached
    return_abort_signal       the run returns the AbortIterationLimit signal
    return_partial_state      Return(user_state of the last state)
    return_application_count  Return(cumulative application count)

The last two exist for probing: with the same max_level they report the
same number on every run.

Usage:
    config = MachineConfig(max_level=9, abort_hook=return_partial_state)
"""

from typing import Callable, Dict

from continuation_machine.errors import ConfigError, IterationLimitReached
from continuation_machine.signals import AbortIterationLimit, Return, TerminationSignal

AbortHook = Callable[[AbortIterationLimit], TerminationSignal]


def raise_iteration_limit(abort: AbortIterationLimit) -> TerminationSignal:
    raise IterationLimitReached(abort)


def return_abort_signal(abort: AbortIterationLimit) -> TerminationSignal:
    return abort


def return_partial_state(abort: AbortIterationLimit) -> TerminationSignal:
    return Return(abort.state.user_state)


def return_application_count(abort: AbortIterationLimit) -> TerminationSignal:
    return Return(abort.applications)


ABORT_HOOKS: Dict[str, AbortHook] = {
    "raise": raise_iteration_limit,
    "signal": return_abort_signal,
    "partial_state": return_partial_state,
    "application_count": return_application_count,
}

DEFAULT_ABORT_HOOK = "raise"


def get_abort_hook(name: str) -> AbortHook:
    try:
        return ABORT_HOOKS[name]
    except KeyError:
        known = ", ".join(sorted(ABORT_HOOKS))
        raise ConfigError(f"unknown abort hook '{name}' (known: {known})") from None


def hook_name(hook: AbortHook) -> str:
    """Reverse lookup for serialisation; custom hooks have no name."""
    for name, known in ABORT_HOOKS.items():
        if known is hook:
            return name
    raise ConfigError(f"abort hook {hook!r} is not one of the named hooks")
