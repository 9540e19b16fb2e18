"""
Continuation Machine

A bounded iterative rewriting engine. A pure transition function is applied
to a machine state again and again, in attempts of doubling budget
(1, 2, 4, ... applications), until it returns Exit or Return, or the
escalation cap is passed and the abort hook decides the outcome.

Usage:
    from continuation_machine import (
        ContinuationMachine, MachineConfig, TransitionRegistry,
        Return, continue_with, run, render,
    )

    registry = TransitionRegistry()

    @registry.register("HALVE")
    def halve(ref, user_state, remaining_args):
        (n,) = user_state
        if n <= 1:
            return Return(n)
        return continue_with(ref, (n // 2,), remaining_args)

    run("HALVE", (1000,), registry=registry)     # Return(1)
    run("REMOVE_COMMAS", (), (1, 2, 3))          # Return((1, 2, 3)), default registry

Termination:
    Exit()                 nothing
    Return(value)          exactly value
    AbortIterationLimit    cap passed; default hook raises IterationLimitReached
"""

from continuation_machine.abort import (
    ABORT_HOOKS,
    AbortHook,
    get_abort_hook,
    raise_iteration_limit,
    return_abort_signal,
    return_application_count,
    return_partial_state,
)
from continuation_machine.consumers import default_registry, for_each, probe_iteration_limit
from continuation_machine.errors import (
    ConfigError,
    DuplicateFunctionError,
    HygieneViolation,
    IterationLimitReached,
    MachineError,
    TransitionProtocolError,
    UnresolvedFunctionError,
)
from continuation_machine.hygiene import HygieneGuard
from continuation_machine.machine import (
    MAX_LEVEL_CEILING,
    ContinuationMachine,
    MachineConfig,
    run,
)
from continuation_machine.registry import TransitionRegistry
from continuation_machine.scheduler import (
    DEFAULT_MAX_LEVEL,
    AttemptOutcome,
    AttemptRecord,
    EscalationScheduler,
    RunObserver,
    RunReport,
    attempt_budget,
    attempts_needed,
    cumulative_budget,
)
from continuation_machine.signals import (
    EXIT,
    AbortIterationLimit,
    Exit,
    Return,
    SignalKind,
    TerminationSignal,
    is_signal,
    result_of,
)
from continuation_machine.state import MachineState, SymbolRef, continue_with
from continuation_machine.symbols import render

__version__ = "0.1.0"

__all__ = [
    # Entry
    "run",
    "ContinuationMachine",
    "MachineConfig",
    "MAX_LEVEL_CEILING",
    # State & signals
    "MachineState",
    "SymbolRef",
    "continue_with",
    "Exit",
    "EXIT",
    "Return",
    "AbortIterationLimit",
    "SignalKind",
    "TerminationSignal",
    "is_signal",
    "result_of",
    "render",
    # Registry & guard
    "TransitionRegistry",
    "HygieneGuard",
    "default_registry",
    # Scheduler
    "EscalationScheduler",
    "RunObserver",
    "RunReport",
    "AttemptRecord",
    "AttemptOutcome",
    "DEFAULT_MAX_LEVEL",
    "attempt_budget",
    "cumulative_budget",
    "attempts_needed",
    # Abort hooks
    "AbortHook",
    "ABORT_HOOKS",
    "get_abort_hook",
    "raise_iteration_limit",
    "return_abort_signal",
    "return_partial_state",
    "return_application_count",
    # Consumers
    "for_each",
    "probe_iteration_limit",
    # Errors
    "MachineError",
    "IterationLimitReached",
    "UnresolvedFunctionError",
    "DuplicateFunctionError",
    "TransitionProtocolError",
    "HygieneViolation",
    "ConfigError",
]
