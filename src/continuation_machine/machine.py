"""
Continuation Machine - public entry point.

    run(function_ref, initial_state, initial_args) -> Return | Exit | AbortIterationLimit

Usage:
    from continuation_machine import run, result_of, render

    signal = run("REMOVE_COMMAS", (), (1, 2, 3, 4, 5))
    render(signal)        # "1 2 3 4 5"

    machine = ContinuationMachine(registry, MachineConfig(max_level=12))
    report = machine.run_report("COUNTDOWN", (100,))
    report.applications, report.levels_used

Configuration (max_level, abort_hook) is frozen into MachineConfig and fixed
for the machine's lifetime. Each run gets its own guard and scheduler, so
separate runs share nothing mutable.
"""

from dataclasses import dataclass, replace
from typing import Any, Optional

from continuation_machine.abort import AbortHook, raise_iteration_limit
from continuation_machine.errors import ConfigError
from continuation_machine.hygiene import HygieneGuard
from continuation_machine.registry import TransitionRegistry
from continuation_machine.scheduler import (
    DEFAULT_MAX_LEVEL,
    EscalationScheduler,
    RunObserver,
    RunReport,
    cumulative_budget,
)
from continuation_machine.signals import TerminationSignal, result_of
from continuation_machine.state import FunctionRef, MachineState
from continuation_machine.symbols import render


# Past this, a single attempt would grant over a million applications
MAX_LEVEL_CEILING = 20


@dataclass(frozen=True)
class MachineConfig:
    """The two knobs of the machine."""
    max_level: int = DEFAULT_MAX_LEVEL
    abort_hook: AbortHook = raise_iteration_limit

    def __post_init__(self):
        if isinstance(self.max_level, bool) or not isinstance(self.max_level, int):
            raise ConfigError(f"max_level must be an int, got {self.max_level!r}")
        if not 0 <= self.max_level <= MAX_LEVEL_CEILING:
            raise ConfigError(
                f"max_level must be within 0..{MAX_LEVEL_CEILING}, got {self.max_level}"
            )
        if not callable(self.abort_hook):
            raise ConfigError(f"abort_hook must be callable, got {self.abort_hook!r}")

    @property
    def iteration_limit(self) -> int:
        """Applications available before the abort path."""
        return cumulative_budget(self.max_level)

    def with_hook(self, hook: AbortHook) -> "MachineConfig":
        return replace(self, abort_hook=hook)

    def with_max_level(self, max_level: int) -> "MachineConfig":
        return replace(self, max_level=max_level)


class ContinuationMachine:
    """A registry plus a fixed configuration."""

    def __init__(
        self,
        registry: Optional[TransitionRegistry] = None,
        config: Optional[MachineConfig] = None,
        observer: Optional[RunObserver] = None,
    ):
        if registry is None:
            from continuation_machine.consumers import default_registry
            registry = default_registry()
        self.registry = registry
        self.config = config or MachineConfig()
        self.observer = observer

    def run_report(
        self,
        function_ref: FunctionRef,
        initial_state: Any = (),
        initial_args: Any = (),
    ) -> RunReport:
        """Run and return the full report (signal, attempts, applications)."""
        guard = HygieneGuard(self.registry, function_ref)
        scheduler = EscalationScheduler(
            max_level=self.config.max_level,
            abort_hook=self.config.abort_hook,
            observer=self.observer,
        )
        initial = MachineState(guard.root_ref, initial_state, initial_args)
        return scheduler.execute(guard, initial)

    def run(
        self,
        function_ref: FunctionRef,
        initial_state: Any = (),
        initial_args: Any = (),
    ) -> TerminationSignal:
        return self.run_report(function_ref, initial_state, initial_args).signal

    def expand(
        self,
        function_ref: FunctionRef,
        initial_state: Any = (),
        initial_args: Any = (),
    ) -> str:
        """
        Run and render the result as text; Exit renders as "".

        An abort the hook passed through as AbortIterationLimit raises here.
        """
        return render(result_of(self.run(function_ref, initial_state, initial_args)))


def run(
    function_ref: FunctionRef,
    initial_state: Any = (),
    initial_args: Any = (),
    *,
    registry: Optional[TransitionRegistry] = None,
    config: Optional[MachineConfig] = None,
    observer: Optional[RunObserver] = None,
) -> TerminationSignal:
    """One run with a throwaway machine."""
    machine = ContinuationMachine(registry=registry, config=config, observer=observer)
    return machine.run(function_ref, initial_state, initial_args)
