"""
Escalation Scheduler

Runs a transition function in attempts of exponentially growing budget:

    level:   0  1  2  3 ...  max_level
    budget:  1  2  4  8 ...  2**max_level

Within an attempt the output of application k feeds application k + 1.
Exactly one of three things happens per attempt:

1. Exit/Return at some application  -> run ends, rest of budget discarded
2. Budget exhausted, no signal      -> carry state to level + 1
3. level + 1 would pass max_level   -> abort hook

Small runs finish in a few cheap attempts; a run of n applications finishes
in attempts_needed(n) attempts. The cap is 2**(max_level + 1) - 1
applications, derived from max_level rather than fixed.

Usage:
    scheduler = EscalationScheduler(max_level=9)
    report = scheduler.execute(HygieneGuard(registry, "COUNTDOWN"), state)
    report.signal, report.applications, report.attempts
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from continuation_machine.abort import AbortHook, raise_iteration_limit
from continuation_machine.errors import MachineError, TransitionProtocolError
from continuation_machine.hygiene import HygieneGuard
from continuation_machine.signals import (
    ALL_SIGNALS,
    AbortIterationLimit,
    TRANSITION_SIGNALS,
    TerminationSignal,
)
from continuation_machine.state import MachineState, SymbolRef

logger = logging.getLogger(__name__)


DEFAULT_MAX_LEVEL = 9


# =============================================================================
# Budget Arithmetic
# =============================================================================

def attempt_budget(level: int) -> int:
    """Applications granted to the attempt at level."""
    return 1 << level


def cumulative_budget(max_level: int) -> int:
    """Total applications before the abort path: sum of 2**i for i <= max_level."""
    return (1 << (max_level + 1)) - 1


def attempts_needed(applications: int) -> int:
    """Smallest k with 2**k - 1 >= applications."""
    return max(applications, 0).bit_length()


# =============================================================================
# Run Records
# =============================================================================

class AttemptOutcome(Enum):
    """How an attempt ended."""
    TERMINATED = "terminated"   # Exit/Return inside the attempt
    EXHAUSTED = "exhausted"     # Full budget used, escalated


@dataclass
class AttemptRecord:
    """One attempt's batch of applications."""
    level: int
    budget: int
    applications: int = 0
    outcome: AttemptOutcome = AttemptOutcome.EXHAUSTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "budget": self.budget,
            "applications": self.applications,
            "outcome": self.outcome.value,
        }


@dataclass
class RunReport:
    """Everything observable about one run."""
    function_ref: SymbolRef
    max_level: int
    signal: Optional[TerminationSignal] = None
    attempts: List[AttemptRecord] = field(default_factory=list)
    aborted: bool = False

    @property
    def applications(self) -> int:
        return sum(a.applications for a in self.attempts)

    @property
    def levels_used(self) -> int:
        return len(self.attempts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "function_ref": self.function_ref.name,
            "max_level": self.max_level,
            "signal": self.signal.to_dict() if self.signal is not None else None,
            "attempts": [a.to_dict() for a in self.attempts],
            "applications": self.applications,
            "aborted": self.aborted,
        }


class RunObserver:
    """
    Callbacks for watching a run. Default implementations do nothing.

    on_application receives the state exactly as the transition function
    sees it (tag cleared).
    """

    def on_run_start(self, function_ref: SymbolRef, max_level: int) -> None:
        pass

    def on_application(self, level: int, index: int, state: MachineState) -> None:
        pass

    def on_attempt_end(self, record: AttemptRecord) -> None:
        pass

    def on_run_end(self, report: RunReport) -> None:
        pass


# =============================================================================
# Scheduler
# =============================================================================

class EscalationScheduler:
    """
    Drives one run at a time; holds no per-run state between calls.

    max_level and abort_hook are fixed at construction.
    """

    def __init__(
        self,
        max_level: int = DEFAULT_MAX_LEVEL,
        abort_hook: AbortHook = raise_iteration_limit,
        observer: Optional[RunObserver] = None,
    ):
        self.max_level = max_level
        self.abort_hook = abort_hook
        self.observer = observer or RunObserver()

    def execute(self, guard: HygieneGuard, initial: MachineState) -> RunReport:
        report = RunReport(function_ref=guard.root_ref, max_level=self.max_level)
        self.observer.on_run_start(guard.root_ref, self.max_level)

        # A raising transition still closes the run for the observer
        try:
            signal, state = self._escalate(guard, report, guard.seal(initial))
        except Exception:
            self.observer.on_run_end(report)
            raise

        if signal is None:
            return self._abort(report, guard, state)

        report.signal = signal
        logger.debug(
            "%s: %s at level %d after %d applications",
            guard.root_ref, signal.kind.value, report.attempts[-1].level, report.applications,
        )
        self.observer.on_run_end(report)
        return report

    def _escalate(
        self, guard: HygieneGuard, report: RunReport, state: MachineState,
    ) -> Tuple[Optional[TerminationSignal], MachineState]:
        """Run attempts 0..max_level; stop at the first signal."""
        for level in range(self.max_level + 1):
            record = AttemptRecord(level=level, budget=attempt_budget(level))
            report.attempts.append(record)

            for index in range(record.budget):
                released = guard.release(state)
                self.observer.on_application(level, index, released)
                output = guard.invoke(released)
                record.applications += 1
                if isinstance(output, MachineState):
                    state = guard.seal(output)
                    continue
                signal = self._check_signal(output, guard)
                record.outcome = AttemptOutcome.TERMINATED
                self.observer.on_attempt_end(record)
                return signal, state

            self.observer.on_attempt_end(record)
            if level < self.max_level:
                logger.debug(
                    "%s: level %d exhausted, escalating to budget %d",
                    guard.root_ref, level, attempt_budget(level + 1),
                )

        return None, state

    def _check_signal(self, output: Any, guard: HygieneGuard) -> TerminationSignal:
        if isinstance(output, TRANSITION_SIGNALS):
            return output
        if isinstance(output, AbortIterationLimit):
            raise TransitionProtocolError(
                f"'{guard.root_ref}' returned AbortIterationLimit; only the "
                f"scheduler decides when the iteration limit is reached"
            )
        raise TransitionProtocolError(
            f"'{guard.root_ref}' returned {output!r}; expected a MachineState, "
            f"Exit or Return"
        )

    def _abort(self, report: RunReport, guard: HygieneGuard, state: MachineState) -> RunReport:
        abort = AbortIterationLimit(
            level=self.max_level,
            max_level=self.max_level,
            applications=report.applications,
            state=guard.release(state),
        )
        # Stays the abort signal if the hook raises
        report.signal = abort
        report.aborted = True
        logger.warning(
            "%s: iteration limit reached after %d applications (max_level=%d)",
            guard.root_ref, abort.applications, self.max_level,
        )
        try:
            outcome = self.abort_hook(abort)
        except Exception:
            self.observer.on_run_end(report)
            raise
        if not isinstance(outcome, ALL_SIGNALS):
            self.observer.on_run_end(report)
            raise MachineError(
                f"abort hook returned {outcome!r}; expected a termination signal"
            )
        report.signal = outcome
        self.observer.on_run_end(report)
        return report
