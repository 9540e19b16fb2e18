"""
Tests for the Escalation Scheduler

Verifies:
1. Budgets double per level, cap is derived from max_level
2. Countdown from n terminates in ceil(log2(n + 1)) attempts
3. A signal mid-attempt discards the rest of the budget
4. A function that never signals aborts at max_level with 2**(max_level+1) - 1 applications
5. Runs are deterministic and share nothing
"""

import math

import pytest

from continuation_machine import (
    AttemptOutcome,
    ContinuationMachine,
    IterationLimitReached,
    MachineConfig,
    Return,
    attempt_budget,
    attempts_needed,
    cumulative_budget,
    default_registry,
    return_abort_signal,
)


# =============================================================================
# Budget Arithmetic
# =============================================================================

def test_budget_doubles_per_level():
    """Attempt i grants 2**i applications."""
    assert [attempt_budget(i) for i in range(6)] == [1, 2, 4, 8, 16, 32]
    print("  PASS: budget_doubles_per_level")


def test_cumulative_budget_derived_from_max_level():
    """Cap is the sum of all attempt budgets, not a fixed figure."""
    for max_level in range(12):
        expected = sum(attempt_budget(i) for i in range(max_level + 1))
        assert cumulative_budget(max_level) == expected
    assert cumulative_budget(9) == 1023
    print("  PASS: cumulative_budget_derived_from_max_level")


def test_attempts_needed():
    assert attempts_needed(0) == 0
    assert attempts_needed(1) == 1
    assert attempts_needed(3) == 2
    assert attempts_needed(4) == 3
    assert attempts_needed(1023) == 10
    print("  PASS: attempts_needed")


# =============================================================================
# Termination Correctness
# =============================================================================

@pytest.mark.parametrize("n", [1, 2, 3, 4, 7, 8, 15, 16, 100, 511, 1000, 1023])
def test_countdown_attempts(n):
    """Countdown from n returns 0 in ceil(log2(n + 1)) attempts."""
    machine = ContinuationMachine()
    report = machine.run_report("COUNTDOWN", (n,))

    assert report.signal == Return(0)
    assert report.applications == n
    assert report.levels_used == math.ceil(math.log2(n + 1)), \
        f"n={n}: expected {math.ceil(math.log2(n + 1))} attempts, got {report.levels_used}"
    print(f"  PASS: countdown_attempts[{n}]")


def test_countdown_zero_single_attempt():
    """n = 0 terminates on the very first application."""
    report = ContinuationMachine().run_report("COUNTDOWN", (0,))
    assert report.signal == Return(0)
    assert report.applications == 1
    assert report.levels_used == 1
    print("  PASS: countdown_zero_single_attempt")


def test_levels_start_at_zero():
    """Every fresh run begins with a budget of 1."""
    machine = ContinuationMachine()
    machine.run("COUNTDOWN", (500,))
    report = machine.run_report("COUNTDOWN", (2,))
    assert report.attempts[0].level == 0
    assert report.attempts[0].budget == 1
    print("  PASS: levels_start_at_zero")


def test_escalation_records():
    """Exhausted attempts escalate; the last one terminates."""
    report = ContinuationMachine().run_report("COUNTDOWN", (10,))

    assert [a.level for a in report.attempts] == [0, 1, 2, 3]
    assert [a.budget for a in report.attempts] == [1, 2, 4, 8]
    assert [a.outcome for a in report.attempts] == [
        AttemptOutcome.EXHAUSTED,
        AttemptOutcome.EXHAUSTED,
        AttemptOutcome.EXHAUSTED,
        AttemptOutcome.TERMINATED,
    ]
    # 1 + 2 + 4 = 7 before the last attempt, 3 more to finish
    assert report.attempts[-1].applications == 3
    print("  PASS: escalation_records")


# =============================================================================
# Short-Circuit
# =============================================================================

@pytest.mark.parametrize("total", [2, 5, 100])
def test_signal_short_circuits_attempt(registry, observer, total):
    """No application after the one that signalled."""
    machine = ContinuationMachine(registry, observer=observer)
    report = machine.run_report(f"STOP_AFTER_{total}", (0,))

    assert report.signal == Return("done")
    assert report.applications == total
    assert len(observer.applications) == total

    last = report.attempts[-1]
    assert last.outcome == AttemptOutcome.TERMINATED
    assert last.applications <= last.budget
    applied_in_last = [a for a in observer.applications if a[0] == last.level]
    assert len(applied_in_last) == last.applications
    print(f"  PASS: signal_short_circuits_attempt[{total}]")


def test_short_circuit_inside_large_attempt(registry):
    """5 applications: attempt 2 (budget 4) stops after 2."""
    report = ContinuationMachine(registry).run_report("STOP_AFTER_5", (0,))
    last = report.attempts[-1]
    assert (last.level, last.budget, last.applications) == (2, 4, 2)
    print("  PASS: short_circuit_inside_large_attempt")


# =============================================================================
# Cap Enforcement
# =============================================================================

@pytest.mark.parametrize("max_level", [0, 1, 3, 9])
def test_cap_enforced_at_max_level(registry, max_level):
    """A function that never signals aborts exactly at max_level."""
    config = MachineConfig(max_level=max_level, abort_hook=return_abort_signal)
    report = ContinuationMachine(registry, config).run_report("FOREVER", (0,))

    assert report.aborted
    assert report.signal.level == max_level
    assert report.signal.max_level == max_level
    assert report.applications == 2 ** (max_level + 1) - 1
    assert report.signal.applications == report.applications
    assert len(report.attempts) == max_level + 1
    assert all(a.outcome == AttemptOutcome.EXHAUSTED for a in report.attempts)
    print(f"  PASS: cap_enforced_at_max_level[{max_level}]")


def test_default_cap_raises(registry):
    """Default configuration fails loudly after 1023 applications."""
    with pytest.raises(IterationLimitReached) as exc_info:
        ContinuationMachine(registry).run("FOREVER", (0,))
    assert exc_info.value.abort.applications == 1023
    print("  PASS: default_cap_raises")


def test_countdown_at_cap_boundary():
    """Exactly the cumulative budget still terminates; one more aborts."""
    config = MachineConfig(max_level=4, abort_hook=return_abort_signal)
    machine = ContinuationMachine(default_registry(), config)

    assert machine.run("COUNTDOWN", (31,)) == Return(0)
    assert machine.run_report("COUNTDOWN", (32,)).aborted
    print("  PASS: countdown_at_cap_boundary")


# =============================================================================
# Determinism
# =============================================================================

def test_runs_are_deterministic(registry):
    config = MachineConfig(max_level=6, abort_hook=return_abort_signal)
    machine = ContinuationMachine(registry, config)
    first = machine.run_report("FOREVER", (0,)).to_dict()
    second = machine.run_report("FOREVER", (0,)).to_dict()
    assert first == second
    print("  PASS: runs_are_deterministic")


def test_reports_not_shared_between_runs():
    machine = ContinuationMachine()
    a = machine.run_report("COUNTDOWN", (3,))
    b = machine.run_report("COUNTDOWN", (3,))
    assert a is not b
    assert a.attempts is not b.attempts
    print("  PASS: reports_not_shared_between_runs")
