"""
Pytest configuration.

Ensures the src directory is on the path for imports, and provides the
transition functions most tests share.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so imports work
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from continuation_machine import (  # noqa: E402
    Return,
    RunObserver,
    TransitionRegistry,
    continue_with,
)


def stop_after(total: int):
    """Transition that returns Return("done") on application number total."""
    def transition(ref, user_state, remaining_args):
        (seen,) = user_state
        seen += 1
        if seen >= total:
            return Return("done")
        return continue_with(ref, (seen,), remaining_args)
    return transition


def forever(ref, user_state, remaining_args):
    (seen,) = user_state
    return continue_with(ref, (seen + 1,), remaining_args)


class RecordingObserver(RunObserver):
    """Keeps every state a transition function was handed."""

    def __init__(self):
        self.applications = []
        self.attempts = []
        self.reports = []

    def on_application(self, level, index, state):
        self.applications.append((level, index, state))

    def on_attempt_end(self, record):
        self.attempts.append(record)

    def on_run_end(self, report):
        self.reports.append(report)


@pytest.fixture
def registry():
    reg = TransitionRegistry()
    reg.register("FOREVER", forever)
    for total in (1, 2, 3, 5, 8, 100):
        reg.register(f"STOP_AFTER_{total}", stop_after(total))
    return reg


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def make_stop_after():
    return stop_after
