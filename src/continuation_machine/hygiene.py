"""
Hygiene Guard - deferred materialization of function references.

A reference selected by one round must not be resolved before the scheduler
explicitly invokes it in the next. The guard keeps references inert
(SymbolRef) between rounds and performs exactly one "materialize and
invoke" step per application.

Between rounds a state carries a fresh tag; the guard clears it before the
transition function sees the state, so a transition function never observes
a non-empty tag.
"""

from itertools import count
from typing import Any, Union

from continuation_machine.errors import TransitionProtocolError
from continuation_machine.registry import TransitionFunction, TransitionRegistry
from continuation_machine.signals import TerminationSignal
from continuation_machine.state import FunctionRef, MachineState, SymbolRef


class HygieneGuard:
    """
    Per-run guard. Resolves the run's function once, at construction.

    Not shared between runs: the tag counter is per guard.
    """

    def __init__(self, registry: TransitionRegistry, root_ref: FunctionRef):
        self.root_ref = SymbolRef.coerce(root_ref)
        # Raises UnresolvedFunctionError before any application happens
        self._bound: TransitionFunction = registry.materialize(self.root_ref)
        self._tags = count(1)

    def seal(self, state: MachineState) -> MachineState:
        """Stamp a fresh per-round tag on a state waiting for its round."""
        return state.with_tag(f"{self.root_ref.name}#{next(self._tags)}")

    def release(self, state: MachineState) -> MachineState:
        """Clear the tag and confirm the reference is this run's function."""
        if state.function_ref != self.root_ref:
            raise TransitionProtocolError(
                f"run of '{self.root_ref}' produced a state selecting "
                f"'{state.function_ref}'; the function is fixed for one run"
            )
        if state.tag:
            return state.with_tag("")
        return state

    def invoke(self, released: MachineState) -> Union[MachineState, TerminationSignal, Any]:
        """
        Materialize the reference and apply it to a state from release().

        The state is taken as given; release() already checked the reference
        and cleared the tag.
        """
        return self._bound(released.function_ref, released.user_state, released.remaining_args)
