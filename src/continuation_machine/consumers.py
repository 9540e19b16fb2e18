"""
Consumers - transition functions built on the machine.

These use the machine's contract; they are not part of the engine.

    FOREACH_ITERATE     apply an element function to each argument, in order
    REMOVE_COMMAS       collect arguments into one sequence
    DISCARD_ALL         consume every argument, then Exit
    COUNTDOWN           decrement a counter, Return(0) when it runs out
    COUNT_APPLICATIONS  never terminates; counts rounds in user_state

Usage:
    from continuation_machine.consumers import for_each

    for_each("IDENTITY", 1, 2, 3)            # Return((1, 2, 3))
    for_each(lambda x: (x * 10,), 1, 2, 3)   # Return((10, 20, 30))
"""

from typing import Any, Callable, Optional, Union

from continuation_machine.abort import return_partial_state
from continuation_machine.errors import TransitionProtocolError
from continuation_machine.registry import TransitionRegistry
from continuation_machine.signals import EXIT, Return, TerminationSignal
from continuation_machine.state import MachineState, SymbolRef, continue_with
from continuation_machine.symbols import Symbols, as_symbols, concat, first_arg, is_empty


FOREACH_ITERATE = "FOREACH_ITERATE"
REMOVE_COMMAS = "REMOVE_COMMAS"
DISCARD_ALL = "DISCARD_ALL"
COUNTDOWN = "COUNTDOWN"
COUNT_APPLICATIONS = "COUNT_APPLICATIONS"


# =============================================================================
# Element Functions (used by FOREACH_ITERATE)
# =============================================================================

def identity(item: Any) -> Symbols:
    return (item,)


def parenthesize(item: Any) -> Symbols:
    """Wrap the item as a single grouped symbol."""
    return (as_symbols(item),)


# =============================================================================
# Transition Functions
# =============================================================================

class ForEach:
    """
    Apply an element function to each argument, left to right.

    remaining_args = (element_ref, item, item, ...). The element function
    travels as an inert name and is looked up only when applied. Its output
    is appended to user_state; Return(user_state) once no items remain.
    """

    def __init__(self, registry: TransitionRegistry):
        self.registry = registry

    def __call__(self, ref: SymbolRef, user_state: Symbols, remaining_args: Symbols):
        if len(remaining_args) < 2:
            return Return(user_state)
        element_ref, head, *rest = remaining_args
        element = self.registry.materialize(element_ref)
        accumulated = concat(user_state, element(head))
        if is_empty(rest):
            return Return(accumulated)
        return continue_with(ref, accumulated, (element_ref, *rest))


def remove_commas(ref: SymbolRef, user_state: Symbols, remaining_args: Symbols):
    if is_empty(remaining_args):
        return Return(user_state)
    head, *rest = remaining_args
    collected = concat(user_state, (head,))
    if is_empty(rest):
        return Return(collected)
    return continue_with(ref, collected, rest)


def discard_all(ref: SymbolRef, user_state: Symbols, remaining_args: Symbols):
    # Exit regardless of what has accumulated
    if is_empty(remaining_args):
        return EXIT
    head, *rest = remaining_args
    return continue_with(ref, concat(user_state, (head,)), rest)


def _counter(ref: SymbolRef, user_state: Symbols) -> int:
    counter = first_arg(user_state)
    if counter is None:
        return 0
    if isinstance(counter, bool) or not isinstance(counter, int):
        raise TransitionProtocolError(
            f"'{ref}' needs an integer counter in user_state, got {counter!r}"
        )
    return counter


def countdown(ref: SymbolRef, user_state: Symbols, remaining_args: Symbols):
    """user_state = (n,). Takes max(n, 1) applications."""
    counter = _counter(ref, user_state)
    if counter <= 1:
        return Return(0)
    return continue_with(ref, (counter - 1,), remaining_args)


def count_applications(ref: SymbolRef, user_state: Symbols, remaining_args: Symbols) -> MachineState:
    return continue_with(ref, (_counter(ref, user_state) + 1,), remaining_args)


# =============================================================================
# Registry
# =============================================================================

def default_registry() -> TransitionRegistry:
    """A fresh registry holding the consumers and element functions above."""
    registry = TransitionRegistry({
        REMOVE_COMMAS: remove_commas,
        DISCARD_ALL: discard_all,
        COUNTDOWN: countdown,
        COUNT_APPLICATIONS: count_applications,
        "IDENTITY": identity,
        "PARENTHESIZE": parenthesize,
    })
    registry.register(FOREACH_ITERATE, ForEach(registry))
    return registry


def for_each(
    element: Union[str, SymbolRef, Callable[[Any], Any]],
    *items: Any,
    registry: Optional[TransitionRegistry] = None,
    config: Optional[Any] = None,
) -> TerminationSignal:
    """
    Run FOREACH_ITERATE over items.

    element is a registered name or a callable returning the symbols to
    append for one item. A callable is registered under a private name in
    a copy of the registry, so the caller's registry is left as it was.
    """
    from continuation_machine.machine import ContinuationMachine

    registry = registry or default_registry()
    if callable(element) and not isinstance(element, SymbolRef):
        name = f"__element_{getattr(element, '__name__', 'fn')}"
        registry = registry.extended({name: element})
        registry.register(FOREACH_ITERATE, ForEach(registry), replace=True)
        element = name
    element_ref = SymbolRef.coerce(element)
    machine = ContinuationMachine(registry, config)
    return machine.run(FOREACH_ITERATE, (), (element_ref, *items))


def probe_iteration_limit(max_level: Optional[int] = None) -> int:
    """
    Number of applications the machine allows before aborting.

    Runs COUNT_APPLICATIONS with the partial-state hook and reads the
    counter back. Deterministic for a given max_level.
    """
    from continuation_machine.machine import ContinuationMachine, MachineConfig

    config = MachineConfig(abort_hook=return_partial_state)
    if max_level is not None:
        config = config.with_max_level(max_level)
    signal = ContinuationMachine(default_registry(), config).run(COUNT_APPLICATIONS, (0,))
    return first_arg(signal.value)
