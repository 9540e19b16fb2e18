"""
Tests for Consumers

End-to-end runs through the default registry:
1. for-each over [1, 2, 3] yields "1 2 3" in order
2. REMOVE_COMMAS flattens its arguments
3. Element functions are looked up by name at the point of use
"""

import pytest

from continuation_machine import (
    ContinuationMachine,
    IterationLimitReached,
    MachineConfig,
    Return,
    SymbolRef,
    TransitionProtocolError,
    UnresolvedFunctionError,
    default_registry,
    for_each,
    render,
    result_of,
)
from continuation_machine.consumers import FOREACH_ITERATE, ForEach
from continuation_machine.symbols import concat, first_arg, is_empty


# =============================================================================
# For-Each
# =============================================================================

def test_foreach_preserves_order():
    signal = for_each("IDENTITY", 1, 2, 3)
    assert signal == Return((1, 2, 3))
    assert render(signal) == "1 2 3"
    print("  PASS: foreach_preserves_order")


def test_foreach_with_callable_element():
    signal = for_each(lambda x: (x * 10,), 1, 2, 3)
    assert render(signal) == "10 20 30"
    print("  PASS: foreach_with_callable_element")


def test_foreach_callable_leaves_registry_untouched():
    registry = default_registry()
    before = registry.names()
    for_each(lambda x: (x,), "a", registry=registry)
    assert registry.names() == before
    print("  PASS: foreach_callable_leaves_registry_untouched")


def test_foreach_parenthesize():
    assert render(for_each("PARENTHESIZE", "a", "b")) == "(a) (b)"
    print("  PASS: foreach_parenthesize")


def test_foreach_no_items():
    assert result_of(for_each("IDENTITY")) == ()
    print("  PASS: foreach_no_items")


def test_foreach_element_may_emit_nothing():
    signal = for_each(lambda x: () if x % 2 else (x,), 1, 2, 3, 4)
    assert result_of(signal) == (2, 4)
    print("  PASS: foreach_element_may_emit_nothing")


def test_foreach_unknown_element():
    with pytest.raises(UnresolvedFunctionError):
        for_each("NOT_REGISTERED", 1)
    print("  PASS: foreach_unknown_element")


def test_foreach_through_machine():
    """The same consumer driven directly with an inert element reference."""
    machine = ContinuationMachine()
    signal = machine.run(FOREACH_ITERATE, (), (SymbolRef("IDENTITY"), "x", "y"))
    assert signal == Return(("x", "y"))
    print("  PASS: foreach_through_machine")


def test_foreach_long_input_hits_cap():
    """One application per item: 1024 items exceed the default cap."""
    config = MachineConfig(max_level=9)
    assert len(result_of(for_each("IDENTITY", *range(1023), config=config))) == 1023
    with pytest.raises(IterationLimitReached):
        for_each("IDENTITY", *range(1024), config=config)
    print("  PASS: foreach_long_input_hits_cap")


def test_foreach_registered_with_its_registry():
    registry = default_registry()
    consumer = registry.resolve(FOREACH_ITERATE)
    assert isinstance(consumer, ForEach)
    assert consumer.registry is registry
    print("  PASS: foreach_registered_with_its_registry")


# =============================================================================
# Other Consumers
# =============================================================================

def test_remove_commas():
    machine = ContinuationMachine()
    assert machine.expand("REMOVE_COMMAS", (), (1, 2, 3, 4, 5)) == "1 2 3 4 5"
    assert machine.expand("REMOVE_COMMAS") == ""
    print("  PASS: remove_commas")


def test_remove_commas_keeps_initial_state():
    machine = ContinuationMachine()
    assert result_of(machine.run("REMOVE_COMMAS", ("start",), ("a",))) == ("start", "a")
    print("  PASS: remove_commas_keeps_initial_state")


def test_default_registry_is_fresh():
    a, b = default_registry(), default_registry()
    a.register("EXTRA", lambda r, s, x: Return(0))
    assert "EXTRA" not in b
    print("  PASS: default_registry_is_fresh")


# =============================================================================
# Symbol Primitives
# =============================================================================

def test_symbol_primitives():
    assert is_empty(()) and is_empty(None) and is_empty("")
    assert not is_empty((0,))
    assert concat((1,), 2, [3, 4]) == (1, 2, 3, 4)
    assert first_arg((7, 8)) == 7
    assert first_arg(()) is None
    print("  PASS: symbol_primitives")


# =============================================================================
# Counters
# =============================================================================

@pytest.mark.parametrize("name", ["COUNTDOWN", "COUNT_APPLICATIONS"])
@pytest.mark.parametrize("bad", ["abc", 2.5, True])
def test_counter_must_be_integer(name, bad):
    with pytest.raises(TransitionProtocolError):
        ContinuationMachine().run(name, (bad,))
    print(f"  PASS: counter_must_be_integer[{name}-{bad!r}]")


def test_counter_defaults_to_zero():
    assert ContinuationMachine().run("COUNTDOWN") == Return(0)
    print("  PASS: counter_defaults_to_zero")
