"""
Machine State

The unit of information carried between rounds:

    (tag, function_ref, user_state, remaining_args)

- tag:            internal control token; always "" when a transition
                  function sees the state
- function_ref:   inert name of the transition function (SymbolRef)
- user_state:     opaque symbol tuple, meaningful only to the transition
- remaining_args: symbol tuple yet to be consumed

States are frozen. Every round produces a new one; nothing is mutated.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Union

from continuation_machine.errors import HygieneViolation
from continuation_machine.symbols import Symbols, as_symbols


# =============================================================================
# Inert References
# =============================================================================

@dataclass(frozen=True)
class SymbolRef:
    """
    A function reference held as data.

    Not callable. The registry turns it into a function only at the
    point of invocation.
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise HygieneViolation(
                f"function reference must be a non-empty name, got {self.name!r}"
            )

    @classmethod
    def coerce(cls, ref: Union["SymbolRef", str]) -> "SymbolRef":
        """Accept a SymbolRef or a plain name; reject callables."""
        if isinstance(ref, SymbolRef):
            return ref
        if isinstance(ref, str):
            return cls(ref)
        if callable(ref):
            raise HygieneViolation(
                f"callable {getattr(ref, '__name__', ref)!r} passed as a function "
                f"reference; pass its registered name instead"
            )
        raise HygieneViolation(f"cannot use {ref!r} as a function reference")

    def __str__(self) -> str:
        return self.name


FunctionRef = Union[SymbolRef, str]


# =============================================================================
# Machine State
# =============================================================================

@dataclass(frozen=True)
class MachineState:
    """One round's input or output."""
    function_ref: SymbolRef
    user_state: Symbols = ()
    remaining_args: Symbols = ()
    tag: str = field(default="", compare=False)

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "function_ref", SymbolRef.coerce(self.function_ref))
        object.__setattr__(self, "user_state", as_symbols(self.user_state))
        object.__setattr__(self, "remaining_args", as_symbols(self.remaining_args))

    def advance(self, user_state: Any = None, remaining_args: Any = None) -> "MachineState":
        """
        Successor state under the same function, untagged.

        Omitted fields carry over.
        """
        return MachineState(
            function_ref=self.function_ref,
            user_state=self.user_state if user_state is None else user_state,
            remaining_args=self.remaining_args if remaining_args is None else remaining_args,
        )

    def with_tag(self, tag: str) -> "MachineState":
        return replace(self, tag=tag)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "function_ref": self.function_ref.name,
            "user_state": [repr(s) for s in self.user_state],
            "remaining_args": [repr(s) for s in self.remaining_args],
        }


def continue_with(
    function_ref: FunctionRef,
    user_state: Any = (),
    remaining_args: Any = (),
) -> MachineState:
    """Build the "keep going" result of a transition function."""
    return MachineState(function_ref, user_state, remaining_args)
