"""
Transition Registry - name-based dispatch for transition functions.

Transition functions are referred to by name everywhere a reference has to
travel through machine state. The registry is the single place a name turns
into a callable.

Registration:
    registry = TransitionRegistry()

    @registry.register("COUNTDOWN")
    def countdown(ref, user_state, remaining_args):
        ...

    registry.register("IDENTITY", lambda x: (x,))

Resolution happens once, at run start (see hygiene.HygieneGuard). Names
added afterwards never affect a run already in progress.
"""

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from continuation_machine.errors import DuplicateFunctionError, UnresolvedFunctionError
from continuation_machine.state import FunctionRef, SymbolRef

TransitionFunction = Callable[..., Any]


class TransitionRegistry:
    """Mapping from function name to function value."""

    def __init__(self, functions: Optional[Mapping[str, TransitionFunction]] = None):
        self._functions: Dict[str, TransitionFunction] = {}
        for name, fn in (functions or {}).items():
            self.register(name, fn)

    def register(
        self,
        name: FunctionRef,
        fn: Optional[TransitionFunction] = None,
        replace: bool = False,
    ) -> Union[TransitionFunction, Callable[[TransitionFunction], TransitionFunction]]:
        """
        Register fn under name. Without fn, returns a decorator.

        Registering a taken name raises DuplicateFunctionError unless
        replace=True.
        """
        key = SymbolRef.coerce(name).name

        def _add(func: TransitionFunction) -> TransitionFunction:
            if not callable(func):
                raise TypeError(f"'{key}' must be registered with a callable, got {func!r}")
            if key in self._functions and not replace:
                raise DuplicateFunctionError(f"'{key}' is already registered")
            self._functions[key] = func
            return func

        if fn is None:
            return _add
        return _add(fn)

    def unregister(self, name: FunctionRef) -> None:
        key = SymbolRef.coerce(name).name
        if key not in self._functions:
            raise UnresolvedFunctionError(key)
        del self._functions[key]

    def resolve(self, name: FunctionRef) -> TransitionFunction:
        """Look up a name. Unknown names are a caller error."""
        key = SymbolRef.coerce(name).name
        try:
            return self._functions[key]
        except KeyError:
            raise UnresolvedFunctionError(key) from None

    # The point where an inert reference becomes a callable
    materialize = resolve

    def extended(self, functions: Mapping[str, TransitionFunction]) -> "TransitionRegistry":
        """A copy of this registry with extra entries; self is untouched."""
        child = TransitionRegistry(self._functions)
        for name, fn in functions.items():
            child.register(name, fn, replace=True)
        return child

    def names(self) -> List[str]:
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        if isinstance(name, SymbolRef):
            name = name.name
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._functions)
