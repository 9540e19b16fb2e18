"""
Symbol primitives.

Small helpers over symbol sequences (tuples) shared by the machine and its
consumers: emptiness test, concatenation, first argument, and rendering a
result as text.
"""

from typing import Any, Tuple

Symbols = Tuple[Any, ...]


def as_symbols(value: Any) -> Symbols:
    """
    Coerce a value to a symbol tuple.

    None -> (), list/tuple -> tuple, anything else -> one-element tuple.
    Strings are single symbols, not character sequences.
    """
    if value is None:
        return ()
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return (value,)


def is_empty(value: Any) -> bool:
    """True for None, the empty string, and empty sequences."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    return len(as_symbols(value)) == 0


def concat(*parts: Any) -> Symbols:
    """Concatenate symbol sequences (scalars count as one symbol)."""
    out: Tuple[Any, ...] = ()
    for part in parts:
        out += as_symbols(part)
    return out


def first_arg(value: Any) -> Any:
    symbols = as_symbols(value)
    return symbols[0] if symbols else None


def render(value: Any) -> str:
    """
    Render a result as space-separated text.

    Nested groups keep their parentheses, the way a parenthesized
    argument survives in expanded output.
    """
    from continuation_machine.signals import Exit, Return

    if isinstance(value, Exit):
        return ""
    if isinstance(value, Return):
        value = value.value
    if value is None:
        return ""
    if not isinstance(value, (tuple, list)):
        return str(value)
    parts = []
    for item in value:
        if isinstance(item, (tuple, list)):
            parts.append("(" + render(item) + ")")
        else:
            parts.append(str(item))
    return " ".join(p for p in parts if p != "")
