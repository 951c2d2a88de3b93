"""
Handler invocation helpers.

Transport handlers may be declared with any prefix of the standard
argument list (``request, response, next`` or
``error, request, response, next``), sync or async.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional


_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def positional_arity(handler: Callable[..., Any]) -> Optional[int]:
    """
    Number of positional arguments a handler accepts.

    Returns None when the handler takes ``*args`` (it receives everything).
    """
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in _POSITIONAL:
            count += 1
    return count


async def invoke(handler: Callable[..., Any], arity: Optional[int], *args: Any) -> Any:
    """Call ``handler`` with at most ``arity`` arguments, awaiting if needed."""
    if arity is not None:
        args = args[:arity]
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
