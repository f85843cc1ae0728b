"""Invoke helpers — call sync or async callables uniformly.

Actions, authentication predicates, authorization predicates, role
checkers and scheme verifiers can all be ``def`` or ``async def``.
The sync/async check lives here and nowhere else.

Usage::

    from rest_pipeline._internal.invoke import invoke

    result = await invoke(predicate, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def is_pass(result: Any) -> bool:
    """Whether a predicate result counts as success.

    Predicates pass by returning nothing or exactly ``True``. Any other
    value (``False``, ``0``, a string, an object) is a failure.
    """
    return result is None or result is True
