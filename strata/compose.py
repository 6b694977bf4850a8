import inspect
from collections.abc import Sequence
from typing import Any

from strata.exceptions import MultipleNextCallsError
from strata.types.app import Middleware, Next, Pipeline


def compose(middleware: Sequence[Middleware]) -> Pipeline:
    """Compose ``middleware`` into a single onion pipeline.

    Each handler receives the context and a ``next`` continuation running the
    rest of the chain. The optional ``next`` given to the pipeline itself runs
    after the last handler, which lets composed pipelines nest.
    """
    if not isinstance(middleware, list | tuple):
        raise TypeError("Middleware stack must be a list")
    for fn in middleware:
        if not callable(fn):
            raise TypeError("Middleware must be composed of functions")

    handlers = tuple(middleware)

    async def pipeline(ctx, next: Next | None = None) -> Any:
        index = -1

        async def dispatch(i: int) -> Any:
            nonlocal index
            if i <= index:
                raise MultipleNextCallsError()
            index = i
            if i == len(handlers):
                return await next() if next is not None else None
            fn = handlers[i]

            async def call_next() -> Any:
                return await dispatch(i + 1)

            result = fn(ctx, call_next)
            if inspect.isawaitable(result):
                result = await result
            return result

        return await dispatch(0)

    return pipeline
