from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from strata.context import Context

Next = Callable[[], Awaitable[Any]]
Middleware = Callable[["Context", Next], Any]
Pipeline = Callable[["Context", Next | None], Awaitable[Any]]
ErrorHandler = Callable[[BaseException, "Context | None"], None]
FinishedCallback = Callable[[BaseException | None], Awaitable[None] | None]
