from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from strata.constants import EMPTY_STATUSES
from strata.response import is_bytes_like, is_stream, serialize_body

if TYPE_CHECKING:
    from strata.context import Context

logger = logging.getLogger("strata.respond")


async def discard_body(body: Any) -> None:
    """Close a streaming body that will not be sent."""
    aclose = getattr(body, "aclose", None)
    if is_stream(body) and aclose is not None:
        await aclose()


async def respond(ctx: Context) -> None:
    """Write the terminal response for ``ctx``."""
    if ctx.respond is False:
        logger.debug(f"response bypassed for {ctx.method} {ctx.url}")
        await discard_body(ctx.body)
        return

    if not ctx.writable:
        await discard_body(ctx.body)
        return

    res = ctx.res
    body = ctx.body
    code = ctx.status

    if code in EMPTY_STATUSES:
        await discard_body(body)
        ctx.body = None
        await res.end()
        return

    if ctx.method == "HEAD":
        if not res.headers_sent and not ctx.response.has("Content-Length"):
            length = ctx.response.length
            if isinstance(length, int):
                ctx.length = length
        await discard_body(body)
        await res.end()
        return

    if body is None:
        if ctx.response._explicit_null_body:
            ctx.response.remove("Content-Type")
            ctx.response.remove("Transfer-Encoding")
            await res.end()
            return
        if ctx.req.http_version_major >= 2:
            body = str(code)
        else:
            body = ctx.message or str(code)
        if not res.headers_sent:
            ctx.type = "text"
            ctx.length = len(body.encode("utf-8"))
        await res.end(body)
        return

    if is_bytes_like(body) or isinstance(body, str):
        await res.end(body)
        return

    if is_stream(body):
        await res.pipe(body)
        return

    encoded = serialize_body(body).encode("utf-8")
    if not res.headers_sent:
        ctx.length = len(encoded)
    await res.end(encoded)
