from __future__ import annotations

import asyncio
import contextlib
import logging
import textwrap
import traceback
from typing import Any

from strata.compose import compose
from strata.conf import get_settings
from strata.constants import DEFAULT_STATUS
from strata.context import Context
from strata.exceptions import NonErrorThrownError
from strata.http.transport import IncomingRequest, OutgoingResponse
from strata.models import ApplicationOptions
from strata.request import Request
from strata.respond import respond
from strata.response import Response
from strata.types.app import ErrorHandler, Middleware, Pipeline
from strata.types.asgi import ASGIApp, ASGIReceive, ASGISend, LifespanCallback, Scope

logger = logging.getLogger("strata.application")


class Application:
    """An ordered middleware stack served as an ASGI application.

    Options not given explicitly are read from the ``APP`` settings section::

        app = Application(proxy=True)

        async def timing(ctx, next):
            await next()
            ctx.set("X-Handled-By", "strata")

        app.use(timing)
        asgi_app = app.callback()
    """

    context_class: type[Context] = Context
    request_class: type[Request] = Request
    response_class: type[Response] = Response

    def __init__(
        self,
        *,
        env: str | None = None,
        keys: list[str] | None = None,
        proxy: bool | None = None,
        subdomain_offset: int | None = None,
        proxy_ip_header: str | None = None,
        max_ips_count: int | None = None,
        silent: bool | None = None,
        on_error: ErrorHandler | None = None,
        on_startup: LifespanCallback | None = None,
        on_shutdown: LifespanCallback | None = None,
    ) -> None:
        options = ApplicationOptions.from_settings(
            get_settings(),
            env=env,
            keys=keys,
            proxy=proxy,
            subdomain_offset=subdomain_offset,
            proxy_ip_header=proxy_ip_header,
            max_ips_count=max_ips_count,
            silent=silent,
        )
        self.env = options.env
        self.keys = options.keys
        self.proxy = options.proxy
        self.subdomain_offset = options.subdomain_offset
        self.proxy_ip_header = options.proxy_ip_header
        self.max_ips_count = options.max_ips_count
        self.silent = options.silent

        self.error_handler: ErrorHandler = on_error or self.on_error
        self.on_startup = on_startup
        self.on_shutdown = on_shutdown

        self.middleware: list[Middleware] = []
        self.context: dict[str, Any] = {}
        self.request: dict[str, Any] = {}
        self.response: dict[str, Any] = {}

    def use(self, fn: Middleware) -> Application:
        if not callable(fn):
            raise TypeError("middleware must be a function!")
        logger.debug(f"use {getattr(fn, '__name__', None) or '-'}")
        self.middleware.append(fn)
        return self

    def callback(self) -> ASGIApp:
        pipeline = compose(self.middleware)

        async def handle(scope: Scope, receive: ASGIReceive, send: ASGISend) -> None:
            if scope["type"] == "lifespan":
                await self.handle_lifespan(receive, send)
                return
            if scope["type"] != "http":
                raise RuntimeError(f"Unsupported scope type: {scope['type']}")

            req = IncomingRequest(scope, receive)
            res = OutgoingResponse(send)
            ctx = self.create_context(req, res)
            await self.handle_request(ctx, pipeline)

        return handle

    async def handle_request(self, ctx: Context, pipeline: Pipeline) -> None:
        res = ctx.res
        res.status_code = int(DEFAULT_STATUS)
        res.on_finished(ctx.onerror)
        listener = asyncio.create_task(ctx.req.listen(res))
        try:
            await pipeline(ctx)
            await respond(ctx)
        except Exception as e:
            await ctx.onerror(e)
        finally:
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener

    def create_context(self, req: IncomingRequest, res: OutgoingResponse) -> Context:
        context = self.context_class(self.context)
        request = context.request = self.request_class(self.request)
        response = context.response = self.response_class(self.response)

        context.app = request.app = response.app = self
        context.req = request.req = response.req = req
        context.res = request.res = response.res = res

        request.ctx = response.ctx = context

        request.response = response
        response.request = request

        context.original_url = request.original_url = req.url

        context.state = {}

        return context

    async def handle_lifespan(self, receive: ASGIReceive, send: ASGISend) -> None:
        while True:
            event = await receive()
            if event["type"] == "lifespan.startup":
                try:
                    if self.on_startup:
                        await self.on_startup()
                except Exception as e:
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    raise
                await send({"type": "lifespan.startup.complete"})

            elif event["type"] == "lifespan.shutdown":
                try:
                    if self.on_shutdown:
                        await self.on_shutdown()
                except Exception as e:
                    await send({"type": "lifespan.shutdown.failed", "message": str(e)})
                    raise
                await send({"type": "lifespan.shutdown.complete"})
                break

    def on_error(self, err: BaseException, ctx: Context | None = None) -> None:
        """Default error handler: log unexpected errors to the operator."""
        if not isinstance(err, BaseException):
            raise NonErrorThrownError(err)

        if getattr(err, "status", None) == 404 or getattr(err, "expose", False):
            return
        if self.silent:
            return

        msg = "".join(traceback.format_exception(err)).rstrip() or repr(err)
        logger.error(f"\n{textwrap.indent(msg, '  ')}\n")

    def listen(self, host: str | None = None, port: int | None = None, **kwargs: Any) -> None:
        from strata.server import run

        run(self, host=host, port=port, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "subdomain_offset": self.subdomain_offset,
            "proxy": self.proxy,
            "env": self.env,
        }

    def __repr__(self) -> str:
        return f"<Application {self.to_dict()!r}>"
