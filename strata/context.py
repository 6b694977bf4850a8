from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, NoReturn

from strata.constants import STATUS_MESSAGES
from strata.exceptions import ClientDisconnect, HTTPError
from strata.http.headers import HeaderValue, HTTPHeaders
from strata.http.transport import IncomingRequest, OutgoingResponse

if TYPE_CHECKING:
    from strata.application import Application
    from strata.request import Request
    from strata.response import Response

logger = logging.getLogger("strata.context")


def _delegate(target: str, name: str, writable: bool = False) -> property:
    def fget(self):
        return getattr(getattr(self, target), name)

    def fset(self, value):
        setattr(getattr(self, target), name, value)

    return property(fget, fset if writable else None, doc=f"Proxy to ``{target}.{name}``.")


class Context:
    """Per-request state shared by every middleware of one connection."""

    app: Application
    req: IncomingRequest
    res: OutgoingResponse
    request: Request
    response: Response
    original_url: str

    def __init__(self, defaults: dict[str, Any] | None = None) -> None:
        self.state: dict[str, Any] = {}
        self.respond: bool = True
        self._error_handled = False
        if defaults:
            vars(self).update(defaults)

    # response delegates
    status = _delegate("response", "status", writable=True)
    message = _delegate("response", "message", writable=True)
    body = _delegate("response", "body", writable=True)
    length = _delegate("response", "length", writable=True)
    type = _delegate("response", "type", writable=True)
    headers_sent = _delegate("response", "headers_sent")
    writable = _delegate("response", "writable")

    # request delegates
    method = _delegate("request", "method")
    url = _delegate("request", "url")
    path = _delegate("request", "path")
    query_string = _delegate("request", "query_string")
    headers = _delegate("request", "headers")
    host = _delegate("request", "host")
    hostname = _delegate("request", "hostname")
    protocol = _delegate("request", "protocol")
    secure = _delegate("request", "secure")
    ips = _delegate("request", "ips")
    ip = _delegate("request", "ip", writable=True)
    subdomains = _delegate("request", "subdomains")

    def get(self, name: str) -> str:
        return self.request.get(name)

    def set(self, name: str | Mapping[str, HeaderValue], value: HeaderValue | int | None = None):
        self.response.set(name, value)

    def append(self, name: str, value: HeaderValue) -> None:
        self.response.append(name, value)

    def remove(self, name: str) -> None:
        self.response.remove(name)

    def has(self, name: str) -> bool:
        return self.response.has(name)

    def throw(self, status: int = 500, message: str | None = None, **props: Any) -> NoReturn:
        """Raise an :class:`HTTPError`.

            ctx.throw(403)
            ctx.throw(400, "name required")
            ctx.throw(400, "name required", expose=False, user=user)
        """
        raise HTTPError(status, message, **props)

    def assert_(self, value: Any, status: int = 500, message: str | None = None, **props: Any):
        if not value:
            self.throw(status, message, **props)

    async def onerror(self, err: BaseException | Any | None) -> None:
        """Report ``err`` and, when still possible, answer with an error response.

        Registered as the completion observer of the transport response, so a
        ``None`` argument means the response completed normally.
        """
        if err is None:
            return
        if self._error_handled:
            logger.debug(f"error already handled for {self.method} {self.url}: {err!r}")
            return
        self._error_handled = True

        if not isinstance(err, BaseException):
            err = Exception(f"non-error thrown: {err!r}")

        header_sent = False
        if self.headers_sent or not self.writable:
            header_sent = True
            err.header_sent = True

        self.app.error_handler(err, self)

        if header_sent:
            return

        res = self.res
        res.headers = HTTPHeaders()
        error_headers = getattr(err, "headers", None)
        if isinstance(error_headers, Mapping):
            self.set(error_headers)
        self.type = "text"

        status_code = getattr(err, "status", None) or getattr(err, "status_code", None)
        if isinstance(err, FileNotFoundError):
            status_code = HTTPStatus.NOT_FOUND
        if not isinstance(status_code, int) or status_code not in STATUS_MESSAGES:
            status_code = HTTPStatus.INTERNAL_SERVER_ERROR

        code = STATUS_MESSAGES[status_code]
        msg = str(err) if getattr(err, "expose", False) else code
        self.status = int(status_code)
        self.length = len(msg.encode("utf-8"))
        try:
            await res.end(msg)
        except ClientDisconnect:
            logger.debug(f"client gone before error response for {self.method} {self.url}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "request": {"method": self.method, "url": self.url, "headers": dict(self.headers)},
            "response": {
                "status": self.status,
                "message": self.message,
                "headers": dict(self.response.headers),
            },
            "app": self.app.to_dict(),
            "original_url": self.original_url,
        }

    def __repr__(self) -> str:
        return f"<Context {self.method} {self.url}>"
