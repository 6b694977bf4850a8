from __future__ import annotations

import mimetypes
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic_core import to_json

from strata.constants import (
    EMPTY_STATUSES,
    MIME_ALIASES,
    STATUS_MESSAGES,
    TEXTUAL_CONTENT_TYPES,
    TEXTUAL_PREFIXES,
)
from strata.http.headers import HeaderValue, HTTPHeaders
from strata.http.transport import IncomingRequest, OutgoingResponse

if TYPE_CHECKING:
    from strata.application import Application
    from strata.context import Context
    from strata.request import Request


def is_bytes_like(body: Any) -> bool:
    return isinstance(body, bytes | bytearray | memoryview)


def is_stream(body: Any) -> bool:
    return hasattr(body, "__aiter__")


def serialize_body(body: Any) -> str:
    """Serialize a structured body to compact JSON.

    Pydantic models are accepted anywhere in the value, not only at the top.
    """
    return to_json(body).decode("utf-8")


def resolve_content_type(value: str) -> str | None:
    if "/" in value:
        mime = value
    else:
        key = value.lower().lstrip(".")
        mime = MIME_ALIASES.get(key) or mimetypes.guess_type(f"file.{key}")[0]
        if mime is None:
            return None
    if "charset" not in mime and (
        mime.startswith(TEXTUAL_PREFIXES) or mime in TEXTUAL_CONTENT_TYPES
    ):
        mime = f"{mime}; charset=utf-8"
    return mime


class Response:
    """Response facade holding the per-request response state."""

    app: Application
    req: IncomingRequest
    res: OutgoingResponse
    ctx: Context
    request: Request

    def __init__(self, defaults: dict[str, Any] | None = None) -> None:
        self._body: Any = None
        self._explicit_status = False
        self._explicit_null_body = False
        if defaults:
            vars(self).update(defaults)

    @property
    def headers(self) -> HTTPHeaders:
        return self.res.headers

    @property
    def status(self) -> int:
        return self.res.status_code

    @status.setter
    def status(self, code: int) -> None:
        if self.headers_sent:
            return
        if isinstance(code, bool) or not isinstance(code, int):
            raise ValueError("status code must be a number")
        if not 100 <= code <= 999:
            raise ValueError(f"invalid status code: {code}")
        self._explicit_status = True
        self.res.status_code = int(code)
        if self.req.http_version_major < 2:
            self.res.status_message = STATUS_MESSAGES.get(code, "")
        if self.body is not None and code in EMPTY_STATUSES:
            self.body = None

    @property
    def message(self) -> str:
        return self.res.status_message or STATUS_MESSAGES.get(self.status, "")

    @message.setter
    def message(self, value: str) -> None:
        self.res.status_message = value

    @property
    def body(self) -> Any:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        original = self._body
        self._body = value

        if value is None:
            if self.status not in EMPTY_STATUSES:
                self.status = 204
            self._explicit_null_body = True
            self.remove("Content-Type")
            self.remove("Content-Length")
            self.remove("Transfer-Encoding")
            return

        if not self._explicit_status:
            self.status = 200

        set_type = not self.has("Content-Type")

        if isinstance(value, str):
            if set_type:
                self.type = "html" if value.lstrip().startswith("<") else "text"
            self.length = len(value.encode("utf-8"))
            return

        if is_bytes_like(value):
            if set_type:
                self.type = "bin"
            self.length = len(value)
            return

        if is_stream(value):
            if original is not None and original is not value:
                self.remove("Content-Length")
            if set_type:
                self.type = "bin"
            return

        self.remove("Content-Length")
        self.type = "json"

    @property
    def length(self) -> int | None:
        if self.has("Content-Length"):
            try:
                return int(self.get("Content-Length"))
            except ValueError:
                return None
        body = self.body
        if body is None or is_stream(body):
            return None
        if isinstance(body, str):
            return len(body.encode("utf-8"))
        if is_bytes_like(body):
            return len(body)
        return len(serialize_body(body).encode("utf-8"))

    @length.setter
    def length(self, value: int) -> None:
        if not self.has("Transfer-Encoding"):
            self.set("Content-Length", value)

    @property
    def type(self) -> str:
        value = self.get("Content-Type")
        if not value:
            return ""
        return value.split(";", 1)[0].strip()

    @type.setter
    def type(self, value: str | None) -> None:
        mime = resolve_content_type(value) if value else None
        if mime:
            self.set("Content-Type", mime)
        else:
            self.remove("Content-Type")

    @property
    def headers_sent(self) -> bool:
        return self.res.headers_sent

    @property
    def writable(self) -> bool:
        return self.res.writable

    def get(self, name: str) -> str:
        value = self.headers.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(value)
        return value

    def has(self, name: str) -> bool:
        return name in self.headers

    def set(self, name: str | Mapping[str, HeaderValue], value: HeaderValue | int | None = None):
        if self.headers_sent:
            return
        if isinstance(name, Mapping):
            for k, v in name.items():
                self.set(k, v)
            return
        self.headers[name] = value

    def append(self, name: str, value: HeaderValue) -> None:
        if self.headers_sent:
            return
        self.headers.add(name, value)

    def remove(self, name: str) -> None:
        if self.headers_sent:
            return
        self.headers.pop(name, None)

    def __repr__(self) -> str:
        return f"<Response {self.status} {self.message!r}>"
