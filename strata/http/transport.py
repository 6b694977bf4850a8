import asyncio
import contextlib
import inspect
import logging
from collections.abc import AsyncIterable, AsyncIterator

from strata.constants import REQUEST_BODY_QUEUE_SIZE
from strata.exceptions import ClientDisconnect
from strata.http.headers import HTTPHeaders
from strata.types.app import FinishedCallback
from strata.types.asgi import ASGIReceive, ASGISend, Message, Scope

logger = logging.getLogger("strata.http")


class IncomingRequest:
    """Read side of an ASGI http connection.

    A single listener task owns ``receive``: body chunks are queued for
    :meth:`stream` and an ``http.disconnect`` message is turned into a
    :class:`ClientDisconnect` for both the body reader and the response.

    The body queue is bounded. Once it is full the listener waits for a
    reader, holding at most one more message, so an unread upload applies
    back pressure to the server instead of being buffered.
    """

    def __init__(self, scope: Scope, receive: ASGIReceive) -> None:
        self.scope = scope
        self._receive = receive
        self._chunks: asyncio.Queue = asyncio.Queue(maxsize=REQUEST_BODY_QUEUE_SIZE)
        self._body: bytes | None = None
        self._body_complete = False
        self._stream_consumed = False
        self._disconnect: ClientDisconnect | None = None
        self.disconnected = False
        self.headers = HTTPHeaders.from_asgi(scope.get("headers", []))

    @property
    def method(self) -> str:
        return self.scope.get("method", "GET").upper()

    @property
    def path(self) -> str:
        return self.scope.get("path", "/")

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("latin-1")

    @property
    def url(self) -> str:
        raw_path = self.scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else self.path
        if self.query_string:
            return f"{path}?{self.query_string}"
        return path

    @property
    def http_version(self) -> str:
        return self.scope.get("http_version", "1.1")

    @property
    def http_version_major(self) -> int:
        return int(self.http_version.split(".", 1)[0])

    @property
    def scheme(self) -> str:
        return self.scope.get("scheme", "http")

    @property
    def client(self) -> tuple[str, int] | None:
        client = self.scope.get("client")
        return tuple(client) if client else None

    @property
    def server(self) -> tuple[str, int | None] | None:
        server = self.scope.get("server")
        return tuple(server) if server else None

    async def listen(self, response: "OutgoingResponse") -> None:
        message = await self._receive()
        while True:
            if message["type"] == "http.disconnect":
                logger.debug(f"client disconnected: {self.method} {self.url}")
                self.disconnected = True
                self._disconnect = ClientDisconnect()
                with contextlib.suppress(asyncio.QueueFull):
                    self._chunks.put_nowait(self._disconnect)
                await response.close(self._disconnect)
                return
            if message["type"] == "http.request" and not self._body_complete:
                body = message.get("body", b"")
                more_body = message.get("more_body", False)
                self._body_complete = not more_body
                if body or not more_body:
                    message = await self._enqueue((body, more_body))
                    continue
            message = await self._receive()

    async def _enqueue(self, item: tuple[bytes, bool]) -> Message:
        """Queue a body chunk and return the next message from ``receive``.

        While the queue is full the next message is awaited alongside the
        put, so a disconnect arriving right then is not missed.
        """
        if not self._chunks.full():
            self._chunks.put_nowait(item)
            return await self._receive()

        put = asyncio.ensure_future(self._chunks.put(item))
        receiving = asyncio.ensure_future(self._receive())
        try:
            await asyncio.wait({put, receiving}, return_when=asyncio.FIRST_COMPLETED)
            if receiving.done() and receiving.result()["type"] == "http.disconnect":
                return receiving.result()
            await put
            return await receiving
        finally:
            put.cancel()
            receiving.cancel()

    async def stream(self) -> AsyncIterator[bytes]:
        if self._body is not None:
            yield self._body
            return
        if self._stream_consumed:
            raise RuntimeError("Request body has already been consumed.")
        self._stream_consumed = True
        while True:
            if self._disconnect is not None and self._chunks.empty():
                raise self._disconnect
            item = await self._chunks.get()
            if isinstance(item, ClientDisconnect):
                raise item
            chunk, more_body = item
            if chunk:
                yield chunk
            if not more_body:
                return

    async def body(self) -> bytes:
        if self._body is None:
            self._body = b"".join([chunk async for chunk in self.stream()])
        return self._body


class OutgoingResponse:
    """Write side of an ASGI http connection.

    Completion observers registered with :meth:`on_finished` fire exactly
    once: with ``None`` after :meth:`end`, or with the error that closed the
    connection.
    """

    def __init__(self, send: ASGISend) -> None:
        self._send = send
        self.status_code: int = 200
        self.status_message: str = ""
        self.headers = HTTPHeaders()
        self.headers_sent = False
        self.finished = False
        self.closed = False
        self._observers: list[FinishedCallback] = []
        self._done = False

    @property
    def writable(self) -> bool:
        return not self.finished and not self.closed

    def on_finished(self, callback: FinishedCallback) -> None:
        self._observers.append(callback)

    async def _notify(self, error: BaseException | None) -> None:
        if self._done:
            return
        self._done = True
        for callback in self._observers:
            result = callback(error)
            if inspect.isawaitable(result):
                await result

    async def _send_message(self, message: Message) -> None:
        if self.closed:
            raise ClientDisconnect()
        try:
            await self._send(message)
        except OSError as e:
            error = ClientDisconnect(str(e) or "Client disconnected.")
            await self.close(error)
            raise error from e

    async def write_head(self) -> None:
        if self.headers_sent:
            return
        await self._send_message(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.headers.to_asgi(),
            }
        )
        self.headers_sent = True

    async def write(self, chunk: bytes | str) -> None:
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        await self.write_head()
        await self._send_message({"type": "http.response.body", "body": chunk, "more_body": True})

    async def end(self, body: bytes | str = b"") -> None:
        if self.finished:
            return
        if isinstance(body, str):
            body = body.encode("utf-8")
        await self.write_head()
        await self._send_message(
            {"type": "http.response.body", "body": bytes(body), "more_body": False}
        )
        self.finished = True
        await self._notify(None)

    async def pipe(self, source: AsyncIterable[bytes | str]) -> None:
        try:
            async for chunk in source:
                if not self.writable:
                    return
                await self.write(chunk)
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()
        await self.end()

    async def close(self, error: BaseException | None = None) -> None:
        self.closed = True
        await self._notify(error)
