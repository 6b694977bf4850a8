import asyncio
from collections.abc import Callable

import pytest
from dynaconf import Dynaconf
from pytest_mock import MockerFixture

from strata import Application
from strata.conf import Settings
from strata.context import Context
from strata.http.transport import IncomingRequest, OutgoingResponse
from strata.types.asgi import ASGIReceive, ASGISend, Message, Scope
from tests.types import (
    ContextFactory,
    ReceiveFactory,
    ScopeFactory,
    SendFactory,
    SettingsFactory,
)


@pytest.fixture(scope="session")
def settings_factory() -> SettingsFactory:
    def _get_settings(
        logging: dict | None = None,
        app: dict | None = None,
        server: dict | None = None,
    ) -> Settings:
        logging = logging or {
            "debug": True,
            "rich": False,
        }
        app = app or {
            "env": "testing",
            "proxy": False,
            "subdomain_offset": 2,
            "proxy_ip_header": "X-Forwarded-For",
            "max_ips_count": 0,
            "silent": False,
        }
        server = server or {
            "host": "127.0.0.1",
            "port": 3000,
        }
        settings = Dynaconf(
            environments=True,
            settings_files=[],
            ENV_FOR_DYNACONF="testing",
            LOGGING=logging,
            APP=app,
            SERVER=server,
        )

        return settings

    return _get_settings


@pytest.fixture(autouse=True)
def settings(mocker: MockerFixture, settings_factory: SettingsFactory) -> Settings:
    settings = settings_factory()
    mocker.patch("strata.application.get_settings", return_value=settings)
    mocker.patch("strata.server.get_settings", return_value=settings)
    return settings


@pytest.fixture
def app() -> Application:
    return Application()


@pytest.fixture
def scope_factory() -> ScopeFactory:
    def _factory(
        method: str = "GET",
        path: str = "/",
        query_string: bytes = b"",
        headers: list[tuple[bytes, bytes]] | None = None,
        http_version: str = "1.1",
        client: tuple[str, int] | None = ("127.0.0.1", 51000),
    ) -> Scope:
        return {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": http_version,
            "method": method,
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "query_string": query_string,
            "headers": headers if headers is not None else [(b"host", b"example.com")],
            "client": client,
            "server": ("127.0.0.1", 3000),
        }

    return _factory


@pytest.fixture
def receive_factory() -> ReceiveFactory:
    def _factory(messages: list[Message] | None = None) -> ASGIReceive:
        if messages is None:
            messages = [{"type": "http.request", "body": b"", "more_body": False}]

        class Receiver:
            def __init__(self, messages: list[Message]):
                self.messages = list(messages)

            async def __call__(self):
                await asyncio.sleep(0)
                if self.messages:
                    return self.messages.pop(0)
                # connection stays open until the request task cancels us
                await asyncio.Event().wait()

        return Receiver(messages)

    return _factory


@pytest.fixture
def send_factory() -> SendFactory:
    def _factory(collected: list[Message]) -> ASGISend:
        async def send(message: Message) -> None:
            await asyncio.sleep(0)
            collected.append(message)

        return send

    return _factory


@pytest.fixture
def response_start() -> Callable[[list[Message]], Message]:
    def _find(sent: list[Message]) -> Message:
        starts = [m for m in sent if m["type"] == "http.response.start"]
        assert len(starts) == 1
        return starts[0]

    return _find


@pytest.fixture
def response_body() -> Callable[[list[Message]], bytes]:
    def _join(sent: list[Message]) -> bytes:
        return b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")

    return _join


@pytest.fixture
def response_headers() -> Callable[[list[Message]], dict[str, str]]:
    def _headers(sent: list[Message]) -> dict[str, str]:
        start = next(m for m in sent if m["type"] == "http.response.start")
        return {k.decode("latin-1"): v.decode("latin-1") for k, v in start["headers"]}

    return _headers


@pytest.fixture
def context_factory(
    app: Application,
    scope_factory: ScopeFactory,
    receive_factory: ReceiveFactory,
    send_factory: SendFactory,
) -> ContextFactory:
    def _factory(sent: list[Message] | None = None, **scope_kwargs) -> Context:
        req = IncomingRequest(scope_factory(**scope_kwargs), receive_factory())
        res = OutgoingResponse(send_factory(sent if sent is not None else []))
        res.status_code = 404
        return app.create_context(req, res)

    return _factory
