import pytest

from tests.types import ContextFactory


async def gen_chunks():
    yield b"chunk"


def test_status_validation(context_factory: ContextFactory):
    ctx = context_factory()
    with pytest.raises(ValueError, match="status code must be a number"):
        ctx.status = "200"  # type: ignore[assignment]
    with pytest.raises(ValueError, match="invalid status code: 42"):
        ctx.status = 42


async def test_status_ignored_after_headers_sent(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.status = 200
    await ctx.res.write_head()
    ctx.status = 500
    assert ctx.status == 200


def test_status_message_http1(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.status = 404
    assert ctx.res.status_message == "Not Found"


def test_status_message_not_set_http2(context_factory: ContextFactory):
    ctx = context_factory(http_version="2")
    ctx.status = 404
    assert ctx.res.status_message == ""
    assert ctx.message == "Not Found"


def test_string_body(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.body = "héllo"
    assert ctx.status == 200
    assert ctx.type == "text/plain"
    assert ctx.length == 6


def test_html_body(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.body = "  <h1>hi</h1>"
    assert ctx.response.get("Content-Type") == "text/html; charset=utf-8"


def test_body_keeps_existing_type(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.type = "xml"
    ctx.body = "<root/>"
    assert ctx.type == "application/xml"


def test_bytes_body(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.body = b"\x00\x01"
    assert ctx.type == "application/octet-stream"
    assert ctx.length == 2


def test_stream_body(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.body = "first"
    ctx.body = gen_chunks()
    assert ctx.type == "text/plain"
    assert not ctx.has("Content-Length")
    assert ctx.length is None


def test_structured_body(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.body = "first"
    ctx.body = [1, 2, 3]
    assert ctx.type == "application/json"
    assert not ctx.has("Content-Length")
    assert ctx.length == len("[1,2,3]")


def test_body_keeps_explicit_status(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.status = 201
    ctx.body = "created"
    assert ctx.status == 201


def test_default_status_is_not_explicit(context_factory: ContextFactory):
    ctx = context_factory()
    assert ctx.status == 404
    ctx.body = "found after all"
    assert ctx.status == 200


def test_null_body(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.body = "text"
    ctx.body = None
    assert ctx.status == 204
    assert ctx.response._explicit_null_body is True
    assert not ctx.has("Content-Type")
    assert not ctx.has("Content-Length")
    assert ctx.length is None


def test_length_ignored_with_transfer_encoding(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.set("Transfer-Encoding", "chunked")
    ctx.length = 10
    assert not ctx.has("Content-Length")


def test_invalid_content_length_header(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.set("Content-Length", "abc")
    assert ctx.length is None


@pytest.mark.parametrize(
    ("value", "header"),
    [
        ("text", "text/plain; charset=utf-8"),
        ("html", "text/html; charset=utf-8"),
        (".json", "application/json; charset=utf-8"),
        ("png", "image/png"),
        ("image/svg+xml", "image/svg+xml"),
        ("text/csv; charset=latin-1", "text/csv; charset=latin-1"),
    ],
)
def test_type(context_factory: ContextFactory, value: str, header: str):
    ctx = context_factory()
    ctx.type = value
    assert ctx.response.get("Content-Type") == header


@pytest.mark.parametrize("value", ["", None, "no-such-extension"])
def test_type_removed(context_factory: ContextFactory, value):
    ctx = context_factory()
    ctx.type = "json"
    ctx.type = value
    assert ctx.type == ""


def test_set_mapping(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.set({"X-A": "1", "X-B": 2})
    assert ctx.response.get("x-a") == "1"
    assert ctx.response.get("x-b") == "2"


async def test_headers_frozen_after_sent(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.set("X-A", "1")
    await ctx.res.write_head()
    ctx.set("X-A", "2")
    ctx.append("X-B", "3")
    ctx.remove("X-A")
    assert ctx.response.get("X-A") == "1"
    assert not ctx.has("X-B")


def test_repr(context_factory: ContextFactory):
    ctx = context_factory()
    ctx.status = 200
    assert repr(ctx.response) == "<Response 200 'OK'>"
