from strata.exceptions import (
    ClientDisconnect,
    HTTPError,
    MultipleNextCallsError,
    NonErrorThrownError,
    StrataError,
)


def test_http_error_defaults():
    error = HTTPError()
    assert error.status == 500
    assert error.status_code == 500
    assert error.message == "Internal Server Error"
    assert error.expose is False
    assert error.headers == {}


def test_http_error_client_errors_are_exposed():
    error = HTTPError(409, "already exists", headers={"Retry-After": "5"}, code="DUPLICATE")
    assert error.expose is True
    assert str(error) == "already exists"
    assert error.headers == {"Retry-After": "5"}
    assert error.code == "DUPLICATE"
    assert repr(error) == "HTTPError(status=409, message='already exists')"


def test_http_error_unknown_status():
    assert HTTPError(599).message == "599"


def test_hierarchy():
    assert issubclass(MultipleNextCallsError, RuntimeError)
    assert issubclass(NonErrorThrownError, TypeError)
    assert issubclass(ClientDisconnect, ConnectionError)
    for cls in (HTTPError, MultipleNextCallsError, NonErrorThrownError, ClientDisconnect):
        assert issubclass(cls, StrataError)


def test_messages():
    assert str(MultipleNextCallsError()) == "next() called multiple times"
    assert str(NonErrorThrownError(42)) == "non-error thrown: 42"
    assert str(ClientDisconnect()) == "Client disconnected."
