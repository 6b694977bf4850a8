from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from strata.constants import STATUS_MESSAGES


class StrataError(Exception):
    pass


class HTTPError(StrataError):
    def __init__(
        self,
        status: int | HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str | None = None,
        *,
        expose: bool | None = None,
        headers: Mapping[str, str] | None = None,
        **props: Any,
    ) -> None:
        self.status: int = int(status)
        self.message: str = message or STATUS_MESSAGES.get(self.status, str(self.status))
        self.expose: bool = self.status < 500 if expose is None else expose
        self.headers: dict[str, str] = dict(headers or {})
        for name, value in props.items():
            setattr(self, name, value)
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class MultipleNextCallsError(StrataError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("next() called multiple times")


class NonErrorThrownError(StrataError, TypeError):
    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"non-error thrown: {value!r}")


class ClientDisconnect(StrataError, ConnectionError):
    def __init__(self, message: str = "Client disconnected.") -> None:
        super().__init__(message)
