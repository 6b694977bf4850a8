from __future__ import annotations

from collections.abc import Iterable

HeaderValue = str | list[str]


class HTTPHeaders(dict):
    """Case-insensitive header map.

    Names are stored lowercased. A value is either a string or, for headers
    that may be repeated (``set-cookie``), a list of strings.
    """

    def __init__(self, initial=None):
        super().__init__()
        if initial:
            for k, v in initial.items():
                self[k] = v

    def __getitem__(self, key: str) -> HeaderValue:
        return super().__getitem__(key.lower())

    def __setitem__(self, key: str, value: HeaderValue | int) -> None:
        if isinstance(value, list | tuple):
            value = [str(v) for v in value]
        else:
            value = str(value)
        super().__setitem__(str(key).lower(), value)

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and super().__contains__(key.lower())

    def get(self, k, default=None):
        return super().get(k.lower(), default)

    def pop(self, k, *args):
        return super().pop(k.lower(), *args)

    def add(self, key: str, value: HeaderValue) -> None:
        current = self.get(key)
        if current is None:
            self[key] = value
            return
        if not isinstance(current, list):
            current = [current]
        extra = value if isinstance(value, list) else [value]
        self[key] = current + extra

    def to_asgi(self) -> list[tuple[bytes, bytes]]:
        items: list[tuple[bytes, bytes]] = []
        for k, v in self.items():
            for value in v if isinstance(v, list) else [v]:
                items.append((k.encode("latin-1"), value.encode("latin-1")))
        return items

    @classmethod
    def from_asgi(cls, items: Iterable[tuple[bytes, bytes]]) -> HTTPHeaders:
        headers = cls()
        for k, v in items:
            headers.add(k.decode("latin-1"), v.decode("latin-1"))
        return headers
