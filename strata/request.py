from __future__ import annotations

import ipaddress
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from strata.http.headers import HTTPHeaders
from strata.http.transport import IncomingRequest, OutgoingResponse

if TYPE_CHECKING:
    from strata.application import Application
    from strata.context import Context
    from strata.response import Response


class Request:
    """Request facade over the transport request handle."""

    app: Application
    req: IncomingRequest
    res: OutgoingResponse
    ctx: Context
    response: Response
    original_url: str

    def __init__(self, defaults: dict[str, Any] | None = None) -> None:
        if defaults:
            vars(self).update(defaults)

    @property
    def headers(self) -> HTTPHeaders:
        return self.req.headers

    @property
    def method(self) -> str:
        return self.req.method

    @property
    def url(self) -> str:
        return self.req.url

    @property
    def path(self) -> str:
        return self.req.path

    @property
    def query_string(self) -> str:
        return self.req.query_string

    @property
    def http_version(self) -> str:
        return self.req.http_version

    def get(self, name: str) -> str:
        """Return the request header ``name`` or an empty string.

        ``Referer`` and ``Referrer`` are interchangeable. Repeated headers are
        joined with a comma.
        """
        name = name.lower()
        if name in ("referer", "referrer"):
            value = self.headers.get("referrer") or self.headers.get("referer")
        else:
            value = self.headers.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(value)
        return value

    @property
    def protocol(self) -> str:
        if self.app.proxy:
            forwarded = self.get("X-Forwarded-Proto")
            if forwarded:
                return forwarded.split(",", 1)[0].strip()
        return self.req.scheme

    @property
    def secure(self) -> bool:
        return self.protocol == "https"

    @property
    def host(self) -> str:
        host = ""
        if self.app.proxy:
            host = self.get("X-Forwarded-Host")
        if not host:
            if self.req.http_version_major >= 2:
                host = self.get(":authority")
            if not host:
                host = self.get("Host")
        return host.split(",", 1)[0].strip()

    @property
    def hostname(self) -> str:
        host = self.host
        if not host:
            return ""
        if host.startswith("["):
            return host[1 : host.index("]")]
        return host.split(":", 1)[0]

    @property
    def ips(self) -> list[str]:
        if not self.app.proxy:
            return []
        value = self.get(self.app.proxy_ip_header)
        ips = [ip.strip() for ip in value.split(",") if ip.strip()]
        if self.app.max_ips_count > 0:
            ips = ips[-self.app.max_ips_count :]
        return ips

    @property
    def ip(self) -> str:
        if "_ip" not in vars(self):
            ips = self.ips
            client = self.req.client
            self._ip = ips[0] if ips else (client[0] if client else "")
        return self._ip

    @ip.setter
    def ip(self, value: str) -> None:
        self._ip = value

    @property
    def subdomains(self) -> list[str]:
        hostname = self.hostname
        try:
            ipaddress.ip_address(hostname)
        except ValueError:
            labels = hostname.split(".")
            return list(reversed(labels))[self.app.subdomain_offset :]
        return []

    def stream(self) -> AsyncIterator[bytes]:
        return self.req.stream()

    async def body(self) -> bytes:
        return await self.req.body()

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url}>"
