from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import urlsplit

from sapb1.config import ClientConfig
from sapb1.http.request import RequestBuilder
from sapb1.http.response import Response, ResponseParser
from sapb1.http.transport import Transport, UrllibTransport

log = logging.getLogger("sapb1.http")


class HttpClient:
    """Build, send and parse a single request/response exchange.

    Errors are not retried: OSError (attachments), TransportError and
    ResponseParseError reach the caller unchanged.

    Security notes:
    - Access logs carry method, path, status and sizes only. Bodies, query
      strings and cookie values are never logged.

    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        parser: Optional[ResponseParser] = None,
    ):
        self.config = config or ClientConfig()
        self.transport = transport or UrllibTransport(timeout_sec=self.config.timeout_sec)
        self.parser = parser or ResponseParser()

    def builder(self, url: str) -> RequestBuilder:
        """A RequestBuilder carrying this client's TLS options."""
        return RequestBuilder(url, tls_options=self.config.tls_options())

    def execute(self, builder: RequestBuilder) -> Response:
        descriptor = builder.build()
        start = time.monotonic()
        raw = self.transport.send(descriptor)
        response = self.parser.parse(raw.header_lines, raw.body)
        dur_ms = int((time.monotonic() - start) * 1000)

        log.info(
            "http_request",
            extra={
                "method": descriptor.method,
                "path": urlsplit(descriptor.url).path,
                "status_code": response.status_code,
                "duration_ms": dur_ms,
                "request_bytes": len(descriptor.body),
                "response_bytes": len(response.body),
            },
        )
        return response

    def request(
        self,
        method: str,
        url: str,
        *,
        payload: Any = None,
        files: Iterable[str] = (),
        cookies: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        builder = (
            self.builder(url)
            .set_method(method)
            .set_body(payload)
            .set_files(files)
            .set_cookies(cookies or {})
            .set_headers(headers or {})
        )
        return self.execute(builder)
