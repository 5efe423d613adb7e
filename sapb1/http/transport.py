from __future__ import annotations

import ssl
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Tuple
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from sapb1.http.errors import TransportError
from sapb1.http.request import RequestDescriptor


@dataclass(frozen=True, slots=True)
class RawResponse:
    """Unparsed transport output: status line first, then `Name: Value` lines."""

    header_lines: Tuple[str, ...]
    body: bytes


class Transport(Protocol):
    def send(self, descriptor: RequestDescriptor) -> RawResponse: ...


def build_ssl_context(tls_options: Mapping[str, Any]) -> ssl.SSLContext:
    """Create an SSL context from pass-through TLS options.

    Recognized keys:
    - cafile: CA bundle path
    - verify_peer: False disables certificate verification
    - verify_peer_name: False disables hostname checking

    Security notes:
    - Verification is ON unless explicitly disabled.

    """

    ctx = ssl.create_default_context(cafile=tls_options.get("cafile") or None)
    if tls_options.get("verify_peer_name") is False or tls_options.get("verify_peer") is False:
        ctx.check_hostname = False
    if tls_options.get("verify_peer") is False:
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


class UrllibTransport:
    """Stdlib transport.

    HTTP error statuses (4xx/5xx) are returned as regular responses; only
    network and TLS failures raise TransportError.
    """

    def __init__(self, timeout_sec: Optional[float] = None):
        self.timeout_sec = timeout_sec

    def send(self, descriptor: RequestDescriptor) -> RawResponse:
        req = Request(
            url=descriptor.url,
            data=descriptor.body or None,
            headers=dict(descriptor.headers),
            method=descriptor.method,
        )
        ctx = build_ssl_context(descriptor.tls_options)
        try:
            with urlopen(req, context=ctx, timeout=self.timeout_sec) as resp:
                return RawResponse(header_lines=_header_lines(resp), body=resp.read())
        except HTTPError as e:
            body = e.read() if e.fp is not None else b""
            return RawResponse(header_lines=_header_lines(e), body=body)
        except URLError as e:
            raise TransportError(f"network error: {e.reason}") from e
        except OSError as e:
            raise TransportError(f"network error: {e}") from e


def _header_lines(resp: Any) -> Tuple[str, ...]:
    # http.client reports version as 10/11; HTTPError exposes code/reason.
    version = getattr(resp, "version", 11)
    proto = "HTTP/1.0" if version == 10 else "HTTP/1.1"
    status = getattr(resp, "status", None) or getattr(resp, "code", 0)
    reason = getattr(resp, "reason", "") or ""
    lines = [f"{proto} {status} {reason}".rstrip()]
    headers = getattr(resp, "headers", None)
    if headers is not None:
        lines.extend(f"{name}: {value}" for name, value in headers.items())
    return tuple(lines)
