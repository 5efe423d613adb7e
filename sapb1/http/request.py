from __future__ import annotations

import json
import os
from copy import deepcopy
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from sapb1.http.attachments import FileAttachment, load_attachment
from sapb1.http.cookies import serialize_cookies

DEFAULT_BOUNDARY = "WebKitFormBoundaryUmZoXOtOBNCTLyxT"


def _frozen(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """A fully-formed request, ready for a transport.

    Invariants:
    - headers["Content-Length"] == str(len(body))
    - exactly one Content-Type header (JSON or multipart)
    - header_block lists headers in mapping order, one `Name: Value\\r\\n` each

    tls_options is passed through to the transport untouched.
    """

    url: str
    method: str
    headers: Mapping[str, str]
    header_block: str
    body: bytes
    tls_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tls_options", _frozen(self.tls_options))


@dataclass(frozen=True, slots=True)
class RequestBuilder:
    """Immutable request configuration.

    Each set_* call returns a new builder, so configuration chains:

        RequestBuilder(url).set_method("POST").set_body({"k": 1}).build()

    A builder can be reused as a template without leaking state between calls.
    """

    url: str
    tls_options: Mapping[str, Any] = field(default_factory=dict)
    method: str = "GET"
    payload: Any = None
    files: Tuple[str, ...] = ()
    cookies: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    boundary: str = DEFAULT_BOUNDARY

    def __post_init__(self) -> None:
        object.__setattr__(self, "tls_options", _frozen(self.tls_options))
        object.__setattr__(self, "cookies", _frozen(self.cookies))
        object.__setattr__(self, "headers", _frozen(self.headers))
        object.__setattr__(self, "payload", deepcopy(self.payload))
        files = self.files
        object.__setattr__(self, "files", (files,) if isinstance(files, (str, os.PathLike)) else tuple(files))

    def set_method(self, method: str) -> "RequestBuilder":
        return replace(self, method=method)

    def set_body(self, payload: Any) -> "RequestBuilder":
        """Set a JSON payload. None means no body.

        The payload is deep-copied; later changes by the caller do not reach the builder.
        """
        return replace(self, payload=payload)

    def set_files(self, paths: Union[str, os.PathLike, Iterable[str]]) -> "RequestBuilder":
        """Set files to upload. Any file makes the request multipart and the payload is ignored.

        A single path is accepted as a one-file list.
        """
        return replace(self, files=paths)

    def set_cookies(self, cookies: Mapping[str, str]) -> "RequestBuilder":
        return replace(self, cookies=cookies)

    def set_headers(self, headers: Mapping[str, str]) -> "RequestBuilder":
        return replace(self, headers=headers)

    def build(self) -> RequestDescriptor:
        """Serialize body and headers into a RequestDescriptor.

        Side effects:
        - reads every attachment from disk; OSError propagates to the caller.

        """

        headers: Dict[str, str] = dict(self.headers)

        if self.files:
            attachments = [load_attachment(p) for p in self.files]
            body = encode_multipart(attachments, self.boundary)
            _set_header(headers, "Content-Type", f"multipart/form-data; boundary={self.boundary}")
        else:
            body = encode_json(self.payload)
            _set_header(headers, "Content-Type", "application/json")

        _set_header(headers, "Content-Length", str(len(body)))

        if self.cookies:
            _set_header(headers, "Cookie", serialize_cookies(self.cookies))

        return RequestDescriptor(
            url=self.url,
            method=self.method,
            headers=MappingProxyType(headers),
            header_block=serialize_headers(headers),
            body=body,
            tls_options=self.tls_options,
        )


def encode_json(payload: Any) -> bytes:
    """Compact UTF-8 JSON; None encodes to an empty body."""

    if payload is None:
        return b""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def encode_multipart(attachments: Iterable[FileAttachment], boundary: str) -> bytes:
    """Encode attachments as multipart/form-data.

    Each file becomes one part named after its basename. All parts are
    concatenated and followed by a single closing delimiter `--<boundary>--`.
    """

    crlf = "\r\n"
    parts: List[bytes] = []

    for att in attachments:
        parts.append(f"--{boundary}{crlf}".encode("utf-8"))
        parts.append(
            f'Content-Disposition: form-data; name="{att.file_name}"; filename="{att.file_name}"{crlf}'.encode(
                "utf-8"
            )
        )
        parts.append(f"Content-Type: {att.mime_type}{crlf}{crlf}".encode("utf-8"))
        parts.append(att.content)
        parts.append(crlf.encode("utf-8"))

    parts.append(f"--{boundary}--".encode("utf-8"))
    return b"".join(parts)


def serialize_headers(headers: Mapping[str, str]) -> str:
    return "".join(f"{name}: {value}\r\n" for name, value in headers.items())


def _set_header(headers: Dict[str, str], name: str, value: str) -> None:
    # One entry per name (any case), at the position of the first caller match.
    lowered = name.lower()
    items: List[Tuple[str, str]] = []
    placed = False
    for k, v in headers.items():
        if k.lower() != lowered:
            items.append((k, v))
        elif not placed:
            items.append((name, value))
            placed = True
    if not placed:
        items.append((name, value))
    headers.clear()
    headers.update(items)
