from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import reduce
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from sapb1.http.cookies import parse_set_cookie
from sapb1.http.errors import ResponseParseError

# A header seen once keeps its string value; repeats are promoted to a list.
HeaderValue = Union[str, List[str]]


class HeaderMap(Mapping[str, HeaderValue]):
    """Read-only header mapping.

    Repeated headers are handed out as fresh lists, so callers cannot
    change what the Response holds.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, HeaderValue]):
        self._data: Dict[str, HeaderValue] = {
            k: (list(v) if isinstance(v, list) else v) for k, v in data.items()
        }

    def __getitem__(self, name: str) -> HeaderValue:
        value = self._data[name]
        return list(value) if isinstance(value, list) else value

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"HeaderMap({self._data!r})"


@dataclass(frozen=True, slots=True)
class Response:
    """Parsed HTTP response.

    Notes:
    - Content-Type holds the primary type only (parameters stripped).
    - Set-Cookie never appears in headers; decoded cookies live in `cookies`.
    - Treat `body` as untrusted.

    """

    status_code: int
    headers: Mapping[str, HeaderValue]
    cookies: Mapping[str, str]
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode body as JSON."""

        return json.loads(self.body.decode("utf-8", errors="strict"))

    def header(self, name: str, default: Optional[HeaderValue] = None) -> Optional[HeaderValue]:
        """Case-insensitive header lookup."""

        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def cookie(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.cookies.get(name, default)


@dataclass(frozen=True, slots=True)
class ParseState:
    """Accumulated headers and cookies while folding header lines."""

    headers: Dict[str, HeaderValue] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)


def parse_status_line(line: str) -> int:
    """Extract the status code from `<proto> <code> <reason>`."""

    tokens = line.split()
    if len(tokens) < 2:
        raise ResponseParseError(f"malformed status line: {line!r}")
    try:
        return int(tokens[1])
    except ValueError as e:
        raise ResponseParseError(f"non-numeric status code: {tokens[1]!r}") from e


def fold_header_line(state: ParseState, line: str) -> ParseState:
    """Fold one `Name: Value` line into a new ParseState.

    Lines without a name are ignored. The input state is never modified.
    """

    name, sep, value = line.partition(":")
    name = name.strip()
    if not sep or not name:
        return state
    value = value.strip()

    if name in state.headers:
        prev = state.headers[name]
        merged = prev + [value] if isinstance(prev, list) else [prev, value]
        return ParseState(headers={**state.headers, name: merged}, cookies=state.cookies)

    lowered = name.lower()
    if lowered == "content-type":
        primary = value.split(";", 1)[0].strip()
        return ParseState(headers={**state.headers, name: primary}, cookies=state.cookies)
    if lowered == "set-cookie":
        pair = parse_set_cookie(value)
        if pair is None:
            return state
        cookie_name, cookie_value = pair
        return ParseState(headers=state.headers, cookies={**state.cookies, cookie_name: cookie_value})

    return ParseState(headers={**state.headers, name: value}, cookies=state.cookies)


class ResponseParser:
    """Turn raw transport output into a Response.

    Phase 1: line 0 is the status line; a malformed one fails the parse.
    Phase 2: remaining lines are folded through fold_header_line; noise is skipped.
    """

    def parse(self, header_lines: Sequence[str], body: bytes) -> Response:
        if not header_lines:
            raise ResponseParseError("missing status line")

        status_code = parse_status_line(header_lines[0])
        state = reduce(fold_header_line, header_lines[1:], ParseState())

        return Response(
            status_code=status_code,
            headers=HeaderMap(state.headers),
            cookies=MappingProxyType(state.cookies),
            body=bytes(body),
        )


def parse_response(header_lines: Sequence[str], body: bytes) -> Response:
    return ResponseParser().parse(header_lines, body)
