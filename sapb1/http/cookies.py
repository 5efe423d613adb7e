from __future__ import annotations

from typing import Mapping, Optional, Tuple
from urllib.parse import unquote


def serialize_cookies(cookies: Mapping[str, str]) -> str:
    """Serialize an outbound cookie jar into a `Cookie` header value.

    Every pair is terminated by `;`, in mapping order:
    {"a": "1", "b": "x y"} -> "a=1;b=x y;"

    Values are sent as given (no quoting or encoding).
    """

    return "".join(f"{name}={value};" for name, value in cookies.items())


def parse_set_cookie(header_value: str) -> Optional[Tuple[str, str]]:
    """Decode the name/value assignment of a `Set-Cookie` header value.

    Only the segment before the first `;` is considered; attributes such as
    Path, Expires or HttpOnly are dropped. Name and value are percent-decoded,
    `+` and `&` are kept literally.

    Returns None when the assignment has no name.
    """

    pair = header_value.split(";", 1)[0]
    name, sep, value = pair.partition("=")
    name = unquote(name.strip())
    if not name:
        return None
    if not sep:
        return name, ""
    return name, unquote(value.strip())
