from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union

from sapb1.http.request import RequestDescriptor
from sapb1.http.response import Response


class RequestPreviewOut(BaseModel):
    """A built request, without its body bytes."""

    method: str
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    header_block: str
    body_bytes: int

    @classmethod
    def from_descriptor(cls, d: RequestDescriptor) -> "RequestPreviewOut":
        return cls(
            method=d.method,
            url=d.url,
            headers=dict(d.headers),
            header_block=d.header_block,
            body_bytes=len(d.body),
        )


class ResponseOut(BaseModel):
    """Parsed response summary.

    body holds decoded JSON when the server returned JSON, otherwise text.
    """

    status_code: int
    headers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    cookies: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Any] = None

    @classmethod
    def from_response(cls, r: Response) -> "ResponseOut":
        body: Any = r.text
        if r.header("Content-Type") == "application/json" and r.body:
            try:
                body = r.json()
            except ValueError:
                body = r.text
        return cls(
            status_code=r.status_code,
            headers={k: (list(v) if isinstance(v, list) else v) for k, v in r.headers.items()},
            cookies=dict(r.cookies),
            body=body,
        )
