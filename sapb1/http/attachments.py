from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_MIME = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class FileAttachment:
    """A local file resolved for a multipart upload.

    Notes:
    - file_name is the basename only; directories never reach the wire.
    - content is read eagerly, the whole request body is built in memory.

    """

    file_name: str
    mime_type: str
    content: bytes


def load_attachment(path: str, *, prefix_bytes: int = 512) -> FileAttachment:
    """Resolve a path into a FileAttachment.

    Raises OSError if the file cannot be read.
    """

    with open(path, "rb") as f:
        content = f.read()
    return FileAttachment(
        file_name=os.path.basename(path),
        mime_type=detect_mime_type(path, content[:prefix_bytes]),
        content=content,
    )


def detect_mime_type(path: str, prefix: bytes) -> str:
    """Detect the MIME type of a file.

    Order:
    1) magic numbers in the leading bytes
    2) extension guess
    3) JSON heuristic
    4) application/octet-stream

    """

    magic_mime = _magic_mime(prefix)
    if magic_mime is not None:
        return magic_mime

    guessed_mime, _enc = mimetypes.guess_type(path)
    if guessed_mime:
        return guessed_mime

    return _json_heuristic_mime(prefix) or DEFAULT_MIME


# Leading-byte signatures, checked in order.
_SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
)

_UTF8_BOM = b"\xef\xbb\xbf"


def _magic_mime(prefix: bytes) -> Optional[str]:
    for signature, mime in _SIGNATURES:
        if prefix.startswith(signature):
            return mime
    return None


def _json_heuristic_mime(prefix: bytes) -> Optional[str]:
    # First non-whitespace byte after an optional UTF-8 BOM.
    head = prefix[len(_UTF8_BOM):] if prefix.startswith(_UTF8_BOM) else prefix
    return "application/json" if head.lstrip()[:1] in (b"{", b"[") else None
