"""Request serialization and response parsing for the SAP B1 Service Layer.

Security notes:
- Treat server responses as untrusted input.
- Avoid printing or logging raw bodies or cookie values.
"""

from sapb1.http.attachments import FileAttachment, load_attachment
from sapb1.http.client import HttpClient
from sapb1.http.cookies import parse_set_cookie, serialize_cookies
from sapb1.http.errors import HttpLayerError, ResponseParseError, TransportError
from sapb1.http.request import RequestBuilder, RequestDescriptor
from sapb1.http.response import Response, ResponseParser, parse_response
from sapb1.http.transport import RawResponse, Transport, UrllibTransport

__all__ = [
    "FileAttachment",
    "HttpClient",
    "HttpLayerError",
    "RawResponse",
    "RequestBuilder",
    "RequestDescriptor",
    "Response",
    "ResponseParseError",
    "ResponseParser",
    "Transport",
    "TransportError",
    "UrllibTransport",
    "load_attachment",
    "parse_response",
    "parse_set_cookie",
    "serialize_cookies",
]
