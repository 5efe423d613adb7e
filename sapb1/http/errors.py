class HttpLayerError(Exception):
    """
    Base exception for request/response handling failures.
    """

    pass


class ResponseParseError(HttpLayerError):
    """
    Raised when a response status line cannot be parsed.
    """

    pass


class TransportError(HttpLayerError, RuntimeError):
    """
    Raised when the transport fails before a response is received
    (DNS, connection refused, TLS handshake).
    """

    pass
