import enum

__all__ = ["ErrorKind", "HttpError", "validate", "bytesify"]


class ErrorKind(enum.Enum):
    INVALID_URL = "invalid url"
    INVALID_REQUEST = "invalid request"
    DNS_RESOLUTION_FAILED = "dns resolution failed"
    CONNECTION_REFUSED = "connection refused"
    TLS_HANDSHAKE_FAILED = "tls handshake failed"
    PROXY_CONNECT_FAILED = "proxy connect failed"
    TRANSPORT_ERROR = "transport error"
    MALFORMED_STATUS_LINE = "malformed status line"
    MALFORMED_HEADER = "malformed header"
    MALFORMED_CHUNK = "malformed chunk"
    UNEXPECTED_EOF = "unexpected eof"
    INVALID_UTF8 = "invalid utf-8"

    def __repr__(self):
        return "ErrorKind.{}".format(self.name)


class HttpError(Exception):
    """Exception raised for every failure minihttp can detect.

    There is exactly one exception type; what went wrong is carried on it:

    .. attribute:: kind

       An :class:`ErrorKind` member saying which step failed, e.g.
       ``ErrorKind.MALFORMED_CHUNK`` or ``ErrorKind.PROXY_CONNECT_FAILED``.
       Catch :exc:`HttpError` and dispatch on this instead of on subclasses.

    .. attribute:: payload

       Extra data for the failure, or ``None``. For
       ``ErrorKind.PROXY_CONNECT_FAILED`` this is the status line the proxy
       sent back, as a string.

    Lower-level causes (:exc:`OSError`, :exc:`ssl.SSLError`,
    :exc:`UnicodeDecodeError`) are chained, so they show up as
    ``__cause__``.

    A failed request leaves nothing behind to reuse: the connection has been
    closed, and retrying means calling :meth:`Client.send` again.

    """
    def __init__(self, msg, kind, payload=None):
        if not isinstance(kind, ErrorKind):
            raise TypeError("expected an ErrorKind, not {!r}".format(kind))
        Exception.__init__(self, msg)
        self.kind = kind
        self.payload = payload

    def __str__(self):
        return "{}: {}".format(self.kind.value, self.args[0])


def validate(regex, data, msg="malformed data",
             kind=ErrorKind.MALFORMED_HEADER):
    match = regex.fullmatch(data)
    if not match:
        raise HttpError(msg, kind)
    return match.groupdict()


# Used for methods, request targets, header names, and header values.
# Accepts ascii-strings, or bytes/bytearray/memoryview/..., and always returns
# bytes.
def bytesify(s):
    if isinstance(s, str):
        s = s.encode("ascii")
    if isinstance(s, int):
        raise TypeError("expected bytes-like object, not int")
    return bytes(s)
