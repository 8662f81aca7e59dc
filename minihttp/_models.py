from ._headers import Headers
from ._util import ErrorKind, HttpError

__all__ = ["RequestSpec", "Response"]

# Methods that never carry a request body.
BODYLESS_METHODS = frozenset([b"GET", b"HEAD", b"TRACE", b"CONNECT"])


class RequestSpec:
    """Everything needed to send one request.

    Instances are built by :class:`Client` and handed to
    :func:`write_request`; treat them as read-only. ``method`` is a byte
    string, ``url`` and ``proxy`` are :class:`URL` objects (``proxy`` may be
    ``None``), ``headers`` is a :class:`Headers`, ``body`` is bytes or
    ``None``, ``timeout`` is seconds or ``None``, ``verify`` says whether TLS
    certificates are checked.
    """

    __slots__ = ("method", "url", "headers", "body", "proxy", "timeout",
                 "verify")

    def __init__(self, method, url, headers=(), body=None, proxy=None,
                 timeout=None, verify=True):
        self.method = method
        self.url = url
        self.headers = Headers(headers)
        self.body = body
        self.proxy = proxy
        self.timeout = timeout
        self.verify = verify

    def replace(self, **changes):
        fields = {name: getattr(self, name) for name in self.__slots__}
        fields.update(changes)
        return type(self)(**fields)

    def check(self):
        if self.body is not None and self.method in BODYLESS_METHODS:
            raise HttpError(
                "{} requests cannot carry a body".format(
                    self.method.decode("ascii")),
                ErrorKind.INVALID_REQUEST,
            )

    def __repr__(self):
        return "{}(method={}, url={}, headers={}, body={}, proxy={})".format(
            self.__class__.__name__,
            self.method,
            self.url,
            self.headers,
            self.body,
            self.proxy,
        )

    # Useful for tests
    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name)
                   for name in self.__slots__)

    # This is an unhashable type.
    __hash__ = None


class Response:
    """A complete HTTP response.

    Fields:

    .. attribute:: status_code

       The status code, as an integer, e.g. ``404``.

    .. attribute:: reason

       The reason phrase, as a string, e.g. ``"Not Found"``.

    .. attribute:: http_version

       The server's protocol version, as a string like ``"1.1"``.

    .. attribute:: headers

       A :class:`Headers`; ``response.headers["content-type"]`` and
       ``response.headers.get("Content-Type")`` both work, whatever case the
       server used. If the server repeated a header, the last one wins.

    .. attribute:: body

       The raw body, as bytes, with any chunked framing removed.

    """

    __slots__ = ("status_code", "reason", "http_version", "headers", "body")

    def __init__(self, status_code, reason="", headers=(), body=b"",
                 http_version="1.1"):
        self.status_code = status_code
        self.reason = reason
        self.http_version = http_version
        self.headers = Headers(headers)
        self.body = body

    @classmethod
    def from_head(cls, head, body):
        return cls(
            status_code=head.status_code,
            reason=head.reason.decode("latin-1"),
            headers=head.headers,
            body=bytes(body),
            http_version=head.http_version.decode("ascii"),
        )

    @property
    def ok(self):
        return self.status_code < 400

    def text(self):
        """Return the body decoded as UTF-8.

        Raises :exc:`HttpError` with ``ErrorKind.INVALID_UTF8`` if it isn't.
        """
        try:
            return self.body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HttpError("response body is not valid UTF-8",
                            ErrorKind.INVALID_UTF8) from exc

    def __repr__(self):
        return "<{} [{} {}]>".format(
            self.__class__.__name__, self.status_code, self.reason)
