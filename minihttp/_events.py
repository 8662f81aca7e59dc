# The pieces a response is parsed into. Readers hand these back one at a time
# and ResponseParser glues them together into a Response.
#
# Don't subclass these. Stuff will break.

__all__ = ["ResponseHead", "Data", "EndOfMessage"]


class ResponseHead:
    """The status line and header block of a response.

    Fields:

    .. attribute:: status_code

       The status code, as an integer.

    .. attribute:: reason

       The reason phrase as a byte string, e.g. ``b"Not Found"``. May be
       empty.

    .. attribute:: http_version

       The protocol version as a byte string like ``b"1.1"``.

    .. attribute:: headers

       The header block, as a list of ``(name, value)`` byte string pairs in
       the order they arrived.

    """

    __slots__ = ("status_code", "reason", "http_version", "headers")

    def __init__(self, status_code, headers, http_version=b"1.1", reason=b""):
        self.status_code = status_code
        self.headers = headers
        self.http_version = http_version
        self.reason = reason

    @property
    def is_informational(self):
        return 100 <= self.status_code < 200

    def __repr__(self):
        return "{}(status_code={}, headers={}, http_version={}, reason={})".format(
            self.__class__.__name__,
            self.status_code,
            self.headers,
            self.http_version,
            self.reason,
        )

    # Useful for tests
    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return (
            self.status_code == other.status_code
            and self.headers == other.headers
            and self.http_version == other.http_version
            and self.reason == other.reason
        )

    # This is an unhashable type.
    __hash__ = None


class Data:
    """Part of a response body.

    .. attribute:: data

       A :term:`bytes-like object` with the next stretch of body bytes, with
       any chunked framing already removed.

    """

    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data

    def __repr__(self):
        return "{}(data={})".format(self.__class__.__name__, self.data)

    # Useful for tests
    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.data == other.data

    # This is an unhashable type.
    __hash__ = None


class EndOfMessage:
    """The end of the response body.

    Chunked trailers are read and thrown away, so this carries no fields.
    """

    __slots__ = ()

    def __repr__(self):
        return "{}()".format(self.__class__.__name__)

    # Useful for tests
    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return True

    # This is an unhashable type.
    __hash__ = None
