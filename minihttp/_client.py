import logging
import re

from ._abnf import field_name, field_value, token
from ._headers import Headers
from ._models import RequestSpec
from ._parser import HTTP_DEFAULT_MAX_BUFFER_SIZE, ResponseParser
from ._transport import DEFAULT_TIMEOUT, connect
from ._url import URL
from ._util import ErrorKind, HttpError, bytesify, validate
from ._writers import write_request

__all__ = ["Client"]

logger = logging.getLogger(__name__)

method_re = re.compile(token.encode("ascii"))
field_name_re = re.compile(field_name.encode("ascii"))
field_value_re = re.compile(field_value.encode("ascii"))


def _encode(text, encoding, what):
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise HttpError("{} {!r} is not {}".format(what, text, encoding),
                        ErrorKind.INVALID_REQUEST) from exc


def _check_header(name, value):
    # Header names are ASCII tokens; values go out as ISO-8859-1 and must not
    # contain CR, LF or other control characters.
    validate(field_name_re, _encode(name, "ascii", "header name"),
             "illegal header name {!r}".format(name),
             ErrorKind.INVALID_REQUEST)
    validate(field_value_re, _encode(value, "latin-1", "header value"),
             "illegal header value {!r}".format(value),
             ErrorKind.INVALID_REQUEST)


class Client:
    """Builds and sends a single request.

    Every method except :meth:`send` returns a *new* :class:`Client` and
    leaves the one it was called on untouched, so a configured client can be
    kept around and reused as a template::

        base = minihttp.Client("https://example.com/api").headers(
            [("Accept", "application/json")])
        r1 = base.get().send()
        r2 = base.post().body(b"{}").send()

    ``url`` is parsed immediately, so a bad URL raises :exc:`HttpError`
    (``ErrorKind.INVALID_URL``) here rather than at send time.

    """

    __slots__ = ("_spec", "_max_buffer_size")

    def __init__(self, url, max_buffer_size=HTTP_DEFAULT_MAX_BUFFER_SIZE):
        self._spec = RequestSpec(b"GET", URL.parse(url),
                                 timeout=DEFAULT_TIMEOUT)
        self._max_buffer_size = max_buffer_size

    def _evolve(self, **changes):
        clone = object.__new__(Client)
        clone._spec = self._spec.replace(**changes)
        clone._max_buffer_size = self._max_buffer_size
        return clone

    @property
    def spec(self):
        return self._spec

    def request(self, method):
        """Use ``method`` as given; HTTP methods are case-sensitive."""
        if isinstance(method, str):
            method = _encode(method, "ascii", "method")
        method = bytesify(method)
        validate(method_re, method, "illegal method {!r}".format(method),
                 ErrorKind.INVALID_REQUEST)
        return self._evolve(method=method)

    def get(self):
        return self.request(b"GET")

    def post(self):
        return self.request(b"POST")

    def put(self):
        return self.request(b"PUT")

    def head(self):
        return self.request(b"HEAD")

    def delete(self):
        return self.request(b"DELETE")

    def options(self):
        return self.request(b"OPTIONS")

    def headers(self, pairs):
        """Merge ``pairs`` (``(name, value)`` pairs or a mapping) into the
        request's headers. Names are matched case-insensitively and the last
        value given for a name wins.
        """
        added = Headers(pairs)
        for name, value in added:
            _check_header(name, value)
        headers = self._spec.headers.copy()
        headers.extend(added)
        return self._evolve(headers=headers)

    def body(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif data is not None:
            data = bytes(data)
        return self._evolve(body=data)

    def proxy(self, url):
        return self._evolve(proxy=URL.parse(url))

    def timeout(self, seconds):
        return self._evolve(timeout=seconds)

    def verify(self, flag):
        if not self._spec.url.is_tls:
            raise HttpError("certificate verification only applies to https",
                            ErrorKind.INVALID_REQUEST)
        return self._evolve(verify=bool(flag))

    def send(self):
        """Connect, send the request, and read back the :class:`Response`.

        The connection is closed before this returns, whether it succeeded or
        not.
        """
        spec = self._spec
        spec.check()
        url = spec.url
        if spec.proxy is None:
            logger.debug("%s %s", spec.method.decode("ascii"), url)
        else:
            logger.debug("%s %s via proxy %s", spec.method.decode("ascii"),
                         url, spec.proxy)
        with connect(url.host, url.port, url.is_tls, proxy=spec.proxy,
                     timeout=spec.timeout, verify=spec.verify,
                     max_buffer_size=self._max_buffer_size) as transport:
            write_request(spec, transport.write)
            parser = ResponseParser(transport, request_method=spec.method,
                                    max_buffer_size=self._max_buffer_size)
            response = parser.parse()
        logger.debug("%s %s -> %s %s (%d bytes)", spec.method.decode("ascii"),
                     url, response.status_code, response.reason,
                     len(response.body))
        return response

    def __repr__(self):
        return "<{} {} {}>".format(self.__class__.__name__,
                                   self._spec.method.decode("ascii"),
                                   self._spec.url)
