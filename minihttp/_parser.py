# The driver that turns a Transport's byte stream into a Response: feed bytes
# into a ReceiveBuffer, ask the current reader for the next event, and read
# more from the transport whenever the reader says it needs more data.

from ._events import Data, EndOfMessage
from ._headers import Headers, get_comma_header
from ._models import Response
from ._readers import BODY_READERS, maybe_read_response_head
from ._receivebuffer import ReceiveBuffer
from ._transport import HTTP_DEFAULT_MAX_BUFFER_SIZE, READ_CHUNK_SIZE
from ._util import ErrorKind, HttpError

__all__ = ["ResponseParser", "HTTP_DEFAULT_MAX_BUFFER_SIZE"]


def _body_framing(request_method, head):
    # Called once the head is in, to figure out how the body is delimited.
    # Returns one of:
    #
    #    ("content-length", (count,))
    #    ("chunked", ())
    #    ("http/1.0", ())
    #
    # which are (lookup key, *args) for constructing a body reader.
    #
    # Reference: https://tools.ietf.org/html/rfc7230#section-3.3.3
    #
    # Step 1: some responses always have an empty body, regardless of what the
    # headers say.
    if head.status_code in (204, 304) or request_method == b"HEAD":
        return ("content-length", (0,))

    headers = Headers(head.headers)

    # Step 2: check for Transfer-Encoding (T-E beats C-L). If chunked isn't
    # the last coding, the body runs until the connection closes.
    transfer_encodings = get_comma_header(headers, "Transfer-Encoding")
    if transfer_encodings:
        if transfer_encodings[-1] == "chunked":
            return ("chunked", ())
        return ("http/1.0", ())

    # Step 3: check for Content-Length
    content_lengths = get_comma_header(headers, "Content-Length")
    if content_lengths:
        if (len(set(content_lengths)) != 1
                or not content_lengths[0].isascii()
                or not content_lengths[0].isdigit()):
            raise HttpError(
                "bad Content-Length: {!r}".format(
                    headers.get("Content-Length")),
                ErrorKind.MALFORMED_HEADER,
            )
        return ("content-length", (int(content_lengths[0]),))

    # Step 4: no applicable headers; read until the server hangs up
    return ("http/1.0", ())


class ResponseParser:
    """Reads one response from a :class:`Transport`.

    Call :meth:`parse` once; it reads exactly as much as the response's
    framing says (or until EOF for close-delimited bodies) and returns a
    :class:`Response`, or raises :exc:`HttpError`.

    ``request_method`` matters because responses to ``HEAD`` never have a
    body, whatever their headers claim.
    """

    def __init__(self, transport, request_method=b"GET",
                 max_buffer_size=HTTP_DEFAULT_MAX_BUFFER_SIZE):
        self._transport = transport
        self._request_method = request_method
        self._max_buffer_size = max_buffer_size
        self._receive_buffer = ReceiveBuffer()
        self._receive_buffer_closed = False

    def _receive_data(self):
        data = self._transport.read(READ_CHUNK_SIZE)
        if data:
            self._receive_buffer += data
        else:
            self._receive_buffer_closed = True

    def _next_event(self, reader):
        while True:
            event = reader(self._receive_buffer)
            if event is not None:
                return event
            if self._receive_buffer_closed:
                # Some readers (close-delimited bodies) have a sensible
                # meaning for EOF; for everyone else it's an error.
                if hasattr(reader, "read_eof"):
                    return reader.read_eof()
                raise HttpError(
                    "peer closed connection before sending a complete "
                    "response head", ErrorKind.UNEXPECTED_EOF)
            if len(self._receive_buffer) > self._max_buffer_size:
                raise HttpError("response head too long",
                                ErrorKind.MALFORMED_HEADER)
            self._receive_data()

    def _read_head(self):
        while True:
            head = self._next_event(maybe_read_response_head)
            # 1xx responses are interim (e.g. 100 Continue); the real one
            # follows on the same connection.
            if not head.is_informational:
                return head

    def parse(self):
        head = self._read_head()
        framing_type, args = _body_framing(self._request_method, head)
        reader = BODY_READERS[framing_type](*args)
        body = bytearray()
        while True:
            event = self._next_event(reader)
            if type(event) is EndOfMessage:
                break
            assert type(event) is Data
            body += event.data
        return Response.from_head(head, body)
