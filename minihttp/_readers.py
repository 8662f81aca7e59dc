# Code to read HTTP responses
#
# Strategy: each reader is a callable which takes a ReceiveBuffer object, and
# either:
# 1) consumes some of it and returns an event
# 2) raises an HttpError
# 3) returns None, meaning "I need more data"
#
# If they have a .read_eof attribute, then this will be called if an EOF is
# received while they still want more data. It either returns the final event
# or raises. Readers without one treat EOF as an error; see ResponseParser.
#
# BODY_READERS maps each framing type to a reader factory.

import re

from ._abnf import chunk_header, header_field, status_line
from ._events import Data, EndOfMessage, ResponseHead
from ._util import ErrorKind, HttpError, validate

__all__ = [
    "maybe_read_response_head",
    "ContentLengthReader",
    "ChunkedReader",
    "Http10Reader",
    "BODY_READERS",
]

header_field_re = re.compile(header_field.encode("ascii"))
status_line_re = re.compile(status_line.encode("ascii"))
chunk_header_re = re.compile(chunk_header.encode("ascii"))

# Remember that this has to run in O(n) time -- so e.g. the bytearray cast is
# critical.
obs_fold_re = re.compile(br"[ \t]+")


def _obsolete_line_fold(lines):
    it = iter(lines)
    last = None
    for line in it:
        match = obs_fold_re.match(line)
        if match:
            if last is None:
                raise HttpError("continuation line at start of headers",
                                ErrorKind.MALFORMED_HEADER)
            if not isinstance(last, bytearray):
                last = bytearray(last)
            last += b" "
            last += line[match.end():]
        else:
            if last is not None:
                yield last
            last = line
    if last is not None:
        yield last


def _decode_header_lines(lines):
    for line in _obsolete_line_fold(lines):
        matches = validate(header_field_re, line,
                           "illegal header line: {!r}".format(bytes(line)),
                           ErrorKind.MALFORMED_HEADER)
        yield (bytes(matches["field_name"]), bytes(matches["field_value"]))


def maybe_read_response_head(buf):
    lines = buf.maybe_extract_lines()
    if lines is None:
        return None
    if not lines:
        raise HttpError("no status line received",
                        ErrorKind.MALFORMED_STATUS_LINE)
    matches = validate(status_line_re, lines[0],
                       "illegal status line: {!r}".format(bytes(lines[0])),
                       ErrorKind.MALFORMED_STATUS_LINE)
    return ResponseHead(
        status_code=int(matches["status_code"]),
        reason=bytes(matches["reason"] or b""),
        http_version=bytes(matches["http_version"]),
        headers=list(_decode_header_lines(lines[1:])),
    )


class ContentLengthReader:
    def __init__(self, length):
        self._length = length
        self._remaining = length

    def __call__(self, buf):
        if self._remaining == 0:
            return EndOfMessage()
        data = buf.maybe_extract_at_most(self._remaining)
        if data is None:
            return None
        self._remaining -= len(data)
        return Data(data=data)

    def read_eof(self):
        raise HttpError(
            "peer closed connection without sending complete message body: "
            "received {} bytes, expected {}".format(
                self._length - self._remaining, self._length),
            ErrorKind.UNEXPECTED_EOF,
        )


class ChunkedReader:
    def __init__(self):
        self._bytes_in_chunk = 0
        # After reading a chunk, the next two bytes have to be exactly \r\n
        # before the next chunk header can start.
        self._awaiting_chunk_end = False
        self._reading_trailer = False

    def __call__(self, buf):
        if self._reading_trailer:
            # Trailers end at the blank line. We don't do anything with them.
            lines = buf.maybe_extract_lines()
            if lines is None:
                return None
            return EndOfMessage()
        if self._awaiting_chunk_end:
            crlf = buf.maybe_extract_exactly(2)
            if crlf is None:
                return None
            if crlf != b"\r\n":
                raise HttpError("chunk data not followed by CRLF",
                                ErrorKind.MALFORMED_CHUNK)
            self._awaiting_chunk_end = False
        if self._bytes_in_chunk == 0:
            # We need to refill our chunk count
            chunk_header = buf.maybe_extract_next_line()
            if chunk_header is None:
                return None
            matches = validate(
                chunk_header_re, chunk_header,
                "illegal chunk header: {!r}".format(bytes(chunk_header)),
                ErrorKind.MALFORMED_CHUNK,
            )
            # chunk extensions are dropped on the floor
            self._bytes_in_chunk = int(bytes(matches["chunk_size"]), base=16)
            if self._bytes_in_chunk == 0:
                self._reading_trailer = True
                return self(buf)
        assert self._bytes_in_chunk > 0
        data = buf.maybe_extract_at_most(self._bytes_in_chunk)
        if data is None:
            return None
        self._bytes_in_chunk -= len(data)
        if self._bytes_in_chunk == 0:
            self._awaiting_chunk_end = True
        return Data(data=data)

    def read_eof(self):
        raise HttpError(
            "peer closed connection without sending complete message body: "
            "incomplete chunked read",
            ErrorKind.UNEXPECTED_EOF,
        )


class Http10Reader:
    def __call__(self, buf):
        data = buf.maybe_extract_at_most(999999999)
        if data is None:
            return None
        return Data(data=data)

    def read_eof(self):
        return EndOfMessage()


BODY_READERS = {
    "chunked": ChunkedReader,
    "content-length": ContentLengthReader,
    "http/1.0": Http10Reader,
}
