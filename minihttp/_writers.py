# Code to write HTTP requests
#
# Strategy: each writer takes an object and a callable which accepts
# bytes-like objects, and calls the callable with some data. Usually the
# callable is Transport.write, but tests pass list.append.

from ._util import bytesify

__all__ = ["write_headers", "write_request"]


def _header_line(name, value):
    return bytesify(name) + b": " + value.encode("latin-1") + b"\r\n"


def write_headers(headers, write):
    # "Since the Host field-value is critical information for handling a
    # request, a user agent SHOULD generate Host as the first header field
    # following the request-line." - RFC 7230
    for name, value in headers:
        if name.lower() == "host":
            write(_header_line(name, value))
    for name, value in headers:
        if name.lower() != "host":
            write(_header_line(name, value))
    write(b"\r\n")


def _framing_headers(spec):
    # The caller's headers first, then whatever we have to add ourselves.
    # Anything the caller set explicitly wins.
    headers = spec.headers.copy()
    if "Host" not in headers:
        headers.set("Host", spec.url.authority)
    if "Connection" not in headers:
        headers.set("Connection", "close")
    if spec.body is not None and "Content-Length" not in headers:
        headers.set("Content-Length", str(len(spec.body)))
    return headers


def write_request(spec, write):
    head = [b"%s %s HTTP/1.1\r\n" % (bytesify(spec.method),
                                     bytesify(spec.url.target))]
    write_headers(_framing_headers(spec), head.append)
    write(b"".join(head))
    if spec.body:
        write(spec.body)
