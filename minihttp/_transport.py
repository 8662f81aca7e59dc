# Everything that touches a socket lives here. The rest of minihttp only ever
# sees the Transport interface: read(), write(), close(). Whether the bytes go
# straight to the server, through TLS, or through a proxy's CONNECT tunnel is
# decided once, in connect(), and nobody downstream can tell the difference.

import logging
import socket
import ssl

from ._readers import maybe_read_response_head
from ._receivebuffer import ReceiveBuffer
from ._util import ErrorKind, HttpError

__all__ = ["Transport", "SocketTransport", "connect", "open_tunnel",
           "start_tls", "DEFAULT_TIMEOUT", "READ_CHUNK_SIZE",
           "HTTP_DEFAULT_MAX_BUFFER_SIZE"]

logger = logging.getLogger(__name__)

# Seconds; applies separately to connecting, each read, and each write.
DEFAULT_TIMEOUT = 30

READ_CHUNK_SIZE = 64 * 1024

# If we ever have this much buffered without it making a complete parseable
# event, we error out. Body readers consume everything they're given, so the
# only time we really buffer is when reading the status line + headers
# together (ours, or a proxy's CONNECT reply), so this is effectively the
# limit on the size of that.
#
# Some precedents for defaults:
# - node.js: 80 * 1024
# - tomcat: 8 * 1024
# - IIS: 16 * 1024
# - Apache: <8 KiB per line>
HTTP_DEFAULT_MAX_BUFFER_SIZE = 16 * 1024


class Transport:
    """A duplex byte stream to a single remote endpoint.

    Subclasses implement :meth:`read`, :meth:`write` and :meth:`close`, and
    must report I/O failures as :exc:`HttpError` with
    ``ErrorKind.TRANSPORT_ERROR``. A transport belongs to one request; once
    it's closed, or once any call on it has failed, it's done.

    """

    def read(self, max_bytes=READ_CHUNK_SIZE):
        """Block until some bytes arrive and return them; ``b""`` means EOF."""
        raise NotImplementedError

    def write(self, data):
        """Block until all of ``data`` has been sent."""
        raise NotImplementedError

    def close(self):
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def _transport_error(action, exc):
    return HttpError("{} failed: {}".format(action, exc),
                     ErrorKind.TRANSPORT_ERROR)


class SocketTransport(Transport):
    """A :class:`Transport` over a connected socket, plain or TLS."""

    def __init__(self, sock):
        self.sock = sock

    def read(self, max_bytes=READ_CHUNK_SIZE):
        try:
            return self.sock.recv(max_bytes)
        except OSError as exc:
            raise _transport_error("read", exc) from exc

    def write(self, data):
        try:
            self.sock.sendall(data)
        except OSError as exc:
            raise _transport_error("write", exc) from exc

    def close(self):
        self.sock.close()

    def __repr__(self):
        return "<{} {!r}>".format(self.__class__.__name__, self.sock)


def _open_socket(host, port, timeout):
    logger.debug("connecting to %s:%s", host, port)
    try:
        return socket.create_connection((host, port), timeout=timeout)
    except socket.gaierror as exc:
        raise HttpError("could not resolve {!r}: {}".format(host, exc),
                        ErrorKind.DNS_RESOLUTION_FAILED) from exc
    except ConnectionRefusedError as exc:
        raise HttpError("{}:{} refused the connection".format(host, port),
                        ErrorKind.CONNECTION_REFUSED) from exc
    except OSError as exc:
        raise _transport_error("connect to {}:{}".format(host, port),
                               exc) from exc


def _make_ssl_context(verify):
    ctx = ssl.create_default_context()
    if not verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def start_tls(transport, server_hostname, verify=True):
    """Run a TLS handshake over ``transport`` and return the TLS transport.

    ``transport`` may already be a proxy tunnel; TLS then runs end to end
    with the real server, and the proxy only sees ciphertext.
    """
    ctx = _make_ssl_context(verify)
    try:
        sock = ctx.wrap_socket(transport.sock, server_hostname=server_hostname)
    except (ssl.SSLError, ssl.CertificateError) as exc:
        raise HttpError("TLS handshake with {!r} failed: {}".format(
            server_hostname, exc), ErrorKind.TLS_HANDSHAKE_FAILED) from exc
    except OSError as exc:
        raise _transport_error("TLS handshake", exc) from exc
    logger.debug("TLS established with %s (%s)", server_hostname,
                 sock.version())
    return SocketTransport(sock)


def _authority(host, port):
    if ":" in host:
        host = "[{}]".format(host)
    return "{}:{}".format(host, port)


def open_tunnel(transport, host, port,
                max_buffer_size=HTTP_DEFAULT_MAX_BUFFER_SIZE):
    """Ask the proxy at the other end of ``transport`` to CONNECT us to
    ``host:port``.

    On success the same transport is now a raw pipe to the target. A non-2xx
    answer raises :exc:`HttpError` with ``ErrorKind.PROXY_CONNECT_FAILED``
    and the proxy's status line as the payload. A reply head longer than
    ``max_buffer_size`` is ``ErrorKind.MALFORMED_HEADER``.
    """
    authority = _authority(host, port).encode("ascii")
    transport.write(b"CONNECT %s HTTP/1.1\r\nHost: %s\r\n\r\n"
                    % (authority, authority))

    buf = ReceiveBuffer()
    while True:
        head = maybe_read_response_head(buf)
        if head is not None:
            break
        if len(buf) > max_buffer_size:
            raise HttpError("proxy's CONNECT response head too long",
                            ErrorKind.MALFORMED_HEADER)
        data = transport.read()
        if not data:
            raise HttpError("proxy closed the connection during CONNECT",
                            ErrorKind.UNEXPECTED_EOF)
        buf += data

    status_line = "HTTP/{} {} {}".format(
        head.http_version.decode("ascii"),
        head.status_code,
        head.reason.decode("latin-1"),
    ).rstrip()
    if not 200 <= head.status_code < 300:
        raise HttpError("proxy refused CONNECT: {}".format(status_line),
                        ErrorKind.PROXY_CONNECT_FAILED, payload=status_line)
    # A successful CONNECT response never has a body (RFC 7231 4.3.6), and
    # the server can't have said anything yet because we haven't.
    if buf:
        raise HttpError("proxy sent data after its CONNECT response",
                        ErrorKind.PROXY_CONNECT_FAILED, payload=status_line)
    logger.debug("tunnel to %s:%s established", host, port)
    return transport


def connect(host, port, use_tls, proxy=None, timeout=DEFAULT_TIMEOUT,
            verify=True, max_buffer_size=HTTP_DEFAULT_MAX_BUFFER_SIZE):
    """Open a :class:`Transport` to ``host:port``.

    If ``proxy`` (a :class:`URL`) is given, the TCP connection goes to the
    proxy, which is asked to tunnel to ``host:port`` with ``CONNECT``. If
    ``use_tls`` is true the TLS handshake then runs with ``host``, either
    directly or inside the tunnel.
    """
    if proxy is None:
        transport = SocketTransport(_open_socket(host, port, timeout))
    else:
        transport = SocketTransport(
            _open_socket(proxy.host, proxy.port, timeout))
    try:
        if proxy is not None:
            open_tunnel(transport, host, port,
                        max_buffer_size=max_buffer_size)
        if use_tls:
            transport = start_tls(transport, host, verify=verify)
    except BaseException:
        transport.close()
        raise
    return transport
