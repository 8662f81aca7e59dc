import socket
import threading

from .._receivebuffer import ReceiveBuffer
from .._transport import Transport


class FakeTransport(Transport):
    """A Transport that replays canned reads and records writes.

    ``chunks`` is what successive read() calls return; once they run out,
    read() returns b"" (EOF). Each chunk is handed out whole, whatever
    max_bytes asks for, which is how a short socket read behaves too.
    """

    def __init__(self, chunks=()):
        self._chunks = list(chunks)
        self.written = bytearray()
        self.reads = 0
        self.closed = False

    def read(self, max_bytes=65536):
        self.reads += 1
        if self._chunks:
            return self._chunks.pop(0)
        return b""

    def write(self, data):
        self.written += data

    def close(self):
        self.closed = True

    @property
    def exhausted(self):
        return not self._chunks


def bytewise(data):
    return [data[i:i + 1] for i in range(len(data))]


def makebuf(data):
    buf = ReceiveBuffer()
    buf += data
    return buf


# A one-shot TCP server on loopback: accepts a single connection, reads the
# request head (and a Content-Length body if there is one), hands the raw
# request to `handler`, and writes back whatever bytes `handler` returns
# before closing. The request it saw ends up in `.request`.
class OneShotServer:
    def __init__(self, handler):
        self._handler = handler
        self._sock = socket.socket()
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self.port = self._sock.getsockname()[1]
        self.request = None
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        conn, _ = self._sock.accept()
        with conn:
            data = b""
            while b"\r\n\r\n" not in data:
                more = conn.recv(4096)
                if not more:
                    break
                data += more
            head, _, body = data.partition(b"\r\n\r\n")
            for line in head.split(b"\r\n")[1:]:
                name, _, value = line.partition(b":")
                if name.strip().lower() == b"content-length":
                    while len(body) < int(value):
                        body += conn.recv(4096)
            self.request = head + b"\r\n\r\n" + body
            conn.sendall(self._handler(self.request))

    def __enter__(self):
        self._thread.start()
        return self

    def __exit__(self, *exc_info):
        self._thread.join(timeout=5)
        self._sock.close()

    @property
    def url(self):
        return "http://127.0.0.1:{}".format(self.port)


def free_port():
    # Bind, note the port, and let go of it again; nothing is listening on it
    # afterwards, so connecting there gets refused.
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _read_head(conn, data=b""):
    while b"\r\n\r\n" not in data:
        more = conn.recv(4096)
        if not more:
            break
        data += more
    head, _, rest = data.partition(b"\r\n\r\n")
    return head + b"\r\n\r\n", rest


# Pretends to be an HTTP proxy that's also the origin server: answers the
# CONNECT with `connect_reply`, and if that was a 2xx, reads the request that
# comes through the "tunnel" and answers it with `response`.
class FakeProxy:
    def __init__(self, connect_reply, response=b""):
        self._connect_reply = connect_reply
        self._response = response
        self._sock = socket.socket()
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self.port = self._sock.getsockname()[1]
        self.connect_request = None
        self.tunneled_request = None
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        conn, _ = self._sock.accept()
        with conn:
            self.connect_request, rest = _read_head(conn)
            conn.sendall(self._connect_reply)
            if not self._connect_reply.split(b" ")[1].startswith(b"2"):
                return
            self.tunneled_request, _ = _read_head(conn, rest)
            conn.sendall(self._response)

    def __enter__(self):
        self._thread.start()
        return self

    def __exit__(self, *exc_info):
        self._thread.join(timeout=5)
        self._sock.close()

    @property
    def url(self):
        return "http://127.0.0.1:{}".format(self.port)
