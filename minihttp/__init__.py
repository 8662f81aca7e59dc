# A minimal, blocking HTTP/1.1 client. Give it a URL, maybe some headers, a
# body, or a proxy, and it opens a connection (plain, TLS, or through an HTTP
# proxy's CONNECT tunnel), writes one request, reads one response, and hangs
# up. No pooling, no redirects, no cookies, no retries.
#
#     >>> import minihttp
#     >>> r = minihttp.get("https://example.com/")
#     >>> r.status_code, r.headers["content-type"]
#     >>> r.text()

from ._client import Client
from ._headers import Headers
from ._models import RequestSpec, Response
from ._parser import HTTP_DEFAULT_MAX_BUFFER_SIZE, ResponseParser
from ._transport import DEFAULT_TIMEOUT, SocketTransport, Transport, connect
from ._url import URL
from ._util import ErrorKind, HttpError
from ._version import __version__
from ._writers import write_request

__all__ = [
    "Client",
    "Headers",
    "RequestSpec",
    "Response",
    "ResponseParser",
    "HTTP_DEFAULT_MAX_BUFFER_SIZE",
    "Transport",
    "SocketTransport",
    "connect",
    "DEFAULT_TIMEOUT",
    "URL",
    "ErrorKind",
    "HttpError",
    "write_request",
    "get",
    "post",
    "put",
    "head",
    "delete",
    "options",
]


def get(url):
    return Client(url).get().send()


def post(url, body=None):
    return Client(url).post().body(body).send()


def put(url, body=None):
    return Client(url).put().body(body).send()


def head(url):
    return Client(url).head().send()


def delete(url):
    return Client(url).delete().send()


def options(url):
    return Client(url).options().send()
