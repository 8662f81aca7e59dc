import logging

import pytest

import minihttp
from .._client import Client
from .._util import ErrorKind, HttpError

from .helpers import FakeProxy, OneShotServer, free_port


def reply(data):
    return lambda request: data


def test_builder_is_immutable():
    base = Client("http://example.com/a")
    assert base.spec.method == b"GET"

    post = base.post()
    assert post is not base
    assert post.spec.method == b"POST"
    assert base.spec.method == b"GET"

    with_headers = base.headers([("X", "a")])
    more_headers = with_headers.headers([("x", "B"), ("Y", "c")])
    assert list(base.spec.headers) == []
    assert with_headers.spec.headers["X"] == "a"
    assert more_headers.spec.headers["X"] == "B"
    assert list(more_headers.spec.headers) == [("x", "B"), ("Y", "c")]

    with_body = post.body("héllo")
    assert with_body.spec.body == "héllo".encode("utf-8")
    assert post.spec.body is None
    assert with_body.body(bytearray(b"raw")).spec.body == b"raw"

    proxied = base.proxy("http://proxy.local:3128")
    assert proxied.spec.proxy.host == "proxy.local"
    assert proxied.spec.proxy.port == 3128
    assert base.spec.proxy is None

    assert base.timeout(3).spec.timeout == 3
    assert base.spec.timeout == minihttp.DEFAULT_TIMEOUT


def test_methods():
    c = Client("http://example.com/")
    assert c.get().spec.method == b"GET"
    assert c.post().spec.method == b"POST"
    assert c.put().spec.method == b"PUT"
    assert c.head().spec.method == b"HEAD"
    assert c.delete().spec.method == b"DELETE"
    assert c.options().spec.method == b"OPTIONS"
    assert c.request("PROPFIND").spec.method == b"PROPFIND"
    # methods are case-sensitive, so custom ones go out as given
    assert c.request("profile").spec.method == b"profile"
    assert c.request(b"M-SEARCH").spec.method == b"M-SEARCH"


@pytest.mark.parametrize("method", ["GET /x", "GET\r\n", "", "G\xc9T"])
def test_bad_methods(method):
    with pytest.raises(HttpError) as excinfo:
        Client("http://example.com/").request(method)
    assert excinfo.value.kind is ErrorKind.INVALID_REQUEST


def test_headers_accepts_mapping():
    c = Client("http://example.com/").headers({"User-Agent": "test/1.0"})
    assert c.spec.headers["user-agent"] == "test/1.0"


def test_headers_latin1_values():
    c = Client("http://example.com/").headers([("X-Name", "caf\xe9")])
    assert c.spec.headers["x-name"] == "caf\xe9"


@pytest.mark.parametrize("pair", [
    ("X-Euro", "€"),
    ("X-Inject", "a\r\nEvil: yes"),
    ("X-Nul", "a\x00b"),
    ("Bad Name", "v"),
    ("Bad:Name", "v"),
    ("", "v"),
    ("N\xe4me", "v"),
])
def test_bad_headers(pair):
    # rejected while building, long before anything is connected
    base = Client("http://127.0.0.1:1/")
    with pytest.raises(HttpError) as excinfo:
        base.headers([pair])
    assert excinfo.value.kind is ErrorKind.INVALID_REQUEST
    assert list(base.spec.headers) == []


def test_non_ascii_url_fails_before_connecting():
    with pytest.raises(HttpError) as excinfo:
        Client("http://127.0.0.1:1/caf\xe9")
    assert excinfo.value.kind is ErrorKind.INVALID_URL


def test_invalid_urls():
    with pytest.raises(HttpError) as excinfo:
        Client("example.com")
    assert excinfo.value.kind is ErrorKind.INVALID_URL

    with pytest.raises(HttpError) as excinfo:
        Client("http://example.com/").proxy("socks5://127.0.0.1:1080")
    assert excinfo.value.kind is ErrorKind.INVALID_URL


def test_verify_only_for_https():
    assert Client("https://example.com/").verify(False).spec.verify is False
    with pytest.raises(HttpError) as excinfo:
        Client("http://example.com/").verify(False)
    assert excinfo.value.kind is ErrorKind.INVALID_REQUEST


def test_body_needs_a_body_method():
    # checked at send time, so the order of calls doesn't matter
    c = Client("http://127.0.0.1:1/").body(b"data")
    for bad in [c, c.get(), c.head()]:
        with pytest.raises(HttpError) as excinfo:
            bad.send()
        assert excinfo.value.kind is ErrorKind.INVALID_REQUEST


def test_send_get():
    response = (b"HTTP/1.1 200 OK\r\n"
                b"Content-Type: text/plain\r\n"
                b"Content-Length: 5\r\n\r\n"
                b"hello")
    with OneShotServer(reply(response)) as server:
        r = (Client(server.url + "/path?q=1")
             .headers([("Accept", "*/*")])
             .send())
    assert r.status_code == 200
    assert r.reason == "OK"
    assert r.ok
    assert r.headers["content-type"] == "text/plain"
    assert r.body == b"hello"
    assert r.text() == "hello"
    assert server.request == (
        b"GET /path?q=1 HTTP/1.1\r\n"
        b"Host: 127.0.0.1:" + str(server.port).encode("ascii") + b"\r\n"
        b"Accept: */*\r\n"
        b"Connection: close\r\n"
        b"\r\n")


def test_send_post_chunked_response():
    response = (b"HTTP/1.1 201 Created\r\n"
                b"Transfer-Encoding: chunked\r\n\r\n"
                b"4\r\nWiki\r\n5\r\npedia\r\n0\r\n\r\n")
    with OneShotServer(reply(response)) as server:
        r = Client(server.url).post().body(b"name=value").send()
    assert r.status_code == 201
    assert r.body == b"Wikipedia"
    head, _, body = server.request.partition(b"\r\n\r\n")
    assert head.startswith(b"POST / HTTP/1.1\r\n")
    assert b"\r\nContent-Length: 10" in head
    assert body == b"name=value"


def test_send_close_delimited_response():
    response = b"HTTP/1.0 200 OK\r\n\r\n" + b"x" * 100000
    with OneShotServer(reply(response)) as server:
        r = Client(server.url).send()
    assert r.http_version == "1.0"
    assert r.body == b"x" * 100000


def test_send_head():
    response = b"HTTP/1.1 200 OK\r\nContent-Length: 1000\r\n\r\n"
    with OneShotServer(reply(response)) as server:
        r = Client(server.url).head().send()
    assert r.headers["content-length"] == "1000"
    assert r.body == b""


def test_send_malformed_response():
    with OneShotServer(reply(b"garbage\r\n\r\n")) as server:
        with pytest.raises(HttpError) as excinfo:
            Client(server.url).send()
    assert excinfo.value.kind is ErrorKind.MALFORMED_STATUS_LINE


def test_send_connection_refused():
    with pytest.raises(HttpError) as excinfo:
        Client("http://127.0.0.1:{}/".format(free_port())).send()
    assert excinfo.value.kind is ErrorKind.CONNECTION_REFUSED


def test_send_through_proxy(caplog):
    response = b"HTTP/1.1 200 OK\r\nContent-Length: 7\r\n\r\ntunnels"
    with caplog.at_level(logging.DEBUG, logger="minihttp"):
        with FakeProxy(b"HTTP/1.1 200 Connection Established\r\n\r\n",
                       response) as proxy:
            r = (Client("http://example.com:8080/through?x=y")
                 .proxy(proxy.url)
                 .timeout(5)
                 .send())
    messages = [record.getMessage() for record in caplog.records]
    assert ("GET http://example.com:8080/through?x=y via proxy "
            "http://127.0.0.1:{}/".format(proxy.port)) in messages
    assert r.text() == "tunnels"
    assert proxy.connect_request == (b"CONNECT example.com:8080 HTTP/1.1\r\n"
                                     b"Host: example.com:8080\r\n\r\n")
    assert proxy.tunneled_request == (b"GET /through?x=y HTTP/1.1\r\n"
                                      b"Host: example.com:8080\r\n"
                                      b"Connection: close\r\n\r\n")


def test_send_through_refusing_proxy():
    with FakeProxy(b"HTTP/1.1 403 Forbidden\r\n\r\n") as proxy:
        with pytest.raises(HttpError) as excinfo:
            Client("http://example.com/").proxy(proxy.url).timeout(5).send()
    assert excinfo.value.kind is ErrorKind.PROXY_CONNECT_FAILED
    assert excinfo.value.payload == "HTTP/1.1 403 Forbidden"


def test_send_logs(caplog):
    response = b"HTTP/1.1 204 No Content\r\n\r\n"
    with caplog.at_level(logging.DEBUG, logger="minihttp"):
        with OneShotServer(reply(response)) as server:
            Client(server.url).send()
    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("GET http://127.0.0.1") for m in messages)
    assert any(m.endswith("-> 204 No Content (0 bytes)") for m in messages)


def test_shortcuts():
    response = b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nok"
    with OneShotServer(reply(response)) as server:
        assert minihttp.get(server.url).text() == "ok"
    assert server.request.startswith(b"GET / HTTP/1.1\r\n")

    with OneShotServer(reply(response)) as server:
        assert minihttp.post(server.url, body="a=1").text() == "ok"
    assert server.request.startswith(b"POST / HTTP/1.1\r\n")
    assert server.request.endswith(b"\r\n\r\na=1")

    with OneShotServer(reply(response)) as server:
        minihttp.put(server.url, body=b"x")
    assert server.request.startswith(b"PUT / HTTP/1.1\r\n")

    with OneShotServer(reply(response)) as server:
        minihttp.delete(server.url)
    assert server.request.startswith(b"DELETE / HTTP/1.1\r\n")

    with OneShotServer(reply(response)) as server:
        minihttp.options(server.url)
    assert server.request.startswith(b"OPTIONS / HTTP/1.1\r\n")

    with OneShotServer(reply(response)) as server:
        assert minihttp.head(server.url).body == b""
    assert server.request.startswith(b"HEAD / HTTP/1.1\r\n")
