from datetime import timedelta
from typing import Any

import pytest
from dirty_equals import IsStr
from pyhttpmod.connection import Connection, ConnectionSettings
from pyhttpmod.exceptions import BodyDecodeError, InvalidArgumentError, StatusError
from pyhttpmod.http.cookie import Cookie, CookieStore
from pyhttpmod.pytest_plugin import TransportMocker
from pyhttpmod.request import Request
from pyhttpmod.response import Response


def connection(transport: TransportMocker, url: str = "http://example.com/data", **kwargs: Any) -> Connection:
    conn = Connection(transport, **kwargs)
    conn.set_url(url)
    return conn


def test_exec_json(transport_mocker: TransportMocker):
    mock = transport_mocker.get("/data").with_body_json({"a": 1})
    conn = connection(transport_mocker)
    received: list[Any] = []
    conn.on_json(received.append)

    resp = conn.exec()
    assert resp.status == 200
    assert resp.json() == {"a": 1}
    assert received == [{"a": 1}]
    mock.assert_called()


def test_on_json_decorator(transport_mocker: TransportMocker):
    transport_mocker.get("/data").with_header("Content-Type", "application/problem+json").with_body_bytes(b"[1,2]")
    conn = connection(transport_mocker)
    received: list[Any] = []

    @conn.on_json
    def handler(data: Any) -> None:
        received.append(data)

    conn.exec()
    assert received == [[1, 2]]


def test_exec_text_skips_json_callbacks(transport_mocker: TransportMocker):
    transport_mocker.get("/data").with_body_text("hello")
    conn = connection(transport_mocker)
    received: list[Any] = []
    conn.on_json(received.append)

    assert conn.exec().text() == "hello"
    assert received == []


def test_exec_invalid_json(transport_mocker: TransportMocker):
    transport_mocker.get("/data").with_header("Content-Type", "application/json").with_body_bytes(b"{bad")
    conn = connection(transport_mocker)
    conn.on_json(lambda _: None)

    with pytest.raises(BodyDecodeError, match="Failed to decode JSON body"):
        conn.exec()


def test_method(transport_mocker: TransportMocker):
    mock = transport_mocker.post("/data").match_body_json({"x": 1})
    conn = connection(transport_mocker)
    assert conn.method == "GET"
    conn.set_method("post")
    assert conn.method == "POST"
    conn.set_body('{"x": 1}')
    assert conn.exec().status == 200
    mock.assert_called()

    with pytest.raises(InvalidArgumentError, match="Invalid HTTP method"):
        conn.set_method("FETCH")


@pytest.mark.parametrize("url", ["ftp://example.com/", "not a url", "http://", "/relative"])
def test_set_url__invalid(transport_mocker: TransportMocker, url: str):
    conn = Connection(transport_mocker)
    with pytest.raises(InvalidArgumentError, match="Invalid URL"):
        conn.set_url(url)
    assert conn.url is None


def test_exec__no_url(transport_mocker: TransportMocker):
    with pytest.raises(InvalidArgumentError, match="URL is not set"):
        Connection(transport_mocker).exec()


def test_headers(transport_mocker: TransportMocker):
    settings = ConnectionSettings(default_headers={"Accept": "text/html", "X-Default": "1"}, timeout=timedelta(5))
    conn = connection(transport_mocker, settings=settings)
    conn.set_header("accept", "application/json")
    conn.set_header("X-Test", "Value")

    req = conn.build_request()
    assert req.headers == (
        ("User-Agent", "pyhttpmod/0.1"),
        ("accept", "application/json"),
        ("X-Default", "1"),
        ("X-Test", "Value"),
    )
    assert req.header("ACCEPT") == "application/json"
    assert req.timeout == timedelta(5)

    mock = transport_mocker.get("/data").match_header("user-agent", IsStr(regex=r"pyhttpmod/[\d.]+"))
    conn.exec()
    mock.assert_called()


def test_cookies(transport_mocker: TransportMocker):
    store = CookieStore()
    transport_mocker.get("/login").with_header("Set-Cookie", "session=abc; Path=/; HttpOnly").with_header(
        "Set-Cookie", "broken"
    )
    me = transport_mocker.get("/me").match_header("Cookie", "session=abc; extra=1").with_body_json({"user": "x"})

    connection(transport_mocker, "http://example.com/login", cookie_provider=store).exec()
    assert store.cookies("http://example.com/") == "session=abc"

    conn = connection(transport_mocker, "http://example.com/me", cookie_provider=store)
    conn.add_cookie(Cookie("extra", "1"))
    assert conn.exec().json() == {"user": "x"}
    me.assert_called()


def test_cookies__disabled(transport_mocker: TransportMocker):
    store = CookieStore()
    store.insert("a=1", "http://example.com/")
    transport_mocker.get("/data").with_header("Set-Cookie", "b=2")
    settings = ConnectionSettings(send_cookies=False, store_cookies=False)

    conn = connection(transport_mocker, cookie_provider=store, settings=settings)
    assert conn.build_request().header("Cookie") is None
    conn.exec()
    assert store.cookies("http://example.com/") == "a=1"


def test_error_for_status(transport_mocker: TransportMocker):
    store = CookieStore()
    transport_mocker.get("/data").with_status(500).with_header("Set-Cookie", "a=1").with_body_json({"e": 1})
    received: list[Any] = []

    conn = connection(transport_mocker, cookie_provider=store, settings=ConnectionSettings(error_for_status=True))
    conn.on_json(received.append)
    with pytest.raises(StatusError, match="HTTP status 500 for GET http://example.com/data") as e:
        conn.exec()
    assert e.value.status == 500
    assert received == []
    assert store.cookies("http://example.com/") == "a=1"

    assert connection(transport_mocker).exec().status == 500


def test_transport_error_propagates():
    def failing(_request: Request) -> Response:
        raise ConnectionRefusedError("boom")

    conn = Connection(failing)
    conn.set_url("http://example.com/")
    with pytest.raises(ConnectionRefusedError, match="boom"):
        conn.exec()


def test_response():
    resp = Response(
        200,
        (("Content-Type", "text/plain; charset=latin-1"), ("Set-Cookie", "a=1"), ("set-cookie", "b=2")),
        "é".encode("latin-1"),
    )
    assert resp.header("content-type") == "text/plain; charset=latin-1"
    assert resp.header("missing") is None
    assert resp.header_all("Set-Cookie") == ["a=1", "b=2"]
    assert resp.content_type == "text/plain"
    assert resp.is_json() is False
    assert resp.text() == "é"

    with pytest.raises(BodyDecodeError, match="Failed to decode response body"):
        Response(200, (("Content-Type", "text/plain; charset=utf-8"),), b"\xff").text()
