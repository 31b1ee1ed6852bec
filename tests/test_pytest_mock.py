import re

import pytest
from dirty_equals import IsPartialDict
from pyhttpmod.pytest_plugin import TransportMocker
from pyhttpmod.request import Request
from pyhttpmod.response import Response


def test_mock_response(transport_mocker: TransportMocker):
    transport_mocker.get("/users").with_status(201).with_header("X-Test", "1").with_body_json({"users": []})

    resp = transport_mocker(Request("GET", "http://example.com/users?page=1"))
    assert resp.status == 201
    assert resp.header("x-test") == "1"
    assert resp.header("content-type") == "application/json"
    assert resp.json() == {"users": []}


def test_unmatched(transport_mocker: TransportMocker):
    transport_mocker.get("/users")
    assert transport_mocker(Request("POST", "http://example.com/users")).status == 404
    assert transport_mocker.get_call_count() == 0

    transport_mocker.strict()
    with pytest.raises(AssertionError, match="No mock rule matched request: GET http://example.com/other"):
        transport_mocker(Request("GET", "http://example.com/other"))


def test_regex_path(transport_mocker: TransportMocker):
    mock = transport_mocker.mock(path=re.compile(r"^/items/\d+$")).with_body_text("item")
    assert transport_mocker(Request("DELETE", "http://example.com/items/12")).text() == "item"
    assert transport_mocker(Request("GET", "http://example.com/items/abc")).status == 404
    assert mock.get_call_count() == 1
    assert [r.method for r in mock.get_requests()] == ["DELETE"]


def test_match_body(transport_mocker: TransportMocker):
    by_bytes = transport_mocker.put("/a").match_body(b"raw")
    by_json = transport_mocker.patch("/a").match_body_json(IsPartialDict(id=1))

    transport_mocker(Request("PUT", "http://example.com/a", body=b"raw"))
    transport_mocker(Request("PUT", "http://example.com/a", body=b"other"))
    transport_mocker(Request("PATCH", "http://example.com/a", body=b'{"id": 1, "name": "x"}'))
    transport_mocker(Request("PATCH", "http://example.com/a", body=b"not json"))
    transport_mocker(Request("PATCH", "http://example.com/a"))

    by_bytes.assert_called()
    by_json.assert_called()


def test_custom_matcher_and_handler(transport_mocker: TransportMocker):
    transport_mocker.mock().match_request(lambda r: r.url.endswith("?x=1")).match_request_with_response(
        lambda r: Response(202, (("X-Method", r.method),))
    )
    resp = transport_mocker(Request("OPTIONS", "http://example.com/?x=1"))
    assert (resp.status, resp.header("X-Method")) == (202, "OPTIONS")


def test_assert_called(transport_mocker: TransportMocker):
    mock = transport_mocker.get("/a").match_header("Accept", "text/html")
    transport_mocker(Request.build("GET", "http://example.com/a", {"Accept": "application/json"}))

    with pytest.raises(AssertionError) as e:
        mock.assert_called()
    msg = str(e.value)
    assert "Expected exactly 1 call(s), but got 0." in msg
    assert "  Method: GET" in msg
    assert "  Path: /a" in msg
    assert "  Headers: Accept: text/html" in msg
    assert "Unmatched requests (1):" in msg
    assert "headers=[('Accept', 'application/json')]" in msg

    for _ in range(3):
        transport_mocker(Request.build("GET", "http://example.com/a", [("Accept", "text/html")]))
    mock.assert_called(count=3)
    mock.assert_called(min_count=2, max_count=3)
    with pytest.raises(AssertionError, match=r"Expected at least 4 call\(s\), but got 3."):
        mock.assert_called(min_count=4)

    transport_mocker.reset_requests()
    mock.assert_called(count=0)
    assert transport_mocker.get_requests() == []

    transport_mocker.clear()
    assert transport_mocker(Request("GET", "http://example.com/a")).status == 404
