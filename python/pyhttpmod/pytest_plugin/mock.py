"""Module providing transport mocking for pyhttpmod connections in tests."""

from typing import Any, Literal, Self, assert_never
from urllib.parse import urlsplit

import orjson
import pytest

from pyhttpmod.pytest_plugin.internal import InternalMatcher, format_assert_called_error
from pyhttpmod.pytest_plugin.types import (
    BodyContentMatcher,
    CustomHandler,
    CustomMatcher,
    JsonMatcher,
    Matcher,
    MethodMatcher,
    PathMatcher,
)
from pyhttpmod.request import Request
from pyhttpmod.response import Response


class Mock:
    """Class representing a single mock rule."""

    def __init__(self, method: MethodMatcher | None = None, path: PathMatcher | None = None) -> None:
        """Do not use directly. Instead, use TransportMocker.mock()."""
        self._method_matcher = InternalMatcher(method) if method is not None else None
        self._path_matcher = InternalMatcher(path) if path is not None else None
        self._header_matchers: dict[str, InternalMatcher] = {}
        self._body_matcher: tuple[InternalMatcher, Literal["content", "json"]] | None = None
        self._custom_matcher: CustomMatcher | None = None
        self._custom_handler: CustomHandler | None = None

        self._matched_requests: list[Request] = []
        self._unmatched_requests: list[Request] = []

        self._status = 200
        self._headers: list[tuple[str, str]] = []
        self._body = b""

    def assert_called(
        self,
        *,
        count: int | None = None,
        min_count: int | None = None,
        max_count: int | None = None,
    ) -> None:
        """Assert that this mock was called the expected number of times. By default, exactly once."""
        if count is None and min_count is None and max_count is None:
            count = 1

        if self._assertion_passes(count, min_count, max_count):
            return

        msg = format_assert_called_error(self, count=count, min_count=min_count, max_count=max_count)
        raise AssertionError(msg)

    def _assertion_passes(self, count: int | None, min_count: int | None, max_count: int | None) -> bool:
        actual_count = len(self._matched_requests)
        if count is not None:
            return actual_count == count

        min_satisfied = min_count is None or actual_count >= min_count
        max_satisfied = max_count is None or actual_count <= max_count

        return min_satisfied and max_satisfied

    def get_requests(self) -> list[Request]:
        """Get all captured requests by this mock."""
        return [*self._matched_requests]

    def get_call_count(self) -> int:
        """Get the total number of calls to this mock."""
        return len(self._matched_requests)

    def reset_requests(self) -> None:
        """Reset all captured requests for this mock."""
        self._matched_requests.clear()
        self._unmatched_requests.clear()

    def match_header(self, name: str, value: Matcher) -> Self:
        """Set a matcher to match a specific request header."""
        self._header_matchers[name] = InternalMatcher(value)
        return self

    def match_body(self, matcher: BodyContentMatcher) -> Self:
        """Set a matcher to match request bodies as raw content (text or bytes)."""
        self._body_matcher = (InternalMatcher(matcher), "content")
        return self

    def match_body_json(self, matcher: JsonMatcher) -> Self:
        """Set a matcher to match JSON request bodies."""
        self._body_matcher = (InternalMatcher(matcher), "json")
        return self

    def match_request(self, matcher: CustomMatcher) -> Self:
        """Set a custom matcher to match requests."""
        self._custom_matcher = matcher
        return self

    def match_request_with_response(self, handler: CustomHandler) -> Self:
        """Set a custom handler to generate the response for matched requests."""
        self._custom_handler = handler
        return self

    def with_status(self, status: int) -> Self:
        """Set the mocked response status code."""
        self._status = status
        return self

    def with_header(self, name: str, value: str) -> Self:
        """Add a header to the mocked response. Can be repeated, e.g. for several Set-Cookie headers."""
        self._headers.append((name, value))
        return self

    def with_body_bytes(self, body: bytes | bytearray | memoryview) -> Self:
        """Set the mocked response body to the given bytes."""
        self._body = bytes(body)
        return self

    def with_body_text(self, body: str) -> Self:
        """Set the mocked response body to the given text."""
        self._body = body.encode()
        self._set_default_content_type("text/plain; charset=utf-8")
        return self

    def with_body_json(self, json_body: Any) -> Self:
        """Set the mocked response body to the given JSON-serializable object."""
        self._body = orjson.dumps(json_body)
        self._set_default_content_type("application/json")
        return self

    def _set_default_content_type(self, content_type: str) -> None:
        if not any(name.lower() == "content-type" for name, _ in self._headers):
            self._headers.append(("Content-Type", content_type))

    def _handle(self, request: Request) -> Response | None:
        matched = (
            self._matches_method(request)
            and self._matches_path(request)
            and self._match_headers(request)
            and self._match_body(request)
            and (self._custom_matcher is None or self._custom_matcher(request))
        )
        response = self._response(request) if matched else None

        if response is not None:
            self._matched_requests.append(request)
        else:
            self._unmatched_requests.append(request)
        return response

    def _response(self, request: Request) -> Response | None:
        if self._custom_handler is not None:
            return self._custom_handler(request)
        return Response(self._status, tuple(self._headers), self._body)

    def _matches_method(self, request: Request) -> bool:
        return self._method_matcher is None or self._method_matcher.matches(request.method)

    def _matches_path(self, request: Request) -> bool:
        return self._path_matcher is None or self._path_matcher.matches(urlsplit(request.url).path)

    def _match_headers(self, request: Request) -> bool:
        for header_name, expected_value in self._header_matchers.items():
            actual_value = request.header(header_name)
            if actual_value is None or not expected_value.matches(actual_value):
                return False
        return True

    def _match_body(self, request: Request) -> bool:
        if self._body_matcher is None:
            return True

        if request.body is None:
            return False

        matcher, kind = self._body_matcher
        if kind == "json":
            try:
                return matcher.matches(orjson.loads(request.body))
            except orjson.JSONDecodeError:
                return False
        elif kind == "content":
            if isinstance(matcher.matcher, bytes):
                return matcher.matches(request.body)
            return matcher.matches(request.body.decode())
        else:
            assert_never(kind)


class TransportMocker:
    """Transport answering requests from mock rules. Pass it to HttpModule.new_connection()."""

    def __init__(self) -> None:
        """Initialize the TransportMocker."""
        self._mocks: list[Mock] = []
        self._strict = False

    def __call__(self, request: Request) -> Response:
        for mock in self._mocks:
            if (response := mock._handle(request)) is not None:
                return response

        # No rule matched
        if self._strict:
            msg = f"No mock rule matched request: {request.method} {request.url}"
            raise AssertionError(msg)
        return Response(404)

    def mock(self, method: MethodMatcher | None = None, path: PathMatcher | None = None) -> Mock:
        """Add a mock rule for requests matching the given criteria."""
        mock = Mock(method, path)
        self._mocks.append(mock)
        return mock

    def get(self, path: PathMatcher | None = None) -> Mock:
        """Mock GET requests to the given path."""
        return self.mock("GET", path)

    def post(self, path: PathMatcher | None = None) -> Mock:
        """Mock POST requests to the given path."""
        return self.mock("POST", path)

    def put(self, path: PathMatcher | None = None) -> Mock:
        """Mock PUT requests to the given path."""
        return self.mock("PUT", path)

    def patch(self, path: PathMatcher | None = None) -> Mock:
        """Mock PATCH requests to the given path."""
        return self.mock("PATCH", path)

    def delete(self, path: PathMatcher | None = None) -> Mock:
        """Mock DELETE requests to the given path."""
        return self.mock("DELETE", path)

    def strict(self, enabled: bool = True) -> Self:
        """Enable strict mode - unmatched requests will raise an error."""
        self._strict = enabled
        return self

    def get_requests(self) -> list[Request]:
        """Get all captured requests in all mocks."""
        return [request for mock in self._mocks for request in mock.get_requests()]

    def get_call_count(self) -> int:
        """Get the total number of calls in all mocks."""
        return sum(mock.get_call_count() for mock in self._mocks)

    def clear(self) -> None:
        """Remove all mocks."""
        self._mocks.clear()

    def reset_requests(self) -> None:
        """Reset all captured requests in all mocks."""
        for mock in self._mocks:
            mock.reset_requests()


@pytest.fixture
def transport_mocker() -> TransportMocker:
    """Fixture that provides a TransportMocker for answering connection requests in tests."""
    return TransportMocker()
