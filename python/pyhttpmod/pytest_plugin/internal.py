import re
from typing import TYPE_CHECKING, Any, Literal, assert_never

from pyhttpmod.request import Request

if TYPE_CHECKING:
    from pyhttpmod.pytest_plugin.mock import Mock


class InternalMatcher:
    """Wraps a user given matcher: a compiled regex is searched, anything else is compared with ==."""

    def __init__(self, matcher: Any) -> None:
        self.matcher = matcher

    def matches(self, value: Any) -> bool:
        if isinstance(self.matcher, re.Pattern):
            return isinstance(value, str) and self.matcher.search(value) is not None
        return bool(self.matcher == value)

    def __str__(self) -> str:
        if isinstance(self.matcher, re.Pattern):
            return f"{self.matcher.pattern} (regex)"
        return str(self.matcher)


def format_assert_called_error(
    mock: "Mock",
    *,
    count: int | None = None,
    min_count: int | None = None,
    max_count: int | None = None,
) -> str:
    actual_count = len(mock._matched_requests)
    error_parts = ["Mock was not called as expected."]

    if count is not None:
        error_parts.append(f"Expected exactly {count} call(s), but got {actual_count}.")
    else:
        expectations = []
        if min_count is not None:
            expectations.append(f"at least {min_count}")
        if max_count is not None:
            expectations.append(f"at most {max_count}")
        error_parts.append(f"Expected {' and '.join(expectations)} call(s), but got {actual_count}.")

    error_parts.append("\nMock configuration:")
    error_parts.append(_format_mock_matchers(mock))

    if mock._unmatched_requests:
        error_parts.append(f"\nUnmatched requests ({len(mock._unmatched_requests)}):")
        error_parts.extend(_format_requests(mock._unmatched_requests, 5))

    if mock._matched_requests:
        error_parts.append(f"\nMatched requests ({len(mock._matched_requests)}):")
        error_parts.extend(_format_requests(mock._matched_requests, 3))

    return "\n".join(error_parts)


def _format_requests(requests: list[Request], limit: int) -> list[str]:
    lines = [f"  {i}. {request.repr_full()}" for i, request in enumerate(requests[-limit:], 1)]
    if len(requests) > limit:
        lines.append(f"  ... and {len(requests) - limit} more")
    return lines


def _format_mock_matchers(mock: "Mock") -> str:
    parts = [
        f"  Method: {mock._method_matcher if mock._method_matcher is not None else 'Any'}",
        f"  Path: {mock._path_matcher if mock._path_matcher is not None else 'Any'}",
    ]

    if mock._header_matchers:
        headers = ", ".join(f"{name}: {value}" for name, value in mock._header_matchers.items())
        parts.append(f"  Headers: {headers}")

    if mock._body_matcher is not None:
        parts.append(_format_body_matcher(*mock._body_matcher))

    if mock._custom_matcher is not None:
        parts.append(f"  Custom matcher: {mock._custom_matcher.__name__}")

    if mock._custom_handler is not None:
        parts.append(f"  Custom handler: {mock._custom_handler.__name__}")

    return "\n".join(parts)


def _format_body_matcher(matcher: InternalMatcher, kind: Literal["content", "json"]) -> str:
    if kind == "json":
        return f"  Body (JSON): {matcher}"
    elif kind == "content":
        if isinstance(matcher.matcher, bytes):
            return f"  Body (bytes): {matcher.matcher!r}"
        return f"  Body (text): {matcher}"
    else:
        assert_never(kind)
