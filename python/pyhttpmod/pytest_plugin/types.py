"""Types used in the pytest plugin."""

from collections.abc import Callable
from re import Pattern
from typing import Any

from pyhttpmod.request import Request
from pyhttpmod.response import Response

# Any object with a custom __eq__ works as a matcher, e.g. dirty_equals.IsStr()
Matcher = Pattern[str] | str | Any
JsonMatcher = Any

MethodMatcher = Matcher
PathMatcher = Matcher
BodyContentMatcher = bytes | Matcher
CustomMatcher = Callable[[Request], bool]
CustomHandler = Callable[[Request], Response | None]
