import re

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pyhttpmod.exceptions import InvalidArgumentError, MalformedEscapeSequenceError
from pyhttpmod.http.cookie import escape, unescape

ALL_LATIN1 = "".join(map(chr, range(256)))


def test_escape():
    assert escape("a b;c") == "a%20b%3Bc"
    assert escape("") == ""
    assert escape("abcXYZ019-_.~!*$&+:=?@#") == "abcXYZ019-_.~!*$&+:=?@#"


def test_escape__reserved():
    assert escape("%<>{}[]()/|\\\"'^`,;") == "%25%3C%3E%7B%7D%5B%5D%28%29%2F%7C%5C%22%27%5E%60%2C%3B"


def test_escape__whitespace_and_control():
    assert escape("\r\n\t \x00\x7f") == "%0D%0A%09%20%00%7F"


def test_escape__non_ascii():
    assert escape("é") == "%C3%A9"
    assert escape("日本") == "%E6%97%A5%E6%9C%AC"


def test_escape__header_safe():
    escaped = escape(ALL_LATIN1)
    assert escaped.isascii()
    assert re.fullmatch(r"(?:[^%\s;,]|%[0-9A-F]{2})*", escaped)


@settings(max_examples=200)
@given(st.text())
def test_escape__header_safe_any_text(value: str):
    escaped = escape(value)
    assert escaped.isascii()
    assert re.fullmatch(r"(?:[^%\s;,]|%[0-9A-F]{2})*", escaped)


@settings(max_examples=200)
@given(st.text())
def test_escape_unescape__any_text(value: str):
    assert unescape(escape(value)) == value


def test_unescape():
    assert unescape("a%20b%3Bc") == "a b;c"
    assert unescape("a%20b%3bc") == "a b;c"
    assert unescape("plain") == "plain"
    assert unescape("") == ""
    assert unescape("%C3%A9t%C3%A9") == "été"
    assert unescape("été%20") == "été "


@pytest.mark.parametrize("value", ["", "a b;c", "100%", "%zz", "key=va/lue|x", "\r\nSet-Cookie: x", "été", ALL_LATIN1])
def test_escape_unescape(value: str):
    assert unescape(escape(value)) == value


@pytest.mark.parametrize("value", ["%", "%2", "abc%", "%zz", "abc%2G", "%%41", "% 1"])
def test_unescape__malformed(value: str):
    with pytest.raises(MalformedEscapeSequenceError, match="Invalid escape sequence"):
        unescape(value)


def test_unescape__malformed_details():
    with pytest.raises(MalformedEscapeSequenceError) as e:
        unescape("ab%zz")
    assert e.value.details == {"position": 2, "sequence": "%zz"}
    assert isinstance(e.value, InvalidArgumentError)


def test_unescape__invalid_utf8():
    with pytest.raises(MalformedEscapeSequenceError, match="not valid UTF-8") as e:
        unescape("ok%FF")
    assert e.value.details == {"byte_offset": 2}
