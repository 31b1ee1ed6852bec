"""Percent escaping of cookie values.

Values are handled as UTF-8 bytes. Anything outside the printable ASCII range and the characters
``% < > { } [ ] ( ) / | \\ " ' ^ ` , ;`` is written as ``%XX`` so the result is always safe to put in a header.
"""

from pyhttpmod.exceptions import MalformedEscapeSequenceError

_RESERVED = frozenset(b"%<>{}[]()/|\\\"'^`,;")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _must_escape(byte: int) -> bool:
    return byte < 0x21 or byte >= 0x7F or byte in _RESERVED


def escape(value: str) -> str:
    """Escape the given string by replacing all unsafe characters with ``%XX`` sequences (uppercase hex)."""
    return "".join(f"%{b:02X}" if _must_escape(b) else chr(b) for b in value.encode("utf-8"))


def unescape(value: str) -> str:
    """Replace all ``%XX`` sequences with the respective characters.

    Decoding is strict: a ``%`` not followed by two hex digits, or escapes decoding to invalid UTF-8,
    raise MalformedEscapeSequenceError instead of being passed through.
    """
    if "%" not in value:
        return value

    buf = bytearray()
    pos = 0
    length = len(value)
    while pos < length:
        char = value[pos]
        if char != "%":
            buf += char.encode("utf-8")
            pos += 1
            continue

        digits = value[pos + 1 : pos + 3]
        if len(digits) != 2 or not _HEX_DIGITS.issuperset(digits):
            msg = f"Invalid escape sequence at position {pos}: {value[pos : pos + 3]!r}"
            raise MalformedEscapeSequenceError(msg, {"position": pos, "sequence": value[pos : pos + 3]})
        buf.append(int(digits, 16))
        pos += 3

    try:
        return buf.decode("utf-8")
    except UnicodeDecodeError as e:
        msg = f"Escaped value is not valid UTF-8: {e.reason}"
        raise MalformedEscapeSequenceError(msg, {"byte_offset": e.start}) from e
