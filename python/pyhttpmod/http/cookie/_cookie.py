"""HTTP cookie value type with Set-Cookie serialization and parsing.

Supports both Version 0 (Netscape) and Version 1 (RFC 2109) cookies, plus the SameSite, Priority and HttpOnly
extensions. Cookies are created as Version 0 by default for the best interoperability.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime, parsedate_to_datetime
from enum import StrEnum
from typing import Any, Self

from pyhttpmod.exceptions import InvalidArgumentError

logger = logging.getLogger("pyhttpmod.cookie")


class SameSite(StrEnum):
    """Value of the SameSite cookie attribute."""

    NOT_SPECIFIED = ""
    NONE = "None"
    LAX = "Lax"
    STRICT = "Strict"

    @classmethod
    def coerce(cls, value: "SameSite | str") -> "SameSite":
        """Convert a member or a case-insensitive attribute value to a member."""
        if isinstance(value, SameSite):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        msg = f"invalid SameSite value: {value!r}"
        raise InvalidArgumentError(msg, {"same_site": value})


class Cookie:
    """A HTTP cookie: a name, a single value and optional attributes.

    The value is stored as given. If it contains whitespace or non-alphanumeric characters it should be
    passed through ``escape()`` before being set.
    """

    __slots__ = (
        "_comment",
        "_domain",
        "_http_only",
        "_max_age",
        "_name",
        "_path",
        "_priority",
        "_same_site",
        "_secure",
        "_value",
        "_version",
    )

    def __init__(self, name: str = "", value: str = "") -> None:
        """Create a cookie with the given name and value. The cookie never expires."""
        self._version = 0
        self._name = name
        self._value = value
        self._comment = ""
        self._domain = ""
        self._path = ""
        self._priority = ""
        self._secure = False
        self._max_age = -1
        self._http_only = False
        self._same_site = SameSite.NOT_SPECIFIED

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str], *, now: datetime | None = None) -> Self:
        """Create a cookie from name/value pairs.

        The first pair gives the cookie name and value, the remaining pairs are applied as attributes
        (Domain, Path, Max-Age, Secure...). Unknown or unusable attributes are ignored.
        """
        items = iter(mapping.items())
        try:
            name, value = next(items)
        except StopIteration:
            raise InvalidArgumentError("cannot create a cookie from an empty mapping") from None
        if not name:
            raise InvalidArgumentError("cookie name must not be empty", {"mapping": dict(mapping)})

        cookie = cls(name, value)
        cookie._apply_attributes(items, now)
        return cookie

    @classmethod
    def parse(cls, header: str, *, now: datetime | None = None) -> Self:
        """Parse a Cookie from a Set-Cookie header value.

        Attribute names are matched case-insensitively and unknown attributes are ignored. Expires is turned
        into max_age relative to `now` (default: current time) unless Max-Age is also present.
        """
        if not header or not header.strip():
            raise InvalidArgumentError("empty Set-Cookie header")

        first, *rest = header.split(";")
        name, sep, value = first.partition("=")
        name = name.strip()
        if not sep or not name:
            raise InvalidArgumentError(f"invalid Set-Cookie header: {header!r}", {"header": header})

        cookie = cls(name, _unquote(value.strip()))
        cookie._apply_attributes(_split_attributes(rest), now)
        return cookie

    @classmethod
    def split_parse(cls, header: str) -> list[Self]:
        """Parse a request Cookie header (``a=1; b=2``) into name/value cookies."""
        return [cls(name, value) for name, value in _split_pairs(header)]

    @property
    def version(self) -> int:
        """Cookie version: 0 for a Netscape cookie, 1 for a RFC 2109 cookie."""
        return self._version

    @version.setter
    def version(self, version: int) -> None:
        if isinstance(version, bool) or version not in (0, 1):
            raise InvalidArgumentError(f"cookie version must be 0 or 1, got {version!r}", {"version": version})
        self._version = version

    @property
    def name(self) -> str:
        """Cookie name."""
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name

    @property
    def value(self) -> str:
        """Raw cookie value as set."""
        return self._value

    @value.setter
    def value(self, value: str) -> None:
        self._value = value

    @property
    def comment(self) -> str:
        """Cookie comment. Only serialized for version 1 cookies."""
        return self._comment

    @comment.setter
    def comment(self, comment: str) -> None:
        self._comment = comment

    @property
    def domain(self) -> str:
        """Domain attribute, empty if not set."""
        return self._domain

    @domain.setter
    def domain(self, domain: str) -> None:
        self._domain = domain

    @property
    def path(self) -> str:
        """Path attribute, empty if not set."""
        return self._path

    @path.setter
    def path(self, path: str) -> None:
        self._path = path

    @property
    def priority(self) -> str:
        """Priority attribute (Low, Medium, High), empty if not set."""
        return self._priority

    @priority.setter
    def priority(self, priority: str) -> None:
        self._priority = priority

    @property
    def secure(self) -> bool:
        """Whether the Secure attribute is set."""
        return self._secure

    @secure.setter
    def secure(self, secure: bool) -> None:
        self._secure = bool(secure)

    @property
    def max_age(self) -> int:
        """Maximum age in seconds.

        -1 (default) makes this a session cookie which is deleted when the browser is closed,
        0 deletes the cookie on the client.
        """
        return self._max_age

    @max_age.setter
    def max_age(self, max_age: int | timedelta) -> None:
        if isinstance(max_age, timedelta):
            max_age = int(max_age.total_seconds())
        self._max_age = int(max_age)

    @property
    def http_only(self) -> bool:
        """Whether the HttpOnly attribute is set."""
        return self._http_only

    @http_only.setter
    def http_only(self, http_only: bool) -> None:
        self._http_only = bool(http_only)

    @property
    def same_site(self) -> SameSite:
        """SameSite attribute, SameSite.NOT_SPECIFIED if unspecified."""
        return self._same_site

    @same_site.setter
    def same_site(self, same_site: SameSite | str) -> None:
        self._same_site = SameSite.coerce(same_site)

    def to_string(self, *, now: datetime | None = None) -> str:
        """Return the cookie as a Set-Cookie header value.

        Attributes are always written in the same order. When `now` is given, an Expires attribute computed
        from max_age is added after Max-Age for clients that do not understand Max-Age.
        """
        parts = [f"{self._name}={self._value}"]
        if self._version >= 1 and self._comment:
            parts.append(f"Comment={self._comment}")
        if self._domain:
            parts.append(f"Domain={self._domain}")
        if self._path:
            parts.append(f"Path={self._path}")
        if self._max_age >= 0:
            parts.append(f"Max-Age={self._max_age}")
            if now is not None:
                parts.append(f"Expires={_format_expires(now, self._max_age)}")
        if self._secure:
            parts.append("Secure")
        if self._http_only:
            parts.append("HttpOnly")
        if self._priority:
            parts.append(f"Priority={self._priority}")
        if self._same_site is not SameSite.NOT_SPECIFIED:
            parts.append(f"SameSite={self._same_site.value}")
        if self._version == 1:
            parts.append("Version=1")
        return "; ".join(parts)

    def to_cookie_pair(self) -> str:
        """Return just the 'name=value' pair, as sent in a request Cookie header."""
        return f"{self._name}={self._value}"

    def copy(self) -> Self:
        """Copy the cookie."""
        return self.__copy__()

    def _fields(self) -> tuple[Any, ...]:
        return tuple(getattr(self, slot) for slot in self.__slots__)

    def _apply_attributes(self, attributes: Iterable[tuple[str, str]], now: datetime | None) -> None:
        expires_max_age: int | None = None
        max_age_seen = False

        for key, value in attributes:
            attr = key.strip().lower()
            value = _unquote(value.strip())
            if attr == "domain":
                self._domain = value
            elif attr == "path":
                self._path = value
            elif attr == "priority":
                self._priority = value
            elif attr == "comment":
                self._comment = value
            elif attr == "secure":
                self._secure = True
            elif attr == "httponly":
                self._http_only = True
            elif attr == "max-age":
                try:
                    self._max_age = max(0, int(value))
                    max_age_seen = True
                except ValueError:
                    logger.debug("Ignoring invalid Max-Age %r of cookie %r", value, self._name)
            elif attr == "expires":
                try:
                    expires_max_age = _max_age_from_expires(value, now)
                except (TypeError, ValueError):
                    logger.debug("Ignoring invalid Expires %r of cookie %r", value, self._name)
            elif attr == "samesite":
                try:
                    self._same_site = SameSite.coerce(value)
                except InvalidArgumentError:
                    logger.debug("Ignoring invalid SameSite %r of cookie %r", value, self._name)
            elif attr == "version":
                try:
                    self.version = int(value)
                except ValueError:
                    logger.debug("Ignoring invalid Version %r of cookie %r", value, self._name)
            else:
                logger.debug("Ignoring unknown attribute %r of cookie %r", key, self._name)

        if expires_max_age is not None and not max_age_seen:
            self._max_age = expires_max_age

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()!r})"

    def __copy__(self) -> Self:
        other = type(self).__new__(type(self))
        for slot in self.__slots__:
            setattr(other, slot, getattr(self, slot))
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cookie):
            return NotImplemented
        return self._fields() == other._fields()

    __hash__ = None  # type: ignore[assignment]


def parse_cookie_header(header: str) -> dict[str, str]:
    """Parse a request Cookie header value into a name-value dict.

    Returns an empty dict for empty headers. Pairs without '=' are skipped and the last duplicate wins.
    """
    return dict(_split_pairs(header))


def _split_pairs(header: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    if not header:
        return pairs
    for pair in header.split(";"):
        name, sep, value = pair.partition("=")
        name = name.strip()
        if sep and name:
            pairs.append((name, _unquote(value.strip())))
    return pairs


def _split_attributes(segments: Iterable[str]) -> list[tuple[str, str]]:
    attributes = []
    for segment in segments:
        key, _, value = segment.partition("=")
        if key := key.strip():
            attributes.append((key, value.strip()))
    return attributes


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def _format_expires(now: datetime, max_age: int) -> str:
    try:
        expires = _utc(now) + timedelta(seconds=max_age)
    except OverflowError:
        expires = datetime.max.replace(tzinfo=UTC)
    return format_datetime(expires, usegmt=True)


def _max_age_from_expires(value: str, now: datetime | None) -> int:
    expires = parsedate_to_datetime(value)
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=UTC)
    return max(0, int((expires - _utc(now)).total_seconds()))
