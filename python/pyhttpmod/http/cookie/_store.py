"""Thread-safe in-memory cookie store."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

from pyhttpmod.exceptions import InvalidArgumentError

from ._cookie import Cookie

logger = logging.getLogger("pyhttpmod.cookie")

_Key = tuple[str, str, str]


@dataclass(slots=True)
class _Entry:
    cookie: Cookie
    host_only: bool
    expires_at: float | None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class CookieStore:
    """Domain and path aware cookie store.

    Implements the CookieProvider protocol, so it can be handed to a Connection to keep cookies between
    requests. All operations are guarded by a lock, the store can be shared between threads.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Create an empty cookie store. `clock` returns the current time in seconds since the epoch."""
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[_Key, _Entry] = {}

    def contains(self, domain: str, path: str, name: str) -> bool:
        """Return True if the store has an unexpired cookie for the domain, path and name."""
        return self.get(domain, path, name) is not None

    def contains_any(self, domain: str, path: str, name: str) -> bool:
        """Return True if the store has any (even an expired) cookie for the domain, path and name."""
        return self.get_any(domain, path, name) is not None

    def get(self, domain: str, path: str, name: str) -> Cookie | None:
        """Return the unexpired cookie for the domain, path and name."""
        with self._lock:
            entry = self._entries.get(_key(domain, path, name))
            if entry is None or entry.expired(self._clock()):
                return None
            return entry.cookie.copy()

    def get_any(self, domain: str, path: str, name: str) -> Cookie | None:
        """Return the (possibly expired) cookie for the domain, path and name."""
        with self._lock:
            entry = self._entries.get(_key(domain, path, name))
            return entry.cookie.copy() if entry is not None else None

    def remove(self, domain: str, path: str, name: str) -> Cookie | None:
        """Remove a cookie from the store, returning it if it was in the store."""
        with self._lock:
            entry = self._entries.pop(_key(domain, path, name), None)
            return entry.cookie.copy() if entry is not None else None

    def insert(self, cookie: Cookie | str, request_url: str) -> None:
        """Insert a cookie as if set by a response for request_url.

        Domain and path default to the request host and the request path's directory. A cookie with
        max_age 0 removes the stored cookie instead.
        """
        if isinstance(cookie, str):
            cookie = Cookie.parse(cookie)
        else:
            cookie = cookie.copy()

        url = urlsplit(request_url)
        host = (url.hostname or "").lower()
        if not host:
            raise InvalidArgumentError(f"request URL has no host: {request_url!r}", {"url": request_url})

        domain = cookie.domain.lstrip(".").lower()
        host_only = not domain
        if host_only:
            domain = host
        elif not _domain_match(host, domain):
            logger.warning("Rejecting cookie %r: domain %r does not match host %r", cookie.name, domain, host)
            return

        cookie.domain = domain
        if not cookie.path.startswith("/"):
            cookie.path = _default_path(url.path)

        key = _key(cookie.domain, cookie.path, cookie.name)
        with self._lock:
            now = self._clock()
            if cookie.max_age == 0:
                self._entries.pop(key, None)
                return
            expires_at = now + cookie.max_age if cookie.max_age > 0 else None
            self._entries[key] = _Entry(cookie, host_only, expires_at)

    def matches(self, url: str) -> list[Cookie]:
        """Return unexpired cookies that domain- and path-match url and whose Secure attribute allows the scheme.

        Cookies with longer paths are listed first.
        """
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
        path = parts.path or "/"
        secure = parts.scheme == "https"

        with self._lock:
            now = self._clock()
            found = [
                entry.cookie.copy()
                for entry in self._entries.values()
                if not entry.expired(now)
                and (host == entry.cookie.domain if entry.host_only else _domain_match(host, entry.cookie.domain))
                and _path_match(path, entry.cookie.path)
                and (secure or not entry.cookie.secure)
            ]
        return sorted(found, key=lambda c: len(c.path), reverse=True)

    def clear(self) -> None:
        """Remove all cookies from the store."""
        with self._lock:
            self._entries.clear()

    def get_all_unexpired(self) -> list[Cookie]:
        """Return all unexpired cookies currently stored."""
        with self._lock:
            now = self._clock()
            return [entry.cookie.copy() for entry in self._entries.values() if not entry.expired(now)]

    def get_all_any(self) -> list[Cookie]:
        """Return all cookies in the store, including expired ones."""
        with self._lock:
            return [entry.cookie.copy() for entry in self._entries.values()]

    def set_cookies(self, cookie_headers: list[str], url: str) -> None:
        """Store cookies from the Set-Cookie headers of a response received from url.

        A malformed header is logged and skipped, the remaining headers are still stored.
        """
        for header in cookie_headers:
            try:
                self.insert(Cookie.parse(header), url)
            except InvalidArgumentError as e:
                logger.warning("Dropping malformed Set-Cookie header from %s: %s", url, e.message)

    def cookies(self, url: str) -> str | None:
        """Return the Cookie header value for a request to url, or None if no cookie matches."""
        matched = self.matches(url)
        if not matched:
            return None
        return "; ".join(cookie.to_cookie_pair() for cookie in matched)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _key(domain: str, path: str, name: str) -> _Key:
    return domain.lstrip(".").lower(), path, name


def _domain_match(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def _path_match(request_path: str, cookie_path: str) -> bool:
    if request_path == cookie_path:
        return True
    if request_path.startswith(cookie_path):
        return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"
    return False


def _default_path(request_path: str) -> str:
    if not request_path.startswith("/") or request_path.count("/") == 1:
        return "/"
    return request_path[: request_path.rindex("/")]
