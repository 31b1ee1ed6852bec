"""Connection class and its types."""

import logging
from urllib.parse import urlsplit

from pyhttpmod.cookie.types import CookieProvider
from pyhttpmod.exceptions import InvalidArgumentError, StatusError
from pyhttpmod.http.cookie import Cookie
from pyhttpmod.request import Request
from pyhttpmod.response import Response
from pyhttpmod.types import BodyType

from .settings import ConnectionSettings
from .types import JsonCallback, Transport

logger = logging.getLogger("pyhttpmod.connection")

METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"})


class Connection:
    """A single HTTP exchange: URL, method, headers and body, executed by a Transport.

    Cookies from the cookie provider are sent with the request and Set-Cookie headers of the response are
    handed back to it. JSON response bodies are delivered to the callbacks registered with on_json.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        cookie_provider: CookieProvider | None = None,
        settings: ConnectionSettings | None = None,
    ) -> None:
        """Create a connection. Usually created via HttpModule.new_connection()."""
        self._transport = transport
        self._cookie_provider = cookie_provider
        self._settings = settings or ConnectionSettings()
        self._url: str | None = None
        self._method = "GET"
        self._headers: dict[str, tuple[str, str]] = {}
        self._body: bytes | None = None
        self._cookies: list[Cookie] = []
        self._json_callbacks: list[JsonCallback] = []

    @property
    def url(self) -> str | None:
        """Request URL, None until set."""
        return self._url

    @property
    def method(self) -> str:
        """Request method, GET by default."""
        return self._method

    @property
    def settings(self) -> ConnectionSettings:
        """Settings used by this connection."""
        return self._settings

    def set_url(self, url: str) -> None:
        """Set the request URL. Only absolute http and https URLs are accepted."""
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise InvalidArgumentError(f"Invalid URL: {url!r}", {"url": url})
        self._url = url

    def set_method(self, method: str) -> None:
        """Set the request method (case-insensitive)."""
        upper = method.upper()
        if upper not in METHODS:
            raise InvalidArgumentError(f"Invalid HTTP method: {method!r}", {"method": method})
        self._method = upper

    def set_header(self, name: str, value: str) -> None:
        """Set a request header, replacing a previous value of the same header."""
        self._headers[name.lower()] = (name, value)

    def set_body(self, body: BodyType | None) -> None:
        """Set the request body. Text is encoded as UTF-8."""
        if isinstance(body, str):
            body = body.encode()
        self._body = bytes(body) if body is not None else None

    def add_cookie(self, cookie: Cookie) -> None:
        """Send the cookie with the request, in addition to the cookies of the cookie provider."""
        self._cookies.append(cookie)

    def on_json(self, callback: JsonCallback) -> JsonCallback:
        """Register a callback receiving the decoded body of JSON responses. Can be used as a decorator."""
        self._json_callbacks.append(callback)
        return callback

    def build_request(self) -> Request:
        """Build the request that exec() would send."""
        if self._url is None:
            raise InvalidArgumentError("URL is not set")

        headers: dict[str, tuple[str, str]] = {"user-agent": ("User-Agent", self._settings.user_agent)}
        for name, value in self._settings.default_headers.items():
            headers[name.lower()] = (name, value)
        headers.update(self._headers)

        if (cookie_header := self._cookie_header(self._url)) is not None:
            headers["cookie"] = ("Cookie", cookie_header)

        return Request(self._method, self._url, tuple(headers.values()), self._body, self._settings.timeout)

    def exec(self) -> Response:
        """Send the request with the transport and process the response.

        Raises StatusError for error statuses if settings.error_for_status is set. Errors raised by the
        transport propagate unchanged.
        """
        request = self.build_request()
        logger.debug("Sending %s %s", request.method, request.url)
        response = self._transport(request)
        logger.debug("Received %d for %s %s", response.status, request.method, request.url)

        if self._cookie_provider is not None and self._settings.store_cookies:
            if set_cookie := response.header_all("set-cookie"):
                self._cookie_provider.set_cookies(set_cookie, request.url)

        if self._settings.error_for_status and response.status >= 400:
            msg = f"HTTP status {response.status} for {request.method} {request.url}"
            raise StatusError(msg, response.status, {"url": request.url, "method": request.method})

        if self._json_callbacks and response.is_json():
            data = response.json()
            for callback in self._json_callbacks:
                callback(data)

        return response

    def _cookie_header(self, url: str) -> str | None:
        parts = []
        if self._cookie_provider is not None and self._settings.send_cookies:
            if provided := self._cookie_provider.cookies(url):
                parts.append(provided)
        parts.extend(cookie.to_cookie_pair() for cookie in self._cookies)
        return "; ".join(parts) if parts else None


__all__ = ["METHODS", "Connection", "ConnectionSettings", "JsonCallback", "Transport"]
