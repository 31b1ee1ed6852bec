"""Cookie types and interfaces."""

from typing import Protocol


class CookieProvider(Protocol):
    """Cookie provider that allows custom cookie handling."""

    def set_cookies(self, cookie_headers: list[str], url: str) -> None:
        """Set cookies for a given URL.

        This method is called when a Connection receives Set-Cookie headers in a response. Implementations
        should not raise on a single malformed header, but drop it and keep the rest.

        Args:
            cookie_headers: List of Set-Cookie header values received from url
            url: The URL that sent the Set-Cookie headers
        """

    def cookies(self, url: str) -> str | None:
        """Get cookies for a given URL.

        This method is called when a Connection is about to send a request and needs to determine which
        cookies to send.

        Args:
            url: The URL for which cookies are requested

        Returns:
            A string containing the Cookie header value, or None if no cookies
        """
