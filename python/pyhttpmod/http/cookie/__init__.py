"""Cookie related classes."""

from ._codec import escape, unescape
from ._cookie import Cookie, SameSite, parse_cookie_header
from ._store import CookieStore

__all__ = ["Cookie", "CookieStore", "SameSite", "escape", "parse_cookie_header", "unescape"]
