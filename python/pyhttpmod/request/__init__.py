"""Request class."""

from dataclasses import dataclass
from datetime import timedelta

from pyhttpmod.types import Headers, HeadersType


@dataclass(frozen=True, slots=True)
class Request:
    """A prepared HTTP request, handed to the Transport by a Connection."""

    method: str
    url: str
    headers: Headers = ()
    body: bytes | None = None
    timeout: timedelta | None = None

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        headers: HeadersType = (),
        body: bytes | None = None,
        timeout: timedelta | None = None,
    ) -> "Request":
        """Create a request, accepting headers as a mapping or as pairs."""
        items = headers.items() if hasattr(headers, "items") else headers
        return cls(method, url, tuple((str(k), str(v)) for k, v in items), body, timeout)

    def header(self, name: str) -> str | None:
        """Return the first value of the header (case-insensitive), or None."""
        name = name.lower()
        return next((v for k, v in self.headers if k.lower() == name), None)

    def repr_full(self) -> str:
        """Return a detailed representation including headers and body."""
        body = self.body if self.body is None or len(self.body) <= 100 else self.body[:100] + b"..."
        return f"Request(method={self.method!r}, url={self.url!r}, headers={list(self.headers)!r}, body={body!r})"


__all__ = ["Request"]
