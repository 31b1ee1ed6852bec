"""Response class."""

from dataclasses import dataclass
from typing import Any

import orjson

from pyhttpmod.exceptions import BodyDecodeError
from pyhttpmod.types import Headers


@dataclass(frozen=True, slots=True)
class Response:
    """A HTTP response as returned by a Transport."""

    status: int
    headers: Headers = ()
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Return the first value of the header (case-insensitive), or None."""
        return next(iter(self.header_all(name)), None)

    def header_all(self, name: str) -> list[str]:
        """Return all values of the header (case-insensitive), e.g. every Set-Cookie."""
        name = name.lower()
        return [v for k, v in self.headers if k.lower() == name]

    @property
    def content_type(self) -> str | None:
        """Media type of the body without parameters, lowercased."""
        value = self.header("content-type")
        return value.split(";", 1)[0].strip().lower() if value else None

    def is_json(self) -> bool:
        """Return True if the content type is JSON (application/json or a +json type)."""
        media_type = self.content_type
        return media_type is not None and (media_type == "application/json" or media_type.endswith("+json"))

    def text(self) -> str:
        """Body decoded as text, using the charset of the content type (default UTF-8)."""
        charset = "utf-8"
        for param in (self.header("content-type") or "").split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                charset = value.strip().strip('"')
        try:
            return self.body.decode(charset)
        except (LookupError, UnicodeDecodeError) as e:
            raise BodyDecodeError(f"Failed to decode response body: {e}", {"charset": charset}) from e

    def json(self) -> Any:
        """Body decoded as JSON."""
        try:
            return orjson.loads(self.body)
        except orjson.JSONDecodeError as e:
            raise BodyDecodeError(f"Failed to decode JSON body: {e}", {"status": self.status}) from e


__all__ = ["Response"]
