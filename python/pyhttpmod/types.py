"""Common types and interfaces used in the library."""

from collections.abc import Mapping, Sequence

HeadersType = Mapping[str, str] | Sequence[tuple[str, str]]
Headers = tuple[tuple[str, str], ...]
BodyType = bytes | bytearray | memoryview | str
