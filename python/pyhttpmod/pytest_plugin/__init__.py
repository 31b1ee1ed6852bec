"""pyhttpmod pytest plugin for transport mocking."""

from .mock import Mock, TransportMocker, transport_mocker

__all__ = [  # noqa: RUF022
    "transport_mocker",
    "TransportMocker",
    "Mock",
]
