"""Connection types and interfaces."""

from collections.abc import Callable
from typing import Any, Protocol

from pyhttpmod.request import Request
from pyhttpmod.response import Response

JsonCallback = Callable[[Any], None]


class Transport(Protocol):
    """Transport that executes prepared requests over the network."""

    def __call__(self, request: Request) -> Response:
        """Send the request and return the response.

        Transport errors (connection failures, timeouts) are raised as is and propagate from Connection.exec.

        Args:
            request: Request prepared by the connection, including its Cookie header

        Returns:
            Response with all headers, Set-Cookie headers included.
        """
        ...
