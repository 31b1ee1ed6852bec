"""Connection settings."""

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from pyhttpmod.exceptions import InvalidArgumentError

DEFAULT_USER_AGENT = "pyhttpmod/0.1"


class ConnectionSettings(BaseModel):
    """Settings shared by the connections of a module. Loaded from the ``"http"`` settings section."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = DEFAULT_USER_AGENT
    default_headers: dict[str, str] = {}
    timeout: timedelta | None = None
    error_for_status: bool = False
    send_cookies: bool = True
    store_cookies: bool = True

    @classmethod
    def load(cls, data: Mapping[str, Any]) -> "ConnectionSettings":
        """Validate a settings section, raising InvalidArgumentError on bad input."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            msg = f"Invalid connection settings: {e.error_count()} error(s)"
            raise InvalidArgumentError(msg, {"errors": e.errors(include_url=False)}) from e
