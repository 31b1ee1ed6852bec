import pytest

from .mock import transport_mocker  # load the transport_mocker fixture

__all__ = ["transport_mocker"]


def pytest_configure(config: pytest.Config) -> None:
    """Configure the pytest plugin."""
    config.addinivalue_line("markers", "pyhttpmod: mark test to use pyhttpmod transport mocking")
