"""Pytest configuration and fixtures for ascom-facade tests.

Provides a mocked requests.Session for the remote back end and resets
module-level state (global factory, logging) so tests stay independent.
No test needs a real driver or network access; local drivers are
tests.helpers.FakeDriver instances.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
import requests

from ascom_facade import config as config_module
from ascom_facade.observability import reset_logging
from tests.helpers import alpaca_response


@pytest.fixture
def http() -> MagicMock:
    """Mock requests.Session returning a successful void envelope.

    Tests override ``http.get.return_value`` / ``http.put.return_value``
    (or ``side_effect``) with responses from helpers.alpaca_response().
    """
    session = MagicMock(spec=requests.Session)
    session.get.return_value = alpaca_response()
    session.put.return_value = alpaca_response()
    return session


# =============================================================================
# Global state
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_factory() -> Iterator[None]:
    """Drop the global DeviceFactory between tests."""
    config_module._factory = None
    yield
    config_module._factory = None


@pytest.fixture
def clean_logging() -> Iterator[None]:
    """Reset the ascom_facade logger before and after a test."""
    reset_logging()
    yield
    reset_logging()
