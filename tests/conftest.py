"""Shared fixtures for the parser tests."""

from datetime import datetime

import pytest


@pytest.fixture
def reference() -> datetime:
    """Capture time of the screenshot: Wednesday, January 20 2021, noon."""
    return datetime(2021, 1, 20, 12, 0)
