"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest


@pytest.fixture
def now():
    """Fixed reference instant for expiry checks."""
    return datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
