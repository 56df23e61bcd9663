"""
Shared fixtures for the test suite.

Run:  pytest tests/ -v
"""

from datetime import datetime

import pytest

from tests.fakes import FakeSupabase, NOW


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def now() -> datetime:
    return NOW
