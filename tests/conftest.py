"""
Pytest configuration and fixtures.

For shared profile builders, see tests/mocks/profiles.py
"""

import pytest

from database.database import build_engine, build_session_factory
from database.init_db import init_db


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring PostgreSQL (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def sqlite_session_factory():
    """Fresh in-memory SQLite schema per test."""
    engine = build_engine("sqlite://")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()
