"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For shared database helpers, see tests/fixtures/ranking_fixtures.py
"""

import logging

import pytest

from tests.fixtures.ranking_fixtures import SqliteTestDatabase


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@pytest.fixture
def sqlite_db():
    """Temp-file SQLite database with all tables, removed after the test."""
    db = SqliteTestDatabase()
    yield db
    db.dispose()
