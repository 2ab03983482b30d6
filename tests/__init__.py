#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Run only unit tests
    python -m pytest tests/unit -v

    # Using unittest
    python -m unittest discover tests -v

Database Setup:
    Repository, service and end-to-end tests build a temp-file SQLite
    database from the SQLAlchemy metadata (see tests/fixtures/ranking_fixtures.py),
    so no external database is needed.
"""
