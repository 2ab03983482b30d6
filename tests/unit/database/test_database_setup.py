#!/usr/bin/env python3
"""
Unit tests for engine construction and schema bootstrap.
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from database.database import build_engine, init_db
from database.models import Job
from database.uow import ranking_uow


def test_init_db_creates_all_tables(sqlite_db):
    tables = set(inspect(sqlite_db.engine).get_table_names())

    assert {
        'jobs',
        'scoring_configs',
        'assessment_templates',
        'assessment_questions',
        'applicant_assessments',
        'applicant_answers',
        'candidate_rankings',
        'job_ranking_status',
    } <= tables


def test_in_memory_sqlite_uses_static_pool():
    engine = build_engine("sqlite://")
    try:
        assert isinstance(engine.pool, StaticPool)
    finally:
        engine.dispose()


def test_init_db_retries_until_database_is_up():
    engine = MagicMock()
    with patch('database.database.Base.metadata.create_all',
               side_effect=[RuntimeError("db starting"), None]) as create_all:
        with patch('time.sleep'):
            init_db(engine)

    assert create_all.call_count == 2


def test_unit_of_work_rolls_back_on_error(sqlite_db):
    with pytest.raises(RuntimeError):
        with ranking_uow(sqlite_db.session_factory) as uow:
            uow.jobs.create("Never saved")
            raise RuntimeError("abort")

    with ranking_uow(sqlite_db.session_factory) as uow:
        assert uow.session.query(Job).count() == 0
