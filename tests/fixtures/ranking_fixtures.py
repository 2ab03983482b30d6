#!/usr/bin/env python3
"""
Shared database fixtures for ranking tests.

Builds a temp-file SQLite database from the SQLAlchemy metadata so worker
threads (event bus, background runner, bulk batches) see the same data.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from core.app_context import AppContext
from core.config_loader import get_default_config
from core.scorer import ScoringConfig
from database.database import build_engine, build_session_factory, init_db
from database.models import (
    Job,
    ScoringConfigRecord,
    AssessmentTemplate,
    AssessmentQuestion,
    ApplicantAssessment,
    ApplicantAnswer,
)
from database.uow import ranking_uow

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class SqliteTestDatabase:
    """Temp-file SQLite database with tables created."""

    def __init__(self):
        fd, self.path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        self.url = f"sqlite:///{self.path}"
        self.engine = build_engine(self.url)
        init_db(self.engine)
        self.session_factory = build_session_factory(self.engine)

    def build_context(self, **overrides) -> AppContext:
        config = get_default_config(self.url)
        for section, values in overrides.items():
            setattr(config, section, getattr(config, section).model_copy(update=values))
        return AppContext.build(config, engine=self.engine, clock=fixed_clock, sleep=lambda _: None)

    def uow(self):
        return ranking_uow(self.session_factory)

    def dispose(self):
        self.engine.dispose()
        if os.path.exists(self.path):
            os.remove(self.path)


def create_job(db: SqliteTestDatabase, title: str = "Backend Engineer", job_id: Optional[str] = None) -> str:
    with db.uow() as uow:
        return uow.jobs.create(title, job_id=job_id).id


def create_config(
    db: SqliteTestDatabase,
    negative_marking_fraction: float = 0.0,
    recency_window_days: Optional[int] = None,
    recency_boost_percent: Optional[float] = None,
    job_id: Optional[str] = None
) -> str:
    with db.uow() as uow:
        record = uow.configs.save(ScoringConfig(
            negative_marking_fraction=negative_marking_fraction,
            recency_window_days=recency_window_days,
            recency_boost_percent=recency_boost_percent,
            is_default=job_id is None,
            job_id=job_id,
        ))
        return record.id


def create_template(
    db: SqliteTestDatabase,
    job_id: str,
    question_count: int = 10,
    weight: float = 1.0,
    is_active: bool = True,
    name: str = "Screening"
) -> str:
    session = db.session_factory()
    try:
        template = AssessmentTemplate(job_id=job_id, name=name, is_active=is_active)
        template.questions = [
            AssessmentQuestion(text=f"Q{i + 1}", weight=weight, correct_answer="a", order=i)
            for i in range(question_count)
        ]
        session.add(template)
        session.commit()
        return template.id
    finally:
        session.close()


def submit_assessment(
    db: SqliteTestDatabase,
    job_id: str,
    template_id: str,
    applicant_id: str,
    correct: int,
    incorrect: int = 0,
    submitted_at: Optional[datetime] = None
) -> str:
    """Answer the template's questions in order: correct ones, then incorrect, rest unanswered."""
    session = db.session_factory()
    try:
        template = session.get(AssessmentTemplate, template_id)
        questions: List[AssessmentQuestion] = list(template.questions)
        assessment = ApplicantAssessment(
            applicant_id=applicant_id,
            template_id=template_id,
            job_id=job_id,
            submitted_at=submitted_at or FIXED_NOW,
        )
        answers = []
        for index, question in enumerate(questions):
            if index < correct:
                answers.append(ApplicantAnswer(question_id=question.id, answer="a", is_correct=True))
            elif index < correct + incorrect:
                answers.append(ApplicantAnswer(question_id=question.id, answer="b", is_correct=False))
            else:
                answers.append(ApplicantAnswer(question_id=question.id, answer=None, is_correct=False))
        assessment.answers = answers
        session.add(assessment)
        session.commit()
        return assessment.id
    finally:
        session.close()


def days_ago(days: float) -> datetime:
    return FIXED_NOW - timedelta(days=days)
