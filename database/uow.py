import contextlib
import logging

from sqlalchemy.orm import sessionmaker

from database.repositories import (
    JobRepository,
    ScoringConfigRepository,
    AssessmentRepository,
    RankingRepository,
)

logger = logging.getLogger(__name__)


class RankingUnitOfWork:
    """Repositories sharing one Session, and therefore one transaction."""

    def __init__(self, session):
        self.session = session
        self.jobs = JobRepository(session)
        self.configs = ScoringConfigRepository(session)
        self.assessments = AssessmentRepository(session)
        self.rankings = RankingRepository(session)


@contextlib.contextmanager
def ranking_uow(session_factory: sessionmaker):
    """Per-unit-of-work transaction scope.

    Yields a RankingUnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with ranking_uow(session_factory) as uow:
            uow.rankings.mark_stale(job_id, "JOB_UPDATED")
        # commit happens automatically on successful exit
    """
    session = session_factory()
    try:
        yield RankingUnitOfWork(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
