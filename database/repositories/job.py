import logging
from typing import List, Optional

from sqlalchemy import select, func

from database.models import Job, ScoringConfigRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class JobRepository(BaseRepository):
    def get_by_id(self, job_id: str) -> Optional[Job]:
        stmt = select(Job).where(Job.id == job_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def exists(self, job_id: str) -> bool:
        stmt = select(func.count()).select_from(Job).where(Job.id == job_id)
        return self.db.execute(stmt).scalar_one() > 0

    def list_ids_without_config(self) -> List[str]:
        """Jobs with no override, i.e. the ones ranked under the global default."""
        stmt = (
            select(Job.id)
            .outerjoin(ScoringConfigRecord, ScoringConfigRecord.job_id == Job.id)
            .where(ScoringConfigRecord.id.is_(None))
            .order_by(Job.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def create(self, title: str, job_id: Optional[str] = None, is_active: bool = True) -> Job:
        job = Job(title=title, is_active=is_active)
        if job_id:
            job.id = job_id
        self.db.add(job)
        self.db.flush()
        return job
