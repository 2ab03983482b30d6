import logging
from typing import List, Optional

from sqlalchemy import select

from core.scorer.models import ScoringConfig
from core.scorer.effective_config import config_applies_to_job, resolve_effective_config
from core.utils import ensure_utc
from database.models import Job, ScoringConfigRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def to_domain(record: Optional[ScoringConfigRecord]) -> Optional[ScoringConfig]:
    if record is None:
        return None
    return ScoringConfig(
        id=record.id,
        negative_marking_fraction=record.negative_marking_fraction,
        recency_window_days=record.recency_window_days,
        recency_boost_percent=record.recency_boost_percent,
        is_default=record.is_default,
        job_id=record.job_id,
        updated_at=ensure_utc(record.updated_at),
    )


class ScoringConfigRepository(BaseRepository):
    def get_by_id(self, config_id: str) -> Optional[ScoringConfigRecord]:
        stmt = select(ScoringConfigRecord).where(ScoringConfigRecord.id == config_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_default(self) -> Optional[ScoringConfigRecord]:
        stmt = select(ScoringConfigRecord).where(
            ScoringConfigRecord.is_default.is_(True),
            ScoringConfigRecord.job_id.is_(None)
        )
        return self.db.execute(stmt).scalars().first()

    def get_for_job(self, job_id: str) -> Optional[ScoringConfigRecord]:
        stmt = select(ScoringConfigRecord).where(ScoringConfigRecord.job_id == job_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_effective_config(self, job_id: str) -> Optional[ScoringConfig]:
        return resolve_effective_config(
            to_domain(self.get_for_job(job_id)),
            to_domain(self.get_default())
        )

    def get_jobs_using_config(self, config_id: str) -> List[str]:
        """Jobs whose effective config is `config_id`."""
        config = to_domain(self.get_by_id(config_id))
        if config is None:
            logger.warning(f"Scoring config {config_id} not found; no jobs affected")
            return []
        overridden = set(self.db.execute(
            select(ScoringConfigRecord.job_id).where(ScoringConfigRecord.job_id.is_not(None))
        ).scalars())
        job_ids = self.db.execute(select(Job.id).order_by(Job.id)).scalars()
        return [
            job_id for job_id in job_ids
            if config_applies_to_job(config, job_id, job_has_override=job_id in overridden)
        ]

    def save(self, config: ScoringConfig) -> ScoringConfigRecord:
        """Insert or update a config from its validated domain form."""
        record = self.get_by_id(config.id) if config.id else None
        if record is None:
            record = ScoringConfigRecord()
            if config.id:
                record.id = config.id
            self.db.add(record)
        record.negative_marking_fraction = config.negative_marking_fraction
        record.recency_window_days = config.recency_window_days
        record.recency_boost_percent = config.recency_boost_percent
        record.is_default = config.is_default
        record.job_id = config.job_id
        self.db.flush()
        return record
