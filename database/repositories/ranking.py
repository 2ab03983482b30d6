import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, delete, update, func, case, and_, or_

from core.utils import utcnow
from database.models import CandidateRanking, JobRankingStatusRecord
from database.models.base import new_id
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

STATUS_CALCULATING = 'CALCULATING'
STATUS_COMPLETED = 'COMPLETED'
STATUS_STALE = 'STALE'
STATUS_ERROR = 'ERROR'


class RankingRepository(BaseRepository):
    def get_status(self, job_id: str, for_update: bool = False) -> Optional[JobRankingStatusRecord]:
        stmt = select(JobRankingStatusRecord).where(JobRankingStatusRecord.job_id == job_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_top_candidates(self, job_id: str, limit: int) -> List[CandidateRanking]:
        stmt = (
            select(CandidateRanking)
            .where(CandidateRanking.job_id == job_id)
            .order_by(CandidateRanking.rank.asc(), CandidateRanking.applicant_id)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_rankings(self, job_id: str) -> List[CandidateRanking]:
        stmt = (
            select(CandidateRanking)
            .where(CandidateRanking.job_id == job_id)
            .order_by(CandidateRanking.rank.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_candidate(self, job_id: str, applicant_id: str) -> Optional[CandidateRanking]:
        stmt = select(CandidateRanking).where(
            CandidateRanking.job_id == job_id,
            CandidateRanking.applicant_id == applicant_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def count_stale_rows(self, job_id: str) -> int:
        stmt = select(func.count()).select_from(CandidateRanking).where(
            CandidateRanking.job_id == job_id,
            CandidateRanking.is_stale.is_(True)
        )
        return self.db.execute(stmt).scalar_one()

    def _upsert_status(self, job_id: str, **fields: Any) -> JobRankingStatusRecord:
        record = self.get_status(job_id)
        if record is None:
            record = JobRankingStatusRecord(job_id=job_id)
            self.db.add(record)
        for key, value in fields.items():
            setattr(record, key, value)
        record.updated_at = utcnow()
        self.db.flush()
        return record

    def mark_stale(self, job_id: str, trigger_event: str) -> int:
        """Flag the job's rows stale and set its status to STALE.

        Returns the number of ranking rows flagged.
        """
        result = self.db.execute(
            update(CandidateRanking)
            .where(CandidateRanking.job_id == job_id, CandidateRanking.is_stale.is_(False))
            .values(is_stale=True)
            .execution_options(synchronize_session=False)
        )
        self._upsert_status(job_id, status=STATUS_STALE, trigger_event=trigger_event)
        count = result.rowcount or 0
        logger.info(f"Marked rankings stale for job {job_id} ({count} rows): {trigger_event}")
        return count

    def mark_calculating(
        self,
        job_id: str,
        trigger_event: str,
        scoring_config_version: str
    ) -> JobRankingStatusRecord:
        """Set CALCULATING under a fresh run token (read back from the returned record)."""
        return self._upsert_status(
            job_id,
            status=STATUS_CALCULATING,
            trigger_event=trigger_event,
            scoring_config_version=scoring_config_version,
            calculation_token=new_id(),
            error_message=None,
        )

    def replace_rankings(
        self,
        job_id: str,
        rows: Sequence[Dict[str, Any]],
        calculated_at: datetime,
        calculation_duration: int,
        scoring_config_version: str,
        trigger_event: str,
        calculation_token: Optional[str] = None
    ) -> List[CandidateRanking]:
        """Swap the job's ranking rows for `rows` and mark it COMPLETED.

        Must run inside one transaction so readers never see a mix. When
        `calculation_token` is given and the status row no longer shows that
        run as CALCULATING (a stale mark or another run got in meanwhile), the
        rows are stored flagged stale and the job is left for another pass:
        STALE, or untouched if another run is still CALCULATING.
        """
        current = self.get_status(job_id, for_update=True)
        superseded = calculation_token is not None and (
            current is None
            or current.status != STATUS_CALCULATING
            or current.calculation_token != calculation_token
        )

        self.db.execute(
            delete(CandidateRanking)
            .where(CandidateRanking.job_id == job_id)
            .execution_options(synchronize_session=False)
        )
        # Deletes must reach the database before inserts hit the (job, applicant) unique key
        self.db.flush()

        records = [
            CandidateRanking(
                job_id=job_id,
                calculated_at=calculated_at,
                scoring_config_version=scoring_config_version,
                is_stale=superseded,
                **row
            )
            for row in rows
        ]
        self.db.add_all(records)

        if superseded:
            logger.info(
                f"Job {job_id} changed during calculation ({current.status if current else 'no status'}); "
                f"storing {len(records)} rows as stale"
            )
            fields: Dict[str, Any] = dict(
                total_candidates=len(records),
                last_calculated_at=calculated_at,
                calculation_duration=calculation_duration,
                scoring_config_version=scoring_config_version,
            )
            if current is None or current.status != STATUS_CALCULATING:
                fields['status'] = STATUS_STALE
            self._upsert_status(job_id, **fields)
            return records

        self._upsert_status(
            job_id,
            status=STATUS_COMPLETED,
            total_candidates=len(records),
            last_calculated_at=calculated_at,
            calculation_duration=calculation_duration,
            scoring_config_version=scoring_config_version,
            trigger_event=trigger_event,
            error_message=None,
        )
        return records

    def mark_error(
        self,
        job_id: str,
        error_message: str,
        calculation_duration: Optional[int] = None,
        calculation_token: Optional[str] = None
    ) -> JobRankingStatusRecord:
        """Set ERROR; with a token, only if that run still owns the CALCULATING status."""
        if calculation_token is not None:
            current = self.get_status(job_id, for_update=True)
            if current is not None and (
                current.status != STATUS_CALCULATING
                or current.calculation_token != calculation_token
            ):
                logger.info(f"Not recording error for job {job_id}: status moved to {current.status}")
                return current
        return self._upsert_status(
            job_id,
            status=STATUS_ERROR,
            error_message=error_message,
            calculation_duration=calculation_duration,
        )

    def get_job_ids_to_refresh(
        self,
        limit: int,
        include_errored: bool = False,
        completed_before: Optional[datetime] = None
    ) -> List[str]:
        """Jobs the sweep should recalculate, most urgent first.

        STALE jobs come first, then ERROR ones if `include_errored`, then
        COMPLETED jobs last calculated before `completed_before` (if given).
        Within each group the oldest calculation goes first.
        """
        statuses = [STATUS_STALE]
        if include_errored:
            statuses.append(STATUS_ERROR)
        criteria = JobRankingStatusRecord.status.in_(statuses)
        if completed_before is not None:
            criteria = or_(
                criteria,
                and_(
                    JobRankingStatusRecord.status == STATUS_COMPLETED,
                    JobRankingStatusRecord.last_calculated_at < completed_before
                )
            )
        stmt = (
            select(JobRankingStatusRecord.job_id)
            .where(criteria)
            .order_by(
                case(
                    (JobRankingStatusRecord.status == STATUS_STALE, 0),
                    (JobRankingStatusRecord.status == STATUS_ERROR, 1),
                    else_=2
                ),
                JobRankingStatusRecord.last_calculated_at.is_(None).desc(),
                JobRankingStatusRecord.last_calculated_at.asc(),
                JobRankingStatusRecord.updated_at.asc(),
            )
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
