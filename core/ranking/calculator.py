#!/usr/bin/env python3
"""
Ranking Calculator - recomputes one job's candidate ranking.

Steps:
1. Resolve the job's effective ScoringConfig and mark the job CALCULATING
2. Load the latest assessment per applicant and score each one
3. Sort by score (desc), earliest submission first on ties, assign dense ranks
4. Replace the job's ranking rows and set COMPLETED in one transaction; if the
   job was marked stale (or taken over by a forced run) meanwhile, the rows are
   stored flagged stale and the job stays due for another pass
5. Publish RANKING_CALCULATED

Any failure after step 1 leaves the previous rows in place and the job in
ERROR with the message recorded.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import sessionmaker

from core.errors import ConflictError, InternalError, NotFoundError, ServiceException
from core.events import EventBus, ranking_calculated
from core.ranking.models import RankedCandidate, RankingCalculationResult, RankingStatus
from core.scorer import ScoringConfig, ScoringInput, ScoredCandidate, score_assessment, config_version
from core.utils import utcnow, ensure_utc
from database.uow import ranking_uow

logger = logging.getLogger(__name__)


def score_candidates(
    inputs: List[ScoringInput],
    config: ScoringConfig,
    now: datetime
) -> List[ScoredCandidate]:
    return [
        ScoredCandidate(
            applicant_id=item.applicant_id,
            assessment_id=item.assessment_id,
            submitted_at=ensure_utc(item.submitted_at),
            result=score_assessment(item, config, now),
        )
        for item in inputs
    ]


def rank_candidates(candidates: List[ScoredCandidate]) -> List[Tuple[int, ScoredCandidate]]:
    """Dense ranks from 1: score desc, then earliest submission, then applicant id."""
    ordered = sorted(
        candidates,
        key=lambda c: (-c.score, c.submitted_at, c.applicant_id)
    )
    return [(position, candidate) for position, candidate in enumerate(ordered, start=1)]


def _ranking_row(rank: int, candidate: ScoredCandidate) -> Dict[str, Any]:
    result = candidate.result
    return {
        'applicant_id': candidate.applicant_id,
        'assessment_id': candidate.assessment_id,
        'rank': rank,
        'score': result.score,
        'max_possible_score': result.max_possible_score,
        'percentage': result.percentage,
        'correct_answers': result.correct_count,
        'incorrect_answers': result.incorrect_count,
        'recency_bonus': result.recency_bonus if result.recency_boost_percent is not None else None,
    }


class RankingCalculator:
    """
    Recomputes and persists rankings for a single job.

    Each phase runs in its own unit of work so the CALCULATING flag is
    visible to other callers while scoring is in progress.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.session_factory = session_factory
        self.event_bus = event_bus
        self.clock = clock

    def _begin(self, job_id: str, trigger_event: str, force: bool) -> Tuple[ScoringConfig, str]:
        missing_config = False
        token = None
        with ranking_uow(self.session_factory) as uow:
            if not uow.jobs.exists(job_id):
                raise NotFoundError(f"Job {job_id} not found")

            status = uow.rankings.get_status(job_id)
            if status is not None and status.status == RankingStatus.CALCULATING.value:
                if not force:
                    raise ConflictError(f"Ranking calculation already in progress for job {job_id}")
                logger.warning(f"Forcing recalculation of job {job_id} while CALCULATING")

            config = uow.configs.get_effective_config(job_id)
            if config is None:
                # Recorded so the stale sweep does not keep picking this job
                uow.rankings.mark_error(job_id, "No scoring configuration found")
                missing_config = True
            else:
                record = uow.rankings.mark_calculating(job_id, trigger_event, config_version(config))
                token = record.calculation_token

        if missing_config:
            raise NotFoundError(f"No scoring configuration found for job {job_id}")
        return config, token

    def calculate(
        self,
        job_id: str,
        trigger_event: str,
        force: bool = False
    ) -> RankingCalculationResult:
        """Recompute rankings for `job_id`.

        Raises:
            NotFoundError: job or effective config missing
            ConflictError: already CALCULATING and not forced
            InternalError: scoring or persistence failed (job left in ERROR)
        """
        start = time.monotonic()
        config, token = self._begin(job_id, trigger_event, force)
        version = config_version(config)
        logger.info(f"Calculating rankings for job {job_id} (trigger: {trigger_event})")

        try:
            now = self.clock()
            with ranking_uow(self.session_factory) as uow:
                inputs = uow.assessments.load_scoring_inputs(job_id)

            ranked = rank_candidates(score_candidates(inputs, config, now))
            rows = [_ranking_row(rank, candidate) for rank, candidate in ranked]
            duration = int((time.monotonic() - start) * 1000)

            with ranking_uow(self.session_factory) as uow:
                records = uow.rankings.replace_rankings(
                    job_id,
                    rows,
                    calculated_at=now,
                    calculation_duration=duration,
                    scoring_config_version=version,
                    trigger_event=trigger_event,
                    calculation_token=token,
                )
                uow.session.flush()
                candidates = [RankedCandidate.from_record(r) for r in records]
        except Exception as e:
            duration = int((time.monotonic() - start) * 1000)
            logger.error(f"Ranking calculation failed for job {job_id}: {e}")
            self._record_error(job_id, str(e), duration, token)
            if isinstance(e, ServiceException):
                raise
            raise InternalError(f"Ranking calculation failed for job {job_id}: {e}") from e

        logger.info(
            f"Ranked {len(candidates)} candidates for job {job_id} in {duration}ms "
            f"(trigger: {trigger_event})"
        )

        if self.event_bus is not None:
            self.event_bus.publish(ranking_calculated(job_id, len(candidates), duration))

        return RankingCalculationResult(
            job_id=job_id,
            total_candidates=len(candidates),
            calculation_duration=duration,
            scoring_config_version=version,
            ranked_candidates=candidates,
        )

    def _record_error(self, job_id: str, message: str, duration: int, token: str) -> None:
        try:
            with ranking_uow(self.session_factory) as uow:
                uow.rankings.mark_error(job_id, message, duration, calculation_token=token)
        except Exception:
            logger.exception(f"Could not record ERROR status for job {job_id}")
