#!/usr/bin/env python3
"""
Candidate Ranking Service - the operations exposed to callers.

Reads never wait on a recalculation: they serve whatever is stored (possibly
flagged stale) and fire a background refresh when the data is stale or has
never been computed. Explicit recalculations run in the caller's thread and
propagate their errors.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import sessionmaker

from core.config_loader import RankingConfig
from core.errors import ConflictError, InvalidInputError, NotFoundError
from core.ranking.background import BackgroundRunner
from core.ranking.bulk import BulkRankingProcessor
from core.ranking.calculator import RankingCalculator, rank_candidates, score_candidates
from core.ranking.invalidation import InvalidationController
from core.ranking.models import (
    BulkRankingRequest,
    BulkRankingSummary,
    CandidateExplanation,
    InvalidationRequest,
    JobRankingStatus,
    PreviewEntry,
    RankedCandidate,
    RankingCalculationResult,
    RankingStatus,
    ScoringPreview,
    TopCandidatesResult,
)
from core.scorer import ScoringConfig, score_assessment, config_version
from core.utils import utcnow
from database.repositories.assessment import to_scoring_input
from database.uow import ranking_uow, RankingUnitOfWork

logger = logging.getLogger(__name__)

AUTO_REFRESH_TRIGGER = "AUTO_REFRESH_ON_READ"
MANUAL_TRIGGER = "MANUAL_RECALCULATION"


class CandidateRankingService:
    def __init__(
        self,
        session_factory: sessionmaker,
        calculator: RankingCalculator,
        bulk_processor: BulkRankingProcessor,
        invalidation: InvalidationController,
        runner: BackgroundRunner,
        config: RankingConfig,
        clock: Callable[[], datetime] = utcnow
    ):
        self.session_factory = session_factory
        self.calculator = calculator
        self.bulk_processor = bulk_processor
        self.invalidation = invalidation
        self.runner = runner
        self.config = config
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_top_candidates(self, job_id: str, limit: Optional[int] = None) -> TopCandidatesResult:
        if limit is None:
            limit = self.config.default_limit
        if limit < 1 or limit > self.config.max_limit:
            raise InvalidInputError(f"limit must be between 1 and {self.config.max_limit}")

        with ranking_uow(self.session_factory) as uow:
            if not uow.jobs.exists(job_id):
                raise NotFoundError(f"Job {job_id} not found")
            rows = uow.rankings.get_top_candidates(job_id, limit)
            candidates = [RankedCandidate.from_record(r) for r in rows]
            status = self._load_status(uow, job_id)

        refresh = self._maybe_refresh(status)
        return TopCandidatesResult(
            job_id=job_id,
            candidates=candidates,
            status=status,
            refresh_triggered=refresh,
        )

    def get_job_ranking_status(self, job_id: str) -> JobRankingStatus:
        """Status of the job's rankings; a job never ranked reads as STALE with 0 candidates."""
        with ranking_uow(self.session_factory) as uow:
            status = self._load_status(uow, job_id)
            job_exists = uow.jobs.exists(job_id)

        if job_exists:
            self._maybe_refresh(status)
        return status

    @staticmethod
    def _load_status(uow: RankingUnitOfWork, job_id: str) -> JobRankingStatus:
        record = uow.rankings.get_status(job_id)
        if record is None:
            return JobRankingStatus.initial(job_id)
        return JobRankingStatus.from_record(
            record,
            has_stale_rows=uow.rankings.count_stale_rows(job_id) > 0
        )

    def _maybe_refresh(self, status: JobRankingStatus) -> bool:
        if not self.config.auto_refresh_on_read:
            return False
        if status.status == RankingStatus.CALCULATING:
            return False
        if status.status == RankingStatus.ERROR:
            # Errored jobs still serving rows are left to the retry sweep
            if status.total_candidates > 0:
                return False
        elif not status.is_stale and status.last_calculated_at is not None:
            return False

        logger.info(f"Rankings for job {status.job_id} are stale or missing; refreshing in background")
        self.runner.submit(
            f"auto-refresh job {status.job_id}",
            self._refresh_quietly,
            status.job_id
        )
        return True

    def _refresh_quietly(self, job_id: str) -> None:
        try:
            self.calculator.calculate(job_id, AUTO_REFRESH_TRIGGER, force=False)
        except ConflictError:
            logger.info(f"Auto-refresh skipped, job {job_id} is already calculating")
        except NotFoundError as e:
            logger.warning(f"Auto-refresh of job {job_id} failed: {e}")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def recalculate_job_rankings(
        self,
        job_id: str,
        trigger_event: Optional[str] = None,
        force_recalculation: bool = False
    ) -> RankingCalculationResult:
        return self.calculator.calculate(
            job_id,
            trigger_event or MANUAL_TRIGGER,
            force=force_recalculation
        )

    def process_bulk_rankings(self, request: BulkRankingRequest) -> BulkRankingSummary:
        return self.bulk_processor.process(request)

    def invalidate_rankings(self, request: InvalidationRequest) -> List[str]:
        return self.invalidation.invalidate(request)

    def schedule_stale_recalculations(self, wait: bool = False) -> Optional[BulkRankingSummary]:
        """Start a stale sweep; detached unless `wait` is set."""
        if wait:
            return self.bulk_processor.schedule_stale_recalculations()
        self.runner.submit("stale sweep", self.bulk_processor.schedule_stale_recalculations)
        return None

    # ------------------------------------------------------------------
    # Explainability
    # ------------------------------------------------------------------

    def explain_candidate(self, job_id: str, applicant_id: str) -> CandidateExplanation:
        """Score breakdown of the applicant's latest assessment under the current config."""
        with ranking_uow(self.session_factory) as uow:
            config = self._require_config(uow, job_id)
            assessment = uow.assessments.get_latest_for_applicant(job_id, applicant_id)
            if assessment is None:
                raise NotFoundError(f"Applicant {applicant_id} has no assessment for job {job_id}")
            scoring_input = to_scoring_input(assessment)
            ranking = uow.rankings.get_candidate(job_id, applicant_id)
            current_rank = ranking.rank if ranking is not None else None
            is_stale = bool(ranking.is_stale) if ranking is not None else True

        return CandidateExplanation(
            job_id=job_id,
            applicant_id=applicant_id,
            assessment_id=scoring_input.assessment_id,
            scoring_config_version=config_version(config),
            result=score_assessment(scoring_input, config, self.clock()),
            current_rank=current_rank,
            is_stale=is_stale,
        )

    def preview_scoring_config(self, job_id: str, config: ScoringConfig) -> ScoringPreview:
        """Re-rank the job under `config` without persisting anything."""
        with ranking_uow(self.session_factory) as uow:
            if not uow.jobs.exists(job_id):
                raise NotFoundError(f"Job {job_id} not found")
            inputs = uow.assessments.load_scoring_inputs(job_id)
            current: Dict[str, RankedCandidate] = {
                r.applicant_id: RankedCandidate.from_record(r)
                for r in uow.rankings.list_rankings(job_id)
            }

        ranked = rank_candidates(score_candidates(inputs, config, self.clock()))
        entries = []
        for rank, candidate in ranked:
            existing = current.get(candidate.applicant_id)
            entries.append(PreviewEntry(
                applicant_id=candidate.applicant_id,
                current_score=existing.score if existing else None,
                current_rank=existing.rank if existing else None,
                new_score=candidate.score,
                new_rank=rank,
            ))

        return ScoringPreview(job_id=job_id, total_candidates=len(entries), entries=entries)

    @staticmethod
    def _require_config(uow: RankingUnitOfWork, job_id: str) -> ScoringConfig:
        if not uow.jobs.exists(job_id):
            raise NotFoundError(f"Job {job_id} not found")
        config = uow.configs.get_effective_config(job_id)
        if config is None:
            raise NotFoundError(f"No scoring configuration found for job {job_id}")
        return config
