#!/usr/bin/env python3
"""
Staleness & Invalidation Controller.

Turns domain events and explicit invalidation requests into STALE marks,
then decides how the job gets recomputed:
- assessment submitted: immediate background recalculation of that job
- scoring config changed: background stale sweep (the blast radius can be wide)
- job updated: nothing; the next read refreshes it

Invalidation only ever marks rows stale, it never deletes them.
"""

import logging
from typing import List, Optional, Set

from sqlalchemy.orm import sessionmaker

from core.errors import ConflictError, InvalidInputError, NotFoundError
from core.events import DomainEvent, EventBus, EventType
from core.ranking.background import BackgroundRunner
from core.ranking.bulk import BulkRankingProcessor
from core.ranking.calculator import RankingCalculator
from core.ranking.models import InvalidationRequest
from database.uow import ranking_uow, RankingUnitOfWork

logger = logging.getLogger(__name__)


class InvalidationController:
    def __init__(
        self,
        session_factory: sessionmaker,
        calculator: RankingCalculator,
        bulk_processor: BulkRankingProcessor,
        runner: BackgroundRunner
    ):
        self.session_factory = session_factory
        self.calculator = calculator
        self.bulk_processor = bulk_processor
        self.runner = runner

    def subscribe(self, event_bus: EventBus) -> None:
        """Register the event handlers; call once at startup."""
        event_bus.subscribe(
            [EventType.ASSESSMENT_SUBMITTED],
            self.handle_assessment_submitted,
            name="ranking-assessment-submitted"
        )
        event_bus.subscribe(
            [EventType.SCORING_CONFIG_CHANGED],
            self.handle_scoring_config_changed,
            name="ranking-config-changed"
        )
        event_bus.subscribe(
            [EventType.JOB_UPDATED],
            self.handle_job_updated,
            name="ranking-job-updated"
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def handle_assessment_submitted(self, event: DomainEvent) -> None:
        job_id = event.payload.get('job_id')
        if not job_id:
            logger.warning(f"Ignoring {event.type.value} without job_id: {event.payload}")
            return
        trigger = f"{EventType.ASSESSMENT_SUBMITTED.value}:{event.payload.get('assessment_id')}"

        with ranking_uow(self.session_factory) as uow:
            self._mark_stale(uow, job_id, trigger)

        self.runner.submit(
            f"recalculate job {job_id} ({trigger})",
            self._recalculate_in_background,
            job_id,
            trigger
        )

    def handle_scoring_config_changed(self, event: DomainEvent) -> None:
        config_id = event.payload.get('config_id')
        trigger = f"{EventType.SCORING_CONFIG_CHANGED.value}:{config_id}"

        with ranking_uow(self.session_factory) as uow:
            job_ids = self._jobs_affected_by_config_event(uow, event)
            for job_id in job_ids:
                self._mark_stale(uow, job_id, trigger)

        logger.info(f"Scoring config {config_id} changed; {len(job_ids)} job(s) marked stale")
        if job_ids:
            self.runner.submit(
                f"stale sweep after {trigger}",
                self.bulk_processor.schedule_stale_recalculations
            )

    def handle_job_updated(self, event: DomainEvent) -> None:
        job_id = event.payload.get('job_id')
        if not job_id:
            logger.warning(f"Ignoring {event.type.value} without job_id: {event.payload}")
            return
        with ranking_uow(self.session_factory) as uow:
            self._mark_stale(uow, job_id, f"{EventType.JOB_UPDATED.value}:{job_id}")

    # ------------------------------------------------------------------
    # Explicit invalidation
    # ------------------------------------------------------------------

    def invalidate(self, request: InvalidationRequest) -> List[str]:
        """Mark every job matched by the request stale; returns their ids."""
        if not request.has_target:
            raise InvalidInputError(
                "At least one of job_id, scoring_config_id or applicant_id is required"
            )

        with ranking_uow(self.session_factory) as uow:
            job_ids: Set[str] = set()
            if request.job_id:
                if not uow.jobs.exists(request.job_id):
                    raise NotFoundError(f"Job {request.job_id} not found")
                job_ids.add(request.job_id)
            if request.scoring_config_id:
                if uow.configs.get_by_id(request.scoring_config_id) is None:
                    raise NotFoundError(f"Scoring config {request.scoring_config_id} not found")
                job_ids.update(uow.configs.get_jobs_using_config(request.scoring_config_id))
            if request.applicant_id:
                job_ids.update(uow.assessments.list_job_ids_for_applicant(request.applicant_id))

            affected = sorted(job_ids)
            for job_id in affected:
                self._mark_stale(uow, job_id, request.trigger_event)

        logger.info(f"Invalidated rankings for {len(affected)} job(s): {request.trigger_event}")
        return affected

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _mark_stale(uow: RankingUnitOfWork, job_id: str, trigger: str) -> None:
        if not uow.jobs.exists(job_id):
            logger.warning(f"Skipping stale mark for unknown job {job_id}")
            return
        uow.rankings.mark_stale(job_id, trigger)

    @staticmethod
    def _jobs_affected_by_config_event(uow: RankingUnitOfWork, event: DomainEvent) -> List[str]:
        job_id: Optional[str] = event.payload.get('job_id')
        if job_id:
            return [job_id]
        if event.payload.get('is_default'):
            return uow.jobs.list_ids_without_config()
        config_id = event.payload.get('config_id')
        if config_id:
            return uow.configs.get_jobs_using_config(config_id)
        return []

    def _recalculate_in_background(self, job_id: str, trigger: str) -> None:
        try:
            self.calculator.calculate(job_id, trigger, force=False)
        except ConflictError:
            logger.info(f"Job {job_id} is already being recalculated; skipping ({trigger})")
