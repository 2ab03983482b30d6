#!/usr/bin/env python3
"""
Bulk Ranking Processor - recalculates many jobs with bounded concurrency.

Jobs are split into batches (5 for high priority, 2 for normal by default).
A batch runs concurrently and settles completely before the next starts;
normal priority pauses between batches to shed load. Failures are collected
per job and never abort the run.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from core.config_loader import BulkConfig, RankingConfig
from core.errors import InvalidInputError
from core.ranking.calculator import RankingCalculator
from core.ranking.models import (
    BulkJobFailure,
    BulkPriority,
    BulkRankingRequest,
    BulkRankingSummary,
)
from core.utils import utcnow
from database.uow import ranking_uow

logger = logging.getLogger(__name__)

STALE_SWEEP_TRIGGER = "SCHEDULED_STALE_RECALCULATION"


class BulkRankingProcessor:
    def __init__(
        self,
        session_factory: sessionmaker,
        calculator: RankingCalculator,
        bulk_config: BulkConfig,
        ranking_config: RankingConfig,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow
    ):
        self.session_factory = session_factory
        self.calculator = calculator
        self.bulk_config = bulk_config
        self.ranking_config = ranking_config
        self._sleep = sleep
        self.clock = clock

    def batch_size(self, priority: BulkPriority) -> int:
        if priority == BulkPriority.HIGH:
            return self.bulk_config.high_priority_batch_size
        return self.bulk_config.normal_priority_batch_size

    def _batches(self, job_ids: List[str], size: int) -> List[List[str]]:
        return [job_ids[i:i + size] for i in range(0, len(job_ids), size)]

    def process(self, request: BulkRankingRequest) -> BulkRankingSummary:
        """Run the calculator over `request.job_ids`; best effort."""
        if not request.job_ids:
            raise InvalidInputError("job_ids must contain at least one job")
        if len(request.job_ids) > self.bulk_config.max_jobs:
            raise InvalidInputError(
                f"job_ids may contain at most {self.bulk_config.max_jobs} jobs "
                f"(got {len(request.job_ids)})"
            )

        priority = BulkPriority(request.priority)
        job_ids = list(dict.fromkeys(request.job_ids))
        batches = self._batches(job_ids, self.batch_size(priority))
        summary = BulkRankingSummary()

        logger.info(
            f"Bulk ranking {len(job_ids)} job(s) in {len(batches)} batch(es), "
            f"priority={priority.value}, trigger={request.trigger_event}"
        )

        for index, batch in enumerate(batches):
            self._run_batch(batch, request.trigger_event, summary)

            is_last = index == len(batches) - 1
            if priority == BulkPriority.NORMAL and not is_last:
                self._sleep(self.bulk_config.normal_priority_delay_seconds)

        logger.info(
            f"Bulk ranking finished: {summary.succeeded} succeeded, {summary.failed} failed"
        )
        return summary

    def _run_batch(self, batch: List[str], trigger_event: str, summary: BulkRankingSummary) -> None:
        with ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="ranking-bulk") as executor:
            futures = {
                executor.submit(self.calculator.calculate, job_id, trigger_event, False): job_id
                for job_id in batch
            }
            wait(futures)

        # Collect in submission order so results are deterministic
        for future, job_id in futures.items():
            error = future.exception()
            if error is None:
                summary.results.append(future.result())
            else:
                logger.error(f"Bulk ranking failed for job {job_id}: {error}")
                summary.failures.append(BulkJobFailure(job_id=job_id, error=str(error)))

    def schedule_stale_recalculations(self) -> BulkRankingSummary:
        """Drain up to `stale_sweep_limit` jobs due for recalculation at normal priority."""
        with ranking_uow(self.session_factory) as uow:
            job_ids = uow.rankings.get_job_ids_to_refresh(
                self.ranking_config.stale_sweep_limit,
                include_errored=self.ranking_config.retry_errored_jobs,
                completed_before=self._completed_cutoff()
            )

        if not job_ids:
            logger.info("No stale rankings to recalculate")
            return BulkRankingSummary()

        logger.info(f"Scheduling recalculation of {len(job_ids)} stale job(s)")
        return self.process(BulkRankingRequest(
            job_ids=job_ids,
            trigger_event=STALE_SWEEP_TRIGGER,
            priority=BulkPriority.NORMAL
        ))

    def _completed_cutoff(self) -> Optional[datetime]:
        hours = self.ranking_config.refresh_completed_after_hours
        if hours is None:
            return None
        return self.clock() - timedelta(hours=hours)
