#!/usr/bin/env python3
"""
Ranking endpoints - top candidates, recalculation, invalidation.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.ranking import (
    BulkRankingRequest,
    CandidateRankingService,
    InvalidationRequest,
    JobRankingStatus,
    RankedCandidate,
    RankingCalculationResult,
)
from core.scorer import ScoringConfig
from ..dependencies import get_ranking_service
from ..models.requests import (
    RecalculateRequest,
    BulkRankingRequestBody,
    InvalidateRequest,
    ScoringConfigPreviewRequest,
)
from ..models.responses import (
    RankedCandidateResponse,
    RankingStatusResponse,
    TopCandidatesResponse,
    StatusResponse,
    CalculationResponse,
    BulkFailureResponse,
    BulkRankingResponse,
    InvalidateResponse,
    AckResponse,
    ExplanationResponse,
    PreviewEntryResponse,
    PreviewResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rankings", tags=["rankings"])


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _candidate_response(candidate: RankedCandidate) -> RankedCandidateResponse:
    return RankedCandidateResponse(
        applicant_id=candidate.applicant_id,
        assessment_id=candidate.assessment_id,
        rank=candidate.rank,
        score=candidate.score,
        max_possible_score=candidate.max_possible_score,
        percentage=candidate.percentage,
        correct_answers=candidate.correct_answers,
        incorrect_answers=candidate.incorrect_answers,
        recency_bonus=candidate.recency_bonus,
        scoring_config_version=candidate.scoring_config_version,
        calculated_at=_iso(candidate.calculated_at),
        is_stale=candidate.is_stale,
    )


def _status_response(status: JobRankingStatus) -> RankingStatusResponse:
    return RankingStatusResponse(
        job_id=status.job_id,
        status=status.status.value,
        total_candidates=status.total_candidates,
        last_calculated_at=_iso(status.last_calculated_at),
        calculation_duration=status.calculation_duration,
        scoring_config_version=status.scoring_config_version,
        trigger_event=status.trigger_event,
        error_message=status.error_message,
        is_stale=status.is_stale,
    )


def _calculation_response(result: RankingCalculationResult) -> CalculationResponse:
    return CalculationResponse(
        job_id=result.job_id,
        total_candidates=result.total_candidates,
        calculation_duration=result.calculation_duration,
        scoring_config_version=result.scoring_config_version,
    )


@router.get("/jobs/{job_id}/top", response_model=TopCandidatesResponse)
def get_top_candidates(
    job_id: str,
    limit: Optional[int] = Query(default=None, description="Number of candidates (1-100, default 5)"),
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """
    Get the top-ranked candidates of a job.

    Serves stored rankings even when stale; a background refresh is started
    when they are stale or have never been computed.
    """
    result = service.get_top_candidates(job_id, limit)
    return TopCandidatesResponse(
        job_id=result.job_id,
        count=len(result.candidates),
        candidates=[_candidate_response(c) for c in result.candidates],
        status=_status_response(result.status),
        refresh_triggered=result.refresh_triggered,
    )


@router.get("/jobs/{job_id}/status", response_model=StatusResponse)
def get_ranking_status(
    job_id: str,
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """Get the ranking lifecycle status of a job."""
    return StatusResponse(status=_status_response(service.get_job_ranking_status(job_id)))


@router.post("/recalculate", response_model=CalculationResponse)
def recalculate(
    body: RecalculateRequest,
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """
    Recalculate one job's rankings synchronously.

    Returns 409 if a calculation is already running and force_recalculation is false.
    """
    result = service.recalculate_job_rankings(
        body.job_id,
        body.trigger_event,
        force_recalculation=body.force_recalculation
    )
    return _calculation_response(result)


@router.post("/bulk", response_model=BulkRankingResponse)
def process_bulk(
    body: BulkRankingRequestBody,
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """Recalculate up to 50 jobs; per-job failures are reported, not raised."""
    summary = service.process_bulk_rankings(BulkRankingRequest(
        job_ids=body.job_ids,
        trigger_event=body.trigger_event,
        priority=body.priority,
    ))
    return BulkRankingResponse(
        succeeded=summary.succeeded,
        failed=summary.failed,
        results=[_calculation_response(r) for r in summary.results],
        failures=[BulkFailureResponse(job_id=f.job_id, error=f.error) for f in summary.failures],
    )


@router.post("/invalidate", response_model=InvalidateResponse)
def invalidate(
    body: InvalidateRequest,
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """Mark rankings stale by job, scoring config and/or applicant."""
    job_ids = service.invalidate_rankings(InvalidationRequest(
        trigger_event=body.trigger_event,
        job_id=body.job_id,
        scoring_config_id=body.scoring_config_id,
        applicant_id=body.applicant_id,
    ))
    return InvalidateResponse(
        message=f"Marked rankings stale for {len(job_ids)} job(s)",
        job_ids=job_ids,
    )


@router.post("/schedule-stale", response_model=AckResponse)
def schedule_stale(service: CandidateRankingService = Depends(get_ranking_service)):
    """Start a background recalculation of stale jobs."""
    service.schedule_stale_recalculations()
    return AckResponse(message="Stale ranking recalculation scheduled")


@router.get(
    "/jobs/{job_id}/candidates/{applicant_id}/explanation",
    response_model=ExplanationResponse
)
def explain_candidate(
    job_id: str,
    applicant_id: str,
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """Explain how an applicant's score is made up under the job's current config."""
    explanation = service.explain_candidate(job_id, applicant_id)
    result = explanation.result
    return ExplanationResponse(
        job_id=explanation.job_id,
        applicant_id=explanation.applicant_id,
        assessment_id=explanation.assessment_id,
        scoring_config_version=explanation.scoring_config_version,
        current_rank=explanation.current_rank,
        is_stale=explanation.is_stale,
        score=result.score,
        max_possible_score=result.max_possible_score,
        percentage=result.percentage,
        breakdown=result.breakdown,
        explanation=result.explanation,
    )


@router.post("/jobs/{job_id}/preview", response_model=PreviewResponse)
def preview_scoring_config(
    job_id: str,
    body: ScoringConfigPreviewRequest,
    service: CandidateRankingService = Depends(get_ranking_service)
):
    """Show how the ranking would change under different scoring rules. Nothing is saved."""
    preview = service.preview_scoring_config(job_id, ScoringConfig(
        negative_marking_fraction=body.negative_marking_fraction,
        recency_window_days=body.recency_window_days,
        recency_boost_percent=body.recency_boost_percent,
        job_id=job_id,
    ))
    return PreviewResponse(
        job_id=preview.job_id,
        total_candidates=preview.total_candidates,
        entries=[
            PreviewEntryResponse(
                applicant_id=e.applicant_id,
                current_score=e.current_score,
                current_rank=e.current_rank,
                new_score=e.new_score,
                new_rank=e.new_rank,
                score_change=e.score_change,
                rank_change=e.rank_change,
            )
            for e in preview.entries
        ],
    )
