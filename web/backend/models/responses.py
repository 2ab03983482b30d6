#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class RankedCandidateResponse(BaseModel):
    """One row of a job's ranking."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "applicant_id": "0b6c4a52-6f0c-4f7e-9d0a-3f0f6b1d2a11",
                "assessment_id": "5b1f0e38-7a55-4e0d-8d5b-0f2f6e9c1c42",
                "rank": 1,
                "score": 6.875,
                "max_possible_score": 10.0,
                "percentage": 68.75,
                "correct_answers": 7,
                "incorrect_answers": 3,
                "recency_bonus": 0.625,
                "scoring_config_version": "9f2c...",
                "calculated_at": "2026-02-01T12:00:00+00:00",
                "is_stale": False
            }
        }
    )

    applicant_id: str
    assessment_id: str
    rank: int = Field(ge=1)
    score: float = Field(ge=0)
    max_possible_score: float = Field(ge=0)
    percentage: float = Field(ge=0, le=100)
    correct_answers: int
    incorrect_answers: int
    recency_bonus: Optional[float] = None
    scoring_config_version: str
    calculated_at: Optional[str] = None
    is_stale: bool = False


class RankingStatusResponse(BaseModel):
    """Lifecycle state of a job's rankings."""
    job_id: str
    status: str
    total_candidates: int
    last_calculated_at: Optional[str] = None
    calculation_duration: Optional[int] = Field(None, description="Milliseconds")
    scoring_config_version: str = ""
    trigger_event: Optional[str] = None
    error_message: Optional[str] = None
    is_stale: bool


class TopCandidatesResponse(BaseModel):
    success: bool = True
    job_id: str
    count: int
    candidates: List[RankedCandidateResponse]
    status: RankingStatusResponse
    refresh_triggered: bool = False


class StatusResponse(BaseModel):
    success: bool = True
    status: RankingStatusResponse


class CalculationResponse(BaseModel):
    """Outcome of one job's recalculation."""
    success: bool = True
    job_id: str
    total_candidates: int
    calculation_duration: int = Field(description="Milliseconds")
    scoring_config_version: str


class BulkFailureResponse(BaseModel):
    job_id: str
    error: str


class BulkRankingResponse(BaseModel):
    success: bool = True
    succeeded: int
    failed: int
    results: List[CalculationResponse]
    failures: List[BulkFailureResponse]


class InvalidateResponse(BaseModel):
    success: bool = True
    message: str
    job_ids: List[str]


class AckResponse(BaseModel):
    success: bool = True
    message: str


class ExplanationResponse(BaseModel):
    """Score breakdown of an applicant's latest assessment."""
    success: bool = True
    job_id: str
    applicant_id: str
    assessment_id: str
    scoring_config_version: str
    current_rank: Optional[int] = None
    is_stale: bool
    score: float
    max_possible_score: float
    percentage: float
    breakdown: Dict[str, Any]
    explanation: List[str]


class PreviewEntryResponse(BaseModel):
    applicant_id: str
    current_score: Optional[float] = None
    current_rank: Optional[int] = None
    new_score: float
    new_rank: int
    score_change: Optional[float] = None
    rank_change: Optional[int] = Field(None, description="Positive means moved up")


class PreviewResponse(BaseModel):
    success: bool = True
    job_id: str
    total_candidates: int
    entries: List[PreviewEntryResponse]
