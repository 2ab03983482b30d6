#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field, model_validator
from typing import List, Optional

from core.ranking import BulkPriority


class RecalculateRequest(BaseModel):
    """Request to recalculate one job's rankings."""
    job_id: str = Field(..., min_length=1)
    trigger_event: str = Field(default="MANUAL_RECALCULATION", min_length=1)
    force_recalculation: bool = Field(default=False, description="Run even if already CALCULATING")


class BulkRankingRequestBody(BaseModel):
    """Request to recalculate several jobs."""
    job_ids: List[str] = Field(..., description="1 to 50 job ids")
    trigger_event: str = Field(default="BULK_RECALCULATION", min_length=1)
    priority: BulkPriority = Field(default=BulkPriority.NORMAL, description="high or normal")


class InvalidateRequest(BaseModel):
    """Mark rankings stale by job, scoring config and/or applicant."""
    job_id: Optional[str] = None
    scoring_config_id: Optional[str] = None
    applicant_id: Optional[str] = None
    trigger_event: str = Field(default="MANUAL_INVALIDATION", min_length=1)


class ScoringConfigPreviewRequest(BaseModel):
    """Hypothetical scoring rules to rank a job's candidates under."""
    negative_marking_fraction: float = Field(default=0.0, ge=0, le=1)
    recency_window_days: Optional[int] = Field(default=None, gt=0)
    recency_boost_percent: Optional[float] = Field(default=None, ge=0, le=100)

    @model_validator(mode='after')
    def _check_recency(self) -> 'ScoringConfigPreviewRequest':
        if self.recency_boost_percent is not None and self.recency_window_days is None:
            raise ValueError("recency_window_days is required when recency_boost_percent is set")
        return self
