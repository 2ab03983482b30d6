#!/usr/bin/env python3
"""
Ranking Models - Data structures exchanged by the ranking services.
"""

from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from core.scorer.models import ScoringResult
from core.utils import ensure_utc


class RankingStatus(str, Enum):
    CALCULATING = "CALCULATING"
    COMPLETED = "COMPLETED"
    STALE = "STALE"
    ERROR = "ERROR"


class BulkPriority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"


@dataclass
class RankedCandidate:
    """A persisted ranking row as served to readers."""
    job_id: str
    applicant_id: str
    assessment_id: str
    rank: int
    score: float
    max_possible_score: float
    percentage: float
    correct_answers: int
    incorrect_answers: int
    recency_bonus: Optional[float]
    scoring_config_version: str
    calculated_at: Optional[datetime]
    is_stale: bool = False
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_record(cls, record) -> "RankedCandidate":
        return cls(
            id=record.id,
            job_id=record.job_id,
            applicant_id=record.applicant_id,
            assessment_id=record.assessment_id,
            rank=record.rank,
            score=record.score,
            max_possible_score=record.max_possible_score,
            percentage=record.percentage,
            correct_answers=record.correct_answers,
            incorrect_answers=record.incorrect_answers,
            recency_bonus=record.recency_bonus,
            scoring_config_version=record.scoring_config_version,
            calculated_at=ensure_utc(record.calculated_at),
            is_stale=bool(record.is_stale),
        )


@dataclass
class RankingCalculationResult:
    job_id: str
    total_candidates: int
    calculation_duration: int  # milliseconds
    scoring_config_version: str
    ranked_candidates: List[RankedCandidate] = field(default_factory=list)


@dataclass
class JobRankingStatus:
    job_id: str
    status: RankingStatus
    total_candidates: int = 0
    last_calculated_at: Optional[datetime] = None
    calculation_duration: Optional[int] = None
    scoring_config_version: str = ""
    trigger_event: Optional[str] = None
    error_message: Optional[str] = None
    is_stale: bool = False

    @classmethod
    def initial(cls, job_id: str) -> "JobRankingStatus":
        """Status of a job that has never been ranked."""
        return cls(job_id=job_id, status=RankingStatus.STALE, total_candidates=0, is_stale=True)

    @classmethod
    def from_record(cls, record, has_stale_rows: bool = False) -> "JobRankingStatus":
        status = RankingStatus(record.status)
        return cls(
            job_id=record.job_id,
            status=status,
            total_candidates=record.total_candidates or 0,
            last_calculated_at=ensure_utc(record.last_calculated_at),
            calculation_duration=record.calculation_duration,
            scoring_config_version=record.scoring_config_version or "",
            trigger_event=record.trigger_event,
            error_message=record.error_message,
            is_stale=status == RankingStatus.STALE or has_stale_rows,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        return data


@dataclass
class TopCandidatesResult:
    job_id: str
    candidates: List[RankedCandidate]
    status: JobRankingStatus
    refresh_triggered: bool = False


@dataclass
class BulkRankingRequest:
    job_ids: List[str]
    trigger_event: str
    priority: BulkPriority = BulkPriority.NORMAL


@dataclass
class BulkJobFailure:
    job_id: str
    error: str


@dataclass
class BulkRankingSummary:
    """Best-effort outcome: successes plus the failures that were logged."""
    results: List[RankingCalculationResult] = field(default_factory=list)
    failures: List[BulkJobFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass
class InvalidationRequest:
    trigger_event: str
    job_id: Optional[str] = None
    scoring_config_id: Optional[str] = None
    applicant_id: Optional[str] = None

    @property
    def has_target(self) -> bool:
        return bool(self.job_id or self.scoring_config_id or self.applicant_id)


@dataclass
class PreviewEntry:
    """Current vs. hypothetical score and rank of one applicant."""
    applicant_id: str
    current_score: Optional[float]
    current_rank: Optional[int]
    new_score: float
    new_rank: int

    @property
    def score_change(self) -> Optional[float]:
        if self.current_score is None:
            return None
        return self.new_score - self.current_score

    @property
    def rank_change(self) -> Optional[int]:
        # Positive means the applicant moved up
        if self.current_rank is None:
            return None
        return self.current_rank - self.new_rank


@dataclass
class ScoringPreview:
    job_id: str
    total_candidates: int
    entries: List[PreviewEntry] = field(default_factory=list)


@dataclass
class CandidateExplanation:
    job_id: str
    applicant_id: str
    assessment_id: str
    scoring_config_version: str
    result: ScoringResult
    current_rank: Optional[int] = None
    is_stale: bool = False
