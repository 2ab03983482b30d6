#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring inputs and results.
"""

from datetime import datetime
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScoringConfig(BaseModel):
    """
    Scoring rules applied to a job's assessments.

    Exactly one config is the global default (job_id=None, is_default=True);
    a job-specific config overrides it for that job only.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    negative_marking_fraction: float = Field(default=0.0, ge=0, le=1)
    recency_window_days: Optional[int] = None
    recency_boost_percent: Optional[float] = Field(default=None, ge=0, le=100)
    is_default: bool = False
    job_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode='after')
    def _check_recency(self) -> 'ScoringConfig':
        if self.recency_boost_percent is not None:
            if self.recency_window_days is None:
                raise ValueError("Recency window days is required when recency boost is enabled")
            if self.recency_window_days <= 0:
                raise ValueError("Recency window days must be positive")
        return self

    @property
    def has_recency_boost(self) -> bool:
        return bool(self.recency_boost_percent) and bool(self.recency_window_days)


@dataclass(frozen=True)
class QuestionWeight:
    """A question of the assessment template and what it is worth."""
    question_id: str
    weight: float = 1.0
    negative_weight: Optional[float] = None


@dataclass(frozen=True)
class AssessmentAnswer:
    """An applicant's answer; correctness was fixed at submission time."""
    question_id: str
    is_correct: bool
    weight: float = 1.0
    answer_text: Optional[str] = None
    negative_weight: Optional[float] = None

    @property
    def is_answered(self) -> bool:
        return self.answer_text is not None and self.answer_text.strip() != ""


@dataclass
class ScoringInput:
    """Everything the scoring engine needs for one submitted assessment."""
    assessment_id: str
    applicant_id: str
    submitted_at: datetime
    answers: List[AssessmentAnswer] = field(default_factory=list)
    # All questions of the template; max score is summed over these
    questions: List[QuestionWeight] = field(default_factory=list)


@dataclass
class ScoringResult:
    """Score, breakdown and human-readable explanation of one assessment."""
    score: float
    max_possible_score: float
    percentage: float
    base_score: float
    correct_count: int
    correct_points: float
    incorrect_count: int
    incorrect_points: float
    recency_bonus: float = 0.0
    recency_boost_percent: Optional[float] = None
    explanation: List[str] = field(default_factory=list)

    @property
    def breakdown(self) -> Dict[str, Any]:
        breakdown: Dict[str, Any] = {
            'correct': {'count': self.correct_count, 'points': self.correct_points},
            'incorrect': {'count': self.incorrect_count, 'points': self.incorrect_points},
        }
        if self.recency_boost_percent is not None:
            breakdown['recency_bonus'] = {
                'percentage': self.recency_boost_percent,
                'points': self.recency_bonus,
            }
        return breakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'max_possible_score': self.max_possible_score,
            'percentage': self.percentage,
            'breakdown': self.breakdown,
            'explanation': list(self.explanation),
        }


@dataclass
class ScoredCandidate:
    """A scored assessment, ready to be ranked within a job."""
    applicant_id: str
    assessment_id: str
    submitted_at: datetime
    result: ScoringResult

    @property
    def score(self) -> float:
        return self.result.score
