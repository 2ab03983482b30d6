#!/usr/bin/env python3
"""
Scoring Module - assessment scoring for candidate ranking.

Public API:
- score_assessment / score_answers: the pure scoring formula
- resolve_effective_config: job override vs. global default
- ScoringConfig, ScoringInput, ScoringResult: data structures

Modules:
- models.py: Data structures (ScoringConfig, AssessmentAnswer, ScoringResult)
- engine.py: Correctness, negative marking, recency bonus, clamping
- effective_config.py: Effective config resolution and version hashing
"""

from core.scorer.models import (
    ScoringConfig,
    QuestionWeight,
    AssessmentAnswer,
    ScoringInput,
    ScoringResult,
    ScoredCandidate,
)
from core.scorer.engine import score_assessment, score_answers
from core.scorer.effective_config import (
    resolve_effective_config,
    config_applies_to_job,
    config_version,
)

__all__ = [
    'ScoringConfig',
    'QuestionWeight',
    'AssessmentAnswer',
    'ScoringInput',
    'ScoringResult',
    'ScoredCandidate',
    'score_assessment',
    'score_answers',
    'resolve_effective_config',
    'config_applies_to_job',
    'config_version',
]
