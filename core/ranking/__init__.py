#!/usr/bin/env python3
"""
Ranking Module - per-job candidate rankings kept fresh by domain events.

Public API:
- CandidateRankingService: top-N reads, recalculation, bulk, invalidation
- RankingCalculator: recompute and persist one job
- InvalidationController: event handlers and explicit invalidation
- BulkRankingProcessor: batched, paced multi-job recalculation

Modules:
- models.py: Data structures (RankedCandidate, JobRankingStatus, ...)
- calculator.py: Scoring, dense ranking and transactional replace
- invalidation.py: STALE marking and trigger policy
- bulk.py: Batching, priority pacing and the stale sweep
- background.py: Detached task runner
- service.py: Caller-facing operations
"""

from core.ranking.models import (
    RankingStatus,
    BulkPriority,
    RankedCandidate,
    RankingCalculationResult,
    JobRankingStatus,
    TopCandidatesResult,
    BulkRankingRequest,
    BulkRankingSummary,
    BulkJobFailure,
    InvalidationRequest,
    PreviewEntry,
    ScoringPreview,
    CandidateExplanation,
)
from core.ranking.background import BackgroundRunner
from core.ranking.calculator import RankingCalculator, rank_candidates, score_candidates
from core.ranking.bulk import BulkRankingProcessor
from core.ranking.invalidation import InvalidationController
from core.ranking.service import CandidateRankingService

__all__ = [
    'RankingStatus',
    'BulkPriority',
    'RankedCandidate',
    'RankingCalculationResult',
    'JobRankingStatus',
    'TopCandidatesResult',
    'BulkRankingRequest',
    'BulkRankingSummary',
    'BulkJobFailure',
    'InvalidationRequest',
    'PreviewEntry',
    'ScoringPreview',
    'CandidateExplanation',
    'BackgroundRunner',
    'RankingCalculator',
    'rank_candidates',
    'score_candidates',
    'BulkRankingProcessor',
    'InvalidationController',
    'CandidateRankingService',
]
