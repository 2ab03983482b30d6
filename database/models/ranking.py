from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean, Integer, Float, UniqueConstraint, Index

from core.utils import utcnow
from .base import Base, new_id


class CandidateRanking(Base):
    """
    One row per (job, applicant) from the latest completed calculation.

    Rows are replaced wholesale on recalculation, never appended.
    """
    __tablename__ = 'candidate_rankings'

    id = Column(Text, primary_key=True, default=new_id)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    applicant_id = Column(Text, nullable=False)
    assessment_id = Column(Text, ForeignKey('applicant_assessments.id', ondelete='CASCADE'), nullable=False)

    rank = Column(Integer, nullable=False)
    score = Column(Float, nullable=False)
    max_possible_score = Column(Float, nullable=False)
    percentage = Column(Float, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    incorrect_answers = Column(Integer, nullable=False)
    recency_bonus = Column(Float, nullable=True)

    scoring_config_version = Column(Text, nullable=False)
    calculated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    is_stale = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint('job_id', 'applicant_id', name='uq_candidate_rankings_job_applicant'),
        Index('idx_candidate_rankings_job_rank', 'job_id', 'rank'),
        Index('idx_candidate_rankings_job_stale', 'job_id', 'is_stale'),
        Index('idx_candidate_rankings_config_version', 'scoring_config_version'),
    )


class JobRankingStatusRecord(Base):
    """
    Per-job lifecycle of the ranking cache: CALCULATING, COMPLETED, STALE, ERROR.
    """
    __tablename__ = 'job_ranking_status'

    id = Column(Text, primary_key=True, default=new_id)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, unique=True)
    status = Column(Text, nullable=False, default='STALE')
    total_candidates = Column(Integer, nullable=False, default=0)
    last_calculated_at = Column(TIMESTAMP(timezone=True), nullable=True)
    calculation_duration = Column(Integer, nullable=True)  # milliseconds
    scoring_config_version = Column(Text, nullable=False, default='')
    trigger_event = Column(Text, nullable=True)
    # Identifies the run that set CALCULATING; a finishing run only completes its own
    calculation_token = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_job_ranking_status_status', 'status'),
        Index('idx_job_ranking_status_last_calculated', 'last_calculated_at'),
    )
