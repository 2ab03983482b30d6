from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean, Integer, Float, Index
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, new_id


class ScoringConfigRecord(Base):
    """
    Persisted scoring rules.

    job_id NULL + is_default TRUE is the global default; a row with job_id
    set is that job's override (at most one per job).
    """
    __tablename__ = 'scoring_configs'

    id = Column(Text, primary_key=True, default=new_id)
    negative_marking_fraction = Column(Float, nullable=False, default=0.0)
    recency_window_days = Column(Integer, nullable=True)
    recency_boost_percent = Column(Float, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=True, unique=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    job = relationship("Job", back_populates="scoring_config")

    __table_args__ = (
        Index('idx_scoring_configs_default', 'is_default'),
    )
