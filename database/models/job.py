from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Index
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, new_id


class Job(Base):
    """
    Job posting candidates are ranked against.

    Only identity and activity matter to the ranking engine; the rest of the
    job record is owned by the job management service.
    """
    __tablename__ = 'jobs'

    id = Column(Text, primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    scoring_config = relationship("ScoringConfigRecord", back_populates="job", uselist=False)
    templates = relationship("AssessmentTemplate", back_populates="job")

    __table_args__ = (
        Index('idx_jobs_active', 'is_active'),
    )
