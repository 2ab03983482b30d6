from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean, Integer, Float, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, new_id


class AssessmentTemplate(Base):
    __tablename__ = 'assessment_templates'

    id = Column(Text, primary_key=True, default=new_id)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='SET NULL'), nullable=True)
    name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    job = relationship("Job", back_populates="templates")
    questions = relationship(
        "AssessmentQuestion",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="AssessmentQuestion.order"
    )

    __table_args__ = (
        UniqueConstraint('job_id', 'name', name='uq_assessment_templates_job_name'),
    )


class AssessmentQuestion(Base):
    __tablename__ = 'assessment_questions'

    id = Column(Text, primary_key=True, default=new_id)
    template_id = Column(Text, ForeignKey('assessment_templates.id', ondelete='CASCADE'), nullable=False)
    text = Column(Text, nullable=False)
    weight = Column(Float, nullable=False, default=1.0)
    negative_weight = Column(Float, nullable=True)
    correct_answer = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)

    template = relationship("AssessmentTemplate", back_populates="questions")

    __table_args__ = (
        Index('idx_assessment_questions_template', 'template_id'),
    )


class ApplicantAssessment(Base):
    """
    One submission of a template by an applicant against a job.
    """
    __tablename__ = 'applicant_assessments'

    id = Column(Text, primary_key=True, default=new_id)
    applicant_id = Column(Text, nullable=False)
    template_id = Column(Text, ForeignKey('assessment_templates.id', ondelete='CASCADE'), nullable=False)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    submitted_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    template = relationship("AssessmentTemplate")
    answers = relationship("ApplicantAnswer", back_populates="assessment", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_applicant_assessments_job', 'job_id'),
        Index('idx_applicant_assessments_applicant_template', 'applicant_id', 'template_id'),
    )


class ApplicantAnswer(Base):
    """
    is_correct is decided once at submission time against the question's
    canonical answer and never re-derived.
    """
    __tablename__ = 'applicant_answers'

    id = Column(Text, primary_key=True, default=new_id)
    assessment_id = Column(Text, ForeignKey('applicant_assessments.id', ondelete='CASCADE'), nullable=False)
    question_id = Column(Text, ForeignKey('assessment_questions.id', ondelete='CASCADE'), nullable=False)
    answer = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    assessment = relationship("ApplicantAssessment", back_populates="answers")
    question = relationship("AssessmentQuestion")

    __table_args__ = (
        Index('idx_applicant_answers_assessment', 'assessment_id'),
    )
