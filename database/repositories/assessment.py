import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from core.scorer.models import AssessmentAnswer, QuestionWeight, ScoringInput
from core.utils import ensure_utc
from database.models import ApplicantAssessment, ApplicantAnswer, AssessmentTemplate
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def to_scoring_input(assessment: ApplicantAssessment) -> ScoringInput:
    answers = [
        AssessmentAnswer(
            question_id=a.question_id,
            is_correct=bool(a.is_correct),
            weight=a.question.weight if a.question is not None else 1.0,
            answer_text=a.answer,
            negative_weight=a.question.negative_weight if a.question is not None else None,
        )
        for a in assessment.answers
    ]
    questions = [
        QuestionWeight(question_id=q.id, weight=q.weight, negative_weight=q.negative_weight)
        for q in assessment.template.questions
    ] if assessment.template is not None else []
    return ScoringInput(
        assessment_id=assessment.id,
        applicant_id=assessment.applicant_id,
        submitted_at=ensure_utc(assessment.submitted_at),
        answers=answers,
        questions=questions,
    )


class AssessmentRepository(BaseRepository):
    def list_assessments(self, job_id: str) -> List[ApplicantAssessment]:
        """Latest assessment per applicant against the job's active templates."""
        stmt = (
            select(ApplicantAssessment)
            .join(AssessmentTemplate, ApplicantAssessment.template_id == AssessmentTemplate.id)
            .where(
                ApplicantAssessment.job_id == job_id,
                AssessmentTemplate.is_active.is_(True)
            )
            .options(
                selectinload(ApplicantAssessment.answers).selectinload(ApplicantAnswer.question),
                selectinload(ApplicantAssessment.template).selectinload(AssessmentTemplate.questions),
            )
            .order_by(ApplicantAssessment.submitted_at.desc(), ApplicantAssessment.id)
        )
        latest = {}
        for assessment in self.db.execute(stmt).scalars().all():
            latest.setdefault(assessment.applicant_id, assessment)
        return list(latest.values())

    def load_scoring_inputs(self, job_id: str) -> List[ScoringInput]:
        return [to_scoring_input(a) for a in self.list_assessments(job_id)]

    def get_latest_for_applicant(self, job_id: str, applicant_id: str):
        for assessment in self.list_assessments(job_id):
            if assessment.applicant_id == applicant_id:
                return assessment
        return None

    def list_job_ids_for_applicant(self, applicant_id: str) -> List[str]:
        stmt = (
            select(ApplicantAssessment.job_id)
            .where(ApplicantAssessment.applicant_id == applicant_id)
            .distinct()
        )
        return list(self.db.execute(stmt).scalars().all())
