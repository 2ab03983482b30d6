from .base import Base, new_id
from .job import Job
from .scoring_config import ScoringConfigRecord
from .assessment import AssessmentTemplate, AssessmentQuestion, ApplicantAssessment, ApplicantAnswer
from .ranking import CandidateRanking, JobRankingStatusRecord

__all__ = [
    'Base',
    'new_id',
    'Job',
    'ScoringConfigRecord',
    'AssessmentTemplate',
    'AssessmentQuestion',
    'ApplicantAssessment',
    'ApplicantAnswer',
    'CandidateRanking',
    'JobRankingStatusRecord',
]
