from database.repositories.base import BaseRepository
from database.repositories.job import JobRepository
from database.repositories.scoring_config import ScoringConfigRepository
from database.repositories.assessment import AssessmentRepository
from database.repositories.ranking import RankingRepository

__all__ = [
    'BaseRepository',
    'JobRepository',
    'ScoringConfigRepository',
    'AssessmentRepository',
    'RankingRepository',
]
