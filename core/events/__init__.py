from core.events.types import (
    EventType,
    DomainEvent,
    assessment_submitted,
    scoring_config_changed,
    job_updated,
    ranking_calculated,
)
from core.events.bus import EventBus, EventHandler

__all__ = [
    'EventType',
    'DomainEvent',
    'EventBus',
    'EventHandler',
    'assessment_submitted',
    'scoring_config_changed',
    'job_updated',
    'ranking_calculated',
]
