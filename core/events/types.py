#!/usr/bin/env python3
"""
Domain events carried by the in-process event bus.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from core.utils import utcnow


class EventType(str, Enum):
    ASSESSMENT_SUBMITTED = "ASSESSMENT_SUBMITTED"
    SCORING_CONFIG_CHANGED = "SCORING_CONFIG_CHANGED"
    JOB_UPDATED = "JOB_UPDATED"
    RANKING_CALCULATED = "RANKING_CALCULATED"


@dataclass(frozen=True)
class DomainEvent:
    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)


def assessment_submitted(assessment_id: str, job_id: str, applicant_id: str) -> DomainEvent:
    return DomainEvent(EventType.ASSESSMENT_SUBMITTED, {
        'assessment_id': assessment_id,
        'job_id': job_id,
        'applicant_id': applicant_id,
    })


def scoring_config_changed(
    config_id: str,
    job_id: Optional[str] = None,
    is_default: bool = False
) -> DomainEvent:
    return DomainEvent(EventType.SCORING_CONFIG_CHANGED, {
        'config_id': config_id,
        'job_id': job_id,
        'is_default': is_default,
    })


def job_updated(job_id: str) -> DomainEvent:
    return DomainEvent(EventType.JOB_UPDATED, {'job_id': job_id})


def ranking_calculated(job_id: str, total_candidates: int, calculation_duration: int) -> DomainEvent:
    return DomainEvent(EventType.RANKING_CALCULATED, {
        'job_id': job_id,
        'total_candidates': total_candidates,
        'calculation_duration': calculation_duration,
    })
