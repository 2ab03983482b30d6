#!/usr/bin/env python3
"""
Effective Config Resolution - which ScoringConfig applies to a job.

A job uses its own override when it has one, otherwise the single global
default. Kept as small pure functions so the repositories only fetch rows
and the decision itself is testable without a database.
"""

from typing import Optional

from core.scorer.models import ScoringConfig
from core.utils import stable_hash

DEFAULT_CONFIG_VERSION = "default"


def resolve_effective_config(
    job_config: Optional[ScoringConfig],
    default_config: Optional[ScoringConfig]
) -> Optional[ScoringConfig]:
    """Return the job override if present, else the global default (or None)."""
    if job_config is not None:
        return job_config
    return default_config


def config_applies_to_job(
    config: ScoringConfig,
    job_id: str,
    job_has_override: bool
) -> bool:
    """Whether `config` is the effective config of `job_id`."""
    if config.job_id is not None:
        return config.job_id == job_id
    return config.is_default and not job_has_override


def config_version(config: Optional[ScoringConfig]) -> str:
    """Version tag recorded on every ranking row computed under `config`."""
    if config is None:
        return DEFAULT_CONFIG_VERSION
    return stable_hash({
        'id': config.id,
        'negative_marking_fraction': config.negative_marking_fraction,
        'recency_window_days': config.recency_window_days,
        'recency_boost_percent': config.recency_boost_percent,
        'updated_at': config.updated_at.isoformat() if config.updated_at else None,
    })
