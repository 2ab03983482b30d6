#!/usr/bin/env python3
"""
Scoring Engine - turns an assessment plus a ScoringConfig into a score.

Pure functions only: no I/O and no clock reads. "now" is passed in by the
caller so recency decisions are reproducible.

Formula:
- correct answer:    +weight
- incorrect answer:  -(weight x negative_marking_fraction), 0 when the fraction is 0
- unanswered:        0, counted neither correct nor incorrect
- recency bonus:     base_score x boost% / 100 when submitted within the window
- final score:       max(0, base_score + recency_bonus)
"""

import math
from datetime import datetime
from typing import List, Optional, Tuple

from core.scorer.models import (
    AssessmentAnswer,
    QuestionWeight,
    ScoringConfig,
    ScoringInput,
    ScoringResult,
)
from core.utils import ensure_utc

SECONDS_PER_DAY = 24 * 60 * 60


def days_since(submitted_at: datetime, now: datetime) -> int:
    """Whole days elapsed between submission and now (floored)."""
    elapsed = (ensure_utc(now) - ensure_utc(submitted_at)).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)


def is_within_recency_window(
    submitted_at: datetime,
    now: datetime,
    window_days: int
) -> bool:
    """The boundary day counts as inside the window."""
    return days_since(submitted_at, now) <= window_days


def max_possible_score(
    questions: List[QuestionWeight],
    answers: List[AssessmentAnswer]
) -> float:
    """Sum of weights over the whole template.

    Falls back to the answered questions when the template is unknown.
    """
    if questions:
        return float(sum(q.weight for q in questions))
    return float(sum(a.weight for a in answers))


def _answer_points(
    answers: List[AssessmentAnswer],
    config: ScoringConfig
) -> Tuple[int, float, int, float, int]:
    correct_count = 0
    correct_points = 0.0
    incorrect_count = 0
    incorrect_points = 0.0
    unanswered = 0

    for answer in answers:
        if not answer.is_answered:
            unanswered += 1
            continue
        if answer.is_correct:
            correct_count += 1
            correct_points += answer.weight
            continue
        incorrect_count += 1
        if config.negative_marking_fraction > 0:
            penalty_weight = answer.negative_weight if answer.negative_weight is not None else answer.weight
            incorrect_points -= penalty_weight * config.negative_marking_fraction

    return correct_count, correct_points, incorrect_count, incorrect_points, unanswered


def score_answers(
    answers: List[AssessmentAnswer],
    config: ScoringConfig,
    submitted_at: datetime,
    now: datetime,
    questions: Optional[List[QuestionWeight]] = None
) -> ScoringResult:
    """Score one assessment's answers under `config` as of `now`."""
    correct_count, correct_points, incorrect_count, incorrect_points, unanswered = \
        _answer_points(answers, config)
    base_score = correct_points + incorrect_points
    max_score = max_possible_score(questions or [], answers)

    explanation = [
        f"Correct answers: {correct_count} (+{correct_points:g} points)",
    ]

    if config.negative_marking_fraction > 0:
        explanation.append(
            f"Incorrect answers: {incorrect_count} ({incorrect_points:g} points, "
            f"{config.negative_marking_fraction * 100:g}% negative marking)"
        )
    else:
        explanation.append(
            f"Incorrect answers: {incorrect_count} (0 points, negative marking disabled)"
        )
    if unanswered:
        explanation[-1] += f"; {unanswered} unanswered (0 points)"

    recency_bonus = 0.0
    boost_percent: Optional[float] = None
    if config.has_recency_boost:
        elapsed_days = days_since(submitted_at, now)
        if elapsed_days <= config.recency_window_days:
            boost_percent = config.recency_boost_percent
            recency_bonus = base_score * config.recency_boost_percent / 100
            explanation.append(
                f"Recency bonus: {recency_bonus:+.2f} points ({config.recency_boost_percent:g}% boost, "
                f"submitted {max(elapsed_days, 0)} day(s) ago within the "
                f"{config.recency_window_days}-day window)"
            )
        else:
            explanation.append(
                f"No recency bonus: submitted {elapsed_days} day(s) ago, outside the "
                f"{config.recency_window_days}-day window"
            )
    else:
        explanation.append("No recency bonus configured")

    raw_score = base_score + recency_bonus
    final_score = max(0.0, raw_score)

    if max_score > 0:
        percentage = min(100.0, final_score / max_score * 100)
    else:
        percentage = 0.0

    final_line = f"Final score: {final_score:.2f} / {max_score:g} ({percentage:.2f}%)"
    if raw_score < 0:
        final_line += f", clamped from {raw_score:.2f}"
    explanation.append(final_line)

    return ScoringResult(
        score=final_score,
        max_possible_score=max_score,
        percentage=percentage,
        base_score=base_score,
        correct_count=correct_count,
        correct_points=correct_points,
        incorrect_count=incorrect_count,
        incorrect_points=incorrect_points,
        recency_bonus=recency_bonus,
        recency_boost_percent=boost_percent,
        explanation=explanation,
    )


def score_assessment(
    assessment: ScoringInput,
    config: ScoringConfig,
    now: datetime
) -> ScoringResult:
    """Score a loaded assessment (answers plus template questions)."""
    return score_answers(
        assessment.answers,
        config,
        assessment.submitted_at,
        now,
        questions=assessment.questions,
    )
