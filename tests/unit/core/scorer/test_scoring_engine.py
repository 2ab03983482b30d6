#!/usr/bin/env python3
"""
Unit tests for the assessment scoring engine.
"""

import unittest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from core.scorer import (
    AssessmentAnswer,
    QuestionWeight,
    ScoringConfig,
    ScoringInput,
    score_answers,
    score_assessment,
)
from core.scorer.engine import days_since, is_within_recency_window, max_possible_score

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _answers(correct: int, incorrect: int, unanswered: int = 0, weight: float = 1.0):
    answers = []
    for i in range(correct):
        answers.append(AssessmentAnswer(f"c{i}", True, weight, answer_text="a"))
    for i in range(incorrect):
        answers.append(AssessmentAnswer(f"i{i}", False, weight, answer_text="b"))
    for i in range(unanswered):
        answers.append(AssessmentAnswer(f"u{i}", False, weight, answer_text=None))
    return answers


def _questions(answers):
    return [QuestionWeight(a.question_id, a.weight) for a in answers]


class TestScoringFormula(unittest.TestCase):

    def test_worked_example(self):
        """7 correct, 3 incorrect, 25% negative marking, 10% boost, submitted today."""
        config = ScoringConfig(
            negative_marking_fraction=0.25,
            recency_boost_percent=10,
            recency_window_days=30
        )
        answers = _answers(7, 3)

        result = score_answers(answers, config, NOW, NOW, questions=_questions(answers))

        self.assertAlmostEqual(result.base_score, 6.25)
        self.assertAlmostEqual(result.recency_bonus, 0.625)
        self.assertAlmostEqual(result.score, 6.875)
        self.assertAlmostEqual(result.max_possible_score, 10.0)
        self.assertAlmostEqual(result.percentage, 68.75)
        self.assertEqual(result.correct_count, 7)
        self.assertEqual(result.incorrect_count, 3)
        self.assertAlmostEqual(result.breakdown['incorrect']['points'], -0.75)
        self.assertEqual(result.breakdown['recency_bonus']['percentage'], 10)

    def test_no_negative_marking_ignores_incorrect(self):
        config = ScoringConfig(negative_marking_fraction=0)
        answers = _answers(4, 6)

        result = score_answers(answers, config, NOW, NOW, questions=_questions(answers))

        self.assertEqual(result.score, 4.0)
        self.assertEqual(result.incorrect_points, 0.0)
        self.assertEqual(result.incorrect_count, 6)

    def test_unanswered_counts_nowhere(self):
        config = ScoringConfig(negative_marking_fraction=0.5)
        answers = _answers(2, 1, unanswered=3)

        result = score_answers(answers, config, NOW, NOW, questions=_questions(answers))

        self.assertEqual(result.correct_count, 2)
        self.assertEqual(result.incorrect_count, 1)
        self.assertAlmostEqual(result.score, 1.5)
        # Unanswered questions still count toward the maximum
        self.assertEqual(result.max_possible_score, 6.0)

    def test_blank_answer_text_is_unanswered(self):
        config = ScoringConfig(negative_marking_fraction=1.0)
        answers = [AssessmentAnswer("q1", False, 1.0, answer_text="   ")]

        result = score_answers(answers, config, NOW, NOW)

        self.assertEqual(result.incorrect_count, 0)
        self.assertEqual(result.score, 0.0)

    def test_negative_total_is_clamped_to_zero(self):
        config = ScoringConfig(negative_marking_fraction=1.0)
        answers = _answers(1, 4)

        result = score_answers(answers, config, NOW, NOW, questions=_questions(answers))

        self.assertEqual(result.base_score, -3.0)
        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.percentage, 0.0)
        self.assertIn("clamped from -3.00", result.explanation[-1])

    def test_negative_weight_overrides_weight_for_penalty(self):
        config = ScoringConfig(negative_marking_fraction=0.5)
        answers = [
            AssessmentAnswer("q1", True, 2.0, answer_text="a"),
            AssessmentAnswer("q2", False, 2.0, answer_text="b", negative_weight=1.0),
        ]

        result = score_answers(answers, config, NOW, NOW)

        self.assertAlmostEqual(result.score, 1.5)

    def test_zero_max_score_gives_zero_percentage(self):
        result = score_answers([], ScoringConfig(), NOW, NOW)

        self.assertEqual(result.max_possible_score, 0.0)
        self.assertEqual(result.percentage, 0.0)

    def test_percentage_never_exceeds_100(self):
        config = ScoringConfig(recency_boost_percent=50, recency_window_days=7)
        answers = _answers(10, 0)

        result = score_answers(answers, config, NOW, NOW, questions=_questions(answers))

        self.assertEqual(result.score, 15.0)
        self.assertEqual(result.percentage, 100.0)

    def test_max_score_falls_back_to_answers_without_template(self):
        answers = _answers(1, 1, weight=2.5)
        self.assertEqual(max_possible_score([], answers), 5.0)

    def test_score_assessment_uses_template_questions(self):
        answers = _answers(3, 0)
        scoring_input = ScoringInput(
            assessment_id="a1",
            applicant_id="p1",
            submitted_at=NOW,
            answers=answers,
            questions=_questions(answers) + [QuestionWeight("extra", 5.0)],
        )

        result = score_assessment(scoring_input, ScoringConfig(), NOW)

        self.assertEqual(result.max_possible_score, 8.0)
        self.assertAlmostEqual(result.percentage, 37.5)


class TestRecencyBonus(unittest.TestCase):

    def setUp(self):
        self.config = ScoringConfig(recency_boost_percent=10, recency_window_days=30)
        self.answers = _answers(5, 0)

    def _score(self, submitted_at):
        return score_answers(self.answers, self.config, submitted_at, NOW, questions=_questions(self.answers))

    def test_boundary_day_is_inside_window(self):
        result = self._score(NOW - timedelta(days=30, hours=23))
        self.assertAlmostEqual(result.recency_bonus, 0.5)

    def test_outside_window_gets_no_bonus(self):
        result = self._score(NOW - timedelta(days=31))

        self.assertEqual(result.recency_bonus, 0.0)
        self.assertNotIn('recency_bonus', result.breakdown)
        self.assertIn("outside the 30-day window", result.explanation[2])

    def test_no_boost_configured(self):
        result = score_answers(self.answers, ScoringConfig(), NOW, NOW)

        self.assertEqual(result.recency_bonus, 0.0)
        self.assertEqual(result.explanation[2], "No recency bonus configured")

    def test_naive_timestamps_are_treated_as_utc(self):
        naive = datetime(2026, 2, 28, 12, 0, 0)
        self.assertEqual(days_since(naive, NOW), 1)
        self.assertTrue(is_within_recency_window(naive, NOW, 1))


class TestExplanation(unittest.TestCase):

    def test_explanation_order(self):
        config = ScoringConfig(
            negative_marking_fraction=0.25,
            recency_boost_percent=10,
            recency_window_days=30
        )
        answers = _answers(7, 3)

        result = score_answers(answers, config, NOW, NOW, questions=_questions(answers))

        self.assertEqual(len(result.explanation), 4)
        self.assertTrue(result.explanation[0].startswith("Correct answers: 7"))
        self.assertTrue(result.explanation[1].startswith("Incorrect answers: 3"))
        self.assertIn("25% negative marking", result.explanation[1])
        self.assertTrue(result.explanation[2].startswith("Recency bonus"))
        self.assertTrue(result.explanation[3].startswith("Final score: 6.88 / 10"))

    def test_negative_marking_disabled_wording(self):
        result = score_answers(_answers(1, 1, unanswered=1), ScoringConfig(), NOW, NOW)
        self.assertEqual(
            result.explanation[1],
            "Incorrect answers: 1 (0 points, negative marking disabled); 1 unanswered (0 points)"
        )


class TestScoringConfigValidation(unittest.TestCase):

    def test_boost_requires_window(self):
        with self.assertRaises(ValidationError):
            ScoringConfig(recency_boost_percent=10)

    def test_window_must_be_positive(self):
        with self.assertRaises(ValidationError):
            ScoringConfig(recency_boost_percent=10, recency_window_days=0)

    def test_fraction_bounds(self):
        with self.assertRaises(ValidationError):
            ScoringConfig(negative_marking_fraction=1.5)

    def test_boost_bounds(self):
        with self.assertRaises(ValidationError):
            ScoringConfig(recency_boost_percent=120, recency_window_days=7)


if __name__ == '__main__':
    unittest.main()
