#!/usr/bin/env python3
"""
Unit tests for AssessmentRepository loading of scoring inputs.
"""

import unittest

from tests.fixtures.ranking_fixtures import (
    SqliteTestDatabase,
    create_job,
    create_template,
    submit_assessment,
    days_ago,
)


class TestAssessmentRepository(unittest.TestCase):

    def setUp(self):
        self.db = SqliteTestDatabase()
        self.job_id = create_job(self.db)
        self.template_id = create_template(self.db, self.job_id, question_count=4, weight=2.0)

    def tearDown(self):
        self.db.dispose()

    def test_loads_answers_and_template_questions(self):
        submit_assessment(self.db, self.job_id, self.template_id, "p1", correct=2, incorrect=1)

        with self.db.uow() as uow:
            inputs = uow.assessments.load_scoring_inputs(self.job_id)

        self.assertEqual(len(inputs), 1)
        scoring_input = inputs[0]
        self.assertEqual(scoring_input.applicant_id, "p1")
        self.assertEqual(len(scoring_input.questions), 4)
        self.assertEqual(sum(q.weight for q in scoring_input.questions), 8.0)
        self.assertEqual(sum(1 for a in scoring_input.answers if a.is_correct), 2)
        self.assertEqual(sum(1 for a in scoring_input.answers if not a.is_answered), 1)
        self.assertIsNotNone(scoring_input.submitted_at.tzinfo)

    def test_latest_assessment_per_applicant(self):
        submit_assessment(self.db, self.job_id, self.template_id, "p1", correct=1, submitted_at=days_ago(5))
        latest = submit_assessment(self.db, self.job_id, self.template_id, "p1", correct=3, submitted_at=days_ago(1))

        with self.db.uow() as uow:
            assessments = uow.assessments.list_assessments(self.job_id)

        self.assertEqual([a.id for a in assessments], [latest])

    def test_inactive_templates_are_ignored(self):
        inactive = create_template(self.db, self.job_id, is_active=False, name="Old")
        submit_assessment(self.db, self.job_id, inactive, "p1", correct=3)

        with self.db.uow() as uow:
            self.assertEqual(uow.assessments.list_assessments(self.job_id), [])

    def test_job_ids_for_applicant(self):
        other_job = create_job(self.db, "Other")
        other_template = create_template(self.db, other_job)
        submit_assessment(self.db, self.job_id, self.template_id, "p1", correct=1)
        submit_assessment(self.db, other_job, other_template, "p1", correct=1)
        submit_assessment(self.db, other_job, other_template, "p2", correct=1)

        with self.db.uow() as uow:
            job_ids = uow.assessments.list_job_ids_for_applicant("p1")

        self.assertEqual(sorted(job_ids), sorted([self.job_id, other_job]))


if __name__ == '__main__':
    unittest.main()
