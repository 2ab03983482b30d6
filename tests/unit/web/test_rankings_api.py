#!/usr/bin/env python3
"""
Unit tests for the ranking HTTP endpoints.
"""

import unittest

from fastapi.testclient import TestClient

from web.backend.app import create_app
from tests.fixtures.ranking_fixtures import (
    SqliteTestDatabase,
    create_config,
    create_job,
    create_template,
    submit_assessment,
)


class TestRankingsApi(unittest.TestCase):

    def setUp(self):
        self.db = SqliteTestDatabase()
        self.ctx = self.db.build_context(ranking={'auto_refresh_on_read': False})
        self.job_id = create_job(self.db)
        self.default_id = create_config(
            self.db, negative_marking_fraction=0.25, recency_window_days=30, recency_boost_percent=10
        )
        template_id = create_template(self.db, self.job_id)
        submit_assessment(self.db, self.job_id, template_id, "alice", correct=7, incorrect=3)
        submit_assessment(self.db, self.job_id, template_id, "bob", correct=9, incorrect=1)
        self.client = TestClient(create_app(self.ctx))

    def tearDown(self):
        self.ctx.shutdown()
        self.db.dispose()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_status_of_unranked_job(self):
        response = self.client.get(f"/api/rankings/jobs/{self.job_id}/status")

        self.assertEqual(response.status_code, 200)
        status = response.json()["status"]
        self.assertEqual(status["status"], "STALE")
        self.assertEqual(status["total_candidates"], 0)
        self.assertTrue(status["is_stale"])

    def test_recalculate_then_read_top(self):
        response = self.client.post("/api/rankings/recalculate", json={"job_id": self.job_id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["total_candidates"], 2)

        response = self.client.get(f"/api/rankings/jobs/{self.job_id}/top", params={"limit": 5})
        data = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["count"], 2)
        self.assertEqual([c["applicant_id"] for c in data["candidates"]], ["bob", "alice"])
        self.assertEqual(data["candidates"][1]["percentage"], 68.75)
        self.assertEqual(data["status"]["status"], "COMPLETED")

    def test_top_limit_out_of_range(self):
        response = self.client.get(f"/api/rankings/jobs/{self.job_id}/top", params={"limit": 101})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["type"], "InvalidInputError")
        self.assertFalse(response.json()["success"])

    def test_top_unknown_job(self):
        response = self.client.get("/api/rankings/jobs/missing/top")
        self.assertEqual(response.status_code, 404)

    def test_recalculate_conflict(self):
        with self.db.uow() as uow:
            uow.rankings.mark_calculating(self.job_id, "other", "v")

        response = self.client.post("/api/rankings/recalculate", json={"job_id": self.job_id})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["type"], "ConflictError")

        response = self.client.post(
            "/api/rankings/recalculate",
            json={"job_id": self.job_id, "force_recalculation": True}
        )
        self.assertEqual(response.status_code, 200)

    def test_bulk_reports_partial_success(self):
        response = self.client.post("/api/rankings/bulk", json={
            "job_ids": [self.job_id, "missing"],
            "priority": "high",
        })
        data = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["succeeded"], 1)
        self.assertEqual(data["failed"], 1)
        self.assertEqual(data["failures"][0]["job_id"], "missing")

    def test_bulk_rejects_empty_list(self):
        response = self.client.post("/api/rankings/bulk", json={"job_ids": []})
        self.assertEqual(response.status_code, 400)

    def test_bulk_rejects_unknown_priority(self):
        response = self.client.post("/api/rankings/bulk", json={"job_ids": [self.job_id], "priority": "urgent"})
        self.assertEqual(response.status_code, 422)

    def test_invalidate_requires_target(self):
        response = self.client.post("/api/rankings/invalidate", json={"trigger_event": "x"})
        self.assertEqual(response.status_code, 400)

    def test_invalidate_by_default_config(self):
        response = self.client.post("/api/rankings/invalidate", json={
            "scoring_config_id": self.default_id,
            "trigger_event": "config edited",
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["job_ids"], [self.job_id])

    def test_schedule_stale_acknowledges(self):
        response = self.client.post("/api/rankings/schedule-stale")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.ctx.runner.wait_idle(timeout=10)

    def test_explanation(self):
        response = self.client.get(f"/api/rankings/jobs/{self.job_id}/candidates/alice/explanation")
        data = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["score"], 6.875)
        self.assertEqual(len(data["explanation"]), 4)
        self.assertIn("recency_bonus", data["breakdown"])

    def test_preview(self):
        self.client.post("/api/rankings/recalculate", json={"job_id": self.job_id})

        response = self.client.post(
            f"/api/rankings/jobs/{self.job_id}/preview",
            json={"negative_marking_fraction": 1.0}
        )
        data = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["total_candidates"], 2)
        entries = {e["applicant_id"]: e for e in data["entries"]}
        self.assertEqual(entries["alice"]["new_score"], 4.0)

    def test_preview_rejects_boost_without_window(self):
        response = self.client.post(
            f"/api/rankings/jobs/{self.job_id}/preview",
            json={"recency_boost_percent": 10}
        )
        self.assertEqual(response.status_code, 422)


if __name__ == '__main__':
    unittest.main()
