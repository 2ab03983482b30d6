#!/usr/bin/env python3
"""
Unit tests for the in-process event bus.
"""

import threading
import unittest

from core.events import (
    EventBus,
    EventType,
    assessment_submitted,
    job_updated,
    scoring_config_changed,
)


class TestEventBus(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()

    def tearDown(self):
        self.bus.close()

    def test_delivers_only_subscribed_types(self):
        received = []
        self.bus.subscribe([EventType.JOB_UPDATED], received.append)

        self.bus.publish(job_updated("job-1"))
        self.bus.publish(assessment_submitted("a1", "job-1", "p1"))
        self.bus.join()

        self.assertEqual([e.type for e in received], [EventType.JOB_UPDATED])
        self.assertEqual(received[0].payload, {'job_id': "job-1"})

    def test_multiple_subscribers_each_receive_event(self):
        first, second = [], []
        self.bus.subscribe([EventType.JOB_UPDATED], first.append, name="first")
        self.bus.subscribe([EventType.JOB_UPDATED], second.append, name="second")

        self.bus.publish(job_updated("job-1"))
        self.bus.join()

        self.assertEqual(len(first), 1)
        self.assertEqual(len(second), 1)
        self.assertEqual(self.bus.subscriber_count, 2)

    def test_preserves_publish_order_per_subscriber(self):
        received = []
        self.bus.subscribe([EventType.JOB_UPDATED], lambda e: received.append(e.payload['job_id']))

        for i in range(20):
            self.bus.publish(job_updated(f"job-{i}"))
        self.bus.join()

        self.assertEqual(received, [f"job-{i}" for i in range(20)])

    def test_publish_does_not_wait_for_slow_subscriber(self):
        release = threading.Event()
        done = []

        def slow(event):
            release.wait(timeout=5)
            done.append(event)

        self.bus.subscribe([EventType.JOB_UPDATED], slow)
        self.bus.publish(job_updated("job-1"))

        # publish returned while the handler is still blocked
        self.assertEqual(done, [])
        release.set()
        self.bus.join()
        self.assertEqual(len(done), 1)

    def test_failing_subscriber_is_isolated(self):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        self.bus.subscribe([EventType.SCORING_CONFIG_CHANGED], broken, name="broken")
        self.bus.subscribe([EventType.SCORING_CONFIG_CHANGED], received.append, name="healthy")

        with self.assertLogs('core.events.bus', level='ERROR'):
            self.bus.publish(scoring_config_changed("c1", is_default=True))
            self.bus.join()

        self.assertEqual(len(received), 1)

        # The broken subscriber keeps processing later events
        self.bus.publish(scoring_config_changed("c2"))
        self.bus.join()
        self.assertEqual(len(received), 2)

    def test_publish_after_close_is_dropped(self):
        received = []
        self.bus.subscribe([EventType.JOB_UPDATED], received.append)
        self.bus.close()

        self.bus.publish(job_updated("job-1"))

        self.assertEqual(received, [])
        with self.assertRaises(RuntimeError):
            self.bus.subscribe([EventType.JOB_UPDATED], received.append)


if __name__ == '__main__':
    unittest.main()
