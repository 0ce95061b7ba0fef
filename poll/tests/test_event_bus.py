import unittest

from poll.events.Event_Bus import EventBus, POLL_ERROR, POLL_PARTICIPANTS_CHANGED
from poll.events.event_helpers import publish_error, publish_participants_changed
from poll.domain.Participant import Participant


class TestEventBus(unittest.TestCase):
    def setUp(self):
        self.bus = EventBus()
        self.seen = []

    def _listener(self, name, payload):
        self.seen.append((name, payload))

    def test_publish_reaches_subscribers_once(self):
        self.bus.subscribe("x", self._listener)
        self.bus.subscribe("x", self._listener)
        self.bus.publish("x", 1)
        self.assertEqual(self.seen, [("x", 1)])

    def test_unsubscribe_drops_empty_names(self):
        self.bus.subscribe("x", self._listener)
        self.assertEqual(self.bus.event_names(), ["x"])
        self.bus.unsubscribe("x", self._listener)
        self.bus.unsubscribe("x", self._listener)
        self.assertEqual(self.bus.event_names(), [])
        self.bus.publish("x", 1)
        self.assertEqual(self.seen, [])

    def test_failing_subscriber_does_not_stop_others(self):
        def broken(name, payload):
            raise RuntimeError("boom")

        self.bus.subscribe("x", broken)
        self.bus.subscribe("x", self._listener)
        with self.assertLogs("poll.events.Event_Bus", level="ERROR"):
            self.bus.publish("x", 2)
        self.assertEqual(self.seen, [("x", 2)])

    def test_helpers_publish_payloads(self):
        self.bus.subscribe(POLL_PARTICIPANTS_CHANGED, self._listener)
        self.bus.subscribe(POLL_ERROR, self._listener)
        alex = Participant("a", "Alex", [True, False], created_at=5)
        publish_participants_changed([alex], self.bus)
        publish_error("Failed", self.bus)
        self.assertEqual(self.seen[0][1]['count'], 1)
        self.assertEqual(self.seen[0][1]['participants'][0]['name'], "Alex")
        self.assertEqual(self.seen[1], (POLL_ERROR, {'message': "Failed"}))


if __name__ == '__main__':
    unittest.main()
