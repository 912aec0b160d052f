import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lowborn.application.services.event_bus import EventBus, event_context
from lowborn.domain.events import DayStarted, NightBegan, NightResolved, WeekCompleted


def _day_started() -> DayStarted:
    return DayStarted(seed="bus", day=1, assigned_duty="PATROL", assigned_shift="DAWN", disruption_type="NONE")


class EventBusTests(unittest.TestCase):
    def test_publish_notifies_handlers_in_subscription_order(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.subscribe(DayStarted, lambda evt: seen.append("first"))
        bus.subscribe(DayStarted, lambda evt: seen.append("second"))

        delivered = bus.publish(_day_started())

        self.assertEqual(["first", "second"], seen)
        self.assertEqual(delivered, 2)

    def test_publish_filters_handlers_by_event_class(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.subscribe(NightBegan, lambda evt: seen.append("night"))
        bus.subscribe(DayStarted, lambda evt: seen.append("day"))

        bus.publish(_day_started())

        self.assertEqual(["day"], seen)
        self.assertEqual(bus.handler_count(NightBegan), 1)

    def test_lower_priority_runs_first(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.subscribe(DayStarted, lambda evt: seen.append("late"), priority=200)
        bus.subscribe(DayStarted, lambda evt: seen.append("early"), priority=10)
        bus.subscribe(DayStarted, lambda evt: seen.append("default"))

        bus.publish(_day_started())

        self.assertEqual(["early", "default", "late"], seen)

    def test_failing_handler_is_isolated(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        def _boom(evt) -> None:
            raise RuntimeError("handler exploded")

        bus.subscribe(DayStarted, _boom, priority=1)
        bus.subscribe(DayStarted, lambda evt: seen.append("survivor"))

        with self.assertLogs("lowborn.application.services.event_bus", level="ERROR") as captured:
            delivered = bus.publish(_day_started())

        self.assertEqual(seen, ["survivor"])
        self.assertEqual(delivered, 1)
        self.assertIn("isolated", captured.output[0])
        errors = bus.last_publish_errors()
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], RuntimeError)

        bus.unsubscribe(DayStarted, _boom)
        bus.publish(_day_started())
        self.assertEqual(bus.last_publish_errors(), [])

    def test_unsubscribe_reports_whether_anything_was_removed(self) -> None:
        bus = EventBus()

        def _handler(evt) -> None:
            return None

        bus.subscribe(DayStarted, _handler)
        self.assertTrue(bus.unsubscribe(DayStarted, _handler))
        self.assertFalse(bus.unsubscribe(DayStarted, _handler))
        self.assertEqual(bus.handler_count(DayStarted), 0)
        self.assertEqual(bus.publish(_day_started()), 0)

    def test_only_lifecycle_events_can_be_subscribed(self) -> None:
        bus = EventBus()
        with self.assertRaises(TypeError):
            bus.subscribe(dict, lambda evt: None)
        self.assertEqual(bus.handler_count(dict), 0)

    def test_subscribe_all_sees_every_lifecycle_event(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.subscribe_all(lambda evt: seen.append(type(evt).__name__))

        bus.publish(_day_started())
        bus.publish(NightBegan(seed="bus", day=1, scene_type="PATROL", event_title="Frozen Ford"))
        bus.publish(NightResolved(seed="bus", day=1, choice_id="press-forward", rumor_reach_count=0, flags=()))
        bus.publish(WeekCompleted(seed="bus", week=1, nights_survived=7, first_break_label="None"))

        self.assertEqual(seen, ["DayStarted", "NightBegan", "NightResolved", "WeekCompleted"])

    def test_failure_log_carries_run_context(self) -> None:
        bus = EventBus()

        def _boom(evt) -> None:
            raise ValueError("bad tally")

        bus.subscribe(WeekCompleted, _boom)
        with self.assertLogs("lowborn.application.services.event_bus", level="ERROR") as captured:
            bus.publish(WeekCompleted(seed="ctx-seed", week=2, nights_survived=7, first_break_label="None"))

        record = captured.records[0]
        self.assertEqual(record.seed, "ctx-seed")
        self.assertEqual(record.week, 2)
        self.assertEqual(record.event_type, "WeekCompleted")
        self.assertFalse(hasattr(record, "day"))

    def test_event_context_picks_day_or_week(self) -> None:
        self.assertEqual(
            event_context(_day_started()),
            {"event_type": "DayStarted", "seed": "bus", "day": 1},
        )


if __name__ == "__main__":
    unittest.main()
