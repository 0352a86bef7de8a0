import datetime as dt
import unittest

from cycle import EventKind, make_cycle_event
from runtime.messages import alert_for_event, format_duration, status_message
from runtime.orchestrator import CycleSnapshot


def _snapshot(mode: str, phase, remaining: int) -> CycleSnapshot:
    return CycleSnapshot(
        mode=mode,
        phase=phase,
        remaining_seconds=remaining,
        progress_fraction=0.0,
        session_count=0,
        activity_state="idle",
        activity_kind=None,
        manual_window_open=False,
    )


def _event(kind: EventKind, duration: float = 20, **metadata):
    return make_cycle_event(
        kind,
        duration_seconds=duration,
        session_id=0,
        phase="break",
        metadata=metadata,
        now_fn=lambda: dt.datetime(2026, 3, 2, tzinfo=dt.timezone.utc),
    )


class MessageTests(unittest.TestCase):
    def test_format_duration(self) -> None:
        self.assertEqual("20:00", format_duration(1200))
        self.assertEqual("00:07", format_duration(7.9))
        self.assertEqual("00:00", format_duration(-3))

    def test_status_message_per_mode(self) -> None:
        self.assertEqual("Ready", status_message(_snapshot("idle", None, 1200)))
        self.assertEqual(
            "Working (19:59 remaining)",
            status_message(_snapshot("working", "work", 1199)),
        )
        self.assertEqual(
            "Break (00:12 remaining)",
            status_message(_snapshot("break_reminder", "break", 12)),
        )
        self.assertEqual(
            "Break paused (00:12 remaining)",
            status_message(_snapshot("paused", "break", 12)),
        )

    def test_alert_texts(self) -> None:
        event = _event(EventKind.WORK_COMPLETE, duration=1200)
        work = alert_for_event(event, break_duration_seconds=20)
        self.assertEqual("Work Period Complete!", work.title)
        self.assertEqual(
            "Time for a 20-second eye care break. Look at something 20 feet away.",
            work.body,
        )
        self.assertTrue(alert_for_event(event).body.startswith("Time for an eye care break."))

        done = alert_for_event(_event(EventKind.BREAK_COMPLETE))
        self.assertEqual("Break Complete!", done.title)

        activity = alert_for_event(
            _event(EventKind.ACTIVITY_COMPLETE, activity_kind="near_far_focus")
        )
        self.assertEqual("Near-Far Focus done", activity.title)

        self.assertIsNone(alert_for_event(_event(EventKind.BREAK_START)))


if __name__ == "__main__":
    unittest.main()
