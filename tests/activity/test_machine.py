import unittest

from activity import ActivityKind, ActivityMachine
from cycle import DeferredScheduler


class _FakeMonotonic:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _build():
    clock = _FakeMonotonic()
    scheduler = DeferredScheduler(monotonic_fn=clock)
    machine = ActivityMachine(
        scheduler=scheduler,
        launch_delay_seconds=0.3,
        completion_delay_seconds=0.5,
        monotonic_fn=clock,
    )
    transitions: list[tuple[str, str]] = []
    machine.add_listener(lambda previous, current: transitions.append((previous, current)))
    return machine, scheduler, clock, transitions


class ActivityMachineTests(unittest.TestCase):
    def test_launch_runs_after_delay(self) -> None:
        machine, scheduler, clock, _ = _build()

        self.assertTrue(machine.launch(ActivityKind.BLINK_EXERCISE))
        self.assertEqual("launching", machine.state)
        clock.advance(0.2)
        scheduler.run_due()
        self.assertEqual("launching", machine.state)
        clock.advance(0.2)
        scheduler.run_due()

        self.assertEqual("running", machine.state)
        self.assertEqual(clock.now, machine.started_at)

    def test_reset_cancels_pending_launch(self) -> None:
        machine, scheduler, clock, transitions = _build()
        machine.launch(ActivityKind.BALL_TRACKING)

        machine.reset()
        clock.advance(1.0)
        scheduler.run_due()

        self.assertEqual("idle", machine.state)
        self.assertIsNone(machine.selected)
        self.assertNotIn("running", [current for _, current in transitions])

    def test_relaunch_after_reset_ignores_first_launch_timer(self) -> None:
        machine, scheduler, clock, _ = _build()
        machine.launch(ActivityKind.BALL_TRACKING)
        clock.advance(0.2)
        machine.reset()
        machine.launch(ActivityKind.NEAR_FAR_FOCUS)

        clock.advance(0.15)
        scheduler.run_due()
        self.assertEqual("launching", machine.state)

        clock.advance(0.2)
        scheduler.run_due()
        self.assertEqual("running", machine.state)
        self.assertEqual(ActivityKind.NEAR_FAR_FOCUS, machine.selected)

    def test_launch_rejected_unless_idle(self) -> None:
        machine, _, _, _ = _build()
        machine.launch(ActivityKind.BALL_TRACKING)

        self.assertFalse(machine.launch(ActivityKind.BLINK_EXERCISE))
        self.assertEqual(ActivityKind.BALL_TRACKING, machine.selected)

    def test_pause_and_resume_only_from_matching_states(self) -> None:
        machine, scheduler, clock, _ = _build()
        self.assertFalse(machine.pause())
        machine.launch(ActivityKind.BALL_TRACKING)
        self.assertFalse(machine.pause())
        clock.advance(0.3)
        scheduler.run_due()

        self.assertTrue(machine.pause())
        self.assertFalse(machine.pause())
        self.assertEqual("paused", machine.state)
        self.assertTrue(machine.resume())
        self.assertFalse(machine.resume())
        self.assertEqual("running", machine.state)

    def test_completion_signal_reaches_completed_after_delay(self) -> None:
        machine, scheduler, clock, transitions = _build()
        machine.launch(ActivityKind.NEAR_FAR_FOCUS)
        clock.advance(0.3)
        scheduler.run_due()

        self.assertTrue(machine.signal_completion())
        self.assertFalse(machine.signal_completion())
        clock.advance(0.5)
        scheduler.run_due()

        self.assertEqual("completed", machine.state)
        self.assertEqual(
            [
                ("idle", "launching"),
                ("launching", "running"),
                ("running", "completing"),
                ("completing", "completed"),
            ],
            transitions,
        )

    def test_reset_during_completing_discards_completed_transition(self) -> None:
        machine, scheduler, clock, _ = _build()
        machine.launch(ActivityKind.NEAR_FAR_FOCUS)
        clock.advance(0.3)
        scheduler.run_due()
        machine.signal_completion()

        machine.reset()
        clock.advance(1.0)
        scheduler.run_due()

        self.assertEqual("idle", machine.state)

    def test_reset_after_is_skipped_when_reset_happens_first(self) -> None:
        machine, scheduler, clock, transitions = _build()
        machine.launch(ActivityKind.BALL_TRACKING)
        machine.reset_after(1.0)
        machine.reset()
        machine.launch(ActivityKind.BLINK_EXERCISE)

        clock.advance(1.0)
        scheduler.run_due()

        self.assertEqual("running", machine.state)
        self.assertEqual(ActivityKind.BLINK_EXERCISE, machine.selected)

    def test_generation_increases_on_launch_and_reset(self) -> None:
        machine, _, _, _ = _build()
        start = machine.generation

        machine.launch(ActivityKind.BALL_TRACKING)
        machine.reset()

        self.assertEqual(start + 2, machine.generation)


if __name__ == "__main__":
    unittest.main()
